from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class MeOutput:
    id: str
    email: str
    name: str | None
    created_at: datetime
