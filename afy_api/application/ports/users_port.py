from __future__ import annotations

from datetime import datetime
from typing import Protocol

from afy_api.domain.entities.user import User


class UsersPort(Protocol):
    def get_user_by_id(self, *, user_id: str) -> User | None:
        ...

    def get_user_by_email(self, *, email: str) -> User | None:
        ...

    def get_or_create_user(
        self,
        *,
        user_id: str,
        email: str,
        name: str | None,
        created_at: datetime,
    ) -> User:
        ...
