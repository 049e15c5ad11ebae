from __future__ import annotations

from typing import Any, Mapping

from afy_api.domain.entities.user import User


def _as_str(value: Any) -> str:
    return str(value)


def map_row_to_user(row: Mapping[str, Any]) -> User:
    return User(
        id=_as_str(row["id"]),
        email=row["email"],
        name=row.get("name"),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )
