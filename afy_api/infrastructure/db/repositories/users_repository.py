from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import text

from afy_api.application.ports.users_port import UsersPort
from afy_api.infrastructure.db.mappers.users_mapper import map_row_to_user


class SqlUsersRepository(UsersPort):
    def __init__(self, engine):
        self._engine = engine

    def get_user_by_id(self, *, user_id: str):
        try:
            UUID(user_id)
        except ValueError:
            return None

        sql = """
            SELECT id, email, name, created_at, updated_at
            FROM public.users
            WHERE id = :user_id
            LIMIT 1
        """
        with self._engine.connect() as conn:
            row = conn.execute(text(sql), {"user_id": user_id}).mappings().first()
        if row is None:
            return None
        return map_row_to_user(row)

    def get_user_by_email(self, *, email: str):
        # Stored emails are trimmed and lower-cased.
        sql = """
            SELECT id, email, name, created_at, updated_at
            FROM public.users
            WHERE email = :email
            LIMIT 1
        """
        with self._engine.connect() as conn:
            row = conn.execute(text(sql), {"email": email.strip().lower()}).mappings().first()
        if row is None:
            return None
        return map_row_to_user(row)

    def get_or_create_user(
        self,
        *,
        user_id: str,
        email: str,
        name: str | None,
        created_at: datetime,
    ):
        # Concurrent first logins race on the unique email; the loser reads
        # the winner's row instead of failing.
        sql = """
            INSERT INTO public.users (id, email, name, created_at, updated_at)
            VALUES (:id, :email, :name, :created_at, :created_at)
            ON CONFLICT (email) DO NOTHING
            RETURNING id, email, name, created_at, updated_at
        """
        params = {
            "id": user_id,
            "email": email.strip().lower(),
            "name": name,
            "created_at": created_at,
        }
        with self._engine.begin() as conn:
            row = conn.execute(text(sql), params).mappings().first()
        if row is not None:
            return map_row_to_user(row)

        existing = self.get_user_by_email(email=email)
        if existing is None:
            raise RuntimeError(f"User with email {email!r} conflicted but could not be read back.")
        return existing
