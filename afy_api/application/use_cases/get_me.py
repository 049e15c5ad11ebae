from __future__ import annotations

from afy_api.application.dto.auth import AuthenticatedIdentity
from afy_api.application.dto.me import MeOutput
from afy_api.application.ports.users_port import UsersPort
from afy_api.domain.exceptions import UserNotFoundError


class GetMeUseCase:
    def __init__(self, *, users_port: UsersPort):
        self._users_port = users_port

    def execute(self, *, identity: AuthenticatedIdentity) -> MeOutput:
        user = self._users_port.get_user_by_id(user_id=identity.user_id)
        if user is None:
            raise UserNotFoundError("User not found")
        return MeOutput(
            id=user.id,
            email=user.email,
            name=user.name,
            created_at=user.created_at,
        )
