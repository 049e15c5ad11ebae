from __future__ import annotations

import logging

from afy_api.application.dto.auth import LogoutInput, LogoutOutput


logger = logging.getLogger(__name__)


class LogoutSessionUseCase:
    """Stateless logout: nothing is revoked server side, the client drops its tokens."""

    def execute(self, command: LogoutInput) -> LogoutOutput:
        logger.info(
            "logout_session: acknowledged user_id=%s session_id=%s",
            command.identity.user_id,
            command.identity.session_id,
        )
        return LogoutOutput(message="Logged out successfully")
