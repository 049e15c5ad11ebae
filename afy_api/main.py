from __future__ import annotations

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from afy_api.api import deps
from afy_api.api.errors import register_error_handlers
from afy_api.api.middleware import register_request_logging
from afy_api.api.routers.auth import router as auth_router
from afy_api.api.routers.index import router as index_router
from afy_api.shared.config import Settings, get_settings, validate_settings
from afy_api.shared.logging import configure_logging


logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.log_level)
        validate_settings(settings)
        logger.info(
            "main: startup env=%s token_scheme=%s signup_mode=%s strict=%s",
            settings.app_env,
            settings.auth_token_scheme,
            settings.signup_mode,
            settings.auth_strict_provider_check,
        )
        yield
        deps.shutdown()
        logger.info("main: shutdown")

    app = FastAPI(title="Agent For You API", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_allowed_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_request_logging(app)
    register_error_handlers(app, development=settings.is_development)

    app.include_router(index_router)
    app.include_router(auth_router)
    return app


app = create_app()
