from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request


logger = logging.getLogger(__name__)


def register_request_logging(app: FastAPI) -> None:
    # Bodies are never logged: they carry passwords and provider tokens.

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        path = request.url.path
        logger.info("--> %s %s", request.method, path)
        if request.url.query:
            logger.debug("    query=%s", request.url.query)

        try:
            response = await call_next(request)
        except Exception:
            duration_ms = int((time.perf_counter() - started) * 1000)
            logger.info("! %s %s 500 (%sms)", request.method, path, duration_ms)
            raise

        duration_ms = int((time.perf_counter() - started) * 1000)
        marker = "!" if response.status_code >= 400 else "<--"
        logger.info("%s %s %s %s (%sms)", marker, request.method, path, response.status_code, duration_ms)
        return response
