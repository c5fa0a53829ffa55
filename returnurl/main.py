"""FastAPI app factory: health endpoint, request logging, return-URL routes."""
from __future__ import annotations

import time
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from returnurl.api import router as api_router
from returnurl.config import get_settings
from returnurl.logging_conf import get_logger, setup_logging

setup_logging()
logger = get_logger("app")


def create_app() -> FastAPI:
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        # Settings are re-read per request; these are the values at boot
        logger.info(
            "startup",
            extra={
                "event": "startup",
                "version": settings.app_version,
                "allowed_paths": sorted(settings.allowed_paths),
                "validity_ms": settings.validity_ms,
            },
        )
        yield
        logger.info("shutdown", extra={"event": "shutdown"})

    app = FastAPI(
        title="Return URL Tokens",
        version=settings.app_version,
        lifespan=lifespan,
    )

    @app.middleware("http")
    async def request_logger(request: Request, call_next: Callable[[Request], Response]):
        """Log start/end of each request under an X-Request-ID.

        An incoming X-Request-ID is reused; otherwise one is minted and
        echoed back on the response.
        """
        request_id = request.headers.get("X-Request-ID", str(uuid4()))
        request.state.request_id = request_id

        start = time.perf_counter()
        # Query strings are left out: they carry bearer tokens
        logger.info(
            "request.start",
            extra={
                "event": "request_start",
                "method": request.method,
                "path": request.url.path,
                "request_id": request_id,
            },
        )
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "request.error",
                extra={
                    "event": "request_error",
                    "path": request.url.path,
                    "method": request.method,
                    "request_id": request_id,
                },
            )
            raise
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000.0

        response.headers["X-Request-ID"] = request_id
        logger.info(
            "request.end",
            extra={
                "event": "request_end",
                "status_code": response.status_code,
                "elapsed_ms": round(elapsed_ms, 2),
                "request_id": request_id,
            },
        )
        return response

    @app.get("/health", summary="Liveness/readiness check")
    async def health() -> JSONResponse:
        return JSONResponse(content={"ok": True})

    app.include_router(api_router)

    return app


# ASGI entrypoint: `uvicorn returnurl.main:app --port 8000`
app = create_app()
