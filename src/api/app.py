import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Awaitable, Callable

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from .error import ClientError, ServerError

logger = logging.getLogger(__name__)

SWEEPER_TASK_NAME = "session-sweeper"

PUBLIC_SERVER_MESSAGES = {
    status.HTTP_503_SERVICE_UNAVAILABLE: "Service temporarily unavailable",
}


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = {"code": exc.base_error.code, "message": exc.base_error.message}
    logger.warning(f"Client error: {error_dict}")
    return JSONResponse(status_code=exc.status_code, content={"error": error_dict})


async def handle_server_error(request: Request, exc: ServerError):
    message = PUBLIC_SERVER_MESSAGES.get(exc.status_code, "Internal server error")
    error_dict = {"code": exc.base_error.code, "message": message}
    logger.error(f"Server error: {exc.base_error.code}")
    return JSONResponse(status_code=exc.status_code, content={"error": error_dict})


async def sweep_expired_sessions_once():
    from src.depends import (
        AsyncSessionLocal,
        build_auth_facade,
        notification_sender,
        password_hasher,
        token_issuer,
    )
    from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork

    async with AsyncSessionLocal() as session:
        facade = build_auth_facade(
            SqlAlchemyUnitOfWork(session), password_hasher, token_issuer, notification_sender
        )
        result = await facade.sweep_expired_sessions()
    if result.is_err():
        logger.warning(f"Session sweep failed: {result.error.code}")


async def sweep_expired_sessions_periodically(
    interval_seconds: int, sweep: Callable[[], Awaitable[None]] = sweep_expired_sessions_once
):
    """Advisory cleanup loop; expiry is enforced at read time regardless"""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            await sweep()
        except Exception:
            # Keep sweeping; one bad run must not stop the loop
            logger.exception("Session sweep crashed")


def create_app(ApplicationConfig) -> FastAPI:
    logging.basicConfig(level=ApplicationConfig.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        sweeper = None
        if ApplicationConfig.SESSION_SWEEP_INTERVAL_SECONDS > 0:
            sweeper = asyncio.create_task(
                sweep_expired_sessions_periodically(
                    ApplicationConfig.SESSION_SWEEP_INTERVAL_SECONDS
                ),
                name=SWEEPER_TASK_NAME,
            )
        yield
        if sweeper is not None:
            sweeper.cancel()
            try:
                await sweeper
            except asyncio.CancelledError:
                pass

    app = FastAPI(title="Auth API", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from src.api.routes import admin, auth, health_check

    app.include_router(health_check.router, tags=["Health"])
    app.include_router(auth.router, tags=["Authentication"])
    app.include_router(admin.router, tags=["Admin"])

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)

    return app
