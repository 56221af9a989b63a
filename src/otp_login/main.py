"""FastAPI application entry point."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from otp_login.config import settings
from otp_login.otp.manager import OTPManager
from otp_login.otp.store import OtpStore
from otp_login.otp.sweeper import run_sweeper
from otp_login.services.email_service import EmailService
from otp_login.services.session_manager import SessionManager
from otp_login.web.routes import router as otp_router

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle hook."""
    logger.info("Starting %s …", settings.app_name)
    sweeper = None
    if settings.otp_sweep_interval_seconds > 0:
        sweeper = asyncio.create_task(
            run_sweeper(app.state.otp_manager, settings.otp_sweep_interval_seconds)
        )
    yield
    logger.info("Shutting down %s …", settings.app_name)
    if sweeper is not None:
        sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweeper


def create_app(otp_manager: OTPManager | None = None) -> FastAPI:
    """Build the app; tests pass their own manager (store, transport, clock)."""
    app = FastAPI(
        title=settings.app_name,
        description="Email one-time-passcode login",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.otp_manager = otp_manager or OTPManager(OtpStore(), EmailService())
    app.state.session_manager = SessionManager(app.state.otp_manager.ttl_seconds)

    app.include_router(otp_router)

    @app.get("/health")
    async def health_check():
        """Simple liveness probe."""
        return {"status": "healthy", "app": settings.app_name}

    return app


app = create_app()


def run() -> None:
    """Serve the app with uvicorn (``otp-login`` console script)."""
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port, log_level="info")


if __name__ == "__main__":
    run()
