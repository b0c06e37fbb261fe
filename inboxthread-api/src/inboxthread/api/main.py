"""FastAPI app serving the inbound email webhook and thread lookups."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from inboxthread.infrastructure import configure_logging, get_settings
from inboxthread.infrastructure.stores import get_thread_store


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and open the thread store before serving."""
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}, store: {settings.store_backend}")

    if settings.environment != "development" and settings.webhook_secret is None:
        logger.warning("WEBHOOK_SECRET is not set; inbound webhooks will be rejected")

    try:
        get_thread_store()
        logger.info("Thread store ready")
    except Exception as e:
        logger.warning(f"Thread store initialization failed (non-fatal): {e}")

    yield

    logger.info("Shutdown complete")


def create_app() -> FastAPI:
    """Build the app with the webhook and thread routers mounted."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Inbound email parsing and conversation threading",
        lifespan=lifespan,
    )

    # Register routes
    from inboxthread.infrastructure.http.inbound_email import router as inbound_router
    from inboxthread.infrastructure.http.threads import router as threads_router

    app.include_router(inbound_router)
    app.include_router(threads_router)

    return app


def run() -> None:
    """Serve the app with uvicorn using the configured host and port."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)


# Create app instance
app = create_app()
