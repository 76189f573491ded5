"""
botsuite/main.py

Purpose: Application entry point

- Initializes FastAPI app
- Loads configuration and logging
- Registers API routes, pages and static assets
- No business logic should be written here
- Manages application lifecycle (startup/shutdown)
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from contextlib import asynccontextmanager
from pathlib import Path
import time

from botsuite.core.config import settings, validate_settings
from botsuite.core.errors import add_exception_handlers
from botsuite.core.logging import setup_logging, get_logger
from botsuite.services.gemini_service import close_gemini_client
from botsuite.api import auth, bot, health, pages

# Initialize logging first
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    logger.info("Starting bot suite...")

    try:
        logger.info("Validating configuration...")
        validate_settings()

        for directory in (settings.DATA_DIR, settings.UPLOAD_DIR, Path(settings.USERS_FILE).parent):
            Path(directory).mkdir(parents=True, exist_ok=True)

        configured = sorted(settings.bots)
        if configured:
            logger.info(f"Configured bots: {', '.join(configured)}")
        else:
            logger.warning("No bots configured; every bot request will return 501")

        if settings.object_store_enabled:
            logger.info(f"Object store uploads enabled (bucket={settings.R2_BUCKET})")

        logger.info(f"Environment: {settings.ENVIRONMENT}")
        logger.info(f"Debug Mode: {settings.DEBUG}")

    except Exception as e:
        logger.critical(f"Failed to start application: {str(e)}", exc_info=True)
        raise

    yield  # Application runs here

    logger.info("Shutting down bot suite...")
    try:
        await close_gemini_client()
        logger.info("Generative API client closed")
    except Exception as e:
        logger.error(f"Error during shutdown: {str(e)}", exc_info=True)


app = FastAPI(
    title="Bot Suite",
    description="Session-gated multi-bot front end for a generative language API",
    version="1.0.0",
    lifespan=lifespan,
    debug=settings.DEBUG,
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
)

add_exception_handlers(app)

if settings.CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


# Request timing middleware
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """Add processing time header to all responses."""
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)

    # Bot calls are slow by nature; only flag the outliers
    if process_time > 30.0:
        logger.warning(
            f"Slow request detected: {request.method} {request.url.path}",
            extra={"process_time": process_time}
        )

    return response


# Register routes
app.include_router(auth.router, prefix="/api", tags=["Auth"])
app.include_router(bot.router, prefix="/api", tags=["Bots"])
app.include_router(health.router, tags=["Health"])
app.include_router(pages.router)

app.mount(
    "/assets",
    StaticFiles(directory=str(Path(settings.PUBLIC_DIR) / "assets"), check_dir=False),
    name="assets",
)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "botsuite.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.is_development,
        log_level=settings.LOG_LEVEL.lower()
    )
