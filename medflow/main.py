import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from pydantic import ValidationError
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from medflow.api.v1.routes import private_router, public_router
from medflow.config import Settings, get_settings
from medflow.rate_limit import limiter
from medflow.structlog_config import configure_structlog
from medflow.utils.expiry import MAX_SIGNED_URL_EXPIRES


def validate_config_on_startup(settings: Settings) -> None:
    """Checks settings that pydantic alone cannot reject."""
    problems = []

    if not settings.get_elevated_roles():
        problems.append("ELEVATED_ROLES must name at least one role")
    for name in ("SIGNED_URL_DEFAULT_EXPIRES", "S3_UPDATE_URL_EXPIRES"):
        value = getattr(settings, name)
        if not 1 <= value <= MAX_SIGNED_URL_EXPIRES:
            problems.append(f"{name} must be between 1 and {MAX_SIGNED_URL_EXPIRES}")
    if settings.FILE_RETENTION_DAYS < 0:
        problems.append("FILE_RETENTION_DAYS must not be negative")

    if problems:
        logging.critical(f"Invalid configuration: {'; '.join(problems)}")
        raise RuntimeError(f"Invalid configuration: {'; '.join(problems)}")


@asynccontextmanager
async def lifespan(app):

    logging.info("Starting application...")

    logging.info("Loading settings...")
    try:
        settings = get_settings()
    except ValidationError as e:
        logging.critical(f"Configuration error:\n{e}")
        raise RuntimeError(f"Configuration error: {e}")
    logging.info("Loading settings complete.")

    configure_structlog(
        log_level=settings.LOG_LEVEL,
        log_format=settings.LOG_FORMAT,
    )
    logging.info(f"Log level set to {logging.getLevelName(settings.LOG_LEVEL)}")

    logging.info("Validating configuration...")
    validate_config_on_startup(settings)
    logging.info("Configuration validation complete.")

    logging.info("Application startup complete.")
    yield
    logging.info("Application shutdown complete.")


app = FastAPI(
    title="Medflow Storage API",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Configure rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Public endpoints (e.g., /v1/health)
app.include_router(public_router, prefix="/v1")

# Authenticated endpoints
app.include_router(private_router, prefix="/v1")
