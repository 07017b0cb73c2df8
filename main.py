import logging
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from cookie_consent.config import settings
from cookie_consent.database import engine, init_models
from cookie_consent.exception_handlers import register_exception_handlers
from cookie_consent.middleware.etag import ETagMiddleware
from cookie_consent.middleware.logging import StructuredLoggingMiddleware, setup_structured_logging
from cookie_consent.middleware.rate_limit import configure_rate_limiting
from cookie_consent.routes import consent

setup_structured_logging(log_level=settings.log_level, json_format=settings.log_json)
logger = logging.getLogger(__name__)

CONSENT_PREFIX = "/api/v1/consent"


def create_app() -> FastAPI:
    """Create the FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        description="Cookie consent capture for the community site",
        debug=settings.debug,
        version=settings.app_version,
    )

    # Add middleware
    app.add_middleware(
        ETagMiddleware,
        cacheable_paths=frozenset({CONSENT_PREFIX + consent.COOKIE_DATA_PATH}),
    )
    app.add_middleware(StructuredLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    configure_rate_limiting(app)
    register_exception_handlers(app)

    # Include routers
    app.include_router(consent.router, prefix=CONSENT_PREFIX)

    if settings.debug:
        logger.info(f"Running in {settings.environment} mode")
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)  # Logs SQL statements

    return app


app = create_app()


@app.on_event("startup")
async def startup_event():
    """Tasks to run at application startup."""
    logger.info("Starting up the application...")
    # Migrations own the schema outside debug mode
    if settings.debug:
        await init_models()


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down the application...")
    await engine.dispose()


@app.get("/", tags=["Root"])
async def root():
    return {"message": f"Welcome to the {settings.app_name}"}


@app.get("/health", tags=["Root"])
async def health():
    return {"status": "ok", "version": settings.app_version}


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=settings.debug)
