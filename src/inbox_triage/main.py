"""
FastAPI application entry point for inbox triage.
"""

import structlog
from fastapi import FastAPI
from prometheus_fastapi_instrumentator import Instrumentator

from inbox_triage.api.dependencies import get_store
from inbox_triage.api.error_handlers import EXCEPTION_HANDLERS
from inbox_triage.api.routes import router
from inbox_triage.config import settings
from inbox_triage.logging_config import configure_logging

configure_logging(settings.LOG_LEVEL, settings.ENVIRONMENT)
logger = structlog.get_logger(__name__)

app = FastAPI(
    title="Inbox Triage",
    description="Classified messages and unsubscribe links from the triage store",
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)

for exc_class, handler in EXCEPTION_HANDLERS.items():
    app.add_exception_handler(exc_class, handler)

app.include_router(router, tags=["entries"])


@app.on_event("startup")
async def startup():
    logger.info(
        "Application startup",
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        store_path=settings.STORE_PATH,
        ollama_base_url=settings.OLLAMA_BASE_URL,
    )
    get_store().open()


@app.on_event("shutdown")
async def shutdown():
    get_store().close()
    logger.info("Application shutdown complete")


if settings.PROMETHEUS_ENABLED:
    Instrumentator().instrument(app).expose(app)


@app.get("/")
async def root():
    """Root endpoint with API documentation links."""
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "health": "/health",
        "entries": "/entries",
        "metrics": "/metrics" if settings.PROMETHEUS_ENABLED else None,
    }


if __name__ == "__main__":
    import uvicorn
    
    uvicorn.run(
        "inbox_triage.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,  # Only for development
    )
