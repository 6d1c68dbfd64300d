import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from perfeval.core.config import settings
from perfeval.core.database import init_db
from perfeval.core.exceptions import PerformanceError
from perfeval.core.logging_config import setup_logging
from perfeval.api.endpoints import health, kpis, self_assessments, values

setup_logging(settings.LOG_LEVEL, settings.JSON_LOGS, process_role="api")
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    logger.info("Starting up Performance Evaluation API...")
    init_db()
    logger.info("Database models registered")

    yield

    logger.info("Shutting down Performance Evaluation API...")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    description="KPI and company value scoring, statistics and employee self-assessments",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PerformanceError)
async def performance_error_handler(request: Request, exc: PerformanceError):
    """Translate domain errors into HTTP responses (422, 404, 409 or 503)."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected ({exc.status_code}): {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


app.include_router(kpis.router, prefix=settings.API_V1_STR)
app.include_router(values.router, prefix=settings.API_V1_STR)
app.include_router(self_assessments.router, prefix=settings.API_V1_STR)
app.include_router(health.router)


@app.get("/")
async def root():
    """Root endpoint - API health check"""
    return {
        "message": settings.PROJECT_NAME,
        "version": "1.0.0",
        "status": "healthy"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
