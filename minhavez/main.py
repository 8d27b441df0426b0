"""Main FastAPI application with WebSocket support."""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import redis.asyncio as redis

from minhavez.config.database import test_supabase_connection
from minhavez.config.settings import settings
from minhavez.config.logging import get_logger, setup_logging
from minhavez.api.v1.api import api_router
from minhavez.core.exceptions import MinhaVezError
from minhavez.core.middleware import (
    CorrelationIdMiddleware,
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    RateLimitMiddleware,
    SecurityHeadersMiddleware,
)

setup_logging()
logger = get_logger(__name__)

# Redis only backs rate limiting of the public join form; optional.
redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True) if settings.REDIS_URL else None

# Create FastAPI app
is_prod = settings.ENVIRONMENT.lower() == "production"
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    openapi_url=None if is_prod else f"{settings.API_V1_STR}/openapi.json",
    docs_url=None if is_prod else "/docs",
    redoc_url=None if is_prod else "/redoc",
)

# Add middleware in order (last added = first executed)
# CORSMiddleware is added last so it executes first and answers preflight
# (OPTIONS) requests before other middleware.
app.add_middleware(CorrelationIdMiddleware)
app.add_middleware(ErrorHandlingMiddleware)
app.add_middleware(RateLimitMiddleware, redis_client=redis_client)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Exception handlers
@app.exception_handler(MinhaVezError)
async def minhavez_exception_handler(request: Request, exc: MinhaVezError):
    """Domain errors carry their own status code and machine-readable code."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Catch all unhandled exceptions."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )


@app.get("/")
async def root():
    return {
        "name": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "docs": "/docs" if not is_prod else None,
        "environment": settings.ENVIRONMENT
    }


# Health check
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "environment": settings.ENVIRONMENT,
        "version": settings.VERSION
    }


# Include API router
app.include_router(api_router, prefix=settings.API_V1_STR)


@app.on_event("startup")
async def startup_event():
    logger.info(f"Starting {settings.PROJECT_NAME} v{settings.VERSION}")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug mode: {settings.DEBUG}")
    if not test_supabase_connection():
        logger.warning("Supabase is not reachable; requests will fail until it is")
    if redis_client is None:
        logger.info("REDIS_URL not set; public join rate limiting disabled")


@app.on_event("shutdown")
async def shutdown_event():
    if redis_client is not None:
        try:
            await redis_client.aclose()
        except Exception as e:
            logger.warning(f"Redis cleanup warning: {e}")
    logger.info("Shutdown complete")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("minhavez.main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)
