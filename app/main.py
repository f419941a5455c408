from fastapi import FastAPI, Request, WebSocket, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import time
import logging

from app.core.config import settings
from app.core.errors import MarketplaceError
from app.schemas.base import ErrorBody
from app.api.v1.api import api_router
from app.api.v1.endpoints.chat import chat_websocket
from app.db.database import init_db, close_db, redis_client
from app.services.chain_adapters import ChainAdapterSet
from app.services.payout_guard import build_payout_guard
from datetime import datetime, timezone

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    description="USDT P2P Marketplace API - wallet allowances, payouts and trader listings",
    openapi_url=f"{settings.API_PREFIX}/openapi.json" if settings.DEBUG else None,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
)

# Add middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.parsed_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(
    TrustedHostMiddleware,
    allowed_hosts=settings.parsed_allowed_hosts,
)


# Add timing middleware
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)
    return response


def _error_body(request: Request, status_code: int, detail, errors=None):
    return ErrorBody(
        detail=detail,
        status_code=status_code,
        timestamp=time.time(),
        path=request.url.path,
        errors=errors,
    ).dict(exclude_none=True)


# Exception handlers
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(request, exc.status_code, exc.detail),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(MarketplaceError)
async def marketplace_exception_handler(request: Request, exc: MarketplaceError):
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    else:
        logger.info(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(request, exc.status_code, exc.message),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=_error_body(
            request, status.HTTP_422_UNPROCESSABLE_ENTITY, "Validation error", errors=jsonable_errors(exc)
        ),
    )


def jsonable_errors(exc: RequestValidationError):
    # pydantic puts the raw exception in ctx for custom validators
    errors = []
    for error in exc.errors():
        error = dict(error)
        if "ctx" in error:
            error["ctx"] = {k: str(v) for k, v in error["ctx"].items()}
        errors.append(error)
    return jsonable_encoder(errors)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(
            request,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal server error" if not settings.DEBUG else str(exc),
        ),
    )


# Startup and shutdown events
@app.on_event("startup")
async def startup_event():
    """Initialize application on startup"""
    logger.info("Starting up marketplace API...")
    try:
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise

    app.state.chain_adapters = ChainAdapterSet.from_settings(settings)
    app.state.payout_guard = build_payout_guard(settings, redis_client)
    logger.info(
        f"Chain adapters ready for {', '.join(n.value for n in app.state.chain_adapters.networks())}; "
        f"payout lock backend: {settings.PAYOUT_LOCK_BACKEND}"
    )


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown"""
    logger.info("Shutting down marketplace API...")
    try:
        adapters = getattr(app.state, "chain_adapters", None)
        if adapters is not None:
            await adapters.close()
        await close_db()
        logger.info("Database connections closed")
    except Exception as e:
        logger.error(f"Error during shutdown: {e}")


# Health check endpoints
@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": settings.PROJECT_NAME,
        "version": "1.0.0",
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "timestamp": time.time(),
        "version": "1.0.0"
    }


@app.get("/health/db")
async def database_health_check():
    """Database health check"""
    try:
        from app.db.database import engine
        from sqlalchemy import text
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return {
            "status": "healthy",
            "database": "connected",
            "timestamp": time.time()
        }
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "unhealthy",
                "database": "disconnected",
                "error": str(e) if settings.DEBUG else "Database connection failed",
                "timestamp": time.time()
            }
        )


@app.get("/health/redis")
async def redis_health_check():
    """Redis health check"""
    try:
        if redis_client is None:
            raise RuntimeError("Redis client not configured")
        await redis_client.ping()
        return {
            "status": "healthy",
            "redis": "connected",
            "timestamp": time.time()
        }
    except Exception as e:
        logger.error(f"Redis health check failed: {e}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "unhealthy",
                "redis": "disconnected",
                "error": str(e) if settings.DEBUG else "Redis connection failed",
                "timestamp": time.time()
            }
        )


@app.websocket("/ws/chat/{room}")
async def chat_socket(websocket: WebSocket, room: str):
    await chat_websocket(websocket, room)


# Include API router
app.include_router(api_router, prefix=settings.API_PREFIX)
