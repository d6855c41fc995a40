import logging
import sys
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request

from api.di.container import ApplicationContainer as DependencyContainer
from api.shared.dtos import HealthCheckResponse
from api.shared.exceptions import GatewayException
from core.logging_config import configure_logging
from core.settings import Settings, get_settings

logger = logging.getLogger("convai")


class CustomFastAPI(FastAPI):
    container: DependencyContainer
    settings: Settings


@asynccontextmanager
async def lifespan(_app: CustomFastAPI):
    logger.info("Starting application initialization...")
    start_time = time.time()
    settings = _app.settings

    missing = settings.missing_credentials()
    if missing:
        logger.error(f"❌ Missing required configuration: {', '.join(missing)}")
        raise RuntimeError(f"Missing required configuration: {', '.join(missing)}")

    try:
        logger.info("Initializing database connection...")
        db_start = time.time()
        db_resource = _app.container.infrastructure.database()
        await db_resource.init()
        if settings.DATABASE.DATABASE_AUTO_CREATE:
            from api.shared.entities.registry import BaseEntity

            await db_resource.create_all(BaseEntity.metadata)
        async with db_resource.engine.connect() as _conn:
            # Verify database connection
            await _conn.execute(text("SELECT 1"))
        logger.info(
            f"✅ Database connection established in {time.time() - db_start:.2f}s"
        )

        if settings.SESSION.SESSION_BACKEND == "redis":
            logger.info("Initializing Redis connection...")
            redis_start = time.time()
            redis_resource = _app.container.infrastructure.redis_db()
            await redis_resource.init()
            await redis_resource.connect()
            logger.info(
                f"✅ Redis connection established in {time.time() - redis_start:.2f}s"
            )
        else:
            logger.warning("Using in-memory sessions; they are lost on restart")

        logger.info(
            f"✅ Application startup completed in {time.time() - start_time:.2f}s"
        )
    except Exception as e:
        logger.exception(f"❌ Failed to initialize application: {str(e)}")
        raise

    yield

    try:
        await _app.container.infrastructure.convai_client().aclose()
        await _app.container.infrastructure.identity_provider().aclose()
        if settings.SESSION.SESSION_BACKEND == "redis":
            await _app.container.infrastructure.redis_db().disconnect()
        await _app.container.infrastructure.database().shutdown()
        logger.info("Application shutdown complete")
    except Exception:
        logger.exception("Error during shutdown")


def create_fastapi_app(settings: Optional[Settings] = None) -> CustomFastAPI:
    settings = settings or get_settings()
    configure_logging(settings.APP)

    _app = CustomFastAPI(
        title="Convai Conversation Gateway",
        description="Authenticated, per-user access to ElevenLabs Convai conversations",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    _app.settings = settings

    # Initialize dependency container
    _app.container = DependencyContainer()
    _app.container.config.from_dict(settings.model_dump())

    # Credentialed CORS cannot use a wildcard origin
    _app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.APP.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    # Include feature routers
    from api.features.auth.router import router as auth_router
    from api.features.conversations.router import router as conversations_router

    _app.include_router(auth_router, prefix="/auth", tags=["Auth"])
    _app.include_router(
        conversations_router, prefix="/api/conversations", tags=["Conversations"]
    )

    @_app.get("/health", response_model=HealthCheckResponse, tags=["Health"])
    async def health():
        return HealthCheckResponse(
            status="ok",
            dependencies={"sessions": settings.SESSION.SESSION_BACKEND},
        )

    _register_exception_handlers(_app)

    # Mounted last so API routes take precedence
    if settings.APP.STATIC_DIR and Path(settings.APP.STATIC_DIR).is_dir():
        _app.mount(
            "/", StaticFiles(directory=settings.APP.STATIC_DIR, html=True), name="static"
        )

    return _app


def _register_exception_handlers(_app: FastAPI) -> None:
    @_app.exception_handler(GatewayException)
    async def gateway_exception_handler(request: Request, exc: GatewayException):
        if exc.status_code >= 500:
            logger.error(
                f"{exc.error_code} on {request.method} {request.url.path}: {exc.message}"
            )
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @_app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if not errors:
            return JSONResponse(status_code=400, content={"error": "Invalid request"})
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = first.get("msg", "Invalid request")
        return JSONResponse(
            status_code=400,
            content={"error": f"{field}: {message}" if field else message},
        )

    @_app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception on {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


app = create_fastapi_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn on APP.PORT."""
    import uvicorn

    settings = get_settings()
    uvicorn.run("api.main:app", host="0.0.0.0", port=settings.APP.PORT)


if __name__ == "__main__":
    sys.exit(run())
