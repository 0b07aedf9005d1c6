import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from . import config
from .database import build_engine, build_session_factory, init_db
from .domain.availability.router import router as availability_router
from .domain.customers.router import auth_router
from .domain.customers.router import router as customers_router
from .domain.dashboard.router import router as dashboard_router
from .domain.reminders.router import router as reminders_router
from .domain.scheduling.router import router as schedule_router
from .domain.service_records.router import router as services_router
from .domain.vehicles.router import router as vehicles_router
from .security_headers import SecurityHeadersMiddleware
from .shared.errors import DependencyError, WorkshopError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        init_db(app.state.engine)
        logger.info("Database tables created successfully")
    except SQLAlchemyError as e:
        # Ignore "already exists" errors from race conditions between workers
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")
            raise

    yield
    app.state.engine.dispose()
    logger.info("Application shutting down...")


def error_response(exc: WorkshopError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.kind, "detail": exc.message},
    )


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(WorkshopError)
    async def workshop_error_handler(request: Request, exc: WorkshopError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} - {exc.kind}: {exc.message}")
        else:
            logger.info(f"{request.method} {request.url.path} - {exc.kind}: {exc.message}")
        return error_response(exc)

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error(f"❌ Database error on {request.method} {request.url.path}: {exc}")
        return error_response(DependencyError("Database unavailable"))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """
        Report problems with the Authorization header as 401 authentication
        errors; every other schema error is a 422
        """
        for error in exc.errors():
            if error.get("loc") and "authorization" in str(error.get("loc")).lower():
                logger.warning(
                    f"Authentication failed for {request.url.path}: Missing or invalid Authorization header"
                )
                return JSONResponse(
                    status_code=401,
                    content={
                        "error": "Unauthenticated",
                        "detail": "Not authenticated. Please provide a valid Bearer token in the Authorization header.",
                    },
                )

        logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
        return JSONResponse(status_code=422, content={"detail": exc.errors()})


def create_app(database_url: Optional[str] = None) -> FastAPI:
    """
    Build the API. The engine and session factory are created here, once, and
    hung off app.state for get_db.
    """
    app = FastAPI(title="Workshop API", version="1.0.0", lifespan=lifespan)

    engine = build_engine(database_url or config.DATABASE_URL)
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)

    register_exception_handlers(app)

    if config.SECURITY_HEADERS_ENABLED:
        app.add_middleware(
            SecurityHeadersMiddleware, exclude_paths=["/health", "/docs", "/openapi.json"]
        )
        logger.info("Security headers enabled")
    else:
        logger.warning("Security headers DISABLED - only use in development!")

    logger.info(f"CORS allowed origins: {config.ALLOWED_ORIGINS}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # Routes
    app.include_router(auth_router)
    app.include_router(availability_router)
    app.include_router(schedule_router)
    app.include_router(reminders_router)
    app.include_router(customers_router)
    app.include_router(vehicles_router)
    app.include_router(services_router)
    app.include_router(dashboard_router)

    @app.get("/")
    def root():
        return {"message": "Workshop API is running"}

    @app.get("/health")
    def health():
        return {"status": "healthy"}

    return app


app = create_app()
