"""MiniDrive — Main application entry point."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from alembic import command
from alembic.config import Config
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import orm  # noqa: F401  registers every model before mappers configure
from api.auth.controllers.auth_controller import router as auth_router
from api.files.controllers.files_controller import router as files_router
from config import Settings, configure_logging, get_settings
from database import Database
from errors import MiniDriveError

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).parent


def run_migrations(settings: Settings, database: Database) -> None:
    """Run Alembic migrations, falling back to create_all if they fail."""
    try:
        alembic_cfg = Config(str(BASE_DIR / "alembic.ini"))
        alembic_cfg.set_main_option("script_location", str(BASE_DIR / "db_migrations"))
        alembic_cfg.set_main_option(
            "sqlalchemy.url", settings.resolved_database_url.replace("%", "%%")
        )
        command.upgrade(alembic_cfg, "head")
        logger.info("Database migrations applied")
    except Exception as e:  # noqa: BLE001
        logger.warning("Migration failed, creating tables directly: %s", e)
        database.init_db()


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting MiniDrive...")
        settings.data_dir.mkdir(parents=True, exist_ok=True)

        database = Database(
            settings.resolved_database_url,
            connect_retries=settings.db_connect_retries,
            retry_delay=settings.db_connect_retry_delay,
        )
        database.connect()
        if settings.run_migrations:
            run_migrations(settings, database)
        else:
            database.init_db()

        app.state.database = database
        try:
            yield
        finally:
            database.dispose()
            logger.info("MiniDrive shutdown complete.")

    app = FastAPI(title="MiniDrive", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(MiniDriveError)
    async def minidrive_error_handler(request: Request, exc: MiniDriveError):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"detail": "Invalid request body"})

    @app.get("/api/health")
    async def health():
        return {"status": "ok"}

    @app.get("/")
    async def root():
        return {"message": "MiniDrive API"}

    app.include_router(auth_router)
    app.include_router(files_router)

    return app


app = create_app()
