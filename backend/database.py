"""Database configuration and session management."""

import logging
import time

from fastapi import Request
from sqlalchemy import Engine, create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


class Database:
    """Owns the engine and session factory for one running process."""

    def __init__(self, url: str, connect_retries: int = 5, retry_delay: float = 2.0):
        self.url = url
        self.connect_retries = max(1, connect_retries)
        self.retry_delay = retry_delay
        self.engine: Engine | None = None
        self._session_factory: sessionmaker[Session] | None = None

    def _create_engine(self) -> Engine:
        connect_args = {}
        if self.url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        return create_engine(self.url, connect_args=connect_args, echo=False)

    def connect(self) -> Engine:
        """Create the engine and check it answers, retrying a fixed number of times."""
        last_exc: SQLAlchemyError | None = None
        for attempt in range(1, self.connect_retries + 1):
            engine = self._create_engine()
            try:
                with engine.connect() as conn:
                    conn.execute(text("SELECT 1"))
            except SQLAlchemyError as e:
                engine.dispose()
                last_exc = e
                logger.warning(
                    "Database connection failed (attempt %d/%d): %s",
                    attempt,
                    self.connect_retries,
                    e,
                )
                if attempt < self.connect_retries:
                    time.sleep(self.retry_delay)
                continue

            logger.info("Connected to database on attempt %d", attempt)
            self.engine = engine
            self._session_factory = sessionmaker(
                bind=engine, autocommit=False, autoflush=False, expire_on_commit=False
            )
            return engine

        logger.error("Failed to connect to database after %d attempts", self.connect_retries)
        raise last_exc

    def session(self) -> Session:
        if self._session_factory is None:
            raise RuntimeError("Database is not connected")
        return self._session_factory()

    def init_db(self) -> None:
        import orm  # noqa: F401  registers every model on Base.metadata

        Base.metadata.create_all(bind=self.engine)

    def dispose(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
            self.engine = None
            self._session_factory = None


def get_db(request: Request):
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()
