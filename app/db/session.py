from typing import Generator, Optional
import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from app.core.config import settings

logger = logging.getLogger("app")

# Base class for all SQLAlchemy models
Base = declarative_base()


class DatabaseManager:
    """Owns the process-wide engine: opened on first use, disposed at shutdown"""

    def __init__(self, url: str):
        self.url = url
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            if not self.url:
                logger.error("DATABASE_URL is not set or empty!")
                raise ValueError("DATABASE_URL environment variable is required")

            logger.info("Creating database engine")
            connect_args = {"check_same_thread": False} if self.url.startswith("sqlite") else {}
            self._engine = create_engine(
                self.url,
                pool_pre_ping=True,  # Check connection before using from pool
                pool_recycle=3600,   # Recycle connections after 1 hour
                connect_args=connect_args,
            )
        return self._engine

    @property
    def session_factory(self) -> sessionmaker:
        if self._session_factory is None:
            self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        return self._session_factory

    def session(self) -> Session:
        return self.session_factory()

    def dispose(self) -> None:
        if self._engine is not None:
            logger.info("Disposing database engine")
            self._engine.dispose()
            self._engine = None
            self._session_factory = None


db_manager = DatabaseManager(settings.DATABASE_URL)

# Database session dependency for FastAPI
def get_db() -> Generator[Session, None, None]:
    db = db_manager.session()
    try:
        yield db
    finally:
        db.close()
