"""Database Manager for handling DB connections and sessions."""

from contextlib import contextmanager
import os

from dotenv import load_dotenv
from sqlalchemy import Engine, StaticPool, create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from costbasis.config.decorators import log_performance
from costbasis.config.logger import get_logger
from costbasis.data.orm.base import Base

logger = get_logger(__name__)


class DBManager:
    """Owns the SQLAlchemy engine and hands out sessions."""

    def __init__(self, url: str | None = None, echo: bool | None = None):
        """Initialize the DBManager; ``DB_URL``/``DB_ECHO`` fill in missing arguments."""
        load_dotenv()
        self.url = url or os.getenv("DB_URL", "sqlite:///costbasis.db")
        self.echo = (
            echo if echo is not None else os.getenv("DB_ECHO", "false").lower() == "true"
        )
        self._engine = None
        self._session_factory = None
        self._initialize_engine()

    def _initialize_engine(self):
        url = make_url(self.url)
        options = {"echo": self.echo}
        if url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:"):
            # one shared connection, otherwise every session sees an empty database
            options.update(
                poolclass=StaticPool, connect_args={"check_same_thread": False}
            )

        try:
            self._engine = create_engine(url, **options)
            self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
            self._setup_event_listeners()
            logger.info("Database engine initialized: %s", url.render_as_string())
        except SQLAlchemyError as e:
            logger.error("Failed to initialize database engine: %s", e)
            raise

    def _setup_event_listeners(self):
        if self._engine.url.get_backend_name() == "sqlite":

            @event.listens_for(self._engine, "connect")
            def set_sqlite_pragma(dbapi_connection, _connection_record):
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

        @event.listens_for(self._engine, "checkout")
        def receive_checkout(_dbapi_connection, _connection_record, _connection_proxy):
            logger.debug("Connection checked out from pool")

        @event.listens_for(self._engine, "checkin")
        def receive_checkin(_dbapi_connection, _connection_record):
            logger.debug("Connection returned to pool")

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("Database engine not initialized")
        return self._engine

    @contextmanager
    def get_session(self, readonly=False):
        """Provide a transactional scope around a series of operations.

        A readonly session is rolled back instead of committed, so a read sees
        one consistent snapshot and leaves nothing behind.
        """
        if self._session_factory is None:
            raise RuntimeError("Session factory not initialized")

        session = self._session_factory()
        try:
            yield session
            if readonly:
                session.rollback()
                logger.debug("Session rolled back (readonly mode).")
            else:
                session.commit()
                logger.debug("Session committed successfully.")
        except Exception as e:
            session.rollback()
            logger.error("Session rollback due to error: %s", repr(e))
            raise
        finally:
            session.close()

    @log_performance()
    def create_schema(self):
        """Create all tables for the ORM models."""
        try:
            Base.metadata.create_all(self.engine)
            logger.info("Database schema created successfully.")
        except SQLAlchemyError as e:
            logger.error("Failed to create database schema: %s", e)
            raise

    @log_performance()
    def drop_schema(self):
        """Drop all tables for the ORM models."""
        try:
            Base.metadata.drop_all(bind=self.engine, checkfirst=True)
            logger.info("Database schema dropped successfully.")
        except SQLAlchemyError as e:
            logger.error("Failed to drop database schema: %s", e)
            raise

    def close(self):
        """Dispose the engine and close all connections."""
        if self._engine is not None:
            self._engine.dispose()
            logger.info("Database engine disposed and all connections closed.")
