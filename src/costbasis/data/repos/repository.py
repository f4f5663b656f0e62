"""Repository pattern implementation for database operations using SQLAlchemy ORM."""

from collections.abc import Generator
from contextlib import contextmanager
from typing import Any, Generic, TypeVar

from sqlalchemy import and_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from costbasis.config.decorators import log_database_operations, log_performance
from costbasis.config.logger import get_logger
from costbasis.data.managers.db_manager import DBManager
from costbasis.data.orm.base import Base

Model = TypeVar("Model", bound=Base)

logger = get_logger(__name__)


class Repository(Generic[Model]):
    """Generic repository for database operations on a given SQLAlchemy model."""

    def __init__(self, model: type[Model], db_manager: DBManager | None = None):
        self.model = model
        self.db_manager = db_manager or DBManager()

    @contextmanager
    def get_session(
        self, session: Session | None = None, readonly: bool = False
    ) -> Generator[Session, None, None]:
        """Reuse ``session`` when given, otherwise open a new scoped one."""
        if session is not None:
            yield session
        else:
            with self.db_manager.get_session(readonly=readonly) as new_session:
                yield new_session

    @log_database_operations(operation_type="CREATE")
    @log_performance()
    def create_many(
        self,
        data_list: list[dict[str, Any]],
        batch_size: int = 1000,
        session: Session | None = None,
    ) -> int:
        """Insert one row per mapping, in list order."""
        if not data_list:
            logger.warning("No data provided for bulk create.")
            return 0

        with self.get_session(session) as session:
            try:
                for i in range(0, len(data_list), batch_size):
                    batch = [self.model(**data) for data in data_list[i : i + batch_size]]
                    session.add_all(batch)
                    # flush per batch so autoincrement keys follow list order
                    session.flush()
                    logger.debug("Created %d %s rows", len(batch), self.model.__name__)
            except SQLAlchemyError as e:
                logger.exception("Error during create_many: %s", e)
                raise

        return len(data_list)

    @log_database_operations(operation_type="READ", log_results=True)
    def get(
        self,
        order_by: list[Any] | None = None,
        session: Session | None = None,
        **filters,
    ) -> list[Model]:
        """All rows matching the equality ``filters``, in ``order_by`` order."""
        stmt = select(self.model)
        conditions = [getattr(self.model, attr) == value for attr, value in filters.items()]
        if conditions:
            stmt = stmt.where(and_(*conditions))
        if order_by:
            stmt = stmt.order_by(*order_by)

        with self.get_session(session) as session:
            rows = session.execute(stmt).scalars().all()
            logger.debug("Retrieved %d %s rows", len(rows), self.model.__name__)
            return list(rows)
