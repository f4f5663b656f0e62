"""Service layer base class."""

from costbasis.config.logger import get_logger
from costbasis.data.managers.db_manager import DBManager
from costbasis.data.repos.tx_repo import TransactionRepository

logger = get_logger(__name__)


class Service:
    """Base class for services.

    The database manager is created on first use, so a service handed a
    ready-made transaction source never opens a database.
    """

    def __init__(self, db_manager: DBManager | None = None):
        self._db_manager = db_manager
        self._tx_repo: TransactionRepository | None = None

    @property
    def db_manager(self) -> DBManager:
        if self._db_manager is None:
            self._db_manager = DBManager()
            logger.debug("%s opened default database", self.__class__.__name__)
        return self._db_manager

    @property
    def tx_repo(self) -> TransactionRepository:
        if self._tx_repo is None:
            self._tx_repo = TransactionRepository(self.db_manager)
        return self._tx_repo
