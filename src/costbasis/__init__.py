"""BTC Cost Basis - tax-lot accounting for Bitcoin portfolios."""

__version__ = "0.1.0"
__description__ = "Bitcoin cost-basis engine with FIFO, LIFO and HIFO lot matching"

# Analytics - lot matching, gains and roll-ups
from .analytics.accounting.fifo import FIFO
from .analytics.accounting.hifo import HIFO
from .analytics.accounting.lifo import LIFO
from .analytics.accounting.matcher import STRATEGIES, get_strategy, select_lots
from .analytics.accounting.strategy import MatchingStrategy
from .analytics.core.gains import GainCalculator
from .analytics.core.inventory import InventoryView, LotInventory
from .analytics.core.price_manager import PriceManager, PriceSource
from .analytics.core.summary import PortfolioSummary, PortfolioSummaryAggregator
from .analytics.engine import CostBasisEngine, CostBasisResult

# Configuration - settings and logging
from .config.decorators import (
    LoggerMixin,
    audit_log,
    log_calls,
    log_database_operations,
    log_performance,
)
from .config.logger import (
    LogFileConfig,
    cleanup_logs,
    get_log_stats,
    get_logger,
    setup_logging,
)
from .config.settings import EngineConfig

# Data management - storage and retrieval
from .data.managers.csv_manager import CSVManager
from .data.managers.db_manager import DBManager
from .data.orm.base import Base
from .data.orm.transaction import BtcTransaction
from .data.repos.repository import Repository
from .data.repos.tx_repo import TransactionRepository

# Errors
from .errors import (
    CostBasisError,
    InsufficientInventoryError,
    MissingPriceError,
    UnsupportedMethodError,
    ValidationError,
)

# Ledger - events, lots and money
from .ledger.models import (
    Acquisition,
    Disposal,
    GainLossRecord,
    LedgerEvent,
    Lot,
    PortfolioState,
    Term,
    Transfer,
    TxType,
)
from .ledger.transaction_ledger import TransactionLedger

# Reporting
from .reporting.tax_report import ReportExporter, TaxDisposition, TaxReport

# Services - higher-level operations
from .services.costbasis import CostBasisService
from .services.data_transfers import ExportService, ImportService
from .services.service import Service

__all__ = [
    "FIFO",
    "HIFO",
    "LIFO",
    "STRATEGIES",
    "Acquisition",
    "Base",
    "BtcTransaction",
    "CSVManager",
    "CostBasisEngine",
    "CostBasisError",
    "CostBasisResult",
    "CostBasisService",
    "DBManager",
    "Disposal",
    "EngineConfig",
    "ExportService",
    "GainCalculator",
    "GainLossRecord",
    "ImportService",
    "InsufficientInventoryError",
    "InventoryView",
    "LedgerEvent",
    "LogFileConfig",
    "LoggerMixin",
    "Lot",
    "LotInventory",
    "MatchingStrategy",
    "MissingPriceError",
    "PortfolioState",
    "PortfolioSummary",
    "PortfolioSummaryAggregator",
    "PriceManager",
    "PriceSource",
    "ReportExporter",
    "Repository",
    "Service",
    "TaxDisposition",
    "TaxReport",
    "Term",
    "TransactionLedger",
    "TransactionRepository",
    "Transfer",
    "TxType",
    "UnsupportedMethodError",
    "ValidationError",
    "audit_log",
    "cleanup_logs",
    "get_log_stats",
    "get_logger",
    "get_strategy",
    "log_calls",
    "log_database_operations",
    "log_performance",
    "select_lots",
    "setup_logging",
]
