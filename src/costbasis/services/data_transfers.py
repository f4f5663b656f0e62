"""Services for data import and export."""

from pathlib import Path

from costbasis.analytics.core.price_manager import PriceSource
from costbasis.config.logger import get_logger
from costbasis.config.settings import EngineConfig
from costbasis.data.managers.csv_manager import CSVManager
from costbasis.data.managers.db_manager import DBManager
from costbasis.reporting.tax_report import ReportExporter

from .costbasis import CostBasisService
from .service import Service

logger = get_logger(__name__)

TRANSACTION_COLUMNS = (
    "id",
    "tx_type",
    "amount_sat",
    "fee_sat",
    "price_usd",
    "transacted_at",
    "description",
)


class ImportService(Service):
    """Service for data ingestion."""

    def load_transactions(self, portfolio_id: str, file_path: str) -> int:
        """Load a transaction CSV into ``portfolio_id``.

        The CSV carries the columns of ``TRANSACTION_COLUMNS``; ``fee_sat``,
        ``price_usd`` and ``description`` may be empty. Rows are stored in
        file order. Returns the number of rows stored.
        """
        data = CSVManager.read_csv(file_path)
        if not data:
            logger.warning("No data found in CSV file: %s", file_path)
            return 0

        unknown = sorted(set(data[0]) - set(TRANSACTION_COLUMNS))
        if unknown:
            logger.warning("Ignoring unknown columns in %s: %s", file_path, unknown)
        rows = [{k: row.get(k) for k in TRANSACTION_COLUMNS} for row in data]
        return self.tx_repo.add_records(portfolio_id, rows)


class ExportService(Service):
    """Service for data export."""

    def __init__(
        self,
        db_manager: DBManager | None = None,
        price_source: PriceSource | None = None,
        config: EngineConfig | None = None,
    ):
        super().__init__(db_manager)
        self.costbasis = CostBasisService(db_manager, price_source=price_source, config=config)

    def export_tax_report(
        self, portfolio_id: str, year: int, method: str | None = None, output_dir: str = "."
    ) -> Path:
        """Write ``form_8949_<year>_<method>.csv`` into ``output_dir``."""
        report, csv_text = self.costbasis.export_tax_report(portfolio_id, year, method)
        path = Path(output_dir) / ReportExporter.filename(report.year, report.method)
        CSVManager.write_text(csv_text, str(path))
        logger.info(
            "Exported %d dispositions for %s to %s", report.disposition_count, portfolio_id, path
        )
        return path
