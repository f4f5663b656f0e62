"""Script to load a transaction CSV into the database."""

import argparse
from pathlib import Path

from costbasis import DBManager, ImportService, get_logger, setup_logging

setup_logging()
logger = get_logger(__name__)


def main():
    """Load BTC transactions from CSV into a portfolio."""
    parser = argparse.ArgumentParser(description="Load BTC transactions from CSV.")
    parser.add_argument("portfolio", help="Portfolio id the transactions belong to")
    parser.add_argument(
        "--csv",
        default="data/transactions.csv",
        help=(
            "Path to the CSV file. Columns: id, tx_type, amount_sat, fee_sat, "
            "price_usd, transacted_at, description"
        ),
    )
    parser.add_argument("--db-url", help="Database URL (defaults to DB_URL)")
    args = parser.parse_args()

    if not Path(args.csv).exists():
        logger.error("CSV file not found: %s", args.csv)
        return

    db = DBManager(args.db_url)
    db.create_schema()
    count = ImportService(db).load_transactions(args.portfolio, args.csv)
    logger.info("Loaded %d transactions into portfolio %s", count, args.portfolio)
    db.close()


if __name__ == "__main__":
    main()
