#!/usr/bin/env python3
"""Cost basis, portfolio summary and Form 8949 export for one portfolio."""

import argparse
import json

from costbasis import (
    CostBasisError,
    CostBasisService,
    CSVManager,
    DBManager,
    EngineConfig,
    ExportService,
    PriceManager,
    get_logger,
    setup_logging,
)

setup_logging()
logger = get_logger(__name__)


def print_header(title):
    """Print a major section header."""
    print(f"\n{'=' * 60}")
    print(title.upper())
    print(f"{'=' * 60}")


def load_prices(path, config):
    """Daily close table with ``date`` and ``price`` columns."""
    if not path:
        return None
    return PriceManager.from_records(
        CSVManager.read_csv(path, as_text=False),
        currency=config.fiat_currency,
        max_staleness_days=config.price_max_staleness_days,
    )


def main():
    """Compute and print cost basis, summary and tax report."""
    parser = argparse.ArgumentParser(description="BTC cost basis and tax report.")
    parser.add_argument("portfolio", help="Portfolio id")
    parser.add_argument("year", type=int, help="Tax year")
    parser.add_argument("--method", default=None, help="fifo, lifo or hifo")
    parser.add_argument("--price", default=None, help="Current BTC price in USD")
    parser.add_argument("--prices-csv", default=None, help="Daily price history CSV")
    parser.add_argument("--output-dir", default=None, help="Write the Form 8949 CSV here")
    parser.add_argument("--db-url", help="Database URL (defaults to DB_URL)")
    args = parser.parse_args()

    db = DBManager(args.db_url)
    config = EngineConfig()
    prices = load_prices(args.prices_csv, config)
    service = CostBasisService(db, price_source=prices, config=config)

    try:
        result = service.compute_cost_basis(args.portfolio, args.method, tax_year=args.year)
        print_header(f"Cost basis {args.year} ({result.method})")
        print(json.dumps(result.to_dict(), indent=2))

        summary = service.compute_summary(
            args.portfolio, args.price, args.method, tax_year=args.year
        )
        print_header("Portfolio summary")
        print(json.dumps(summary.to_dict(), indent=2))

        if args.output_dir:
            path = ExportService(db, price_source=prices, config=config).export_tax_report(
                args.portfolio, args.year, args.method, args.output_dir
            )
            print(f"\nForm 8949 written to {path}")
        else:
            _, csv_text = service.export_tax_report(args.portfolio, args.year, args.method)
            print_header("Form 8949")
            print(csv_text, end="")
    except CostBasisError as e:
        logger.error("Cost basis computation failed: %s", e)
        raise SystemExit(1) from e
    finally:
        db.close()


if __name__ == "__main__":
    main()
