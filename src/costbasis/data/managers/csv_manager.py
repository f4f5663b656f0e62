"""CSV Manager for reading/writing CSV data."""

import csv
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

from costbasis.config.decorators import log_calls, log_performance
from costbasis.config.logger import get_logger

logger = get_logger(__name__)


class CSVManager:
    """Manager for reading/writing CSV data."""

    @log_calls()
    @log_performance()
    @staticmethod
    def read_csv(file_path: str, as_text: bool = True, **kwargs: Any) -> list[dict[str, Any]]:
        """Read a CSV file and return a list of dictionaries.

        Args:
            file_path: Path to the CSV file.
            as_text: Keep every cell as text so amounts and prices reach the
                ledger exactly as written. Empty cells become ``None``.
            **kwargs: Additional arguments to pass to pandas.read_csv.

        Raises:
            FileNotFoundError: the file does not exist.
        """
        path = Path(file_path)
        if not path.exists():
            logger.error("CSV file not found: %s", file_path)
            raise FileNotFoundError(file_path)

        if as_text:
            kwargs.setdefault("dtype", str)
        df = pd.read_csv(path, skipinitialspace=True, **kwargs)
        df = df.astype(object).replace({np.nan: None})
        logger.info("Read %d rows from %s", len(df), file_path)
        return df.to_dict(orient="records")

    @log_calls()
    @log_performance()
    @staticmethod
    def write_csv(items: list[dict[str, Any]], file_path: str) -> None:
        """Write a list of dictionaries to a CSV file."""
        if not items:
            logger.warning("No items to write to CSV.")
            return

        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open(mode="w", newline="", encoding="utf-8") as csvfile:
            writer = csv.DictWriter(csvfile, fieldnames=list(items[0].keys()))
            writer.writeheader()
            writer.writerows(items)

        logger.info("Wrote %d items to %s", len(items), file_path)

    @staticmethod
    def write_text(text: str, file_path: str) -> Path:
        """Write already rendered CSV text verbatim."""
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open(mode="w", newline="", encoding="utf-8") as f:
            f.write(text)
        logger.info("Wrote %d bytes to %s", len(text), file_path)
        return path
