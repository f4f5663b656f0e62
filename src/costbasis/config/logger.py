"""Logging configuration for the cost-basis engine.

One call to ``setup_logging()`` at startup; modules then use
``get_logger(__name__)``.
"""

from datetime import datetime, timezone
import logging
import logging.handlers
import os
from pathlib import Path
import time

from dotenv import load_dotenv


class LogFileConfig:
    """Configuration class for log file management."""

    def __init__(self):
        """Initialize configuration from environment variables."""
        load_dotenv()

        # File rotation settings
        self.max_file_size = self._parse_size(os.getenv("LOG_MAX_FILE_SIZE", "10MB"))
        self.backup_count = int(os.getenv("LOG_BACKUP_COUNT", "5"))
        self.rotation_type = os.getenv("LOG_ROTATION_TYPE", "size").lower()  # size, time
        self.rotation_when = os.getenv("LOG_ROTATION_WHEN", "midnight").lower()

        # File organization
        self.log_dir = Path(os.getenv("LOG_DIR", "logs"))
        self.base_filename = os.getenv("LOG_BASE_FILENAME", "costbasis")

        self.auto_cleanup_days = int(os.getenv("LOG_AUTO_CLEANUP_DAYS", "30"))

    def _parse_size(self, size_str: str) -> int:
        """Parse size string like '10MB', '1GB' to bytes."""
        size_str = size_str.upper().strip()

        if size_str.endswith("KB"):
            return int(size_str[:-2]) * 1024
        if size_str.endswith("MB"):
            return int(size_str[:-2]) * 1024 * 1024
        if size_str.endswith("GB"):
            return int(size_str[:-2]) * 1024 * 1024 * 1024
        # Assume bytes
        return int(size_str)

    def get_log_file_path(self) -> Path:
        """Get the main log file path."""
        return self.log_dir / f"{self.base_filename}.log"

    def create_log_directory(self):
        """Create log directory structure."""
        self.log_dir.mkdir(parents=True, exist_ok=True)


class LogFileManager:
    """Creates the rotating file handler and prunes old log files."""

    def __init__(self, config: LogFileConfig):
        """Initialize with a LogFileConfig instance."""
        self.config = config

    def create_file_handler(self) -> logging.Handler:
        """Create appropriate file handler based on configuration."""
        self.config.create_log_directory()
        log_file_path = self.config.get_log_file_path()

        if self.config.rotation_type == "time":
            return logging.handlers.TimedRotatingFileHandler(
                log_file_path,
                when=self.config.rotation_when,
                backupCount=self.config.backup_count,
                utc=True,
            )

        return logging.handlers.RotatingFileHandler(
            log_file_path,
            maxBytes=self.config.max_file_size,
            backupCount=self.config.backup_count,
        )

    def cleanup_old_logs(self) -> int:
        """Delete rotated log files older than the configured age.

        Returns:
            Number of files removed
        """
        if self.config.auto_cleanup_days <= 0 or not self.config.log_dir.exists():
            return 0

        cutoff_time = time.time() - (self.config.auto_cleanup_days * 24 * 3600)
        removed = 0
        for log_file in self.config.log_dir.glob("*.log*"):
            try:
                if log_file.stat().st_mtime < cutoff_time:
                    log_file.unlink()
                    removed += 1
            except OSError:
                # Skip files we can't process
                continue
        return removed


def setup_logging(config: LogFileConfig = None):
    """Set up logging configuration for the entire application.

    Call this once at application startup.

    Args:
        config: Optional LogFileConfig for custom file management settings
    """
    load_dotenv()

    if config is None:
        config = LogFileConfig()

    environment = os.getenv("ENVIRONMENT", "development").lower()
    log_level = os.getenv("LOG_LEVEL", "").upper()
    third_party_level = os.getenv("LOG_THIRD_PARTY_LEVEL", "WARNING").upper()

    if log_level and hasattr(logging, log_level):
        level = getattr(logging, log_level)
    elif environment == "production":
        level = logging.INFO
    else:
        level = logging.DEBUG

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s", datefmt="%H:%M:%S"
        )
    )

    file_manager = LogFileManager(config)
    file_handler = file_manager.create_file_handler()
    file_handler.setLevel(logging.DEBUG)  # Always capture all levels in file
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s:%(lineno)d | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    logging.getLogger("sqlalchemy.engine").setLevel(third_party_level)

    file_manager.cleanup_old_logs()

    logger = logging.getLogger("costbasis.config")
    logger.info(
        "Logging initialized - Environment: %s, Level: %s",
        environment,
        logging.getLevelName(level),
    )


def get_logger(name: str | None = None):
    """Get a logger for a module.

    Args:
        name: Logger name, typically __name__ from the calling module

    Returns:
        Logger instance under the ``costbasis`` hierarchy

    Example:
        logger = get_logger(__name__)
        logger.info("Something happened")
    """
    if name is None:
        name = "costbasis"
    elif callable(name):
        name = getattr(name, "__module__", "costbasis")
    elif not isinstance(name, str):
        name = str(name)

    if not name.startswith("costbasis"):
        name = f"costbasis.{name}" if name else "costbasis"

    return logging.getLogger(name)


def cleanup_logs(config: LogFileConfig = None) -> int:
    """Manually trigger log cleanup.

    Args:
        config: Optional LogFileConfig, defaults to environment settings
    """
    if config is None:
        config = LogFileConfig()

    removed = LogFileManager(config).cleanup_old_logs()
    get_logger("costbasis.config").info("Manual log cleanup removed %d files", removed)
    return removed


def get_log_stats(config: LogFileConfig = None) -> dict:
    """Get statistics about current log files."""
    if config is None:
        config = LogFileConfig()

    stats = {"log_dir": str(config.log_dir), "total_files": 0, "files": []}
    if config.log_dir.exists():
        for log_file in sorted(config.log_dir.glob("*.log*")):
            try:
                stat = log_file.stat()
            except OSError:
                continue
            stats["files"].append(
                {
                    "name": log_file.name,
                    "size_bytes": stat.st_size,
                    "modified": datetime.fromtimestamp(
                        stat.st_mtime, tz=timezone.utc
                    ).isoformat(),
                }
            )
            stats["total_files"] += 1
    return stats
