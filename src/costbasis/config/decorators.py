"""Logging decorators for engine operations.

Wrap a function to log its call, duration, or audit trail without
hand-written logging code in the function body.
"""

from collections.abc import Callable
import functools
import time
from typing import ParamSpec, TypeVar

from .logger import get_logger

P = ParamSpec("P")
T = TypeVar("T")


def _preview(value, limit: int) -> str:
    text = str(value)
    return text if len(text) <= limit else f"{text[:limit]}..."


def log_calls(
    logger_name: str | None = None,
    log_args: bool = True,
    log_result: bool = False,
    level: str = "DEBUG",
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """Decorator to log function entry, exit, timing and failures.

    Args:
        logger_name: Custom logger name, defaults to function's module
        log_args: Whether to log function arguments
        log_result: Whether to log function return value
        level: Log level for entry and exit messages

    Example:
        @log_calls()
        def compute_cost_basis(self, portfolio_id, method):
            ...
    """

    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        logger = get_logger(logger_name or func.__module__)
        log_level = getattr(logger, level.lower())

        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            func_name = func.__qualname__

            args_str = ""
            if log_args and (args or kwargs):
                parts = [_preview(arg, 100) for arg in args]
                parts.extend(f"{k}={_preview(v, 100)}" for k, v in kwargs.items())
                args_str = f" with args: ({', '.join(parts)})"
            log_level("Calling %s%s", func_name, args_str)

            start_time = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                elapsed = time.perf_counter() - start_time
                logger.error(
                    "Failed %s (failed after %.3fs): %s: %s",
                    func_name,
                    elapsed,
                    type(e).__name__,
                    e,
                )
                raise

            elapsed = time.perf_counter() - start_time
            result_str = f" -> {_preview(result, 200)}" if log_result else ""
            log_level("Completed %s (took %.3fs)%s", func_name, elapsed, result_str)
            return result

        return wrapper

    return decorator


def log_performance(
    warn_threshold: float = 1.0,
    error_threshold: float = 5.0,
    memory_tracking: bool = False,
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """Decorator for performance monitoring with configurable thresholds.

    Args:
        warn_threshold: Seconds after which to log a warning
        error_threshold: Seconds after which to log an error
        memory_tracking: Whether to report RSS growth (uses psutil)

    Example:
        @log_performance(warn_threshold=0.5)
        def replay(self, events, method):
            ...
    """

    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        logger = get_logger(func.__module__)

        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            func_name = func.__qualname__

            process = None
            start_memory = None
            if memory_tracking:
                import psutil

                process = psutil.Process()
                start_memory = process.memory_info().rss / 1024 / 1024

            start_time = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                elapsed = time.perf_counter() - start_time
                logger.error("Performance: %s failed after %.3fs: %s", func_name, elapsed, e)
                raise

            elapsed = time.perf_counter() - start_time
            memory_str = ""
            if process is not None:
                memory_diff = process.memory_info().rss / 1024 / 1024 - start_memory
                memory_str = f" (memory: {memory_diff:+.1f}MB)"

            message = f"Performance: {func_name} completed in {elapsed:.3f}s{memory_str}"
            if elapsed >= error_threshold:
                logger.error("SLOW PERFORMANCE: %s", message)
            elif elapsed >= warn_threshold:
                logger.warning("PERFORMANCE WARNING: %s", message)
            else:
                logger.debug(message)
            return result

        return wrapper

    return decorator


def log_database_operations(
    operation_type: str = "DATABASE",
    log_results: bool = False,
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """Decorator for logging repository operations with timing and error handling.

    Args:
        operation_type: Type of DB operation (CREATE, READ, UPDATE, DELETE)
        log_results: Whether to log the number of returned records
    """

    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        logger = get_logger(func.__module__)

        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            func_name = func.__name__
            logger.debug("Starting %s operation: %s", operation_type, func_name)

            start_time = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                elapsed = time.perf_counter() - start_time
                logger.error(
                    "Failed %s operation: %s (%.3fs): %s", operation_type, func_name, elapsed, e
                )
                raise

            elapsed = time.perf_counter() - start_time
            logger.debug(
                "Completed %s operation: %s (%.3fs)", operation_type, func_name, elapsed
            )
            if log_results and hasattr(result, "__len__"):
                logger.debug("Operation returned %d records", len(result))
            return result

        return wrapper

    return decorator


def audit_log(
    action: str,
    audit_logger_name: str = "costbasis.audit",
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """Decorator for audit logging of tax-relevant operations.

    Records the action, its arguments and whether it succeeded. The timestamp
    comes from the log record itself.

    Example:
        @audit_log("EXPORT_TAX_REPORT")
        def export_tax_report(self, portfolio_id, year, method):
            ...
    """

    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        audit_logger = get_logger(audit_logger_name)

        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            audit_parts = [f"ACTION={action}"]
            # Skip 'self'
            if args[1:]:
                audit_parts.append(f"ARGS={args[1:]}")
            if kwargs:
                audit_parts.append(f"KWARGS={kwargs}")
            audit_message = " | ".join(audit_parts)

            try:
                result = func(*args, **kwargs)
            except Exception as e:
                audit_logger.error("AUDIT FAILURE: %s | ERROR=%s", audit_message, e)
                raise
            audit_logger.info("AUDIT SUCCESS: %s", audit_message)
            return result

        return wrapper

    return decorator


class LoggerMixin:
    """Mixin class that provides a class-named logger.

    Example:
        class LotInventory(LoggerMixin):
            def add_lot(self, lot):
                self.logger.debug("Adding lot %s", lot.id)
    """

    def __init__(self, *args, **kwargs):
        """Initialize the mixin and set up the logger."""
        super().__init__(*args, **kwargs)
        self.logger = get_logger(f"{self.__class__.__module__}.{self.__class__.__name__}")

    def log_operation_start(self, operation: str, details: str = ""):
        """Log the start of an operation."""
        details_str = f": {details}" if details else ""
        self.logger.debug("Starting %s%s", operation, details_str)

    def log_operation_success(
        self, operation: str, duration: float | None = None, details: str = ""
    ):
        """Log successful completion of an operation."""
        timing_str = f" ({duration:.3f}s)" if duration else ""
        details_str = f": {details}" if details else ""
        self.logger.debug("Completed %s%s%s", operation, timing_str, details_str)
