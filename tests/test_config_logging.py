"""Tests for EngineConfig, logging setup and logging decorators."""

import logging
import os
import time

import pytest

from costbasis import (
    EngineConfig,
    LogFileConfig,
    LoggerMixin,
    ValidationError,
    audit_log,
    cleanup_logs,
    get_log_stats,
    get_logger,
    log_calls,
    log_performance,
    setup_logging,
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in list(os.environ):
        if name.startswith(("COSTBASIS_", "LOG_")):
            monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def root_handlers():
    """Restore the root logger after setup_logging replaces its handlers."""
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    yield root
    for handler in root.handlers:
        if handler not in saved_handlers:
            handler.close()
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


class TestEngineConfig:
    def test_defaults(self, clean_env):
        cfg = EngineConfig()
        assert cfg.default_method == "fifo"
        assert cfg.price_mode == "strict"
        assert cfg.long_term_rule == "days"
        assert cfg.long_term_days == 365
        assert cfg.price_max_staleness_days == 0
        assert cfg.fiat_currency == "usd"
        assert cfg.lenient is False

    def test_environment_overrides(self, clean_env):
        clean_env.setenv("COSTBASIS_DEFAULT_METHOD", "HIFO")
        clean_env.setenv("COSTBASIS_PRICE_MODE", "lenient")
        clean_env.setenv("COSTBASIS_LONG_TERM_RULE", "calendar")
        clean_env.setenv("COSTBASIS_PRICE_MAX_STALENESS_DAYS", "3")
        cfg = EngineConfig()
        assert cfg.default_method == "hifo"
        assert cfg.lenient is True
        assert cfg.long_term_rule == "calendar"
        assert cfg.price_max_staleness_days == 3

    def test_keyword_overrides_win(self, clean_env):
        clean_env.setenv("COSTBASIS_PRICE_MODE", "lenient")
        assert EngineConfig(price_mode="strict").lenient is False

    @pytest.mark.parametrize(
        "overrides",
        [
            {"price_mode": "guess"},
            {"long_term_rule": "weeks"},
            {"long_term_days": -1},
            {"price_max_staleness_days": -2},
            {"no_such_option": True},
        ],
    )
    def test_invalid_values(self, clean_env, overrides):
        with pytest.raises(ValidationError):
            EngineConfig(**overrides)

    def test_non_integer_environment_value(self, clean_env):
        clean_env.setenv("COSTBASIS_LONG_TERM_DAYS", "a year")
        with pytest.raises(ValidationError):
            EngineConfig()


class TestLogging:
    def test_get_logger_namespaces_names(self):
        assert get_logger("costbasis.ledger").name == "costbasis.ledger"
        assert get_logger("scripts.loader").name == "costbasis.scripts.loader"
        assert get_logger().name == "costbasis"

    def test_parse_size(self, clean_env):
        cfg = LogFileConfig()
        assert cfg._parse_size("10MB") == 10 * 1024 * 1024
        assert cfg._parse_size("2kb") == 2048
        assert cfg._parse_size("1GB") == 1024**3
        assert cfg._parse_size("512") == 512

    def test_setup_logging_writes_file(self, clean_env, tmp_path, root_handlers):
        clean_env.setenv("LOG_DIR", str(tmp_path / "logs"))
        clean_env.setenv("LOG_LEVEL", "INFO")
        setup_logging()

        get_logger("costbasis.test").warning("written to the log file")
        for handler in root_handlers.handlers:
            handler.flush()

        log_file = tmp_path / "logs" / "costbasis.log"
        assert "written to the log file" in log_file.read_text(encoding="utf-8")
        stats = get_log_stats()
        assert stats["total_files"] == 1
        assert stats["files"][0]["name"] == "costbasis.log"

    def test_cleanup_removes_old_files(self, clean_env, tmp_path):
        clean_env.setenv("LOG_DIR", str(tmp_path))
        clean_env.setenv("LOG_AUTO_CLEANUP_DAYS", "1")
        old = tmp_path / "costbasis.log.1"
        old.write_text("old")
        stale = time.time() - 3 * 24 * 3600
        os.utime(old, (stale, stale))
        (tmp_path / "costbasis.log").write_text("new")

        assert cleanup_logs() == 1
        assert not old.exists()
        assert (tmp_path / "costbasis.log").exists()


class Ledgerish(LoggerMixin):
    @audit_log("EXPORT_TAX_REPORT")
    def export(self, portfolio_id, year):
        if year < 2009:
            raise ValueError("before genesis")
        return f"{portfolio_id}-{year}"


def test_logger_mixin_names_logger_after_class():
    assert Ledgerish().logger.name == f"costbasis.{__name__}.Ledgerish"


def test_audit_log_records_success_and_failure(caplog):
    caplog.set_level(logging.INFO, logger="costbasis.audit")
    obj = Ledgerish()

    assert obj.export("alice", 2023) == "alice-2023"
    with pytest.raises(ValueError):
        obj.export("alice", 2001)

    messages = [r.getMessage() for r in caplog.records if r.name == "costbasis.audit"]
    assert messages[0] == "AUDIT SUCCESS: ACTION=EXPORT_TAX_REPORT | ARGS=('alice', 2023)"
    assert messages[1].startswith("AUDIT FAILURE: ACTION=EXPORT_TAX_REPORT")
    assert "before genesis" in messages[1]


def test_log_calls_logs_entry_and_failure(caplog):
    caplog.set_level(logging.DEBUG, logger="costbasis.calls")

    @log_calls(logger_name="costbasis.calls")
    def halve(sat):
        if sat % 2:
            raise ValueError("odd")
        return sat // 2

    assert halve(10) == 5
    with pytest.raises(ValueError):
        halve(3)

    records = [r for r in caplog.records if r.name == "costbasis.calls"]
    assert records[0].getMessage().endswith("halve with args: (10)")
    assert records[1].getMessage().startswith("Completed")
    assert records[-1].levelno == logging.ERROR
    assert "ValueError: odd" in records[-1].getMessage()


def test_log_performance_reports_memory(caplog):
    caplog.set_level(logging.DEBUG, logger=f"costbasis.{__name__}")

    @log_performance(memory_tracking=True)
    def build_lots(n):
        return list(range(n))

    assert len(build_lots(1000)) == 1000
    (message,) = [r.getMessage() for r in caplog.records if "Performance:" in r.getMessage()]
    assert "build_lots completed in" in message
    assert "MB)" in message
