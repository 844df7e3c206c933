"""Tests for structured logging utilities."""
import json
import logging

import pytest

from cinelut.utils.logging import (
    CinelutLogger,
    ErrorAggregator,
    JSONFormatter,
    LogConfig,
    TextFormatter,
    configure_from_cli,
    configure_logging,
    get_config,
    get_logger,
    set_level,
)


def make_record(name="cinelut.batch", msg="hello", level=logging.INFO, extra_fields=None):
    record = logging.LogRecord(name, level, __file__, 10, msg, None, None)
    if extra_fields is not None:
        record.extra_fields = extra_fields
    return record


class TestLogConfig:
    """Tests for LogConfig validation."""

    def test_defaults(self):
        """Test default configuration."""
        config = LogConfig()
        assert config.log_level == "INFO"
        assert config.log_format == "text"
        assert config.log_file is None

    def test_invalid_level(self):
        """Test an unknown level is rejected."""
        with pytest.raises(ValueError, match="log_level"):
            LogConfig(log_level="LOUD")

    def test_invalid_format(self):
        """Test an unknown format is rejected."""
        with pytest.raises(ValueError, match="log_format"):
            LogConfig(log_format="xml")

    def test_invalid_component_level(self):
        """Test component levels are validated."""
        with pytest.raises(ValueError, match="batch"):
            LogConfig(component_levels={"batch": "CHATTY"})

    def test_from_dict(self):
        """Test creation from a dictionary."""
        config = LogConfig.from_dict({"log_level": "DEBUG", "log_format": "json"})
        assert config.log_level == "DEBUG"
        assert config.log_format == "json"
        assert config.backup_count == 5


class TestFormatters:
    """Tests for log formatters."""

    def test_json_formatter(self):
        """Test one JSON object per record with structured fields."""
        record = make_record(extra_fields={"path": "out/a.cube", "size": 17})
        entry = json.loads(JSONFormatter().format(record))
        assert entry["level"] == "INFO"
        assert entry["component"] == "batch"
        assert entry["message"] == "hello"
        assert entry["path"] == "out/a.cube"
        assert entry["size"] == 17
        assert entry["timestamp"].endswith("Z")

    def test_json_formatter_source(self):
        """Test optional source location."""
        entry = json.loads(JSONFormatter(include_source=True).format(make_record()))
        assert entry["source"]["line"] == 10

    def test_text_formatter(self):
        """Test the text layout without a timestamp."""
        record = make_record(extra_fields={"size": 17})
        text = TextFormatter(include_timestamp=False).format(record)
        assert text.startswith("INFO ")
        assert "| batch " in text
        assert text.endswith("| hello [size=17]")

    def test_text_formatter_leaves_record_unchanged(self):
        """Test formatting does not rewrite the record message."""
        record = make_record(extra_fields={"size": 17})
        TextFormatter(include_timestamp=False).format(record)
        assert record.getMessage() == "hello"


class TestCinelutLogger:
    """Tests for the structured logger adapter."""

    def test_process_moves_fields(self):
        """Test keyword fields become extra_fields."""
        adapter = CinelutLogger(logging.getLogger("cinelut.test"), "test")
        msg, kwargs = adapter.process("hello", {"size": 3, "exc_info": False})
        assert msg == "hello"
        assert kwargs["exc_info"] is False
        assert kwargs["extra"]["extra_fields"] == {"size": 3}

    def test_get_logger_cached(self):
        """Test the same adapter is returned per component."""
        assert get_logger("cached") is get_logger("cached")

    def test_json_output(self, capsys):
        """Test records reach stderr as JSON."""
        configure_logging(LogConfig(log_format="json"))
        get_logger("jsontest").info("hello", size=2)

        entry = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert entry["component"] == "jsontest"
        assert entry["size"] == 2

    def test_lut_written(self, capsys):
        """Test the LUT written helper."""
        configure_logging(LogConfig(include_timestamp=False))
        get_logger("helpers").lut_written("out/a.cube", size=17, look="none")

        err = capsys.readouterr().err
        assert "LUT successfully written to out/a.cube" in err
        assert "size=17" in err

    def test_file_skipped(self, capsys):
        """Test the skipped file helper logs at error level."""
        configure_logging(LogConfig(include_timestamp=False))
        get_logger("helpers").file_skipped("a.json", ValueError("bad"))

        err = capsys.readouterr().err
        assert err.startswith("ERROR")
        assert "Skipping a.json: bad" in err
        assert "error_type=ValueError" in err

    def test_level_filtering(self, capsys):
        """Test records below the configured level are dropped."""
        configure_logging(LogConfig(log_level="WARNING"))
        get_logger("quiet").info("hidden")
        get_logger("quiet").warning("shown")

        err = capsys.readouterr().err
        assert "hidden" not in err
        assert "shown" in err

    def test_log_file(self, tmp_path):
        """Test records are also written to the log file."""
        log_file = tmp_path / "logs" / "run.log"
        configure_logging(LogConfig(log_file=str(log_file)))
        get_logger("filetest").info("to file")

        assert "to file" in log_file.read_text(encoding="utf-8")

    def test_set_level(self):
        """Test component levels can be changed at runtime."""
        set_level("DEBUG", "levels")
        try:
            assert logging.getLogger("cinelut.levels").level == logging.DEBUG
        finally:
            logging.getLogger("cinelut.levels").setLevel(logging.NOTSET)


class TestConfigureFromCli:
    """Tests for CLI logging setup."""

    def test_values(self):
        """Test CLI values are applied."""
        config = configure_from_cli(log_level="debug", log_format="json")
        assert config.log_level == "DEBUG"
        assert config.log_format == "json"
        assert get_config() is config

    def test_fallbacks(self):
        """Test missing or unknown values fall back to defaults."""
        config = configure_from_cli(log_level=None, log_format="xml")
        assert config.log_level == "INFO"
        assert config.log_format == "text"


class TestErrorAggregator:
    """Tests for ErrorAggregator."""

    def test_summary_by_type(self):
        """Test errors are counted by type."""
        aggregator = ErrorAggregator("agg")
        aggregator.add_error(ValueError("a"), context={"config_path": "a.json"})
        aggregator.add_error(ValueError("b"))
        aggregator.add_error(KeyError("c"))

        summary = aggregator.get_summary()
        assert summary["total_errors"] == 3
        assert summary["by_type"] == {"ValueError": 2, "KeyError": 1}
        assert summary["errors"][0]["context"] == {"config_path": "a.json"}
        assert aggregator.has_errors()

    def test_clear(self):
        """Test clearing recorded errors."""
        aggregator = ErrorAggregator("agg")
        aggregator.add_error(ValueError("a"))
        aggregator.clear()
        assert not aggregator.has_errors()
        assert aggregator.get_summary()["by_type"] == {}

    def test_log_summary(self, capsys):
        """Test the summary is logged as a warning."""
        configure_logging(LogConfig(include_timestamp=False))
        aggregator = ErrorAggregator("aggsummary")
        aggregator.add_error(ValueError("a"))
        aggregator.log_summary()

        err = capsys.readouterr().err
        assert "WARNING" in err
        assert "Error summary: 1 total errors" in err
