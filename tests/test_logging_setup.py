"""Tests for the logging configuration."""

import logging

from shared.logging.logging_setup import (
    ColorLogger,
    ConsoleFormatter,
    ZonedFormatter,
    build_logging_config,
)


def make_record(level: int, msg: str, *args, **attrs) -> logging.LogRecord:
    record = logging.LogRecord("worknote_bridge", level, __file__, 1, msg, args, None)
    record.__dict__.update(attrs)
    return record


class TestBuildLoggingConfig:
    def test_console_only(self):
        config = build_logging_config(logging.INFO, "UTC")

        assert list(config["handlers"]) == ["console"]
        assert config["root"] == {"handlers": ["console"], "level": logging.INFO}

    def test_with_log_file(self, tmp_path):
        log_file = str(tmp_path / "app.log")
        config = build_logging_config(logging.DEBUG, "UTC", log_file)

        assert config["handlers"]["file"]["filename"] == log_file
        assert config["handlers"]["file"]["formatter"] == "plain"
        assert config["root"]["handlers"] == ["console", "file"]


class TestFormatters:
    def test_warning_marker_and_args(self):
        formatter = ZonedFormatter("UTC", fmt="%(message)s")

        line = formatter.format(make_record(logging.WARNING, "missing %s", "W1"))

        assert line == "⚠️ missing W1"

    def test_original_record_is_untouched(self):
        formatter = ZonedFormatter("UTC", fmt="%(message)s")
        record = make_record(logging.ERROR, "failed %d", 3)

        formatter.format(record)

        assert record.msg == "failed %d"
        assert record.args == (3,)

    def test_explicit_color_wins(self):
        formatter = ConsoleFormatter("UTC", fmt="%(message)s")

        line = formatter.format(make_record(logging.WARNING, "done", color="green"))

        assert line.startswith("\033[32m")
        assert line.endswith("\033[0m")

    def test_info_without_color_is_plain(self):
        formatter = ConsoleFormatter("UTC", fmt="%(message)s")

        assert formatter.format(make_record(logging.INFO, "ready")) == "ready"


class TestColorLogger:
    def test_color_is_passed_as_extra(self, caplog):
        logger = ColorLogger(logging.getLogger("worknote_bridge.test"))

        with caplog.at_level(logging.INFO, logger="worknote_bridge.test"):
            logger.info("indexed %d notes", 4, color="green")

        record = caplog.records[-1]
        assert record.getMessage() == "indexed 4 notes"
        assert record.color == "green"

    def test_unknown_attributes_come_from_wrapped_logger(self):
        wrapped = logging.getLogger("worknote_bridge.test")
        assert ColorLogger(wrapped).name == "worknote_bridge.test"

    def test_caller_stacklevel_is_respected(self, caplog):
        logger = ColorLogger(logging.getLogger("worknote_bridge.test"))

        with caplog.at_level(logging.WARNING, logger="worknote_bridge.test"):
            logger.warning("explicit frame", stacklevel=1)
            logger.error("with traceback", exc_info=False, stacklevel=2)

        assert [record.getMessage() for record in caplog.records[-2:]] == ["explicit frame", "with traceback"]

    def test_record_points_at_the_calling_function(self, caplog):
        logger = ColorLogger(logging.getLogger("worknote_bridge.test"))

        with caplog.at_level(logging.INFO, logger="worknote_bridge.test"):
            logger.info("from the test")

        assert caplog.records[-1].funcName == "test_record_points_at_the_calling_function"
