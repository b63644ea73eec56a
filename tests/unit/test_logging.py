"""Unit tests for build logging."""

import io
import json
import logging

import pytest

from trellis.utils.logging import (
    ROOT_LOGGER,
    HumanFormatter,
    JSONFormatter,
    LogMode,
    VerboseFormatter,
    configure_from_cli,
    get_logger,
    log_structured,
    setup_logging,
)


def _record(msg: str = "hello", level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord(ROOT_LOGGER, level, __file__, 1, msg, None, None)


class TestFormatters:
    """Tests for the three output formats."""

    def test_human_plain(self) -> None:
        """Test human format without colors."""
        assert HumanFormatter(use_colors=False).format(_record()) == "[INFO] hello"

    def test_human_colored(self) -> None:
        """Test human format wraps the level in color codes."""
        line = HumanFormatter(use_colors=True).format(_record(level=logging.ERROR))

        assert line.startswith("\033[31m[ERROR]\033[0m")
        assert line.endswith(" hello")

    def test_verbose_has_timestamp(self) -> None:
        """Test verbose format adds HH:MM:SS."""
        line = VerboseFormatter(use_colors=False).format(_record())

        assert line.startswith("[INFO][")
        assert line[7:15].count(":") == 2
        assert line.endswith("] hello")

    def test_json_fields(self) -> None:
        """Test JSON format carries level, timestamp and message."""
        data = json.loads(JSONFormatter().format(_record("built")))

        assert data["level"] == "INFO"
        assert data["msg"] == "built"
        assert data["ts"].endswith("+00:00")


class TestSetupLogging:
    """Tests for logger configuration."""

    def test_structured_fields_in_json(self) -> None:
        """Test log_structured fields reach JSON output."""
        stream = io.StringIO()
        setup_logging(LogMode.JSON, stream=stream)

        log_structured(
            get_logger("trellis.build"),
            logging.ERROR,
            "Page failed",
            page="blog",
            kind="unknown_layout",
        )

        data = json.loads(stream.getvalue())
        assert data["msg"] == "Page failed"
        assert data["page"] == "blog"
        assert data["kind"] == "unknown_layout"

    def test_level_filters_messages(self) -> None:
        """Test messages below the configured level are dropped."""
        stream = io.StringIO()
        setup_logging(LogMode.HUMAN, level=logging.WARNING, stream=stream)

        get_logger().info("quiet")
        get_logger().warning("loud")

        assert stream.getvalue() == "[WARNING] loud\n"

    def test_setup_replaces_handlers(self) -> None:
        """Test repeated setup does not stack handlers."""
        setup_logging(stream=io.StringIO())
        setup_logging(stream=io.StringIO())

        assert len(logging.getLogger(ROOT_LOGGER).handlers) == 1

    @pytest.mark.parametrize(
        ("flags", "level", "formatter"),
        [
            ({}, logging.INFO, HumanFormatter),
            ({"verbose": True}, logging.DEBUG, VerboseFormatter),
            ({"quiet": True}, logging.WARNING, HumanFormatter),
            ({"ci": True}, logging.INFO, JSONFormatter),
        ],
    )
    def test_configure_from_cli(self, flags: dict[str, bool], level: int, formatter: type) -> None:
        """Test CLI flags map to a level and formatter."""
        configure_from_cli(**flags)

        logger = logging.getLogger(ROOT_LOGGER)
        assert logger.level == level
        assert type(logger.handlers[0].formatter) is formatter
