"""
Logging subsystem tests.

Run with:
    pytest tests/test_logger.py -v
"""

import logging

from lopext.logger import LogManager, TerminalSafeFormatter, get_logger


class TestTerminalSafeFormatter:

    def test_strips_ansi_and_control_chars(self):
        text = "\x1b[31mred\x1b[0m order\r\x07 0xabc"
        assert TerminalSafeFormatter.sanitize(text) == "red order 0xabc"

    def test_keeps_tabs_and_newlines(self):
        assert TerminalSafeFormatter.sanitize("a\tb\nc") == "a\tb\nc"

    def test_format_sanitizes_message(self):
        formatter = TerminalSafeFormatter(fmt="%(message)s")
        record = logging.LogRecord(
            name="lopext", level=logging.INFO, pathname="", lineno=0,
            msg="hash %s", args=("\x1b[1m0x01",), exc_info=None,
        )
        assert formatter.format(record) == "hash 0x01"


class TestLogManager:

    def test_singleton(self):
        assert LogManager() is LogManager()

    def test_get_logger_configures(self):
        logger = get_logger("lopext.builder")
        assert logger.name == "lopext.builder"
        assert LogManager().is_configured

    def test_invalid_format_falls_back(self):
        assert LogManager.validate_log_format("%(nope)s") != "%(nope)s"
