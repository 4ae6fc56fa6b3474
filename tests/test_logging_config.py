"""Tests for the console logging setup."""

import logging

from streaming_accounts.logging_config import configure_logging


def test_repeated_configuration_adds_one_handler():
    root = logging.getLogger()
    before = len(root.handlers)

    configure_logging("DEBUG")
    configure_logging("WARNING")

    assert len(root.handlers) <= before + 1
    assert root.level == logging.WARNING
