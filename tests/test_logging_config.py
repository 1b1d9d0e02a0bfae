"""Tests for setup_logging."""

import logging

from deal_analyzer.logging_config import NOISY_LOGGERS, setup_logging


def test_sets_root_level():
    setup_logging("warning")
    assert logging.getLogger().level == logging.WARNING
    setup_logging("DEBUG")
    assert logging.getLogger().level == logging.DEBUG


def test_http_clients_stay_quiet_in_debug():
    setup_logging("DEBUG")
    for name in NOISY_LOGGERS:
        assert logging.getLogger(name).level == logging.WARNING


def test_unknown_level_defaults_to_info():
    setup_logging("chatty")
    assert logging.getLogger().level == logging.INFO
