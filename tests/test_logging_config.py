"""
Tests for logging configuration.
"""

import logging

import pytest

from watchhook.logging_config import ClientNoiseFilter, get_logging_config


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "message", None, None)


def test_config_uses_level():
    config = get_logging_config("debug")
    assert config["loggers"]["watchhook"]["level"] == "DEBUG"
    assert config["root"]["level"] == "DEBUG"
    assert config["handlers"]["default"]["stream"] == "ext://sys.stderr"


def test_unknown_level_rejected():
    with pytest.raises(ValueError):
        get_logging_config("LOUD")


def test_filter_hides_client_noise_at_info():
    noise_filter = ClientNoiseFilter(logging.INFO)
    assert not noise_filter.filter(_record("urllib3.connectionpool", logging.INFO))
    assert not noise_filter.filter(_record("kubernetes.client.rest", logging.DEBUG))
    assert noise_filter.filter(_record("kubernetes.client.rest", logging.WARNING))
    assert noise_filter.filter(_record("watchhook.main", logging.INFO))


def test_filter_passes_everything_at_debug():
    noise_filter = ClientNoiseFilter(logging.DEBUG)
    assert noise_filter.filter(_record("urllib3.connectionpool", logging.DEBUG))
