import logging

import pytest

from phasematch.utils.logging import LOG_FORMAT, format_duration, log_backend, setup_logging


def test_format_duration_units():
    assert format_duration(5e-4) == "500µs"
    assert format_duration(0.0123) == "12.3ms"
    assert format_duration(2.5) == "2.50s"
    assert format_duration(-1.0) == "0µs"


def test_setup_logging_rejects_unknown_level():
    with pytest.raises(ValueError):
        setup_logging("chatty")


def test_log_backend_reports_dtype(caplog):
    with caplog.at_level(logging.DEBUG, logger="phasematch"):
        log_backend("float32")
    assert any("float32" in r.getMessage() for r in caplog.records)
    assert "%(name)s" in LOG_FORMAT
