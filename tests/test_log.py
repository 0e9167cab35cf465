"""Tests for logging setup."""

import logging

from report_api.log import ColorFormatter, banner, setup_logging


def _ours(root):
    return [h for h in root.handlers if getattr(h, "_report_api", False)]


def test_setup_is_idempotent():
    root = setup_logging("INFO")
    setup_logging("DEBUG")
    assert len(_ours(root)) == 1
    assert root.level == logging.DEBUG
    root.setLevel(logging.INFO)


def test_formatter_keeps_message():
    fmt = ColorFormatter("%(levelname_colored)s %(message)s")
    record = logging.LogRecord("x", logging.WARNING, __file__, 1, "pool closed", None, None)
    out = fmt.format(record)
    assert "WARNING" in out
    assert out.endswith("pool closed")


def test_banner_prints_rows(capsys):
    banner("Reporting API", [("Listen", "0.0.0.0:10000")])
    out = capsys.readouterr().out
    assert "Reporting API" in out
    assert "0.0.0.0:10000" in out
