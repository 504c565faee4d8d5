"""Tests for the diagnostics collector."""

import logging

from gochunk_mcp.diagnostics import Diagnostics


def test_records_are_kept_in_order_and_logged(caplog):
    logger = logging.getLogger("gochunk_mcp.test")
    diagnostics = Diagnostics(logger)

    with caplog.at_level(logging.INFO, logger="gochunk_mcp.test"):
        diagnostics.info("loaded 3 packages")
        diagnostics.warning("Vendor directory does NOT exist", path="/src/app/vendor")
        diagnostics.error("Error reading file /src/app/a.go", file="/src/app/a.go")

    assert [d.severity for d in diagnostics.records] == ["info", "warning", "error"]
    assert diagnostics.records[1].context == {"path": "/src/app/vendor"}
    assert diagnostics.records[2].source == "gochunk_mcp.test"
    assert [r.levelno for r in caplog.records] == [logging.INFO, logging.WARNING, logging.ERROR]
    assert len(diagnostics) == 3


def test_messages_filter_by_severity():
    diagnostics = Diagnostics()
    diagnostics.info("a")
    diagnostics.warning("b")
    diagnostics.error("c")

    assert diagnostics.messages() == ["b", "c"]
    assert diagnostics.messages("info") == ["a", "b", "c"]
    assert diagnostics.messages("error") == ["c"]
    assert [d.message for d in diagnostics.warnings] == ["b", "c"]


def test_reporting_logger_overrides_default():
    diagnostics = Diagnostics()
    other = logging.getLogger("gochunk_mcp.chunker.extractor")

    record = diagnostics.warning("skipped", logger=other, line=4)

    assert record.source == "gochunk_mcp.chunker.extractor"
    assert record.to_dict() == {
        "severity": "warning",
        "message": "skipped",
        "source": "gochunk_mcp.chunker.extractor",
        "context": {"line": 4},
    }
