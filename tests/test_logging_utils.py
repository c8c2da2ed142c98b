"""Tests for logging utilities."""

import json
import logging

from block_service.logging_utils import (
    ServiceLoggerAdapter,
    StructuredJsonFormatter,
    configure_logging,
    configure_structured_logging,
)


def _record(msg: str = "hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord("block_service.test", logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredJsonFormatter:
    """Tests for StructuredJsonFormatter."""

    def test_standard_fields(self) -> None:
        """Output is one JSON object with the core fields."""
        payload = json.loads(StructuredJsonFormatter().format(_record()))

        assert payload["level"] == "INFO"
        assert payload["logger"] == "block_service.test"
        assert payload["message"] == "hello"
        assert "timestamp" in payload

    def test_extra_fields_included(self) -> None:
        """Extra context such as the CID is carried through."""
        payload = json.loads(StructuredJsonFormatter().format(_record(cid="Qm1", method="PUT")))

        assert payload["cid"] == "Qm1"
        assert payload["method"] == "PUT"

    def test_unserializable_extra_is_stringified(self) -> None:
        payload = json.loads(StructuredJsonFormatter().format(_record(blob=object())))

        assert payload["blob"].startswith("<object object")


class TestConfigure:
    """Tests for logger configuration helpers."""

    def test_configure_structured_logging_replaces_handlers(self) -> None:
        logger = configure_structured_logging(logging.DEBUG, "block_service.test_json")
        configure_structured_logging(logging.DEBUG, "block_service.test_json")

        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, StructuredJsonFormatter)
        assert logger.level == logging.DEBUG
        logger.handlers.clear()

    def test_configure_logging_accepts_level_names(self) -> None:
        root = logging.getLogger()
        previous = root.level
        try:
            configure_logging("warning")
            assert root.level == logging.WARNING
        finally:
            root.setLevel(previous)


class TestServiceLoggerAdapter:
    """Tests for ServiceLoggerAdapter."""

    def test_adds_context(self, caplog) -> None:
        """Adapter context lands on the record."""
        adapter = ServiceLoggerAdapter(logging.getLogger("block_service.test"), {"cid": "Qm1"})

        with caplog.at_level(logging.INFO, logger="block_service.test"):
            adapter.info("stored")

        assert caplog.records[-1].cid == "Qm1"
