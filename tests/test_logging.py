"""
Tests for logging helpers
"""

import logging

import pytest

from pos_retail.logging import SessionLogger, get_session_logger, sanitize_id_for_logging


class TestSanitizeId:

    @pytest.mark.parametrize("value,expected", [
        (None, "N/A"),
        ("", "N/A"),
        ("till-1", "till-1"),
        ("till-0001-front", "till-000"),
        ("a\nFAKE", "a\\nFAKE"),
    ])
    def test_sanitize(self, value, expected):
        assert sanitize_id_for_logging(value) == expected


class TestSessionLogger:

    def test_prefixes_session(self, caplog):
        log = get_session_logger("pos_retail.cart.service", "till-7")

        with caplog.at_level(logging.INFO):
            log.info("P1 x2")

        assert isinstance(log, SessionLogger)
        assert caplog.records[-1].getMessage() == "[till-7] P1 x2"
        assert caplog.records[-1].name == "pos_retail.cart.service"

    def test_forged_session_header_cannot_break_lines(self, caplog):
        log = get_session_logger(__name__, "x\n[till-1] fake")

        with caplog.at_level(logging.WARNING):
            log.warning("Corrupted cart dropped")

        message = caplog.records[-1].getMessage()
        assert "\n" not in message
        assert message.startswith("[x\\n[till")


@pytest.mark.asyncio
async def test_session_mutations_are_logged(session, sample_product, caplog):
    with caplog.at_level(logging.INFO, logger="pos_retail.cart.service"):
        line = await session.add_item(sample_product)
        await session.remove_line(line.line_id)

    messages = [r.getMessage() for r in caplog.records]
    assert "[till-1] P1 x1" in messages
    assert f"[till-1] removed line {line.line_id}" in messages
