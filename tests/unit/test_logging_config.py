"""Unit tests for logging setup."""

import logging

import structlog

from inbox_triage.logging_config import configure_logging, message_context


def test_message_context_binds_and_restores():
    structlog.contextvars.clear_contextvars()
    
    with message_context("msg_001", stage="classify"):
        assert structlog.contextvars.get_contextvars() == {
            "message_id": "msg_001",
            "stage": "classify",
        }
    
    assert structlog.contextvars.get_contextvars() == {}


def test_configure_logging_sets_levels():
    configure_logging("DEBUG", "production")
    
    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.WARNING


def test_unknown_level_falls_back_to_info():
    configure_logging("chatty")
    
    assert logging.getLogger().level == logging.INFO
