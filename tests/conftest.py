"""Shared test fixtures and configuration for all tests."""

import pytest

from inbox_triage.codec import gzip_base64_encode
from inbox_triage.config import Settings
from inbox_triage.models.entries import Message, MessagePart


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Test settings with safe defaults for local testing."""
    return Settings(
        APP_NAME="Inbox Triage (Test)",
        DEBUG=True,
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",
        OLLAMA_BASE_URL="http://localhost:11434",
        OLLAMA_MODEL="mistral",
        GENERATION_TIMEOUT_SECONDS=0.05,
        MAX_RETRIES=3,
        STORE_PATH=str(tmp_path / "db.json"),
        PROMETHEUS_ENABLED=False,
    )


@pytest.fixture
def create_test_message():
    """Factory fixture to create a Message with plain and/or HTML bodies.
    
    Usage:
        def test_something(create_test_message):
            message = create_test_message(html="<a href='...'>unsubscribe</a>")
    """
    def _create(
        message_id: str = "msg_001",
        subject: str = "Spring sale",
        plain: str | None = "Everything is 20% off this week.",
        html: str | None = None,
        sender: str = '"Shop" <news@shop.example>',
    ) -> Message:
        parts = []
        if plain is not None:
            parts.append(MessagePart(
                mime_type="text/plain",
                compressed_body=gzip_base64_encode(plain.encode("utf-8")),
            ))
        if html is not None:
            parts.append(MessagePart(
                mime_type="text/html",
                compressed_body=gzip_base64_encode(html.encode("utf-8")),
            ))
        return Message(
            id=message_id,
            subject=subject,
            snippet=subject.lower(),
            to="me@example.com",
            from_=sender,
            date="Thu, 1 Jan 2026 12:00:00 +0000",
            mime_type="multipart/alternative",
            body=parts,
        )
    
    return _create
