"""Unit test fixtures (fakes and stubs).

Provides factories over the scripted LLM backend so the reliability layer
can be tested without a running Ollama server.
"""

from typing import Any, Iterable
from unittest.mock import AsyncMock

import pytest

from fakes import ScriptedBackend
from inbox_triage.consensus.runner import ConsensusRunner
from inbox_triage.llm.generation import GenerationClient
from inbox_triage.llm.text_utils import count_tokens_approximate, get_encoding
from inbox_triage.persistence.store import MemoizedStore


@pytest.fixture(autouse=True)
def offline_token_count(monkeypatch):
    """Count tokens without the gpt2 vocabulary, which tiktoken downloads on first use."""
    monkeypatch.setattr("inbox_triage.llm.generation.count_tokens", count_tokens_approximate)


@pytest.fixture
def gpt2_encoding():
    """The real gpt2 encoding; skips when it cannot be loaded (e.g. offline)."""
    try:
        return get_encoding("gpt2")
    except Exception as e:
        pytest.skip(f"gpt2 encoding not available: {e}")


@pytest.fixture
def make_generation_client():
    """Factory building a GenerationClient over scripted replies."""
    def _make(replies: Iterable[Any], timeout: float = 0.05, **kwargs) -> GenerationClient:
        return GenerationClient(ScriptedBackend(replies), timeout=timeout, **kwargs)
    
    return _make


@pytest.fixture
def make_runner(make_generation_client):
    """Factory building a ConsensusRunner over scripted replies."""
    def _make(replies: Iterable[Any], timeout: float = 0.05, **kwargs) -> ConsensusRunner:
        return ConsensusRunner(make_generation_client(replies, timeout=timeout), **kwargs)
    
    return _make


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "db.json"


@pytest.fixture
async def store(store_path):
    """Open MemoizedStore on a temp file."""
    async with MemoizedStore(store_path) as opened:
        yield opened


@pytest.fixture
def mock_renderer():
    """Mock HtmlRenderer returning fixed text and a two-link lookup."""
    mock = AsyncMock()
    mock.render_text = AsyncMock(return_value="Rendered HTML text")
    mock.render_labeled_anchors = AsyncMock(return_value=(
        "Shop now [Shop][0]. Tired of us? [Unsubscribe][1]",
        {0: "https://shop.example/sale", 1: "https://shop.example/unsubscribe?u=42"},
    ))
    return mock
