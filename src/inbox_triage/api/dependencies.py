"""
FastAPI dependency injection.

Provides singleton instances of the store handle and the LLM backend.
"""

from functools import lru_cache

from fastapi import Depends

from inbox_triage.config import Settings, settings
from inbox_triage.llm.base_client import BaseLLMClient
from inbox_triage.llm.ollama_client import OllamaClient
from inbox_triage.persistence.store import MemoizedStore


@lru_cache()
def get_settings() -> Settings:
    return settings


@lru_cache()
def get_store() -> MemoizedStore:
    """
    Open store handle shared by all requests.
    
    Every store operation re-reads the file, so edits made by a triage run
    in another process show up on the next request.
    """
    return MemoizedStore.from_settings(get_settings()).open()


def get_llm_client(settings: Settings = Depends(get_settings)) -> BaseLLMClient:
    return _llm_client(settings.OLLAMA_BASE_URL, settings.OLLAMA_TIMEOUT)


@lru_cache()
def _llm_client(base_url: str, timeout: int) -> BaseLLMClient:
    return OllamaClient(base_url=base_url, timeout=timeout)
