"""
Pydantic data models for inbox triage.

Includes:
- Enums (Classification)
- Store models (Message, MessagePart, CacheEntry, StoreDocument)
- LLM models (LLMGenerationRequest, LLMGenerationResponse)
"""

from inbox_triage.models.enums import Classification
from inbox_triage.models.entries import (
    ENTRY_PROPERTIES,
    CacheEntry,
    Message,
    MessagePart,
    StoreDocument,
)
from inbox_triage.models.llm_models import (
    LLMGenerationRequest,
    LLMGenerationResponse,
)

__all__ = [
    "Classification",
    "ENTRY_PROPERTIES",
    "CacheEntry",
    "Message",
    "MessagePart",
    "StoreDocument",
    "LLMGenerationRequest",
    "LLMGenerationResponse",
]
