"""
LLM client abstraction and the bounded generation layer.

Components:
- BaseLLMClient: Abstract base class for LLM backends
- OllamaClient: Implementation for the Ollama inference server
- GenerationClient: Token budget, time budget, single-flight, parse + retry
- GenerationRequest / outcomes: Inputs and tagged results of a generation
- text_utils: Token estimation and prompt helpers
- exceptions: LLM-specific exceptions
"""

from inbox_triage.llm.base_client import BaseLLMClient
from inbox_triage.llm.ollama_client import OllamaClient
from inbox_triage.llm.generation import (
    GenerationClient,
    GenerationOutcome,
    GenerationRequest,
    ParseFailed,
    PromptTooLong,
    SingleFlightGuard,
    Success,
    TimedOut,
    unwrap_outcome,
)
from inbox_triage.llm.exceptions import (
    GenerationAbortedError,
    GenerationError,
    GenerationTimeoutError,
    LLMClientError,
    LLMConnectionError,
    LLMGenerationError,
    LLMModelNotAvailableError,
    LLMTimeoutError,
    ParseFailedError,
    PromptTooLongError,
)

__all__ = [
    "BaseLLMClient",
    "OllamaClient",
    "GenerationClient",
    "GenerationOutcome",
    "GenerationRequest",
    "ParseFailed",
    "PromptTooLong",
    "SingleFlightGuard",
    "Success",
    "TimedOut",
    "unwrap_outcome",
    "GenerationAbortedError",
    "GenerationError",
    "GenerationTimeoutError",
    "LLMClientError",
    "LLMConnectionError",
    "LLMGenerationError",
    "LLMModelNotAvailableError",
    "LLMTimeoutError",
    "ParseFailedError",
    "PromptTooLongError",
]
