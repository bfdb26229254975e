"""
Bounded, single-flight generation with output parsing.

GenerationClient wraps a BaseLLMClient and makes one *logical* generation
dependable enough to build decisions on:

1. Reject prompts whose estimated token count exceeds the budget, before
   any backend call.
2. Keep at most one backend call in flight (SingleFlightGuard).
3. Race each backend call against a time budget.
4. Parse the raw text; retry the whole call on timeout or parse failure,
   up to ``max_retries`` extra attempts.

Usage:
    >>> client = GenerationClient(OllamaClient())
    >>> request = GenerationRequest(
    ...     model_id="mistral", system_prompt="...", user_prompt="...", parse=int
    ... )
    >>> value = await client.invoke(request)
"""

import asyncio
import inspect
from dataclasses import dataclass
from typing import Awaitable, Callable, Coroutine, Generic, Optional, TypeVar, Union

import structlog

from inbox_triage.config import Settings
from inbox_triage.llm.base_client import BaseLLMClient
from inbox_triage.llm.exceptions import (
    GenerationAbortedError,
    GenerationTimeoutError,
    ParseFailedError,
    PromptTooLongError,
)
from inbox_triage.llm.text_utils import build_generation_prompt, count_tokens
from inbox_triage.models.llm_models import LLMGenerationRequest, LLMGenerationResponse
from inbox_triage.monitoring.metrics import generation_attempts_total, prompt_rejections_total

logger = structlog.get_logger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_TOKEN_BUDGET = 3500

Tokenizer = Callable[[str], int]


@dataclass(frozen=True)
class GenerationRequest(Generic[T]):
    """
    One logical generation: prompts, model and the parser for its output.
    
    Attributes:
        model_id: Backend model name (e.g., "mistral")
        system_prompt: Instructions for the model
        user_prompt: The content to act on
        parse: Turns raw text into a value; may be async and may raise
        max_retries: Extra attempts allowed after the first one
    """

    model_id: str
    system_prompt: str
    user_prompt: str
    parse: Callable[[str], Union[T, Awaitable[T]]]
    max_retries: int = 3

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")

    @property
    def prompt(self) -> str:
        return build_generation_prompt(self.system_prompt, self.user_prompt)

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T
    attempts: int


@dataclass(frozen=True)
class TimedOut:
    attempts: int
    timeout: float


@dataclass(frozen=True)
class ParseFailed:
    attempts: int
    cause: Exception
    raw_text: str


@dataclass(frozen=True)
class PromptTooLong:
    token_estimate: int
    budget: int


GenerationOutcome = Union[Success[T], TimedOut, ParseFailed, PromptTooLong]


def unwrap_outcome(outcome: "GenerationOutcome[T]") -> T:
    """
    Return the value of a Success or raise the matching GenerationError.
    
    Raises:
        PromptTooLongError, GenerationTimeoutError, ParseFailedError
    """
    if isinstance(outcome, Success):
        return outcome.value
    if isinstance(outcome, PromptTooLong):
        raise PromptTooLongError(outcome.token_estimate, outcome.budget)
    if isinstance(outcome, TimedOut):
        raise GenerationTimeoutError(outcome.attempts, outcome.timeout)
    if isinstance(outcome, ParseFailed):
        raise ParseFailedError(outcome.attempts, outcome.raw_text) from outcome.cause
    raise TypeError(f"Unknown generation outcome: {outcome!r}")


class SingleFlightGuard:
    """
    Owns the one backend call allowed to be outstanding.
    
    Starting a new call first cancels the previous one (if still running)
    and asks the backend to abort anything it still has open.
    """

    def __init__(self, backend: BaseLLMClient):
        self._backend = backend
        self._task: Optional[asyncio.Task] = None

    @property
    def in_flight(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(
        self, call: Coroutine[None, None, LLMGenerationResponse]
    ) -> "asyncio.Task[LLMGenerationResponse]":
        await self.cancel()
        self._task = asyncio.create_task(call)
        return self._task

    async def cancel(self) -> None:
        task = self._task
        if task is None:
            return
        if not task.done():
            task.cancel()
            # asyncio.wait never raises the task's CancelledError into us
            await asyncio.wait({task})
            logger.debug("Cancelled outstanding generation")
            await self._backend.abort()
        elif not task.cancelled():
            # Mark a late failure as retrieved; it belongs to an abandoned attempt
            task.exception()
        self._task = None


class GenerationClient:
    """
    Reliability wrapper around a single LLM backend.
    
    Attributes:
        backend: Backend client issuing the actual HTTP calls
        timeout: Time budget per attempt, in seconds
        token_budget: Maximum estimated prompt tokens
        tokenizer: Deterministic token counter (gpt2 BPE by default)
    """

    def __init__(
        self,
        backend: BaseLLMClient,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        token_budget: int = DEFAULT_TOKEN_BUDGET,
        tokenizer: Optional[Tokenizer] = None,
    ):
        self.backend = backend
        self.timeout = timeout
        self.token_budget = token_budget
        self.tokenizer = tokenizer if tokenizer is not None else count_tokens
        self._guard = SingleFlightGuard(backend)

    @classmethod
    def from_settings(cls, backend: BaseLLMClient, settings: Settings) -> "GenerationClient":
        return cls(
            backend,
            timeout=settings.GENERATION_TIMEOUT_SECONDS,
            token_budget=settings.PROMPT_TOKEN_BUDGET,
        )

    @property
    def in_flight(self) -> bool:
        return self._guard.in_flight

    async def invoke(self, request: GenerationRequest[T]) -> T:
        """
        Run the bounded generation and return the parsed value.
        
        Raises:
            PromptTooLongError: Prompt over budget (no backend call made)
            GenerationTimeoutError: Every attempt timed out
            ParseFailedError: Last attempt's output failed to parse
            LLMClientError: Transport errors from the backend, unretried
        """
        return unwrap_outcome(await self.attempt(request))

    async def attempt(self, request: GenerationRequest[T]) -> "GenerationOutcome[T]":
        """
        Run the bounded generation and return its tagged outcome.
        
        Transport errors and GenerationAbortedError raise; every other
        failure comes back as an outcome.
        """
        prompt = request.prompt
        token_estimate = self.tokenizer(prompt)
        if token_estimate > self.token_budget:
            prompt_rejections_total.labels(model=request.model_id).inc()
            logger.warning(
                "Prompt exceeds token budget",
                model=request.model_id,
                token_estimate=token_estimate,
                budget=self.token_budget,
            )
            return PromptTooLong(token_estimate=token_estimate, budget=self.token_budget)

        llm_request = LLMGenerationRequest(prompt=prompt, model=request.model_id)
        max_attempts = request.max_attempts

        for attempt in range(1, max_attempts + 1):
            retries_left = max_attempts - attempt
            task = await self._guard.start(self.backend.generate(llm_request))
            done, _ = await asyncio.wait({task}, timeout=self.timeout)

            if not done:
                generation_attempts_total.labels(model=request.model_id, outcome="timeout").inc()
                if retries_left:
                    logger.warning(
                        "Model timed out, retrying",
                        model=request.model_id,
                        attempt=attempt,
                        retries_left=retries_left,
                    )
                    continue
                logger.error(
                    "Model timed out, out of retries",
                    model=request.model_id,
                    attempts=attempt,
                    timeout=self.timeout,
                )
                return TimedOut(attempts=attempt, timeout=self.timeout)

            if task.cancelled():
                logger.warning(
                    "Generation superseded by a newer request",
                    model=request.model_id,
                    attempt=attempt,
                )
                raise GenerationAbortedError(attempt)
            response = task.result()
            try:
                value = request.parse(response.content)
                if inspect.isawaitable(value):
                    value = await value
            except Exception as e:
                generation_attempts_total.labels(model=request.model_id, outcome="parse_failed").inc()
                if retries_left:
                    logger.warning(
                        "Response failed to parse, retrying",
                        model=request.model_id,
                        attempt=attempt,
                        retries_left=retries_left,
                        error=str(e),
                    )
                    continue
                logger.error(
                    "Response failed to parse, out of retries",
                    model=request.model_id,
                    attempts=attempt,
                    error=str(e),
                )
                return ParseFailed(attempts=attempt, cause=e, raw_text=response.content)

            generation_attempts_total.labels(model=request.model_id, outcome="success").inc()
            logger.debug("Generation parsed", model=request.model_id, attempt=attempt)
            return Success(value=value, attempts=attempt)

        # Should not reach here: max_attempts is always >= 1
        raise AssertionError("unreachable")

    async def close(self) -> None:
        """Cancel any generation left outstanding by a timed-out attempt."""
        await self._guard.cancel()

    async def __aenter__(self) -> "GenerationClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
