"""
Consensus voting over a non-deterministic generation backend.

ConsensusRunner samples the same GenerationRequest repeatedly and returns the
first answer to be produced ``threshold`` times (2 by default). The first
answer to reach the threshold wins, not the most frequent one at the end.

Without ``max_attempts`` the runner samples until agreement, which never
happens against a backend that keeps giving new answers. Setting
``max_attempts`` bounds the run; the ``fallback`` policy then decides between
raising ConsensusNotReachedError and returning the most frequent answer.
"""

from typing import Generic, Literal, Optional, TypeVar

import structlog

from inbox_triage.config import Settings
from inbox_triage.consensus.exceptions import ConsensusNotReachedError
from inbox_triage.consensus.tally import ConsensusTally
from inbox_triage.llm.generation import GenerationClient, GenerationRequest
from inbox_triage.monitoring.metrics import consensus_samples

logger = structlog.get_logger(__name__)

T = TypeVar("T")

FallbackPolicy = Literal["raise", "most_frequent"]


class ConsensusRunner(Generic[T]):
    """
    Repeats a generation until two samples agree.
    
    Generation failures (timeout, parse, prompt too long, transport) propagate
    unchanged; the runner adds no retries of its own.
    
    Attributes:
        generation_client: Bounded generation layer to sample from
        threshold: Votes an answer needs to win
        max_attempts: Sample cap, or None to sample until agreement
        fallback: Policy once max_attempts is reached
    """

    def __init__(
        self,
        generation_client: GenerationClient,
        threshold: int = 2,
        max_attempts: Optional[int] = None,
        fallback: FallbackPolicy = "raise",
    ):
        if threshold < 1:
            raise ValueError("threshold must be >= 1")
        if max_attempts is not None and max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if fallback not in ("raise", "most_frequent"):
            raise ValueError(f"Unknown fallback policy: {fallback}")

        self.generation_client = generation_client
        self.threshold = threshold
        self.max_attempts = max_attempts
        self.fallback = fallback

    @classmethod
    def from_settings(
        cls, generation_client: GenerationClient, settings: Settings
    ) -> "ConsensusRunner":
        return cls(
            generation_client,
            threshold=settings.CONSENSUS_THRESHOLD,
            max_attempts=settings.CONSENSUS_MAX_ATTEMPTS,
            fallback=settings.CONSENSUS_FALLBACK,
        )

    async def run(self, request: GenerationRequest[T]) -> T:
        """
        Sample ``request`` until an answer reaches the threshold.
        
        Returns:
            The agreed value (first-sampled instance of it)
        
        Raises:
            ConsensusNotReachedError: Cap reached with fallback="raise"
            GenerationError / LLMClientError: From the generation layer
        """
        tally: ConsensusTally[T] = ConsensusTally()

        while self.max_attempts is None or tally.samples < self.max_attempts:
            try:
                value = await self.generation_client.invoke(request)
            except Exception:
                consensus_samples.labels(outcome="failed").observe(tally.samples + 1)
                raise

            votes = tally.record(value)
            logger.debug(
                "Consensus sample",
                model=request.model_id,
                sample=tally.samples,
                votes=votes,
                distinct=len(tally),
            )
            if votes >= self.threshold:
                consensus_samples.labels(outcome="agreed").observe(tally.samples)
                logger.info(
                    "Consensus reached",
                    model=request.model_id,
                    samples=tally.samples,
                    distinct=len(tally),
                )
                return tally.value_for(value)

        return self._fall_back(tally, request)

    def _fall_back(self, tally: ConsensusTally[T], request: GenerationRequest[T]) -> T:
        leader = tally.most_frequent()
        if self.fallback == "most_frequent" and leader is not None:
            value, votes = leader
            consensus_samples.labels(outcome="fallback").observe(tally.samples)
            logger.warning(
                "Consensus not reached, using most frequent answer",
                model=request.model_id,
                samples=tally.samples,
                votes=votes,
                counts=tally.as_dict(),
            )
            return value

        consensus_samples.labels(outcome="exhausted").observe(tally.samples)
        logger.error(
            "Consensus not reached",
            model=request.model_id,
            samples=tally.samples,
            counts=tally.as_dict(),
        )
        raise ConsensusNotReachedError(tally, self.threshold)
