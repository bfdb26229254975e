"""
Mailbox triage run: download, classify, extract, memoizing every step.

For each message id from the source:
    1. Skip it if the store says it is already processed.
    2. Ensure the downloaded message is stored.
    3. Ensure its classification is stored; stop here unless promotional.
    4. Ensure its unsubscribe link is stored.

A failing step is logged as a warning and the run moves on to the next
message. Nothing is stored for the failed step, so the next run retries it.
Store errors are not per-message problems and abort the run.
"""

from dataclasses import dataclass, field
from typing import Optional

import structlog

from inbox_triage.config import Settings
from inbox_triage.consensus.runner import ConsensusRunner
from inbox_triage.llm.base_client import BaseLLMClient
from inbox_triage.llm.generation import GenerationClient
from inbox_triage.llm.ollama_client import OllamaClient
from inbox_triage.logging_config import message_context
from inbox_triage.models.entries import Message
from inbox_triage.models.enums import Classification
from inbox_triage.monitoring.metrics import pipeline_items_total
from inbox_triage.persistence.exceptions import StoreError
from inbox_triage.persistence.store import MemoizedStore
from inbox_triage.triage.classifier import MessageClassifier
from inbox_triage.triage.extractor import UnsubscribeLinkExtractor
from inbox_triage.triage.interfaces import HtmlRenderer, MessageSource

logger = structlog.get_logger(__name__)


@dataclass
class StageFailure:
    message_id: str
    stage: str
    error_type: str
    error: str


@dataclass
class PipelineSummary:
    """Counts of what one run did."""

    seen: int = 0
    already_processed: int = 0
    non_promotional: int = 0
    links_extracted: int = 0
    failures: list[StageFailure] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failures)


class TriagePipeline:
    def __init__(
        self,
        store: MemoizedStore,
        source: MessageSource,
        classifier: MessageClassifier,
        extractor: UnsubscribeLinkExtractor,
    ):
        self.store = store
        self.source = source
        self.classifier = classifier
        self.extractor = extractor

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        store: MemoizedStore,
        source: MessageSource,
        renderer: HtmlRenderer,
        backend: Optional[BaseLLMClient] = None,
    ) -> "TriagePipeline":
        """
        Wire the classifier and extractor onto one shared generation client.
        
        A single GenerationClient keeps the single-flight guard global to
        the run.
        """
        if backend is None:
            backend = OllamaClient(base_url=settings.OLLAMA_BASE_URL, timeout=settings.OLLAMA_TIMEOUT)
        runner = ConsensusRunner.from_settings(
            GenerationClient.from_settings(backend, settings), settings
        )
        classifier = MessageClassifier(
            runner, renderer, model=settings.OLLAMA_MODEL, max_retries=settings.MAX_RETRIES
        )
        extractor = UnsubscribeLinkExtractor(
            runner, renderer, model=settings.OLLAMA_MODEL, max_retries=settings.MAX_RETRIES
        )
        return cls(store, source, classifier, extractor)

    async def run(self) -> PipelineSummary:
        summary = PipelineSummary()
        async for message_id in self.source.list_message_ids():
            await self.process_message(message_id, summary)

        logger.info(
            "Triage run complete",
            seen=summary.seen,
            already_processed=summary.already_processed,
            non_promotional=summary.non_promotional,
            links_extracted=summary.links_extracted,
            failed=summary.failed,
        )
        return summary

    async def process_message(self, message_id: str, summary: PipelineSummary) -> None:
        with message_context(message_id):
            await self._process_message(message_id, summary)

    async def _process_message(self, message_id: str, summary: PipelineSummary) -> None:
        summary.seen += 1
        if await self.store.is_processed(message_id):
            summary.already_processed += 1
            pipeline_items_total.labels(stage="lookup", status="skipped").inc()
            return

        try:
            message: Message = await self.store.ensure(
                message_id, "message", lambda: self.source.get_message(message_id)
            )
        except StoreError:
            raise
        except Exception as e:
            self._record_failure(summary, message_id, "download", e)
            return

        logger.info(
            "Processing message",
            message_id=message_id,
            sender=message.from_,
            subject=message.subject,
        )

        try:
            classification = await self.store.ensure(
                message_id, "classification", lambda: self.classifier.classify(message)
            )
        except StoreError:
            raise
        except Exception as e:
            self._record_failure(summary, message_id, "classify", e)
            return
        pipeline_items_total.labels(stage="classify", status="ok").inc()

        if classification != Classification.PROMOTIONAL:
            summary.non_promotional += 1
            logger.info("Message is not promotional, skipping", message_id=message_id)
            return

        try:
            await self.store.ensure(
                message_id, "unsubscribe_link", lambda: self.extractor.extract(message)
            )
        except StoreError:
            raise
        except Exception as e:
            self._record_failure(summary, message_id, "extract", e)
            return
        pipeline_items_total.labels(stage="extract", status="ok").inc()
        summary.links_extracted += 1

    def _record_failure(
        self, summary: PipelineSummary, message_id: str, stage: str, error: Exception
    ) -> None:
        pipeline_items_total.labels(stage=stage, status="failed").inc()
        logger.warning(
            f"Failed to {stage} message",
            message_id=message_id,
            stage=stage,
            error_type=type(error).__name__,
            error=str(error),
        )
        summary.failures.append(
            StageFailure(
                message_id=message_id,
                stage=stage,
                error_type=type(error).__name__,
                error=str(error),
            )
        )
