"""
Mailbox triage on top of the consensus layer.

Components:
- MessageClassifier: promotional / transactional / personal by consensus
- UnsubscribeLinkExtractor: unsubscribe URL of promotional messages
- TriagePipeline: memoized per-message run over a MessageSource
- parsers / prompts: model output parsing and prompt text
- interfaces: MessageSource and HtmlRenderer protocols
"""

from inbox_triage.triage.classifier import MessageClassifier
from inbox_triage.triage.exceptions import (
    LinkNotFoundError,
    MessageContentError,
    TriageError,
)
from inbox_triage.triage.extractor import UnsubscribeLinkExtractor
from inbox_triage.triage.interfaces import HtmlRenderer, MessageSource
from inbox_triage.triage.parsers import parse_classification, parse_link_index
from inbox_triage.triage.pipeline import PipelineSummary, StageFailure, TriagePipeline

__all__ = [
    "MessageClassifier",
    "UnsubscribeLinkExtractor",
    "TriagePipeline",
    "PipelineSummary",
    "StageFailure",
    "HtmlRenderer",
    "MessageSource",
    "parse_classification",
    "parse_link_index",
    "TriageError",
    "MessageContentError",
    "LinkNotFoundError",
]
