"""
Message classification by consensus.

Each sample is a two-stage generation: the model first answers freely
(category plus a reason), then a second generation reduces that answer to
exactly one category word. The second stage runs inside the first stage's
parser, so a reduction that fails counts as a parse failure of the first.
"""

from typing import Optional

import structlog

from inbox_triage.consensus.runner import ConsensusRunner
from inbox_triage.llm.generation import GenerationRequest
from inbox_triage.llm.text_utils import remove_links
from inbox_triage.models.entries import Message
from inbox_triage.models.enums import Classification
from inbox_triage.triage.exceptions import MessageContentError
from inbox_triage.triage.interfaces import HtmlRenderer
from inbox_triage.triage.parsers import parse_classification
from inbox_triage.triage.prompts import (
    CLASSIFY_PARSE_SYSTEM_PROMPT,
    CLASSIFY_SYSTEM_PROMPT,
    format_message_prompt,
)

logger = structlog.get_logger(__name__)


class MessageClassifier:
    """
    Classifies messages as promotional, transactional or personal.
    
    Attributes:
        runner: Consensus runner (its generation client serves both stages)
        renderer: Renders HTML-only bodies; None disables HTML messages
        model: Backend model name
        max_retries: Retry budget for each generation
    """

    def __init__(
        self,
        runner: ConsensusRunner,
        renderer: Optional[HtmlRenderer] = None,
        model: str = "mistral",
        max_retries: int = 3,
    ):
        self.runner = runner
        self.renderer = renderer
        self.model = model
        self.max_retries = max_retries

    async def get_content(self, message: Message) -> str:
        """
        Readable body text: the plain-text part if any, else rendered HTML.
        
        Raises:
            MessageContentError: Neither part is usable
        """
        plain = message.find_part("text/plain")
        if plain is not None:
            return plain.decode()

        html = message.find_part("text/html")
        if html is not None and self.renderer is not None:
            return await self.renderer.render_text(html.decode())

        raise MessageContentError(
            f"Could not parse email message for message {message.id}",
            details={"message_id": message.id, "has_html": html is not None},
        )

    async def classify(self, message: Message) -> Classification:
        logger.info("Classifying message", message_id=message.id)

        content = remove_links(await self.get_content(message))
        request = GenerationRequest(
            model_id=self.model,
            system_prompt=CLASSIFY_SYSTEM_PROMPT,
            user_prompt=format_message_prompt(message, content),
            parse=self._reduce_answer,
            max_retries=self.max_retries,
        )
        classification = await self.runner.run(request)

        logger.info(
            "Classified message",
            message_id=message.id,
            classification=classification.value,
        )
        return classification

    async def _reduce_answer(self, answer: str) -> Classification:
        request = GenerationRequest(
            model_id=self.model,
            system_prompt=CLASSIFY_PARSE_SYSTEM_PROMPT,
            user_prompt=answer,
            parse=parse_classification,
            max_retries=self.max_retries,
        )
        return await self.runner.generation_client.invoke(request)
