"""
Unsubscribe-link extraction by consensus.

The HTML body is rendered with every link labeled ``[text][index]`` and the
URLs themselves removed from what the model sees. The model votes on an
index; the URL comes from the renderer's lookup, never from model output.
"""

import structlog

from inbox_triage.consensus.runner import ConsensusRunner
from inbox_triage.llm.generation import GenerationRequest
from inbox_triage.models.entries import Message
from inbox_triage.triage.exceptions import LinkNotFoundError, MessageContentError
from inbox_triage.triage.interfaces import HtmlRenderer
from inbox_triage.triage.parsers import parse_link_index
from inbox_triage.triage.prompts import EXTRACT_SYSTEM_PROMPT, format_message_prompt

logger = structlog.get_logger(__name__)

NO_LINK = -1


class UnsubscribeLinkExtractor:
    """Finds the unsubscribe URL of a promotional message."""

    def __init__(
        self,
        runner: ConsensusRunner,
        renderer: HtmlRenderer,
        model: str = "mistral",
        max_retries: int = 3,
    ):
        self.runner = runner
        self.renderer = renderer
        self.model = model
        self.max_retries = max_retries

    async def extract(self, message: Message) -> str:
        """
        Return the unsubscribe URL of ``message``.
        
        Raises:
            MessageContentError: Message has no HTML body
            LinkNotFoundError: Model answered -1 or an index with no link
        """
        logger.info("Extracting unsubscribe link", message_id=message.id)

        html = message.find_part("text/html")
        if html is None:
            raise MessageContentError(
                "Could not get HTML from email body.",
                details={"message_id": message.id},
            )

        text, lookup = await self.renderer.render_labeled_anchors(html.decode())
        request = GenerationRequest(
            model_id=self.model,
            system_prompt=EXTRACT_SYSTEM_PROMPT,
            user_prompt=format_message_prompt(message, text),
            parse=parse_link_index,
            max_retries=self.max_retries,
        )
        index = await self.runner.run(request)

        if index == NO_LINK:
            raise LinkNotFoundError(
                "Model did not find unsubscribe link.",
                details={"message_id": message.id},
            )
        if index not in lookup:
            raise LinkNotFoundError(
                "Labeled index not in lookup",
                details={"message_id": message.id, "index": index, "links": len(lookup)},
            )

        link = lookup[index]
        logger.info("Extracted unsubscribe link", message_id=message.id, link=link)
        return link
