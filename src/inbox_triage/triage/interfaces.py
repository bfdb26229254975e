"""
Collaborators the triage pipeline depends on but does not implement.

- MessageSource: the mail provider API (listing and downloading messages)
- HtmlRenderer: a headless browser turning HTML bodies into readable text
"""

from typing import AsyncIterator, Mapping, Protocol

from inbox_triage.models.entries import Message


class MessageSource(Protocol):
    """Lists message ids and downloads single messages."""

    def list_message_ids(self) -> AsyncIterator[str]:
        """Yield message ids, newest first, across all result pages."""
        ...

    async def get_message(self, message_id: str) -> Message:
        ...


class HtmlRenderer(Protocol):
    """Renders HTML the way a browser would show it."""

    async def render_text(self, html: str) -> str:
        """Visible text of the document."""
        ...

    async def render_labeled_anchors(self, html: str) -> tuple[str, Mapping[int, str]]:
        """
        Visible text with each non-empty link rewritten as ``[text][index]``.
        
        Returns:
            Tuple of (text, index -> href lookup)
        """
        ...
