"""
Models persisted in the memoized store.

On disk the document keeps the camelCase field names of the original
store format:

    {"entries": [{"id": "...", "message": {...}, "classification": "promotional",
                  "unsubscribeLink": "https://...", "markedUnsubscribed": true}]}
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from inbox_triage.codec import gzip_base64_decode
from inbox_triage.models.enums import Classification

# Header-ish Message fields included when formatting a message for a prompt
METADATA_FIELDS = ("id", "subject", "snippet", "to", "from_", "reply_to", "date")


class MessagePart(BaseModel):
    """One MIME part of a downloaded message, body stored gzip+base64."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")
    
    part_id: Optional[str] = None
    mime_type: Optional[str] = None
    filename: Optional[str] = None
    compressed_body: str = Field(..., description="gzip-compressed, base64-encoded body")
    
    def decode(self, encoding: str = "utf-8") -> str:
        return gzip_base64_decode(self.compressed_body).decode(encoding, errors="replace")


class Message(BaseModel):
    """A downloaded mail message with its headers flattened."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")
    
    id: str
    subject: Optional[str] = None
    snippet: Optional[str] = None
    to: Optional[str] = None
    from_: Optional[str] = Field(default=None, alias="from")
    reply_to: Optional[str] = None
    date: Optional[str] = None
    mime_type: Optional[str] = None
    body: list[MessagePart] = Field(default_factory=list)
    
    def find_part(self, mime_type: str) -> Optional[MessagePart]:
        """First body part with the given MIME type, or None."""
        for part in self.body:
            if part.mime_type == mime_type:
                return part
        return None
    
    def metadata(self) -> dict[str, str]:
        """Non-empty header fields keyed by their on-disk names."""
        fields = {}
        for name in METADATA_FIELDS:
            value = getattr(self, name)
            if value:
                fields[type(self).model_fields[name].alias or name] = value
        return fields


class CacheEntry(BaseModel):
    """
    Memoized properties of one message, keyed by message id.
    
    Every property is optional; an entry grows as work on the message
    progresses.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
        extra="allow",
    )
    
    id: str
    message: Optional[Message] = None
    classification: Optional[Classification] = None
    unsubscribe_link: Optional[str] = None
    marked_unsubscribed: Optional[bool] = None

    def is_processed(self) -> bool:
        """Classified, and promotional entries also carry an unsubscribe link."""
        if self.classification is None:
            return False
        if self.classification != Classification.PROMOTIONAL:
            return True
        return bool(self.unsubscribe_link)


# Property names accepted by MemoizedStore, mapped from either spelling
ENTRY_PROPERTIES: dict[str, str] = {
    spelling: name
    for name, field in CacheEntry.model_fields.items()
    if name != "id"
    for spelling in (name, field.alias or name)
}


class StoreDocument(BaseModel):
    """The whole persisted store: an ordered list of entries, unique by id."""
    model_config = ConfigDict(extra="allow")
    
    entries: list[CacheEntry] = Field(default_factory=list)
    
    def find(self, entry_id: str) -> Optional[CacheEntry]:
        for entry in self.entries:
            if entry.id == entry_id:
                return entry
        return None
