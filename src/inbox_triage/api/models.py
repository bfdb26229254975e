"""
API request and response models for the store endpoints.
"""

import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from inbox_triage.models.entries import CacheEntry
from inbox_triage.models.enums import Classification

_ADDRESS_PATTERN = re.compile(r'^(?:"?([^"]*)"?\s)?(?:<?(.+@[^>]+)>?)$')


class EmailAddress(BaseModel):
    name: Optional[str] = None
    address: str


def parse_email_address(value: Optional[str]) -> Optional[EmailAddress]:
    """
    Split a From-style header into display name and address.
    
    >>> parse_email_address('"Shop" <news@shop.example>')
    EmailAddress(name='Shop', address='news@shop.example')
    """
    if not value:
        return None
    match = _ADDRESS_PATTERN.match(value.strip())
    if match is None:
        return None
    name, address = match.groups()
    return EmailAddress(name=name.strip() if name and name.strip() else None, address=address.strip())


class EntrySummary(BaseModel):
    """One store entry as listed by the API."""
    
    id: str
    subject: Optional[str] = None
    sender: Optional[EmailAddress] = None
    date: Optional[str] = None
    classification: Optional[Classification] = None
    unsubscribe_link: Optional[str] = None
    marked_unsubscribed: bool = False
    processed: bool = Field(
        default=False,
        description="Classified, and for promotional messages, unsubscribe link known"
    )
    
    @classmethod
    def from_entry(cls, entry: CacheEntry, processed: bool) -> "EntrySummary":
        message = entry.message
        return cls(
            id=entry.id,
            subject=message.subject if message else None,
            sender=parse_email_address(message.from_) if message else None,
            date=message.date if message else None,
            classification=entry.classification,
            unsubscribe_link=entry.unsubscribe_link,
            marked_unsubscribed=bool(entry.marked_unsubscribed),
            processed=processed,
        )


class MarkUnsubscribedRequest(BaseModel):
    """Body of PUT /entries/{id}."""
    model_config = ConfigDict(populate_by_name=True)
    
    marked_unsubscribed: bool = Field(alias="markedUnsubscribed")


class ProcessedResponse(BaseModel):
    id: str
    processed: bool


class HealthResponse(BaseModel):
    """Response for health check endpoint."""
    
    status: str = Field(
        description="Overall health status",
        examples=["healthy", "degraded"]
    )
    version: str = Field(description="Service version", examples=["0.1.0"])
    services: dict[str, str] = Field(
        description="Service-specific health status",
        examples=[{"ollama": "ok", "store": "ok"}]
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="Health check timestamp (UTC)"
    )
