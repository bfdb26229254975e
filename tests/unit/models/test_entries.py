"""Unit tests for the persisted entry models."""

import pytest

from inbox_triage.models.entries import (
    ENTRY_PROPERTIES,
    CacheEntry,
    Message,
    StoreDocument,
)
from inbox_triage.models.enums import Classification


def test_message_reads_original_field_names():
    message = Message.model_validate({
        "id": "m1",
        "from": "news@shop.example",
        "replyTo": "noreply@shop.example",
        "mimeType": "multipart/alternative",
        "body": [],
        "labelIds": ["INBOX"],
    })
    
    assert message.from_ == "news@shop.example"
    assert message.reply_to == "noreply@shop.example"
    assert message.model_dump(by_alias=True)["labelIds"] == ["INBOX"]


def test_metadata_keeps_non_empty_headers(create_test_message):
    message = create_test_message(message_id="m1", subject="Hi")
    message.reply_to = ""
    
    assert message.metadata() == {
        "id": "m1",
        "subject": "Hi",
        "snippet": "hi",
        "to": "me@example.com",
        "from": '"Shop" <news@shop.example>',
        "date": "Thu, 1 Jan 2026 12:00:00 +0000",
    }


def test_find_part(create_test_message):
    message = create_test_message(plain="text", html="<b>html</b>")
    
    assert message.find_part("text/html").decode() == "<b>html</b>"
    assert message.find_part("image/png") is None


def test_cache_entry_validates_on_assignment():
    entry = CacheEntry(id="m1")
    entry.classification = "transactional"
    
    assert entry.classification is Classification.TRANSACTIONAL


def test_entry_properties_map_both_spellings():
    assert ENTRY_PROPERTIES["unsubscribeLink"] == "unsubscribe_link"
    assert ENTRY_PROPERTIES["unsubscribe_link"] == "unsubscribe_link"
    assert "id" not in ENTRY_PROPERTIES


def test_document_find():
    document = StoreDocument(entries=[CacheEntry(id="a"), CacheEntry(id="b")])
    
    assert document.find("b").id == "b"
    assert document.find("c") is None


@pytest.mark.parametrize(
    "fields, processed",
    [
        ({}, False),
        ({"classification": "personal"}, True),
        ({"classification": "transactional"}, True),
        ({"classification": "promotional"}, False),
        ({"classification": "promotional", "unsubscribe_link": "https://x.example/u"}, True),
        ({"unsubscribe_link": "https://x.example/u"}, False),
    ],
)
def test_cache_entry_is_processed(fields, processed):
    assert CacheEntry(id="m1", **fields).is_processed() is processed
