"""
Unit tests for MemoizedStore.
"""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import ValidationError

from inbox_triage.models.enums import Classification
from inbox_triage.persistence.exceptions import (
    StoreClosedError,
    StoreCorruptedError,
    UnknownPropertyError,
)
from inbox_triage.persistence.store import MemoizedStore, resolve_property


def read_document(path) -> dict:
    return json.loads(path.read_text(encoding="utf-8"))


# ============================================================================
# Lifecycle
# ============================================================================


class TestLifecycle:
    
    def test_open_creates_missing_document_and_parents(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "db.json"
        store = MemoizedStore(path).open()
        
        assert store.is_open
        assert read_document(path) == {"entries": []}
    
    def test_open_keeps_existing_document(self, store_path):
        store_path.write_text('{"entries": [{"id": "m1", "classification": "personal"}]}')
        
        MemoizedStore(store_path).open()
        
        assert read_document(store_path)["entries"][0]["id"] == "m1"
    
    @pytest.mark.asyncio
    async def test_operations_on_closed_store_raise(self, store_path):
        store = MemoizedStore(store_path)
        
        with pytest.raises(StoreClosedError):
            await store.get("m1")
        
        store.open()
        store.close()
        with pytest.raises(StoreClosedError):
            await store.ensure("m1", "classification", lambda: "personal")
    
    @pytest.mark.asyncio
    async def test_context_manager_closes(self, store_path):
        async with MemoizedStore(store_path) as store:
            assert store.is_open
        assert not store.is_open
    
    @pytest.mark.asyncio
    async def test_empty_file_reads_as_empty_document(self, store_path, store):
        store_path.write_text("")
        assert await store.entries() == []
    
    @pytest.mark.asyncio
    async def test_invalid_document_is_corrupted(self, store_path, store):
        store_path.write_text('{"entries": [{"classification": "personal"}]}')
        
        with pytest.raises(StoreCorruptedError):
            await store.get("m1")
    
    @pytest.mark.asyncio
    async def test_malformed_json_is_corrupted(self, store_path, store):
        store_path.write_text("{not json")
        
        with pytest.raises(StoreCorruptedError):
            await store.entries()
    
    @pytest.mark.asyncio
    async def test_invalid_utf8_is_corrupted(self, store_path, store):
        store_path.write_bytes(b"\xff\xfe{\"entries\": []}")
        
        with pytest.raises(StoreCorruptedError):
            await store.entries()


# ============================================================================
# ensure
# ============================================================================


class TestEnsure:
    
    @pytest.mark.asyncio
    async def test_computes_once_then_serves_stored_value(self, store):
        compute = MagicMock(return_value="promotional")
        
        first = await store.ensure("m1", "classification", compute)
        second = await store.ensure("m1", "classification", compute)
        
        assert first == second == Classification.PROMOTIONAL
        compute.assert_called_once_with()
    
    @pytest.mark.asyncio
    async def test_awaits_async_compute(self, store):
        compute = AsyncMock(return_value="https://shop.com/unsubscribe")
        
        value = await store.ensure("m1", "unsubscribe_link", compute)
        
        assert value == "https://shop.com/unsubscribe"
        compute.assert_awaited_once()
    
    @pytest.mark.asyncio
    async def test_survives_reopen(self, store_path):
        async with MemoizedStore(store_path) as store:
            await store.ensure("m1", "classification", lambda: "personal")
        
        compute = MagicMock(return_value="promotional")
        async with MemoizedStore(store_path) as store:
            value = await store.ensure("m1", "classification", compute)
        
        assert value == Classification.PERSONAL
        compute.assert_not_called()
    
    @pytest.mark.asyncio
    async def test_failed_compute_writes_nothing(self, store_path, store):
        def compute():
            raise RuntimeError("model unavailable")
        
        with pytest.raises(RuntimeError):
            await store.ensure("m1", "classification", compute)
        
        assert read_document(store_path) == {"entries": []}
    
    @pytest.mark.asyncio
    async def test_falsy_stored_value_is_recomputed(self, store):
        await store.set("m1", "marked_unsubscribed", False)
        compute = MagicMock(return_value=True)
        
        assert await store.ensure("m1", "marked_unsubscribed", compute) is True
        compute.assert_called_once()
    
    @pytest.mark.asyncio
    async def test_none_result_is_rejected(self, store_path, store):
        with pytest.raises(ValueError):
            await store.ensure("m1", "unsubscribe_link", lambda: None)
        
        assert read_document(store_path) == {"entries": []}
    
    @pytest.mark.asyncio
    async def test_invalid_value_is_rejected(self, store_path, store):
        with pytest.raises(ValidationError):
            await store.ensure("m1", "classification", lambda: "spam")
        
        assert read_document(store_path) == {"entries": []}
    
    @pytest.mark.asyncio
    async def test_properties_accumulate_on_one_entry(self, store):
        await store.ensure("m1", "classification", lambda: "promotional")
        await store.ensure("m1", "unsubscribeLink", lambda: "https://shop.com/u")
        
        entries = await store.entries()
        assert len(entries) == 1
        assert entries[0].classification == Classification.PROMOTIONAL
        assert entries[0].unsubscribe_link == "https://shop.com/u"


# ============================================================================
# set
# ============================================================================


class TestSet:
    
    @pytest.mark.asyncio
    async def test_creates_missing_entry(self, store):
        await store.set("m1", "marked_unsubscribed", True)
        
        entry = await store.get("m1")
        assert entry.marked_unsubscribed is True
        assert entry.classification is None
    
    @pytest.mark.asyncio
    async def test_overwrites_existing_value(self, store):
        await store.set("m1", "unsubscribe_link", "https://a.com/u")
        await store.set("m1", "unsubscribe_link", "https://b.com/u")
        
        entry = await store.get("m1")
        assert entry.unsubscribe_link == "https://b.com/u"
        assert len(await store.entries()) == 1
    
    @pytest.mark.asyncio
    async def test_keeps_entry_order(self, store):
        for entry_id in ["m3", "m1", "m2"]:
            await store.set(entry_id, "classification", "personal")
        await store.set("m1", "classification", "transactional")
        
        assert [entry.id for entry in await store.entries()] == ["m3", "m1", "m2"]


# ============================================================================
# is_processed
# ============================================================================


class TestIsProcessed:
    
    @pytest.mark.asyncio
    async def test_unknown_id(self, store):
        assert await store.is_processed("missing") is False
    
    @pytest.mark.asyncio
    async def test_entry_without_classification(self, store):
        await store.set("m1", "unsubscribe_link", "https://shop.com/u")
        assert await store.is_processed("m1") is False
    
    @pytest.mark.asyncio
    @pytest.mark.parametrize("label", ["transactional", "personal"])
    async def test_non_promotional_is_done(self, store, label):
        await store.set("m1", "classification", label)
        assert await store.is_processed("m1") is True
    
    @pytest.mark.asyncio
    async def test_promotional_without_link(self, store):
        await store.set("m1", "classification", "promotional")
        assert await store.is_processed("m1") is False
    
    @pytest.mark.asyncio
    async def test_promotional_with_link(self, store):
        await store.set("m1", "classification", "promotional")
        await store.set("m1", "unsubscribe_link", "https://shop.com/u")
        assert await store.is_processed("m1") is True


# ============================================================================
# On-disk format
# ============================================================================


class TestDocumentFormat:
    
    @pytest.mark.asyncio
    async def test_writes_camel_case_and_omits_missing(self, store_path, store):
        await store.set("m1", "unsubscribe_link", "https://shop.com/u")
        await store.set("m1", "marked_unsubscribed", True)
        
        assert read_document(store_path) == {
            "entries": [
                {
                    "id": "m1",
                    "unsubscribeLink": "https://shop.com/u",
                    "markedUnsubscribed": True,
                }
            ]
        }
    
    @pytest.mark.asyncio
    async def test_message_headers_use_original_names(
        self, store_path, store, create_test_message
    ):
        message = create_test_message(message_id="m1")
        await store.ensure("m1", "message", lambda: message)
        
        stored = read_document(store_path)["entries"][0]["message"]
        assert stored["from"] == '"Shop" <news@shop.example>'
        assert stored["body"][0]["mimeType"] == "text/plain"
        
        entry = await store.get("m1")
        assert entry.message.find_part("text/plain").decode() == (
            "Everything is 20% off this week."
        )
    
    @pytest.mark.asyncio
    async def test_unknown_fields_survive_rewrite(self, store_path, store):
        store_path.write_text(json.dumps({
            "entries": [{"id": "m1", "starred": True}],
        }))
        
        await store.set("m1", "classification", "personal")
        
        assert read_document(store_path)["entries"][0]["starred"] is True
    
    @pytest.mark.asyncio
    async def test_no_temp_file_left_behind(self, store_path, store):
        await store.set("m1", "classification", "personal")
        
        assert [p.name for p in store_path.parent.iterdir()] == ["db.json"]
    
    @pytest.mark.asyncio
    async def test_failed_replace_removes_temp_file(self, store_path, store, monkeypatch):
        def fail_replace(src, dst):
            raise PermissionError("locked")
        
        monkeypatch.setattr("inbox_triage.persistence.store.os.replace", fail_replace)
        
        with pytest.raises(PermissionError):
            await store.set("m1", "classification", "personal")
        
        assert [p.name for p in store_path.parent.iterdir()] == ["db.json"]
        assert read_document(store_path)["entries"] == []


class TestResolveProperty:
    
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("unsubscribe_link", "unsubscribe_link"),
            ("unsubscribeLink", "unsubscribe_link"),
            ("markedUnsubscribed", "marked_unsubscribed"),
            ("message", "message"),
        ],
    )
    def test_both_spellings(self, name, expected):
        assert resolve_property(name) == expected
    
    @pytest.mark.parametrize("name", ["id", "subject", "unsubscribe-link"])
    def test_unknown_names(self, name):
        with pytest.raises(UnknownPropertyError) as exc_info:
            resolve_property(name)
        assert isinstance(exc_info.value, ValueError)
