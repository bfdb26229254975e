"""
Routes over the memoized store: list entries, inspect one, mark it done.
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from inbox_triage.api.dependencies import get_llm_client, get_settings, get_store
from inbox_triage.api.models import (
    EntrySummary,
    HealthResponse,
    MarkUnsubscribedRequest,
    ProcessedResponse,
)
from inbox_triage.config import Settings
from inbox_triage.llm.base_client import BaseLLMClient
from inbox_triage.models.entries import CacheEntry
from inbox_triage.models.enums import Classification
from inbox_triage.persistence.store import MemoizedStore

logger = structlog.get_logger(__name__)

router = APIRouter()


async def _get_entry_or_404(store: MemoizedStore, entry_id: str) -> CacheEntry:
    entry = await store.get(entry_id)
    if entry is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Entry {entry_id} not found")
    return entry


@router.get("/health", response_model=HealthResponse)
async def health(
    settings: Settings = Depends(get_settings),
    store: MemoizedStore = Depends(get_store),
    llm_client: BaseLLMClient = Depends(get_llm_client),
) -> HealthResponse:
    """Report whether the store is usable and Ollama is reachable."""
    services = {
        "store": "ok" if store.is_open else "closed",
        "ollama": "ok" if await llm_client.health_check() else "unreachable",
    }
    overall = "healthy" if all(value == "ok" for value in services.values()) else "degraded"
    return HealthResponse(status=overall, version=settings.APP_VERSION, services=services)


@router.get("/entries", response_model=list[EntrySummary])
async def list_entries(
    hide_done: bool = False,
    hide_non_promotional: bool = False,
    store: MemoizedStore = Depends(get_store),
) -> list[EntrySummary]:
    """
    Entries that have a downloaded message.
    
    hide_done drops entries marked unsubscribed; hide_non_promotional keeps
    only promotional ones.
    """
    summaries = []
    for entry in await store.entries():
        if entry.message is None:
            continue
        if hide_done and entry.marked_unsubscribed:
            continue
        if hide_non_promotional and entry.classification != Classification.PROMOTIONAL:
            continue
        summaries.append(EntrySummary.from_entry(entry, entry.is_processed()))
    return summaries


@router.get("/entries/{entry_id}", response_model=EntrySummary)
async def get_entry(entry_id: str, store: MemoizedStore = Depends(get_store)) -> EntrySummary:
    entry = await _get_entry_or_404(store, entry_id)
    return EntrySummary.from_entry(entry, entry.is_processed())


@router.get("/entries/{entry_id}/processed", response_model=ProcessedResponse)
async def get_processed(entry_id: str, store: MemoizedStore = Depends(get_store)) -> ProcessedResponse:
    return ProcessedResponse(id=entry_id, processed=await store.is_processed(entry_id))


@router.put("/entries/{entry_id}", response_model=EntrySummary)
async def mark_unsubscribed(
    entry_id: str,
    body: MarkUnsubscribedRequest,
    store: MemoizedStore = Depends(get_store),
) -> EntrySummary:
    """Record whether the user has unsubscribed from this sender."""
    await _get_entry_or_404(store, entry_id)
    await store.set(entry_id, "marked_unsubscribed", body.marked_unsubscribed)
    logger.info("Marked entry", entry_id=entry_id, marked_unsubscribed=body.marked_unsubscribed)
    entry = await _get_entry_or_404(store, entry_id)
    return EntrySummary.from_entry(entry, entry.is_processed())
