"""
Persisted memoization store for per-message results.

One JSON document holds an ordered list of CacheEntry objects, unique by id.
Every operation re-reads the document before use and rewrites it whole on
change (read-modify-write). The store assumes a single writer process: two
processes writing the same file lose updates (last writer wins), and
nothing here detects that.

Writes go to a sibling temp file first and are moved into place with
os.replace, so readers never observe a half-written document.
"""

import asyncio
import inspect
import os
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional, Union

import structlog
from pydantic import ValidationError

from inbox_triage.config import Settings
from inbox_triage.models.entries import ENTRY_PROPERTIES, CacheEntry, StoreDocument
from inbox_triage.monitoring.metrics import store_lookups_total
from inbox_triage.persistence.exceptions import (
    StoreClosedError,
    StoreCorruptedError,
    UnknownPropertyError,
)

logger = structlog.get_logger(__name__)

Compute = Callable[[], Union[Any, Awaitable[Any]]]


def resolve_property(name: str) -> str:
    """Map a property name (snake_case or on-disk camelCase) to its field."""
    try:
        return ENTRY_PROPERTIES[name]
    except KeyError:
        raise UnknownPropertyError(
            f"Unknown entry property: {name}",
            details={"property": name, "known": sorted(set(ENTRY_PROPERTIES.values()))},
        ) from None


class MemoizedStore:
    """
    Compute-once storage of named properties per entity id.
    
    The store must be opened before use, either explicitly or as an async
    context manager:
    
        async with MemoizedStore("db.json") as store:
            label = await store.ensure(msg_id, "classification", classify)
    
    Attributes:
        path: Location of the JSON document
    """
    
    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._open = False
    
    @classmethod
    def from_settings(cls, settings: Settings) -> "MemoizedStore":
        return cls(settings.STORE_PATH)
    
    @property
    def is_open(self) -> bool:
        return self._open
    
    def open(self) -> "MemoizedStore":
        """Create the document if missing and mark the store usable."""
        if not self.path.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._write_document(StoreDocument())
            logger.info("Created store document", path=str(self.path))
        self._open = True
        logger.debug("Opened store", path=str(self.path))
        return self
    
    def close(self) -> None:
        self._open = False
        logger.debug("Closed store", path=str(self.path))
    
    async def __aenter__(self) -> "MemoizedStore":
        return self.open()
    
    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
    
    # === Operations ===
    
    async def ensure(self, entry_id: str, prop: str, compute: Compute) -> Any:
        """
        Return the stored value of ``prop`` for ``entry_id``, computing it once.
        
        A present, truthy value is returned without calling ``compute``.
        Otherwise ``compute`` is called (and awaited if it returns an
        awaitable), the result is stored and returned. If ``compute`` raises,
        nothing is written.
        
        Args:
            entry_id: Entity id
            prop: Property name (snake_case or camelCase)
            compute: Zero-argument callable producing the value
        
        Returns:
            The stored value (validated by CacheEntry)
        """
        name = resolve_property(prop)
        document = await self._load()
        entry = document.find(entry_id)
        cached = getattr(entry, name) if entry is not None else None
        if cached:
            store_lookups_total.labels(property=name, result="hit").inc()
            logger.debug("Store hit", entry_id=entry_id, property=name)
            return cached
        
        store_lookups_total.labels(property=name, result="miss").inc()
        logger.debug("Store miss, computing", entry_id=entry_id, property=name)
        value = compute()
        if inspect.isawaitable(value):
            value = await value
        
        return await self._upsert(entry_id, name, value)
    
    async def set(self, entry_id: str, prop: str, value: Any) -> None:
        """Store ``value`` for ``prop`` on ``entry_id`` unconditionally."""
        name = resolve_property(prop)
        await self._upsert(entry_id, name, value)
    
    async def is_processed(self, entry_id: str) -> bool:
        """
        Whether the message needs no further work.
        
        Classified non-promotional messages are done. Promotional ones are
        done once their unsubscribe link has been recorded.
        """
        entry = await self.get(entry_id)
        return entry is not None and entry.is_processed()
    
    async def get(self, entry_id: str) -> Optional[CacheEntry]:
        document = await self._load()
        return document.find(entry_id)
    
    async def entries(self) -> list[CacheEntry]:
        document = await self._load()
        return document.entries
    
    # === Persistence ===
    
    async def _upsert(self, entry_id: str, name: str, value: Any) -> Any:
        if value is None:
            raise ValueError(f"Cannot store None for property '{name}'")
        
        # Re-read right before writing; compute() may have taken a while
        document = await self._load()
        entry = document.find(entry_id)
        if entry is None:
            entry = CacheEntry(id=entry_id)
            setattr(entry, name, value)
            document.entries.append(entry)
        else:
            setattr(entry, name, value)
        
        await asyncio.to_thread(self._write_document, document)
        logger.info("Stored property", entry_id=entry_id, property=name)
        return getattr(entry, name)
    
    async def _load(self) -> StoreDocument:
        if not self._open:
            raise StoreClosedError(
                "Store is not open", details={"path": str(self.path)}
            )
        return await asyncio.to_thread(self._read_document)
    
    def _read_document(self) -> StoreDocument:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise StoreCorruptedError(
                f"Store document at {self.path} is not valid UTF-8",
                details={"path": str(self.path), "errors": [str(e)]},
            ) from e
        if not raw.strip():
            return StoreDocument()
        try:
            return StoreDocument.model_validate_json(raw)
        except ValidationError as e:
            raise StoreCorruptedError(
                f"Store document at {self.path} is invalid",
                details={"path": str(self.path), "errors": e.errors()},
            ) from e
    
    def _write_document(self, document: StoreDocument) -> None:
        tmp_path = self.path.with_name(f"{self.path.name}.tmp")
        tmp_path.write_text(
            document.model_dump_json(by_alias=True, exclude_none=True, indent=2),
            encoding="utf-8",
        )
        try:
            os.replace(tmp_path, self.path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise
    
    def __repr__(self) -> str:
        return f"MemoizedStore(path={self.path}, open={self._open})"
