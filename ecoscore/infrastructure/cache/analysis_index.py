"""
Multi-index analysis cache.

One canonical record per analysis plus two secondary indices:

    analysis:{id}        -> AnalysisRecord (JSON)
    barcode:{barcode}    -> id
    hash:{sha256}        -> id   (name + category + sorted ingredients)
    analysis_refs:{id}   -> [secondary keys written for id]

All keys share one fixed TTL set at write time; reads never refresh it.
Writes are sequential, not transactional: a reader may see a secondary
pointer before its primary record exists, or after it expired. Such a
dangling pointer is a miss and is deleted on sight.
"""

from __future__ import annotations

import hashlib
import json
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional

import structlog
from pydantic import ValidationError

from ecoscore.domain.cache.models import AnalysisRecord
from ecoscore.infrastructure.cache.cache_store import CacheStore

logger = structlog.get_logger(__name__)

ANALYSIS_PREFIX = "analysis:"
BARCODE_PREFIX = "barcode:"
HASH_PREFIX = "hash:"
REFS_PREFIX = "analysis_refs:"

DEFAULT_ANALYSIS_TTL_SECONDS = 86400


def product_hash(name: str, category: str, ingredients: Optional[Iterable[str]] = None) -> str:
    """
    SHA-256 of compact JSON {name, category, ingredients}.

    Ingredients are sorted and comma-joined, so their order never changes
    the hash.

    Example:
        >>> product_hash("Nutella", "food", ["sucre", "huile de palme"]) == \\
        ...     product_hash(" nutella ", "food", ["huile de palme", "sucre"])
        True
    """
    data = {
        "name": name.lower().strip(),
        "category": category,
        "ingredients": ",".join(sorted(ingredients)) if ingredients else "",
    }
    payload = json.dumps(data, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class AnalysisIndex:
    """
    Analysis cache with lookups by id, barcode and product content.

    Example:
        >>> index = AnalysisIndex(store)
        >>> await index.cache_analysis(record, ingredients=["sucre", "cacao"])
        True
        >>> (await index.get_by_barcode(record.barcode)).id == record.id
        True
    """

    def __init__(
        self,
        store: CacheStore,
        ttl_seconds: int = DEFAULT_ANALYSIS_TTL_SECONDS,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.store = store
        self.ttl = ttl_seconds
        self._clock = clock

    async def cache_analysis(
        self,
        record: AnalysisRecord,
        ingredients: Optional[Iterable[str]] = None,
    ) -> bool:
        """
        Store a record under its id, barcode and content hash.

        Returns:
            False when the primary record could not be written
        """
        cached = record.model_copy(update={"cached_at": self._clock()})
        if not await self.store.set(f"{ANALYSIS_PREFIX}{record.id}", cached, self.ttl):
            logger.warning("Analysis not cached", analysis_id=record.id)
            return False

        secondary: list[str] = []
        if record.barcode:
            secondary.append(f"{BARCODE_PREFIX}{record.barcode}")
        secondary.append(
            f"{HASH_PREFIX}{product_hash(record.product_name, record.category, ingredients)}"
        )
        for key in secondary:
            await self.store.set(key, record.id, self.ttl)

        refs_key = f"{REFS_PREFIX}{record.id}"
        previous = await self.store.get(refs_key)
        refs = list(dict.fromkeys([*(previous if isinstance(previous, list) else []), *secondary]))
        await self.store.set(refs_key, refs, self.ttl)

        logger.info("Analysis cached", analysis_id=record.id, barcode=record.barcode)
        return True

    async def get_by_id(self, analysis_id: str) -> Optional[AnalysisRecord]:
        raw = await self.store.get(f"{ANALYSIS_PREFIX}{analysis_id}")
        if raw is None:
            return None
        try:
            return AnalysisRecord.model_validate(raw)
        except ValidationError as e:
            logger.warning("Corrupt analysis record", analysis_id=analysis_id, error=str(e))
            return None

    async def get_by_barcode(self, barcode: str) -> Optional[AnalysisRecord]:
        return await self._follow(f"{BARCODE_PREFIX}{barcode}")

    async def get_by_product(
        self,
        name: str,
        category: str,
        ingredients: Optional[Iterable[str]] = None,
    ) -> Optional[AnalysisRecord]:
        return await self._follow(f"{HASH_PREFIX}{product_hash(name, category, ingredients)}")

    async def has_analysis(
        self,
        name: str,
        category: str,
        ingredients: Optional[Iterable[str]] = None,
    ) -> bool:
        return await self.get_by_product(name, category, ingredients) is not None

    async def _follow(self, pointer_key: str) -> Optional[AnalysisRecord]:
        analysis_id = await self.store.get(pointer_key)
        if not isinstance(analysis_id, str):
            return None
        record = await self.get_by_id(analysis_id)
        if record is None:
            logger.info("Dangling analysis pointer removed", key=pointer_key, analysis_id=analysis_id)
            await self.store.delete(pointer_key)
        return record

    async def invalidate(self, analysis_id: str) -> bool:
        """
        Delete a record and every secondary key pointing at it.

        Returns:
            False when no record existed for this id
        """
        record = await self.get_by_id(analysis_id)
        if record is None:
            return False

        refs_key = f"{REFS_PREFIX}{analysis_id}"
        refs = await self.store.get(refs_key)
        secondary = [str(k) for k in refs] if isinstance(refs, list) else []
        if record.barcode:
            secondary.append(f"{BARCODE_PREFIX}{record.barcode}")

        deleted = 0
        for key in dict.fromkeys(secondary):
            # A newer analysis may own the pointer now
            if await self.store.get(key) == analysis_id:
                deleted += await self.store.delete(key)
        await self.store.delete(refs_key)
        await self.store.delete(f"{ANALYSIS_PREFIX}{analysis_id}")

        logger.info("Analysis invalidated", analysis_id=analysis_id, secondary_keys=deleted)
        return True

    async def cleanup(self) -> int:
        """Purge every analysis key and index. Returns the number of keys deleted."""
        deleted = 0
        for prefix in (ANALYSIS_PREFIX, BARCODE_PREFIX, HASH_PREFIX, REFS_PREFIX):
            deleted += await self.store.invalidate(f"{prefix}*")
        logger.info("Analysis cache cleaned", deleted=deleted)
        return deleted
