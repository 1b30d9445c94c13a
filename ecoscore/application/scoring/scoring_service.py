"""
Product Scoring Service.

Cache-aside around the ScoreAggregator: reuse a cached analysis for the
same barcode or the same product content when it was scored from the
same input, otherwise score and cache.

Design Pattern: Service Layer + Dependency Injection
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Optional

import structlog
from pydantic import ValidationError

from ecoscore.domain.cache.models import AnalysisRecord
from ecoscore.domain.product.models import ProductDescriptor
from ecoscore.domain.scoring.aggregator import ScoreAggregator
from ecoscore.domain.scoring.models import ScoreBreakdown
from ecoscore.domain.shared.value_objects import AnalysisId
from ecoscore.infrastructure.cache.analysis_index import AnalysisIndex

logger = structlog.get_logger(__name__)


class ProductScoringService:
    """
    Scores products, memoizing results in the analysis cache.

    Responsibilities:
    - Look up a previous analysis by barcode, then by content hash
    - Score with the aggregator on a miss and cache the result
    - Degrade to direct computation whenever the cache misbehaves

    Dependencies (injected):
    - aggregator: ScoreAggregator - Pure synchronous scoring
    - analysis_index: AnalysisIndex - Multi-index analysis cache (optional)

    Example:
        >>> service = ProductScoringService(ScoreAggregator(), AnalysisIndex(store))
        >>> breakdown = await service.score(product)
        >>> breakdown.score
        64
    """

    def __init__(
        self,
        aggregator: Optional[ScoreAggregator] = None,
        analysis_index: Optional[AnalysisIndex] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.aggregator = aggregator or ScoreAggregator()
        self.analysis_index = analysis_index
        self._clock = clock

    async def score(self, product: ProductDescriptor) -> ScoreBreakdown:
        """
        Score a product with cache-aside.

        Workflow:
        1. Barcode lookup, then content-hash lookup
        2. On a hit scored from the same input and tables, return the cached breakdown
        3. Otherwise score and cache the new analysis

        Never raises because of the cache: any failure there falls back to
        direct computation.
        """
        index = self.analysis_index
        if index is None:
            return self.aggregator.score(product)

        fingerprint = product.fingerprint()
        cached = await self._lookup(index, product, fingerprint)
        if cached is not None:
            return cached

        breakdown = self.aggregator.score(product)
        await self._store(index, product, fingerprint, breakdown)
        return breakdown

    async def _lookup(
        self, index: AnalysisIndex, product: ProductDescriptor, fingerprint: str
    ) -> Optional[ScoreBreakdown]:
        try:
            record = None
            if product.barcode:
                record = await index.get_by_barcode(product.barcode)
            if record is None:
                record = await index.get_by_product(
                    product.name, product.category.value, product.ingredients.items
                )
            if record is None:
                logger.debug("Analysis cache miss", product=product.name)
                return None

            breakdown = ScoreBreakdown.model_validate(record.analysis)
        except ValidationError as e:
            logger.warning("Cached analysis unusable, rescoring", product=product.name, error=str(e))
            return None
        except Exception as e:
            logger.warning("Analysis cache lookup failed, rescoring", product=product.name, error=str(e))
            return None

        if record.input_fingerprint != fingerprint:
            logger.info("Cached analysis scored from other input, rescoring", analysis_id=record.id)
            return None
        if breakdown.reference_version != self.aggregator.tables.version:
            logger.info(
                "Cached analysis from older reference tables, rescoring",
                analysis_id=record.id,
                cached_version=breakdown.reference_version,
            )
            return None

        logger.debug("Analysis cache hit", analysis_id=record.id, product=product.name)
        return breakdown

    async def _store(
        self,
        index: AnalysisIndex,
        product: ProductDescriptor,
        fingerprint: str,
        breakdown: ScoreBreakdown,
    ) -> None:
        if not breakdown.components:
            # Fallback results are not worth memoizing
            return

        record = AnalysisRecord(
            id=AnalysisId.generate().value,
            product_name=product.name,
            barcode=product.barcode,
            category=product.category.value,
            health_score=breakdown.score,
            analysis=breakdown.model_dump(mode="json"),
            analyzed_at=self._clock(),
            input_fingerprint=fingerprint,
        )
        try:
            await index.cache_analysis(record, product.ingredients.items)
        except Exception as e:
            logger.warning("Analysis not cached", product=product.name, error=str(e))
