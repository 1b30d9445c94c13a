"""
Cached record models.

Records stored as JSON by the cache indices. Datetimes are timezone-aware
(UTC) and round-trip through ``model_dump(mode="json")``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class AnalysisRecord(BaseModel):
    """
    One product analysis as stored in the cache.

    ``analysis`` is opaque to the cache layer: the scoring service stores
    a dumped ScoreBreakdown there.

    Example:
        >>> record = AnalysisRecord(
        ...     id="analysis_0123456789ab",
        ...     product_name="Nutella",
        ...     barcode="3017620422003",
        ...     category="food",
        ...     health_score=22,
        ...     analysis={"score": 22},
        ...     analyzed_at=datetime.now(timezone.utc),
        ... )
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Analysis identifier")
    product_name: str = Field(..., description="Product name as analyzed")
    barcode: Optional[str] = Field(None, description="Product barcode")
    category: str = Field("food", description="Product category")
    health_score: int = Field(..., ge=0, le=100, description="Overall score")
    analysis: dict[str, Any] = Field(default_factory=dict, description="Full analysis payload")
    analyzed_at: datetime = Field(..., description="When the analysis was computed")
    cached_at: Optional[datetime] = Field(None, description="When the record was cached")
    input_fingerprint: Optional[str] = Field(None, description="Fingerprint of the scored product input")


class UserQuotas(BaseModel):
    model_config = ConfigDict(frozen=True)

    scans_per_month: int = Field(0, ge=0)
    ai_questions_per_day: int = Field(0, ge=0)
    exports_per_month: int = Field(0, ge=0)


class CachedUser(BaseModel):
    """User snapshot embedded in sessions."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    email: str
    name: str = ""
    email_verified: bool = False
    tier: Literal["free", "premium"] = "free"
    quotas: Optional[UserQuotas] = None


class SessionRecord(BaseModel):
    """
    Session stored under ``session:{token}``.

    ``expires_at`` moves forward on every successful read (sliding expiration).
    """

    model_config = ConfigDict(frozen=True)

    user_id: str
    user: CachedUser
    is_active: bool = True
    last_access: datetime
    created_at: datetime
    expires_at: datetime


class RateLimitStatus(BaseModel):
    """Result of a fixed-window rate limit check."""

    model_config = ConfigDict(frozen=True)

    allowed: bool
    remaining: int = Field(..., ge=0)
    reset_at: datetime
