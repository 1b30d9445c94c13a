"""
Shared value objects.

Immutable, validated domain primitives.
Following DDD value object pattern.
"""

from __future__ import annotations

import re
import uuid

from pydantic import BaseModel, ConfigDict, Field

_BARCODE_PATTERN = re.compile(r"^\d{8,14}$")


class Barcode(BaseModel):
    """
    Product barcode: 8 to 14 digits (EAN-8 up to GTIN-14).

    Caller payloads are screened with ``looks_valid`` so a bad barcode is
    dropped rather than rejected.
    """

    model_config = ConfigDict(frozen=True)

    value: str = Field(..., pattern=r"^\d{8,14}$", description="Barcode digits")

    @staticmethod
    def looks_valid(raw: str) -> bool:
        return bool(_BARCODE_PATTERN.match(raw.strip()))


class AnalysisId(BaseModel):
    """
    Analysis ID value object.

    Identifies cached product analyses.
    Format: "analysis_<12_hex_chars>"

    Example:
        >>> analysis_id = AnalysisId.generate()
        >>> assert analysis_id.value.startswith("analysis_")
        >>> assert len(analysis_id.value) == 21
    """

    model_config = ConfigDict(frozen=True)

    value: str = Field(
        ...,
        pattern=r"^analysis_[a-f0-9]{12}$",
        description="Analysis identifier",
    )

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"AnalysisId('{self.value}')"

    def __hash__(self) -> int:
        return hash(self.value)

    @classmethod
    def generate(cls) -> AnalysisId:
        """
        Generate new analysis ID.

        Example:
            >>> id1 = AnalysisId.generate()
            >>> id2 = AnalysisId.generate()
            >>> assert id1 != id2
        """
        random_part = uuid.uuid4().hex[:12]
        return cls(value=f"analysis_{random_part}")
