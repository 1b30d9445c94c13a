"""
Scoring domain models.

Immutable results produced by the classifiers and the aggregator.
All models are frozen pydantic models so they can be cached as JSON
and rebuilt with ``model_validate``.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Grade = Literal["A", "B", "C", "D", "E"]
RiskLevel = Literal["low", "medium", "high"]
ImpactLevel = Literal["minimal", "moderate", "severe"]
GlycemicCategory = Literal["low", "medium", "high", "unknown"]


# ═══════════════════════════════════════════════════════════
# PROCESSING (NOVA)
# ═══════════════════════════════════════════════════════════


class ProcessingMarkers(BaseModel):
    """Signals found in the ingredient text."""

    model_config = ConfigDict(frozen=True)

    additives_count: int = 0
    industrial_ingredients: tuple[str, ...] = ()
    process_indicators: tuple[str, ...] = ()
    ultra_processed_terms: tuple[str, ...] = ()


class ProcessingClassification(BaseModel):
    """
    NOVA-style processing group.

    Attributes:
        group: 1 (unprocessed) to 4 (ultra-processed)
        confidence: Reliability (0-1)
        reasoning: Human-readable reasons, most decisive first
        detected_markers: What triggered the decision
        ingredients_count: Meaningful ingredient tokens (capped at 50)
        status: "classified" or "error"
    """

    model_config = ConfigDict(frozen=True)

    group: int = Field(..., ge=1, le=4)
    confidence: float = Field(..., ge=0.0, le=1.0)
    reasoning: tuple[str, ...] = ()
    detected_markers: ProcessingMarkers = Field(default_factory=ProcessingMarkers)
    ingredients_count: int = Field(0, ge=0)
    status: Literal["classified", "error"] = "classified"


# ═══════════════════════════════════════════════════════════
# ADDITIVES
# ═══════════════════════════════════════════════════════════


class DetectedAdditive(BaseModel):
    """One additive found in the ingredients. Unknown codes have no risk level."""

    model_config = ConfigDict(frozen=True)

    code: str
    name: Optional[str] = None
    category: Optional[str] = None
    risk_level: Optional[RiskLevel] = None
    concerns: tuple[str, ...] = ()
    microbiome_severity: Optional[Literal["mild", "moderate", "severe"]] = None
    known: bool = True


class MicrobiomeImpact(BaseModel):
    model_config = ConfigDict(frozen=True)

    global_impact: ImpactLevel = "minimal"
    affected: tuple[str, ...] = ()


class AdditiveReport(BaseModel):
    """
    Additive risk analysis.

    ``risk_factors`` is deduplicated in order of first appearance.
    ``controversial_count`` counts known additives rated high.
    """

    model_config = ConfigDict(frozen=True)

    detected_additives: tuple[DetectedAdditive, ...] = ()
    risk_level: RiskLevel = "low"
    risk_factors: tuple[str, ...] = ()
    microbiome_impact: MicrobiomeImpact = Field(default_factory=MicrobiomeImpact)
    controversial_count: int = 0
    confidence: float = Field(0.8, ge=0.0, le=1.0)
    status: Literal["analyzed", "error"] = "analyzed"


# ═══════════════════════════════════════════════════════════
# NUTRITION GRADE
# ═══════════════════════════════════════════════════════════


class NegativePoints(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: int
    energy: int
    saturated_fat: int
    sugars: int
    sodium: int


class PositivePoints(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: int
    fruits_vegetables: int
    fiber: int
    proteins: int


class NutritionPoints(BaseModel):
    model_config = ConfigDict(frozen=True)

    negative: NegativePoints
    positive: PositivePoints


class GradeImpact(BaseModel):
    model_config = ConfigDict(frozen=True)

    bonus: int = 0
    description: str = ""


class NutritionGrade(BaseModel):
    """
    Nutri-Score-style grade.

    ``score`` and ``grade`` are None whenever ``confidence`` is below the
    minimum (0.4) or the calculation failed.
    """

    model_config = ConfigDict(frozen=True)

    score: Optional[int] = None
    grade: Optional[Grade] = None
    confidence: float = Field(0.0, ge=0.0, le=1.0)
    status: Literal["calculated", "insufficient_data", "error"] = "calculated"
    breakdown: Optional[NutritionPoints] = None
    impact: GradeImpact = Field(default_factory=GradeImpact)
    is_beverage: bool = False
    supplied_fields: tuple[str, ...] = ()


# ═══════════════════════════════════════════════════════════
# GLYCEMIC
# ═══════════════════════════════════════════════════════════


class GlycemicBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: int
    source: str
    category: str


class AppliedModifier(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: str
    factor: float


class GlycemicImpact(BaseModel):
    model_config = ConfigDict(frozen=True)

    penalty: int = 0
    description: str = ""


class GlycemicEstimate(BaseModel):
    """
    Glycemic index and load estimate.

    Invariant: ``load == index * carbohydrates / 100`` whenever both are set.
    """

    model_config = ConfigDict(frozen=True)

    index: Optional[int] = Field(None, ge=0, le=100)
    load: Optional[float] = Field(None, ge=0.0)
    category: GlycemicCategory = "unknown"
    confidence: float = Field(0.0, ge=0.0, le=1.0)
    status: Literal["estimated", "insufficient_data", "error"] = "estimated"
    base: Optional[GlycemicBase] = None
    modifiers_applied: dict[str, AppliedModifier] = Field(default_factory=dict)
    impact: GlycemicImpact = Field(default_factory=GlycemicImpact)
    explanation: str = ""


# ═══════════════════════════════════════════════════════════
# HOUSEHOLD CHEMICALS
# ═══════════════════════════════════════════════════════════


class ChemicalPenalty(BaseModel):
    model_config = ConfigDict(frozen=True)

    ingredient: str
    penalty: int
    reason: Optional[str] = None
    source: str


class ToxicityScore(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: float = Field(..., ge=0, le=100)
    penalties: tuple[ChemicalPenalty, ...] = ()
    issues: tuple[str, ...] = ()


class BiodegradabilityScore(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: float = Field(..., ge=0, le=100)
    biodegradable_ratio: int = Field(..., ge=0, le=100)
    analysis: tuple[str, ...] = ()


class Irritant(BaseModel):
    model_config = ConfigDict(frozen=True)

    ingredient: str
    level: Literal["mild", "moderate", "severe"]


class IrritationScore(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: float = Field(..., ge=0, le=100)
    allergens: tuple[str, ...] = ()
    irritants: tuple[Irritant, ...] = ()
    skin_safety: Literal["excellent", "good", "moderate", "poor"] = "excellent"


class EnvironmentalScore(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: float = Field(..., ge=0, le=100)
    natural_ratio: int = Field(0, ge=0, le=100)
    eco_bonus: int = 0
    certification_bonus: int = 0
    sustainability: Literal["excellent", "good", "needs_improvement"] = "good"


class ChemicalBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    ecotoxicity: ToxicityScore
    biodegradability: BiodegradabilityScore
    irritation: IrritationScore
    environmental: EnvironmentalScore


class DetectedIssue(BaseModel):
    model_config = ConfigDict(frozen=True)

    severity: Literal["critical", "high"]
    ingredient: str
    issue: str
    source: str


class DetectedCertification(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    bonus: int
    credibility: str


class Alternative(BaseModel):
    """Suggested replacement product family."""

    model_config = ConfigDict(frozen=True)

    type: str
    title: str
    description: str
    benefits: tuple[str, ...] = ()


class Insight(BaseModel):
    """Educational message attached to a score."""

    model_config = ConfigDict(frozen=True)

    type: str
    title: str
    content: str
    source: Optional[str] = None


class ChemicalRiskResult(BaseModel):
    """Household chemical assessment (REACH/ECHA based)."""

    model_config = ConfigDict(frozen=True)

    score: int = Field(..., ge=0, le=100)
    confidence: float = Field(..., ge=0.0, le=1.0)
    breakdown: ChemicalBreakdown
    detected_issues: tuple[DetectedIssue, ...] = ()
    detected_certifications: tuple[DetectedCertification, ...] = ()
    alternatives: tuple[Alternative, ...] = ()
    insights: tuple[Insight, ...] = ()


# ═══════════════════════════════════════════════════════════
# AGGREGATE
# ═══════════════════════════════════════════════════════════


class ComponentScore(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: float = Field(..., ge=0, le=100)
    weight: float = Field(..., ge=0, le=1)
    confidence: float = Field(..., ge=0, le=1)


class ScoreBreakdown(BaseModel):
    """
    Final product score with everything that explains it.

    Attributes:
        score: Overall score (0-100)
        grade: Letter grade A-E derived from score
        confidence: Overall confidence (0-1)
        confidence_label: very_high|high|medium|low
        publishable: True when confidence reaches the publication threshold
        category: "food" or "detergent"
        components: Component name -> score, weight, confidence
        improvement_suggested: True when score < 70
        improvement_message: Short hint, empty when not suggested
        processing/additives/nutrition/glycemic/chemical: Component results
        insights: Educational insights
        recommendations: Actionable advice
        reference_version: Version of the rule tables used
    """

    model_config = ConfigDict(frozen=True)

    score: int = Field(..., ge=0, le=100)
    grade: Grade
    confidence: float = Field(..., ge=0.0, le=1.0)
    confidence_label: str = "low"
    publishable: bool = False
    category: Literal["food", "detergent"]
    components: dict[str, ComponentScore] = Field(default_factory=dict)
    improvement_suggested: bool = False
    improvement_message: str = ""

    processing: Optional[ProcessingClassification] = None
    additives: Optional[AdditiveReport] = None
    nutrition: Optional[NutritionGrade] = None
    glycemic: Optional[GlycemicEstimate] = None
    chemical: Optional[ChemicalRiskResult] = None

    insights: tuple[Insight, ...] = ()
    recommendations: tuple[str, ...] = ()
    reference_version: str = ""
