"""Scoring application services."""

from ecoscore.application.scoring.scoring_service import ProductScoringService

__all__ = ["ProductScoringService"]
