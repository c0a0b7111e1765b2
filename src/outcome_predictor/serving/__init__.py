"""Service facade consumed by CLI/server layers."""

from outcome_predictor.serving.service import PredictionService

__all__ = ["PredictionService"]
