"""Prediction pipeline: win-rate baseline, auxiliary signals and the adjuster."""

from outcome_predictor.prediction.adjuster import AdjustmentResult, MultiFactorAdjuster, SignalContribution
from outcome_predictor.prediction.baseline import BaselineAnalysis, BaselinePredictor, ConfidenceModel
from outcome_predictor.prediction.signals import MatchupContext

__all__ = [
    "AdjustmentResult",
    "BaselineAnalysis",
    "BaselinePredictor",
    "ConfidenceModel",
    "MatchupContext",
    "MultiFactorAdjuster",
    "SignalContribution",
]
