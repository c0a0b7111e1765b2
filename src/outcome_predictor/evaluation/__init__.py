"""Prediction scoring: accuracy, Brier score, log-loss and calibration."""

from outcome_predictor.evaluation.metrics import EvaluationMetrics, Evaluator

__all__ = ["EvaluationMetrics", "Evaluator"]
