from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple

import numpy as np

from outcome_predictor.models.games import GameOutcome, Winner
from outcome_predictor.models.predictions import Prediction

EPSILON = 1e-15

PredictionOutcome = Tuple[Prediction, GameOutcome]


@dataclass(frozen=True)
class EvaluationMetrics:
    """
    Accuracy and calibration of a batch of predictions.

    Attributes:
        total_predictions: Number of (prediction, outcome) pairs evaluated
        correct_count: Pairs whose predicted winner matched the actual winner
        accuracy: correct_count / total_predictions (0 for an empty batch)
        brier_score: Mean squared error of the home-win probability (0 = perfect)
        log_loss: Mean negative log-likelihood of the actual result
    """

    total_predictions: int = 0
    correct_count: int = 0
    accuracy: float = 0.0
    brier_score: float = 0.0
    log_loss: float = 0.0

    def to_dict(self) -> dict:
        return {
            "total_predictions": self.total_predictions,
            "correct_count": self.correct_count,
            "accuracy": round(self.accuracy, 4),
            "brier_score": round(self.brier_score, 4),
            "log_loss": round(self.log_loss, 4),
        }


def actual_home_result(outcome: GameOutcome) -> float:
    """1.0 for a home win, 0.0 for an away win, 0.5 for a tie."""
    winner = outcome.winner
    if winner is Winner.HOME:
        return 1.0
    if winner is Winner.AWAY:
        return 0.0
    return 0.5


class Evaluator:
    """
    Scores predictions against recorded outcomes.

    Ties count as half a home win in the Brier score and log-loss, so a
    50/50 call on a tied game is treated as well calibrated.
    """

    def evaluate(self, pairs: Iterable[PredictionOutcome]) -> EvaluationMetrics:
        pairs = list(pairs)
        if not pairs:
            return EvaluationMetrics()

        probs = np.array([p.home_win_probability for p, _ in pairs], dtype=float)
        actual = np.array([actual_home_result(o) for _, o in pairs], dtype=float)
        correct = sum(1 for p, o in pairs if p.predicted_winner is o.winner)

        clipped = np.clip(probs, EPSILON, 1.0 - EPSILON)
        losses = -(actual * np.log(clipped) + (1.0 - actual) * np.log(1.0 - clipped))

        return EvaluationMetrics(
            total_predictions=len(pairs),
            correct_count=correct,
            accuracy=correct / len(pairs),
            brier_score=float(np.mean((probs - actual) ** 2)),
            log_loss=float(np.mean(losses)),
        )


def evaluate(pairs: Sequence[PredictionOutcome]) -> EvaluationMetrics:
    """Convenience wrapper around Evaluator().evaluate."""
    return Evaluator().evaluate(pairs)
