from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, List

import numpy as np
import pandas as pd

from outcome_predictor.evaluation.metrics import (
    EvaluationMetrics,
    Evaluator,
    PredictionOutcome,
    actual_home_result,
)

FRAME_COLUMNS = [
    "game_id",
    "season",
    "week",
    "home_team",
    "away_team",
    "model_version",
    "home_win_probability",
    "confidence",
    "predicted_winner",
    "actual_winner",
    "actual",
    "correct",
]


def evaluation_frame(pairs: Iterable[PredictionOutcome]) -> pd.DataFrame:
    """
    One row per (prediction, outcome) pair.

    'actual' is 1.0 / 0.0 / 0.5 for a home win / away win / tie.
    """
    rows = []
    for prediction, outcome in pairs:
        game = prediction.game
        rows.append(
            {
                "game_id": game.game_id,
                "season": game.season,
                "week": game.week,
                "home_team": game.home_team.abbreviation,
                "away_team": game.away_team.abbreviation,
                "model_version": prediction.model_version,
                "home_win_probability": prediction.home_win_probability,
                "confidence": prediction.confidence,
                "predicted_winner": prediction.predicted_winner.value,
                "actual_winner": outcome.winner.value,
                "actual": actual_home_result(outcome),
                "correct": prediction.predicted_winner is outcome.winner,
            }
        )
    return pd.DataFrame(rows, columns=FRAME_COLUMNS)


def calibration_table(pairs: Iterable[PredictionOutcome], bins: int = 10) -> pd.DataFrame:
    """
    Bucket predictions by home-win probability and compare to results.

    A well-calibrated model wins about 70% of the games it calls at 70%.

    Returns:
        One row per non-empty bucket with columns: bucket, lower, upper,
        count, predicted_mean, actual_rate, calibration_error
        (actual_rate - predicted_mean).
    """
    if bins < 1:
        raise ValueError(f"bins must be >= 1, got {bins}")

    df = evaluation_frame(pairs)
    columns = ["bucket", "lower", "upper", "count", "predicted_mean", "actual_rate", "calibration_error"]
    if df.empty:
        return pd.DataFrame(columns=columns)

    probs = df["home_win_probability"].to_numpy()
    df["bucket"] = np.minimum((probs * bins).astype(int), bins - 1)

    table = (
        df.groupby("bucket")
        .agg(
            count=("actual", "size"),
            predicted_mean=("home_win_probability", "mean"),
            actual_rate=("actual", "mean"),
        )
        .reset_index()
    )
    table["lower"] = table["bucket"] / bins
    table["upper"] = (table["bucket"] + 1) / bins
    table["calibration_error"] = table["actual_rate"] - table["predicted_mean"]
    return table[columns]


def compare_models(pairs: Iterable[PredictionOutcome]) -> Dict[str, EvaluationMetrics]:
    """Evaluate each model_version separately."""
    grouped: Dict[str, List[PredictionOutcome]] = defaultdict(list)
    for prediction, outcome in pairs:
        grouped[prediction.model_version].append((prediction, outcome))

    evaluator = Evaluator()
    return {version: evaluator.evaluate(group) for version, group in sorted(grouped.items())}
