"""
Prediction model.

A Prediction is created once per request and never mutated. Its
probability is validated on construction, so no invalid Prediction can
exist; `Prediction.create` is the factory every component goes through.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from outcome_predictor.errors import InvalidConfidence, InvalidProbability
from outcome_predictor.models.games import Game, Winner


def _in_unit_interval(value: float) -> bool:
    return not math.isnan(value) and 0.0 <= value <= 1.0


@dataclass(frozen=True)
class Prediction:
    """
    Home-win probability for one game, with confidence and reasoning.

    Attributes:
        game: The game being predicted
        home_win_probability: P(home wins), 0-1; ties are not modeled separately
        confidence: Confidence in the prediction, 0-1
        reasoning: Human-readable explanation
        predicted_home_score: Optional point projection for the home side
        predicted_away_score: Optional point projection for the away side
        model_version: Identifies the model/tuning that produced it
        created_at: When the prediction was made
    """

    game: Game
    home_win_probability: float
    confidence: float
    reasoning: str
    predicted_home_score: Optional[int] = None
    predicted_away_score: Optional[int] = None
    model_version: str = "baseline-v1"
    created_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        if not _in_unit_interval(self.home_win_probability):
            raise InvalidProbability(self.home_win_probability)
        if not _in_unit_interval(self.confidence):
            raise InvalidConfidence(self.confidence)

    @classmethod
    def create(
        cls,
        game: Game,
        home_win_probability: float,
        confidence: float,
        reasoning: str,
        *,
        predicted_home_score: Optional[int] = None,
        predicted_away_score: Optional[int] = None,
        model_version: str = "baseline-v1",
        created_at: Optional[datetime] = None,
    ) -> "Prediction":
        """
        Validating factory.

        Raises:
            InvalidProbability: home_win_probability outside [0, 1]
            InvalidConfidence: confidence outside [0, 1]
        """
        return cls(
            game=game,
            home_win_probability=float(home_win_probability),
            confidence=float(confidence),
            reasoning=reasoning,
            predicted_home_score=predicted_home_score,
            predicted_away_score=predicted_away_score,
            model_version=model_version,
            created_at=created_at or datetime.now(),
        )

    @property
    def away_win_probability(self) -> float:
        return 1.0 - self.home_win_probability

    @property
    def predicted_winner(self) -> Winner:
        if self.home_win_probability > 0.5:
            return Winner.HOME
        if self.home_win_probability < 0.5:
            return Winner.AWAY
        return Winner.TIE

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "game_id": self.game.game_id,
            "home_team": self.game.home_team.abbreviation,
            "away_team": self.game.away_team.abbreviation,
            "season": self.game.season,
            "week": self.game.week,
            "home_win_probability": round(self.home_win_probability, 4),
            "away_win_probability": round(self.away_win_probability, 4),
            "predicted_winner": self.predicted_winner.value,
            "confidence": round(self.confidence, 4),
            "predicted_home_score": self.predicted_home_score,
            "predicted_away_score": self.predicted_away_score,
            "model_version": self.model_version,
            "created_at": self.created_at.isoformat(),
            "reasoning": self.reasoning,
        }
