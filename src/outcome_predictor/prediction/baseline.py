"""
Baseline predictor: historical win rates plus a fixed home-field bonus.

    p = clamp(0.5 + (home_rate - away_rate) * 0.5 + home_field_advantage, [0.02, 0.98])

Confidence is a sum of three separately capped factors (sample size,
sample balance, decisiveness), so a close matchup reports low confidence
even when both teams have long histories.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List

from outcome_predictor.config import PREDICTOR_CONFIG, PredictorConfig
from outcome_predictor.data.repositories import GameRepository
from outcome_predictor.errors import InsufficientHistory
from outcome_predictor.models.games import Game
from outcome_predictor.models.predictions import Prediction
from outcome_predictor.models.teams import Team

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TeamRecord:
    """Wins over games played; ties count as games, not wins."""

    team: Team
    wins: int
    games: int

    @property
    def win_rate(self) -> float:
        return self.wins / self.games if self.games else 0.0

    @classmethod
    def from_history(cls, team: Team, history: List[Game]) -> "TeamRecord":
        return cls(team=team, wins=sum(1 for g in history if g.won_by(team)), games=len(history))


@dataclass(frozen=True)
class ConfidenceBreakdown:
    sample_size: float
    balance: float
    certainty: float

    @property
    def total(self) -> float:
        return max(0.0, min(1.0, self.sample_size + self.balance + self.certainty))


class ConfidenceModel:
    """Three-factor additive confidence score."""

    def __init__(self, config: PredictorConfig = PREDICTOR_CONFIG):
        self.config = config

    def score(self, home_games: int, away_games: int, probability: float) -> ConfidenceBreakdown:
        c = self.config
        sample = min(c.sample_size_cap, (home_games + away_games) / c.sample_size_denominator)
        larger = max(home_games, away_games)
        balance = c.balance_weight * min(home_games, away_games) / larger if larger else 0.0
        certainty = min(c.certainty_cap, abs(probability - 0.5) * c.certainty_scale)
        return ConfidenceBreakdown(sample_size=sample, balance=balance, certainty=certainty)


@dataclass(frozen=True)
class BaselineAnalysis:
    """
    Everything the baseline computed for one game.

    The adjuster works from this rather than from the Prediction so it
    can reuse the histories without querying the repository twice.
    """

    game: Game
    home_record: TeamRecord
    away_record: TeamRecord
    home_history: List[Game]
    away_history: List[Game]
    raw_probability: float
    probability: float
    confidence: ConfidenceBreakdown
    reasoning: str


class BaselinePredictor:
    """
    Win-rate baseline over every completed game before kickoff.

    Args:
        game_repository: Source of historical games.
        config: Tunable constants (home-field bonus, clamps, confidence caps).
    """

    def __init__(self, game_repository: GameRepository, config: PredictorConfig = PREDICTOR_CONFIG):
        self.game_repository = game_repository
        self.config = config
        self.confidence_model = ConfidenceModel(config)

    def analyze(self, game: Game) -> BaselineAnalysis:
        """
        Compute the baseline for `game`.

        Raises:
            InsufficientHistory: either team has no completed game before kickoff.
        """
        home_history = self.game_repository.team_history(game.home_team, before=game.scheduled_date)
        away_history = self.game_repository.team_history(game.away_team, before=game.scheduled_date)
        # The game itself may already be stored with its result
        home_history = [g for g in home_history if g.game_id != game.game_id]
        away_history = [g for g in away_history if g.game_id != game.game_id]

        missing = [
            team.abbreviation
            for team, history in ((game.home_team, home_history), (game.away_team, away_history))
            if not history
        ]
        if missing:
            raise InsufficientHistory(missing)

        home = TeamRecord.from_history(game.home_team, home_history)
        away = TeamRecord.from_history(game.away_team, away_history)

        c = self.config
        raw = 0.5 + (home.win_rate - away.win_rate) * 0.5 + c.home_field_advantage
        probability = max(c.min_probability, min(c.max_probability, raw))
        confidence = self.confidence_model.score(home.games, away.games, probability)
        logger.debug(
            "%s baseline %.3f (raw %.3f), confidence %.3f",
            game.game_id,
            probability,
            raw,
            confidence.total,
        )

        return BaselineAnalysis(
            game=game,
            home_record=home,
            away_record=away,
            home_history=home_history,
            away_history=away_history,
            raw_probability=raw,
            probability=probability,
            confidence=confidence,
            reasoning=self._reasoning(home, away, confidence),
        )

    def predict(self, game: Game) -> Prediction:
        analysis = self.analyze(game)
        return Prediction.create(
            game,
            analysis.probability,
            analysis.confidence.total,
            analysis.reasoning,
            model_version=self.config.model_version,
        )

    def _reasoning(self, home: TeamRecord, away: TeamRecord, confidence: ConfidenceBreakdown) -> str:
        return "\n".join(
            [
                "Baseline prediction based on historical win rates:",
                f"- {home.team.name}: {home.win_rate:.1%} win rate ({home.games} games)",
                f"- {away.team.name}: {away.win_rate:.1%} win rate ({away.games} games)",
                f"- Home field advantage: +{self.config.home_field_advantage:.1%}",
                (
                    f"- Confidence: {confidence.total:.1%} "
                    f"(sample size {confidence.sample_size:.2f}, "
                    f"balance {confidence.balance:.2f}, "
                    f"certainty {confidence.certainty:.2f})"
                ),
            ]
        )
