"""
Game Models - scheduled games and their outcomes.

This module contains:
- Winner: Enum for home/away/tie
- GameOutcome: Final score with derived winner and point differential
- Game: Immutable scheduled game, optionally carrying its outcome
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Optional

from outcome_predictor.models.teams import Team


class Winner(Enum):
    HOME = "home"
    AWAY = "away"
    TIE = "tie"


@dataclass(frozen=True)
class GameOutcome:
    """Final score of a completed game."""

    home_score: int
    away_score: int

    def __post_init__(self):
        if self.home_score < 0 or self.away_score < 0:
            raise ValueError(
                f"Scores must be non-negative, got {self.home_score}-{self.away_score}"
            )

    @property
    def winner(self) -> Winner:
        if self.home_score > self.away_score:
            return Winner.HOME
        if self.away_score > self.home_score:
            return Winner.AWAY
        return Winner.TIE

    @property
    def point_differential(self) -> int:
        """Home team perspective."""
        return self.home_score - self.away_score

    @property
    def total_points(self) -> int:
        return self.home_score + self.away_score


@dataclass(frozen=True)
class Game:
    """
    A single scheduled game.

    Games are values: attaching a result yields a new Game with the same
    game_id, which the repository then upserts.

    Attributes:
        game_id: Opaque unique identifier (e.g., "2023_01_DET_KC")
        home_team: Team playing at home
        away_team: Team playing away
        scheduled_date: Kickoff date and time
        week: Week number within the season
        season: Season year
        outcome: Final score, None until the game completes
    """

    game_id: str
    home_team: Team
    away_team: Team
    scheduled_date: datetime
    week: int
    season: int
    outcome: Optional[GameOutcome] = None

    def __post_init__(self):
        if not self.game_id:
            raise ValueError("game_id must not be empty.")
        if self.home_team.abbreviation == self.away_team.abbreviation:
            raise ValueError(f"A team cannot play itself: {self.home_team.abbreviation}")

    @property
    def is_completed(self) -> bool:
        return self.outcome is not None

    def with_outcome(self, outcome: GameOutcome) -> "Game":
        return replace(self, outcome=outcome)

    def involves(self, team: Team) -> bool:
        abbr = team.abbreviation
        return self.home_team.abbreviation == abbr or self.away_team.abbreviation == abbr

    def is_home(self, team: Team) -> bool:
        return self.home_team.abbreviation == team.abbreviation

    def is_matchup(self, team_a: Team, team_b: Team) -> bool:
        """True if the two teams met in this game, either venue."""
        return self.involves(team_a) and self.involves(team_b)

    def won_by(self, team: Team) -> bool:
        """True if the game is completed and `team` was on the winning side."""
        if self.outcome is None or not self.involves(team):
            return False
        winner = self.outcome.winner
        if self.is_home(team):
            return winner is Winner.HOME
        return winner is Winner.AWAY

    def points_for(self, team: Team) -> Optional[int]:
        """Points scored by `team`, or None if not completed / not involved."""
        if self.outcome is None or not self.involves(team):
            return None
        return self.outcome.home_score if self.is_home(team) else self.outcome.away_score

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "game_id": self.game_id,
            "season": self.season,
            "week": self.week,
            "scheduled_date": self.scheduled_date.isoformat(),
            "home_team": self.home_team.abbreviation,
            "away_team": self.away_team.abbreviation,
            "home_score": self.outcome.home_score if self.outcome else None,
            "away_score": self.outcome.away_score if self.outcome else None,
            "winner": self.outcome.winner.value if self.outcome else None,
        }
