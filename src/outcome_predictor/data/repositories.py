"""
Game and prediction repositories.

The abstract classes are the storage-agnostic contract; the in-memory
classes are reference implementations that serialize writers with a lock
and answer reads from a snapshot copied under it. Nothing returned by a
repository aliases its internal storage.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, Iterable, List, Optional

import pandas as pd

from outcome_predictor.models.games import Game
from outcome_predictor.models.predictions import Prediction
from outcome_predictor.models.teams import Team

# Column order of the canonical games table
GAME_COLUMNS = [
    "game_id",
    "season",
    "week",
    "gameday",
    "home_team",
    "away_team",
    "home_score",
    "away_score",
    "home_win",
    "total_points",
]


class GameRepository(ABC):
    """Stores and retrieves scheduled and completed games."""

    @abstractmethod
    def save(self, game: Game) -> None:
        """Upsert by game_id (used to attach outcomes to completed games)."""

    @abstractmethod
    def save_all(self, games: Iterable[Game]) -> int:
        """Upsert many games; returns how many were written."""

    @abstractmethod
    def game(self, game_id: str) -> Optional[Game]:
        """Fetch a single game, or None."""

    @abstractmethod
    def games_for(self, team: Team, season: int) -> List[Game]:
        """Games in `season` where `team` is home or away, in no particular order."""

    @abstractmethod
    def games_between(self, start: datetime, end: datetime) -> List[Game]:
        """Games with start <= scheduled_date <= end, across all teams."""

    @abstractmethod
    def all_games(self) -> List[Game]:
        """Every stored game."""

    def team_history(self, team: Team, before: Optional[datetime] = None) -> List[Game]:
        """
        Completed games of `team` across all seasons, oldest first.

        Args:
            team: Team to query.
            before: If given, only games scheduled strictly before it.
        """
        history = [
            g
            for g in self.all_games()
            if g.is_completed
            and g.involves(team)
            and (before is None or g.scheduled_date < before)
        ]
        history.sort(key=lambda g: (g.scheduled_date, g.game_id))
        return history

    def to_frame(self) -> pd.DataFrame:
        """
        Export the canonical games table, one row per game, sorted by kickoff.

        Scores and targets are NaN/None for games without an outcome.
        """
        rows = []
        for g in self.all_games():
            outcome = g.outcome
            rows.append(
                {
                    "game_id": g.game_id,
                    "season": g.season,
                    "week": g.week,
                    "gameday": g.scheduled_date,
                    "home_team": g.home_team.abbreviation,
                    "away_team": g.away_team.abbreviation,
                    "home_score": outcome.home_score if outcome else None,
                    "away_score": outcome.away_score if outcome else None,
                    "home_win": int(outcome.home_score > outcome.away_score) if outcome else None,
                    "total_points": outcome.total_points if outcome else None,
                }
            )
        df = pd.DataFrame(rows, columns=GAME_COLUMNS)
        if len(df) > 0:
            df["gameday"] = pd.to_datetime(df["gameday"])
            df = df.sort_values(["gameday", "game_id"]).reset_index(drop=True)
        return df


class PredictionRepository(ABC):
    """Stores predictions; several may exist per game (one per model)."""

    @abstractmethod
    def save(self, prediction: Prediction) -> None:
        """Append. Never overwrites an earlier prediction."""

    @abstractmethod
    def predictions_for(self, game_id: str) -> List[Prediction]:
        """All predictions for a game, oldest first."""

    @abstractmethod
    def predictions_between(self, start: datetime, end: datetime) -> List[Prediction]:
        """Predictions with start <= created_at <= end, oldest first."""

    @abstractmethod
    def all(self) -> List[Prediction]:
        """Every stored prediction, oldest first."""


class InMemoryGameRepository(GameRepository):
    """Dict-backed GameRepository for development, tests and small services."""

    def __init__(self, games: Optional[Iterable[Game]] = None) -> None:
        self._games: Dict[str, Game] = {}
        self._lock = threading.Lock()
        if games is not None:
            self.save_all(games)

    def save(self, game: Game) -> None:
        with self._lock:
            self._games[game.game_id] = game

    def save_all(self, games: Iterable[Game]) -> int:
        games = list(games)
        with self._lock:
            for g in games:
                self._games[g.game_id] = g
        return len(games)

    def game(self, game_id: str) -> Optional[Game]:
        with self._lock:
            return self._games.get(game_id)

    def games_for(self, team: Team, season: int) -> List[Game]:
        return [g for g in self._snapshot() if g.season == season and g.involves(team)]

    def games_between(self, start: datetime, end: datetime) -> List[Game]:
        if start > end:
            raise ValueError(f"start ({start}) must not be after end ({end})")
        return [g for g in self._snapshot() if start <= g.scheduled_date <= end]

    def all_games(self) -> List[Game]:
        return self._snapshot()

    def __len__(self) -> int:
        with self._lock:
            return len(self._games)

    def _snapshot(self) -> List[Game]:
        with self._lock:
            return list(self._games.values())


class InMemoryPredictionRepository(PredictionRepository):
    """Append-only list of predictions."""

    def __init__(self) -> None:
        self._predictions: List[Prediction] = []
        self._lock = threading.Lock()

    def save(self, prediction: Prediction) -> None:
        with self._lock:
            self._predictions.append(prediction)

    def predictions_for(self, game_id: str) -> List[Prediction]:
        return self._sorted(p for p in self._snapshot() if p.game.game_id == game_id)

    def predictions_between(self, start: datetime, end: datetime) -> List[Prediction]:
        return self._sorted(p for p in self._snapshot() if start <= p.created_at <= end)

    def all(self) -> List[Prediction]:
        return self._sorted(self._snapshot())

    def __len__(self) -> int:
        with self._lock:
            return len(self._predictions)

    def _snapshot(self) -> List[Prediction]:
        with self._lock:
            return list(self._predictions)

    @staticmethod
    def _sorted(predictions: Iterable[Prediction]) -> List[Prediction]:
        return sorted(predictions, key=lambda p: p.created_at)
