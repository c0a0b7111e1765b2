from datetime import datetime, timedelta

import pandas as pd
import pytest

from outcome_predictor.data.repositories import InMemoryGameRepository
from outcome_predictor.models.games import Game, GameOutcome
from outcome_predictor.models.teams import team_by_abbreviation


class FakeClock:
    """Manually advanced monotonic clock for TTL tests."""

    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def build_game(game_id, home, away, when, season=2023, week=1, score=None) -> Game:
    """Game from abbreviations; `score` is (home_score, away_score) or None."""
    outcome = GameOutcome(*score) if score is not None else None
    return Game(
        game_id=game_id,
        home_team=team_by_abbreviation(home),
        away_team=team_by_abbreviation(away),
        scheduled_date=when,
        week=week,
        season=season,
        outcome=outcome,
    )


KC_OPPONENTS = ["BUF", "MIA", "NE", "NYJ", "BAL", "CIN", "CLE", "PIT", "HOU", "IND"]
DET_OPPONENTS = ["CHI", "GB", "MIN", "ATL", "CAR", "NO", "TB", "ARI", "SF", "SEA"]
SEASON_START = datetime(2023, 9, 7, 20, 20)


def season_record(team, opponents, wins, offset_days=0):
    """
    One game per week for `team`, home in even weeks, winning the first `wins`.

    Winners score 27, losers 17.
    """
    games = []
    for i, opp in enumerate(opponents):
        when = SEASON_START + timedelta(days=7 * i + offset_days)
        won = i < wins
        if i % 2 == 0:
            home, away = team, opp
            score = (27, 17) if won else (17, 27)
        else:
            home, away = opp, team
            score = (17, 27) if won else (27, 17)
        games.append(build_game(f"2023_{i + 1:02d}_{away}_{home}", home, away, when, week=i + 1, score=score))
    return games


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def kc():
    return team_by_abbreviation("KC")


@pytest.fixture
def det():
    return team_by_abbreviation("DET")


@pytest.fixture
def history_games():
    """KC 8-2 and DET 2-8 over ten 2023 games each; the teams never meet."""
    return season_record("KC", KC_OPPONENTS, wins=8) + season_record("DET", DET_OPPONENTS, wins=2, offset_days=1)


@pytest.fixture
def game_repository(history_games) -> InMemoryGameRepository:
    return InMemoryGameRepository(history_games)


@pytest.fixture
def upcoming_game() -> Game:
    """KC hosting DET after both ten-game histories, no result yet."""
    return build_game("2023_14_DET_KC", "KC", "DET", datetime(2023, 12, 10, 13, 0), week=14)


@pytest.fixture
def mock_games_data() -> pd.DataFrame:
    """Mock schedules data for unit tests (no live API calls)."""
    return pd.DataFrame(
        {
            "game_id": ["2023_01_DET_KC", "2023_01_BUF_NYJ", "2023_18_LA_SF"],
            "season": [2023, 2023, 2023],
            "week": [1, 1, 18],
            "gameday": ["2023-09-07", "2023-09-11", "2024-01-07"],
            "gametime": ["20:20", "20:15", "16:25"],
            "home_team": ["KC", "NYJ", "SF"],
            "away_team": ["DET", "BUF", "LA"],
            "home_score": [20, 22, None],
            "away_score": [21, 16, None],
            "result": [-1, 6, None],
            # market-like columns
            "spread_line": [-6.5, -2.5, 4.5],
            "total_line": [54.5, 45.5, 41.0],
            "home_moneyline": [-300, -140, -200],
            "away_moneyline": [250, 120, 170],
        }
    )
