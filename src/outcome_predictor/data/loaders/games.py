from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

import pandas as pd

from outcome_predictor.config import DATA_CONFIG
from outcome_predictor.models.games import Game, GameOutcome
from outcome_predictor.models.teams import team_by_abbreviation

try:
    import nfl_data_py as nfl
except ImportError as e:
    raise ImportError(
        "nfl-data-py is required for ScheduleLoader.\n"
        "Install with `pip install nfl-data-py` or add it to pyproject.toml."
    ) from e

logger = logging.getLogger(__name__)


@dataclass
class ScheduleLoaderConfig:
    """
    Configuration for the schedule loader.

    Attributes:
        seasons: List of NFL seasons to load.
        save_parquet: If True, saves the canonical DataFrame to data/raw/.
        include_markets: If True, keep market-related columns (spread, total, moneyline).
    """

    seasons: List[int]
    save_parquet: bool = False
    include_markets: bool = True


class ScheduleLoader:
    """
    Load NFL schedules and final scores from nfl_data_py.

    The canonical games table has:
    - One row per game
    - Clear 'game_id', 'season', 'week', 'gameday' columns
    - Outcome targets: home_win, total_points (NA until the game is played)
    - Optional market columns (spread, total, moneylines)
    """

    BASE_COLS = [
        "game_id",
        "season",
        "week",
        "gameday",
        "game_date",
        "gametime",
        "home_team",
        "away_team",
        "home_score",
        "away_score",
    ]

    MARKET_COLS = [
        "spread_line",
        "total_line",
        "home_moneyline",
        "away_moneyline",
    ]

    CANONICAL_ORDER = [
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

    def __init__(self, config: Optional[ScheduleLoaderConfig] = None):
        if config is None:
            config = ScheduleLoaderConfig(seasons=DATA_CONFIG.default_seasons)
        self.config = config

    def load(self) -> pd.DataFrame:
        """
        Load schedules into the canonical games DataFrame.

        Returns:
            A DataFrame with identifiers, kickoff (gameday, datetime64),
            teams, scores, targets and optional market columns.
        """
        schedules = self._load_raw_schedules()
        games = self._build_games_table(schedules)
        logger.debug("loaded %d schedule rows for seasons %s", len(games), self.config.seasons)

        if self.config.save_parquet:
            DATA_CONFIG.raw_data_dir.mkdir(parents=True, exist_ok=True)
            start_season = min(self.config.seasons)
            end_season = max(self.config.seasons)
            path = DATA_CONFIG.raw_data_dir / f"schedules_{start_season}_{end_season}.parquet"
            games.to_parquet(path, index=False)

        return games

    def load_games(self) -> List[Game]:
        """Load schedules and convert them to Game values."""
        return games_from_frame(self.load())

    def _load_raw_schedules(self) -> pd.DataFrame:
        seasons = self.config.seasons
        if not seasons:
            raise ValueError("At least one season must be provided to ScheduleLoader.")

        try:
            schedules = nfl.import_schedules(list(seasons))
        except AttributeError as e:
            raise RuntimeError(
                "nfl_data_py.import_schedules is not available. "
                "Check your nfl-data-py version and update this loader accordingly."
            ) from e

        if not isinstance(schedules, pd.DataFrame):
            raise TypeError("nfl.import_schedules did not return a pandas DataFrame.")

        return schedules

    def _build_games_table(self, schedules: pd.DataFrame) -> pd.DataFrame:
        """Standardize the raw schedules into the canonical game-level table."""
        df = schedules.copy()

        if "gameday" in df.columns:
            date_col = "gameday"
        elif "game_date" in df.columns:
            date_col = "game_date"
        else:
            raise KeyError("Could not find a 'gameday' or 'game_date' column in schedules.")

        keep_cols = list(self.BASE_COLS)
        if self.config.include_markets:
            keep_cols.extend(self.MARKET_COLS)
        keep_cols = [c for c in keep_cols if c in df.columns]
        df = df[keep_cols].copy()

        # Kickoff = date + local start time when nflverse provides one
        kickoff = df[date_col].astype(str)
        if "gametime" in df.columns:
            kickoff = kickoff + " " + df["gametime"].fillna("00:00").astype(str)
        df["gameday"] = pd.to_datetime(kickoff)
        df = df.drop(columns=[c for c in ("game_date", "gametime") if c in df.columns])

        self._add_outcome_targets_inplace(df)

        col_order = [c for c in self.CANONICAL_ORDER if c in df.columns]
        other_cols = [c for c in df.columns if c not in col_order]
        return df[col_order + other_cols]

    @staticmethod
    def _add_outcome_targets_inplace(df: pd.DataFrame) -> None:
        """Add home_win and total_points; both stay NA for unplayed games."""
        required = ["home_score", "away_score"]
        missing = [c for c in required if c not in df.columns]
        if missing:
            raise KeyError(f"Missing score columns required for targets: {missing}")

        played = df["home_score"].notna() & df["away_score"].notna()
        df["home_win"] = (df["home_score"] > df["away_score"]).astype("Int64").where(played)
        df["total_points"] = (df["home_score"] + df["away_score"]).astype("Int64").where(played)


def games_from_frame(df: pd.DataFrame) -> List[Game]:
    """
    Convert canonical schedule rows into Game values.

    Rows with both scores present get a GameOutcome. Rows naming a team
    the registry does not know are skipped with a warning.
    """
    games: List[Game] = []
    for row in df.itertuples(index=False):
        try:
            home = team_by_abbreviation(str(row.home_team))
            away = team_by_abbreviation(str(row.away_team))
        except KeyError as exc:
            logger.warning("skipping %s: %s", row.game_id, exc)
            continue

        outcome = None
        if pd.notna(row.home_score) and pd.notna(row.away_score):
            outcome = GameOutcome(home_score=int(row.home_score), away_score=int(row.away_score))

        games.append(
            Game(
                game_id=str(row.game_id),
                home_team=home,
                away_team=away,
                scheduled_date=pd.Timestamp(row.gameday).to_pydatetime(),
                week=int(row.week),
                season=int(row.season),
                outcome=outcome,
            )
        )
    return games
