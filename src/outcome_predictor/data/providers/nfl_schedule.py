from __future__ import annotations

import logging
import socket
import threading
import time
from typing import Callable, List
from urllib.error import HTTPError, URLError

from outcome_predictor.cache.ttl_cache import TTLCache
from outcome_predictor.config import CACHE_CONFIG
from outcome_predictor.data.loaders.games import ScheduleLoader, ScheduleLoaderConfig, games_from_frame
from outcome_predictor.data.providers.base import ScheduleProvider
from outcome_predictor.errors import ProviderUnavailable
from outcome_predictor.models.games import Game
from outcome_predictor.models.teams import Team

logger = logging.getLogger(__name__)


class NflDataScheduleProvider(ScheduleProvider):
    """
    Schedule provider backed by nfl_data_py (nflverse schedule files).

    nflverse publishes whole seasons, so the first request for a season
    downloads it once and every team in that season is filtered from the
    kept copy until `season_ttl` elapses or `forget(season)` is called.
    """

    name = "nfl_data_py"

    def __init__(
        self,
        season_ttl: float = CACHE_CONFIG.schedule_ttl,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._seasons: TTLCache[List[Game]] = TTLCache(season_ttl, clock=clock, name="seasons")
        self._load_lock = threading.Lock()

    def fetch_games(self, team: Team, season: int) -> List[Game]:
        games = [g for g in self._season_games(season) if g.involves(team)]
        if not games:
            raise ProviderUnavailable(
                self.name, ProviderUnavailable.NOT_FOUND, f"no {season} games for {team.abbreviation}"
            )
        logger.debug("fetched %d %s games for %s", len(games), season, team.abbreviation)
        return games

    def forget(self, season: int) -> None:
        self._seasons.remove(str(season))

    def _season_games(self, season: int) -> List[Game]:
        key = str(season)
        games = self._seasons.get(key)
        if games is not None:
            return games
        with self._load_lock:
            # Another caller may have finished the download while we waited
            games = self._seasons.get(key)
            if games is None:
                games = games_from_frame(self._download(season))
                self._seasons.set(key, games)
        return games

    def _download(self, season: int):
        loader = ScheduleLoader(ScheduleLoaderConfig(seasons=[season], save_parquet=False))
        try:
            df = loader.load()
        except HTTPError as exc:
            raise ProviderUnavailable(self.name, _reason_for_status(exc.code), str(exc)) from exc
        except (socket.timeout, TimeoutError) as exc:
            raise ProviderUnavailable(self.name, ProviderUnavailable.TIMEOUT, str(exc)) from exc
        except (URLError, ConnectionError) as exc:
            raise ProviderUnavailable(self.name, ProviderUnavailable.TRANSPORT, str(exc)) from exc
        logger.info("downloaded %d %s schedule rows", len(df), season)
        return df


def _reason_for_status(status: int) -> str:
    if status == 404:
        return ProviderUnavailable.NOT_FOUND
    if status == 429:
        return ProviderUnavailable.RATE_LIMITED
    return ProviderUnavailable.TRANSPORT
