from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from outcome_predictor.cache.cached_fetch import CachedFetcher
from outcome_predictor.cache.ttl_cache import TTLCache
from outcome_predictor.cancellation import CancellationToken, check_cancelled
from outcome_predictor.config import CACHE_CONFIG, PROVIDER_CONFIG
from outcome_predictor.data.providers.base import ScheduleProvider
from outcome_predictor.data.repositories import GameRepository
from outcome_predictor.models.games import Game
from outcome_predictor.models.teams import NFL_TEAMS, Team

logger = logging.getLogger(__name__)


def schedule_key(team: Team, season: int) -> str:
    return f"{team.abbreviation}:{season}"


class ScheduleIngestor:
    """
    Populate a GameRepository from a ScheduleProvider through the schedule cache.

    Args:
        provider: Upstream schedule source.
        repository: Destination for fetched games (upserted by game_id).
        fetcher: Cache front for the provider. A default one with the
            configured schedule TTL is created when omitted.
    """

    def __init__(
        self,
        provider: ScheduleProvider,
        repository: GameRepository,
        fetcher: Optional[CachedFetcher[List[Game]]] = None,
    ):
        self.provider = provider
        self.repository = repository
        if fetcher is None:
            fetcher = CachedFetcher(
                TTLCache(CACHE_CONFIG.schedule_ttl, name="schedules"),
                provider_name=provider.name,
                timeout_seconds=PROVIDER_CONFIG.timeout_seconds,
            )
        self.fetcher = fetcher

    def ingest_team(
        self,
        team: Team,
        season: int,
        cancel: Optional[CancellationToken] = None,
        force: bool = False,
    ) -> int:
        """
        Fetch one team's season and upsert it. Returns the number of games written.

        With force=True the cache is bypassed (to pick up new final scores);
        a still-live cached schedule is used if that upstream call fails.
        """
        if force:
            self.provider.forget(season)
        return self._ingest(team, season, cancel, force)

    def _ingest(self, team: Team, season: int, cancel: Optional[CancellationToken], force: bool) -> int:
        key = schedule_key(team, season)

        def fetch() -> List[Game]:
            return self.provider.fetch_games(team, season)

        if force:
            games = self.fetcher.refresh(key, fetch, cancel=cancel)
        else:
            games = self.fetcher.get_or_fetch(key, fetch, cancel=cancel)

        check_cancelled(cancel, "repository save")
        written = self.repository.save_all(games)
        logger.debug("ingested %d games for %s", written, key)
        return written

    def ingest_season(
        self,
        season: int,
        teams: Iterable[Team] = NFL_TEAMS,
        cancel: Optional[CancellationToken] = None,
        force: bool = False,
    ) -> int:
        """
        Ingest every listed team's season.

        Games appear in two teams' schedules; upserting makes the overlap
        harmless. A forced run asks the provider for a fresh season once,
        not once per team. Returns the total number of upserts performed.
        """
        if force:
            self.provider.forget(season)
        total = 0
        for team in teams:
            total += self._ingest(team, season, cancel, force)
        logger.info("season %s ingested: %d games in repository", season, len(self.repository.all_games()))
        return total
