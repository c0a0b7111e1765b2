import pytest

from outcome_predictor.cache.cached_fetch import CachedFetcher
from outcome_predictor.cache.ttl_cache import TTLCache
from outcome_predictor.cancellation import CancellationToken
from outcome_predictor.data.ingest import ScheduleIngestor, schedule_key
from outcome_predictor.data.providers.base import ScheduleProvider
from outcome_predictor.data.repositories import InMemoryGameRepository
from outcome_predictor.errors import CancellationRequested, ProviderUnavailable


class StubScheduleProvider(ScheduleProvider):
    name = "stub_schedule"

    def __init__(self, games, on_fetch=None):
        self.games = games
        self.on_fetch = on_fetch
        self.calls = 0
        self.error = None

    def fetch_games(self, team, season):
        self.calls += 1
        if self.on_fetch is not None:
            self.on_fetch()
        if self.error is not None:
            raise self.error
        return [g for g in self.games if g.season == season and g.involves(team)]


@pytest.fixture
def fetcher(clock):
    f = CachedFetcher(TTLCache(3600.0, clock=clock, name="schedules"), "stub_schedule", timeout_seconds=None)
    yield f
    f.close()


def test_schedule_key(kc):
    assert schedule_key(kc, 2023) == "KC:2023"


def test_second_ingest_hits_cache(history_games, kc, fetcher):
    provider = StubScheduleProvider(history_games)
    repository = InMemoryGameRepository()
    ingestor = ScheduleIngestor(provider, repository, fetcher=fetcher)

    assert ingestor.ingest_team(kc, 2023) == 10
    assert ingestor.ingest_team(kc, 2023) == 10
    assert provider.calls == 1
    assert len(repository) == 10
    assert fetcher.cache.stats().hits == 1


def test_expired_schedule_is_refetched(history_games, kc, fetcher, clock):
    provider = StubScheduleProvider(history_games)
    ingestor = ScheduleIngestor(provider, InMemoryGameRepository(), fetcher=fetcher)

    ingestor.ingest_team(kc, 2023)
    clock.advance(3601.0)
    ingestor.ingest_team(kc, 2023)
    assert provider.calls == 2


def test_force_bypasses_cache(history_games, kc, fetcher):
    provider = StubScheduleProvider(history_games)
    ingestor = ScheduleIngestor(provider, InMemoryGameRepository(), fetcher=fetcher)

    ingestor.ingest_team(kc, 2023)
    ingestor.ingest_team(kc, 2023, force=True)
    assert provider.calls == 2


def test_forced_refresh_falls_back_to_live_schedule(history_games, kc, fetcher):
    provider = StubScheduleProvider(history_games)
    repository = InMemoryGameRepository()
    ingestor = ScheduleIngestor(provider, repository, fetcher=fetcher)
    ingestor.ingest_team(kc, 2023)

    provider.error = ProviderUnavailable("stub_schedule", ProviderUnavailable.RATE_LIMITED)
    assert ingestor.ingest_team(kc, 2023, force=True) == 10


def test_forced_refresh_after_expiry_propagates(history_games, kc, fetcher, clock):
    provider = StubScheduleProvider(history_games)
    ingestor = ScheduleIngestor(provider, InMemoryGameRepository(), fetcher=fetcher)
    ingestor.ingest_team(kc, 2023)

    clock.advance(3601.0)
    provider.error = ProviderUnavailable("stub_schedule", ProviderUnavailable.TRANSPORT)
    with pytest.raises(ProviderUnavailable) as excinfo:
        ingestor.ingest_team(kc, 2023, force=True)
    assert excinfo.value.reason == "transport"


def test_cancel_during_fetch_writes_nothing(history_games, kc, fetcher):
    token = CancellationToken()
    provider = StubScheduleProvider(history_games, on_fetch=token.cancel)
    repository = InMemoryGameRepository()
    ingestor = ScheduleIngestor(provider, repository, fetcher=fetcher)

    with pytest.raises(CancellationRequested):
        ingestor.ingest_team(kc, 2023, cancel=token)

    assert provider.calls == 1
    assert len(repository) == 0
    assert len(fetcher.cache) == 0


def test_cancel_before_save_keeps_repository_empty(history_games, kc, fetcher):
    provider = StubScheduleProvider(history_games)
    repository = InMemoryGameRepository()
    ingestor = ScheduleIngestor(provider, repository, fetcher=fetcher)
    ingestor.ingest_team(kc, 2023)
    repository = InMemoryGameRepository()
    ingestor.repository = repository

    # Served from cache, then cancelled at the repository write
    token = CancellationToken()
    token.cancel()
    with pytest.raises(CancellationRequested) as excinfo:
        ingestor.ingest_team(kc, 2023, cancel=token)
    assert excinfo.value.stage == "repository save"
    assert len(repository) == 0


def test_ingest_season_upserts_shared_games(history_games, upcoming_game, kc, det, fetcher):
    provider = StubScheduleProvider(history_games + [upcoming_game])
    repository = InMemoryGameRepository()
    ingestor = ScheduleIngestor(provider, repository, fetcher=fetcher)

    written = ingestor.ingest_season(2023, teams=[kc, det])

    # The KC-DET game comes back in both schedules
    assert written == 22
    assert len(repository) == 21
    assert repository.game(upcoming_game.game_id) == upcoming_game


def test_ingest_other_season_is_empty(history_games, kc, fetcher):
    ingestor = ScheduleIngestor(StubScheduleProvider(history_games), InMemoryGameRepository(), fetcher=fetcher)
    assert ingestor.ingest_team(kc, 2022) == 0
