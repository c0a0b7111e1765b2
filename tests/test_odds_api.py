from datetime import datetime, timezone

import pytest
import requests

from outcome_predictor.config import ProviderConfig
from outcome_predictor.data.providers.odds_api import OddsApiProvider, parse_event_odds
from outcome_predictor.errors import ProviderUnavailable
from outcome_predictor.models.teams import team_by_abbreviation

EVENT = {
    "id": "abc123",
    "sport_key": "americanfootball_nfl",
    "commence_time": "2023-12-10T18:00:00Z",
    "home_team": "Kansas City Chiefs",
    "away_team": "Detroit Lions",
    "bookmakers": [
        {
            "key": "draftkings",
            "title": "DraftKings",
            "last_update": "2023-12-09T15:30:00Z",
            "markets": [
                {
                    "key": "h2h",
                    "outcomes": [
                        {"name": "Kansas City Chiefs", "price": -180},
                        {"name": "Detroit Lions", "price": 150},
                    ],
                },
                {
                    "key": "spreads",
                    "outcomes": [
                        {"name": "Kansas City Chiefs", "price": -110, "point": -3.5},
                        {"name": "Detroit Lions", "price": -110, "point": 3.5},
                    ],
                },
                {
                    "key": "totals",
                    "outcomes": [
                        {"name": "Over", "price": -110, "point": 47.5},
                        {"name": "Under", "price": -110, "point": 47.5},
                    ],
                },
            ],
        }
    ],
}


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload
        self.headers = {"x-requests-remaining": "499", "x-requests-used": "1"}

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


@pytest.fixture
def provider():
    return OddsApiProvider(api_key="test_key", config=ProviderConfig(timeout_seconds=3.0))


@pytest.fixture
def kc_det():
    return team_by_abbreviation("KC"), team_by_abbreviation("DET")


def patch_get(monkeypatch, response=None, error=None):
    calls = []

    def fake_get(url, params=None, timeout=None):
        calls.append({"url": url, "params": params, "timeout": timeout})
        if error is not None:
            raise error
        return response

    monkeypatch.setattr(requests, "get", fake_get)
    return calls


def test_parse_event_odds():
    odds = parse_event_odds(EVENT)
    assert odds.home_moneyline == -180
    assert odds.away_moneyline == 150
    assert odds.spread == -3.5
    assert odds.total == 47.5
    assert odds.bookmaker == "draftkings"
    assert odds.last_update == datetime(2023, 12, 9, 15, 30, tzinfo=timezone.utc)
    assert odds.fair_home_probability == pytest.approx((180 / 280) / (180 / 280 + 100 / 250))


def test_event_without_bookmakers_has_no_odds():
    assert parse_event_odds({**EVENT, "bookmakers": []}) is None


def test_fetch_odds_matches_teams_and_sends_timeout(monkeypatch, provider, kc_det):
    calls = patch_get(monkeypatch, FakeResponse(payload=[EVENT]))
    odds = provider.fetch_odds(*kc_det)

    assert odds.home_moneyline == -180
    assert calls[0]["timeout"] == 3.0
    assert calls[0]["url"].endswith("/sports/americanfootball_nfl/odds")
    assert calls[0]["params"]["apiKey"] == "test_key"
    assert calls[0]["params"]["oddsFormat"] == "american"
    assert provider.requests_remaining == "499"


def test_unlisted_matchup_returns_none(monkeypatch, provider, kc_det):
    patch_get(monkeypatch, FakeResponse(payload=[EVENT]))
    kc, det = kc_det
    assert provider.fetch_odds(det, kc) is None


@pytest.mark.parametrize(
    "status, reason",
    [(429, ProviderUnavailable.RATE_LIMITED), (404, ProviderUnavailable.NOT_FOUND), (500, ProviderUnavailable.TRANSPORT)],
)
def test_http_status_maps_to_reason(monkeypatch, provider, kc_det, status, reason):
    patch_get(monkeypatch, FakeResponse(status_code=status))
    with pytest.raises(ProviderUnavailable) as excinfo:
        provider.fetch_odds(*kc_det)
    assert excinfo.value.reason == reason
    assert excinfo.value.provider == "the_odds_api"


@pytest.mark.parametrize(
    "error, reason",
    [
        (requests.exceptions.Timeout("slow"), ProviderUnavailable.TIMEOUT),
        (requests.exceptions.ConnectionError("down"), ProviderUnavailable.TRANSPORT),
    ],
)
def test_transport_errors_map_to_reason(monkeypatch, provider, kc_det, error, reason):
    patch_get(monkeypatch, error=error)
    with pytest.raises(ProviderUnavailable) as excinfo:
        provider.fetch_odds(*kc_det)
    assert excinfo.value.reason == reason
    assert excinfo.value.__cause__ is error


def test_malformed_payload(monkeypatch, provider, kc_det):
    patch_get(monkeypatch, FakeResponse(payload=ValueError("not json")))
    with pytest.raises(ProviderUnavailable):
        provider.fetch_odds(*kc_det)


def test_missing_api_key_fails_before_request(monkeypatch, kc_det):
    calls = patch_get(monkeypatch, FakeResponse(payload=[]))
    provider = OddsApiProvider(api_key="", config=ProviderConfig(odds_api_key=""))
    with pytest.raises(ProviderUnavailable):
        provider.fetch_odds(*kc_det)
    assert calls == []


@pytest.mark.integration
def test_odds_api_real_smoke(kc_det):
    """Optional integration test; needs ODDS_API_KEY."""
    provider = OddsApiProvider()
    if not provider.api_key:
        pytest.skip("ODDS_API_KEY not set")
    provider.fetch_odds(*kc_det)
    assert provider.requests_remaining is not None
