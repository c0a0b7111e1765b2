"""
The Odds API integration.

Fetches current NFL moneylines, spreads and totals in American format.
API documentation: https://the-odds-api.com/liveapi/guides/v4/

Usage:
    # export ODDS_API_KEY="your_api_key_here"
    provider = OddsApiProvider()
    odds = provider.fetch_odds(team_by_abbreviation("KC"), team_by_abbreviation("DET"))
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import requests

from outcome_predictor.config import PROVIDER_CONFIG, ProviderConfig
from outcome_predictor.data.providers.base import OddsProvider
from outcome_predictor.errors import ProviderUnavailable
from outcome_predictor.models.odds import BettingOdds
from outcome_predictor.models.teams import Team

logger = logging.getLogger(__name__)


class OddsApiProvider(OddsProvider):
    """Client for The Odds API. One request per call; no caching, no retries."""

    name = "the_odds_api"

    def __init__(
        self,
        api_key: Optional[str] = None,
        config: ProviderConfig = PROVIDER_CONFIG,
        session: Optional[requests.Session] = None,
    ):
        self.config = config
        self.api_key = api_key or config.odds_api_key
        self.session = session
        self.requests_remaining: Optional[str] = None
        self.requests_used: Optional[str] = None

    def fetch_odds(self, home_team: Team, away_team: Team) -> Optional[BettingOdds]:
        events = self._get_events()
        for event in events:
            if event.get("home_team") == home_team.name and event.get("away_team") == away_team.name:
                return parse_event_odds(event)
        logger.debug("no odds listed for %s @ %s", away_team.abbreviation, home_team.abbreviation)
        return None

    def _get_events(self) -> List[Dict[str, Any]]:
        if not self.api_key:
            raise ProviderUnavailable(self.name, ProviderUnavailable.TRANSPORT, "no API key configured")

        url = f"{self.config.odds_api_base_url}/sports/{self.config.odds_sport_key}/odds"
        params = {
            "apiKey": self.api_key,
            "regions": self.config.odds_regions,
            "markets": "h2h,spreads,totals",
            "oddsFormat": "american",
            "dateFormat": "iso",
        }
        get = self.session.get if self.session is not None else requests.get
        try:
            response = get(url, params=params, timeout=self.config.timeout_seconds)
        except requests.exceptions.Timeout as exc:
            raise ProviderUnavailable(self.name, ProviderUnavailable.TIMEOUT, str(exc)) from exc
        except requests.exceptions.RequestException as exc:
            raise ProviderUnavailable(self.name, ProviderUnavailable.TRANSPORT, str(exc)) from exc

        self.requests_remaining = response.headers.get("x-requests-remaining")
        self.requests_used = response.headers.get("x-requests-used")

        if response.status_code == 429:
            raise ProviderUnavailable(self.name, ProviderUnavailable.RATE_LIMITED, "quota exhausted")
        if response.status_code == 404:
            raise ProviderUnavailable(self.name, ProviderUnavailable.NOT_FOUND, url)
        if response.status_code != 200:
            raise ProviderUnavailable(
                self.name, ProviderUnavailable.TRANSPORT, f"HTTP {response.status_code}"
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise ProviderUnavailable(self.name, ProviderUnavailable.TRANSPORT, "malformed JSON") from exc
        if not isinstance(data, list):
            raise ProviderUnavailable(self.name, ProviderUnavailable.TRANSPORT, "unexpected payload")
        return data


def parse_event_odds(event: Dict[str, Any]) -> Optional[BettingOdds]:
    """
    Build BettingOdds from the first bookmaker of an Odds API event.

    Returns None when the event has no bookmakers.
    """
    bookmakers = event.get("bookmakers") or []
    if not bookmakers:
        return None

    book = bookmakers[0]
    home_name = event.get("home_team")
    away_name = event.get("away_team")
    home_ml = away_ml = None
    spread = total = None

    for market in book.get("markets", []):
        outcomes = market.get("outcomes", [])
        if market.get("key") == "h2h":
            for o in outcomes:
                if o.get("name") == home_name:
                    home_ml = int(o["price"])
                elif o.get("name") == away_name:
                    away_ml = int(o["price"])
        elif market.get("key") == "spreads":
            for o in outcomes:
                if o.get("name") == home_name and o.get("point") is not None:
                    spread = float(o["point"])
        elif market.get("key") == "totals":
            for o in outcomes:
                if o.get("name") == "Over" and o.get("point") is not None:
                    total = float(o["point"])

    return BettingOdds(
        home_moneyline=home_ml,
        away_moneyline=away_ml,
        spread=spread,
        total=total,
        bookmaker=book.get("key", ""),
        last_update=_parse_timestamp(book.get("last_update")),
    )


def _parse_timestamp(value: Optional[str]) -> datetime:
    if not value:
        return datetime.now()
    return datetime.fromisoformat(value.replace("Z", "+00:00"))
