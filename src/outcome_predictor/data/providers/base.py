"""
Upstream provider contracts.

Providers are the only code that talks to third-party sports services.
They never retry, and the cache layer in front of them decides when a call
is needed. A provider whose upstream publishes more than one request
answers at once (a whole season of schedules) may keep that download for
reuse and drops it on `forget`. Every failure surfaces as
ProviderUnavailable with one of its typed reasons.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from outcome_predictor.models.games import Game
from outcome_predictor.models.odds import BettingOdds
from outcome_predictor.models.teams import Team


class ScheduleProvider(ABC):
    """Source of scheduled and completed games."""

    name: str = "schedule"

    @abstractmethod
    def fetch_games(self, team: Team, season: int) -> List[Game]:
        """
        Games in `season` where `team` plays home or away.

        Raises:
            ProviderUnavailable: transport, rate_limited, not_found or timeout.
        """

    def forget(self, season: int) -> None:
        """Drop anything kept from earlier `season` downloads. No-op by default."""


class OddsProvider(ABC):
    """Source of betting lines."""

    name: str = "odds"

    @abstractmethod
    def fetch_odds(self, home_team: Team, away_team: Team) -> Optional[BettingOdds]:
        """
        Current line for the matchup, or None if no bookmaker lists it.

        Raises:
            ProviderUnavailable: transport, rate_limited, not_found or timeout.
        """
