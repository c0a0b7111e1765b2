from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


def american_to_probability(odds: int) -> float:
    """
    Convert American moneyline odds to an implied probability (with vig).

    -150 -> 0.6, +200 -> 0.333...
    """
    if odds == 0:
        raise ValueError("American odds cannot be 0.")
    if odds < 0:
        return -odds / (-odds + 100.0)
    return 100.0 / (odds + 100.0)


@dataclass(frozen=True)
class BettingOdds:
    """
    Market line for one matchup from a single bookmaker.

    Attributes:
        home_moneyline: Home moneyline in American format (e.g., -150)
        away_moneyline: Away moneyline in American format (e.g., +130)
        spread: Home spread (negative = home favored)
        total: Over/under total points
        bookmaker: Bookmaker key
        last_update: When the bookmaker last moved the line
    """

    home_moneyline: Optional[int] = None
    away_moneyline: Optional[int] = None
    spread: Optional[float] = None
    total: Optional[float] = None
    bookmaker: str = ""
    last_update: datetime = field(default_factory=datetime.now)

    @property
    def home_implied_probability(self) -> Optional[float]:
        if self.home_moneyline is None:
            return None
        return american_to_probability(self.home_moneyline)

    @property
    def away_implied_probability(self) -> Optional[float]:
        if self.away_moneyline is None:
            return None
        return american_to_probability(self.away_moneyline)

    @property
    def fair_home_probability(self) -> Optional[float]:
        """Home implied probability with the bookmaker margin removed."""
        home = self.home_implied_probability
        away = self.away_implied_probability
        if home is None or away is None:
            return None
        return home / (home + away)

    def to_dict(self) -> dict:
        return {
            "home_moneyline": self.home_moneyline,
            "away_moneyline": self.away_moneyline,
            "spread": self.spread,
            "total": self.total,
            "bookmaker": self.bookmaker,
            "last_update": self.last_update.isoformat(),
            "fair_home_probability": self.fair_home_probability,
        }
