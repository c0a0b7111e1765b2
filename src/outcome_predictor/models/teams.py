"""
Team reference data.

This module contains:
- Conference / Division: league structure enums
- Team: immutable team record keyed by abbreviation
- NFL_TEAMS: the 32 current franchises
- team_by_abbreviation: lookup that understands nflverse aliases
- STADIUMS: home stadium location and time zone per team
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple


class Conference(Enum):
    AFC = "AFC"
    NFC = "NFC"


class Division(Enum):
    NORTH = "North"
    SOUTH = "South"
    EAST = "East"
    WEST = "West"


@dataclass(frozen=True)
class Team:
    """
    A single franchise.

    Attributes:
        name: Full name (e.g., "Kansas City Chiefs")
        abbreviation: Unique key (e.g., "KC")
        conference: AFC or NFC
        division: Division within the conference
    """

    name: str
    abbreviation: str
    conference: Conference
    division: Division

    def __post_init__(self):
        if not self.abbreviation:
            raise ValueError("Team abbreviation must not be empty.")

    def __str__(self) -> str:
        return self.name


def _team(name: str, abbreviation: str, conference: Conference, division: Division) -> Team:
    return Team(name=name, abbreviation=abbreviation, conference=conference, division=division)


_AFC, _NFC = Conference.AFC, Conference.NFC
_N, _S, _E, _W = Division.NORTH, Division.SOUTH, Division.EAST, Division.WEST

NFL_TEAMS: Tuple[Team, ...] = (
    # AFC East
    _team("Buffalo Bills", "BUF", _AFC, _E),
    _team("Miami Dolphins", "MIA", _AFC, _E),
    _team("New England Patriots", "NE", _AFC, _E),
    _team("New York Jets", "NYJ", _AFC, _E),
    # AFC North
    _team("Baltimore Ravens", "BAL", _AFC, _N),
    _team("Cincinnati Bengals", "CIN", _AFC, _N),
    _team("Cleveland Browns", "CLE", _AFC, _N),
    _team("Pittsburgh Steelers", "PIT", _AFC, _N),
    # AFC South
    _team("Houston Texans", "HOU", _AFC, _S),
    _team("Indianapolis Colts", "IND", _AFC, _S),
    _team("Jacksonville Jaguars", "JAX", _AFC, _S),
    _team("Tennessee Titans", "TEN", _AFC, _S),
    # AFC West
    _team("Denver Broncos", "DEN", _AFC, _W),
    _team("Kansas City Chiefs", "KC", _AFC, _W),
    _team("Las Vegas Raiders", "LV", _AFC, _W),
    _team("Los Angeles Chargers", "LAC", _AFC, _W),
    # NFC East
    _team("Dallas Cowboys", "DAL", _NFC, _E),
    _team("New York Giants", "NYG", _NFC, _E),
    _team("Philadelphia Eagles", "PHI", _NFC, _E),
    _team("Washington Commanders", "WAS", _NFC, _E),
    # NFC North
    _team("Chicago Bears", "CHI", _NFC, _N),
    _team("Detroit Lions", "DET", _NFC, _N),
    _team("Green Bay Packers", "GB", _NFC, _N),
    _team("Minnesota Vikings", "MIN", _NFC, _N),
    # NFC South
    _team("Atlanta Falcons", "ATL", _NFC, _S),
    _team("Carolina Panthers", "CAR", _NFC, _S),
    _team("New Orleans Saints", "NO", _NFC, _S),
    _team("Tampa Bay Buccaneers", "TB", _NFC, _S),
    # NFC West
    _team("Arizona Cardinals", "ARI", _NFC, _W),
    _team("Los Angeles Rams", "LAR", _NFC, _W),
    _team("San Francisco 49ers", "SF", _NFC, _W),
    _team("Seattle Seahawks", "SEA", _NFC, _W),
)

TEAMS_BY_ABBREVIATION: Dict[str, Team] = {t.abbreviation: t for t in NFL_TEAMS}

# nflverse schedules use "LA" for the Rams and keep relocated franchises'
# old codes in historical seasons.
TEAM_ALIASES: Dict[str, str] = {
    "LA": "LAR",
    "STL": "LAR",
    "OAK": "LV",
    "SD": "LAC",
    "WSH": "WAS",
    "JAC": "JAX",
}

# Home stadium has a fixed or retractable roof
DOME_TEAMS = frozenset({"ATL", "DAL", "DET", "HOU", "IND", "NO", "LV", "MIN", "ARI", "LAR", "LAC"})


def team_by_abbreviation(abbreviation: str) -> Team:
    """
    Resolve an abbreviation (or a known alias) to a Team.

    Raises:
        KeyError if the abbreviation is unknown.
    """
    key = abbreviation.strip().upper()
    key = TEAM_ALIASES.get(key, key)
    try:
        return TEAMS_BY_ABBREVIATION[key]
    except KeyError:
        raise KeyError(f"Unknown team abbreviation: {abbreviation!r}") from None


def is_dome_team(team: Team) -> bool:
    return team.abbreviation in DOME_TEAMS


EARTH_RADIUS_MILES = 3959.0


@dataclass(frozen=True)
class StadiumLocation:
    """Home stadium coordinates and standard-time UTC offset in hours."""

    city: str
    latitude: float
    longitude: float
    utc_offset: int

    def distance_to(self, other: "StadiumLocation") -> float:
        """Great-circle distance in miles (haversine)."""
        lat1, lat2 = math.radians(self.latitude), math.radians(other.latitude)
        d_lat = lat2 - lat1
        d_lon = math.radians(other.longitude - self.longitude)
        a = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
        return EARTH_RADIUS_MILES * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    def time_zone_change_to(self, other: "StadiumLocation") -> int:
        return other.utc_offset - self.utc_offset


STADIUMS: Dict[str, StadiumLocation] = {
    # AFC
    "BUF": StadiumLocation("Orchard Park", 42.7738, -78.7870, -5),
    "MIA": StadiumLocation("Miami Gardens", 25.9580, -80.2389, -5),
    "NE": StadiumLocation("Foxborough", 42.0909, -71.2643, -5),
    "NYJ": StadiumLocation("East Rutherford", 40.8128, -74.0742, -5),
    "BAL": StadiumLocation("Baltimore", 39.2780, -76.6227, -5),
    "CIN": StadiumLocation("Cincinnati", 39.0954, -84.5160, -5),
    "CLE": StadiumLocation("Cleveland", 41.5061, -81.6995, -5),
    "PIT": StadiumLocation("Pittsburgh", 40.4468, -80.0158, -5),
    "HOU": StadiumLocation("Houston", 29.6847, -95.4107, -6),
    "IND": StadiumLocation("Indianapolis", 39.7601, -86.1639, -5),
    "JAX": StadiumLocation("Jacksonville", 30.3240, -81.6373, -5),
    "TEN": StadiumLocation("Nashville", 36.1665, -86.7713, -6),
    "DEN": StadiumLocation("Denver", 39.7439, -105.0201, -7),
    "KC": StadiumLocation("Kansas City", 39.0489, -94.4839, -6),
    "LV": StadiumLocation("Las Vegas", 36.0909, -115.1833, -8),
    "LAC": StadiumLocation("Inglewood", 33.9534, -118.3392, -8),
    # NFC
    "DAL": StadiumLocation("Arlington", 32.7473, -97.0945, -6),
    "NYG": StadiumLocation("East Rutherford", 40.8128, -74.0742, -5),
    "PHI": StadiumLocation("Philadelphia", 39.9008, -75.1675, -5),
    "WAS": StadiumLocation("Landover", 38.9076, -76.8645, -5),
    "CHI": StadiumLocation("Chicago", 41.8623, -87.6167, -6),
    "DET": StadiumLocation("Detroit", 42.3400, -83.0456, -5),
    "GB": StadiumLocation("Green Bay", 44.5013, -88.0622, -6),
    "MIN": StadiumLocation("Minneapolis", 44.9738, -93.2575, -6),
    "ATL": StadiumLocation("Atlanta", 33.7555, -84.4008, -5),
    "CAR": StadiumLocation("Charlotte", 35.2258, -80.8528, -5),
    "NO": StadiumLocation("New Orleans", 29.9511, -90.0812, -6),
    "TB": StadiumLocation("Tampa", 27.9759, -82.5033, -5),
    "ARI": StadiumLocation("Glendale", 33.5276, -112.2626, -7),
    "LAR": StadiumLocation("Inglewood", 33.9534, -118.3392, -8),
    "SF": StadiumLocation("Santa Clara", 37.4032, -121.9698, -8),
    "SEA": StadiumLocation("Seattle", 47.5952, -122.3316, -8),
}


def stadium_for(team: Team) -> Optional[StadiumLocation]:
    return STADIUMS.get(team.abbreviation)
