"""
Auxiliary matchup signals.

This module contains:
- InjuryStatus / PlayerPosition: severity and position weights
- InjuredPlayer / InjuryReport: per-team injury impact (0-1)
- Article / sentiment_impact: keyword-scored news impact
- GameWeather / weather_impact: wind, cold and precipitation effects
- estimate_pass_ratio: pass/run tendency from recent scoring
- RecentForm / recent_form: streaks, margins and trend from game history
- RestTravel / rest_and_travel: rest days, travel distance and road trips
- MatchupContext: the caller-supplied bundle the adjuster consumes

Every impact here is a plain float. Sign conventions are documented per
function; the adjuster turns them into home-positive signal values.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from outcome_predictor.models.games import Game
from outcome_predictor.models.teams import Team, stadium_for


class InjuryStatus(Enum):
    OUT = "out"
    DOUBTFUL = "doubtful"
    QUESTIONABLE = "questionable"
    PROBABLE = "probable"
    HEALTHY = "healthy"

    @property
    def severity(self) -> float:
        """Probability-weighted chance the player misses the game."""
        return _STATUS_SEVERITY[self]

    @classmethod
    def parse(cls, value: str) -> "InjuryStatus":
        """Map injury-report wording to a status; unknown wording counts as healthy."""
        text = value.strip().lower()
        for status in cls:
            if status.value in text:
                return status
        if "injured reserve" in text or text == "ir":
            return cls.OUT
        return cls.HEALTHY


_STATUS_SEVERITY = {
    InjuryStatus.OUT: 1.0,
    InjuryStatus.DOUBTFUL: 0.75,
    InjuryStatus.QUESTIONABLE: 0.4,
    InjuryStatus.PROBABLE: 0.15,
    InjuryStatus.HEALTHY: 0.0,
}


class PlayerPosition(Enum):
    QB = "QB"
    RB = "RB"
    WR = "WR"
    TE = "TE"
    DEF = "DEF"
    OTHER = "OTHER"

    @property
    def weight(self) -> float:
        return _POSITION_WEIGHT[self]

    @classmethod
    def from_code(cls, code: str) -> "PlayerPosition":
        """Collapse a roster position code (e.g., "FB", "CB") into an impact group."""
        return _POSITION_CODES.get(code.strip().upper(), cls.OTHER)


_POSITION_WEIGHT = {
    PlayerPosition.QB: 1.0,
    PlayerPosition.RB: 0.6,
    PlayerPosition.WR: 0.5,
    PlayerPosition.TE: 0.3,
    PlayerPosition.DEF: 0.4,
    PlayerPosition.OTHER: 0.1,
}

_POSITION_CODES = {
    "QB": PlayerPosition.QB,
    "RB": PlayerPosition.RB,
    "FB": PlayerPosition.RB,
    "WR": PlayerPosition.WR,
    "TE": PlayerPosition.TE,
    "DE": PlayerPosition.DEF,
    "DT": PlayerPosition.DEF,
    "LB": PlayerPosition.DEF,
    "CB": PlayerPosition.DEF,
    "S": PlayerPosition.DEF,
    "DB": PlayerPosition.DEF,
}

# Diminishing weight of the 1st, 2nd and 3rd most impactful injuries
INJURY_DECAY = (1.0, 0.5, 0.25)
KEY_INJURY_THRESHOLD = 0.3


@dataclass(frozen=True)
class InjuredPlayer:
    name: str
    position: PlayerPosition
    status: InjuryStatus

    @property
    def impact(self) -> float:
        return self.position.weight * self.status.severity

    @property
    def is_key_injury(self) -> bool:
        return self.impact > KEY_INJURY_THRESHOLD and self.status in (
            InjuryStatus.OUT,
            InjuryStatus.DOUBTFUL,
        )


@dataclass(frozen=True)
class InjuryReport:
    """Injury list for one team."""

    team: Team
    players: Tuple[InjuredPlayer, ...] = ()

    @property
    def impact(self) -> float:
        """
        Team-level injury impact in [0, 1].

        Only the three most impactful players count, weighted 1.0 / 0.5 /
        0.25, so a long list of minor injuries cannot outweigh a starting QB.
        """
        ranked = sorted((p.impact for p in self.players), reverse=True)
        total = sum(w * i for w, i in zip(INJURY_DECAY, ranked))
        return min(1.0, total)

    @property
    def key_injuries(self) -> List[InjuredPlayer]:
        return [p for p in self.players if p.is_key_injury]


NEGATIVE_KEYWORDS = (
    "injury",
    "injured",
    "out",
    "suspended",
    "arrest",
    "arrested",
    "jail",
    "divorce",
    "personal",
    "leave",
    "absence",
    "ruled out",
)
POSITIVE_KEYWORDS = ("return", "healthy", "activated", "cleared", "practice")

NEGATIVE_HIT = -0.05
POSITIVE_HIT = 0.03
SENTIMENT_FLOOR = -0.15
SENTIMENT_CEILING = 0.10
MAX_ARTICLES = 10


@dataclass(frozen=True)
class Article:
    title: str
    content: str = ""
    published_at: Optional[datetime] = None


@dataclass(frozen=True)
class NewsSentiment:
    impact: float
    key_news: Optional[str] = None


def sentiment_impact(articles: Sequence[Article]) -> NewsSentiment:
    """
    Keyword-score up to the 10 most recent articles about one team.

    Each keyword found in an article's title or body scores once: -0.05 for
    negative events (injuries, suspensions...), +0.03 for positive ones.
    The total is clamped to [-0.15, 0.10]. The first article with a
    negative hit is reported as the key news item.
    """
    ordered = sorted(
        articles,
        key=lambda a: a.published_at or datetime.min,
        reverse=True,
    )
    total = 0.0
    key_news = None
    for article in ordered[:MAX_ARTICLES]:
        text = f"{article.title} {article.content}".lower()
        for keyword in NEGATIVE_KEYWORDS:
            if keyword in text:
                total += NEGATIVE_HIT
                if key_news is None:
                    key_news = article.title
        for keyword in POSITIVE_KEYWORDS:
            if keyword in text:
                total += POSITIVE_HIT
    return NewsSentiment(impact=max(SENTIMENT_FLOOR, min(SENTIMENT_CEILING, total)), key_news=key_news)


@dataclass(frozen=True)
class GameWeather:
    """
    Forecast at kickoff.

    Attributes:
        temperature_f: Air temperature in Fahrenheit
        wind_mph: Sustained wind speed
        precipitation_chance: Probability of rain/snow, 0-1
        is_indoor: Game is played under a roof; weather has no effect
    """

    temperature_f: float
    wind_mph: float = 0.0
    precipitation_chance: float = 0.0
    is_indoor: bool = False

    def __post_init__(self):
        if not 0.0 <= self.precipitation_chance <= 1.0:
            raise ValueError(f"precipitation_chance must be in [0, 1], got {self.precipitation_chance}")
        if self.wind_mph < 0:
            raise ValueError(f"wind_mph must be >= 0, got {self.wind_mph}")


WEATHER_LIMIT = 0.15


def weather_impact(
    weather: GameWeather,
    home_pass_ratio: float,
    away_pass_ratio: float,
    home_is_dome_team: bool,
) -> float:
    """
    Home-perspective weather adjustment in [-0.15, 0.15].

    Wind hurts pass-heavy offenses; cold hurts the home side (more so a
    dome team forced outdoors); heavy precipitation helps run-first teams
    and hurts pass-first ones.
    """
    if weather.is_indoor:
        return 0.0

    impact = 0.0

    if weather.wind_mph > 20:
        if home_pass_ratio > 0.60:
            impact -= 0.10
        if away_pass_ratio > 0.60:
            impact += 0.10
    elif weather.wind_mph > 15:
        if home_pass_ratio > 0.65:
            impact -= 0.05
        if away_pass_ratio > 0.65:
            impact += 0.05

    if weather.temperature_f < 20:
        impact -= 0.08
        if home_is_dome_team:
            impact -= 0.06
    elif weather.temperature_f < 32:
        impact -= 0.04
        if home_is_dome_team:
            impact -= 0.04

    if weather.precipitation_chance > 0.7:
        impact += 0.06 if home_pass_ratio < 0.5 else -0.08
        impact += -0.06 if away_pass_ratio < 0.5 else 0.08
    elif weather.precipitation_chance > 0.5:
        impact += 0.03 if home_pass_ratio < 0.5 else -0.04
        impact += -0.03 if away_pass_ratio < 0.5 else 0.04

    return max(-WEATHER_LIMIT, min(WEATHER_LIMIT, impact))


LEAGUE_PASS_RATIO = 0.55
LEAGUE_POINTS_PER_GAME = 24.0


def estimate_pass_ratio(team: Team, history: Sequence[Game], window: int = 8) -> float:
    """
    Rough pass/run ratio from the team's last `window` completed games.

    Higher-scoring offenses tend to pass more: 0.55 at the league-average
    24 points, moving 1% per point, clamped to [0.40, 0.70]. Teams with no
    history get the league average.
    """
    points = [g.points_for(team) for g in history if g.is_completed and g.involves(team)]
    points = [p for p in points if p is not None][-window:]
    if not points:
        return LEAGUE_PASS_RATIO
    avg = sum(points) / len(points)
    ratio = LEAGUE_PASS_RATIO + (avg - LEAGUE_POINTS_PER_GAME) * 0.01
    return max(0.40, min(0.70, ratio))


class FormTrend(Enum):
    """Recent results against the season-long rate; value is the momentum bonus."""

    STRONGLY_IMPROVING = 0.08
    IMPROVING = 0.04
    STABLE = 0.0
    DECLINING = -0.04
    STRONGLY_DECLINING = -0.08


FORM_LIMIT = 0.15
BLOWOUT_MARGIN = 14
CLUTCH_MARGIN = 7


@dataclass(frozen=True)
class RecentForm:
    """
    Momentum indicators over a team's latest completed games.

    Attributes:
        last3_win_rate: Win rate over the last three games
        last3_margin: Average point margin over the last three games
        trend: Last-three win rate compared with the overall rate
        blowout_losses: Losses by 14+ points in the last five
        clutch_wins: Wins by 7 or fewer points in the last five
        streak: Current streak (positive = wins, negative = losses)
        scoring_trend: Last four vs. previous four games' scoring, in [-1, 1]
    """

    last3_win_rate: float = 0.5
    last3_margin: float = 0.0
    trend: FormTrend = FormTrend.STABLE
    blowout_losses: int = 0
    clutch_wins: int = 0
    streak: int = 0
    scoring_trend: float = 0.0

    @property
    def momentum(self) -> float:
        """Signed momentum in [-0.15, 0.15]; positive means the team is in form."""
        momentum = (self.last3_win_rate - 0.5) * 0.20
        momentum += self.last3_margin / 14.0 * 0.08
        momentum += self.trend.value

        if self.streak >= 3:
            momentum += 0.06
        elif self.streak >= 2:
            momentum += 0.03
        elif self.streak <= -3:
            momentum -= 0.06
        elif self.streak <= -2:
            momentum -= 0.03

        if self.blowout_losses >= 2:
            momentum -= 0.05
        elif self.blowout_losses == 1:
            momentum -= 0.02
        if self.clutch_wins >= 2:
            momentum += 0.03

        momentum += self.scoring_trend * 0.04
        return max(-FORM_LIMIT, min(FORM_LIMIT, momentum))

    def summary(self) -> str:
        """Notable form factors, empty when nothing stands out."""
        factors = []
        if self.trend is not FormTrend.STABLE:
            label = self.trend.name.lower().replace("_", " ")
            factors.append(f"{label}, {self.last3_win_rate:.0%} of last 3")
        if self.streak >= 2:
            factors.append(f"{self.streak}-game win streak")
        elif self.streak <= -2:
            factors.append(f"{-self.streak}-game losing streak")
        if abs(self.last3_margin) > 10:
            factors.append(f"{self.last3_margin:+.0f} avg margin")
        if self.blowout_losses >= 2:
            factors.append(f"{self.blowout_losses} blowout losses in last 5")
        if self.clutch_wins >= 2:
            factors.append(f"{self.clutch_wins} close wins in last 5")
        return ", ".join(factors)


def recent_form(team: Team, history: Sequence[Game]) -> RecentForm:
    """
    Build RecentForm from the team's completed games.

    A team without history gets the neutral default (momentum 0).
    """
    games = sorted(
        (g for g in history if g.is_completed and g.involves(team)),
        key=lambda g: g.scheduled_date,
    )
    if not games:
        return RecentForm()

    last3 = games[-3:]
    last3_win_rate = sum(1 for g in last3 if g.won_by(team)) / len(last3)
    last3_margin = sum(_margin(g, team) for g in last3) / len(last3)

    last5 = [_margin(g, team) for g in games[-5:]]
    blowout_losses = sum(1 for m in last5 if m <= -BLOWOUT_MARGIN)
    clutch_wins = sum(1 for m in last5 if 0 < m <= CLUTCH_MARGIN)

    streak = _streak(team, games[-10:])
    scoring_trend = _scoring_trend(team, games)
    overall = sum(1 for g in games if g.won_by(team)) / len(games)

    return RecentForm(
        last3_win_rate=last3_win_rate,
        last3_margin=last3_margin,
        trend=_form_trend(last3_win_rate - overall, streak, scoring_trend),
        blowout_losses=blowout_losses,
        clutch_wins=clutch_wins,
        streak=streak,
        scoring_trend=scoring_trend,
    )


def _margin(game: Game, team: Team) -> int:
    outcome = game.outcome
    diff = outcome.home_score - outcome.away_score
    return diff if game.is_home(team) else -diff


def _streak(team: Team, games: Sequence[Game]) -> int:
    last_won = games[-1].won_by(team)
    length = 0
    for g in reversed(games):
        if g.won_by(team) != last_won:
            break
        length += 1
    return length if last_won else -length


def _scoring_trend(team: Team, games: Sequence[Game]) -> float:
    if len(games) < 8:
        return 0.0
    window = games[-8:]
    earlier = sum(g.points_for(team) for g in window[:4]) / 4
    recent = sum(g.points_for(team) for g in window[4:]) / 4
    return max(-1.0, min(1.0, (recent - earlier) / 14.0))


def _form_trend(win_rate_change: float, streak: int, scoring_trend: float) -> FormTrend:
    if win_rate_change > 0.3 and streak >= 2:
        return FormTrend.STRONGLY_IMPROVING
    if win_rate_change > 0.15 or (streak >= 2 and scoring_trend > 0.3):
        return FormTrend.IMPROVING
    if win_rate_change < -0.3 and streak <= -2:
        return FormTrend.STRONGLY_DECLINING
    if win_rate_change < -0.15 or (streak <= -2 and scoring_trend < -0.3):
        return FormTrend.DECLINING
    return FormTrend.STABLE


REST_TRAVEL_LIMIT = 0.15
DEFAULT_REST_DAYS = 7
ROAD_TRIP_LOOKBACK = 4


@dataclass(frozen=True)
class RestTravel:
    """
    Schedule and travel burden for one matchup.

    Attributes:
        home_rest_days / away_rest_days: Days since each team's previous game
        travel_miles: Away stadium to home stadium distance
        time_zone_change: Home minus away UTC offset
        consecutive_road_games: Away team's road games in a row, this one included
        short_week: Thursday game with at least one side on four days' rest or less
    """

    home_rest_days: int = DEFAULT_REST_DAYS
    away_rest_days: int = DEFAULT_REST_DAYS
    travel_miles: float = 0.0
    time_zone_change: int = 0
    consecutive_road_games: int = 1
    short_week: bool = False

    @property
    def advantage(self) -> float:
        """Home-positive advantage in [-0.15, 0.15]."""
        advantage = 0.0
        if self.short_week:
            advantage += 0.07

        rest_diff = self.home_rest_days - self.away_rest_days
        if abs(rest_diff) >= 4:
            advantage += rest_diff / 7.0 * 0.08
        elif abs(rest_diff) >= 2:
            advantage += rest_diff / 7.0 * 0.04

        zones = abs(self.time_zone_change)
        if self.travel_miles > 2000:
            if zones >= 3:
                advantage += 0.08
            elif zones == 2:
                advantage += 0.05
            else:
                advantage += 0.03
        elif self.travel_miles > 1000:
            advantage += 0.04 if zones >= 2 else 0.02

        if self.consecutive_road_games >= 3:
            advantage += 0.05
        elif self.consecutive_road_games == 2:
            advantage += 0.03

        return max(-REST_TRAVEL_LIMIT, min(REST_TRAVEL_LIMIT, advantage))

    def summary(self, home: Team, away: Team) -> str:
        factors = []
        if self.short_week:
            factors.append("Thursday short week")
        rest_diff = self.home_rest_days - self.away_rest_days
        if abs(rest_diff) >= 4:
            rested = home if rest_diff > 0 else away
            factors.append(f"{rested.abbreviation} +{abs(rest_diff)} days rest")
        if self.travel_miles > 1000:
            factors.append(
                f"{away.abbreviation} travels {self.travel_miles:.0f} miles, "
                f"{abs(self.time_zone_change)} time zones"
            )
        if self.consecutive_road_games >= 2:
            factors.append(f"{away.abbreviation} road game {self.consecutive_road_games} in a row")
        return ", ".join(factors)


def rest_and_travel(game: Game, home_history: Sequence[Game], away_history: Sequence[Game]) -> RestTravel:
    """
    Rest, travel and road-trip burden for `game` from both teams' completed games.

    Teams without a previous game are treated as on a normal week.
    """
    kickoff = game.scheduled_date
    home_rest = _rest_days(game.home_team, home_history, kickoff)
    away_rest = _rest_days(game.away_team, away_history, kickoff)

    miles, zones = 0.0, 0
    home_stadium = stadium_for(game.home_team)
    away_stadium = stadium_for(game.away_team)
    if home_stadium is not None and away_stadium is not None:
        miles = away_stadium.distance_to(home_stadium)
        zones = away_stadium.time_zone_change_to(home_stadium)

    prior = _prior_games(game.away_team, away_history, kickoff)
    road_games = 1
    for g in reversed(prior[-ROAD_TRIP_LOOKBACK:]):
        if g.is_home(game.away_team):
            break
        road_games += 1

    # Thursday is weekday 3
    short_week = kickoff.weekday() == 3 and min(home_rest, away_rest) <= 4

    return RestTravel(
        home_rest_days=home_rest,
        away_rest_days=away_rest,
        travel_miles=miles,
        time_zone_change=zones,
        consecutive_road_games=road_games,
        short_week=short_week,
    )


def _prior_games(team: Team, history: Sequence[Game], kickoff: datetime) -> List[Game]:
    return sorted(
        (g for g in history if g.involves(team) and g.scheduled_date < kickoff),
        key=lambda g: g.scheduled_date,
    )


def _rest_days(team: Team, history: Sequence[Game], kickoff: datetime) -> int:
    prior = _prior_games(team, history, kickoff)
    if not prior:
        return DEFAULT_REST_DAYS
    return (kickoff - prior[-1].scheduled_date).days


@dataclass(frozen=True)
class MatchupContext:
    """
    Externally sourced information about a matchup.

    Any field left as None is treated as an absent signal.
    """

    home_injuries: Optional[InjuryReport] = None
    away_injuries: Optional[InjuryReport] = None
    home_articles: Optional[Tuple[Article, ...]] = None
    away_articles: Optional[Tuple[Article, ...]] = None
    weather: Optional[GameWeather] = None
