"""
Multi-factor adjuster.

Applies weighted, independent signal adjustments on top of a baseline:

    p = clamp(baseline + sum(weight_i * value_i), [0.02, 0.98])

Every signal value is signed from the home team's perspective (positive
favours home). A signal that cannot be computed is absent: it contributes
zero and the remaining weights are not renormalised, so dropping a signal
moves the result by at most that signal's weighted value.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from outcome_predictor.config import PREDICTOR_CONFIG, SIGNAL_WEIGHTS, PredictorConfig, SignalWeights
from outcome_predictor.models.games import Game
from outcome_predictor.models.teams import Team, is_dome_team
from outcome_predictor.prediction.baseline import BaselineAnalysis
from outcome_predictor.prediction.signals import (
    MatchupContext,
    estimate_pass_ratio,
    recent_form,
    rest_and_travel,
    sentiment_impact,
    weather_impact,
)

logger = logging.getLogger(__name__)

HEAD_TO_HEAD_SCALE = 0.4


@dataclass(frozen=True)
class SignalContribution:
    """One signal's signed value, its weight, and a short explanation."""

    name: str
    value: float
    weight: float
    detail: str = ""

    @property
    def contribution(self) -> float:
        return self.weight * self.value


@dataclass(frozen=True)
class AdjustmentResult:
    baseline_probability: float
    probability: float
    contributions: Tuple[SignalContribution, ...]

    @property
    def total_adjustment(self) -> float:
        return sum(c.contribution for c in self.contributions)

    @property
    def signals(self) -> List[str]:
        return [c.name for c in self.contributions]

    def reasoning_lines(self) -> List[str]:
        lines = []
        for c in self.contributions:
            line = f"- {c.name.replace('_', ' ').capitalize()}: {c.contribution:+.1%}"
            if c.detail:
                line = f"{line} ({c.detail})"
            lines.append(line)
        return lines


class MultiFactorAdjuster:
    """
    Adjusts a BaselineAnalysis with head-to-head, home/away split, injury,
    news sentiment, weather, recent form and rest/travel signals.

    Head-to-head, splits, form and rest/travel come from the histories the
    baseline already loaded; injuries, news and weather come from the
    caller's MatchupContext.
    """

    def __init__(
        self,
        weights: SignalWeights = SIGNAL_WEIGHTS,
        config: PredictorConfig = PREDICTOR_CONFIG,
    ):
        self.weights = weights
        self.config = config

    def adjust(self, baseline: BaselineAnalysis, context: Optional[MatchupContext] = None) -> AdjustmentResult:
        game = baseline.game
        context = context or MatchupContext()

        signals = [
            self._head_to_head(game, baseline.home_history),
            self._home_away_split(game, baseline.home_history, baseline.away_history),
            self._injuries(context),
            self._sentiment(context),
            self._weather(game, baseline, context),
            self._recent_form(game, baseline.home_history, baseline.away_history),
            self._rest_travel(game, baseline.home_history, baseline.away_history),
        ]
        present = tuple(s for s in signals if s is not None)

        total = sum(s.contribution for s in present)
        probability = max(
            self.config.min_probability,
            min(self.config.max_probability, baseline.probability + total),
        )
        logger.debug(
            "%s adjusted %.3f -> %.3f using %s",
            game.game_id,
            baseline.probability,
            probability,
            [s.name for s in present] or "no signals",
        )
        return AdjustmentResult(
            baseline_probability=baseline.probability,
            probability=probability,
            contributions=present,
        )

    def _head_to_head(self, game: Game, home_history: Sequence[Game]) -> Optional[SignalContribution]:
        first_season = game.season - self.config.head_to_head_prior_seasons
        meetings = [
            g
            for g in home_history
            if first_season <= g.season <= game.season and g.is_matchup(game.home_team, game.away_team)
        ]
        if not meetings:
            return None
        wins = sum(1 for g in meetings if g.won_by(game.home_team))
        rate = wins / len(meetings)
        return SignalContribution(
            name="head_to_head",
            value=(rate - 0.5) * HEAD_TO_HEAD_SCALE,
            weight=self.weights.head_to_head,
            detail=f"{game.home_team.abbreviation} {wins}-{len(meetings) - wins} in last {len(meetings)} meetings",
        )

    def _home_away_split(
        self,
        game: Game,
        home_history: Sequence[Game],
        away_history: Sequence[Game],
    ) -> Optional[SignalContribution]:
        at_home = [g for g in home_history if g.is_home(game.home_team)]
        on_road = [g for g in away_history if not g.is_home(game.away_team)]
        if not at_home and not on_road:
            return None
        home_rate = _win_rate(game.home_team, at_home)
        road_rate = _win_rate(game.away_team, on_road)
        return SignalContribution(
            name="home_away_split",
            value=((home_rate - 0.5) + (0.5 - road_rate)) / 2,
            weight=self.weights.home_away_split,
            detail=f"{home_rate:.0%} at home vs {road_rate:.0%} on the road",
        )

    def _injuries(self, context: MatchupContext) -> Optional[SignalContribution]:
        if context.home_injuries is None and context.away_injuries is None:
            return None
        home = context.home_injuries.impact if context.home_injuries else 0.0
        away = context.away_injuries.impact if context.away_injuries else 0.0
        key = [
            p.name
            for report in (context.home_injuries, context.away_injuries)
            if report is not None
            for p in report.key_injuries
        ]
        detail = f"impact home {home:.2f}, away {away:.2f}"
        if key:
            detail = f"{detail}; key: {', '.join(key)}"
        return SignalContribution(
            name="injury",
            value=away - home,
            weight=self.weights.injury,
            detail=detail,
        )

    def _sentiment(self, context: MatchupContext) -> Optional[SignalContribution]:
        if context.home_articles is None and context.away_articles is None:
            return None
        home = sentiment_impact(context.home_articles or ())
        away = sentiment_impact(context.away_articles or ())
        headlines = [n for n in (home.key_news, away.key_news) if n]
        return SignalContribution(
            name="sentiment",
            value=home.impact - away.impact,
            weight=self.weights.sentiment,
            detail="; ".join(headlines),
        )

    def _weather(
        self,
        game: Game,
        baseline: BaselineAnalysis,
        context: MatchupContext,
    ) -> Optional[SignalContribution]:
        if context.weather is None:
            return None
        weather = context.weather
        home_ratio = estimate_pass_ratio(game.home_team, baseline.home_history)
        away_ratio = estimate_pass_ratio(game.away_team, baseline.away_history)
        value = weather_impact(weather, home_ratio, away_ratio, is_dome_team(game.home_team))
        if weather.is_indoor:
            detail = "indoors"
        else:
            detail = (
                f"{weather.temperature_f:.0f}F, wind {weather.wind_mph:.0f} mph, "
                f"precipitation {weather.precipitation_chance:.0%}"
            )
        return SignalContribution(
            name="weather",
            value=value,
            weight=self.weights.weather,
            detail=detail,
        )

    def _recent_form(
        self,
        game: Game,
        home_history: Sequence[Game],
        away_history: Sequence[Game],
    ) -> Optional[SignalContribution]:
        if not home_history and not away_history:
            return None
        home = recent_form(game.home_team, home_history)
        away = recent_form(game.away_team, away_history)
        notes = [
            f"{team.abbreviation} {summary}"
            for team, summary in ((game.home_team, home.summary()), (game.away_team, away.summary()))
            if summary
        ]
        return SignalContribution(
            name="recent_form",
            value=home.momentum - away.momentum,
            weight=self.weights.recent_form,
            detail="; ".join(notes),
        )

    def _rest_travel(
        self,
        game: Game,
        home_history: Sequence[Game],
        away_history: Sequence[Game],
    ) -> SignalContribution:
        analysis = rest_and_travel(game, home_history, away_history)
        return SignalContribution(
            name="rest_travel",
            value=analysis.advantage,
            weight=self.weights.rest_travel,
            detail=analysis.summary(game.home_team, game.away_team),
        )


def _win_rate(team: Team, games: Sequence[Game]) -> float:
    if not games:
        return 0.5
    return sum(1 for g in games if g.won_by(team)) / len(games)


def project_scores(baseline: BaselineAnalysis, probability: float, window: int = 5) -> Tuple[int, int]:
    """
    Point projection for (home, away).

    Each side starts from its average over the last `window` games (23 home
    / 20 away without history); the favourite gains and the underdog loses
    int((p - 0.5) * 16) points.
    """
    home = _recent_average(baseline.game.home_team, baseline.home_history, window, default=23)
    away = _recent_average(baseline.game.away_team, baseline.away_history, window, default=20)
    swing = int((probability - 0.5) * 16)
    return max(0, home + swing), max(0, away - swing)


def _recent_average(team: Team, history: Sequence[Game], window: int, default: int) -> int:
    points = [p for p in (g.points_for(team) for g in history[-window:]) if p is not None]
    if not points:
        return default
    return sum(points) // len(points)
