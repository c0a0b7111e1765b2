"""
Request-scoped prediction facade.

PredictionService wires the repositories, the baseline predictor, the
multi-factor adjuster, the evaluator and one TTL cache per upstream data
category. It is what a CLI or server layer talks to.

Usage:
    service = PredictionService(InMemoryGameRepository(games))
    prediction = service.predict(game)
    metrics = service.evaluate_stored()
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Dict, Iterable, List, Optional

from outcome_predictor.cache.cached_fetch import CachedFetcher
from outcome_predictor.cache.ttl_cache import CacheStats, TTLCache
from outcome_predictor.cancellation import CancellationToken, check_cancelled
from outcome_predictor.config import (
    CACHE_CONFIG,
    PREDICTOR_CONFIG,
    PROVIDER_CONFIG,
    SIGNAL_WEIGHTS,
    CacheConfig,
    PredictorConfig,
    ProviderConfig,
    SignalWeights,
)
from outcome_predictor.data.ingest import ScheduleIngestor
from outcome_predictor.data.providers.base import OddsProvider, ScheduleProvider
from outcome_predictor.data.repositories import (
    GameRepository,
    InMemoryPredictionRepository,
    PredictionRepository,
)
from outcome_predictor.errors import CancellationRequested
from outcome_predictor.evaluation.metrics import EvaluationMetrics, Evaluator, PredictionOutcome
from outcome_predictor.models.games import Game
from outcome_predictor.models.odds import BettingOdds
from outcome_predictor.models.predictions import Prediction
from outcome_predictor.prediction.adjuster import MultiFactorAdjuster, project_scores
from outcome_predictor.prediction.baseline import BaselinePredictor
from outcome_predictor.prediction.signals import MatchupContext

logger = logging.getLogger(__name__)


class PredictionService:
    """
    Baseline -> adjuster -> stored Prediction, plus odds lookup, cache
    management and evaluation of stored predictions.

    Args:
        game_repository: Historical and scheduled games.
        prediction_repository: Where predictions are appended (in-memory by default).
        odds_provider: Optional betting-odds source, always called through the odds cache.
        predictor_config / weights: Model tuning.
        cache_config / provider_config: TTLs and upstream timeouts.
        clock: Monotonic clock for the caches (injectable for tests).
    """

    def __init__(
        self,
        game_repository: GameRepository,
        prediction_repository: Optional[PredictionRepository] = None,
        odds_provider: Optional[OddsProvider] = None,
        predictor_config: PredictorConfig = PREDICTOR_CONFIG,
        weights: SignalWeights = SIGNAL_WEIGHTS,
        cache_config: CacheConfig = CACHE_CONFIG,
        provider_config: ProviderConfig = PROVIDER_CONFIG,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.game_repository = game_repository
        self.prediction_repository = prediction_repository or InMemoryPredictionRepository()
        self.odds_provider = odds_provider
        self.predictor_config = predictor_config
        self.provider_config = provider_config

        self.baseline = BaselinePredictor(game_repository, predictor_config)
        self.adjuster = MultiFactorAdjuster(weights, predictor_config)
        self.evaluator = Evaluator()

        self.caches: Dict[str, TTLCache] = {
            "schedules": TTLCache(cache_config.schedule_ttl, clock=clock, name="schedules"),
            "odds": TTLCache(cache_config.odds_ttl, clock=clock, name="odds"),
        }
        self._odds_fetcher: Optional[CachedFetcher[Optional[BettingOdds]]] = None
        if odds_provider is not None:
            self._odds_fetcher = CachedFetcher(
                self.caches["odds"],
                provider_name=odds_provider.name,
                timeout_seconds=provider_config.timeout_seconds,
            )
        self._schedule_fetchers: Dict[str, CachedFetcher] = {}

    def predict(
        self,
        game: Game,
        context: Optional[MatchupContext] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> Prediction:
        """
        Predict `game`, store the prediction and return it.

        Raises:
            InsufficientHistory: either team has no completed games before kickoff.
            CancellationRequested: `cancel` fired at a stage boundary; nothing is stored.
        """
        try:
            check_cancelled(cancel, "baseline")
            baseline = self.baseline.analyze(game)

            check_cancelled(cancel, "adjustment")
            adjusted = self.adjuster.adjust(baseline, context)

            confidence = self.baseline.confidence_model.score(
                baseline.home_record.games, baseline.away_record.games, adjusted.probability
            )
            home_score, away_score = project_scores(baseline, adjusted.probability)

            reasoning = baseline.reasoning
            lines = adjusted.reasoning_lines()
            if lines:
                reasoning = "\n".join(
                    [reasoning, "Adjustments:", *lines, f"- Final probability: {adjusted.probability:.1%}"]
                )

            prediction = Prediction.create(
                game,
                adjusted.probability,
                confidence.total,
                reasoning,
                predicted_home_score=home_score,
                predicted_away_score=away_score,
                model_version=self.predictor_config.model_version,
            )

            check_cancelled(cancel, "prediction save")
            self.prediction_repository.save(prediction)
        except CancellationRequested as exc:
            logger.debug("prediction for %s cancelled: %s", game.game_id, exc)
            raise

        logger.info(
            "predicted %s: %s %.1f%% (confidence %.1f%%, %d signals)",
            game.game_id,
            game.home_team.abbreviation,
            prediction.home_win_probability * 100,
            prediction.confidence * 100,
            len(adjusted.contributions),
        )
        return prediction

    def evaluate(self, pairs: Iterable[PredictionOutcome]) -> EvaluationMetrics:
        return self.evaluator.evaluate(pairs)

    def stored_pairs(self) -> List[PredictionOutcome]:
        """(prediction, outcome) for every stored prediction whose game now has a result."""
        pairs = []
        for prediction in self.prediction_repository.all():
            game = self.game_repository.game(prediction.game.game_id)
            if game is not None and game.outcome is not None:
                pairs.append((prediction, game.outcome))
        return pairs

    def evaluate_stored(self) -> EvaluationMetrics:
        pairs = self.stored_pairs()
        metrics = self.evaluator.evaluate(pairs)
        logger.info(
            "evaluated %d stored predictions: accuracy %.3f, brier %.4f",
            metrics.total_predictions,
            metrics.accuracy,
            metrics.brier_score,
        )
        return metrics

    def odds_for(self, game: Game, cancel: Optional[CancellationToken] = None) -> Optional[BettingOdds]:
        """
        Current odds for the matchup through the odds cache.

        Returns None when no odds provider is configured or no bookmaker
        lists the game.

        Raises:
            ProviderUnavailable: the provider failed and nothing live is cached.
        """
        if self.odds_provider is None or self._odds_fetcher is None:
            return None
        provider = self.odds_provider
        key = f"{game.away_team.abbreviation}@{game.home_team.abbreviation}:{game.season}"
        return self._odds_fetcher.get_or_fetch(
            key,
            lambda: provider.fetch_odds(game.home_team, game.away_team),
            cancel=cancel,
        )

    def schedule_ingestor(self, provider: ScheduleProvider) -> ScheduleIngestor:
        """
        An ingestor that fills this service's game repository through its
        schedule cache. Providers with the same name share one fetcher.
        """
        fetcher = self._schedule_fetchers.get(provider.name)
        if fetcher is None:
            fetcher = CachedFetcher(
                self.caches["schedules"],
                provider_name=provider.name,
                timeout_seconds=self.provider_config.timeout_seconds,
            )
            self._schedule_fetchers[provider.name] = fetcher
        return ScheduleIngestor(provider, self.game_repository, fetcher=fetcher)

    def clear_caches(self) -> None:
        for cache in self.caches.values():
            cache.clear()

    def invalidate_expired(self) -> int:
        return sum(cache.invalidate_expired() for cache in self.caches.values())

    def cache_stats(self) -> Dict[str, CacheStats]:
        return {name: cache.stats() for name, cache in self.caches.items()}

    def close(self) -> None:
        """Shut down the upstream worker pools."""
        if self._odds_fetcher is not None:
            self._odds_fetcher.close()
        for fetcher in self._schedule_fetchers.values():
            fetcher.close()
