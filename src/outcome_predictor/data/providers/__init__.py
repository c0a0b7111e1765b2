"""Upstream schedule and odds providers."""

from outcome_predictor.data.providers.base import OddsProvider, ScheduleProvider

__all__ = ["OddsProvider", "ScheduleProvider"]
