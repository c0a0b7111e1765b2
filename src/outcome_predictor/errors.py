"""
Error taxonomy shared by every component.

Callers are expected to tell these apart:

- InsufficientHistory: "not enough data yet" for this matchup
- ProviderUnavailable: "temporarily unavailable, try again"
- CancellationRequested: the caller abandoned the request; not a failure
"""

from __future__ import annotations

from typing import Optional, Sequence


class OutcomePredictorError(Exception):
    """Base class for all errors raised by outcome_predictor."""


class InvalidProbability(OutcomePredictorError, ValueError):
    """A probability outside [0, 1] was supplied to a Prediction."""

    def __init__(self, value: float):
        self.value = value
        super().__init__(f"Invalid probability: {value}. Must be between 0.0 and 1.0")


class InvalidConfidence(OutcomePredictorError, ValueError):
    """A confidence outside [0, 1] was supplied to a Prediction."""

    def __init__(self, value: float):
        self.value = value
        super().__init__(f"Invalid confidence: {value}. Must be between 0.0 and 1.0")


class InsufficientHistory(OutcomePredictorError):
    """At least one team has no completed games to anchor a prediction on."""

    def __init__(self, teams: Sequence[str]):
        self.teams = tuple(teams)
        super().__init__(
            f"Not enough historical data to predict: no completed games for {', '.join(self.teams)}"
        )


class ProviderUnavailable(OutcomePredictorError):
    """
    An upstream fetch failed.

    Attributes:
        provider: Name of the provider or cache category that failed.
        reason: One of REASONS.
    """

    TRANSPORT = "transport"
    RATE_LIMITED = "rate_limited"
    NOT_FOUND = "not_found"
    TIMEOUT = "timeout"
    REASONS = (TRANSPORT, RATE_LIMITED, NOT_FOUND, TIMEOUT)

    def __init__(self, provider: str, reason: str, detail: Optional[str] = None):
        if reason not in self.REASONS:
            raise ValueError(f"Unknown ProviderUnavailable reason '{reason}'. Expected one of {self.REASONS}")
        self.provider = provider
        self.reason = reason
        self.detail = detail
        message = f"{provider} unavailable ({reason})"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class CancellationRequested(OutcomePredictorError):
    """The caller cancelled in-flight work; raised only at safe points."""

    def __init__(self, stage: str = ""):
        self.stage = stage
        super().__init__(f"Cancelled before {stage}" if stage else "Cancelled")
