import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

# Base directory for the project (repo root)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

HOUR = 60 * 60


@dataclass(frozen=True)
class DataConfig:
    """Data storage paths and defaults."""

    raw_data_dir: Path = PROJECT_ROOT / "data" / "raw"
    default_seasons: Optional[List[int]] = None

    def __post_init__(self):
        if self.default_seasons is None:
            # Three seasons covers the head-to-head lookback
            object.__setattr__(self, "default_seasons", list(range(2021, 2024)))


@dataclass(frozen=True)
class CacheConfig:
    """
    Time-to-live per upstream data category, in seconds.

    Schedules tolerate hours of staleness; odds are rate limited and
    expensive to refetch.
    """

    schedule_ttl: float = 6 * HOUR
    odds_ttl: float = 6 * HOUR


@dataclass(frozen=True)
class ProviderConfig:
    """Upstream provider settings (timeouts, endpoints, credentials)."""

    timeout_seconds: float = 10.0
    odds_api_base_url: str = "https://api.the-odds-api.com/v4"
    odds_sport_key: str = "americanfootball_nfl"
    odds_regions: str = "us"
    odds_api_key: str = field(default_factory=lambda: os.environ.get("ODDS_API_KEY", ""))


@dataclass(frozen=True)
class PredictorConfig:
    """
    Tunable constants of the baseline predictor and confidence model.

    None of these were calibrated on held-out data; treat them as
    defaults for the evaluator to tune.
    """

    home_field_advantage: float = 0.06
    min_probability: float = 0.02
    max_probability: float = 0.98

    # Confidence = sample size + balance + certainty
    sample_size_cap: float = 0.4
    sample_size_denominator: float = 50.0
    balance_weight: float = 0.2
    certainty_cap: float = 0.4
    certainty_scale: float = 0.8

    # Head-to-head lookback: current season plus this many prior seasons
    head_to_head_prior_seasons: int = 2

    model_version: str = "baseline-v1"


@dataclass(frozen=True)
class SignalWeights:
    """Weights of the auxiliary signals applied on top of the baseline."""

    head_to_head: float = 0.25
    home_away_split: float = 0.12
    injury: float = 0.15
    sentiment: float = 0.08
    weather: float = 0.12
    rest_travel: float = 0.12
    recent_form: float = 0.15


@dataclass(frozen=True)
class LogConfig:
    """Package logger level and format."""

    level: str = field(default_factory=lambda: os.environ.get("OUTCOME_PREDICTOR_LOG_LEVEL", "INFO"))
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


# Global config instances
DATA_CONFIG = DataConfig()
CACHE_CONFIG = CacheConfig()
PROVIDER_CONFIG = ProviderConfig()
PREDICTOR_CONFIG = PredictorConfig()
SIGNAL_WEIGHTS = SignalWeights()
LOG_CONFIG = LogConfig()
