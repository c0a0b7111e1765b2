"""
outcome_predictor

NFL game outcome prediction and evaluation.

Structure:
- models: teams, games, outcomes, predictions, odds
- cache: TTL cache and cache-fronted upstream fetching
- data: repositories, nfl_data_py schedule loading, providers, ingestion
- prediction: baseline predictor, auxiliary signals, multi-factor adjuster
- evaluation: accuracy, Brier score, log-loss, calibration
- serving: PredictionService facade
"""

__all__ = ["config"]
