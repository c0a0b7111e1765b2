"""
Data layer: repositories, schedule loading, upstream providers and ingestion.
"""

# Intentionally light; import concrete modules where you need them, e.g.:
#
#   from outcome_predictor.data.repositories import InMemoryGameRepository
