"""Domain values: teams, games, outcomes, predictions and odds.

Everything here is an immutable value object; mutation happens only by
upserting new values into a repository.
"""

from outcome_predictor.models.games import Game, GameOutcome, Winner
from outcome_predictor.models.odds import BettingOdds, american_to_probability
from outcome_predictor.models.predictions import Prediction
from outcome_predictor.models.teams import (
    NFL_TEAMS,
    Conference,
    Division,
    Team,
    team_by_abbreviation,
)

__all__ = [
    "BettingOdds",
    "Conference",
    "Division",
    "Game",
    "GameOutcome",
    "NFL_TEAMS",
    "Prediction",
    "Team",
    "Winner",
    "american_to_probability",
    "team_by_abbreviation",
]
