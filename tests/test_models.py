import math
from datetime import datetime

import pytest

from conftest import build_game
from outcome_predictor.errors import InvalidConfidence, InvalidProbability
from outcome_predictor.models.games import GameOutcome, Winner
from outcome_predictor.models.odds import BettingOdds, american_to_probability
from outcome_predictor.models.predictions import Prediction
from outcome_predictor.models.teams import NFL_TEAMS, Conference, Division, stadium_for, team_by_abbreviation


@pytest.fixture
def game():
    return build_game("2024_01_SEA_SF", "SF", "SEA", datetime(2024, 9, 8, 16, 25), season=2024)


def test_game_outcome_winner_and_differential():
    home_win = GameOutcome(home_score=24, away_score=17)
    assert home_win.winner is Winner.HOME
    assert home_win.point_differential == 7

    away_win = GameOutcome(home_score=17, away_score=24)
    assert away_win.winner is Winner.AWAY
    assert away_win.point_differential == -7

    tie = GameOutcome(home_score=20, away_score=20)
    assert tie.winner is Winner.TIE
    assert tie.point_differential == 0


def test_game_outcome_rejects_negative_scores():
    with pytest.raises(ValueError):
        GameOutcome(home_score=-3, away_score=10)


def test_team_registry_and_aliases():
    assert len(NFL_TEAMS) == 32
    assert len({t.abbreviation for t in NFL_TEAMS}) == 32

    sf = team_by_abbreviation("SF")
    assert sf.name == "San Francisco 49ers"
    assert sf.conference is Conference.NFC
    assert sf.division is Division.WEST

    assert team_by_abbreviation("LA").abbreviation == "LAR"
    assert team_by_abbreviation("oak").abbreviation == "LV"
    with pytest.raises(KeyError):
        team_by_abbreviation("XYZ")


def test_every_team_has_a_stadium():
    assert all(stadium_for(t) is not None for t in NFL_TEAMS)

    kc = stadium_for(team_by_abbreviation("KC"))
    det = stadium_for(team_by_abbreviation("DET"))
    assert 600 < kc.distance_to(det) < 700
    assert kc.distance_to(det) == pytest.approx(det.distance_to(kc))
    assert kc.time_zone_change_to(det) == 1

    # Jets and Giants share a stadium
    assert stadium_for(team_by_abbreviation("NYJ")).distance_to(stadium_for(team_by_abbreviation("NYG"))) == 0


def test_game_is_a_value_and_outcome_attaches_by_copy(game):
    assert not game.is_completed
    finished = game.with_outcome(GameOutcome(30, 13))

    assert finished.game_id == game.game_id
    assert finished.is_completed
    assert game.outcome is None
    assert finished.won_by(team_by_abbreviation("SF"))
    assert not finished.won_by(team_by_abbreviation("SEA"))
    assert finished.points_for(team_by_abbreviation("SEA")) == 13


def test_game_rejects_team_playing_itself():
    with pytest.raises(ValueError):
        build_game("bad", "SF", "SF", datetime(2024, 9, 8))


@pytest.mark.parametrize("p", [0.0, 0.25, 0.5, 0.99, 1.0])
def test_prediction_accepts_valid_probabilities(game, p):
    prediction = Prediction.create(game, p, 0.5, "test")
    assert prediction.home_win_probability == p
    assert math.isclose(prediction.away_win_probability, 1.0 - p)


@pytest.mark.parametrize("p", [-0.1, 1.5, float("nan")])
def test_prediction_rejects_invalid_probabilities(game, p):
    with pytest.raises(InvalidProbability):
        Prediction.create(game, p, 0.5, "test")


def test_invalid_probability_is_a_value_error(game):
    with pytest.raises(ValueError):
        Prediction(game=game, home_win_probability=2.0, confidence=0.5, reasoning="test")


def test_prediction_rejects_invalid_confidence(game):
    with pytest.raises(InvalidConfidence):
        Prediction.create(game, 0.6, 1.2, "test")


@pytest.mark.parametrize(
    "p, winner",
    [(0.7, Winner.HOME), (0.3, Winner.AWAY), (0.5, Winner.TIE)],
)
def test_predicted_winner_follows_probability(game, p, winner):
    assert Prediction.create(game, p, 0.5, "test").predicted_winner is winner


def test_prediction_to_dict(game):
    prediction = Prediction.create(
        game, 0.65, 0.8, "Home favored", predicted_home_score=24, predicted_away_score=20
    )
    d = prediction.to_dict()
    assert d["game_id"] == "2024_01_SEA_SF"
    assert d["predicted_winner"] == "home"
    assert d["away_win_probability"] == 0.35
    assert d["model_version"] == "baseline-v1"
    assert d["predicted_home_score"] == 24


def test_american_odds_conversion():
    assert math.isclose(american_to_probability(-150), 0.6)
    assert math.isclose(american_to_probability(200), 1 / 3)
    assert math.isclose(american_to_probability(100), 0.5)
    with pytest.raises(ValueError):
        american_to_probability(0)


def test_betting_odds_remove_vig():
    odds = BettingOdds(home_moneyline=-110, away_moneyline=-110, spread=-1.5, total=44.5)
    assert odds.home_implied_probability > 0.5
    assert math.isclose(odds.fair_home_probability, 0.5)

    missing = BettingOdds(spread=-3.0)
    assert missing.home_implied_probability is None
    assert missing.fair_home_probability is None
