from datetime import datetime

import pytest

from conftest import build_game
from outcome_predictor.config import PredictorConfig
from outcome_predictor.data.repositories import InMemoryGameRepository
from outcome_predictor.errors import InsufficientHistory
from outcome_predictor.models.games import GameOutcome
from outcome_predictor.prediction.baseline import BaselinePredictor, ConfidenceModel


def test_strong_home_team_is_favoured_with_high_confidence(game_repository, upcoming_game):
    prediction = BaselinePredictor(game_repository).predict(upcoming_game)

    # 0.5 + (0.8 - 0.2) * 0.5 + 0.06
    assert prediction.home_win_probability == pytest.approx(0.86)
    assert prediction.confidence > 0.5
    # 0.4 sample size + 0.2 balance + 0.288 certainty
    assert prediction.confidence == pytest.approx(0.888)
    assert prediction.model_version == "baseline-v1"


def test_reasoning_lists_rates_and_factors(game_repository, upcoming_game):
    reasoning = BaselinePredictor(game_repository).predict(upcoming_game).reasoning
    assert "Kansas City Chiefs: 80.0% win rate (10 games)" in reasoning
    assert "Detroit Lions: 20.0% win rate (10 games)" in reasoning
    assert "Home field advantage: +6.0%" in reasoning
    assert "certainty 0.29" in reasoning


def test_empty_repository_raises_insufficient_history(upcoming_game):
    with pytest.raises(InsufficientHistory) as excinfo:
        BaselinePredictor(InMemoryGameRepository()).predict(upcoming_game)
    assert set(excinfo.value.teams) == {"KC", "DET"}


def test_one_side_without_history_raises(history_games):
    repo = InMemoryGameRepository(history_games)
    game = build_game("2023_14_LV_KC", "KC", "LV", datetime(2023, 12, 10))
    with pytest.raises(InsufficientHistory) as excinfo:
        BaselinePredictor(repo).predict(game)
    assert excinfo.value.teams == ("LV",)


def test_history_stops_at_kickoff(game_repository, upcoming_game):
    # A later KC loss must not leak into an earlier prediction
    game_repository.save(build_game("2024_01_KC_BAL", "BAL", "KC", datetime(2024, 9, 5), season=2024, score=(30, 0)))
    analysis = BaselinePredictor(game_repository).analyze(upcoming_game)
    assert analysis.home_record.games == 10


def test_game_itself_is_excluded_from_history(game_repository, upcoming_game):
    game_repository.save(upcoming_game.with_outcome(GameOutcome(31, 3)))
    analysis = BaselinePredictor(game_repository).analyze(upcoming_game)
    assert analysis.home_record.games == 10
    assert analysis.away_record.games == 10


def test_history_spans_seasons(history_games):
    repo = InMemoryGameRepository(history_games)
    game = build_game("2024_01_DET_KC", "KC", "DET", datetime(2024, 9, 5, 20, 20), season=2024)
    analysis = BaselinePredictor(repo).analyze(game)
    assert analysis.home_record.games == 10


def test_ties_count_as_games_not_wins():
    repo = InMemoryGameRepository(
        [
            build_game("t1", "KC", "DEN", datetime(2023, 9, 7), score=(20, 20)),
            build_game("t2", "LV", "KC", datetime(2023, 9, 14), week=2, score=(10, 17)),
            build_game("t3", "LV", "DEN", datetime(2023, 9, 7), score=(10, 17)),
        ]
    )
    game = build_game("next", "KC", "DEN", datetime(2023, 10, 1), week=4)
    analysis = BaselinePredictor(repo).analyze(game)
    assert analysis.home_record.wins == 1
    assert analysis.home_record.games == 2
    assert analysis.home_record.win_rate == pytest.approx(0.5)


def test_probability_is_clamped():
    games = [
        build_game(f"w{i}", "KC", "DEN", datetime(2023, 9, 7 + i), week=i + 1, score=(30, 0))
        for i in range(5)
    ]
    repo = InMemoryGameRepository(games)
    game = build_game("next", "KC", "DEN", datetime(2023, 10, 1), week=6)
    # KC 5-0, DEN 0-5: raw 1.06
    prediction = BaselinePredictor(repo).predict(game)
    assert prediction.home_win_probability == pytest.approx(0.98)


def test_custom_home_field_advantage(game_repository, upcoming_game):
    config = PredictorConfig(home_field_advantage=0.0, model_version="no-hfa")
    prediction = BaselinePredictor(game_repository, config).predict(upcoming_game)
    assert prediction.home_win_probability == pytest.approx(0.8)
    assert prediction.model_version == "no-hfa"


@pytest.mark.parametrize(
    "home_n, away_n, p",
    [(0, 0, 0.5), (1, 0, 0.98), (100, 100, 0.98), (3, 60, 0.02), (25, 25, 0.5), (500, 1, 0.7)],
)
def test_confidence_stays_in_unit_interval(home_n, away_n, p):
    breakdown = ConfidenceModel().score(home_n, away_n, p)
    assert 0.0 <= breakdown.total <= 1.0
    assert breakdown.sample_size <= 0.4
    assert breakdown.balance <= 0.2
    assert breakdown.certainty <= 0.4


def test_close_matchup_reports_low_confidence_despite_large_sample():
    breakdown = ConfidenceModel().score(40, 40, 0.51)
    assert breakdown.sample_size == pytest.approx(0.4)
    assert breakdown.total < 0.65
