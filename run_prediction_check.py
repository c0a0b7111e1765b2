"""
Quick Prediction Check

Loads real schedules through nfl_data_py, replays one season week by week
with the prediction service and prints the evaluation metrics and the
calibration table.

Example:
    python run_prediction_check.py
"""

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from outcome_predictor.data.loaders.games import ScheduleLoader, ScheduleLoaderConfig
from outcome_predictor.data.repositories import InMemoryGameRepository
from outcome_predictor.errors import InsufficientHistory
from outcome_predictor.evaluation.calibration import calibration_table
from outcome_predictor.logging_utils import configure_logging
from outcome_predictor.serving.service import PredictionService


def main():
    configure_logging(level="WARNING")
    print("=== NFL Outcome Predictor: Prediction Check ===")

    # History seasons plus the season being replayed
    seasons = list(range(2021, 2024))
    replay_season = seasons[-1]
    print(f"Loading seasons: {seasons}")

    try:
        games = ScheduleLoader(ScheduleLoaderConfig(seasons=seasons, include_markets=False)).load_games()
        service = PredictionService(InMemoryGameRepository(games))

        replay = sorted(
            (g for g in games if g.season == replay_season and g.is_completed),
            key=lambda g: (g.scheduled_date, g.game_id),
        )
        skipped = 0
        for game in replay:
            try:
                service.predict(game)
            except InsufficientHistory:
                skipped += 1

        metrics = service.evaluate_stored()
        print(f"\n--- {replay_season} Replay ---")
        print(f"Games predicted: {metrics.total_predictions} (skipped {skipped})")
        for name, value in metrics.to_dict().items():
            print(f"{name}: {value}")

        print("\n--- Calibration ---")
        print(calibration_table(service.stored_pairs()).to_string(index=False))

        service.close()
        print("\nSuccess! Predictions evaluated.")

    except Exception as e:
        print("\nERROR: Something went wrong while predicting.\n")
        print(type(e).__name__, ":", str(e))


if __name__ == "__main__":
    main()
