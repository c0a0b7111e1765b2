"""Raw data loaders (nfl_data_py schedules)."""
