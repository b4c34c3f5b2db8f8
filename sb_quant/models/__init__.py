"""Regression model and championship ranking."""

from sb_quant.models.ranker import (
    CandidateSignals,
    PredictionRanker,
    min_max_normalize,
    project_season,
    rank_signals,
)
from sb_quant.models.regression import (
    LinearRegressionModel,
    design_matrix,
    mean_squared_error,
    outcome_vector,
    r_squared,
    solve_linear_system,
    split_by_year,
)

__all__ = [
    "CandidateSignals",
    "LinearRegressionModel",
    "PredictionRanker",
    "design_matrix",
    "mean_squared_error",
    "min_max_normalize",
    "outcome_vector",
    "project_season",
    "r_squared",
    "rank_signals",
    "solve_linear_system",
    "split_by_year",
]
