"""
End-to-end championship pipeline.

records -> features -> correlations -> regression fit (historical seasons)
        -> ranking of projected seasons

Usage:
    from sb_quant.pipeline import run_pipeline

    result = run_pipeline(records, target_year=2025)
    for candidate in result.rankings[:5]:
        print(candidate.rank, candidate.team, candidate.confidence_pct)
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import pandas as pd

from sb_quant.analysis.statistics import (
    correlation_matrix,
    feature_columns,
    feature_outcome_correlations,
)
from sb_quant.config import Weights, settings
from sb_quant.data.ingest import validate_training_set
from sb_quant.exceptions import InputError
from sb_quant.features.engine import FeatureEngine
from sb_quant.models.ranker import PredictionRanker, project_season
from sb_quant.models.regression import (
    LinearRegressionModel,
    design_matrix,
    outcome_vector,
    split_by_year,
)
from sb_quant.schemas import (
    DERIVED_FEATURES,
    RAW_NUMERIC_FIELDS,
    FeaturedRecord,
    ModelDiagnostics,
    RankedCandidate,
    TeamSeasonRecord,
)

logger = logging.getLogger(__name__)

ANALYSIS_FEATURES: List[str] = RAW_NUMERIC_FIELDS + [
    name for name in DERIVED_FEATURES if name != "total_games"
]


@dataclass
class PipelineResult:
    """Everything the report and export layers need."""
    featured: List[FeaturedRecord]
    outcome_correlations: Dict[str, float]
    correlation_matrix: pd.DataFrame
    model: LinearRegressionModel
    diagnostics: ModelDiagnostics
    target_year: int
    rankings: List[RankedCandidate]
    dropped_features: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def _variance_ok(values: Sequence[float]) -> bool:
    mean = math.fsum(values) / len(values)
    return math.fsum((v - mean) ** 2 for v in values) > 0


def select_model_features(
    featured: Sequence[FeaturedRecord], features: Sequence[str]
) -> tuple:
    """Split requested features into usable ones and constant ones.

    A constant column is collinear with the intercept, so it would make the
    normal equation singular.

    Returns:
        (kept, dropped)
    """
    columns = feature_columns(featured, features)
    kept = [name for name in features if _variance_ok(columns[name])]
    dropped = [name for name in features if name not in kept]
    return kept, dropped


def fit_model(
    train: Sequence[FeaturedRecord],
    test: Sequence[FeaturedRecord],
    features: Sequence[str],
) -> tuple:
    """Fit on train and evaluate on train and test.

    Returns:
        (model, diagnostics)
    """
    model = LinearRegressionModel(feature_names=list(features))
    model.fit(design_matrix(train, features), outcome_vector(train))

    train_mse, train_r2 = model.evaluate(design_matrix(train, features), outcome_vector(train))
    test_mse = test_r2 = None
    if test:
        test_mse, test_r2 = model.evaluate(design_matrix(test, features), outcome_vector(test))

    diagnostics = ModelDiagnostics(
        features=list(features),
        coefficients=model.coefficients,
        intercept=model.intercept,
        n_train=len(train),
        n_test=len(test),
        train_mse=train_mse,
        train_r2=train_r2,
        test_mse=test_mse,
        test_r2=test_r2,
    )
    return model, diagnostics


def run_pipeline(
    records: Sequence[TeamSeasonRecord],
    projected: Optional[Sequence[TeamSeasonRecord]] = None,
    target_year: Optional[int] = None,
    features: Optional[Sequence[str]] = None,
    test_fraction: Optional[float] = None,
    seed: Optional[int] = None,
    profile_weights: Optional[Weights] = None,
    schedule_weights: Optional[Weights] = None,
    ranking_weights: Optional[Weights] = None,
) -> PipelineResult:
    """Run the full pipeline.

    Args:
        records: Team seasons; labeled ones form the training set
        projected: Label-less rows to rank. When None, unlabeled seasons of
            target_year in records are used, else project_season builds them
        target_year: Season to rank (default: last historical season + 1,
            or the year of the projected rows)
        features: Model features (settings.DEFAULT_FEATURES if None)
        test_fraction: Share of seasons held out (settings default if None)
        seed: Split seed (settings default if None)

    Raises:
        InputError: Training set violates its invariants
        NumericalError: Remaining features are collinear
    """
    features = list(features or settings.DEFAULT_FEATURES)
    warnings: List[str] = []

    historical = [r for r in records if r.is_labeled]
    if not historical:
        raise InputError("No labeled historical seasons to train on")
    validate_training_set(historical)

    engine = FeatureEngine(profile_weights, schedule_weights)
    featured = engine.enrich(historical)

    outcome = feature_outcome_correlations(featured, ANALYSIS_FEATURES)
    matrix = correlation_matrix(feature_columns(featured, ANALYSIS_FEATURES + ["won_super_bowl"]))

    train, test = split_by_year(featured, test_fraction, seed)
    if len({row.year for row in train}) < 2:
        message = "Fewer than two training seasons; coefficients will be unstable"
        logger.warning(message)
        warnings.append(message)

    # Only the training rows reach the normal equation
    model_features, dropped = select_model_features(train, features)
    if dropped:
        message = f"Dropped features constant over the training seasons: {dropped}"
        logger.warning(message)
        warnings.append(message)
    if not model_features:
        raise InputError(f"Every requested feature is constant: {features}")

    model, diagnostics = fit_model(train, test, model_features)
    logger.info(
        f"Model fit: train R²={diagnostics.train_r2:.3f}"
        + (f", test R²={diagnostics.test_r2:.3f}" if diagnostics.test_r2 is not None else "")
    )
    if diagnostics.is_degenerate:
        message = (
            f"Test R² is {diagnostics.test_r2:.3f} (< 0): the model does worse than "
            f"predicting the mean on held-out seasons"
        )
        logger.warning(message)
        warnings.append(message)

    if projected is None:
        # Unlabeled seasons already in the records are the natural candidates
        unlabeled = [r for r in records if not r.is_labeled and r.total_games > 0]
        if target_year is None:
            target_year = (
                max(r.year for r in unlabeled) if unlabeled
                else max(r.year for r in records) + 1
            )
        projected = [r for r in unlabeled if r.year == target_year] or project_season(
            [r for r in records if r.total_games > 0], target_year
        )
    elif target_year is None:
        target_year = max(r.year for r in projected)

    candidates = [r for r in projected if r.year == target_year]
    if not candidates:
        raise InputError(f"No projected rows for target year {target_year}")

    featured_candidates = engine.enrich(candidates)
    rankings = PredictionRanker(model, ranking_weights).rank(featured_candidates)

    return PipelineResult(
        featured=featured,
        outcome_correlations=outcome,
        correlation_matrix=matrix,
        model=model,
        diagnostics=diagnostics,
        target_year=target_year,
        rankings=rankings,
        dropped_features=dropped,
        warnings=warnings,
    )
