"""NFL Super Bowl Championship Analytics.

Turns scraped standings and Super Bowl results into team-season records,
derives features, fits a least-squares model on past champions and ranks a
target season's teams by championship likelihood.
"""

__version__ = "0.1.0"

from sb_quant.features.engine import FeatureEngine
from sb_quant.models.ranker import PredictionRanker
from sb_quant.models.regression import LinearRegressionModel
from sb_quant.pipeline import PipelineResult, run_pipeline

__all__ = [
    "FeatureEngine",
    "LinearRegressionModel",
    "PipelineResult",
    "PredictionRanker",
    "run_pipeline",
]
