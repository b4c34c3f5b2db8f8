"""Statistical analysis: correlations and champion patterns."""

from sb_quant.analysis.patterns import ChampionPatterns, summarize_champion_patterns
from sb_quant.analysis.statistics import (
    CorrelationCheck,
    correlation,
    correlation_matrix,
    feature_outcome_correlations,
    reference_correlation,
    validate_correlation,
)

__all__ = [
    "ChampionPatterns",
    "CorrelationCheck",
    "correlation",
    "correlation_matrix",
    "feature_outcome_correlations",
    "reference_correlation",
    "summarize_champion_patterns",
    "validate_correlation",
]
