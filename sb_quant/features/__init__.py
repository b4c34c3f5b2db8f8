"""
Feature engineering for team-season records.

Usage:
    from sb_quant.features import FeatureEngine

    engine = FeatureEngine()
    featured = engine.enrich(records)
"""

from sb_quant.features.engine import (
    FeatureEngine,
    championship_profile,
    home_road_consistency,
    net_points,
    scoring_efficiency,
    strength_of_schedule,
    total_games,
    win_pct,
    year_averages,
)

__all__ = [
    "FeatureEngine",
    "championship_profile",
    "home_road_consistency",
    "net_points",
    "scoring_efficiency",
    "strength_of_schedule",
    "total_games",
    "win_pct",
    "year_averages",
]
