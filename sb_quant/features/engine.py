"""Feature engineering engine for deriving team-season metrics.

Every function here is a pure function of a TeamSeasonRecord (plus, for the
"above average" features, the per-year means of its sibling records). Raw
fields that were missing or non-numeric in the source were already zero-filled
by the ingestion cleaning policy, so a missing stat is a 0 here by
construction, never a per-call-site default.
"""

import logging
import math
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Tuple

from sb_quant.config import Weights, settings
from sb_quant.schemas import FeaturedRecord, SplitRecord, TeamSeasonRecord

logger = logging.getLogger(__name__)


def total_games(record: TeamSeasonRecord) -> int:
    return record.wins + record.losses + record.ties


def win_pct(record: TeamSeasonRecord) -> float:
    """Wins over games played; 0 when no games were played."""
    games = total_games(record)
    return record.wins / games if games > 0 else 0.0


def net_points(record: TeamSeasonRecord) -> int:
    return record.points_for - record.points_against


def scoring_efficiency(record: TeamSeasonRecord) -> float:
    """Share of all points in the team's games that the team scored.

    Returns:
        points_for / (points_for + points_against), or 0 when both are 0
    """
    denominator = record.points_for + record.points_against
    return record.points_for / denominator if denominator > 0 else 0.0


def _available(split: Optional[SplitRecord]) -> bool:
    return split is not None and split.games > 0


def home_road_consistency(record: TeamSeasonRecord) -> float:
    """1 - |home win% - road win%|; 0 if either split is unavailable."""
    if not (_available(record.home) and _available(record.road)):
        return 0.0
    return 1.0 - abs(record.home.win_pct - record.road.win_pct)


def strength_of_schedule(record: TeamSeasonRecord, weights: Optional[Weights] = None) -> float:
    """Weighted blend of division and conference win percentages.

    Default weights are 0.5 / 0.5. An unavailable split contributes 0.
    """
    weights = weights or settings.SCHEDULE_WEIGHTS
    division = record.division_split.win_pct if record.division_split else 0.0
    conference = record.conference_split.win_pct if record.conference_split else 0.0
    return (
        weights["division_win_pct"] * division
        + weights["conference_win_pct"] * conference
    )


def championship_profile(
    record: TeamSeasonRecord,
    profile_weights: Optional[Weights] = None,
    schedule_weights: Optional[Weights] = None,
) -> float:
    """Fixed-weight composite in [0, 1].

    0.4 x win% + 0.3 x scoring efficiency + 0.15 x home/road consistency
    + 0.15 x strength of schedule, with the default weights.
    """
    weights = profile_weights or settings.PROFILE_WEIGHTS
    score = (
        weights["win_pct"] * win_pct(record)
        + weights["scoring_efficiency"] * scoring_efficiency(record)
        + weights["home_road_consistency"] * home_road_consistency(record)
        + weights["strength_of_schedule"] * strength_of_schedule(record, schedule_weights)
    )
    return min(1.0, max(0.0, score))


def year_averages(records: Iterable[TeamSeasonRecord]) -> Dict[int, Tuple[float, float]]:
    """Mean wins and mean net points per year.

    Sums use math.fsum so the result does not depend on record order.

    Returns:
        {year: (avg_wins, avg_net_points)}
    """
    wins_by_year: Dict[int, List[float]] = defaultdict(list)
    diff_by_year: Dict[int, List[float]] = defaultdict(list)
    for record in records:
        wins_by_year[record.year].append(float(record.wins))
        diff_by_year[record.year].append(float(net_points(record)))

    return {
        year: (
            math.fsum(wins) / len(wins),
            math.fsum(diff_by_year[year]) / len(diff_by_year[year]),
        )
        for year, wins in wins_by_year.items()
    }


class FeatureEngine:
    """Derives per-record features for a collection of team seasons."""

    def __init__(
        self,
        profile_weights: Optional[Weights] = None,
        schedule_weights: Optional[Weights] = None,
    ) -> None:
        """
        Initialize feature engine.

        Args:
            profile_weights: Championship profile weights (settings default if None)
            schedule_weights: Strength-of-schedule weights (settings default if None)
        """
        self.profile_weights = profile_weights or settings.PROFILE_WEIGHTS
        self.schedule_weights = schedule_weights or settings.SCHEDULE_WEIGHTS

    def derive(
        self,
        record: TeamSeasonRecord,
        avg_wins: float,
        avg_net_points: float,
    ) -> FeaturedRecord:
        """Derive all features for one record given its year's averages."""
        return FeaturedRecord(
            record=record,
            total_games=total_games(record),
            win_pct=win_pct(record),
            net_points=net_points(record),
            scoring_efficiency=scoring_efficiency(record),
            home_road_consistency=home_road_consistency(record),
            strength_of_schedule=strength_of_schedule(record, self.schedule_weights),
            wins_above_average=record.wins - avg_wins,
            point_diff_above_average=net_points(record) - avg_net_points,
            championship_profile=championship_profile(
                record, self.profile_weights, self.schedule_weights
            ),
        )

    def enrich(self, records: List[TeamSeasonRecord]) -> List[FeaturedRecord]:
        """Derive features for every record, preserving input order.

        Args:
            records: Team seasons, any mix of years

        Returns:
            New list of FeaturedRecord; the input records are not modified
        """
        averages = year_averages(records)
        featured = [
            self.derive(record, *averages[record.year]) for record in records
        ]
        logger.info(
            f"Derived features for {len(featured)} records across {len(averages)} seasons"
        )
        return featured
