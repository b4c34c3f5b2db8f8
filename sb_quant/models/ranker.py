"""
Rank projected team seasons by their likelihood of winning the Super Bowl.

Two signals are blended: the fitted regression model's raw prediction and the
hand-weighted championship profile. Each is min-max normalized across the
candidate set, then

    final = 0.4 * norm(regression) + 0.4 * norm(profile) + 0.2 * (win_pct - 0.5)

The win-pct term stays un-normalized on purpose: it is a direct
deviation-from-.500 signal, so a losing team is pulled below zero.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from sb_quant.config import Weights, settings
from sb_quant.exceptions import InputError, StateError
from sb_quant.models.regression import LinearRegressionModel, design_matrix
from sb_quant.schemas import FeaturedRecord, RankedCandidate, TeamSeasonRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CandidateSignals:
    """The raw inputs the ranking needs for one candidate."""
    team: str
    year: int
    regression_score: float
    championship_profile: float
    win_pct: float


def min_max_normalize(values: Sequence[float]) -> List[float]:
    """Scale to [0, 1]; all zeros when every value is equal."""
    if not values:
        return []
    lo, hi = min(values), max(values)
    if hi == lo:
        return [0.0] * len(values)
    span = hi - lo
    return [min(1.0, max(0.0, (v - lo) / span)) for v in values]


def rank_signals(
    candidates: Sequence[CandidateSignals],
    weights: Optional[Weights] = None,
) -> List[RankedCandidate]:
    """Blend, sort and rank candidate signals.

    Ties on the final score are broken by team name, so ranks are always
    1..k with no duplicates.

    Confidence for each candidate is its share of the summed final scores, as
    a percentage. When the sum is not positive every confidence is 0; a
    share is floored at 0 and capped at 100 (negative scores elsewhere can
    otherwise push it past 100).
    """
    if not candidates:
        raise InputError("No candidates to rank")
    weights = weights or settings.RANKING_WEIGHTS

    norm_regression = min_max_normalize([c.regression_score for c in candidates])
    norm_profile = min_max_normalize([c.championship_profile for c in candidates])

    finals = [
        weights["regression"] * nr
        + weights["profile"] * npf
        + weights["win_pct_deviation"] * (c.win_pct - 0.5)
        for c, nr, npf in zip(candidates, norm_regression, norm_profile)
    ]
    total = math.fsum(finals)

    order = sorted(
        range(len(candidates)),
        key=lambda i: (-finals[i], candidates[i].team),
    )

    ranked = []
    for rank, i in enumerate(order, start=1):
        c = candidates[i]
        confidence = 0.0 if total <= 0 else min(100.0, max(0.0, finals[i] / total * 100.0))
        ranked.append(
            RankedCandidate(
                team=c.team,
                year=c.year,
                rank=rank,
                final_score=finals[i],
                confidence_pct=confidence,
                regression_score=c.regression_score,
                championship_profile=c.championship_profile,
                normalized_regression=norm_regression[i],
                normalized_profile=norm_profile[i],
                win_pct=c.win_pct,
            )
        )
    return ranked


class PredictionRanker:
    """Applies a fitted regression model plus the profile heuristic to projected rows."""

    def __init__(
        self,
        model: LinearRegressionModel,
        weights: Optional[Weights] = None,
    ):
        """
        Args:
            model: A fitted LinearRegressionModel
            weights: Ranking blend weights (settings.RANKING_WEIGHTS if None)
        """
        if not model.is_fit:
            raise StateError("PredictionRanker needs a fitted model")
        self.model = model
        self.weights = weights or settings.RANKING_WEIGHTS

    def signals(self, candidates: Sequence[FeaturedRecord]) -> List[CandidateSignals]:
        scores = self.model.predict(design_matrix(candidates, self.model.feature_names))
        return [
            CandidateSignals(
                team=row.team,
                year=row.year,
                regression_score=float(score),
                championship_profile=row.championship_profile,
                win_pct=row.win_pct,
            )
            for row, score in zip(candidates, scores)
        ]

    def rank(self, candidates: Sequence[FeaturedRecord]) -> List[RankedCandidate]:
        """Rank projected candidates for one target season."""
        if not candidates:
            raise InputError("No projected candidates to rank")
        ranked = rank_signals(self.signals(candidates), self.weights)
        top = ranked[0]
        logger.info(
            f"Ranked {len(ranked)} candidates; top: {top.team} "
            f"(score={top.final_score:.3f}, confidence={top.confidence_pct:.1f}%)"
        )
        return ranked


def project_season(
    records: Sequence[TeamSeasonRecord], target_year: int
) -> List[TeamSeasonRecord]:
    """Baseline projection: each team's most recent season carried into target_year.

    Only seasons before target_year are used. The projected rows carry no
    outcome label.
    """
    latest: Dict[str, TeamSeasonRecord] = {}
    for record in records:
        if record.year >= target_year:
            continue
        current = latest.get(record.team)
        if current is None or record.year > current.year:
            latest[record.team] = record

    if not latest:
        raise InputError(f"No seasons before {target_year} to project from")

    projected = [
        record.model_copy(update={"year": target_year, "won_super_bowl": None})
        for _, record in sorted(latest.items())
    ]
    logger.info(f"Projected {len(projected)} teams into {target_year}")
    return projected
