"""
Pearson correlation and correlation matrices.

The direct formula is written out by hand so its edge-case policy is explicit:
a zero-variance input yields 0 rather than NaN. `reference_correlation` is an
independent numpy implementation used to cross-check the direct formula.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Mapping, Sequence

import numpy as np
import pandas as pd

from sb_quant.exceptions import InputError
from sb_quant.schemas import FeaturedRecord

logger = logging.getLogger(__name__)


def _validated(x: Sequence[float], y: Sequence[float]) -> tuple:
    """Coerce both sequences to float lists, failing on anything unusable."""
    if len(x) != len(y):
        raise InputError(f"Sequence lengths differ: {len(x)} vs {len(y)}")
    if len(x) == 0:
        raise InputError("Cannot correlate empty sequences")
    if len(x) < 2:
        raise InputError(f"Correlation needs at least 2 observations, got {len(x)}")

    xs = [float(v) for v in x]
    ys = [float(v) for v in y]
    for name, values in (("x", xs), ("y", ys)):
        non_finite = sum(1 for v in values if not math.isfinite(v))
        if non_finite == len(values):
            raise InputError(f"Sequence {name} is entirely NaN/non-finite")
        if non_finite:
            raise InputError(
                f"Sequence {name} contains {non_finite} NaN/non-finite values"
            )
    return xs, ys


def correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """Pearson correlation coefficient of two equal-length sequences.

    Args:
        x: First sequence (n >= 2)
        y: Second sequence, same length

    Returns:
        r in [-1, 1]; 0 when either sequence has zero variance

    Raises:
        InputError: On length mismatch, fewer than 2 values, or NaN input
    """
    xs, ys = _validated(x, y)
    n = len(xs)
    x_mean = math.fsum(xs) / n
    y_mean = math.fsum(ys) / n

    dx = [v - x_mean for v in xs]
    dy = [v - y_mean for v in ys]

    numerator = math.fsum(a * b for a, b in zip(dx, dy))
    denominator = math.sqrt(
        math.fsum(a * a for a in dx) * math.fsum(b * b for b in dy)
    )
    if denominator == 0:
        return 0.0

    # Clamp rounding overshoot
    return max(-1.0, min(1.0, numerator / denominator))


def reference_correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """Same quantity via numpy's standardized dot product."""
    xs, ys = _validated(x, y)
    xa = np.asarray(xs, dtype=float)
    ya = np.asarray(ys, dtype=float)
    x_std = xa.std()
    y_std = ya.std()
    if x_std == 0 or y_std == 0:
        return 0.0
    zx = (xa - xa.mean()) / x_std
    zy = (ya - ya.mean()) / y_std
    return float(np.clip(np.mean(zx * zy), -1.0, 1.0))


@dataclass(frozen=True)
class CorrelationCheck:
    """A correlation computed two independent ways."""
    direct: float
    reference: float

    @property
    def abs_difference(self) -> float:
        return abs(self.direct - self.reference)


def validate_correlation(x: Sequence[float], y: Sequence[float]) -> CorrelationCheck:
    """Compute r with the direct formula and with numpy and report both."""
    check = CorrelationCheck(direct=correlation(x, y), reference=reference_correlation(x, y))
    logger.debug(
        f"Correlation check: direct={check.direct:.6f} "
        f"reference={check.reference:.6f} diff={check.abs_difference:.2e}"
    )
    return check


def correlation_matrix(columns: Mapping[str, Sequence[float]]) -> pd.DataFrame:
    """Symmetric k x k correlation matrix over named columns.

    The diagonal is set to exactly 1.0 and each off-diagonal pair is computed
    once and mirrored.

    Args:
        columns: {name: values}, all of equal length

    Returns:
        DataFrame indexed and columned by feature name
    """
    names = list(columns)
    if not names:
        raise InputError("Correlation matrix needs at least one column")

    lengths = {name: len(columns[name]) for name in names}
    if len(set(lengths.values())) > 1:
        raise InputError(f"Column lengths differ: {lengths}")

    k = len(names)
    matrix = np.eye(k)
    for i in range(k):
        for j in range(i + 1, k):
            r = correlation(columns[names[i]], columns[names[j]])
            matrix[i, j] = r
            matrix[j, i] = r

    return pd.DataFrame(matrix, index=names, columns=names)


def feature_columns(
    featured: Sequence[FeaturedRecord], features: Sequence[str]
) -> Dict[str, List[float]]:
    """Pull named feature columns out of featured records."""
    return {name: [row.feature(name) for row in featured] for name in features}


def feature_outcome_correlations(
    featured: Sequence[FeaturedRecord],
    features: Sequence[str],
    outcome: str = "won_super_bowl",
) -> Dict[str, float]:
    """Correlation of each feature with the outcome label.

    Only labeled records are used.

    Returns:
        {feature: r}, sorted by descending |r|
    """
    labeled = [row for row in featured if row.record.is_labeled]
    if len(labeled) < 2:
        raise InputError(
            f"Need at least 2 labeled records for outcome correlations, got {len(labeled)}"
        )

    target = [row.feature(outcome) for row in labeled]
    result = {
        name: correlation([row.feature(name) for row in labeled], target)
        for name in features
    }
    return dict(sorted(result.items(), key=lambda item: abs(item[1]), reverse=True))
