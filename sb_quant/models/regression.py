"""
Ordinary least squares via the normal equation.

The model solves (X'^T X') theta = X'^T y, where X' is the design matrix with
a leading column of ones, by Gaussian elimination with partial pivoting. No
matrix is ever inverted.

Usage:
    from sb_quant.models.regression import LinearRegressionModel

    model = LinearRegressionModel(feature_names=["win_pct", "net_points"])
    model.fit(X_train, y_train)
    y_hat = model.predict(X_test)
"""

import logging
import math
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from sb_quant.config import settings
from sb_quant.exceptions import InputError, NumericalError, StateError
from sb_quant.schemas import FeaturedRecord

logger = logging.getLogger(__name__)

ArrayLike = Union[pd.DataFrame, np.ndarray, Sequence[Sequence[float]]]


def solve_linear_system(
    A: np.ndarray,
    b: np.ndarray,
    epsilon: Optional[float] = None,
) -> np.ndarray:
    """Solve A x = b by Gaussian elimination with partial pivoting.

    At each column the remaining row with the largest absolute coefficient is
    swapped into the pivot position before eliminating below it. A pivot whose
    magnitude is below epsilon (scaled by the largest entry of A when that
    exceeds 1) marks the system as singular.

    Args:
        A: Square coefficient matrix (k x k)
        b: Right-hand side (k)
        epsilon: Pivot tolerance (settings.SINGULAR_EPSILON if None)

    Returns:
        Solution vector x

    Raises:
        NumericalError: If A is singular or near-singular
    """
    epsilon = settings.SINGULAR_EPSILON if epsilon is None else epsilon
    M = np.array(A, dtype=float, copy=True)
    rhs = np.array(b, dtype=float, copy=True)
    k = M.shape[0]
    if M.shape != (k, k) or rhs.shape != (k,):
        raise InputError(f"Incompatible system shapes: A={M.shape}, b={rhs.shape}")

    tolerance = epsilon * max(1.0, float(np.abs(M).max()) if M.size else 0.0)

    for col in range(k):
        pivot_row = col + int(np.argmax(np.abs(M[col:, col])))
        pivot = M[pivot_row, col]
        if abs(pivot) < tolerance:
            raise NumericalError(
                f"Singular design matrix: pivot {pivot:.3e} in column {col} "
                f"is below tolerance {tolerance:.3e}"
            )

        if pivot_row != col:
            M[[col, pivot_row]] = M[[pivot_row, col]]
            rhs[[col, pivot_row]] = rhs[[pivot_row, col]]

        for row in range(col + 1, k):
            factor = M[row, col] / M[col, col]
            if factor == 0.0:
                continue
            M[row, col:] -= factor * M[col, col:]
            rhs[row] -= factor * rhs[col]

    # Back substitution
    x = np.zeros(k)
    for row in range(k - 1, -1, -1):
        x[row] = (rhs[row] - M[row, row + 1:] @ x[row + 1:]) / M[row, row]
    return x


def mean_squared_error(y_true: Sequence[float], y_pred: Sequence[float]) -> float:
    """mean((y_true - y_pred)^2)."""
    if len(y_true) != len(y_pred):
        raise InputError(f"Length mismatch: {len(y_true)} vs {len(y_pred)}")
    if len(y_true) == 0:
        raise InputError("Cannot compute MSE of empty sequences")
    return math.fsum((float(t) - float(p)) ** 2 for t, p in zip(y_true, y_pred)) / len(y_true)


def r_squared(y_true: Sequence[float], y_pred: Sequence[float]) -> float:
    """1 - SS_res / SS_tot; 0 for a constant target."""
    if len(y_true) != len(y_pred):
        raise InputError(f"Length mismatch: {len(y_true)} vs {len(y_pred)}")
    if len(y_true) == 0:
        raise InputError("Cannot compute R² of empty sequences")

    mean = math.fsum(float(t) for t in y_true) / len(y_true)
    ss_tot = math.fsum((float(t) - mean) ** 2 for t in y_true)
    if ss_tot == 0:
        return 0.0
    ss_res = math.fsum((float(t) - float(p)) ** 2 for t, p in zip(y_true, y_pred))
    return 1.0 - ss_res / ss_tot


class LinearRegressionModel:
    """
    Linear model y_hat = theta0 + sum(theta_i * x_i) fit by the normal equation.

    A model is Unfit until `fit` succeeds; `predict`, `coefficients` and
    `intercept` raise StateError before that.

    Attributes:
        feature_names: Names of the m features, in column order
        theta: Fitted parameters [intercept, coef_1, ..., coef_m] or None
    """

    def __init__(
        self,
        feature_names: Optional[List[str]] = None,
        epsilon: Optional[float] = None,
    ):
        self.feature_names: List[str] = list(feature_names) if feature_names else []
        self.epsilon = settings.SINGULAR_EPSILON if epsilon is None else epsilon
        self.theta: Optional[np.ndarray] = None

    @property
    def is_fit(self) -> bool:
        return self.theta is not None

    def _as_matrix(self, X: ArrayLike) -> np.ndarray:
        if isinstance(X, pd.DataFrame):
            X = X.values
        matrix = np.asarray(X, dtype=float)
        if matrix.ndim == 1:
            matrix = matrix.reshape(-1, 1)
        if matrix.ndim != 2:
            raise InputError(f"Design matrix must be 2-D, got shape {matrix.shape}")
        if not np.isfinite(matrix).all():
            raise InputError("Design matrix contains NaN/non-finite values")
        return matrix

    def fit(
        self,
        X: ArrayLike,
        y: Union[pd.Series, np.ndarray, Sequence[float]],
    ) -> "LinearRegressionModel":
        """
        Fit the model.

        Args:
            X: Design matrix, n rows x m features (no bias column)
            y: Target vector of length n

        Returns:
            self for chaining

        Raises:
            InputError: If shapes disagree
            NumericalError: If X'^T X' is singular (collinear or constant features)
        """
        if isinstance(X, pd.DataFrame) and not self.feature_names:
            self.feature_names = [str(c) for c in X.columns]
        matrix = self._as_matrix(X)
        target = np.asarray(y, dtype=float).ravel()

        n, m = matrix.shape
        if target.shape[0] != n:
            raise InputError(f"X has {n} rows but y has {target.shape[0]} values")
        if n == 0:
            raise InputError("Cannot fit on an empty design matrix")
        if not self.feature_names:
            self.feature_names = [f"x{i + 1}" for i in range(m)]
        if len(self.feature_names) != m:
            raise InputError(
                f"{len(self.feature_names)} feature names given for {m} columns"
            )

        design = np.hstack([np.ones((n, 1)), matrix])
        A = design.T @ design
        b = design.T @ target

        try:
            self.theta = solve_linear_system(A, b, self.epsilon)
        except NumericalError as e:
            raise NumericalError(str(e), features=self.feature_names) from e

        logger.info(f"Fit linear model on {n} samples, {m} features")
        return self

    def _require_fit(self) -> np.ndarray:
        if self.theta is None:
            raise StateError("Model is not fit; call fit() first")
        return self.theta

    def predict(self, X: ArrayLike) -> np.ndarray:
        """Predict y_hat for each row of X."""
        theta = self._require_fit()
        matrix = self._as_matrix(X)
        if matrix.shape[1] != len(theta) - 1:
            raise StateError(
                f"Model was fit with {len(theta) - 1} features, got {matrix.shape[1]}"
            )
        return theta[0] + matrix @ theta[1:]

    @property
    def intercept(self) -> float:
        return float(self._require_fit()[0])

    @property
    def coefficients(self) -> Dict[str, float]:
        """Feature coefficients keyed by feature name."""
        theta = self._require_fit()
        return {name: float(c) for name, c in zip(self.feature_names, theta[1:])}

    def evaluate(self, X: ArrayLike, y: Sequence[float]) -> Tuple[float, float]:
        """Return (MSE, R²) of the model on (X, y)."""
        predictions = self.predict(X)
        target = np.asarray(y, dtype=float).ravel()
        return mean_squared_error(target, predictions), r_squared(target, predictions)


def design_matrix(
    featured: Sequence[FeaturedRecord], features: Sequence[str]
) -> pd.DataFrame:
    """Feature matrix (one column per feature name) for a set of featured records."""
    return pd.DataFrame(
        {name: [row.feature(name) for row in featured] for name in features},
        columns=list(features),
    )


def outcome_vector(featured: Sequence[FeaturedRecord]) -> np.ndarray:
    """0/1 championship labels; every record must be labeled."""
    missing = [row.record for row in featured if not row.record.is_labeled]
    if missing:
        first = missing[0]
        raise InputError(
            f"{len(missing)} training records have no Super Bowl label",
            year=first.year,
            team=first.team,
        )
    return np.array([1.0 if row.record.won_super_bowl else 0.0 for row in featured])


def split_by_year(
    featured: Sequence[FeaturedRecord],
    test_fraction: Optional[float] = None,
    seed: Optional[int] = None,
) -> Tuple[List[FeaturedRecord], List[FeaturedRecord]]:
    """Deterministic train/test split that keeps each season on one side.

    Whole seasons are held out so every split still has exactly one champion
    per year. With fewer than two seasons, everything goes to training.

    Returns:
        (train, test) lists preserving input order within each
    """
    test_fraction = settings.TEST_FRACTION if test_fraction is None else test_fraction
    seed = settings.RANDOM_SEED if seed is None else seed

    years = sorted({row.year for row in featured})
    n_test = int(round(len(years) * test_fraction))
    if test_fraction > 0 and len(years) >= 2:
        n_test = min(max(n_test, 1), len(years) - 1)
    else:
        n_test = 0

    rng = np.random.default_rng(seed)
    test_years = set(rng.permutation(years)[:n_test].tolist()) if n_test else set()

    train = [row for row in featured if row.year not in test_years]
    test = [row for row in featured if row.year in test_years]
    logger.info(
        f"Split {len(years)} seasons: {len(years) - n_test} train, "
        f"{n_test} test {sorted(test_years)}"
    )
    return train, test
