"""CSV exports for the master dataset, cleaned dataset and pipeline outputs."""

import logging
from pathlib import Path
from typing import Mapping, Optional, Sequence, Union

import pandas as pd

from sb_quant.data.ingest import drop_invalid_columns
from sb_quant.schemas import FeaturedRecord, RankedCandidate

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _write(df: pd.DataFrame, path: PathLike, index: bool = False) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=index)
    logger.info(f"Saved {len(df)} rows x {len(df.columns)} columns to {path}")
    return path


def export_master_csv(df: pd.DataFrame, path: PathLike) -> Path:
    """Write the flattened master table as-is."""
    if df.empty:
        raise ValueError("No data to export")
    return _write(df, path)


def export_cleaned_csv(df: pd.DataFrame, path: PathLike) -> Path:
    """Write the table without its all-invalid columns."""
    return _write(drop_invalid_columns(df), path)


def featured_frame(featured: Sequence[FeaturedRecord]) -> pd.DataFrame:
    """Featured records as one flat DataFrame."""
    return pd.DataFrame([row.as_row() for row in featured])


def rankings_frame(ranked: Sequence[RankedCandidate]) -> pd.DataFrame:
    columns = list(RankedCandidate.model_fields)
    return pd.DataFrame([r.model_dump() for r in ranked], columns=columns)


def export_rankings_csv(ranked: Sequence[RankedCandidate], path: PathLike) -> Path:
    """Write the ranking, one row per candidate in rank order."""
    return _write(rankings_frame(ranked), path)


def export_correlations_csv(
    matrix: pd.DataFrame,
    path: PathLike,
    outcome_correlations: Optional[Mapping[str, float]] = None,
) -> Path:
    """Write the correlation matrix, optionally with a feature-vs-outcome column."""
    out = matrix.copy()
    if outcome_correlations is not None:
        out["outcome_correlation"] = [outcome_correlations.get(name) for name in out.index]
    out.index.name = "feature"
    return _write(out, path, index=True)
