"""
Single ingestion step: source table -> canonical TeamSeasonRecords.

Every scraper and converter variant produces a table with slightly different
column names. One alias table maps them onto the canonical schema, and one
cleaning policy is applied once here:

1. Columns whose every value is invalid ("", "undefined", "NaN",
   "undefined-undefined-undefined") are dropped.
2. Missing or non-numeric raw counting stats become 0.
3. Split records ("7-2-0") that are absent or invalid mean "split unavailable";
   individual non-numeric parts of a present split become 0.

Derived columns that may be present in the source (win pct, net points) are
ignored; the feature engine recomputes them.
"""

import logging
import re
from collections import Counter, defaultdict
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Union

import pandas as pd
from pydantic import ValidationError

from sb_quant.exceptions import InputError
from sb_quant.schemas import Conference, SplitRecord, TeamSeasonRecord
from sb_quant.utils.team_names import (
    canonical_team_name,
    conference_for_team,
    division_for_team,
    teams_match,
)

logger = logging.getLogger(__name__)

INVALID_TOKENS = {
    "",
    "undefined",
    "undefined-undefined-undefined",
    "nan",
    "none",
    "null",
    '""',
}

# Canonical field -> accepted (normalized) source column names, in priority order
COLUMN_ALIASES: Dict[str, List[str]] = {
    "year": ["year", "season"],
    "team": ["team", "team_name", "name"],
    "conference": ["conference", "conf"],
    "division": ["division", "div_name"],
    "wins": ["wins", "w"],
    "losses": ["losses", "l"],
    "ties": ["ties", "t"],
    "points_for": ["points_for", "pf", "points_scored"],
    "points_against": ["points_against", "pa", "points_allowed"],
    "home_record": ["home_record", "home"],
    "road_record": ["road_record", "road", "away_record", "away"],
    "division_record": ["division_record", "div_record", "div"],
    "conference_record": ["conference_record", "conf_record"],
    "streak": ["streak", "current_streak", "strk"],
    "last_five": ["last_five", "last_5", "last_five_games"],
    "conference_rank": ["conference_rank", "conf_rank", "rank"],
    "won_super_bowl": [
        "won_super_bowl",
        "won_superbowl",
        "superbowl_winner",
        "super_bowl_winner",
    ],
    "year_winner": ["year_winner", "super_bowl_champion"],
    "win_pct": ["win_pct", "pct", "win_percentage"],
    "net_points": ["net_points", "point_differential", "net_pts"],
}

RAW_COUNT_FIELDS = ["wins", "losses", "ties", "points_for", "points_against"]

# Split prefix -> (record-string column, flattened column prefix, record field)
SPLITS = {
    "home": ("home_record", "home", "home"),
    "road": ("road_record", "road", "road"),
    "division": ("division_record", "division", "division_split"),
    "conference": ("conference_record", "conference", "conference_split"),
    "last_five": ("last_five", "last_five", "last_five"),
}

_TRUE_TOKENS = {"1", "1.0", "true", "yes", "y", "t"}


def normalize_column_name(name: str) -> str:
    """'pointsFor', 'Points For' and 'points-for' all become 'points_for'."""
    name = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", str(name).strip())
    name = re.sub(r"[^0-9a-zA-Z]+", "_", name).strip("_")
    return name.lower()


def map_columns(
    df: pd.DataFrame,
    aliases: Optional[Mapping[str, Sequence[str]]] = None,
) -> pd.DataFrame:
    """Rename source columns to canonical names.

    Columns that match no alias keep their normalized name. When several
    source columns map to the same canonical name, the first alias in
    priority order wins and the rest keep their normalized names.
    """
    aliases = COLUMN_ALIASES if aliases is None else aliases
    normalized = {col: normalize_column_name(col) for col in df.columns}
    by_normalized: Dict[str, str] = {}
    for col, norm in normalized.items():
        by_normalized.setdefault(norm, col)

    rename: Dict[str, str] = {}
    claimed = set()
    for canonical, names in aliases.items():
        for alias in names:
            source = by_normalized.get(alias)
            if source is not None and source not in rename:
                rename[source] = canonical
                claimed.add(canonical)
                break

    for col, norm in normalized.items():
        if col not in rename:
            rename[col] = norm if norm not in claimed else f"{norm}_source"

    return df.rename(columns=rename)


def _is_invalid(value) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and pd.isna(value):
        return True
    return str(value).strip().strip('"').strip().lower() in INVALID_TOKENS


def drop_invalid_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Drop columns whose every value is invalid. Returns a new DataFrame."""
    if df.empty:
        return df.copy()
    invalid_mask = df.map(_is_invalid)
    all_invalid = [col for col in df.columns if invalid_mask[col].all()]
    if all_invalid:
        logger.warning(
            f"Removing {len(all_invalid)} columns with only invalid values: {all_invalid[:10]}"
        )
    return df.drop(columns=all_invalid)


def clean_frame(df: pd.DataFrame) -> pd.DataFrame:
    """Apply the cleaning policy to an already column-mapped frame.

    Returns:
        New DataFrame; the input is not modified
    """
    cleaned = drop_invalid_columns(df)
    cleaned = cleaned.mask(cleaned.map(_is_invalid))

    for col in RAW_COUNT_FIELDS:
        if col in cleaned.columns:
            cleaned[col] = pd.to_numeric(cleaned[col], errors="coerce").fillna(0).astype(int)

    for prefix in ("home", "road", "division", "conference", "last_five"):
        for part in ("wins", "losses", "ties"):
            col = f"{prefix}_{part}"
            if col in cleaned.columns:
                cleaned[col] = pd.to_numeric(cleaned[col], errors="coerce").fillna(0).astype(int)

    return cleaned


def _to_count(part: str) -> int:
    part = part.strip()
    return int(part) if part.isdigit() else 0


def parse_record(value) -> Optional[SplitRecord]:
    """Parse "W-L" or "W-L-T" into a SplitRecord.

    Returns:
        None when the value is missing or invalid (split unavailable)
    """
    if _is_invalid(value):
        return None
    parts = str(value).strip().strip('"').split("-")
    if len(parts) < 2:
        return None
    counts = [_to_count(p) for p in parts[:3]] + [0] * (3 - len(parts[:3]))
    return SplitRecord(wins=counts[0], losses=counts[1], ties=counts[2])


def _split_from_row(row: Mapping, record_column: str, flat_prefix: str) -> Optional[SplitRecord]:
    parsed = parse_record(row.get(record_column))
    if parsed is not None:
        return parsed

    flat = [f"{flat_prefix}_{part}" for part in ("wins", "losses", "ties")]
    if not any(col in row for col in flat):
        return None
    values = []
    for col in flat:
        raw = row.get(col)
        values.append(0 if _is_invalid(raw) else int(float(raw)))
    return SplitRecord(wins=values[0], losses=values[1], ties=values[2])


def _label_from_row(row: Mapping, team: str) -> Optional[bool]:
    """0/1 flag first, else a match against the season winner's name.

    A present but blank year_winner means the season's Super Bowl has not
    been played, so the row is unlabeled whatever its flag says.
    """
    if "year_winner" in row and _is_invalid(row["year_winner"]):
        return None
    raw = row.get("won_super_bowl")
    if not _is_invalid(raw):
        return str(raw).strip().lower() in _TRUE_TOKENS
    winner = row.get("year_winner")
    if not _is_invalid(winner):
        return teams_match(team, str(winner))
    return None


def _conference_from_row(row: Mapping, team: str) -> Optional[Conference]:
    raw = row.get("conference")
    if not _is_invalid(raw):
        value = str(raw).strip().upper()
        if value in Conference.__members__:
            return Conference(value)
    return conference_for_team(team)


def _optional_int(value) -> Optional[int]:
    if _is_invalid(value):
        return None
    try:
        number = int(float(value))
    except (TypeError, ValueError):
        return None
    return number if number >= 1 else None


def record_from_row(row: Mapping, require_label: bool = False) -> TeamSeasonRecord:
    """Build one TeamSeasonRecord from a cleaned, column-mapped row."""
    team = canonical_team_name(row.get("team"))
    year_raw = row.get("year")
    if _is_invalid(year_raw):
        raise InputError("Missing required field 'year'", team=team or None)
    try:
        year = int(float(year_raw))
    except (TypeError, ValueError) as e:
        raise InputError(f"Non-numeric year {year_raw!r}", team=team or None) from e
    if not team:
        raise InputError("Missing required field 'team'", year=year)

    label = _label_from_row(row, team)
    if require_label and label is None:
        raise InputError("Missing Super Bowl outcome label", year=year, team=team)

    splits = {
        field: _split_from_row(row, record_column, flat_prefix)
        for record_column, flat_prefix, field in SPLITS.values()
    }
    division = row.get("division")

    try:
        return TeamSeasonRecord(
            year=year,
            team=team,
            conference=_conference_from_row(row, team),
            division=None if _is_invalid(division) else str(division).strip(),
            wins=int(row.get("wins", 0) or 0),
            losses=int(row.get("losses", 0) or 0),
            ties=int(row.get("ties", 0) or 0),
            points_for=int(row.get("points_for", 0) or 0),
            points_against=int(row.get("points_against", 0) or 0),
            streak="" if _is_invalid(row.get("streak")) else str(row.get("streak")).strip(),
            conference_rank=_optional_int(row.get("conference_rank")),
            won_super_bowl=label,
            **splits,
        )
    except (ValidationError, ValueError, TypeError) as e:
        raise InputError(f"Invalid raw fields: {e}", year=year, team=team) from e


def records_from_frame(df: pd.DataFrame, require_label: bool = False) -> List[TeamSeasonRecord]:
    """Map, clean and convert a source table into records."""
    cleaned = clean_frame(map_columns(df))
    missing = [col for col in ("year", "team") if col not in cleaned.columns]
    if missing:
        raise InputError(f"Source table lacks required columns: {missing}")

    records = [
        record_from_row(row, require_label=require_label)
        for row in cleaned.to_dict(orient="records")
    ]
    if records and all(r.division is None for r in records):
        records = [
            r.model_copy(update={"division": division_for_team(r.team)}) for r in records
        ]

    champions = {r.year for r in records if r.won_super_bowl}
    unplayed = sorted({r.year for r in records if r.won_super_bowl is False} - champions)
    if unplayed:
        if require_label:
            raise InputError("No Super Bowl winner flagged for the season", year=unplayed[0])
        logger.warning(f"No Super Bowl winner flagged for seasons {unplayed}; treating them as unlabeled")
        records = [
            r.model_copy(update={"won_super_bowl": None}) if r.year in unplayed else r
            for r in records
        ]
    return records


def drop_empty_seasons(records: Sequence[TeamSeasonRecord]) -> List[TeamSeasonRecord]:
    """Exclude records with zero games played."""
    kept = [r for r in records if r.total_games > 0]
    dropped = len(records) - len(kept)
    if dropped:
        logger.warning(f"Excluded {dropped} records with zero games played")
    return kept


def validate_training_set(records: Sequence[TeamSeasonRecord]) -> None:
    """Check the invariants a historical training set must satisfy.

    Raises:
        InputError: For unlabeled or zero-game records, duplicated
            (year, team) rows, or a season without exactly one champion
    """
    seen = Counter((r.year, r.team) for r in records)
    for (year, team), count in seen.items():
        if count > 1:
            raise InputError(f"Duplicate team-season row x{count}", year=year, team=team)

    champions: Dict[int, int] = defaultdict(int)
    for record in records:
        if record.total_games == 0:
            raise InputError("Record has zero games played", year=record.year, team=record.team)
        if not record.is_labeled:
            raise InputError("Training record has no outcome label", year=record.year, team=record.team)
        champions[record.year] += int(bool(record.won_super_bowl))

    for year, count in sorted(champions.items()):
        if count != 1:
            raise InputError(f"Expected exactly one Super Bowl winner, found {count}", year=year)


def load_records(
    path: Union[str, Path],
    require_label: bool = False,
    drop_empty: bool = True,
) -> List[TeamSeasonRecord]:
    """Read a delimited file with a header row into records.

    Args:
        path: CSV file path
        require_label: Fail on rows without a Super Bowl outcome
        drop_empty: Exclude zero-game rows (with a warning)
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Dataset not found: {path}")

    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    logger.info(f"Loaded {len(df)} rows, {len(df.columns)} columns from {path}")

    records = records_from_frame(df, require_label=require_label)
    return drop_empty_seasons(records) if drop_empty else records
