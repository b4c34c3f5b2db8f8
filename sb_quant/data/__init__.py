"""
Ingestion and export of tabular team-season data.

Usage:
    from sb_quant.data import load_records

    records = load_records("data/processed/NFL_MASTER_DATA.csv")
"""

from sb_quant.data.export import (
    export_cleaned_csv,
    export_correlations_csv,
    export_master_csv,
    export_rankings_csv,
)
from sb_quant.data.ingest import (
    COLUMN_ALIASES,
    clean_frame,
    drop_empty_seasons,
    drop_invalid_columns,
    load_records,
    map_columns,
    parse_record,
    records_from_frame,
    validate_training_set,
)
from sb_quant.data.standings_dump import flatten_standings_dump, load_standings_dump

__all__ = [
    "COLUMN_ALIASES",
    "clean_frame",
    "drop_empty_seasons",
    "drop_invalid_columns",
    "export_cleaned_csv",
    "export_correlations_csv",
    "export_master_csv",
    "export_rankings_csv",
    "flatten_standings_dump",
    "load_records",
    "load_standings_dump",
    "map_columns",
    "parse_record",
    "records_from_frame",
    "validate_training_set",
]
