#!/usr/bin/env python3
"""
Tests for ingestion: column aliasing, cleaning policy and record validation.
"""

import sys
from pathlib import Path

import pandas as pd
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from sb_quant.data.ingest import (
    clean_frame,
    drop_empty_seasons,
    load_records,
    map_columns,
    normalize_column_name,
    parse_record,
    records_from_frame,
    validate_training_set,
)
from sb_quant.exceptions import InputError
from sb_quant.pipeline import run_pipeline
from sb_quant.schemas import Conference, SplitRecord, TeamSeasonRecord


class TestParseRecord:
    """Test "W-L-T" split parsing."""

    def test_full_record(self):
        assert parse_record("7-2-0") == SplitRecord(wins=7, losses=2, ties=0)

    def test_two_part_record(self):
        assert parse_record("10-7") == SplitRecord(wins=10, losses=7, ties=0)

    @pytest.mark.parametrize("value", ["", "undefined", "undefined-undefined-undefined", None, "NaN", "7"])
    def test_unavailable(self, value):
        assert parse_record(value) is None

    def test_non_numeric_part_is_zero(self):
        assert parse_record("x-2-1") == SplitRecord(wins=0, losses=2, ties=1)


class TestColumnMapping:
    """Test alias resolution onto canonical column names."""

    @pytest.mark.parametrize("raw,expected", [
        ("pointsFor", "points_for"),
        ("Points For", "points_for"),
        ("points-for", "points_for"),
        ("winPercentage", "win_percentage"),
        ("superbowlWinner", "superbowl_winner"),
    ])
    def test_normalize_column_name(self, raw, expected):
        assert normalize_column_name(raw) == expected

    def test_scraper_columns(self):
        df = pd.DataFrame(columns=[
            "Year", "Team", "W", "L", "pointsFor", "pointsAgainst", "homeRecord", "superbowlWinner",
        ])
        mapped = map_columns(df)
        assert list(mapped.columns) == [
            "year", "team", "wins", "losses", "points_for", "points_against",
            "home_record", "won_super_bowl",
        ]

    def test_unknown_columns_keep_normalized_name(self):
        mapped = map_columns(pd.DataFrame(columns=["team", "playoffSeed"]))
        assert "playoff_seed" in mapped.columns

    def test_duplicate_source_column_is_renamed(self):
        mapped = map_columns(pd.DataFrame(columns=["Wins", "wins"]))
        assert list(mapped.columns) == ["wins", "wins_source"]


class TestCleaning:
    """Test the single cleaning policy."""

    def test_all_invalid_columns_dropped(self):
        df = pd.DataFrame({
            "year": ["2023", "2023"],
            "team": ["A", "B"],
            "junk": ["undefined", ""],
            "splits": ["undefined-undefined-undefined", "NaN"],
        })
        cleaned = clean_frame(df)
        assert "junk" not in cleaned.columns
        assert "splits" not in cleaned.columns
        assert list(df.columns) == ["year", "team", "junk", "splits"]

    def test_non_numeric_counts_become_zero(self):
        df = pd.DataFrame({
            "year": ["2023", "2023"],
            "team": ["A", "B"],
            "wins": ["10", "abc"],
            "points_for": ["", "350"],
        })
        cleaned = clean_frame(df)
        assert list(cleaned["wins"]) == [10, 0]
        assert list(cleaned["points_for"]) == [0, 350]


def frame(**columns):
    return pd.DataFrame({key: [str(v) for v in values] for key, values in columns.items()})


class TestRecordsFromFrame:
    """Test conversion of a mapped table into TeamSeasonRecords."""

    def test_year_winner_labels(self):
        df = frame(
            year=[2023, 2023],
            team=["Kansas City Chiefs", "Detroit Lions"],
            wins=[11, 12], losses=[6, 5],
            year_winner=["Kansas City", "Kansas City"],
        )
        chiefs, lions = records_from_frame(df)
        assert chiefs.won_super_bowl is True
        assert lions.won_super_bowl is False

    def test_team_metadata_filled(self):
        df = frame(year=[2023], team=["KC"], wins=[11], losses=[6])
        (record,) = records_from_frame(df)
        assert record.team == "Kansas City Chiefs"
        assert record.conference == Conference.AFC
        assert record.division == "AFC West"
        assert record.won_super_bowl is None

    def test_explicit_label_column(self):
        df = frame(year=[2023, 2023], team=["A", "B"], wins=[9, 8], losses=[8, 9], superbowl_winner=[1, 0])
        labels = [r.won_super_bowl for r in records_from_frame(df)]
        assert labels == [True, False]

    def test_record_strings_and_flattened_splits(self):
        df = frame(
            year=[2023], team=["A"], wins=[10], losses=[7],
            home_record=["6-2-0"], road_wins=[4], road_losses=[5], road_ties=[0],
        )
        (record,) = records_from_frame(df)
        assert record.home == SplitRecord(wins=6, losses=2)
        assert record.road == SplitRecord(wins=4, losses=5)
        assert record.division_split is None

    def test_master_csv_with_unplayed_season(self):
        """The current season carries 0 flags and a blank winner until its Super Bowl is played."""
        df = frame(
            year=[2022, 2022, 2023, 2023, 2024, 2024],
            team=["Buffalo Bills", "Kansas City Chiefs"] * 3,
            year_winner=["Kansas City Chiefs"] * 4 + ["", ""],
            wins=[13, 14, 11, 11, 13, 15], losses=[3, 3, 6, 6, 4, 2], ties=[0] * 6,
            points_for=[455, 496, 451, 371, 525, 385],
            points_against=[289, 369, 311, 294, 368, 326],
            superbowl_winner=[0, 1, 0, 1, 0, 0],
            superbowl_loser=[0] * 6,
            superbowl_participant=[0, 1, 0, 1, 0, 0],
        )
        records = records_from_frame(df)
        labels = {(r.year, r.team.split()[-1]): r.won_super_bowl for r in records}

        assert labels[(2022, "Bills")] is False
        assert labels[(2023, "Chiefs")] is True
        assert labels[(2024, "Bills")] is None
        assert labels[(2024, "Chiefs")] is None

        result = run_pipeline(records, features=["win_pct"], test_fraction=0.0)
        assert result.target_year == 2024
        assert {r.team for r in result.rankings} == {"Buffalo Bills", "Kansas City Chiefs"}

    def test_season_without_winner_flag_is_unlabeled(self):
        df = frame(
            year=[2023, 2023, 2024, 2024], team=["A", "B"] * 2,
            wins=[10, 9, 8, 7], losses=[7, 8, 9, 10],
            superbowl_winner=[1, 0, 0, 0],
        )
        labels = [r.won_super_bowl for r in records_from_frame(df)]
        assert labels == [True, False, None, None]

        with pytest.raises(InputError) as exc_info:
            records_from_frame(df, require_label=True)
        assert exc_info.value.year == 2024

    def test_missing_label_when_required(self):
        df = frame(year=[2023], team=["A"], wins=[10], losses=[7])
        with pytest.raises(InputError, match="label"):
            records_from_frame(df, require_label=True)

    def test_negative_count_rejected(self):
        df = frame(year=[2023], team=["Broken"], wins=[-3], losses=[7])
        with pytest.raises(InputError) as exc_info:
            records_from_frame(df)
        assert exc_info.value.year == 2023
        assert exc_info.value.team == "Broken"

    def test_missing_team_rejected(self):
        df = frame(year=[2023], team=[""], wins=[10], losses=[7], other=["x"])
        with pytest.raises(InputError):
            records_from_frame(df)

    def test_missing_required_columns(self):
        with pytest.raises(InputError, match="required columns"):
            records_from_frame(frame(team=["A"], wins=[3]))


def record(year, team, wins=10, losses=7, won=False):
    return TeamSeasonRecord(
        year=year, team=team, wins=wins, losses=losses,
        points_for=300, points_against=300, won_super_bowl=won,
    )


class TestValidation:
    """Test training-set invariants."""

    def test_valid_set_passes(self):
        validate_training_set([record(2023, "A", won=True), record(2023, "B")])

    def test_two_champions_rejected(self):
        with pytest.raises(InputError, match="exactly one") as exc_info:
            validate_training_set([record(2023, "A", won=True), record(2023, "B", won=True)])
        assert exc_info.value.year == 2023

    def test_no_champion_rejected(self):
        with pytest.raises(InputError):
            validate_training_set([record(2023, "A"), record(2023, "B")])

    def test_zero_games_rejected(self):
        with pytest.raises(InputError, match="zero games"):
            validate_training_set([record(2023, "A", won=True), record(2023, "B", wins=0, losses=0)])

    def test_unlabeled_rejected(self):
        with pytest.raises(InputError):
            validate_training_set([record(2023, "A", won=True), record(2023, "B", won=None)])

    def test_duplicates_rejected(self):
        with pytest.raises(InputError, match="Duplicate"):
            validate_training_set([record(2023, "A", won=True), record(2023, "A")])

    def test_drop_empty_seasons(self):
        kept = drop_empty_seasons([record(2023, "A"), record(2023, "B", wins=0, losses=0)])
        assert [r.team for r in kept] == ["A"]


class TestLoadRecords:
    """Test reading records from disk."""

    def test_load_csv(self, tmp_path):
        path = tmp_path / "seasons.csv"
        path.write_text(
            "year,team,wins,losses,ties,pointsFor,pointsAgainst,homeRecord,won_super_bowl\n"
            "2023,Kansas City Chiefs,11,6,0,371,294,5-4-0,1\n"
            "2023,Detroit Lions,12,5,0,461,395,6-3-0,0\n"
            "2023,Empty Team,0,0,0,0,0,undefined,0\n"
        )
        records = load_records(path)

        assert [r.team for r in records] == ["Kansas City Chiefs", "Detroit Lions"]
        assert records[0].points_for == 371
        assert records[0].home == SplitRecord(wins=5, losses=4)
        assert records[0].won_super_bowl is True

    def test_keep_empty_seasons(self, tmp_path):
        path = tmp_path / "seasons.csv"
        path.write_text("year,team,wins,losses\n2023,A,0,0\n")
        assert len(load_records(path, drop_empty=False)) == 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_records(tmp_path / "missing.csv")
