#!/usr/bin/env python3
"""
Tests for the FeatureEngine.

These tests ensure:
1. Derived features follow their formulas exactly
2. Divide-by-zero cases resolve to 0
3. Enrichment is pure and order-independent
"""

import random
import sys
from pathlib import Path

import pytest
from pydantic import ValidationError

sys.path.insert(0, str(Path(__file__).parent.parent))

from sb_quant.config import Weights
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
from sb_quant.schemas import SplitRecord, TeamSeasonRecord


def make_record(team="Team A", year=2023, wins=14, losses=3, ties=0, pf=450, pa=300, **kwargs):
    return TeamSeasonRecord(
        year=year, team=team, wins=wins, losses=losses, ties=ties,
        points_for=pf, points_against=pa, **kwargs,
    )


def scenario_records():
    """The four-team 2023 season used throughout the docs."""
    return [
        make_record("TeamA", wins=14, losses=3, pf=450, pa=300, won_super_bowl=True),
        make_record("TeamB", wins=12, losses=5, pf=400, pa=350, won_super_bowl=False),
        make_record("TeamC", wins=9, losses=8, pf=380, pa=380, won_super_bowl=False),
        make_record("TeamD", wins=6, losses=11, pf=300, pa=420, won_super_bowl=False),
    ]


class TestBasicFeatures:
    """Test per-record scalar features."""

    def test_total_games_and_win_pct(self):
        record = make_record(wins=14, losses=3)
        assert total_games(record) == 17
        assert win_pct(record) == pytest.approx(14 / 17)
        assert win_pct(record) == pytest.approx(0.8235, abs=1e-4)

    def test_win_pct_counts_ties_as_games(self):
        record = make_record(wins=8, losses=8, ties=1)
        assert win_pct(record) == pytest.approx(8 / 17)

    def test_win_pct_zero_games(self):
        record = make_record(wins=0, losses=0, ties=0)
        assert win_pct(record) == 0.0

    @pytest.mark.parametrize("wins,losses,ties", [(0, 17, 0), (17, 0, 0), (5, 5, 7), (1, 0, 0)])
    def test_win_pct_in_unit_interval(self, wins, losses, ties):
        value = win_pct(make_record(wins=wins, losses=losses, ties=ties))
        assert 0.0 <= value <= 1.0

    def test_net_points(self):
        assert net_points(make_record(pf=450, pa=300)) == 150
        assert net_points(make_record(pf=300, pa=420)) == -120

    def test_scoring_efficiency(self):
        assert scoring_efficiency(make_record(pf=450, pa=300)) == pytest.approx(0.6)

    def test_scoring_efficiency_no_points(self):
        assert scoring_efficiency(make_record(pf=0, pa=0)) == 0.0

    def test_scoring_efficiency_shutout_seasons(self):
        assert scoring_efficiency(make_record(pf=0, pa=100)) == 0.0
        assert scoring_efficiency(make_record(pf=100, pa=0)) == 1.0


class TestSplitFeatures:
    """Test features built from situational splits."""

    def test_home_road_consistency(self):
        record = make_record(
            home=SplitRecord(wins=7, losses=1),
            road=SplitRecord(wins=7, losses=2),
        )
        expected = 1 - abs(7 / 8 - 7 / 9)
        assert home_road_consistency(record) == pytest.approx(expected)

    def test_home_road_consistency_identical_splits(self):
        split = SplitRecord(wins=5, losses=3, ties=1)
        assert home_road_consistency(make_record(home=split, road=split)) == 1.0

    def test_home_road_consistency_missing_split_is_zero(self):
        """A missing split must not be fabricated."""
        record = make_record(home=SplitRecord(wins=8, losses=0))
        assert home_road_consistency(record) == 0.0
        assert home_road_consistency(make_record()) == 0.0

    def test_home_road_consistency_empty_split_is_zero(self):
        record = make_record(home=SplitRecord(wins=8, losses=0), road=SplitRecord())
        assert home_road_consistency(record) == 0.0

    def test_strength_of_schedule_default_weights(self):
        record = make_record(
            division_split=SplitRecord(wins=4, losses=2),
            conference_split=SplitRecord(wins=9, losses=3),
        )
        assert strength_of_schedule(record) == pytest.approx(0.5 * 4 / 6 + 0.5 * 9 / 12)

    def test_strength_of_schedule_custom_weights(self):
        weights = Weights(values={"division_win_pct": 1.0, "conference_win_pct": 0.0})
        record = make_record(
            division_split=SplitRecord(wins=3, losses=3),
            conference_split=SplitRecord(wins=12, losses=0),
        )
        assert strength_of_schedule(record, weights) == pytest.approx(0.5)

    def test_strength_of_schedule_no_splits(self):
        assert strength_of_schedule(make_record()) == 0.0


class TestChampionshipProfile:
    """Test the fixed-weight composite."""

    def test_profile_without_splits(self):
        # 0.4 * 1.0 + 0.3 * 0.75 + 0 + 0
        record = make_record(wins=10, losses=0, pf=300, pa=100)
        assert championship_profile(record) == pytest.approx(0.625)

    def test_profile_matches_weighted_components(self):
        record = make_record(
            home=SplitRecord(wins=7, losses=1),
            road=SplitRecord(wins=7, losses=2),
            division_split=SplitRecord(wins=4, losses=2),
            conference_split=SplitRecord(wins=9, losses=3),
        )
        expected = (
            0.4 * win_pct(record)
            + 0.3 * scoring_efficiency(record)
            + 0.15 * home_road_consistency(record)
            + 0.15 * strength_of_schedule(record)
        )
        assert championship_profile(record) == pytest.approx(expected)

    def test_profile_perfect_season_is_one(self):
        split = SplitRecord(wins=6, losses=0)
        record = make_record(
            wins=17, losses=0, pf=500, pa=0,
            home=split, road=split, division_split=split, conference_split=split,
        )
        assert championship_profile(record) == pytest.approx(1.0)
        assert championship_profile(record) <= 1.0

    def test_profile_weights_must_sum_to_one(self):
        with pytest.raises(ValidationError):
            Weights(values={"win_pct": 0.5, "scoring_efficiency": 0.3,
                            "home_road_consistency": 0.1, "strength_of_schedule": 0.0})

    def test_negative_weights_rejected(self):
        with pytest.raises(ValidationError):
            Weights(values={"a": 1.5, "b": -0.5})


class TestEnrichment:
    """Test year-relative features and purity of enrich()."""

    def test_year_averages(self):
        averages = year_averages(scenario_records())
        avg_wins, avg_diff = averages[2023]
        assert avg_wins == pytest.approx(10.25)
        assert avg_diff == pytest.approx(20.0)

    def test_above_average_features(self):
        featured = FeatureEngine().enrich(scenario_records())
        team_a = featured[0]
        assert team_a.team == "TeamA"
        assert team_a.wins_above_average == pytest.approx(3.75)
        assert team_a.point_diff_above_average == pytest.approx(130.0)
        assert team_a.net_points == 150
        assert team_a.win_pct == pytest.approx(14 / 17)

    def test_averages_are_per_year(self):
        records = scenario_records() + [make_record("TeamA", year=2022, wins=2, losses=15)]
        featured = FeatureEngine().enrich(records)
        only_2022 = featured[-1]
        assert only_2022.wins_above_average == 0.0

    def test_enrich_preserves_order_and_leaves_records_untouched(self):
        records = scenario_records()
        snapshot = [r.model_dump() for r in records]
        featured = FeatureEngine().enrich(records)

        assert [f.team for f in featured] == [r.team for r in records]
        assert [r.model_dump() for r in records] == snapshot
        assert featured[0].record is records[0]

    def test_records_are_immutable(self):
        record = make_record()
        with pytest.raises(ValidationError):
            record.wins = 3

    def test_enrich_is_order_independent(self):
        """Shuffled input must give identical features per team."""
        records = scenario_records()
        shuffled = records[:]
        random.Random(7).shuffle(shuffled)

        engine = FeatureEngine()
        by_team = {f.team: f for f in engine.enrich(records)}
        by_team_shuffled = {f.team: f for f in engine.enrich(shuffled)}
        assert by_team == by_team_shuffled
