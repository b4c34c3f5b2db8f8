#!/usr/bin/env python3
"""
Tests for franchise name canonicalisation and matching.
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from sb_quant.schemas import Conference
from sb_quant.utils.team_names import (
    canonical_team_name,
    conference_for_team,
    division_for_team,
    teams_match,
)


class TestCanonicalTeamName:
    """Test the name forms the standings pages and Super Bowl tables use."""

    @pytest.mark.parametrize("raw,expected", [
        ("Kansas City Chiefs", "Kansas City Chiefs"),
        ("Kansas City", "Kansas City Chiefs"),
        ("KC", "Kansas City Chiefs"),
        ("Chiefs", "Kansas City Chiefs"),
        ("chiefs", "Kansas City Chiefs"),
        ("49ers", "San Francisco 49ers"),
        ("San Francisco 49", "San Francisco 49ers"),
        ("Oakland Raiders", "Las Vegas Raiders"),
        ("z - Detroit Lions", "Detroit Lions"),
        ("Kansas City Chiefs[a]", "Kansas City Chiefs"),
    ])
    def test_canonical_forms(self, raw, expected):
        assert canonical_team_name(raw) == expected

    def test_unknown_name_kept(self):
        assert canonical_team_name("  Team A ") == "Team A"

    def test_non_string_is_empty(self):
        assert canonical_team_name(None) == ""

    def test_nickname_gets_division_and_conference(self):
        assert division_for_team("Chiefs") == "AFC West"
        assert conference_for_team("Lions") == Conference.NFC


class TestTeamsMatch:
    """Test fuzzy franchise matching."""

    def test_city_matches_full_name(self):
        assert teams_match("Kansas City Chiefs", "Kansas City")

    def test_shared_city_does_not_match(self):
        assert not teams_match("New York Jets", "New York Giants")

    def test_blank_never_matches(self):
        assert not teams_match("", "Kansas City Chiefs")
