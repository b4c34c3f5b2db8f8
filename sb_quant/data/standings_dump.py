"""
Flatten a scraped standings dump into one master table.

The dump is the JSON document the standings scrapers write:

    {
      "metadata": {"years": [2022, 2023]},
      "superBowlWinners": [{"year": 2024, "superBowl": "LVIII", "winner": ...,
                            "loser": ..., "score": ..., "season": "2023-2024"}],
      "conferenceStandings": {"2023": {"afc": [team, ...], "nfc": [...]}},
      "divisionStandings": {"2023": {"divisions": {"afcEast": [team, ...], ...}}}
    }

A Super Bowl is played in the calendar year after its regular season, so
winners are keyed by season (the first year of "2023-2024", or year - 1).
"""

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import pandas as pd

from sb_quant.schemas import SuperBowlResult
from sb_quant.utils.team_names import canonical_team_name, division_for_team, teams_match

logger = logging.getLogger(__name__)

DIVISION_KEYS: Dict[str, str] = {
    "afcEast": "AFC East",
    "afcNorth": "AFC North",
    "afcSouth": "AFC South",
    "afcWest": "AFC West",
    "nfcEast": "NFC East",
    "nfcNorth": "NFC North",
    "nfcSouth": "NFC South",
    "nfcWest": "NFC West",
}

SPLIT_KEYS = {
    "home_record": "homeRecord",
    "road_record": "roadRecord",
    "division_record": "divisionRecord",
    "conference_record": "conferenceRecord",
    "last_five": "lastFiveGames",
}


def _safe_int(value) -> int:
    if value is None or value == "":
        return 0
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


def _safe_float(value) -> float:
    if value is None or value == "":
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _record_string(split: Optional[Mapping[str, Any]]) -> str:
    if not split:
        return ""
    return f"{_safe_int(split.get('wins'))}-{_safe_int(split.get('losses'))}-{_safe_int(split.get('ties'))}"


def _season_of(entry: Mapping[str, Any]) -> Optional[int]:
    season = entry.get("season")
    if isinstance(season, str):
        match = re.match(r"\s*(\d{4})", season)
        if match:
            return int(match.group(1))
    elif isinstance(season, int):
        return season
    year = entry.get("year")
    return _safe_int(year) - 1 if year else None


def parse_super_bowls(entries: List[Mapping[str, Any]]) -> Dict[int, SuperBowlResult]:
    """Super Bowl results keyed by the regular season they concluded."""
    results: Dict[int, SuperBowlResult] = {}
    for entry in entries:
        season = _season_of(entry)
        winner = entry.get("winner")
        if season is None or not winner:
            logger.warning(f"Skipping Super Bowl entry without season/winner: {entry}")
            continue
        results[season] = SuperBowlResult(
            season=season,
            super_bowl=re.sub(r"\[[^\]]*\]", "", str(entry.get("superBowl", ""))).strip(),
            winner=canonical_team_name(winner),
            loser=canonical_team_name(entry.get("loser", "")),
            score=str(entry.get("score", "")),
            date=str(entry.get("date", "")),
        )
    return results


def _division_tables(year_data: Mapping[str, Any]) -> Dict[str, List[Mapping[str, Any]]]:
    source = year_data.get("divisions") or year_data
    return {
        DIVISION_KEYS[key]: teams
        for key, teams in source.items()
        if key in DIVISION_KEYS and isinstance(teams, list)
    }


def _team_row(
    year: int,
    team: str,
    conference_entry: Optional[tuple],
    division_entry: Optional[tuple],
    super_bowl: Optional[SuperBowlResult],
) -> Dict[str, Any]:
    conf_team = conference_entry[1] if conference_entry else {}
    div_team = division_entry[1] if division_entry else {}
    data = {**div_team, **conf_team}

    is_winner = bool(super_bowl and teams_match(team, super_bowl.winner))
    is_loser = bool(super_bowl and super_bowl.loser and teams_match(team, super_bowl.loser))
    wins, losses = _safe_int(data.get("wins")), _safe_int(data.get("losses"))
    points_for, points_against = _safe_int(data.get("pointsFor")), _safe_int(data.get("pointsAgainst"))
    win_pct = _safe_float(data.get("winPct", data.get("winPercentage")))

    division = division_entry[0] if division_entry else (division_for_team(team) or "")
    if conference_entry:
        conference = conference_entry[0]
    else:
        conference = division.split()[0] if division else ""

    row: Dict[str, Any] = {
        "year": year,
        "team": team,
        "conference": conference,
        "division": division,
        "conference_rank": conference_entry[2] if conference_entry else "",
        "division_rank": division_entry[2] if division_entry else "",
        "year_winner": super_bowl.winner if super_bowl else "",
        "wins": wins,
        "losses": losses,
        "ties": _safe_int(data.get("ties")),
        "win_percentage": win_pct,
        "points_for": points_for,
        "points_against": points_against,
        "point_differential": points_for - points_against,
        "current_streak": data.get("currentStreak", "") or "",
        "playoff_seed": _safe_int(data.get("playoffSeed")),
        "made_playoffs": 1 if data.get("madePlayoffs") is True else 0,
        # Blank, not 0, for seasons whose Super Bowl is not in the dump
        "superbowl_winner": int(is_winner) if super_bowl else "",
        "superbowl_loser": int(is_loser) if super_bowl else "",
        "superbowl_participant": int(is_winner or is_loser) if super_bowl else "",
        "superbowl_name": super_bowl.super_bowl if super_bowl and (is_winner or is_loser) else "",
        "superbowl_score": super_bowl.score if super_bowl and (is_winner or is_loser) else "",
        "winning_season": int(wins > losses),
        "above_500": int(win_pct > 0.5),
        "scraped_from_conference": int(bool(conference_entry)),
        "scraped_from_division": int(bool(division_entry)),
    }
    for column, key in SPLIT_KEYS.items():
        row[column] = _record_string(data.get(key))
    return row


def flatten_standings_dump(data: Mapping[str, Any]) -> pd.DataFrame:
    """One row per (season, team) with standings, splits and Super Bowl flags.

    Args:
        data: Parsed standings dump

    Returns:
        DataFrame sorted by year then team
    """
    conference_standings = data.get("conferenceStandings", {}) or {}
    division_standings = data.get("divisionStandings", {}) or {}
    years = data.get("metadata", {}).get("years") or sorted(
        {int(y) for y in list(conference_standings) + list(division_standings)}
    )
    super_bowls = parse_super_bowls(data.get("superBowlWinners", []) or [])

    rows: List[Dict[str, Any]] = []
    for year in years:
        year = int(year)
        conf_data = conference_standings.get(str(year)) or conference_standings.get(year) or {}
        div_data = division_standings.get(str(year)) or division_standings.get(year) or {}

        by_conference: Dict[str, tuple] = {}
        for conf in ("afc", "nfc"):
            for rank, team in enumerate(conf_data.get(conf, []) or [], start=1):
                name = canonical_team_name(team.get("team", ""))
                if name:
                    by_conference.setdefault(name, (conf.upper(), team, rank))

        by_division: Dict[str, tuple] = {}
        for division, teams in _division_tables(div_data).items():
            for rank, team in enumerate(teams, start=1):
                name = canonical_team_name(team.get("team", ""))
                if name:
                    by_division.setdefault(name, (division, team, rank))

        for team in sorted(set(by_conference) | set(by_division)):
            rows.append(
                _team_row(
                    year,
                    team,
                    by_conference.get(team),
                    by_division.get(team),
                    super_bowls.get(year),
                )
            )

    logger.info(f"Flattened {len(rows)} team-season rows across {len(years)} seasons")
    return pd.DataFrame(rows)


def load_standings_dump(path: Union[str, Path]) -> pd.DataFrame:
    """Read a standings dump JSON file and flatten it."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Standings dump not found: {path}")
    with open(path) as f:
        data = json.load(f)
    return flatten_standings_dump(data)
