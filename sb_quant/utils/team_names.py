"""Team name normalization utilities"""

import re
from typing import Dict, List, Optional

from sb_quant.schemas import Conference

# Divisions, canonical full franchise names
DIVISIONS: Dict[str, List[str]] = {
    "AFC East": ["Buffalo Bills", "Miami Dolphins", "New England Patriots", "New York Jets"],
    "AFC North": ["Baltimore Ravens", "Cincinnati Bengals", "Cleveland Browns", "Pittsburgh Steelers"],
    "AFC South": ["Houston Texans", "Indianapolis Colts", "Jacksonville Jaguars", "Tennessee Titans"],
    "AFC West": ["Denver Broncos", "Kansas City Chiefs", "Las Vegas Raiders", "Los Angeles Chargers"],
    "NFC East": ["Dallas Cowboys", "New York Giants", "Philadelphia Eagles", "Washington Commanders"],
    "NFC North": ["Chicago Bears", "Detroit Lions", "Green Bay Packers", "Minnesota Vikings"],
    "NFC South": ["Atlanta Falcons", "Carolina Panthers", "New Orleans Saints", "Tampa Bay Buccaneers"],
    "NFC West": ["Arizona Cardinals", "Los Angeles Rams", "San Francisco 49ers", "Seattle Seahawks"],
}

TEAM_DIVISION: Dict[str, str] = {
    team: division for division, teams in DIVISIONS.items() for team in teams
}

FULL_TEAM_NAMES: List[str] = sorted(TEAM_DIVISION)

# Abbreviated and alternate names as they appear in standings and Super Bowl tables
TEAM_ALIASES: Dict[str, str] = {
    # City-only forms
    "Kansas City": "Kansas City Chiefs",
    "Buffalo": "Buffalo Bills",
    "Baltimore": "Baltimore Ravens",
    "Houston": "Houston Texans",
    "Pittsburgh": "Pittsburgh Steelers",
    "Cleveland": "Cleveland Browns",
    "Cincinnati": "Cincinnati Bengals",
    "Tennessee": "Tennessee Titans",
    "Jacksonville": "Jacksonville Jaguars",
    "Indianapolis": "Indianapolis Colts",
    "Miami": "Miami Dolphins",
    "Denver": "Denver Broncos",
    "Las Vegas": "Las Vegas Raiders",
    "New England": "New England Patriots",
    "Detroit": "Detroit Lions",
    "Philadelphia": "Philadelphia Eagles",
    "Minnesota": "Minnesota Vikings",
    "Tampa Bay": "Tampa Bay Buccaneers",
    "Los Angeles": "Los Angeles Rams",  # Super Bowl tables use the bare city for the Rams
    "Green Bay": "Green Bay Packers",
    "Washington": "Washington Commanders",
    "Seattle": "Seattle Seahawks",
    "Atlanta": "Atlanta Falcons",
    "Arizona": "Arizona Cardinals",
    "Dallas": "Dallas Cowboys",
    "San Francisco": "San Francisco 49ers",
    "San Francisco 49": "San Francisco 49ers",
    "Chicago": "Chicago Bears",
    "Carolina": "Carolina Panthers",
    "New Orleans": "New Orleans Saints",

    # Abbreviations
    "ARI": "Arizona Cardinals",
    "ATL": "Atlanta Falcons",
    "BAL": "Baltimore Ravens",
    "BUF": "Buffalo Bills",
    "CAR": "Carolina Panthers",
    "CHI": "Chicago Bears",
    "CIN": "Cincinnati Bengals",
    "CLE": "Cleveland Browns",
    "DAL": "Dallas Cowboys",
    "DEN": "Denver Broncos",
    "DET": "Detroit Lions",
    "GB": "Green Bay Packers",
    "HOU": "Houston Texans",
    "IND": "Indianapolis Colts",
    "JAX": "Jacksonville Jaguars",
    "KC": "Kansas City Chiefs",
    "LV": "Las Vegas Raiders",
    "LAC": "Los Angeles Chargers",
    "LA": "Los Angeles Rams",
    "LAR": "Los Angeles Rams",
    "MIA": "Miami Dolphins",
    "MIN": "Minnesota Vikings",
    "NE": "New England Patriots",
    "NO": "New Orleans Saints",
    "NYG": "New York Giants",
    "NYJ": "New York Jets",
    "PHI": "Philadelphia Eagles",
    "PIT": "Pittsburgh Steelers",
    "SF": "San Francisco 49ers",
    "SEA": "Seattle Seahawks",
    "TB": "Tampa Bay Buccaneers",
    "TEN": "Tennessee Titans",
    "WAS": "Washington Commanders",

    # Historical/alternate names
    "Oakland Raiders": "Las Vegas Raiders",
    "St. Louis Rams": "Los Angeles Rams",
    "San Diego Chargers": "Los Angeles Chargers",
    "Washington Redskins": "Washington Commanders",
    "Washington Football Team": "Washington Commanders",
}

# Clinch markers and footnotes the standings pages append to team names
_DECORATION = re.compile(r"\[[^\]]*\]|\([^)]*\)|^\s*[xyz*]{1,2}\s*-\s*|\s+[xyz*]{1,2}$")

_LOOKUP: Dict[str, str] = {
    **{name.lower(): name for name in FULL_TEAM_NAMES},
    # Bare nicknames ("Chiefs"); every current nickname is unique
    **{name.split()[-1].lower(): name for name in FULL_TEAM_NAMES},
    **{alias.lower(): full for alias, full in TEAM_ALIASES.items()},
}


def canonical_team_name(team_name) -> str:
    """
    Normalize a team name to its full franchise name.

    Handles:
    - Full team names ("Kansas City Chiefs")
    - City-only forms from Super Bowl tables ("Kansas City")
    - Abbreviations ("KC")
    - Bare nicknames ("Chiefs")
    - Historical names ("Oakland Raiders")
    - Footnote and clinch decorations ("Kansas City Chiefs[a]", "z - Detroit Lions")

    Unknown names are returned stripped but otherwise unchanged.

    Examples:
        >>> canonical_team_name("KC")
        'Kansas City Chiefs'
        >>> canonical_team_name("San Francisco 49")
        'San Francisco 49ers'
    """
    if not isinstance(team_name, str):
        return ""

    cleaned = _DECORATION.sub("", team_name).strip()
    cleaned = re.sub(r"\s+", " ", cleaned)

    found = _LOOKUP.get(cleaned.lower())
    if found:
        return found

    # Standings pages sometimes glue the nickname onto the city ("ChiefsKansas City")
    for full_name in FULL_TEAM_NAMES:
        if full_name.lower() in cleaned.lower():
            return full_name

    return cleaned


def _nickname(name: str) -> str:
    words = re.sub(r"[^a-z0-9 ]", "", name.lower()).split()
    return words[-1] if words else ""


def teams_match(name_a: str, name_b: str) -> bool:
    """True if two team names refer to the same franchise.

    Names are canonicalised first; otherwise the nicknames are compared so
    "Chiefs" matches "Kansas City Chiefs" but "New York Jets" does not match
    "New York Giants".
    """
    a = canonical_team_name(name_a)
    b = canonical_team_name(name_b)
    if not a or not b:
        return False
    if a == b:
        return True

    nick_a, nick_b = _nickname(a), _nickname(b)
    return (len(nick_a) > 3 and nick_a == nick_b)


def conference_for_team(team_name: str) -> Optional[Conference]:
    """Conference of a franchise, or None for unknown names."""
    division = division_for_team(team_name)
    if division is None:
        return None
    return Conference(division.split()[0])


def division_for_team(team_name: str) -> Optional[str]:
    """Division label ("AFC West") of a franchise, or None for unknown names."""
    return TEAM_DIVISION.get(canonical_team_name(team_name))
