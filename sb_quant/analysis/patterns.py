"""
Regular-season patterns of Super Bowl champions.

Answers the questions the standings reports ask of each champion: where did
it finish in its conference, did it lead its division, did it finish strong,
and how did it score and travel.
"""

import logging
import math
from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field

from sb_quant.features.engine import net_points, win_pct
from sb_quant.schemas import TeamSeasonRecord

logger = logging.getLogger(__name__)

WILD_CARD_RANK = 4  # seeds 1-4 are division winners
STRONG_FINISH_WINS = 3  # wins in the last five games


class ChampionSummary(BaseModel):
    """One champion's regular season."""
    year: int
    team: str
    conference: Optional[str] = None
    conference_rank: Optional[int] = None
    record: str
    points_for: int
    points_against: int
    point_differential: int
    home_record: Optional[str] = None
    road_record: Optional[str] = None
    is_division_leader: bool = False
    strong_finish: bool = False


class SplitTotals(BaseModel):
    wins: int = 0
    losses: int = 0
    win_pct: float = 0.0


class ChampionPatterns(BaseModel):
    """Aggregate patterns across champions."""
    total_super_bowls: int = 0
    top_seed_wins: int = 0
    wild_card_wins: int = 0
    division_leaders: int = 0
    strong_finishes: int = 0
    average_conference_rank: float = 0.0
    average_points_for: float = 0.0
    average_points_against: float = 0.0
    average_point_differential: float = 0.0
    home: SplitTotals = Field(default_factory=SplitTotals)
    road: SplitTotals = Field(default_factory=SplitTotals)
    champions: List[ChampionSummary] = Field(default_factory=list)


def _standing_key(record: TeamSeasonRecord) -> Tuple[float, int, str]:
    return (-win_pct(record), -net_points(record), record.team)


def conference_ranks(records: Sequence[TeamSeasonRecord]) -> Dict[Tuple[int, str], int]:
    """Rank within (year, conference) by win pct, then net points, then name.

    A rank present on the record itself takes precedence.
    """
    groups: Dict[Tuple[int, str], List[TeamSeasonRecord]] = defaultdict(list)
    for record in records:
        if record.conference is not None:
            groups[(record.year, record.conference.value)].append(record)

    ranks: Dict[Tuple[int, str], int] = {}
    for group in groups.values():
        for position, record in enumerate(sorted(group, key=_standing_key), start=1):
            ranks[(record.year, record.team)] = record.conference_rank or position
    return ranks


def division_leaders(records: Sequence[TeamSeasonRecord]) -> Dict[Tuple[int, str], str]:
    """{(year, division): leading team} by the same ordering as conference ranks."""
    groups: Dict[Tuple[int, str], List[TeamSeasonRecord]] = defaultdict(list)
    for record in records:
        if record.division:
            groups[(record.year, record.division)].append(record)
    return {key: min(group, key=_standing_key).team for key, group in groups.items()}


def summarize_champion_patterns(records: Sequence[TeamSeasonRecord]) -> ChampionPatterns:
    """Summarize every labeled champion in the records."""
    champions = sorted(
        (r for r in records if r.won_super_bowl), key=lambda r: r.year
    )
    if not champions:
        logger.warning("No Super Bowl champions in the records; nothing to summarize")
        return ChampionPatterns()

    ranks = conference_ranks(records)
    leaders = division_leaders(records)

    summaries = []
    for record in champions:
        leader = leaders.get((record.year, record.division)) if record.division else None
        summaries.append(
            ChampionSummary(
                year=record.year,
                team=record.team,
                conference=record.conference.value if record.conference else None,
                conference_rank=ranks.get((record.year, record.team)),
                record=f"{record.wins}-{record.losses}" + (f"-{record.ties}" if record.ties else ""),
                points_for=record.points_for,
                points_against=record.points_against,
                point_differential=net_points(record),
                home_record=str(record.home) if record.home else None,
                road_record=str(record.road) if record.road else None,
                is_division_leader=leader == record.team,
                strong_finish=bool(record.last_five and record.last_five.wins >= STRONG_FINISH_WINS),
            )
        )

    n = len(summaries)
    ranked = [s.conference_rank for s in summaries if s.conference_rank is not None]

    def split_totals(attr: str) -> SplitTotals:
        splits = [getattr(r, attr) for r in champions if getattr(r, attr) is not None]
        wins = sum(s.wins for s in splits)
        losses = sum(s.losses for s in splits)
        return SplitTotals(
            wins=wins,
            losses=losses,
            win_pct=wins / (wins + losses) if wins + losses > 0 else 0.0,
        )

    patterns = ChampionPatterns(
        total_super_bowls=n,
        top_seed_wins=sum(1 for r in ranked if r == 1),
        wild_card_wins=sum(1 for r in ranked if r > WILD_CARD_RANK),
        division_leaders=sum(1 for s in summaries if s.is_division_leader),
        strong_finishes=sum(1 for s in summaries if s.strong_finish),
        average_conference_rank=math.fsum(ranked) / len(ranked) if ranked else 0.0,
        average_points_for=math.fsum(s.points_for for s in summaries) / n,
        average_points_against=math.fsum(s.points_against for s in summaries) / n,
        average_point_differential=math.fsum(s.point_differential for s in summaries) / n,
        home=split_totals("home"),
        road=split_totals("road"),
        champions=summaries,
    )
    logger.info(
        f"Champion patterns: {patterns.top_seed_wins}/{n} top seeds, "
        f"{patterns.division_leaders}/{n} division leaders"
    )
    return patterns
