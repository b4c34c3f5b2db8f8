"""Pydantic schemas for strict data contracts across the pipeline."""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Conference(str, Enum):
    """NFL conference."""
    AFC = "AFC"
    NFC = "NFC"


class SplitRecord(BaseModel):
    """Win-loss-tie triple for a situational split (home, road, division...)."""

    wins: int = Field(0, ge=0)
    losses: int = Field(0, ge=0)
    ties: int = Field(0, ge=0)

    model_config = ConfigDict(frozen=True)

    @property
    def games(self) -> int:
        return self.wins + self.losses + self.ties

    @property
    def win_pct(self) -> float:
        """Wins over games played, 0 when no games."""
        games = self.games
        return self.wins / games if games > 0 else 0.0

    def __str__(self) -> str:
        return f"{self.wins}-{self.losses}-{self.ties}"


class TeamSeasonRecord(BaseModel):
    """One team's regular season. Raw fields only; derived features live on FeaturedRecord."""

    # Identity
    year: int
    team: str = Field(..., min_length=1)
    conference: Optional[Conference] = None
    division: Optional[str] = None

    # Raw counting stats
    wins: int = Field(0, ge=0)
    losses: int = Field(0, ge=0)
    ties: int = Field(0, ge=0)
    points_for: int = Field(0, ge=0)
    points_against: int = Field(0, ge=0)

    # Situational splits (None = not available)
    home: Optional[SplitRecord] = None
    road: Optional[SplitRecord] = None
    division_split: Optional[SplitRecord] = None
    conference_split: Optional[SplitRecord] = None
    streak: str = ""
    last_five: Optional[SplitRecord] = None

    # Standings position within the conference, when the source provides it
    conference_rank: Optional[int] = Field(None, ge=1)

    # Outcome label; None for projected rows
    won_super_bowl: Optional[bool] = None

    model_config = ConfigDict(frozen=True)

    @field_validator("team")
    @classmethod
    def strip_team(cls, v: str) -> str:
        return v.strip()

    @property
    def total_games(self) -> int:
        return self.wins + self.losses + self.ties

    @property
    def is_labeled(self) -> bool:
        return self.won_super_bowl is not None

    @property
    def identity(self) -> str:
        return f"{self.year} {self.team}"


class SuperBowlResult(BaseModel):
    """A Super Bowl game keyed by the regular season it concluded."""

    season: int
    super_bowl: str = ""
    winner: str
    loser: str = ""
    score: str = ""
    date: str = ""

    model_config = ConfigDict(frozen=True)


class FeaturedRecord(BaseModel):
    """A TeamSeasonRecord plus the features derived from it."""

    record: TeamSeasonRecord

    total_games: int
    win_pct: float = Field(..., ge=0.0, le=1.0)
    net_points: int
    scoring_efficiency: float = Field(..., ge=0.0, le=1.0)
    home_road_consistency: float = Field(..., ge=0.0, le=1.0)
    strength_of_schedule: float = Field(..., ge=0.0, le=1.0)
    wins_above_average: float
    point_diff_above_average: float
    championship_profile: float = Field(..., ge=0.0, le=1.0)

    model_config = ConfigDict(frozen=True)

    @property
    def year(self) -> int:
        return self.record.year

    @property
    def team(self) -> str:
        return self.record.team

    def feature(self, name: str) -> float:
        """Look up a numeric feature by name (derived first, then raw).

        Raises:
            KeyError: If the name is neither a derived nor a numeric raw field
        """
        if name in DERIVED_FEATURES:
            return float(getattr(self, name))
        if name in RAW_NUMERIC_FIELDS:
            return float(getattr(self.record, name))
        if name == "won_super_bowl":
            return 1.0 if self.record.won_super_bowl else 0.0
        raise KeyError(f"Unknown feature: {name}")

    def as_row(self) -> Dict[str, object]:
        """Flat dict for DataFrame construction."""
        row: Dict[str, object] = {
            "year": self.record.year,
            "team": self.record.team,
            "conference": self.record.conference.value if self.record.conference else "",
            "division": self.record.division or "",
        }
        for name in RAW_NUMERIC_FIELDS:
            row[name] = getattr(self.record, name)
        for name in DERIVED_FEATURES:
            row[name] = getattr(self, name)
        row["won_super_bowl"] = (
            int(self.record.won_super_bowl) if self.record.won_super_bowl is not None else None
        )
        return row


RAW_NUMERIC_FIELDS: List[str] = ["wins", "losses", "ties", "points_for", "points_against"]

DERIVED_FEATURES: List[str] = [
    "total_games",
    "win_pct",
    "net_points",
    "scoring_efficiency",
    "home_road_consistency",
    "strength_of_schedule",
    "wins_above_average",
    "point_diff_above_average",
    "championship_profile",
]


class RankedCandidate(BaseModel):
    """One row of the final ranking."""

    team: str
    year: int
    rank: int = Field(..., ge=1)
    final_score: float
    confidence_pct: float = Field(..., ge=0.0, le=100.0)
    regression_score: float
    championship_profile: float
    normalized_regression: float = Field(..., ge=0.0, le=1.0)
    normalized_profile: float = Field(..., ge=0.0, le=1.0)
    win_pct: float

    model_config = ConfigDict(frozen=True)


class ModelDiagnostics(BaseModel):
    """Fitted regression diagnostics."""

    features: List[str]
    coefficients: Dict[str, float]
    intercept: float
    n_train: int
    n_test: int
    train_mse: float
    train_r2: float
    test_mse: Optional[float] = None
    test_r2: Optional[float] = None

    @property
    def is_degenerate(self) -> bool:
        """Test R² below zero means the fit is worse than predicting the mean."""
        return self.test_r2 is not None and self.test_r2 < 0.0
