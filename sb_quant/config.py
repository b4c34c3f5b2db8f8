"""Configuration and policy constants for the Super Bowl pipeline."""

from pathlib import Path
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Weights(BaseModel):
    """Named, non-negative weights for a composite score."""

    values: Dict[str, float]
    normalized: bool = True  # weights must sum to 1.0

    model_config = ConfigDict(frozen=True)

    @field_validator("values")
    @classmethod
    def validate_values(cls, v: Dict[str, float]) -> Dict[str, float]:
        """Reject empty or negative weight sets."""
        if not v:
            raise ValueError("Weight set must not be empty")
        negative = [name for name, w in v.items() if w < 0]
        if negative:
            raise ValueError(f"Negative weights are not allowed: {negative}")
        return v

    @model_validator(mode="after")
    def validate_total(self) -> "Weights":
        total = sum(self.values.values())
        if self.normalized and abs(total - 1.0) > 1e-9:
            raise ValueError(f"Weights must sum to 1.0, got {total:.6f}")
        return self

    def __getitem__(self, name: str) -> float:
        return self.values[name]


class Settings(BaseSettings):
    """Global settings for the Super Bowl pipeline."""

    # Paths
    PROJECT_ROOT: Path = Path(__file__).parent.parent
    DATA_DIR: Path = PROJECT_ROOT / "data"
    RAW_DATA_DIR: Path = DATA_DIR / "raw"
    PROCESSED_DATA_DIR: Path = DATA_DIR / "processed"
    REPORTS_DIR: Path = PROJECT_ROOT / "reports"

    # Championship profile: 0.4 win% + 0.3 scoring eff. + 0.15 consistency + 0.15 SoS
    PROFILE_WEIGHTS: Weights = Weights(
        values={
            "win_pct": 0.4,
            "scoring_efficiency": 0.3,
            "home_road_consistency": 0.15,
            "strength_of_schedule": 0.15,
        }
    )

    # Strength-of-schedule proxy from split win percentages
    SCHEDULE_WEIGHTS: Weights = Weights(
        values={"division_win_pct": 0.5, "conference_win_pct": 0.5}
    )

    # Final ranking blend; win_pct_deviation is applied to (win_pct - 0.5) un-normalized
    RANKING_WEIGHTS: Weights = Weights(
        values={"regression": 0.4, "profile": 0.4, "win_pct_deviation": 0.2},
        normalized=False,
    )

    # Regression
    SINGULAR_EPSILON: float = 1e-12
    TEST_FRACTION: float = 0.25
    RANDOM_SEED: int = 42
    DEFAULT_FEATURES: List[str] = [
        "win_pct",
        "net_points",
        "scoring_efficiency",
        "home_road_consistency",
        "strength_of_schedule",
    ]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="SBQ_",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("TEST_FRACTION")
    @classmethod
    def validate_test_fraction(cls, v: float) -> float:
        """Test fraction must leave at least some rows on both sides."""
        if not 0.0 <= v < 1.0:
            raise ValueError(f"TEST_FRACTION must be in [0, 1), got {v}")
        return v

    def ensure_dirs(self) -> None:
        """Ensure all required directories exist."""
        for dir_path in [
            self.DATA_DIR,
            self.RAW_DATA_DIR,
            self.PROCESSED_DATA_DIR,
            self.REPORTS_DIR,
        ]:
            dir_path.mkdir(parents=True, exist_ok=True)


# Global settings instance
settings = Settings()
