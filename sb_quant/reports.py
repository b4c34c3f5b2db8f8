"""
Championship Reporting

Generates the human-readable text report for a pipeline run.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from sb_quant.analysis.patterns import ChampionPatterns
from sb_quant.pipeline import PipelineResult

RULE = "-" * 50


def _champion_section(patterns: ChampionPatterns) -> str:
    if not patterns.total_super_bowls:
        return ""

    n = patterns.total_super_bowls
    report = "CHAMPION PATTERNS:\n" + RULE + "\n"
    report += f"Super Bowls analyzed: {n}\n"
    report += f"#1 seeds that won: {patterns.top_seed_wins}\n"
    report += f"Wild card teams that won: {patterns.wild_card_wins}\n"
    report += f"Division leaders that won: {patterns.division_leaders}\n"
    report += f"Strong finish (3+ wins in last 5): {patterns.strong_finishes}\n"
    report += f"Average conference rank: {patterns.average_conference_rank:.1f}\n\n"

    report += f"Average points scored: {patterns.average_points_for:.1f}\n"
    report += f"Average points allowed: {patterns.average_points_against:.1f}\n"
    report += f"Average point differential: {patterns.average_point_differential:+.1f}\n\n"

    report += (
        f"Home record: {patterns.home.wins}-{patterns.home.losses} "
        f"({patterns.home.win_pct:.1%})\n"
    )
    report += (
        f"Road record: {patterns.road.wins}-{patterns.road.losses} "
        f"({patterns.road.win_pct:.1%})\n\n"
    )

    for champ in patterns.champions:
        seed = f"#{champ.conference_rank}" if champ.conference_rank else "n/a"
        report += f"  {champ.year}: {champ.team} ({champ.conference or '?'})\n"
        report += f"    Seed: {seed} | Record: {champ.record}\n"
        report += (
            f"    Points For: {champ.points_for} | "
            f"Point Diff: {champ.point_differential:+d}\n"
        )
        report += f"    Home: {champ.home_record or 'n/a'} | Road: {champ.road_record or 'n/a'}\n"
        report += f"    Division Leader: {'Yes' if champ.is_division_leader else 'No'}\n"
    return report + "\n"


def generate_report(
    result: PipelineResult,
    patterns: Optional[ChampionPatterns] = None,
    top_n: int = 10,
) -> str:
    """
    Build the plain-text report.

    Args:
        result: Output of run_pipeline
        patterns: Champion pattern summary (section omitted if None)
        top_n: Number of ranked candidates to list

    Returns:
        Report text
    """
    d = result.diagnostics
    report = "SUPER BOWL CHAMPIONSHIP ANALYSIS REPORT\n"
    report += f"Generated: {datetime.now():%Y-%m-%d %H:%M}\n"
    report += "=" * 70 + "\n\n"

    if patterns is not None:
        report += _champion_section(patterns)

    report += "FEATURE vs CHAMPIONSHIP CORRELATION:\n" + RULE + "\n"
    for name, r in result.outcome_correlations.items():
        report += f"  {name:<26} {r:+.3f}\n"
    report += "\n"

    report += "REGRESSION MODEL:\n" + RULE + "\n"
    report += f"Intercept: {d.intercept:+.4f}\n"
    for name, coef in d.coefficients.items():
        report += f"  {name:<26} {coef:+.6f}\n"
    report += f"Train: n={d.n_train} MSE={d.train_mse:.4f} R²={d.train_r2:.3f}\n"
    if d.test_mse is not None:
        report += f"Test:  n={d.n_test} MSE={d.test_mse:.4f} R²={d.test_r2:.3f}\n"
    if result.dropped_features:
        report += f"Dropped (constant): {', '.join(result.dropped_features)}\n"
    for warning in result.warnings:
        report += f"WARNING: {warning}\n"
    report += "\n"

    report += f"{result.target_year} CHAMPIONSHIP RANKING:\n" + RULE + "\n"
    for candidate in result.rankings[:top_n]:
        report += (
            f"{candidate.rank:>3}. {candidate.team:<24} "
            f"score={candidate.final_score:+.3f} "
            f"profile={candidate.championship_profile:.3f} "
            f"confidence={candidate.confidence_pct:.1f}%\n"
        )

    return report


def save_report(report: str, path: Union[str, Path]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(report)
    return path
