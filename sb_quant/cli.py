"""Command-line interface for the Super Bowl pipeline."""

import logging
from pathlib import Path
from typing import Optional

import pandas as pd
import typer

from sb_quant.analysis.patterns import summarize_champion_patterns
from sb_quant.analysis.statistics import (
    correlation_matrix,
    feature_columns,
    feature_outcome_correlations,
)
from sb_quant.config import settings
from sb_quant.data.export import (
    export_cleaned_csv,
    export_correlations_csv,
    export_master_csv,
    export_rankings_csv,
)
from sb_quant.data.ingest import load_records, validate_training_set
from sb_quant.data.standings_dump import load_standings_dump
from sb_quant.exceptions import SBQuantError
from sb_quant.features.engine import FeatureEngine
from sb_quant.pipeline import ANALYSIS_FEATURES, run_pipeline
from sb_quant.reports import generate_report, save_report

app = typer.Typer(help="NFL Super Bowl championship analytics pipeline")

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@app.command()
def flatten(
    dump: Path = typer.Argument(..., help="Standings dump JSON written by the scraper"),
    output: Optional[Path] = typer.Option(None, help="Master CSV path"),
) -> None:
    """Flatten a scraped standings dump into one master CSV.

    Examples:
        sbq flatten dt.json
        sbq flatten dt.json --output data/processed/NFL_MASTER_DATA.csv
    """
    try:
        output = output or settings.PROCESSED_DATA_DIR / "NFL_MASTER_DATA.csv"
        df = load_standings_dump(dump)
        path = export_master_csv(df, output)
        typer.echo(f"✅ Master CSV: {path} ({len(df)} rows)")
    except (SBQuantError, FileNotFoundError, ValueError) as e:
        logger.error(f"Flatten failed: {e}")
        raise typer.Exit(code=1)


@app.command()
def clean(
    input_csv: Path = typer.Argument(..., help="CSV to clean"),
    output: Optional[Path] = typer.Option(None, help="Cleaned CSV path"),
) -> None:
    """Remove columns that hold only undefined/NaN/empty values."""
    try:
        if not input_csv.exists():
            raise FileNotFoundError(f"Input file not found: {input_csv}")

        output = output or input_csv.with_name(input_csv.stem + "_CLEANED.csv")
        df = pd.read_csv(input_csv, dtype=str, keep_default_na=False)
        path = export_cleaned_csv(df, output)
        typer.echo(f"✅ Cleaned CSV: {path}")
    except (OSError, ValueError) as e:
        logger.error(f"Clean failed: {e}")
        raise typer.Exit(code=1)


@app.command()
def analyze(
    dataset: Path = typer.Argument(..., help="Team-season CSV with Super Bowl labels"),
    output_dir: Optional[Path] = typer.Option(None, help="Directory for correlation CSV"),
) -> None:
    """Feature correlations and champion patterns for historical seasons."""
    try:
        records = [r for r in load_records(dataset) if r.is_labeled]
        validate_training_set(records)
        featured = FeatureEngine().enrich(records)

        outcome = feature_outcome_correlations(featured, ANALYSIS_FEATURES)
        matrix = correlation_matrix(feature_columns(featured, ANALYSIS_FEATURES))

        output_dir = output_dir or settings.REPORTS_DIR
        path = export_correlations_csv(matrix, output_dir / "correlations.csv", outcome)

        patterns = summarize_champion_patterns(records)
        typer.echo("Feature vs championship correlation:")
        for name, r in outcome.items():
            typer.echo(f"  {name:<26} {r:+.3f}")
        typer.echo(
            f"🏆 {patterns.top_seed_wins}/{patterns.total_super_bowls} champions were #1 seeds, "
            f"{patterns.division_leaders} led their division"
        )
        typer.echo(f"✅ Correlations saved to {path}")
    except (SBQuantError, FileNotFoundError) as e:
        logger.error(f"Analysis failed: {e}")
        raise typer.Exit(code=1)


@app.command()
def predict(
    dataset: Path = typer.Argument(..., help="Team-season CSV (historical, optionally with projected rows)"),
    target_year: Optional[int] = typer.Option(None, help="Season to rank"),
    projected: Optional[Path] = typer.Option(None, help="CSV of projected rows for the target season"),
    test_fraction: float = typer.Option(settings.TEST_FRACTION, help="Share of seasons held out"),
    seed: int = typer.Option(settings.RANDOM_SEED, help="Random seed for the season split"),
    output_dir: Optional[Path] = typer.Option(None, help="Directory for rankings and report"),
    top: int = typer.Option(10, help="Candidates to list in the report"),
) -> None:
    """Fit the model on historical seasons and rank the target season.

    Examples:
        sbq predict data/processed/NFL_MASTER_DATA.csv
        sbq predict master.csv --target-year 2025 --projected projections_2025.csv
    """
    try:
        records = load_records(dataset)
        projected_records = load_records(projected) if projected else None

        result = run_pipeline(
            records,
            projected=projected_records,
            target_year=target_year,
            test_fraction=test_fraction,
            seed=seed,
        )
        patterns = summarize_champion_patterns(records)
        report = generate_report(result, patterns, top_n=top)

        output_dir = output_dir or settings.REPORTS_DIR
        rankings_path = export_rankings_csv(
            result.rankings, output_dir / f"rankings_{result.target_year}.csv"
        )
        report_path = save_report(report, output_dir / f"report_{result.target_year}.txt")

        typer.echo(report)
        typer.echo(f"✅ Rankings: {rankings_path}")
        typer.echo(f"📄 Report: {report_path}")
    except (SBQuantError, FileNotFoundError) as e:
        logger.error(f"Prediction failed: {e}")
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
