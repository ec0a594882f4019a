"""CLI interface using Typer."""

from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from bodycomp.config import Settings
from bodycomp.engine import ChartMetric, MetricsEngine
from bodycomp.ffmi import ffmi as compute_ffmi
from bodycomp.ffmi import ffmi_status, lean_mass_kg
from bodycomp.models import InterpolatedMetric, MetricKind, MetricSample, Sex, UserProfile
from bodycomp.samples import latest_complete_sample, load_samples
from bodycomp.units import height_to_cm, kg_to_lbs, weight_to_kg

app = typer.Typer(
    help="Body-metric estimates, trend weight, FFMI and Body Score",
    no_args_is_help=True,
)
console = Console()

config_app = typer.Typer(help="Show or initialize engine settings")
app.add_typer(config_app, name="config")


# ============================================================================
# Helpers
# ============================================================================


def output_json(response: dict, file=None) -> None:
    """Output JSON response to stdout or file."""
    json_str = json.dumps(response, indent=2)
    if file:
        file.write(json_str)
    else:
        print(json_str)


def fail(command: str, message: str, json_output: bool) -> NoReturn:
    """Report an error in the requested format and exit with status 1."""
    if json_output:
        output_json({"success": False, "command": command, "errors": [message]})
    else:
        console.print(f"[red]{message}[/red]")
    raise typer.Exit(1)


def parse_date(date_str: Optional[str], command: str, json_output: bool) -> date:
    """Parse YYYY-MM-DD, defaulting to today."""
    if not date_str:
        return date.today()
    try:
        return date.fromisoformat(date_str)
    except ValueError:
        fail(command, f"Invalid date '{date_str}', expected YYYY-MM-DD", json_output)


def read_samples(path: Path, command: str, json_output: bool) -> list[MetricSample]:
    try:
        return load_samples(path)
    except (FileNotFoundError, ValueError) as e:
        fail(command, str(e), json_output)


def get_engine(ctx: typer.Context) -> MetricsEngine:
    if ctx.obj is None:
        ctx.obj = MetricsEngine(Settings.load())
    return ctx.obj


def estimate_to_dict(estimate: Optional[InterpolatedMetric]) -> Optional[dict]:
    if estimate is None:
        return None
    return {
        "value": round(estimate.value, 2),
        "is_interpolated": estimate.is_interpolated,
        "is_last_known": estimate.is_last_known,
        "confidence": estimate.confidence_level.value if estimate.confidence_level else None,
    }


def describe_estimate(estimate: InterpolatedMetric) -> str:
    if not estimate.is_interpolated:
        kind = "measured"
    elif estimate.is_last_known:
        kind = "last known"
    else:
        kind = "estimated"
    confidence = estimate.confidence_level.value if estimate.confidence_level else "n/a"
    return f"{kind}, {confidence} confidence"


def format_weight(weight_kg: float, unit: str) -> str:
    if unit.lower() in ("lb", "lbs", "pounds"):
        return f"{kg_to_lbs(weight_kg):.1f} lbs"
    return f"{weight_kg:.1f} kg"


def parse_sex(value: str, command: str, json_output: bool) -> Sex:
    try:
        return Sex(value.lower())
    except ValueError:
        fail(command, f"sex must be 'male' or 'female', got '{value}'", json_output)


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to config.yaml (default: ~/.bodycomp/config.yaml)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Load settings and create the engine shared by subcommands."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    ctx.obj = MetricsEngine(Settings.load(config))


# ============================================================================
# Estimation Commands
# ============================================================================


@app.command()
def estimate(
    ctx: typer.Context,
    samples_file: Path = typer.Argument(..., help="CSV of samples (date,weight_kg,body_fat_percent)"),
    date_str: Optional[str] = typer.Option(
        None, "--date", "-d", help="Date (YYYY-MM-DD, default: today)"
    ),
    metric: str = typer.Option("weight", "--metric", "-m", help="weight or body_fat"),
    unit: str = typer.Option("kg", "--unit", help="Display unit for weight: kg or lbs"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Estimate a metric on a date, interpolating across gaps."""
    try:
        kind = MetricKind(metric.lower())
    except ValueError:
        fail("estimate", f"metric must be 'weight' or 'body_fat', got '{metric}'", json_output)

    on = parse_date(date_str, "estimate", json_output)
    samples = read_samples(samples_file, "estimate", json_output)
    engine = get_engine(ctx)
    result = engine.estimate(samples, kind, on)

    if result is None:
        summary = f"No {kind.value} data"
    elif kind == MetricKind.WEIGHT:
        summary = f"{format_weight(result.value, unit)} on {on} ({describe_estimate(result)})"
    else:
        summary = f"{result.value:.1f}% on {on} ({describe_estimate(result)})"

    if json_output:
        output_json({
            "success": True,
            "command": "estimate",
            "data": {
                "date": on.isoformat(),
                "metric": kind.value,
                "estimate": estimate_to_dict(result),
            },
            "human_summary": summary,
        })
    elif result is None:
        console.print(f"[yellow]{summary}[/yellow]")
    else:
        console.print(f"[blue]{kind.value}:[/blue] {summary}")


@app.command()
def trend(
    ctx: typer.Context,
    samples_file: Path = typer.Argument(..., help="CSV of samples"),
    date_str: Optional[str] = typer.Option(
        None, "--date", "-d", help="Date (YYYY-MM-DD, default: today)"
    ),
    unit: str = typer.Option("kg", "--unit", help="Display unit: kg or lbs"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show smoothed trend weight next to the raw estimate."""
    on = parse_date(date_str, "trend", json_output)
    samples = read_samples(samples_file, "trend", json_output)
    engine = get_engine(ctx)

    trend_result = engine.trend_weight(samples, on)
    raw_result = engine.estimate(samples, MetricKind.WEIGHT, on)

    if trend_result is None:
        summary = "No weight data"
    else:
        summary = f"Trend {format_weight(trend_result.value, unit)} on {on}"

    if json_output:
        output_json({
            "success": True,
            "command": "trend",
            "data": {
                "date": on.isoformat(),
                "trend": estimate_to_dict(trend_result),
                "raw": estimate_to_dict(raw_result),
            },
            "human_summary": summary,
        })
        return

    if trend_result is None:
        console.print(f"[yellow]{summary}[/yellow]")
        return

    console.print(f"[blue]Trend:[/blue] {format_weight(trend_result.value, unit)} ({describe_estimate(trend_result)})")
    if raw_result is not None:
        console.print(f"[blue]Raw:[/blue]   {format_weight(raw_result.value, unit)} ({describe_estimate(raw_result)})")


@app.command()
def ffmi(
    weight: float = typer.Option(..., "--weight", help="Body weight"),
    body_fat: float = typer.Option(..., "--body-fat", help="Body fat percentage"),
    height: float = typer.Option(..., "--height", help="Height"),
    sex: str = typer.Option("male", "--sex", help="male or female (for status band)"),
    weight_unit: str = typer.Option("kg", "--weight-unit", help="kg or lbs"),
    height_unit: str = typer.Option("cm", "--height-unit", help="cm or in"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Calculate FFMI from a single measurement."""
    sex_enum = parse_sex(sex, "ffmi", json_output)
    try:
        weight_kg = weight_to_kg(weight, weight_unit)
        height_cm = height_to_cm(height, height_unit)
    except ValueError as e:
        fail("ffmi", str(e), json_output)
    if height_cm <= 0 or weight_kg <= 0:
        fail("ffmi", "Weight and height must be positive", json_output)

    value = compute_ffmi(weight_kg, body_fat, height_cm)
    status = ffmi_status(value, sex_enum)
    lean = lean_mass_kg(weight_kg, body_fat)

    if json_output:
        output_json({
            "success": True,
            "command": "ffmi",
            "data": {
                "ffmi": round(value, 2),
                "status": status,
                "lean_mass_kg": round(lean, 2),
            },
            "human_summary": f"FFMI {value:.1f} ({status})",
        })
    else:
        console.print(f"[blue]FFMI:[/blue] {value:.1f} ({status})")
        console.print(f"[blue]Lean mass:[/blue] {lean:.1f} kg")


# ============================================================================
# Scoring Commands
# ============================================================================


@app.command()
def score(
    ctx: typer.Context,
    samples_file: Path = typer.Argument(..., help="CSV of samples"),
    sex: str = typer.Option(..., "--sex", help="male or female"),
    birth_year: int = typer.Option(..., "--birth-year", help="Year of birth"),
    height: float = typer.Option(..., "--height", help="Height"),
    height_unit: str = typer.Option("cm", "--height-unit", help="cm or in"),
    date_str: Optional[str] = typer.Option(
        None, "--date", "-d", help="Date (YYYY-MM-DD, default: latest sample with weight and body fat)"
    ),
    use_trend: bool = typer.Option(False, "--trend", help="Score with trend weight instead of raw"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Calculate the Body Score on a date."""
    sex_enum = parse_sex(sex, "score", json_output)
    try:
        height_cm = height_to_cm(height, height_unit)
    except ValueError as e:
        fail("score", str(e), json_output)
    samples = read_samples(samples_file, "score", json_output)
    latest = latest_complete_sample(samples)
    if date_str is None and latest is not None:
        on = latest.date
    else:
        on = parse_date(date_str, "score", json_output)

    engine = get_engine(ctx)
    profile = UserProfile(sex=sex_enum, birth_year=birth_year, height_cm=height_cm)
    calculation = engine.score_on(samples, profile, on, use_trend=use_trend)

    if not calculation.success or calculation.result is None:
        if json_output:
            output_json({
                "success": False,
                "command": "score",
                "errors": [calculation.message],
                "suggestions": ["Log at least one weight and one body fat measurement"],
            })
        else:
            console.print(f"[red]{calculation.message}[/red]")
        raise typer.Exit(1)

    result = calculation.result
    if json_output:
        output_json({
            "success": True,
            "command": "score",
            "data": {
                "date": on.isoformat(),
                "score": result.score,
                "ffmi": result.ffmi,
                "ffmi_status": result.ffmi_status,
                "status_tagline": result.status_tagline,
                "lean_percentile": result.lean_percentile,
                "target_body_fat": {
                    "lower": result.target_body_fat.lower_bound,
                    "upper": result.target_body_fat.upper_bound,
                    "label": result.target_body_fat.label,
                },
                "warnings": list(calculation.warnings),
            },
            "human_summary": calculation.message,
        })
        return

    lines = [
        f"[bold]{result.score}[/bold] / 100  {result.status_tagline}",
        f"FFMI: {result.ffmi:.1f} ({result.ffmi_status})",
        f"Leaner than ~{result.lean_percentile:.0f}% of peers",
        f"Target body fat: {result.target_body_fat.lower_bound:.0f}-"
        f"{result.target_body_fat.upper_bound:.0f}% ({result.target_body_fat.label})",
    ]
    console.print(Panel("\n".join(lines), title=f"Body Score on {on}"))
    for warning in calculation.warnings:
        console.print(f"[yellow]Warning:[/yellow] {warning}")


@app.command()
def series(
    ctx: typer.Context,
    samples_file: Path = typer.Argument(..., help="CSV of samples"),
    metric: str = typer.Option(
        "weight", "--metric", "-m", help="weight, trend_weight, body_fat, lean_mass or ffmi"
    ),
    start_str: str = typer.Option(..., "--start", help="First date (YYYY-MM-DD)"),
    end_str: Optional[str] = typer.Option(None, "--end", help="Last date (default: today)"),
    height: Optional[float] = typer.Option(None, "--height", help="Height in cm (FFMI only)"),
    step: int = typer.Option(1, "--step", help="Days between points"),
    max_points: int = typer.Option(150, "--max-points", help="Thin output to this many points"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Print a chart series over a date range."""
    try:
        chart_metric = ChartMetric(metric.lower())
    except ValueError:
        valid = ", ".join(m.value for m in ChartMetric)
        fail("series", f"metric must be one of: {valid}", json_output)
    if chart_metric == ChartMetric.FFMI and not height:
        fail("series", "--height is required for ffmi", json_output)

    start = parse_date(start_str, "series", json_output)
    end = parse_date(end_str, "series", json_output)
    if end < start:
        fail("series", "--end must not be before --start", json_output)
    if step <= 0 or max_points <= 0:
        fail("series", "--step and --max-points must be positive", json_output)

    samples = read_samples(samples_file, "series", json_output)
    engine = get_engine(ctx)
    points = engine.chart_series(
        samples, chart_metric, start, end, height_cm=height, step_days=step, max_points=max_points
    )

    if json_output:
        output_json({
            "success": True,
            "command": "series",
            "data": {
                "metric": chart_metric.value,
                "points": [
                    {
                        "date": p.date.isoformat(),
                        "value": round(p.value, 2),
                        "is_estimated": p.is_estimated,
                        "confidence": p.confidence_level.value if p.confidence_level else None,
                    }
                    for p in points
                ],
            },
            "human_summary": f"{len(points)} points for {chart_metric.value}",
        })
        return

    if not points:
        console.print(f"No {chart_metric.value} data between {start} and {end}")
        return

    table = Table(title=f"{chart_metric.value} {start} to {end}")
    table.add_column("Date")
    table.add_column("Value", justify="right")
    table.add_column("Estimated")
    table.add_column("Confidence")
    for p in points:
        table.add_row(
            p.date.isoformat(),
            f"{p.value:.1f}",
            "yes" if p.is_estimated else "",
            p.confidence_level.value if p.confidence_level else "",
        )
    console.print(table)


# ============================================================================
# Config Commands
# ============================================================================


@config_app.command("show")
def config_show(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show the settings in effect."""
    settings = get_engine(ctx).settings
    data = settings.to_dict()

    if json_output:
        output_json({
            "success": True,
            "command": "config show",
            "data": data,
            "human_summary": "Current settings",
        })
        return

    table = Table(title="Settings")
    table.add_column("Section")
    table.add_column("Key")
    table.add_column("Value")
    for section, values in data.items():
        for key, value in values.items():
            table.add_row(section, key, str(value))
    console.print(table)


@config_app.command("init")
def config_init(
    path: Optional[Path] = typer.Option(
        None, "--path", help="Where to write config.yaml (default: ~/.bodycomp/config.yaml)"
    ),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
) -> None:
    """Write default settings to a config file."""
    target = path or Path.home() / ".bodycomp" / "config.yaml"
    if target.exists() and not force:
        console.print(f"[red]{target} already exists (use --force to overwrite)[/red]")
        raise typer.Exit(1)

    written = Settings().save(target)
    console.print(f"[green]Wrote default settings to {written}[/green]")


if __name__ == "__main__":
    app()
