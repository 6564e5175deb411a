"""Command-line interface for the DustCast forecast engine."""

from pathlib import Path

import structlog
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from dustcast.engine import ForecastEngine
from dustcast.factors import DEFAULT_CALENDAR
from dustcast.ingestion import CameraSimulator, has_camera_support, stations_for
from dustcast.models import ForecastScenario, PredictionResult

# Configure structured logging
structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(),
    ]
)

app = typer.Typer(
    name="dustcast",
    help="Next-day PM2.5/PM10 forecast with industrial, weather and camera corrections",
    no_args_is_help=True,
)
console = Console()

GRADE_STYLE = {
    "good": "blue",
    "moderate": "green",
    "bad": "yellow",
    "veryBad": "red",
}


def _load_scenario(path: Path) -> ForecastScenario:
    if not path.exists():
        console.print(f"[red]Scenario file not found: {path}[/red]")
        raise typer.Exit(code=1)
    try:
        return ForecastScenario.model_validate_json(path.read_text(encoding="utf-8"))
    except ValidationError as e:
        console.print(f"[red]Invalid scenario {path}:[/red]\n{e}")
        raise typer.Exit(code=1) from e


@app.command()
def predict(
    scenario: Path = typer.Argument(..., help="JSON scenario file"),
    simulate_cameras: bool = typer.Option(
        False, help="Add simulated camera analyses for the scenario city"
    ),
    seed: int = typer.Option(42, help="Random seed for simulated cameras"),
) -> None:
    """Forecast tomorrow's particulate levels for a scenario."""
    data = _load_scenario(scenario)

    analyses = list(data.analyses)
    if simulate_cameras:
        if not has_camera_support(data.city):
            console.print(f"[yellow]No cameras registered for {data.city}[/yellow]")
        else:
            current = data.today.pm25_avg if data.today else None
            analyses.extend(CameraSimulator(seed=seed).simulate_city(data.city, current))
            console.print(f"  Simulated {len(stations_for(data.city))} camera analyses")

    engine = ForecastEngine()
    result = engine.predict(
        data.baseline,
        history=data.history,
        today=data.today,
        weather=data.weather,
        hourly=data.hourly,
        analyses=analyses,
    )
    if result is None:
        console.print("[yellow]No baseline forecast in scenario; nothing to predict.[/yellow]")
        raise typer.Exit(code=1)

    _print_prediction(result)


@app.command()
def accuracy(
    scenario: Path = typer.Argument(..., help="JSON scenario file"),
) -> None:
    """Backtest the smoother over the scenario history."""
    data = _load_scenario(scenario)
    result = ForecastEngine().evaluate(data.history)

    if result is None:
        console.print("[yellow]Not enough history to backtest (need 3+ days).[/yellow]")
        return

    table = Table(title="Backtest Accuracy")
    table.add_column("Measure", style="cyan")
    table.add_column("Value", justify="right", style="bold")

    table.add_row("PM2.5 accuracy", f"{result.pm25_accuracy}%")
    table.add_row("PM10 accuracy", f"{result.pm10_accuracy}%")
    table.add_row("Overall accuracy", f"{result.overall_accuracy}%")
    table.add_row("Grade match rate", f"{result.grade_match_rate}%")
    table.add_row("Sample days", str(result.sample_days))

    console.print(table)


@app.command()
def holidays(
    year: int = typer.Option(..., help="Calendar year"),
) -> None:
    """List the factory holidays used by the industrial correction."""
    table = Table(title=f"Factory Holidays {year}")
    table.add_column("Holiday", style="cyan")
    table.add_column("Start")
    table.add_column("End")
    table.add_column("Factory rate", justify="right")

    for holiday in DEFAULT_CALENDAR.holidays_for(year):
        table.add_row(
            holiday.name,
            f"{holiday.start[0]:02d}-{holiday.start[1]:02d}",
            f"{holiday.end[0]:02d}-{holiday.end[1]:02d}",
            f"{holiday.factory_rate:.1f}",
        )

    console.print(table)
    if year not in DEFAULT_CALENDAR.covered_years():
        console.print(f"[yellow]Lunar holiday dates are not tabulated for {year}.[/yellow]")


def _print_prediction(result: PredictionResult) -> None:
    style = GRADE_STYLE.get(result.tomorrow_grade.value, "white")
    console.print(
        f"[bold]Tomorrow:[/bold] [{style}]{result.tomorrow_grade.label}[/{style}] "
        f"(PM2.5 {result.predicted_pm25}, PM10 {result.predicted_pm10}, "
        f"trend {result.trend.value})"
    )
    console.print(result.message)
    console.print()

    table = Table(title="Correction Factors")
    table.add_column("Model", style="cyan")
    table.add_column("Factor", justify="right", style="bold")
    table.add_column("Summary")

    table.add_row("Blend ratio", f"{result.blend.ratio:.2f}", _blend_note(result))
    table.add_row(
        "Industrial", f"{result.industrial.combined_factor:.2f}", result.industrial.summary
    )
    table.add_row("Weather", f"{result.weather.combined_factor:.2f}", result.weather.summary)
    if result.visual is not None:
        table.add_row(
            "Visual",
            f"{result.visual.combined_factor:.2f}",
            f"{result.visual.summary} ({result.visual.camera_count} cameras)",
        )
    table.add_row("Total", f"{result.total_factor:.3f}", "clamped to [0.2, 3.0]")

    console.print(table)


def _blend_note(result: PredictionResult) -> str:
    if not result.smoothed_pollutants:
        return "baseline only (insufficient history)"
    note = "smoother + baseline"
    if result.blend.insufficient_data:
        note += ", default ratio"
    return note


if __name__ == "__main__":
    app()
