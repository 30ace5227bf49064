"""Command-line interface."""

from pathlib import Path

import typer

from .buckets import build_buckets, populate_buckets
from .clock import DATE_FORMAT, INSTANT_FORMAT, ParseError, WindowError, make_window
from .config import DEFAULT_STATION, get_checklist_settings, resolve_config_path
from .metrics import daily_totals, summarize
from .report import checklist_rows, export_checklist, operator_warnings, print_report
from .sessions import DetectionEvent, collect_dates, session_lookup
from .vesper import read_detections

app = typer.Typer(help="Hourly eBird checklists from Vesper nocturnal flight call detections")


def load_events(inputs: list[Path]) -> list[DetectionEvent]:
    """Read all input files, exiting on any missing file or malformed row."""
    for path in inputs:
        if not path.is_file():
            typer.echo(f"Error: {path} is not a file", err=True)
            raise typer.Exit(1)

    try:
        return read_detections(inputs)
    except ParseError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def report(
    inputs: list[Path] = typer.Argument(..., help="Vesper CSV export(s)"),
    config: Path = typer.Option(None, "--config", "-c", help="Settings file (default: $NIGHTLIST_SETTINGS or ~/.nightlist/settings.json)"),
    start: str | None = typer.Option(None, "--start", help="Window start, e.g. '2020/09/04 21:30:00'"),
    stop: str | None = typer.Option(None, "--stop", help="Window stop, e.g. '2020/09/07 23:00:00'"),
    day: str | None = typer.Option(None, "--date", "-d", help="Single night, noon to noon, e.g. '2020/09/08'"),
    station: str = typer.Option(DEFAULT_STATION, "--station", help="Station code from settings"),
    export: str | None = typer.Option(None, "--export", "-e", help="Write an eBird checklist CSV with this name"),
) -> None:
    """Print hourly call counts and bird estimates, optionally exporting a checklist."""
    try:
        window = make_window(start, stop, day)
    except (WindowError, ParseError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if export == "":
        typer.echo("Error: Please provide an export file name", err=True)
        raise typer.Exit(1)

    events = load_events(inputs)

    buckets = build_buckets(collect_dates(events, window), session_lookup(events), window)
    skipped = populate_buckets(events, buckets, window)
    for error in skipped:
        typer.echo(f"Warning: skipped event. {error}", err=True)

    summaries = summarize(buckets, window)
    print_report(summaries, daily_totals(summaries))

    if not export:
        return

    settings = get_checklist_settings(resolve_config_path(config))
    try:
        station_config = settings.get_station(station)
    except KeyError as e:
        typer.echo(f"Error: {e.args[0]}", err=True)
        raise typer.Exit(1)

    for warning in operator_warnings(summaries):
        typer.secho(warning, fg=typer.colors.RED)

    rows = checklist_rows(summaries, settings, station_config, settings.load_codes())
    output_path = export_checklist(rows, export)
    typer.echo(f"Exported {len(rows)} checklist rows to {output_path}")


@app.command()
def sessions(
    inputs: list[Path] = typer.Argument(..., help="Vesper CSV export(s)"),
) -> None:
    """List recording sessions and how many hourly buckets each spans."""
    events = load_events(inputs)
    lookup = session_lookup(events)

    if not lookup:
        typer.echo("No recording sessions found")
        return

    for day, session in sorted(lookup.items()):
        bucket_count = len(build_buckets([day], lookup))
        typer.echo(
            f"{day.strftime(DATE_FORMAT)}: "
            f"{session.true_start.strftime(INSTANT_FORMAT)} -> "
            f"{session.true_end.strftime(INSTANT_FORMAT)} "
            f"({bucket_count} buckets)"
        )


if __name__ == "__main__":
    app()
