"""Console report and eBird checklist export."""

import csv
from collections import defaultdict
from datetime import date
from pathlib import Path
from typing import Sequence

import typer

from .clock import DATE_FORMAT
from .config import ChecklistSettings, StationConfig
from .metrics import BucketSummary, SpeciesTally
from .taxonomy import common_name, display_code, is_slash, needs_operator_check

VESPER_URL = "https://github.com/HaroldMills/Vesper"

# eBird protocol code for nocturnal flight call counts
NFC_PROTOCOL = "P54"

CHECKLIST_COLUMNS = (
    "Common Name",
    "Genus",
    "Species",
    "Number",
    "Species Comments",
    "Location Name",
    "Latitude",
    "Longitude",
    "Date",
    "Start Time",
    "State/Province",
    "Country Code",
    "Protocol",
    "Number of Observers",
    "Duration",
    "All observations reported?",
    "Effort Distance Miles",
    "Effort area acres",
    "Submission Comments",
)

GENERIC_COMMENT = (
    "{calls} NFC.\n\n"
    "Detected automatically using Vesper, available at {vesper}. Classified "
    "manually using Vesper. More justification for this identification is "
    "available upon request; the call was very typical of this species when "
    "compared against known recordings."
)

SPECIES_COMMENT = (
    "{calls} NFC.\n\n"
    "{text} All NFC calls identified here follow this pattern, unless noted. "
    "If the number of birds does not match the NFC count, it is because calls "
    "occurred close enough together that a single bird may have been calling.\n\n"
    "For more on {code} NFC identification, consult this checklist: {example}"
)

SLASH_COMMENT = (
    "{calls} NFC.\n\n"
    "Detected automatically using Vesper, available at {vesper}. Classified "
    "manually. Tseeps and most thrush calls are given by passerines; "
    "extraneous noises were not included in this count. Any call within "
    "fifteen seconds of the previous call was not counted towards the number "
    "of birds, so that the total is an undercount rather than an overcount. "
    "Vesper may also miss calls, so the NFC number here is only the total "
    "identified by Vesper."
)


def _plural(n: int) -> str:
    return "bird" if n == 1 else "birds"


def print_report(
    summaries: Sequence[BucketSummary],
    totals: dict[date, dict[str, SpeciesTally]],
) -> None:
    """Print per-hour results and per-date totals."""
    by_day: dict[date, list[BucketSummary]] = defaultdict(list)
    for summary in summaries:
        by_day[summary.key.day].append(summary)

    for day in sorted(by_day):
        typer.echo("")
        typer.secho(f"Date: {day.strftime(DATE_FORMAT)}", fg=typer.colors.BLUE)

        for summary in by_day[day]:
            hour = summary.key.hour_label[:5]
            typer.echo("Hour: " + typer.style(hour, fg=typer.colors.GREEN))
            if summary.duration:
                typer.echo(f"Duration: {summary.duration} mins.")

            typer.echo("Species\tBirds\tNFCs")
            for tally in summary.tallies:
                if needs_operator_check(tally.species):
                    typer.secho(f"{tally.species.upper()}:\t {tally.calls}", fg=typer.colors.RED)
                else:
                    typer.echo(f"{display_code(tally.species)}:\t{tally.individuals}\t({tally.calls})")
            typer.echo("")

    for day in sorted(totals):
        typer.secho(f"{day.strftime(DATE_FORMAT)} totals:", fg=typer.colors.BLUE)
        for tally in sorted(totals[day].values(), key=lambda t: (len(t.species), t.species)):
            typer.echo(
                f"{display_code(tally.species)}: {tally.individuals} probable "
                f"{_plural(tally.individuals)}, with {tally.calls} total calls."
            )
        typer.echo("")


def operator_warnings(summaries: Sequence[BucketSummary]) -> list[str]:
    """Messages for species codes that are usually keying mistakes."""
    calls: dict[str, int] = defaultdict(int)
    for summary in summaries:
        for tally in summary.tallies:
            if needs_operator_check(tally.species):
                calls[tally.species] += tally.calls

    return [
        f"You saw {n} {code.upper()} - is that right? Or did you press N by accident?"
        for code, n in calls.items()
    ]


def species_comment(tally: SpeciesTally, settings: ChecklistSettings) -> str:
    """Build the species comment for one checklist row."""
    if is_slash(tally.species):
        comment = SLASH_COMMENT.format(calls=tally.calls, vesper=VESPER_URL)
    else:
        code = tally.species.upper()
        entry = settings.species_comments.get(code)
        if entry and not entry.get("WIP"):
            comment = SPECIES_COMMENT.format(
                calls=tally.calls,
                text=entry.get("text", ""),
                code=code,
                example=entry.get("example", ""),
            )
        else:
            comment = GENERIC_COMMENT.format(calls=tally.calls, vesper=VESPER_URL)

    return comment.replace("\n", "<br>")


def checklist_rows(
    summaries: Sequence[BucketSummary],
    settings: ChecklistSettings,
    station: StationConfig,
    codes: dict[str, str],
) -> list[dict[str, str | int | float]]:
    """Build eBird record-format rows, one per species per bucket.

    Args:
        summaries: Bucket summaries to export
        settings: Species comment and slash code tables
        station: Station the recordings were made at
        codes: Species code to common name table

    Returns:
        List of row dicts keyed by CHECKLIST_COLUMNS
    """
    submission_comment = (
        f"{station.kit} Calls detected using Vesper ({VESPER_URL}) unless noted. "
        "This checklist was created automatically from Vesper detections."
    ).strip()

    rows = []
    for summary in summaries:
        day = summary.key.day
        for tally in summary.tallies:
            rows.append({
                "Common Name": common_name(tally.species, codes, settings.slash_codes),
                "Genus": "",
                "Species": "",
                "Number": tally.individuals,
                "Species Comments": species_comment(tally, settings),
                "Location Name": station.location_name,
                "Latitude": station.latitude,
                "Longitude": station.longitude,
                "Date": f"{day.month}/{day:%d/%Y}",
                "Start Time": summary.key.hour_label[:5],
                "State/Province": station.state,
                "Country Code": station.country,
                "Protocol": NFC_PROTOCOL,
                "Number of Observers": "1",
                "Duration": summary.duration if summary.duration is not None else "",
                "All observations reported?": "N",
                "Effort Distance Miles": "",
                "Effort area acres": "",
                "Submission Comments": submission_comment,
            })
    return rows


def export_checklist(rows: Sequence[dict], name: str) -> Path:
    """Write rows as a headerless eBird record-format CSV.

    Args:
        rows: Rows from checklist_rows()
        name: Output name; ".csv" is added unless already present

    Returns:
        Path of the written file
    """
    output_path = Path(name.removesuffix(".csv") + ".csv")

    with open(output_path, "w", newline="") as f:
        writer = csv.writer(f)
        for row in rows:
            writer.writerow([row[column] for column in CHECKLIST_COLUMNS])

    return output_path
