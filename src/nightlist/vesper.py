"""Reading Vesper clip exports.

Vesper exports one CSV row per classified clip. Columns used here:
season, species, date, recording_start, recording_length, detection_time,
real_detection_time, detector, site.
"""

import csv
from pathlib import Path
from typing import Iterable

from tqdm import tqdm

from .clock import ParseError, parse_date, parse_duration, parse_instant, parse_time
from .sessions import DetectionEvent

REQUIRED_COLUMNS = (
    "season",
    "species",
    "date",
    "recording_start",
    "recording_length",
    "real_detection_time",
)


def parse_row(row: dict[str, str]) -> DetectionEvent:
    """Convert one CSV row into a DetectionEvent.

    Raises:
        ParseError: If a timestamp or duration is malformed
    """
    offset = row.get("detection_time")
    return DetectionEvent(
        species=(row["species"] or "").strip().lower(),
        detection_instant=parse_instant(row["real_detection_time"]),
        date=parse_date(row["date"]),
        recording_start=parse_time(row["recording_start"]),
        recording_length=parse_duration(row["recording_length"]),
        detection_offset=parse_duration(offset) if offset else None,
        detector=row.get("detector") or "",
        station=row.get("site") or "",
    )


def read_detections(paths: Iterable[Path]) -> list[DetectionEvent]:
    """Read detection events from one or more Vesper CSV exports.

    Rows with an empty season are blank lines at the end of a file and are
    dropped.

    Args:
        paths: CSV files, read in order

    Returns:
        Events from all files, in file then row order

    Raises:
        ParseError: If a file lacks a required column or a row is malformed
    """
    events = []

    for path in tqdm(list(paths), desc="Reading detections"):
        with open(path, newline="") as f:
            reader = csv.DictReader(f)
            missing = [c for c in REQUIRED_COLUMNS if c not in (reader.fieldnames or [])]
            if missing:
                raise ParseError(f"{path}: missing column(s): {', '.join(missing)}")

            for row in reader:
                if not (row.get("season") or "").strip():
                    continue
                try:
                    events.append(parse_row(row))
                except ParseError as e:
                    raise ParseError(f"{path}, line {reader.line_num}: {e}") from e

    return events
