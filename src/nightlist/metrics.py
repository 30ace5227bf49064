"""Per-bucket duration, call counts and bird estimates."""

from collections import Counter
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Sequence

from .buckets import BucketKey, BucketMap
from .clock import Window, same_hour
from .sessions import DetectionEvent

# Calls of one species closer together than this are counted as one bird.
REPEAT_CALL_THRESHOLD = timedelta(seconds=15)


@dataclass
class SpeciesTally:
    species: str
    calls: int
    individuals: int


@dataclass
class BucketSummary:
    """Metrics for one non-empty bucket."""

    key: BucketKey
    duration: int | None  # Minutes of recording the bucket represents
    tallies: list[SpeciesTally]


def bucket_duration(
    key: BucketKey,
    events: Sequence[DetectionEvent],
    window: Window | None = None,
) -> int | None:
    """Minutes of recording time a bucket represents.

    The recording start and end come from the session of the bucket's first
    event, narrowed by the window when it is stricter. Only the hours holding
    the start or end are partial; every other hour counts as 60 minutes.

    Args:
        key: Bucket being measured
        events: Events assigned to the bucket
        window: Optional reporting window

    Returns:
        Duration in minutes, or None for an empty bucket
    """
    if not events:
        return None

    session = events[0].session
    start = session.true_start
    end = session.true_end
    if window is not None:
        if window.start is not None and window.start > start:
            start = window.start
        if window.stop is not None and window.stop < end:
            end = window.stop

    opened = key.start
    if same_hour(opened, end):
        if same_hour(opened, start):
            return end.minute - start.minute
        return end.minute
    if same_hour(opened, start):
        return 60 - start.minute
    return 60


def estimate_individuals(events: Sequence[DetectionEvent], species: str) -> int:
    """Estimate how many birds of a species were calling.

    Each call within REPEAT_CALL_THRESHOLD of the call before it is treated as
    a repeat by the same bird. Events must be in chronological order.
    """
    calls = [e.detection_instant for e in events if e.species == species]
    repeats = sum(
        1 for current, following in zip(calls, calls[1:])
        if following - current <= REPEAT_CALL_THRESHOLD
    )
    return len(calls) - repeats


def summarize(buckets: BucketMap, window: Window | None = None) -> list[BucketSummary]:
    """Summarize every non-empty bucket in chronological order."""
    summaries = []
    for key, events in buckets.items():
        if not events:
            continue

        counts = Counter(e.species for e in events)
        tallies = [
            SpeciesTally(
                species=species,
                calls=counts[species],
                individuals=estimate_individuals(events, species),
            )
            for species in sorted(counts, key=lambda s: (len(s), s))
        ]
        summaries.append(
            BucketSummary(
                key=key,
                duration=bucket_duration(key, events, window),
                tallies=tallies,
            )
        )
    return summaries


def daily_totals(summaries: Sequence[BucketSummary]) -> dict[date, dict[str, SpeciesTally]]:
    """Sum calls and bird estimates per species for each calendar date."""
    totals: dict[date, dict[str, SpeciesTally]] = {}
    for summary in summaries:
        day_totals = totals.setdefault(summary.key.day, {})
        for tally in summary.tallies:
            total = day_totals.setdefault(tally.species, SpeciesTally(tally.species, 0, 0))
            total.calls += tally.calls
            total.individuals += tally.individuals
    return totals
