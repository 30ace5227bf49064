"""Hour-aligned reporting buckets.

Each recording session is cut into buckets: the first one opens at the
session's (window-clipped) start, every following one at the top of an hour.
Sessions run overnight, so buckets after midnight belong to the next
calendar date.

Building the skeleton and filling it are separate passes. The skeleton keeps
empty buckets so that hours with no calls are still accounted for.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterable, Iterator, Mapping

from .clock import (
    DATE_FORMAT,
    INSTANT_FORMAT,
    TIME_FORMAT,
    Window,
    clip_end,
    clip_start,
    same_hour,
    top_of_hour,
)
from .sessions import DetectionEvent, RecordingSession

logger = logging.getLogger(__name__)

ONE_HOUR = timedelta(hours=1)


@dataclass(frozen=True)
class BucketKey:
    """Identifies one bucket.

    exact is only set on a session's first bucket when it opens part way
    through an hour; it carries the opening instant.
    """

    day: date
    hour: int
    exact: datetime | None = None

    @classmethod
    def opening(cls, start: datetime) -> "BucketKey":
        """Key for a bucket that opens at start."""
        if start == top_of_hour(start):
            return cls(day=start.date(), hour=start.hour)
        return cls(day=start.date(), hour=start.hour, exact=start)

    @classmethod
    def for_hour(cls, t: datetime) -> "BucketKey":
        """Key for the top-of-hour bucket containing t."""
        return cls(day=t.date(), hour=t.hour)

    @property
    def start(self) -> datetime:
        if self.exact is not None:
            return self.exact
        return datetime.combine(self.day, time(self.hour))

    @property
    def date_label(self) -> str:
        return self.day.strftime(DATE_FORMAT)

    @property
    def hour_label(self) -> str:
        return self.start.strftime(TIME_FORMAT)

    def __str__(self) -> str:
        return f"{self.date_label} {self.hour_label}"


class BucketNotFoundError(LookupError):
    """An event maps to a bucket the skeleton does not have."""

    def __init__(self, event: DetectionEvent, key: BucketKey):
        self.event = event
        self.key = key
        super().__init__(
            f"No bucket {key} for {event.species or 'unidentified'} call at "
            f"{event.detection_instant.strftime(INSTANT_FORMAT)} "
            f"(session {event.date.strftime(DATE_FORMAT)} {event.recording_start})"
        )


class BucketMap:
    """Buckets grouped by calendar date, each holding its events in input order."""

    def __init__(self) -> None:
        self._days: dict[date, dict[BucketKey, list[DetectionEvent]]] = {}

    def add(self, key: BucketKey) -> None:
        """Create an empty bucket for key if it does not exist yet."""
        self._days.setdefault(key.day, {}).setdefault(key, [])

    def __contains__(self, key: object) -> bool:
        return isinstance(key, BucketKey) and key in self._days.get(key.day, {})

    def __len__(self) -> int:
        return sum(len(hours) for hours in self._days.values())

    def __iter__(self) -> Iterator[BucketKey]:
        return iter(self.keys())

    def days(self) -> list[date]:
        return sorted(self._days)

    def keys(self, day: date | None = None) -> list[BucketKey]:
        """Bucket keys in chronological order, optionally for one date."""
        days = [day] if day is not None else self.days()
        keys = [key for d in days for key in self._days.get(d, {})]
        return sorted(keys, key=lambda k: k.start)

    def events(self, key: BucketKey) -> tuple[DetectionEvent, ...]:
        return tuple(self._days[key.day][key])

    def items(self) -> Iterator[tuple[BucketKey, tuple[DetectionEvent, ...]]]:
        for key in self.keys():
            yield key, self.events(key)

    def labels(self) -> dict[str, list[str]]:
        """Bucket labels as {"MM/DD/YY": ["HH:MM:SS", ...]}."""
        return {
            day.strftime(DATE_FORMAT): [key.hour_label for key in self.keys(day)]
            for day in self.days()
        }

    def append(self, key: BucketKey, event: DetectionEvent) -> None:
        try:
            bucket = self._days[key.day][key]
        except KeyError:
            raise BucketNotFoundError(event, key) from None
        bucket.append(event)


def build_buckets(
    dates: Iterable[date],
    sessions: Mapping[date, RecordingSession],
    window: Window | None = None,
) -> BucketMap:
    """Build the empty bucket skeleton for the given session dates.

    Args:
        dates: Session dates to report on (not modified)
        sessions: Recording session for each date
        window: Optional reporting window to clip sessions against

    Returns:
        BucketMap with one empty bucket per hour each session covers
    """
    buckets = BucketMap()

    for day in sorted(set(dates)):
        session = sessions.get(day)
        if session is None:
            continue

        start = clip_start(session.true_start, window)
        end = clip_end(start, session.true_end, window)
        if start >= end:
            continue

        buckets.add(BucketKey.opening(start))

        hour = top_of_hour(start) + ONE_HOUR
        while hour < end:
            buckets.add(BucketKey.for_hour(hour))
            hour += ONE_HOUR

    return buckets


def bucket_key_for(event: DetectionEvent, window: Window | None = None) -> BucketKey:
    """Work out which bucket an event belongs in."""
    t = event.detection_instant
    start = clip_start(event.session.true_start, window)

    if same_hour(t, start) and start != top_of_hour(start):
        return BucketKey.opening(start)

    if window is not None and window.start is not None:
        if same_hour(window.start, t) and not window.start < t:
            return BucketKey.opening(window.start)

    return BucketKey.for_hour(t)


def assign_entry(
    event: DetectionEvent,
    buckets: BucketMap,
    window: Window | None = None,
) -> bool:
    """Append an event to its bucket.

    Returns:
        True if assigned, False if the event falls outside the window

    Raises:
        BucketNotFoundError: If the skeleton has no bucket for the event
    """
    if window is not None and not window.contains(event.detection_instant):
        return False

    buckets.append(bucket_key_for(event, window), event)
    return True


def populate_buckets(
    events: Iterable[DetectionEvent],
    buckets: BucketMap,
    window: Window | None = None,
) -> list[BucketNotFoundError]:
    """Assign every event in order, skipping those with no matching bucket.

    Returns:
        The errors for skipped events
    """
    skipped = []
    for event in events:
        try:
            assign_entry(event, buckets, window)
        except BucketNotFoundError as e:
            logger.warning("Skipping event: %s", e)
            skipped.append(e)
    return skipped
