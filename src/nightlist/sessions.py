"""Recording sessions and the detection events that belong to them."""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterable

from .clock import DATE_FORMAT, Window

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecordingSession:
    """One continuous overnight recording run."""

    date: date  # Calendar date the recording started on
    recording_start: time
    recording_length: timedelta

    @property
    def true_start(self) -> datetime:
        return datetime.combine(self.date, self.recording_start)

    @property
    def true_end(self) -> datetime:
        return self.true_start + self.recording_length


@dataclass(frozen=True)
class DetectionEvent:
    """A single detected call.

    Carries its session metadata so it can be bucketed without a separate
    session lookup.
    """

    species: str  # Lower-case code, "" for unidentified
    detection_instant: datetime
    date: date  # Session date, not necessarily the date of the detection
    recording_start: time
    recording_length: timedelta
    detection_offset: timedelta | None = None  # Time since recording start
    detector: str = ""  # e.g. "tseep", "thrush"
    station: str = ""

    @property
    def session(self) -> RecordingSession:
        return RecordingSession(
            date=self.date,
            recording_start=self.recording_start,
            recording_length=self.recording_length,
        )


def session_lookup(events: Iterable[DetectionEvent]) -> dict[date, RecordingSession]:
    """Map each calendar date to its recording session.

    The first event seen for a date defines the session. Events on the same
    date that disagree about the recording start or length are logged and
    otherwise ignored.
    """
    sessions: dict[date, RecordingSession] = {}
    conflicts: set[RecordingSession] = set()
    for event in events:
        session = event.session
        existing = sessions.setdefault(event.date, session)
        if existing != session and session not in conflicts:
            conflicts.add(session)
            logger.warning(
                "Conflicting session for %s: %s +%s ignored, keeping %s +%s",
                event.date.strftime(DATE_FORMAT),
                session.recording_start,
                session.recording_length,
                existing.recording_start,
                existing.recording_length,
            )
    return sessions


def collect_dates(events: Iterable[DetectionEvent], window: Window | None = None) -> set[date]:
    """Unique session dates, limited to events inside the window when given."""
    return {
        event.date
        for event in events
        if window is None or window.contains(event.detection_instant)
    }
