"""Time parsing, reporting windows, and clipping helpers.

All instants are naive datetimes in the station's local wall-clock time.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta


DATE_FORMAT = "%m/%d/%y"  # 09/08/20
TIME_FORMAT = "%H:%M:%S"  # 20:43:00
INSTANT_FORMAT = f"{DATE_FORMAT} {TIME_FORMAT}"
WINDOW_DATE_FORMAT = "%Y/%m/%d"  # 2020/09/08
WINDOW_INSTANT_FORMAT = f"{WINDOW_DATE_FORMAT} {TIME_FORMAT}"

# Overnight sessions end in the morning, so a window stop on the day after the
# session start only clips when it is before this time.
NEXT_DAY_CUTOFF = time(12, 0)


class ParseError(ValueError):
    """A timestamp or duration string could not be decomposed."""


class WindowError(ValueError):
    """The reporting window is misconfigured."""


def _parse(text: str, fmt: str, what: str) -> datetime:
    try:
        return datetime.strptime(text.strip(), fmt)
    except (ValueError, AttributeError):
        raise ParseError(f"Invalid {what}: {text!r}") from None


def parse_date(text: str) -> date:
    """Parse a calendar date in MM/DD/YY format."""
    return _parse(text, DATE_FORMAT, "date").date()


def parse_time(text: str) -> time:
    """Parse a wall-clock time in HH:MM:SS format."""
    return _parse(text, TIME_FORMAT, "time").time()


def parse_instant(text: str) -> datetime:
    """Parse an instant in MM/DD/YY HH:MM:SS format."""
    return _parse(text, INSTANT_FORMAT, "timestamp")


def parse_window_instant(text: str) -> datetime:
    """Parse a window bound in YYYY/MM/DD HH:MM:SS format."""
    return _parse(text, WINDOW_INSTANT_FORMAT, "window time")


def parse_duration(text: str) -> timedelta:
    """Parse an H:MM:SS duration (hours may exceed 23).

    Raises:
        ParseError: If the text is not three colon-separated numbers
    """
    parts = str(text).strip().split(":")
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        raise ParseError(f"Invalid duration: {text!r}")

    hours, minutes, seconds = (int(p) for p in parts)
    return timedelta(hours=hours, minutes=minutes, seconds=seconds)


def top_of_hour(t: datetime) -> datetime:
    return t.replace(minute=0, second=0, microsecond=0)


def same_hour(a: datetime, b: datetime) -> bool:
    return top_of_hour(a) == top_of_hour(b)


def same_day(a: datetime, b: datetime) -> bool:
    return a.date() == b.date()


@dataclass(frozen=True)
class Window:
    """Reporting window. A missing bound does not clip on that side."""

    start: datetime | None = None
    stop: datetime | None = None

    def contains(self, t: datetime) -> bool:
        """True if t lies strictly between the bounds."""
        if self.start is not None and t <= self.start:
            return False
        if self.stop is not None and t >= self.stop:
            return False
        return True


def make_window(
    start: str | None = None,
    stop: str | None = None,
    day: str | None = None,
) -> Window | None:
    """Build the run-level window from command-line text.

    A single day expands to noon of that day until noon of the next, which
    covers one night of recording.

    Args:
        start: Window start (YYYY/MM/DD HH:MM:SS)
        stop: Window stop (YYYY/MM/DD HH:MM:SS)
        day: Night shorthand (YYYY/MM/DD), takes precedence over start/stop

    Returns:
        Window, or None when nothing was given

    Raises:
        WindowError: If only one of start/stop is given, or stop precedes start
        ParseError: If any bound cannot be parsed
    """
    if bool(start) != bool(stop):
        raise WindowError("You need both a start and an end date")

    if day:
        noon = datetime.combine(_parse(day, WINDOW_DATE_FORMAT, "date").date(), NEXT_DAY_CUTOFF)
        return Window(start=noon, stop=noon + timedelta(days=1))

    if not start:
        return None

    window = Window(start=parse_window_instant(start), stop=parse_window_instant(stop))
    if window.stop < window.start:
        raise WindowError("The end cannot precede the beginning")
    return window


def clip_start(session_start: datetime, window: Window | None) -> datetime:
    """Move a session start forward to the window start on the same day.

    A window start on a different day, or earlier than the session, never
    moves the session's natural start.
    """
    if window is None or window.start is None:
        return session_start
    if same_day(window.start, session_start) and window.start > session_start:
        return window.start
    return session_start


def clip_end(start: datetime, session_end: datetime, window: Window | None) -> datetime:
    """Pull a session end back to the window stop.

    The stop clips when it falls on the same day as start, or on the following
    day before noon. Later stops belong to another night and leave the session
    end alone.
    """
    if window is None or window.stop is None:
        return session_end

    next_day = start.date() + timedelta(days=1)
    stop = window.stop
    applies = stop.date() == start.date() or (
        stop.date() == next_day and stop < datetime.combine(next_day, NEXT_DAY_CUTOFF)
    )
    if applies and stop < session_end:
        return stop
    return session_end
