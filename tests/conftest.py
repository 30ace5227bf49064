"""Shared pytest fixtures for nightlist tests."""

from datetime import date, time, timedelta

import pytest

from nightlist.clock import parse_date, parse_duration, parse_instant, parse_time
from nightlist.sessions import DetectionEvent, RecordingSession

VESPER_HEADER = (
    "season,year,detector,species,site,date,recording_start,recording_length,"
    "detection_time,real_detection_time,rounded_to_half_hour\n"
)


@pytest.fixture
def tmp_config_dir(tmp_path):
    """Create temporary ~/.nightlist/ directory."""
    config_dir = tmp_path / ".nightlist"
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def sample_config():
    """Sample valid settings dict."""
    return {
        "species": {
            "AMRE": {
                "text": "A high, buzzy zeep with a slight downward inflection.",
                "example": "https://ebird.org/checklist/S00000001",
            },
            "CAWA": {
                "text": "Not written yet.",
                "example": "",
                "WIP": True,
            },
        },
        "stations": {
            "NBNC": {
                "Location Name": "North Branch Nature Center",
                "Latitude": 44.2742,
                "Longitude": -72.5633,
                "State": "VT",
                "Kit": "Recorded with an Old World Wildlife microphone.",
            },
        },
        "slashCodes": {
            "AMRE/BAWW": "American Redstart/Black-and-white Warbler",
        },
    }


@pytest.fixture
def sample_session():
    """Overnight session from 09/08/20 20:43:00 until 09/09/20 05:04:00."""
    return RecordingSession(
        date=date(2020, 9, 8),
        recording_start=time(20, 43),
        recording_length=timedelta(hours=8, minutes=21),
    )


@pytest.fixture
def make_event():
    """Factory for detection events, defaulting to the sample session."""

    def _make(
        detected="09/08/20 20:43:37",
        species="",
        session_date="09/08/20",
        recording_start="20:43:00",
        recording_length="8:21:00",
    ):
        return DetectionEvent(
            species=species,
            detection_instant=parse_instant(detected),
            date=parse_date(session_date),
            recording_start=parse_time(recording_start),
            recording_length=parse_duration(recording_length),
        )

    return _make


@pytest.fixture
def write_vesper_csv(tmp_path):
    """Factory writing a Vesper export from data rows."""

    def _write(rows, name="detections.csv"):
        csv_path = tmp_path / name
        csv_path.write_text(VESPER_HEADER + "".join(row + "\n" for row in rows))
        return csv_path

    return _write


@pytest.fixture
def sample_vesper_csv(write_vesper_csv):
    """Create sample Vesper export with a trailing blank-season row."""
    return write_vesper_csv([
        "Fall,2020,tseep,,MSGR,09/08/20,20:43:00,8:21:00,0:00:37,09/08/20 20:43:37,20:30:00",
        "Fall,2020,tseep,AMRE,MSGR,09/08/20,20:43:00,8:21:00,0:10:00,09/08/20 20:53:00,21:00:00",
        "Fall,2020,tseep,AMRE,MSGR,09/08/20,20:43:00,8:21:00,0:10:10,09/08/20 20:53:10,21:00:00",
        "Fall,2020,thrush,SWTH,MSGR,09/08/20,20:43:00,8:21:00,4:30:00,09/09/20 01:13:00,01:00:00",
        "Fall,2020,tseep,nowa,MSGR,09/08/20,20:43:00,8:21:00,8:00:00,09/09/20 04:43:00,04:30:00",
        ",,,,,,,,,,",
    ])
