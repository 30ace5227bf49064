"""Settings loading for checklist export.

The settings file is found via NIGHTLIST_SETTINGS, then --config, then
~/.nightlist/settings.json. It holds three tables:

    {
      "species": {"AMRE": {"text": "...", "example": "https://...", "WIP": false}},
      "stations": {"NBNC": {"Location Name": "...", "Latitude": 44.0,
                            "Longitude": -73.0, "State": "VT", "Kit": "..."}},
      "slashCodes": {"AMRE/BAWW": "American Redstart/Black-and-white Warbler"},
      "codes_file": "~/path/to/codes.json"
    }
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


CONFIG_PATH = Path.home() / ".nightlist" / "settings.json"
SETTINGS_ENV_VAR = "NIGHTLIST_SETTINGS"

DEFAULT_STATION = "NBNC"

# Default species code table bundled with package
DEFAULT_CODES_FILE = Path(__file__).parent / "data" / "nfc_codes.json"


@dataclass
class StationConfig:
    """A recording station as it appears on a checklist."""

    location_name: str
    latitude: float | str
    longitude: float | str
    state: str
    kit: str = ""
    country: str = "US"


@dataclass
class ChecklistSettings:
    """Tables used to fill in checklist rows."""

    species_comments: dict[str, dict[str, Any]] = field(default_factory=dict)
    stations: dict[str, StationConfig] = field(default_factory=dict)
    slash_codes: dict[str, str] = field(default_factory=dict)
    codes_file: Path | None = None

    def get_station(self, code: str) -> StationConfig:
        """Look up a station by code.

        Raises:
            KeyError: If the station is not configured
        """
        try:
            return self.stations[code]
        except KeyError:
            known = ", ".join(sorted(self.stations)) or "none"
            raise KeyError(f"Unknown station {code!r} (configured: {known})") from None

    def get_codes_file(self) -> Path:
        """Get species code table path, falling back to bundled default."""
        if self.codes_file and Path(self.codes_file).exists():
            return Path(self.codes_file)
        return DEFAULT_CODES_FILE

    def load_codes(self) -> dict[str, str]:
        """Load the species code to common name table."""
        with open(self.get_codes_file()) as f:
            return {code.upper(): name for code, name in json.load(f).items()}


def resolve_config_path(cli_path: Path | None = None) -> Path:
    """Pick the settings file: environment, then command line, then default."""
    env_path = os.environ.get(SETTINGS_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    if cli_path:
        return Path(cli_path).expanduser()
    return CONFIG_PATH


def load_config(path: Path | None = None) -> dict[str, Any]:
    """Load settings JSON.

    Returns empty dict if file doesn't exist or is invalid.
    """
    path = path or CONFIG_PATH
    if not path.exists():
        return {}

    try:
        with open(path) as f:
            return json.load(f)
    except (json.JSONDecodeError, OSError):
        return {}


def get_checklist_settings(path: Path | None = None) -> ChecklistSettings:
    """Parse checklist settings.

    Returns defaults for any table that is not configured.
    """
    config = load_config(path)

    stations = {}
    for code, station in config.get("stations", {}).items():
        stations[code] = StationConfig(
            location_name=station.get("Location Name", ""),
            latitude=station.get("Latitude", ""),
            longitude=station.get("Longitude", ""),
            state=station.get("State", ""),
            kit=station.get("Kit", ""),
            country=station.get("Country Code", "US"),
        )

    codes_file = None
    if config.get("codes_file"):
        codes_file = Path(config["codes_file"]).expanduser()

    return ChecklistSettings(
        species_comments={k.upper(): v for k, v in config.get("species", {}).items()},
        stations=stations,
        slash_codes=dict(config.get("slashCodes", {})),
        codes_file=codes_file,
    )
