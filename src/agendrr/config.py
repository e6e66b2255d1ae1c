"""Configuration management for agendrr."""

import json
import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

AGENDRR_HOME = Path(os.environ.get("AGENDRR_HOME", Path.home() / ".config" / "agendrr"))
CONFIG_FILE = AGENDRR_HOME / "agendrr.conf"
TOKEN_FILE = AGENDRR_HOME / "token.json"

# Local part allows the RFC 5322 atext characters, plus dots between them.
EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9!#$%&'*+/=?^_`{|}~.-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")


class ConfigError(ValueError):
    """Raised when the configuration cannot be used to build an agenda."""


def is_valid_email(address: str) -> bool:
    """Check that an address is a plausible user@domain.tld email."""
    if not EMAIL_PATTERN.match(address):
        return False
    local = address.partition("@")[0]
    return ".." not in address and not local.startswith(".") and not local.endswith(".")


@dataclass
class Config:
    """agendrr configuration."""

    calendar_id: str = "primary"
    user_email: str = ""
    user_preferred_name: str = ""
    # Glob matching the "regular meeting" notes on the filesystem
    regular_note_glob: str = ""
    strip_event_suffixes: list[str] = field(default_factory=list)
    ignored_colours: list[str] = field(default_factory=list)
    ignored_regex: list[str] = field(default_factory=list)
    # Event name -> note name, for events whose names don't match their notes
    mapped_filenames: dict[str, str] = field(default_factory=dict)
    calendly_partner_name: str = "Jon Seager"
    timezone: str = "Europe/London"
    google_client_secret_file: str = "credentials.json"
    token_file: str = str(TOKEN_FILE)

    @property
    def user_domain(self) -> str:
        return self.user_email.rpartition("@")[2]

    @property
    def ignored_patterns(self) -> list[re.Pattern]:
        """Compile the ignored name patterns, failing on the first bad one."""
        patterns = []
        for raw in self.ignored_regex:
            try:
                patterns.append(re.compile(raw))
            except re.error as e:
                raise ConfigError(f"invalid ignored_regex pattern {raw!r}: {e}") from e
        return patterns

    def validate(self) -> None:
        """Check the configuration before any events are processed."""
        if not self.user_email:
            raise ConfigError("USER_EMAIL is not set")
        if not is_valid_email(self.user_email):
            raise ConfigError(f"USER_EMAIL is not a valid email address: {self.user_email!r}")
        if not self.user_preferred_name:
            raise ConfigError("USER_PREFERRED_NAME is not set")
        if not self.calendar_id:
            raise ConfigError("CALENDAR_ID is not set")
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ConfigError(f"unknown timezone: {self.timezone!r}") from e
        _ = self.ignored_patterns


def _parse_json(key: str, value: str):
    try:
        return json.loads(value)
    except json.JSONDecodeError as e:
        raise ConfigError(f"failed to parse {key.upper()} as JSON: {e}") from e


def _parse_list(key: str, value: str) -> list[str]:
    """Parse a JSON array, or a simple comma-separated list."""
    if value.startswith("["):
        data = _parse_json(key, value)
        if not isinstance(data, list):
            raise ConfigError(f"{key.upper()} must be a JSON array")
        return [str(item) for item in data]
    return [item.strip() for item in value.split(",") if item.strip()]


def load_config(path: Path | str | None = None) -> Config:
    """Load configuration from an agendrr.conf file.

    An explicitly given path must exist; the default location is optional.
    """
    config = Config()

    if path is None:
        config_file = CONFIG_FILE
        if not config_file.exists():
            logger.debug(f"No config file at {config_file}, using defaults")
            return config
    else:
        config_file = Path(path).expanduser()
        if not config_file.exists():
            raise ConfigError(f"config file does not exist: {config_file}")

    for line in config_file.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = value.strip()

        # Handle quoted values with inline comments: "value" # comment
        if value.startswith('"'):
            end_quote = value.find('"', 1)
            if end_quote != -1:
                value = value[1:end_quote]
            else:
                value = value[1:]
        elif value.startswith("'"):
            end_quote = value.find("'", 1)
            if end_quote != -1:
                value = value[1:end_quote]
            else:
                value = value[1:]
        else:
            # Unquoted: strip inline comments
            if "#" in value:
                value = value.split("#")[0].strip()

        match key:
            case "calendar_id":
                config.calendar_id = value
            case "user_email":
                config.user_email = value
            case "user_preferred_name":
                config.user_preferred_name = value
            case "regular_note_glob":
                config.regular_note_glob = value
            case "strip_event_suffixes":
                # Suffixes usually carry meaningful leading spaces
                if value.startswith("["):
                    config.strip_event_suffixes = _parse_list(key, value)
                else:
                    config.strip_event_suffixes = [s for s in value.split(",") if s]
            case "ignored_colours" | "ignored_colors":
                config.ignored_colours = _parse_list(key, value)
            case "ignored_regex":
                config.ignored_regex = _parse_list(key, value)
            case "mapped_filenames":
                data = _parse_json(key, value)
                if not isinstance(data, dict):
                    raise ConfigError("MAPPED_FILENAMES must be a JSON object")
                config.mapped_filenames = {str(k): str(v) for k, v in data.items()}
            case "calendly_partner_name":
                config.calendly_partner_name = value
            case "timezone":
                config.timezone = value
            case "google_client_secret_file":
                config.google_client_secret_file = value
            case "token_file":
                config.token_file = value
            case _:
                logger.warning(f"Ignoring unknown config key: {key.upper()}")

    return config
