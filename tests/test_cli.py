"""Tests for the agendrr CLI."""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch
from zoneinfo import ZoneInfo

import pytest
from click.testing import CliRunner

from agendrr.adapters.google_calendar import CalendarError
from agendrr.cli import main
from agendrr.core.event import Event


@pytest.fixture
def config_file(tmp_path):
    notes = tmp_path / "notes"
    notes.mkdir()
    (notes / "Team Sync.md").write_text("")

    path = tmp_path / "agendrr.conf"
    path.write_text(
        "USER_EMAIL=jon.seager@example.com\n"
        "USER_PREFERRED_NAME=Jon\n"
        f"REGULAR_NOTE_GLOB={notes}/*.md\n"
        "IGNORED_COLOURS=8\n"
    )
    return path


def make_event(name: str, hour: int, color: str = "none") -> Event:
    return Event(start_time=datetime(2024, 12, 5, hour, 0, tzinfo=timezone.utc), name=name, color=color)


class TestAgendaCommand:
    @patch("agendrr.cli.GoogleCalendarAdapter")
    def test_prints_agenda(self, mock_adapter, config_file):
        mock_adapter.return_value.fetch_day.return_value = [
            make_event("Team Sync", 9),
            make_event("Hidden", 10, color="8"),
            make_event("Lunch", 12),
        ]

        result = CliRunner().invoke(main, ["agenda", "-c", str(config_file)])

        assert result.exit_code == 0
        assert result.output == (
            "- **0900**: [[Team Sync#2024-12-05|Team Sync]]\n"
            "- **1200**: Lunch\n"
        )

    @patch("agendrr.cli.GoogleCalendarAdapter")
    def test_offset(self, mock_adapter, config_file):
        mock_adapter.return_value.fetch_day.return_value = []

        result = CliRunner().invoke(main, ["agenda", "-c", str(config_file), "--offset=-1"])

        assert result.exit_code == 0
        mock_adapter.return_value.fetch_day.assert_called_once_with(
            datetime.now(ZoneInfo("Europe/London")).date() - timedelta(days=1)
        )

    @patch("agendrr.cli.GoogleCalendarAdapter")
    def test_today_in_configured_timezone(self, mock_adapter, config_file):
        config_file.write_text(config_file.read_text() + "TIMEZONE=Pacific/Kiritimati\n")
        mock_adapter.return_value.fetch_day.return_value = []

        result = CliRunner().invoke(main, ["agenda", "-c", str(config_file)])

        assert result.exit_code == 0
        mock_adapter.return_value.fetch_day.assert_called_once_with(
            datetime.now(ZoneInfo("Pacific/Kiritimati")).date()
        )

    @patch("agendrr.cli.GoogleCalendarAdapter")
    def test_empty_agenda(self, mock_adapter, config_file):
        mock_adapter.return_value.fetch_day.return_value = []

        result = CliRunner().invoke(main, ["agenda", "-c", str(config_file)])

        assert result.exit_code == 0
        assert result.output == ""

    @patch("agendrr.cli.GoogleCalendarAdapter")
    def test_config_error_before_fetch(self, mock_adapter, config_file):
        config_file.write_text(config_file.read_text() + "IGNORED_REGEX=(unclosed\n")

        result = CliRunner().invoke(main, ["agenda", "-c", str(config_file)])

        assert result.exit_code == 1
        assert "Error:" in result.output
        mock_adapter.assert_not_called()

    @patch("agendrr.cli.GoogleCalendarAdapter")
    def test_malformed_note_glob_before_fetch(self, mock_adapter, config_file, tmp_path):
        config_file.write_text(config_file.read_text() + f"REGULAR_NOTE_GLOB={tmp_path}/[unclosed/*.md\n")

        result = CliRunner().invoke(main, ["agenda", "-c", str(config_file)])

        assert result.exit_code == 1
        assert "invalid regular note glob" in result.output
        mock_adapter.assert_not_called()

    @patch("agendrr.cli.GoogleCalendarAdapter")
    def test_missing_config_file(self, mock_adapter, tmp_path):
        result = CliRunner().invoke(main, ["agenda", "-c", str(tmp_path / "nope.conf")])

        assert result.exit_code == 1
        assert "does not exist" in result.output
        mock_adapter.assert_not_called()

    @patch("agendrr.cli.GoogleCalendarAdapter")
    def test_calendar_error(self, mock_adapter, config_file):
        mock_adapter.return_value.fetch_day.side_effect = CalendarError("API unavailable")

        result = CliRunner().invoke(main, ["agenda", "-c", str(config_file)])

        assert result.exit_code == 1
        assert "Error: API unavailable" in result.output


class TestAuthCommand:
    @patch("agendrr.cli.GoogleCalendarAdapter")
    def test_auth_failure(self, mock_adapter, config_file):
        mock_adapter.return_value.authenticate.return_value = False

        result = CliRunner().invoke(main, ["auth", "-c", str(config_file)])

        assert result.exit_code == 1
        assert "Authentication failed" in result.output
