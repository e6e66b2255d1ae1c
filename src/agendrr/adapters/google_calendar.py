"""Google Calendar API adapter."""

import logging
from datetime import date, datetime, time, timedelta
from pathlib import Path
from zoneinfo import ZoneInfo

from agendrr.config import Config
from agendrr.core.event import Event, NO_COLOR

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/calendar.readonly"]


class CalendarError(RuntimeError):
    """Raised when events cannot be fetched from the calendar."""


class GoogleCalendarAdapter:
    """Fetches events from Google Calendar via the API.

    Implements the CalendarRepository protocol.
    """

    def __init__(self, config: Config):
        self.config = config
        self.calendar_id = config.calendar_id
        self.client_secret_file = config.google_client_secret_file
        self.tz = ZoneInfo(config.timezone)
        self.token_path = Path(config.token_file).expanduser()

    def _get_credentials(self):
        """Load credentials from the token file, refreshing if needed."""
        from google.auth.exceptions import RefreshError
        from google.auth.transport.requests import Request
        from google.oauth2.credentials import Credentials

        if not self.token_path.exists():
            raise CalendarError(f"No token at {self.token_path} - run 'agendrr auth'")

        creds = Credentials.from_authorized_user_file(str(self.token_path), SCOPES)

        if creds.expired and creds.refresh_token:
            try:
                creds.refresh(Request())
            except RefreshError as e:
                raise CalendarError(f"Failed to refresh token: {e} - run 'agendrr auth'") from e
            self.token_path.write_text(creds.to_json())
            self.token_path.chmod(0o600)
            logger.debug(f"Refreshed token at {self.token_path}")

        return creds

    def _build_service(self):
        """Build a Google Calendar API service."""
        from googleapiclient.discovery import build

        return build("calendar", "v3", credentials=self._get_credentials())

    def authenticate(self) -> bool:
        """Run the OAuth flow and store the token. Returns True on success."""
        from google_auth_oauthlib.flow import InstalledAppFlow

        secret_path = Path(self.client_secret_file).expanduser()
        if not secret_path.exists():
            logger.error(f"Client secret file not found: {secret_path}")
            return False

        flow = InstalledAppFlow.from_client_secrets_file(str(secret_path), SCOPES)
        creds = flow.run_local_server(port=0)

        self.token_path.parent.mkdir(parents=True, exist_ok=True)
        self.token_path.write_text(creds.to_json())
        self.token_path.chmod(0o600)
        return True

    def fetch_day(self, target_date: date) -> list[Event]:
        """Fetch events for a specific date.

        Raises:
            CalendarError: If the calendar cannot be reached.
        """
        from googleapiclient.errors import HttpError

        try:
            items = self._fetch_day_api(target_date)
        except HttpError as e:
            raise CalendarError(f"Google Calendar API error for {self.calendar_id}: {e}") from e

        events = [e for e in (self._build_event(item) for item in items) if e is not None]
        logger.debug(f"Fetched {len(events)} events for {target_date.isoformat()}")
        return events

    def _fetch_day_api(self, target_date: date) -> list[dict]:
        service = self._build_service()

        time_min = datetime.combine(target_date, time.min, tzinfo=self.tz)
        time_max = time_min + timedelta(days=1)

        items = []
        page_token = None
        while True:
            result = (
                service.events()
                .list(
                    calendarId=self.calendar_id,
                    timeMin=time_min.isoformat(),
                    timeMax=time_max.isoformat(),
                    singleEvents=True,
                    orderBy="startTime",
                    eventTypes="default",
                    timeZone=self.config.timezone,
                    pageToken=page_token,
                )
                .execute()
            )
            items.extend(result.get("items", []))
            page_token = result.get("nextPageToken")
            if not page_token:
                return items

    def _build_event(self, item: dict) -> Event | None:
        """Map a Google Calendar API event onto an agenda Event."""
        start_raw = item.get("start", {})
        if "dateTime" in start_raw:
            start = datetime.fromisoformat(start_raw["dateTime"]).astimezone(self.tz)
        elif "date" in start_raw:
            # All-day event
            start = datetime.combine(date.fromisoformat(start_raw["date"]), time.min, tzinfo=self.tz)
        else:
            logger.debug(f"Skipping event with no start: {item.get('id')}")
            return None

        return Event.build(
            start_time=start,
            name=item.get("summary", ""),
            description=item.get("description", ""),
            color=item.get("colorId", NO_COLOR),
            attendees=[a.get("email", "") for a in item.get("attendees", [])],
            user_email=self.config.user_email,
            strip_suffixes=self.config.strip_event_suffixes,
        )
