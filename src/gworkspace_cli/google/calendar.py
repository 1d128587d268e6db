"""Google Calendar client for listing and managing events."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from gworkspace_cli.core.models import CalendarSummary, EventSummary

from .base import GoogleApiClient, TokenSource, path_segment

logger = logging.getLogger(__name__)


class GoogleCalendarClient(GoogleApiClient):
    """Client for interacting with Google Calendar API using OAuth 2.0."""

    API_BASE = "https://www.googleapis.com/calendar/v3"

    def __init__(
        self,
        tokens: TokenSource,
        *,
        time_zone: str = "UTC",
        timeout: float = 30.0,
    ) -> None:
        """Initialize the calendar client with a token source and zone."""
        super().__init__(tokens, timeout=timeout)
        self._time_zone = time_zone

    async def list_calendars(self) -> list[CalendarSummary]:
        """List all calendars available to the user."""
        data = await self._get_json("/users/me/calendarList")
        calendars = [
            CalendarSummary(
                id=item["id"],
                summary=item.get("summary", ""),
                description=item.get("description"),
                primary=item.get("primary"),
                background_color=item.get("backgroundColor"),
            )
            for item in data.get("items", [])
        ]
        logger.info("Retrieved %d calendars", len(calendars))
        return calendars

    async def list_events(
        self,
        calendar_id: str = "primary",
        max_results: int = 10,
        time_min: str | None = None,
        time_max: str | None = None,
    ) -> list[EventSummary]:
        """List upcoming single events ordered by start time."""
        params: dict[str, Any] = {
            "maxResults": max_results,
            "singleEvents": "true",
            "orderBy": "startTime",
            "timeMin": time_min or datetime.now(tz=UTC).isoformat(),
        }
        if time_max:
            params["timeMax"] = time_max
        data = await self._get_json(f"/calendars/{path_segment(calendar_id)}/events", **params)
        return [_to_event(item) for item in data.get("items", [])]

    async def get_event(self, event_id: str, calendar_id: str = "primary") -> EventSummary:
        """Retrieve a calendar event by ID."""
        logger.debug("Fetching calendar event %s from calendar %s", event_id, calendar_id)
        data = await self._get_json(
            f"/calendars/{path_segment(calendar_id)}/events/{path_segment(event_id)}"
        )
        return _to_event(data)

    # pylint: disable=too-many-arguments
    async def create_event(
        self,
        summary: str,
        start: str,
        end: str,
        *,
        calendar_id: str = "primary",
        description: str | None = None,
        location: str | None = None,
        attendees: list[str] | None = None,
    ) -> EventSummary:
        """Create an event; values without a time part become all-day dates."""
        event_body: dict[str, Any] = {
            "summary": summary,
            "start": self._event_time(start),
            "end": self._event_time(end),
        }
        if description:
            event_body["description"] = description
        if location:
            event_body["location"] = location
        if attendees:
            event_body["attendees"] = [{"email": email} for email in attendees]

        logger.debug("Event body: %s", event_body)
        response = await self._request(
            "POST", f"/calendars/{path_segment(calendar_id)}/events", json_body=event_body
        )
        event = response.json()
        logger.info(
            "Created calendar event: %s (ID: %s)",
            event.get("summary"),
            event.get("id"),
        )
        return _to_event(event)

    async def delete_event(self, event_id: str, calendar_id: str = "primary") -> None:
        """Delete a calendar event."""
        await self._request(
            "DELETE", f"/calendars/{path_segment(calendar_id)}/events/{path_segment(event_id)}"
        )
        logger.info("Deleted calendar event %s", event_id)

    def _event_time(self, value: str) -> dict[str, str]:
        if "T" in value:
            return {"dateTime": value, "timeZone": self._time_zone}
        return {"date": value}


def _to_event(item: dict[str, Any]) -> EventSummary:
    start = item.get("start", {})
    end = item.get("end", {})
    return EventSummary(
        id=item.get("id", ""),
        summary=item.get("summary") or "(No title)",
        start=start.get("dateTime") or start.get("date") or "",
        end=end.get("dateTime") or end.get("date") or "",
        description=item.get("description"),
        location=item.get("location"),
        attendees=[a["email"] for a in item.get("attendees", []) if a.get("email")],
        html_link=item.get("htmlLink"),
    )


__all__ = ["GoogleCalendarClient"]
