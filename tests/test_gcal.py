"""Tests for gigbook.gcal with the HTTP layer stubbed out."""

from datetime import datetime, timezone
from typing import Any

import pytest
import requests

from gigbook import gcal
from gigbook.domain.calendar import UNTITLED_EVENT


class FakeResponse:
    def __init__(self, status_code: int, payload: dict[str, Any] | None = None) -> None:
        self.status_code = status_code
        self._payload = payload or {}

    def json(self) -> dict[str, Any]:
        return self._payload

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


def test_month_bounds() -> None:
    assert gcal.month_bounds(2024, 2) == ("2024-02-01T00:00:00Z", "2024-02-29T23:59:59Z")
    assert gcal.month_bounds(2025, 12) == ("2025-12-01T00:00:00Z", "2025-12-31T23:59:59Z")


class TestParseEvents:
    """Tests for parse_events."""

    def test_timed_and_all_day_events(self) -> None:
        events = gcal.parse_events(
            [
                {
                    "id": "a",
                    "summary": "Gig",
                    "start": {"dateTime": "2025-01-17T20:00:00Z"},
                    "end": {"dateTime": "2025-01-17T23:00:00Z"},
                },
                {"id": "b", "summary": "Festival", "start": {"date": "2025-01-18"}, "end": {"date": "2025-01-19"}},
            ]
        )

        assert [e.id for e in events] == ["a", "b"]
        assert events[0].start == datetime(2025, 1, 17, 20, 0, tzinfo=timezone.utc)
        assert events[1].start.date().isoformat() == "2025-01-18"

    def test_missing_summary_is_untitled(self) -> None:
        events = gcal.parse_events([{"id": "a", "start": {"date": "2025-01-18"}}])
        assert events[0].title == UNTITLED_EVENT
        assert events[0].end == events[0].start

    def test_drops_items_without_id_or_start(self) -> None:
        assert gcal.parse_events([{"summary": "x", "start": {"date": "2025-01-18"}}, {"id": "b"}]) == []


class TestListEventsForMonth:
    """Tests for list_events_for_month."""

    def test_requests_month_window(self, monkeypatch: pytest.MonkeyPatch) -> None:
        calls: list[dict[str, Any]] = []

        def fake_get(url: str, **kwargs: Any) -> FakeResponse:
            calls.append({"url": url, **kwargs})
            return FakeResponse(200, {"items": [{"id": "a", "summary": "Gig", "start": {"date": "2025-03-02"}}]})

        monkeypatch.setattr(gcal.requests, "get", fake_get)

        events = gcal.list_events_for_month(2025, 3, "tok", "gigs")

        assert [e.id for e in events] == ["a"]
        assert calls[0]["url"] == f"{gcal.API_BASE_URL}/calendars/gigs/events"
        assert calls[0]["headers"]["Authorization"] == "Bearer tok"
        assert calls[0]["params"]["timeMin"] == "2025-03-01T00:00:00Z"
        assert calls[0]["params"]["timeMax"] == "2025-03-31T23:59:59Z"
        assert calls[0]["params"]["singleEvents"] == "true"

    @pytest.mark.parametrize("status_code", [401, 403])
    def test_rejected_token(self, monkeypatch: pytest.MonkeyPatch, status_code: int) -> None:
        monkeypatch.setattr(gcal.requests, "get", lambda url, **kwargs: FakeResponse(status_code))

        with pytest.raises(gcal.CalendarAuthError):
            gcal.list_events_for_month(2025, 3, "expired")

    def test_server_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(gcal.requests, "get", lambda url, **kwargs: FakeResponse(500))

        with pytest.raises(requests.HTTPError):
            gcal.list_events_for_month(2025, 3, "tok")


def test_get_token(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GOOGLE_CALENDAR_TOKEN", raising=False)
    assert gcal.get_token() is None
    monkeypatch.setenv("GOOGLE_CALENDAR_TOKEN", "abc")
    assert gcal.get_token() == "abc"
