"""
Calendar events derived from applications and their status history.

``extract_events`` is pure and never raises on malformed notes or dates:
an unparseable contribution is skipped. ``events_to_ics`` renders the
result as an iCalendar feed.
"""

import logging
import re
from datetime import datetime, timedelta
from urllib.parse import quote

from icalendar import Alarm, Calendar, Event

from jobtracker.schemas.calendar import CalendarEvent
from jobtracker.services.status_catalog import INTERVIEW_STATUSES, status_label
from jobtracker.utils.dates import parse_timestamp

logger = logging.getLogger(__name__)

# "Phone Screen Date & Time: 2024-01-15T10:00"
NOTE_DATE_RE = re.compile(r":\s*(\d{4}-\d{2}-\d{2}(?:T\d{2}:\d{2})?)")

GOOGLE_CALENDAR_BASE = "https://calendar.google.com/calendar/render?action=TEMPLATE"


def _event(app, when: datetime, all_day: bool, title: str, event_type: str, status: str | None) -> CalendarEvent:
    return CalendarEvent(
        application_id=app.id,
        company=app.company_name or "",
        date=when,
        all_day=all_day,
        title=title,
        type=event_type,
        status=status,
    )


def _is_all_day(raw) -> bool:
    return isinstance(raw, str) and len(raw.strip()) == 10


def _history_events(app) -> list[CalendarEvent]:
    events = []
    for entry in app.status_history or []:
        if not entry.notes:
            continue
        match = NOTE_DATE_RE.search(entry.notes)
        if not match:
            continue
        raw = match.group(1)
        when = parse_timestamp(raw)
        if when is None:
            logger.debug("Skipping unparseable history date %r on %s", raw, app.id)
            continue
        event_type = "deadline" if "deadline" in entry.notes.lower() else "interview"
        events.append(
            _event(
                app, when, "T" not in raw,
                f"{status_label(entry.to_status)}: {app.job_title}",
                event_type, entry.to_status,
            )
        )
    return events


def _has_dated_entry(app, status: str) -> bool:
    return any(
        entry.to_status == status and entry.notes and NOTE_DATE_RE.search(entry.notes)
        for entry in app.status_history or []
    )


def extract_events(applications) -> list[CalendarEvent]:
    events: list[CalendarEvent] = []
    for app in applications:
        applied = parse_timestamp(app.date_applied)
        if applied is not None:
            events.append(
                _event(app, applied, _is_all_day(app.date_applied), f"Applied: {app.job_title}", "applied", app.status)
            )

        follow_up = parse_timestamp(app.follow_up_date)
        if follow_up is not None:
            events.append(
                _event(
                    app, follow_up, _is_all_day(app.follow_up_date),
                    f"Follow-up: {app.job_title}", "follow_up", app.status,
                )
            )

        events.extend(_history_events(app))

        # Interview stage reached without a recorded date
        if app.status in INTERVIEW_STATUSES and not _has_dated_entry(app, app.status):
            added = parse_timestamp(app.date_added)
            if added is not None:
                events.append(
                    _event(
                        app, added, False,
                        f"{status_label(app.status)}: {app.job_title}",
                        "interview", app.status,
                    )
                )
    return events


def google_calendar_url(event: CalendarEvent) -> str:
    start = event.date
    if event.all_day:
        dates = f"{start:%Y%m%d}/{start + timedelta(days=1):%Y%m%d}"
    else:
        end = start + timedelta(hours=1)
        dates = f"{start:%Y%m%dT%H%M%S}/{end:%Y%m%dT%H%M%S}"
    details = f"Company: {event.company}\nManaged via Job Application Tracker"
    return f"{GOOGLE_CALENDAR_BASE}&text={quote(event.title)}&dates={dates}&details={quote(details)}"


def events_to_ics(events: list[CalendarEvent]) -> bytes:
    cal = Calendar()
    cal.add("prodid", "-//JobTracker//EN")
    cal.add("version", "2.0")

    for index, item in enumerate(events):
        event = Event()
        event.add("uid", f"{item.application_id}-{item.type}-{index}@jobtracker")
        summary = item.title
        if item.company:
            summary += f" at {item.company}"
        event.add("summary", summary)
        if item.all_day:
            event.add("dtstart", item.date.date())
            event.add("dtend", item.date.date() + timedelta(days=1))
        else:
            event.add("dtstart", item.date)
            event.add("dtend", item.date + timedelta(hours=1))
        event.add("categories", [item.type])

        # Reminders: day before and an hour before
        if item.type in ("interview", "deadline"):
            for delta in [timedelta(days=1), timedelta(hours=1)]:
                alarm = Alarm()
                alarm.add("action", "DISPLAY")
                alarm.add("trigger", -delta)
                alarm.add("description", f"Reminder: {item.title}")
                event.add_component(alarm)

        cal.add_component(event)
    return cal.to_ical()
