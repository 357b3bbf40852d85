"""
iCalendar feed rendering
"""

from datetime import datetime, timedelta
from typing import Iterable, List

from churchflow.core.clock import utcnow
from churchflow.models import Church, Event

DEFAULT_DURATION = timedelta(hours=1)


def format_ical_date(value: datetime) -> str:
    """Render a naive UTC datetime as ``YYYYMMDDTHHMMSSZ``"""
    return value.strftime("%Y%m%dT%H%M%SZ")


def escape_ical_text(text: str) -> str:
    return (
        text.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\r", "")
        .replace("\n", "\\n")
    )


def render_event(event: Event, stamp: datetime) -> List[str]:
    end = event.end_date or event.start_date + DEFAULT_DURATION
    lines = [
        "BEGIN:VEVENT",
        f"UID:{event.id}@churchflow.app",
        f"DTSTAMP:{format_ical_date(stamp)}",
        f"DTSTART:{format_ical_date(event.start_date)}",
        f"DTEND:{format_ical_date(end)}",
        f"SUMMARY:{escape_ical_text(event.title)}",
        f"CREATED:{format_ical_date(event.created_at)}",
        f"LAST-MODIFIED:{format_ical_date(event.updated_at or event.created_at)}",
    ]
    if event.description:
        lines.append(f"DESCRIPTION:{escape_ical_text(event.description)}")
    if event.location:
        lines.append(f"LOCATION:{escape_ical_text(event.location)}")
    lines.append("END:VEVENT")
    return lines


def render_calendar(church: Church, events: Iterable[Event]) -> str:
    """Build a VCALENDAR document with CRLF line endings"""
    stamp = utcnow()
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:-//ChurchFlow//{escape_ical_text(church.name)}//EN",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
        f"X-WR-CALNAME:{escape_ical_text(church.name)} Events",
        f"X-WR-TIMEZONE:{church.timezone or 'America/New_York'}",
    ]
    for event in events:
        lines.extend(render_event(event, stamp))
    lines.append("END:VCALENDAR")
    return "\r\n".join(lines)
