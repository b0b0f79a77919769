"""Display helpers for dates, event times and event lines."""

from concertfindr.models import EventRecord

VENUE_FALLBACK = "Venue TBD"


def format_time_am_pm(time_str: str | None) -> str:
    """'19:30:00' -> '7:30 PM'. Unparseable input is returned unchanged."""
    if not time_str:
        return ""
    parts = time_str.split(":")
    if len(parts) < 2:
        return time_str
    try:
        hours24 = int(parts[0])
    except ValueError:
        return time_str

    ampm = "PM" if hours24 >= 12 else "AM"
    hours12 = hours24 % 12 or 12
    return f"{hours12}:{parts[1]} {ampm}"


def format_display_date(date_str: str | None) -> str:
    """'2025-06-01' -> '06/01/2025'."""
    if not date_str:
        return ""
    parts = date_str.split("-")
    if len(parts) == 3:
        return f"{parts[1]}/{parts[2]}/{parts[0]}"
    return date_str


def format_event_line(event: EventRecord) -> str:
    when = f"{format_display_date(event.start_local_date)} {format_time_am_pm(event.start_local_time)}".strip()
    venue = event.venue_name or VENUE_FALLBACK
    if event.venue_city:
        venue = f"{venue}, {event.venue_city}"
    return f"{when} - {event.name} @ {venue}"
