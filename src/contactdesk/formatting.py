"""Summary: Display formatting helpers for message timestamps.

Importance: Renders chat-style relative labels in the list and detail panes.
Alternatives: Send raw ISO timestamps and format in the browser.
"""

from __future__ import annotations

from datetime import datetime, timedelta


def format_timestamp(timestamp: datetime | None, now: datetime) -> str:
    """Summary: Format a timestamp as "Today, HH:MM", "Yesterday, HH:MM", or a dated label.

    Importance: Matches how operators scan a chat-style inbox.
    Alternatives: Always show the full date and time.
    """

    if timestamp is None:
        return ""
    if now.tzinfo is not None and timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone(now.tzinfo)
    time_label = timestamp.strftime("%H:%M")
    day = timestamp.date()
    today = now.date()
    if day == today:
        return f"Today, {time_label}"
    if day == today - timedelta(days=1):
        return f"Yesterday, {time_label}"
    return f"{day.strftime('%d/%m/%Y')}, {time_label}"
