"""Display helpers for the dashboard."""

from datetime import datetime, timezone
from typing import Optional

from ..core.constants import AnalyticsConstants
from ..core.rules import CATEGORY_ICONS, DEFAULT_ISSUE_ICON, ISSUE_ICONS


def format_category_name(name: str) -> str:
    if not name or name == AnalyticsConstants.NO_DATA:
        return "--"
    return f"{CATEGORY_ICONS.get(name, '')} {name[:1].upper()}{name[1:]}".strip()


def issue_icon(category: str) -> str:
    return ISSUE_ICONS.get(category, DEFAULT_ISSUE_ICON)


def format_time(iso_string: str, now: Optional[datetime] = None) -> str:
    """Relative age of an ISO timestamp: 'Just now', '5m ago', '3h ago' or the date."""
    try:
        stamp = datetime.fromisoformat(str(iso_string).replace("Z", "+00:00"))
    except ValueError:
        return str(iso_string)
    if stamp.tzinfo is None:
        stamp = stamp.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    seconds = (now - stamp).total_seconds()

    if seconds < 60:
        return "Just now"
    if seconds < 3600:
        return f"{int(seconds // 60)}m ago"
    if seconds < 86400:
        return f"{int(seconds // 3600)}h ago"
    return stamp.date().isoformat()
