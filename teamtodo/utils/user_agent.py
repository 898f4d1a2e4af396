"""Readable device info for the sessions list."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ParsedUserAgent:
    device_type: str  # desktop|mobile|tablet|unknown
    browser: str
    os: str
    display_name: str


def parse_user_agent(user_agent: str | None) -> ParsedUserAgent:
    """Best-effort browser / OS / device detection from a User-Agent header."""
    if not user_agent:
        return ParsedUserAgent("unknown", "Unknown", "Unknown", "Unknown Device")

    ua = user_agent.lower()

    # Edge UAs contain "chrome", Chrome UAs contain "safari"
    if "firefox" in ua:
        browser = "Firefox"
    elif "edg" in ua:
        browser = "Edge"
    elif "chrome" in ua:
        browser = "Chrome"
    elif "safari" in ua:
        browser = "Safari"
    else:
        browser = "Unknown"

    if "windows" in ua:
        os_name = "Windows"
    elif "android" in ua:
        os_name = "Android"
    elif "iphone" in ua or "ipad" in ua:
        os_name = "iOS"
    elif "mac" in ua:
        os_name = "macOS"
    elif "linux" in ua:
        os_name = "Linux"
    else:
        os_name = "Unknown"

    if "ipad" in ua or "tablet" in ua:
        device_type = "tablet"
    elif "mobile" in ua or "android" in ua or "iphone" in ua:
        device_type = "mobile"
    else:
        device_type = "desktop"

    return ParsedUserAgent(device_type, browser, os_name, f"{browser} on {os_name}")


def _plural(n: int, unit: str) -> str:
    return f"{n} {unit}{'' if n == 1 else 's'} ago"


def format_last_active(value: datetime | None, now: datetime) -> str:
    """Relative time such as '5 minutes ago'; dates older than a week as YYYY-MM-DD."""
    if value is None:
        return "Unknown"
    minutes = int((now - value).total_seconds() // 60)
    hours = minutes // 60
    days = hours // 24
    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return _plural(minutes, "minute")
    if hours < 24:
        return _plural(hours, "hour")
    if days < 7:
        return _plural(days, "day")
    return value.date().isoformat()
