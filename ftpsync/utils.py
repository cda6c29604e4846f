"""Utility functions for ftpsync."""

from datetime import datetime, timezone
from typing import Optional

# =============================================================================
# Constants
# =============================================================================

# Default FTP control port
DEFAULT_FTP_PORT: int = 21

# Default browser-sync server that receives reload notifications
DEFAULT_RELOAD_URL: str = "http://localhost:3000"

_MONTHS = {
    name: index
    for index, name in enumerate(
        [
            "jan",
            "feb",
            "mar",
            "apr",
            "may",
            "jun",
            "jul",
            "aug",
            "sep",
            "oct",
            "nov",
            "dec",
        ],
        start=1,
    )
}


# =============================================================================
# Timestamp parsing utilities
# =============================================================================


def parse_mlsd_timestamp(value: Optional[str]) -> int:
    """Parse an MLSD ``modify`` fact into epoch milliseconds.

    Args:
        value: Timestamp in ``YYYYMMDDHHMMSS[.sss]`` format (always UTC)

    Returns:
        Milliseconds since the epoch, or 0 if the value is missing or malformed

    Examples:
        >>> parse_mlsd_timestamp("19700101000001")
        1000
        >>> parse_mlsd_timestamp("19700101000001.250")
        1250
        >>> parse_mlsd_timestamp(None)
        0
    """
    if not value:
        return 0

    base, _, fraction = value.partition(".")
    try:
        dt = datetime.strptime(base[:14], "%Y%m%d%H%M%S").replace(tzinfo=timezone.utc)
    except ValueError:
        return 0

    millis = int(dt.timestamp()) * 1000
    if fraction.isdigit():
        millis += int(fraction[:3].ljust(3, "0"))
    return millis


def parse_list_timestamp(
    month: str, day: str, year_or_time: str, now: Optional[datetime] = None
) -> int:
    """Parse the date columns of a unix ``LIST`` line into epoch milliseconds.

    Unix servers print ``Oct 18 07:22`` for recent files and ``Oct 18 2023``
    for older ones. Recent dates lacking a year are placed in the current year,
    or the previous one if that would put them in the future.

    Args:
        month: Abbreviated month name
        day: Day of month
        year_or_time: Either a four digit year or ``HH:MM``
        now: Reference time (defaults to the current UTC time)

    Returns:
        Milliseconds since the epoch, or 0 if the columns cannot be parsed
    """
    month_index = _MONTHS.get(month[:3].lower())
    if month_index is None or not day.isdigit():
        return 0

    now = now or datetime.now(timezone.utc)
    try:
        if ":" in year_or_time:
            hour, minute = (int(part) for part in year_or_time.split(":", 1))
            dt = datetime(now.year, month_index, int(day), hour, minute, tzinfo=timezone.utc)
            if (dt - now).days > 1:
                dt = dt.replace(year=now.year - 1)
        else:
            dt = datetime(int(year_or_time), month_index, int(day), tzinfo=timezone.utc)
    except ValueError:
        return 0

    return int(dt.timestamp()) * 1000


# =============================================================================
# Size formatting utilities
# =============================================================================


def format_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string (e.g., "1.5 MB", "256 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / 1024 / 1024:.1f} MB"
    else:
        return f"{size_bytes / 1024 / 1024 / 1024:.1f} GB"
