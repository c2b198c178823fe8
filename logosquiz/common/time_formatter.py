"""
Time formatting utilities.
Centralized functions for consistent duration display in API payloads.
"""
SECONDS_PER_MINUTE = 60


def format_time(seconds: int) -> str:
    """
    Format seconds as M:SS.

    Example:
        format_time(330) -> "5:30"
        format_time(65) -> "1:05"
    """
    seconds = int(seconds)
    mins, secs = divmod(seconds, SECONDS_PER_MINUTE)
    return f"{mins}:{secs:02d}"


def format_time_minutes_seconds(seconds: float) -> str:
    """
    Format seconds as "Xm Ys".

    Example:
        format_time_minutes_seconds(330) -> "5m 30s"
        format_time_minutes_seconds(45) -> "0m 45s"
    """
    mins = int(seconds // SECONDS_PER_MINUTE)
    secs = int(seconds % SECONDS_PER_MINUTE)
    return f"{mins}m {secs}s"


def format_duration(seconds: float) -> str:
    """Format a duration as "Xs" under a minute and "Xm Ys" otherwise."""
    if seconds < SECONDS_PER_MINUTE:
        return f"{int(seconds)}s"
    return format_time_minutes_seconds(seconds)
