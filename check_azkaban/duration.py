"""Elapsed-time formatting for check output."""


def format_duration(millis: int) -> str:
    """Format a number of milliseconds as ``HH:MM:SS.mmm``.

    Hours are zero-padded to two digits but are not capped, so durations of
    100 hours or more produce a wider hour field (e.g. ``123:45:43.210``).

    Args:
        millis: Elapsed time in milliseconds

    Returns:
        Formatted duration string

    Raises:
        ValueError: If millis is negative
    """
    if millis < 0:
        raise ValueError(f"Duration cannot be negative: {millis}")

    total_seconds = millis // 1000
    total_minutes = total_seconds // 60
    hours = total_minutes // 60
    return (
        f"{hours:02d}:{total_minutes % 60:02d}:"
        f"{total_seconds % 60:02d}.{millis % 1000:03d}"
    )
