"""
Small renderers for the values shown in download summaries and tables.
"""

SIZE_UNITS = ("KB", "MB", "GB", "TB")


def format_size(num_bytes: int) -> str:
    """Renders a byte count, e.g. '512 B' or '3.4 MB'. Negative counts render as '0 B'."""
    if num_bytes < 1024:
        return f"{max(num_bytes, 0)} B"
    value = float(num_bytes)
    for unit in SIZE_UNITS:
        value /= 1024
        if value < 1024 or unit == SIZE_UNITS[-1]:
            break
    return f"{value:.1f} {unit}"


def format_duration(seconds: float) -> str:
    """
    Renders an elapsed time for a download session.

    Short transfers keep one decimal ('0.4s'); anything from a minute up is
    shown as minutes and zero-padded seconds ('3m 05s'), or hours and minutes.
    """
    if seconds < 10:
        return f"{max(seconds, 0.0):.1f}s"
    total = round(seconds)
    if total < 60:
        return f"{total}s"
    minutes, secs = divmod(total, 60)
    if minutes < 60:
        return f"{minutes}m {secs:02d}s"
    hours, minutes = divmod(minutes, 60)
    return f"{hours}h {minutes:02d}m"


def mark(flag: bool) -> str:
    """Renders a boolean as a check mark for table cells."""
    return "[green]✓[/green]" if flag else "[dim]·[/dim]"
