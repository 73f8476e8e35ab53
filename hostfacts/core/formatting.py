"""Human-readable renderings of sizes and uptimes."""

from .models import FIELD_NOTIMPL


_ORDERS = "KMGTPE"


def format_size(size: int) -> str:
    """
    Format a byte count in at most four characters, apr_strfsize style.

    Examples: ``"  0 "``, ``"972 "``, ``"1.0K"``, ``" 10M"``, ``"-"`` for
    a field the platform does not report.
    """
    if size == FIELD_NOTIMPL:
        return "-"

    if size < 973:
        return "%3d " % size

    order = 0
    while True:
        remain = size & 1023
        size >>= 10

        if size >= 973:
            order += 1
            continue

        if size < 9 or (size == 9 and remain < 973):
            remain = ((remain * 5) + 256) // 512
            if remain >= 10:
                size += 1
                remain = 0
            return "%d.%d%s" % (size, remain, _ORDERS[order])

        if remain >= 512:
            size += 1

        return "%3d%s" % (size, _ORDERS[order])


def uptime_string(uptime: float) -> str:
    """Format seconds of uptime like ``uptime(1)``: ``"2 days,  3:04"``."""
    text = ""
    days = int(uptime) // (60 * 60 * 24)

    if days:
        text += "%d day%s, " % (days, "s" if days > 1 else "")

    minutes = int(uptime) // 60
    hours = (minutes // 60) % 24
    minutes = minutes % 60

    if hours:
        text += "%2d:%02d" % (hours, minutes)
    else:
        text += "%d min" % minutes

    return text
