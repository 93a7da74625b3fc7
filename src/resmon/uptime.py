"""Calendar breakdown of system uptime."""

from datetime import datetime, timedelta

from resmon.models import SystemUptime


def compute_uptime(boot_seconds: int, now: datetime) -> SystemUptime:
    """
    Break the time since boot into years, months, days, hours and minutes.

    The boot instant is ``now - boot_seconds`` in ``now``'s timezone. Fields are
    differenced one by one and negative results borrow from the next larger
    unit, smallest first. Seconds are ignored.

    Adding the years and months to the boot instant (clamping the day to the
    target month) and then the days, hours and minutes lands on ``now``.

    Args:
        boot_seconds: Seconds elapsed since boot. Must be non-negative.
        now: Reference time, naive or aware.

    Returns:
        SystemUptime with minutes in [0, 59], hours in [0, 23] and months in [0, 11].
    """
    if boot_seconds < 0:
        raise ValueError(f"boot_seconds must be non-negative, got {boot_seconds}")

    then = now - timedelta(seconds=boot_seconds)

    years = now.year - then.year
    months = now.month - then.month
    days = now.day - then.day
    hours = now.hour - then.hour
    minutes = now.minute - then.minute

    if minutes < 0:
        minutes += 60
        hours -= 1

    if hours < 0:
        hours += 24
        days -= 1

    if days < 0:
        # Borrow the month ending just before now's month. A boot day past the
        # end of that month clamps to its last day.
        last_month_end = now.replace(day=1) - timedelta(days=1)
        days += max(then.day, last_month_end.day)
        months -= 1

    if months < 0:
        months += 12
        years -= 1

    return SystemUptime(
        years=years,
        months=months,
        days=days,
        hours=hours,
        minutes=minutes,
    )
