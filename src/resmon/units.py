"""Display unit selection for byte quantities."""

KILO = (10**3, "kb")

# Only these magnitudes get their own unit; everything else is shown in kb.
_UNITS_BY_MAGNITUDE: dict[int, tuple[int, str]] = {
    6: (10**6, "mb"),
    9: (10**9, "gb"),
}


def magnitude(value: int) -> int:
    """Return the number of decimal digits in ``value`` minus one."""
    if value < 0:
        raise ValueError(f"magnitude of a negative quantity: {value}")
    return len(str(value)) - 1


def select_unit(total_bytes: int) -> tuple[int, str]:
    """
    Pick the divisor and label used to display ``total_bytes``.

    Args:
        total_bytes: Non-negative byte count the unit is derived from.

    Returns:
        ``(divisor, label)``: ``(10**6, "mb")`` for 7-digit values,
        ``(10**9, "gb")`` for 10-digit values and ``(10**3, "kb")`` otherwise.
    """
    return _UNITS_BY_MAGNITUDE.get(magnitude(total_bytes), KILO)
