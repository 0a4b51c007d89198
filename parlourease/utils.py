"""Shared utilities used across both apps."""

import re
from datetime import time
from typing import Union


def normalize_phone(value: str) -> str:
    """Normalize a contact number by stripping everything except digits and a leading +.

    Examples:
        >>> normalize_phone("123-456-7890")
        '1234567890'
        >>> normalize_phone("+91 (98) 7654-3210")
        '+919876543210'
    """
    value = value.strip()
    if value.startswith("+"):
        return "+" + re.sub(r"[^\d]", "", value[1:])
    return re.sub(r"[^\d]", "", value)


def format_currency(amount: Union[int, float], symbol: str) -> str:
    """Render an amount with two decimals behind the currency symbol.

    Examples:
        >>> format_currency(85, "₹")
        '₹85.00'
    """
    return f"{symbol}{amount:.2f}"


def format_time_label(value: time) -> str:
    """Render a time of day as a 24-hour ``HH:MM`` label."""
    return value.strftime("%H:%M")


def parse_time_label(label: str) -> time:
    """Parse a ``HH:MM`` label back into a time of day.

    Raises:
        ValueError: If the label is not a valid 24-hour time.
    """
    hours, _, minutes = label.strip().partition(":")
    if not hours.isdigit() or not minutes.isdigit() or len(minutes) != 2:
        raise ValueError(f"Invalid time label: {label!r}")
    return time(int(hours), int(minutes))
