"""Custom validation utilities."""

import json
import re

from app.domain.room_state import ROOM_NUMBER_PATTERN


def normalize_room_number(number: str) -> str:
    """Trim and uppercase a room number.

    Args:
        number: Room number as entered

    Returns:
        str: Normalized room number like 'B-101'
    """
    return number.strip().upper()


def validate_room_number(number: str) -> bool:
    """Validate a normalized room number.

    Only uppercase letters, digits and hyphens are allowed.

    Args:
        number: Room number to validate

    Returns:
        bool: True if valid room number
    """
    return bool(re.match(ROOM_NUMBER_PATTERN, number))


def parse_amenities(value: list[str] | str | None) -> list[str]:
    """Parse an amenity list sent as a list, JSON array or comma-separated string.

    Args:
        value: Raw amenities payload

    Returns:
        list[str]: Non-empty, trimmed amenity names
    """
    if value is None:
        return []
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except ValueError:
            parsed = value.split(",")
        if not isinstance(parsed, list):
            parsed = [str(parsed)]
        value = parsed
    return [str(item).strip() for item in value if str(item).strip()]


def dedupe_preserving_order(items: list[str]) -> list[str]:
    """Remove duplicates and empty entries, keeping first occurrences."""
    seen: set[str] = set()
    result = []
    for item in items:
        if item and item not in seen:
            seen.add(item)
            result.append(item)
    return result
