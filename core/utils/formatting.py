"""Formatting utilities for common data types."""

from typing import Optional


def format_name(first_name: Optional[str], last_name: Optional[str]) -> str:
    """
    Format full name from first and last names.

    Args:
        first_name: First name
        last_name: Last name

    Returns:
        Formatted full name
    """
    parts = []
    if first_name:
        parts.append(first_name.strip())
    if last_name:
        parts.append(last_name.strip())
    return ' '.join(parts)


def with_suffix(message: str, text: Optional[str], separator: str = ": ") -> str:
    """Append optional free text to an activity message."""
    if text:
        return f"{message}{separator}{text}"
    return message
