"""Identifier parsing for path and form values."""

from __future__ import annotations

from uuid import UUID

from src.core.errors import AttachmentValidationError


def parse_object_id(value: str | UUID, *, label: str = "ID") -> UUID:
    """Parse a client-supplied identifier, failing before any lookup.

    Args:
        value: Raw identifier from the path or request body
        label: Human-readable name used in the error message ("file ID")

    Raises:
        AttachmentValidationError: If the value is not a valid UUID
    """
    if isinstance(value, UUID):
        return value
    try:
        return UUID(value.strip())
    except (AttributeError, ValueError) as exc:
        raise AttachmentValidationError(f"Invalid {label}") from exc


def parse_optional_object_id(value: str | None, *, label: str = "ID") -> UUID | None:
    """Like parse_object_id, but None and blank strings mean "not given"."""
    if value is None or not value.strip():
        return None
    return parse_object_id(value, label=label)
