"""Input checks applied before any storage access."""
from __future__ import annotations

import uuid

from threadline.models import ReactionType
from threadline.services.errors import ValidationError

__all__ = ["parse_identifier", "parse_page", "parse_reaction_type"]


def parse_identifier(value: object, field: str) -> str:
    """Return ``value`` as a canonical identifier string.

    Raises:
        ValidationError: If the value is not a UUID.
    """
    try:
        return str(uuid.UUID(str(value)))
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid {field}: {value!r}") from exc


def parse_reaction_type(value: object) -> ReactionType:
    """Return the reaction type named by ``value`` (case-insensitive).

    Raises:
        ValidationError: If the value is not one of the known types.
    """
    if isinstance(value, ReactionType):
        return value
    if isinstance(value, str):
        try:
            return ReactionType(value.strip().upper())
        except ValueError:
            pass
    allowed = ", ".join(member.value for member in ReactionType)
    raise ValidationError(f"Invalid reaction type {value!r}; expected one of {allowed}")


def parse_page(page: int, limit: int, max_limit: int) -> tuple[int, int]:
    """Validate 1-based pagination arguments."""
    if page < 1:
        raise ValidationError("page must be >= 1")
    if limit < 1 or limit > max_limit:
        raise ValidationError(f"limit must be between 1 and {max_limit}")
    return page, limit
