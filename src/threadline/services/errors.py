"""Error taxonomy for the engagement core.

The HTTP layer maps these onto status codes; nothing here knows about HTTP.
"""

from __future__ import annotations


class EngagementError(RuntimeError):
    """Base exception for engagement-core failures."""


class NotFound(EngagementError):
    """Raised when a referenced user, post, thread or reaction does not exist."""

    def __init__(self, kind: str, identifier: str) -> None:
        super().__init__(f"{kind} not found: {identifier}")
        self.kind = kind
        self.identifier = identifier


class ValidationError(EngagementError):
    """Raised for malformed identifiers, reaction types or arguments.

    Always raised before any storage is touched.
    """


class ConflictError(EngagementError):
    """Raised when a request collides with existing state.

    Used by the strict reaction policy, by thread promotion for posts that
    already own a thread, and for replies to locked threads.
    """


class CounterIntegrityError(EngagementError):
    """Describes a derived counter that came out impossible.

    Never propagated: the counter maintainer logs it and clamps the value.
    """
