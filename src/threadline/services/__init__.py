"""Business logic services for the Threadline engagement core."""

from .counters import CounterMaintainer
from .errors import ConflictError, CounterIntegrityError, EngagementError, NotFound, ValidationError
from .posts import PostService
from .reactions import Created, ReactionLedger, ReactionOutcome, Removed, Replaced
from .threads import ThreadService, ThreadView, assemble_thread
from .trending import TrendingEstimator, TrendingPost

__all__ = [
    "CounterMaintainer",
    "ConflictError", "CounterIntegrityError", "EngagementError", "NotFound", "ValidationError",
    "PostService",
    "Created", "ReactionLedger", "ReactionOutcome", "Removed", "Replaced",
    "ThreadService", "ThreadView", "assemble_thread",
    "TrendingEstimator", "TrendingPost",
]
