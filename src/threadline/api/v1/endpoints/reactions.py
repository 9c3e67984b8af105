"""Reaction-related endpoints for the Threadline API."""

from fastapi import APIRouter, status

from threadline.schemas.reaction import (
    PostCountsResponse,
    ReactionOutcomeResponse,
    ReactionResponse,
)
from threadline.services.errors import EngagementError
from threadline.services.reactions import ReactionLedger, ReactionOutcome, Replaced

from .deps import RepositoryDep, http_error

router = APIRouter(prefix="/reactions", tags=["reactions"])


def to_outcome_response(outcome: ReactionOutcome) -> ReactionOutcomeResponse:
    """Convert a ledger outcome to an API schema."""
    previous = outcome.previous if isinstance(outcome, Replaced) else None
    return ReactionOutcomeResponse(
        outcome=outcome.kind,
        reaction=ReactionResponse.model_validate(outcome.reaction),
        previous=ReactionResponse.model_validate(previous) if previous is not None else None,
        counts=(
            PostCountsResponse.model_validate(outcome.counts)
            if outcome.counts is not None
            else None
        ),
    )


@router.delete("/{reaction_id}", status_code=status.HTTP_200_OK)
async def delete_reaction(reaction_id: str, repo: RepositoryDep) -> ReactionOutcomeResponse:
    """Remove a specific reaction and return the post's settled counters."""
    try:
        outcome = ReactionLedger(repo).remove_reaction(reaction_id)
    except EngagementError as err:
        raise http_error(err) from err
    return to_outcome_response(outcome)
