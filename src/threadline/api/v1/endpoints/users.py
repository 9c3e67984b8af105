"""User endpoints for the Threadline API."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError

from threadline.schemas.common import PageInfo
from threadline.schemas.reaction import (
    BulkRemovalResponse,
    ReactionListResponse,
    ReactionResponse,
)
from threadline.schemas.user import UserCreate, UserResponse
from threadline.services.errors import EngagementError
from threadline.services.reactions import ReactionLedger

from .deps import RepositoryDep, http_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def register_user(user_data: UserCreate, repo: RepositoryDep) -> UserResponse:
    """Register a user so they can author posts and react."""
    try:
        with repo.unit_of_work():
            user = repo.create_user(
                username=user_data.username,
                display_name=user_data.display_name,
            )
    except IntegrityError as err:
        logger.info("Rejected duplicate username %r", user_data.username)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Username already taken",
        ) from err
    return UserResponse.model_validate(user)


@router.get("/{user_id}/reactions")
async def list_user_reactions(
    user_id: str,
    repo: RepositoryDep,
    type: str | None = Query(None, description="Only reactions of this type"),
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
) -> ReactionListResponse:
    """List a user's reactions, newest first."""
    try:
        result = ReactionLedger(repo).reactions_for_user(
            user_id,
            type,
            page=page,
            limit=limit,
        )
    except EngagementError as err:
        raise http_error(err) from err
    return ReactionListResponse(
        items=[ReactionResponse.model_validate(item) for item in result.items],
        page_info=PageInfo(
            page=result.page,
            limit=result.limit,
            total=result.total,
            has_more=result.has_more,
        ),
    )


@router.delete("/{user_id}/reactions")
async def delete_user_reactions(user_id: str, repo: RepositoryDep) -> BulkRemovalResponse:
    """Remove every reaction a user holds and recompute the counters they fed."""
    try:
        result = ReactionLedger(repo).remove_all_for_user(user_id)
    except EngagementError as err:
        raise http_error(err) from err
    return BulkRemovalResponse.model_validate(result)
