"""Post-related endpoints for the Threadline API."""

from fastapi import APIRouter, HTTPException, Query, status

from threadline.schemas.common import ErrorResponse, PageInfo
from threadline.schemas.post import PostCreate, PostResponse
from threadline.schemas.reaction import (
    ReactionCreate,
    ReactionListResponse,
    ReactionOutcomeResponse,
    ReactionResponse,
    ReactionStatsResponse,
)
from threadline.schemas.thread import ThreadResponse, ThreadViewResponse
from threadline.schemas.user import ReactorResponse
from threadline.services.errors import EngagementError
from threadline.services.posts import PostService
from threadline.services.reactions import ReactionLedger
from threadline.services.threads import ThreadService
from threadline.services.validation import parse_identifier

from .deps import RepositoryDep, http_error
from .reactions import to_outcome_response
from .threads import to_thread_view_response

router = APIRouter(
    prefix="/posts",
    tags=["posts"],
    responses={
        status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
        status.HTTP_409_CONFLICT: {"model": ErrorResponse},
    },
)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_post(post_data: PostCreate, repo: RepositoryDep) -> PostResponse:
    """Create a root post (opening a thread) or a reply (joining one)."""
    try:
        post = PostService(repo).create_post(
            author_id=post_data.author_id,
            content=post_data.content,
            parent_post_id=post_data.parent_post_id,
            repost_of_id=post_data.repost_of_id,
        )
    except EngagementError as err:
        raise http_error(err) from err
    return PostResponse.model_validate(post)


@router.get("/{post_id}")
async def get_post(post_id: str, repo: RepositoryDep) -> PostResponse:
    """Get a specific post by ID."""
    try:
        post_id = parse_identifier(post_id, "post_id")
    except EngagementError as err:
        raise http_error(err) from err
    post = repo.find_post(post_id)
    if post is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    return PostResponse.model_validate(post)


@router.get("/{post_id}/thread")
async def get_post_thread(post_id: str, repo: RepositoryDep) -> ThreadViewResponse:
    """Return the thread opened by a post, in conversation order."""
    try:
        view = ThreadService(repo).get_thread_view_by_original_post(post_id)
    except EngagementError as err:
        raise http_error(err) from err
    if view is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Thread not found")
    return to_thread_view_response(view)


@router.post("/{post_id}/thread", status_code=status.HTTP_201_CREATED)
async def promote_post_to_thread(
    post_id: str,
    repo: RepositoryDep,
    title: str | None = None,
) -> ThreadResponse:
    """Open a thread for an existing root post."""
    try:
        thread = PostService(repo).promote_to_thread(post_id, title=title)
    except EngagementError as err:
        raise http_error(err) from err
    return ThreadResponse.model_validate(thread)


@router.post("/{post_id}/reactions")
async def react_to_post(
    post_id: str,
    reaction_data: ReactionCreate,
    repo: RepositoryDep,
) -> ReactionOutcomeResponse:
    """Create, toggle off or replace the caller's reaction on a post.

    Resubmitting the type already held removes it, unless ``strict`` is set,
    in which case the request is rejected with 409.
    """
    try:
        outcome = ReactionLedger(repo).apply_reaction(
            reaction_data.user_id,
            post_id,
            reaction_data.type,
            strict=reaction_data.strict,
        )
    except EngagementError as err:
        raise http_error(err) from err
    return to_outcome_response(outcome)


@router.get("/{post_id}/reactions")
async def list_post_reactions(
    post_id: str,
    repo: RepositoryDep,
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
) -> ReactionListResponse:
    """List reactions on a post, newest first."""
    try:
        result = ReactionLedger(repo).reactions_for_post(post_id, page=page, limit=limit)
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


@router.get("/{post_id}/reactions/stats")
async def get_post_reaction_stats(post_id: str, repo: RepositoryDep) -> ReactionStatsResponse:
    """Return counts of every reaction type on a post."""
    try:
        stats = ReactionLedger(repo).post_reaction_stats(post_id)
    except EngagementError as err:
        raise http_error(err) from err
    return ReactionStatsResponse(
        like_count=stats.like_count,
        repost_count=stats.repost_count,
        bookmark_count=stats.bookmark_count,
        report_count=stats.report_count,
        total_engagement=stats.total_engagement,
    )


@router.get("/{post_id}/reactors")
async def list_post_reactors(
    post_id: str,
    repo: RepositoryDep,
    type: str = Query("LIKE", description="Reaction type to list"),
    limit: int = Query(50, ge=1),
) -> list[ReactorResponse]:
    """List users who reacted to a post with the given type."""
    try:
        reactors = ReactionLedger(repo).post_reactors(post_id, type, limit=limit)
    except EngagementError as err:
        raise http_error(err) from err
    return [ReactorResponse.model_validate(item) for item in reactors]
