"""Thread-related endpoints for the Threadline API."""

from fastapi import APIRouter, HTTPException, Query, status

from threadline.schemas.post import PostResponse
from threadline.schemas.thread import (
    ThreadParticipantResponse,
    ThreadPostResponse,
    ThreadResponse,
    ThreadViewResponse,
)
from threadline.services.errors import EngagementError
from threadline.services.threads import ThreadService, ThreadView

from .deps import RepositoryDep, http_error

router = APIRouter(prefix="/threads", tags=["threads"])


def to_thread_view_response(view: ThreadView) -> ThreadViewResponse:
    """Convert an assembled thread to an API schema."""
    return ThreadViewResponse(
        thread=ThreadResponse.model_validate(view.thread),
        posts=[
            ThreadPostResponse(
                **PostResponse.model_validate(entry.post).model_dump(),
                depth=entry.depth,
            )
            for entry in view.entries
        ],
    )


@router.get("/active")
async def list_active_threads(
    repo: RepositoryDep,
    limit: int = Query(20, ge=1, le=100),
    hours_back: int | None = Query(None, ge=1),
) -> list[ThreadViewResponse]:
    """List visible threads with recent activity, most recent first."""
    try:
        views = ThreadService(repo).active_threads(limit=limit, hours_back=hours_back)
    except EngagementError as err:
        raise http_error(err) from err
    return [to_thread_view_response(view) for view in views]


@router.get("/trending")
async def list_trending_threads(
    repo: RepositoryDep,
    limit: int = Query(10, ge=1, le=100),
    hours_back: int | None = Query(None, ge=1),
) -> list[ThreadViewResponse]:
    """List open threads with recent activity, most engaged first."""
    try:
        views = ThreadService(repo).trending_threads(limit=limit, hours_back=hours_back)
    except EngagementError as err:
        raise http_error(err) from err
    return [to_thread_view_response(view) for view in views]


@router.get("/{thread_id}")
async def get_thread(
    thread_id: str,
    repo: RepositoryDep,
    include_hidden: bool = False,
) -> ThreadViewResponse:
    """Return a thread with its posts in conversation order."""
    try:
        view = ThreadService(repo).get_thread_view(thread_id, include_hidden=include_hidden)
    except EngagementError as err:
        raise http_error(err) from err
    if view is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Thread not found")
    return to_thread_view_response(view)


@router.get("/{thread_id}/participants")
async def list_thread_participants(
    thread_id: str,
    repo: RepositoryDep,
) -> list[ThreadParticipantResponse]:
    """Return each author's contribution to a thread, most prolific first."""
    try:
        participants = ThreadService(repo).thread_participants(thread_id)
    except EngagementError as err:
        raise http_error(err) from err
    return [ThreadParticipantResponse.model_validate(item) for item in participants]
