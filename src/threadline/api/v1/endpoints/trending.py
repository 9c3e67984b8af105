"""Trending endpoints for the Threadline API."""

from fastapi import APIRouter, Query

from threadline.schemas.trending import TrendingPostResponse
from threadline.services.errors import EngagementError
from threadline.services.trending import TrendingEstimator

from .deps import RepositoryDep, http_error

router = APIRouter(prefix="/trending", tags=["trending"])


@router.get("/posts")
async def list_trending_posts(
    repo: RepositoryDep,
    hours_back: int | None = Query(None, ge=1),
    limit: int | None = Query(None, ge=1, le=100),
) -> list[TrendingPostResponse]:
    """Rank posts by likes and reposts received in the last ``hours_back`` hours."""
    try:
        ranked = TrendingEstimator(repo).trending_posts(hours_back=hours_back, limit=limit)
    except EngagementError as err:
        raise http_error(err) from err
    return [TrendingPostResponse.model_validate(item) for item in ranked]
