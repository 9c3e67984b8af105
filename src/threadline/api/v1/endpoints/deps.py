"""Shared dependencies for the version 1 endpoints."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from threadline.db.session import get_db
from threadline.repositories.engagement_repo import EngagementRepository
from threadline.services.errors import ConflictError, EngagementError, NotFound, ValidationError

logger = logging.getLogger(__name__)

SessionDep = Annotated[Session, Depends(get_db)]


def get_repository(db: SessionDep) -> EngagementRepository:
    """Return a repository bound to the request's session."""
    return EngagementRepository(db)


RepositoryDep = Annotated[EngagementRepository, Depends(get_repository)]


def http_error(exc: EngagementError) -> HTTPException:
    """Translate an engagement-core error into an HTTP error response."""
    if isinstance(exc, NotFound):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, ValidationError):
        code = 422
    elif isinstance(exc, ConflictError):
        code = status.HTTP_409_CONFLICT
    else:
        logger.error("Unmapped engagement error: %s", exc)
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(status_code=code, detail=str(exc))
