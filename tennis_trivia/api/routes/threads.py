"""Thread route handlers."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from tennis_trivia.api.auth_dependencies import get_current_user
from tennis_trivia.api.routes import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from tennis_trivia.database.db import get_db_session
from tennis_trivia.models.schemas import PostRequest, PostResponse, ThreadDetailResponse
from tennis_trivia.services import forum_service

router = APIRouter(prefix="/threads", tags=["forums"])


@router.get("/{thread_id}", response_model=ThreadDetailResponse)
async def get_thread(
    thread_id: int,
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_db_session),
):
    """Get a thread with a page of its posts, oldest first."""
    return await forum_service.get_thread(session, thread_id, limit=limit, offset=offset)


@router.post(
    "/{thread_id}/posts", response_model=PostResponse, status_code=status.HTTP_201_CREATED
)
async def create_post(
    thread_id: int,
    payload: PostRequest,
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    return await forum_service.create_post(session, thread_id, current_user["id"], payload.body)
