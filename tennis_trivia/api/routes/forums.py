"""Forum route handlers: forums and the threads inside them."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from tennis_trivia.api.auth_dependencies import get_current_user
from tennis_trivia.api.routes import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from tennis_trivia.database.db import get_db_session
from tennis_trivia.models.schemas import (
    CreateForumRequest,
    CreateThreadRequest,
    ForumListResponse,
    ForumResponse,
    ThreadListResponse,
    ThreadResponse,
    UpdateForumRequest,
)
from tennis_trivia.services import forum_service

router = APIRouter(prefix="/forums", tags=["forums"])


@router.get("", response_model=ForumListResponse)
async def list_forums(
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_db_session),
):
    """List forums, newest first."""
    return await forum_service.list_forums(session, limit=limit, offset=offset)


@router.get("/{forum_id}", response_model=ForumResponse)
async def get_forum(forum_id: int, session: AsyncSession = Depends(get_db_session)):
    return await forum_service.get_forum(session, forum_id)


@router.post("", response_model=ForumResponse, status_code=status.HTTP_201_CREATED)
async def create_forum(
    payload: CreateForumRequest,
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Create a forum. The slug is generated from the title when not given."""
    return await forum_service.create_forum(
        session,
        current_user["id"],
        payload.title,
        description=payload.description,
        slug=payload.slug,
    )


@router.patch("/{forum_id}", response_model=ForumResponse)
async def update_forum(
    forum_id: int,
    payload: UpdateForumRequest,
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Update a forum's title or description (creator only)."""
    return await forum_service.update_forum(
        session, forum_id, current_user["id"], payload.to_update()
    )


@router.get("/{forum_id}/threads", response_model=ThreadListResponse)
async def list_threads(
    forum_id: int,
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_db_session),
):
    """List a forum's threads, newest first."""
    return await forum_service.list_threads(session, forum_id, limit=limit, offset=offset)


@router.post(
    "/{forum_id}/threads", response_model=ThreadResponse, status_code=status.HTTP_201_CREATED
)
async def create_thread(
    forum_id: int,
    payload: CreateThreadRequest,
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Start a thread. A non-blank body also becomes the thread's first post."""
    return await forum_service.create_thread(
        session, forum_id, current_user["id"], payload.title, body=payload.body
    )
