"""Post route handlers."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tennis_trivia.api.auth_dependencies import get_current_user
from tennis_trivia.database.db import get_db_session
from tennis_trivia.models.schemas import PostRequest, PostResponse
from tennis_trivia.services import forum_service

router = APIRouter(prefix="/posts", tags=["forums"])


@router.patch("/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: int,
    payload: PostRequest,
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Edit a post (author only)."""
    return await forum_service.update_post(session, post_id, current_user["id"], payload.body)
