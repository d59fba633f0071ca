"""Player route handlers (public, read-only)."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tennis_trivia.api.routes import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from tennis_trivia.database.db import get_db_session
from tennis_trivia.models.schemas import PlayerListResponse, PlayerResponse
from tennis_trivia.services import catalog_service

router = APIRouter(prefix="/players", tags=["players"])


@router.get("", response_model=PlayerListResponse)
async def list_players(
    search: Optional[str] = Query(None, max_length=100),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_db_session),
):
    """List players ordered by name. search matches name or slug, case-insensitively."""
    data = await catalog_service.list_players(session, search=search, limit=limit, offset=offset)
    return {"data": data}


@router.get("/{player_id}", response_model=PlayerResponse)
async def get_player(player_id: int, session: AsyncSession = Depends(get_db_session)):
    return await catalog_service.get_player(session, player_id)
