"""Tournament route handlers (public, read-only)."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tennis_trivia.api.routes import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from tennis_trivia.database.db import get_db_session
from tennis_trivia.models.schemas import TournamentListResponse, TournamentResponse
from tennis_trivia.services import catalog_service

router = APIRouter(prefix="/tournaments", tags=["tournaments"])


@router.get("", response_model=TournamentListResponse)
async def list_tournaments(
    is_grand_slam: Optional[bool] = Query(None, alias="isGrandSlam"),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_db_session),
):
    """List tournaments ordered by name, optionally only Grand Slams."""
    data = await catalog_service.list_tournaments(
        session, is_grand_slam=is_grand_slam, limit=limit, offset=offset
    )
    return {"data": data}


@router.get("/{tournament_id}", response_model=TournamentResponse)
async def get_tournament(tournament_id: int, session: AsyncSession = Depends(get_db_session)):
    return await catalog_service.get_tournament(session, tournament_id)
