"""Match route handlers (public, read-only)."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tennis_trivia.api.routes import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from tennis_trivia.database.db import get_db_session
from tennis_trivia.models.schemas import MatchListResponse, MatchResponse, PlayerMatchesResponse
from tennis_trivia.services import catalog_service
from tennis_trivia.utils.errors import BadRequestError

router = APIRouter(prefix="/matches", tags=["matches"])


@router.get("", response_model=MatchListResponse)
async def list_matches(
    tournament_id: Optional[int] = Query(None, alias="tournamentId"),
    year: Optional[int] = Query(None),
    best_of: Optional[int] = Query(None, alias="bestOf"),
    is_final: Optional[bool] = Query(None, alias="isFinal"),
    category: Optional[str] = Query(None, max_length=50),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_db_session),
):
    """List matches, newest year first, with optional filters."""
    if best_of is not None and best_of not in (3, 5):
        raise BadRequestError("bestOf must be 3 or 5", code="VALIDATION_ERROR")
    data = await catalog_service.list_matches(
        session,
        tournament_id=tournament_id,
        year=year,
        best_of=best_of,
        is_final=is_final,
        category=category,
        limit=limit,
        offset=offset,
    )
    return {"data": data}


@router.get("/player/slug/{slug}", response_model=PlayerMatchesResponse)
async def list_matches_for_player_slug(slug: str, session: AsyncSession = Depends(get_db_session)):
    """All matches for the player with this slug."""
    return await catalog_service.list_matches_for_player_slug(session, slug)


@router.get("/player/{player_id}", response_model=PlayerMatchesResponse)
async def list_matches_for_player(player_id: int, session: AsyncSession = Depends(get_db_session)):
    """All matches the player took part in. 404 when there are none."""
    return await catalog_service.list_matches_for_player(session, player_id)


@router.get("/{match_id}", response_model=MatchResponse)
async def get_match(match_id: int, session: AsyncSession = Depends(get_db_session)):
    return await catalog_service.get_match(session, match_id)
