"""Ranking route handlers (authenticated user's top-N lists)."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tennis_trivia.api.auth_dependencies import get_current_user
from tennis_trivia.database.db import get_db_session
from tennis_trivia.models.schemas import MatchIdsRequest, PlayerIdsRequest, RankingResponse
from tennis_trivia.services import rankings_service

router = APIRouter(prefix="/me/rankings", tags=["rankings"])


async def _get(kind_name: str, user: dict, session: AsyncSession) -> dict:
    kind = rankings_service.get_ranking_kind(kind_name)
    return {"data": await rankings_service.get_ranking(session, user["id"], kind)}


async def _set(kind_name: str, ids, user: dict, session: AsyncSession) -> dict:
    kind = rankings_service.get_ranking_kind(kind_name)
    return {"data": await rankings_service.set_ranking(session, user["id"], kind, ids)}


@router.get("/players", response_model=RankingResponse)
async def get_top_players(
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    return await _get("players", current_user, session)


@router.put("/players", response_model=RankingResponse)
async def set_top_players(
    payload: PlayerIdsRequest,
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Replace the top-10 players list. The first id is ranked 1; [] clears it."""
    return await _set("players", payload.player_ids, current_user, session)


@router.get("/best-of-5", response_model=RankingResponse)
async def get_top_best_of5_matches(
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    return await _get("best-of-5", current_user, session)


@router.put("/best-of-5", response_model=RankingResponse)
async def set_top_best_of5_matches(
    payload: MatchIdsRequest,
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Replace the top-10 best-of-5 matches list."""
    return await _set("best-of-5", payload.match_ids, current_user, session)


@router.get("/best-of-3", response_model=RankingResponse)
async def get_top_best_of3_matches(
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    return await _get("best-of-3", current_user, session)


@router.put("/best-of-3", response_model=RankingResponse)
async def set_top_best_of3_matches(
    payload: MatchIdsRequest,
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Replace the top-10 best-of-3 men's singles matches list."""
    return await _set("best-of-3", payload.match_ids, current_user, session)


@router.get("/grand-slam-finals", response_model=RankingResponse)
async def get_top_grand_slam_finals(
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    return await _get("grand-slam-finals", current_user, session)


@router.put("/grand-slam-finals", response_model=RankingResponse)
async def set_top_grand_slam_finals(
    payload: MatchIdsRequest,
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Replace the top-5 Grand Slam finals list."""
    return await _set("grand-slam-finals", payload.match_ids, current_user, session)
