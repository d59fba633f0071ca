"""Picks route handlers (authenticated user's favorites)."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tennis_trivia.api.auth_dependencies import get_current_user
from tennis_trivia.database.db import get_db_session
from tennis_trivia.models.schemas import PicksEnvelope, SetPicksRequest
from tennis_trivia.services import picks_service

router = APIRouter(prefix="/me/picks", tags=["picks"])


@router.get("", response_model=PicksEnvelope)
async def get_picks(
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Get the current user's picks; data is null if none were ever set."""
    return {"data": await picks_service.get_picks(session, current_user["id"])}


@router.put("", response_model=PicksEnvelope)
async def set_picks(
    payload: SetPicksRequest,
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Update the current user's picks.

    Only fields present in the body change; null clears a pick.
    """
    picks = await picks_service.set_picks(session, current_user["id"], payload.to_update())
    return {"data": picks}
