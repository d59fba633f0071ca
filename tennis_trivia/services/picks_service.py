"""
Picks service: a user's four favorite selections.

Each slot references a catalog entity that must satisfy the slot's predicate
at write time. The row is created on first write and updated in place after.
"""

import logging
from dataclasses import dataclass, fields
from typing import Dict, Optional, Union

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tennis_trivia.database.models import MEN_SINGLES, Match, Player, UserPicks
from tennis_trivia.services.catalog_service import match_load_options, match_to_dict, player_to_dict
from tennis_trivia.utils.datetime_utils import isoformat_or_none
from tennis_trivia.utils.errors import BadRequestError
from tennis_trivia.utils.unset import UNSET, UnsetType

logger = logging.getLogger(__name__)

PickValue = Union[int, None, UnsetType]


@dataclass(frozen=True)
class PicksUpdate:
    """
    Requested change to a user's picks.

    Each field is UNSET (leave as is), None (clear) or an entity id.
    """

    favorite_player_id: PickValue = UNSET
    favorite_best_of5_match_id: PickValue = UNSET
    favorite_best_of3_match_id: PickValue = UNSET
    best_grand_slam_final_match_id: PickValue = UNSET

    def supplied(self) -> Dict[str, Optional[int]]:
        """Fields that were explicitly provided, with their values."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not UNSET
        }


def _picks_to_dict(picks: UserPicks) -> Dict:
    return {
        "id": picks.id,
        "user_id": picks.user_id,
        "favorite_player_id": picks.favorite_player_id,
        "favorite_best_of5_match_id": picks.favorite_best_of5_match_id,
        "favorite_best_of3_match_id": picks.favorite_best_of3_match_id,
        "best_grand_slam_final_match_id": picks.best_grand_slam_final_match_id,
        "favorite_player": player_to_dict(picks.favorite_player) if picks.favorite_player else None,
        "favorite_best_of5_match": (
            match_to_dict(picks.favorite_best_of5_match) if picks.favorite_best_of5_match else None
        ),
        "favorite_best_of3_match": (
            match_to_dict(picks.favorite_best_of3_match) if picks.favorite_best_of3_match else None
        ),
        "best_grand_slam_final": (
            match_to_dict(picks.best_grand_slam_final) if picks.best_grand_slam_final else None
        ),
        "created_at": isoformat_or_none(picks.created_at),
        "updated_at": isoformat_or_none(picks.updated_at),
    }


async def get_picks(session: AsyncSession, user_id: int) -> Optional[Dict]:
    """
    Get a user's picks with referenced entities expanded.

    Args:
        session: Database session
        user_id: User ID

    Returns:
        Picks dictionary, or None if the user has never set any
    """
    result = await session.execute(
        select(UserPicks)
        .options(
            selectinload(UserPicks.favorite_player),
            selectinload(UserPicks.favorite_best_of5_match).options(*match_load_options()),
            selectinload(UserPicks.favorite_best_of3_match).options(*match_load_options()),
            selectinload(UserPicks.best_grand_slam_final).options(*match_load_options()),
        )
        .where(UserPicks.user_id == user_id)
        .execution_options(populate_existing=True)
    )
    picks = result.scalar_one_or_none()
    return _picks_to_dict(picks) if picks else None


async def _validate_player(session: AsyncSession, player_id: int) -> None:
    if await session.get(Player, player_id) is None:
        raise BadRequestError("Invalid favoritePlayerId", code="INVALID_PICK")


async def _get_match(session: AsyncSession, match_id: int) -> Optional[Match]:
    result = await session.execute(
        select(Match).options(selectinload(Match.tournament)).where(Match.id == match_id)
    )
    return result.scalar_one_or_none()


async def _validate_best_of5(session: AsyncSession, match_id: int) -> None:
    match = await _get_match(session, match_id)
    if not match or match.best_of != 5:
        raise BadRequestError(
            "Invalid or not best-of-5 match for favoriteBestOf5MatchId", code="INVALID_PICK"
        )


async def _validate_best_of3(session: AsyncSession, match_id: int) -> None:
    match = await _get_match(session, match_id)
    if not match or match.best_of != 3 or match.category != MEN_SINGLES:
        raise BadRequestError(
            "Invalid or not best-of-3 men's singles match for favoriteBestOf3MatchId",
            code="INVALID_PICK",
        )


async def _validate_grand_slam_final(session: AsyncSession, match_id: int) -> None:
    match = await _get_match(session, match_id)
    if not match or not match.is_final or not match.tournament.is_grand_slam:
        raise BadRequestError(
            "Invalid or not Grand Slam final for bestGrandSlamFinalMatchId", code="INVALID_PICK"
        )


# Slot name -> predicate check, in the order slots are validated
_SLOT_VALIDATORS = {
    "favorite_player_id": _validate_player,
    "favorite_best_of5_match_id": _validate_best_of5,
    "favorite_best_of3_match_id": _validate_best_of3,
    "best_grand_slam_final_match_id": _validate_grand_slam_final,
}


async def _load_row(session: AsyncSession, user_id: int) -> Optional[UserPicks]:
    result = await session.execute(
        select(UserPicks)
        .where(UserPicks.user_id == user_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


def _apply(picks: UserPicks, changes: Dict[str, Optional[int]]) -> None:
    for slot, value in changes.items():
        setattr(picks, slot, value)


async def set_picks(session: AsyncSession, user_id: int, update: PicksUpdate) -> Dict:
    """
    Create or update a user's picks.

    Every supplied id is validated before anything is written; unsupplied
    slots keep their current value.

    Args:
        session: Database session
        user_id: User ID
        update: Requested change

    Returns:
        Updated picks dictionary with referenced entities expanded

    Raises:
        BadRequestError: If a supplied id does not satisfy its slot
    """
    changes = update.supplied()
    for slot, value in changes.items():
        if value is not None:
            await _SLOT_VALIDATORS[slot](session, value)

    picks = await _load_row(session, user_id)
    try:
        if picks is None:
            session.add(UserPicks(user_id=user_id, **changes))
        else:
            _apply(picks, changes)
        await session.commit()
    except IntegrityError:
        await session.rollback()
        if picks is not None:
            raise
        # A concurrent first write created the row; apply this update on top of it
        picks = await _load_row(session, user_id)
        if picks is None:
            raise
        logger.info(f"Picks row for user {user_id} created concurrently, updating it instead")
        _apply(picks, changes)
        try:
            await session.commit()
        except Exception:
            await session.rollback()
            raise
    except Exception:
        await session.rollback()
        raise

    logger.info(f"Updated picks for user {user_id} ({', '.join(changes) or 'no changes'})")
    return await get_picks(session, user_id)
