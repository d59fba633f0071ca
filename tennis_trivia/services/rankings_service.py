"""
Rankings service: per-user ordered top-N lists over the catalog.

Four ranking kinds share one get/set implementation, parameterized by a
RankingKind describing the entry table, the referenced entity, the maximum
length and which catalog rows are eligible.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Any, Callable, Dict, List

from sqlalchemy import select, delete, and_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tennis_trivia.database.models import (
    MEN_SINGLES,
    Match,
    Player,
    Tournament,
    UserTopBestOf3Match,
    UserTopBestOf5Match,
    UserTopGrandSlamFinal,
    UserTopPlayer,
)
from tennis_trivia.services.catalog_service import match_load_options, match_to_dict, player_to_dict
from tennis_trivia.utils.constants import MAX_RANKED_GRAND_SLAM_FINALS, MAX_RANKED_ITEMS
from tennis_trivia.utils.errors import BadRequestError, NotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RankingKind:
    """Static description of one ranking list."""

    name: str
    entry_model: Any
    entity_model: Any
    entity_column: str  # FK column on the entry table
    entity_key: str  # key of the expanded entity in responses
    max_items: int
    noun: str  # used in error messages
    eligible: Callable[[Any], Any]  # builds the eligibility query for a list of ids


def _best_of5_matches(ids):
    return select(Match.id).where(Match.id.in_(ids), Match.best_of == 5)


def _best_of3_men_singles_matches(ids):
    return select(Match.id).where(
        Match.id.in_(ids), Match.best_of == 3, Match.category == MEN_SINGLES
    )


def _existing_players(ids):
    return select(Player.id).where(Player.id.in_(ids))


def _grand_slam_finals(ids):
    return (
        select(Match.id)
        .join(Tournament, Tournament.id == Match.tournament_id)
        .where(
            and_(Match.id.in_(ids), Match.is_final == True, Tournament.is_grand_slam == True)  # noqa: E712
        )
    )


RANKING_KINDS: Dict[str, RankingKind] = {
    kind.name: kind
    for kind in (
        RankingKind(
            name="best-of-5",
            entry_model=UserTopBestOf5Match,
            entity_model=Match,
            entity_column="match_id",
            entity_key="match",
            max_items=MAX_RANKED_ITEMS,
            noun="best-of-5 match",
            eligible=_best_of5_matches,
        ),
        RankingKind(
            name="best-of-3",
            entry_model=UserTopBestOf3Match,
            entity_model=Match,
            entity_column="match_id",
            entity_key="match",
            max_items=MAX_RANKED_ITEMS,
            noun="best-of-3 men's singles match",
            eligible=_best_of3_men_singles_matches,
        ),
        RankingKind(
            name="players",
            entry_model=UserTopPlayer,
            entity_model=Player,
            entity_column="player_id",
            entity_key="player",
            max_items=MAX_RANKED_ITEMS,
            noun="player",
            eligible=_existing_players,
        ),
        RankingKind(
            name="grand-slam-finals",
            entry_model=UserTopGrandSlamFinal,
            entity_model=Match,
            entity_column="match_id",
            entity_key="match",
            max_items=MAX_RANKED_GRAND_SLAM_FINALS,
            noun="Grand Slam final",
            eligible=_grand_slam_finals,
        ),
    )
}


def get_ranking_kind(name: str) -> RankingKind:
    """
    Look up a ranking kind by its URL name.

    Raises:
        NotFoundError: If no ranking has that name
    """
    kind = RANKING_KINDS.get(name)
    if kind is None:
        raise NotFoundError(f"Unknown ranking: {name}")
    return kind


def _entry_to_dict(kind: RankingKind, entry) -> Dict:
    entity = getattr(entry, kind.entity_key)
    expanded = match_to_dict(entity) if kind.entity_model is Match else player_to_dict(entity)
    return {"position": entry.position, kind.entity_key: expanded}


async def get_ranking(session: AsyncSession, user_id: int, kind: RankingKind) -> List[Dict]:
    """
    Get a user's ranking, ordered by position.

    Args:
        session: Database session
        user_id: User ID
        kind: Which ranking

    Returns:
        List of {position, match} or {position, player} dicts (empty if unset)
    """
    model = kind.entry_model
    load = selectinload(getattr(model, kind.entity_key))
    if kind.entity_model is Match:
        load = load.options(*match_load_options())

    result = await session.execute(
        select(model)
        .options(load)
        .where(model.user_id == user_id)
        .order_by(model.position)
        .execution_options(populate_existing=True)
    )
    return [_entry_to_dict(kind, entry) for entry in result.scalars().all()]


async def _validate_ids(session: AsyncSession, kind: RankingKind, ids: List[int]) -> None:
    """Check length, duplicates and eligibility, in that order."""
    if len(ids) > kind.max_items:
        raise BadRequestError(f"At most {kind.max_items} entries allowed in the {kind.name} ranking")

    duplicates = [entity_id for entity_id, count in Counter(ids).items() if count > 1]
    if duplicates:
        raise BadRequestError(
            f"Duplicate IDs: {', '.join(str(i) for i in duplicates)}", code="DUPLICATE_IDS"
        )

    if not ids:
        return

    result = await session.execute(kind.eligible(ids))
    valid = set(result.scalars().all())
    invalid = [entity_id for entity_id in ids if entity_id not in valid]
    if invalid:
        raise BadRequestError(
            f"Invalid or not {kind.noun} IDs: {', '.join(str(i) for i in invalid)}",
            code="INVALID_IDS",
        )


async def set_ranking(
    session: AsyncSession, user_id: int, kind: RankingKind, ids: List[int]
) -> List[Dict]:
    """
    Replace a user's ranking with the given ordered ids.

    The first id gets position 1. An empty list clears the ranking. Prior
    entries are deleted and the new ones inserted in a single transaction.

    Args:
        session: Database session
        user_id: User ID
        kind: Which ranking
        ids: Entity ids in ranked order

    Returns:
        The stored ranking (same shape as get_ranking)

    Raises:
        BadRequestError: If the list is too long, has duplicates or contains
            ids that are missing or ineligible for this ranking
    """
    await _validate_ids(session, kind, ids)

    model = kind.entry_model
    try:
        await session.execute(delete(model).where(model.user_id == user_id))
        session.add_all(
            model(user_id=user_id, position=position, **{kind.entity_column: entity_id})
            for position, entity_id in enumerate(ids, start=1)
        )
        await session.commit()
    except Exception:
        await session.rollback()
        logger.error(f"Failed to replace {kind.name} ranking for user {user_id}", exc_info=True)
        raise

    logger.info(f"Set {kind.name} ranking for user {user_id} ({len(ids)} entries)")
    return await get_ranking(session, user_id, kind)
