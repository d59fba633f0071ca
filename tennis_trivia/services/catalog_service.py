"""
Catalog service functions: read-only access to tournaments, players and matches.

No authentication required. Lists are paginated with limit/offset.
"""

from typing import List, Dict, Optional

from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tennis_trivia.database.models import Match, Player, Tournament
from tennis_trivia.utils.datetime_utils import isoformat_or_none
from tennis_trivia.utils.errors import NotFoundError

from tennis_trivia.utils.constants import DEFAULT_PAGE_SIZE


def _tournament_to_dict(tournament: Tournament) -> Dict:
    return {
        "id": tournament.id,
        "name": tournament.name,
        "slug": tournament.slug,
        "is_grand_slam": tournament.is_grand_slam,
        "created_at": isoformat_or_none(tournament.created_at),
        "updated_at": isoformat_or_none(tournament.updated_at),
    }


def _player_to_dict(player: Player) -> Dict:
    return {
        "id": player.id,
        "name": player.name,
        "slug": player.slug,
        "country_code": player.country_code,
        "created_at": isoformat_or_none(player.created_at),
        "updated_at": isoformat_or_none(player.updated_at),
    }


def _player_summary(player: Optional[Player]) -> Optional[Dict]:
    if player is None:
        return None
    return {
        "id": player.id,
        "name": player.name,
        "slug": player.slug,
        "country_code": player.country_code,
    }


def match_to_dict(match: Match) -> Dict:
    """
    Convert a Match (with tournament and players loaded) to a dictionary.

    Shared with the picks and rankings services, which expand referenced
    matches the same way.
    """
    tournament = match.tournament
    return {
        "id": match.id,
        "tournament_id": match.tournament_id,
        "year": match.year,
        "round": match.round,
        "is_final": match.is_final,
        "best_of": match.best_of,
        "category": match.category,
        "player1_id": match.player1_id,
        "player2_id": match.player2_id,
        "score": match.score,
        "title": match.title,
        "created_at": isoformat_or_none(match.created_at),
        "updated_at": isoformat_or_none(match.updated_at),
        "tournament": {
            "id": tournament.id,
            "name": tournament.name,
            "slug": tournament.slug,
            "is_grand_slam": tournament.is_grand_slam,
        } if tournament else None,
        "player1": _player_summary(match.player1),
        "player2": _player_summary(match.player2),
    }


def player_to_dict(player: Player) -> Dict:
    """Public alias used by the picks and rankings services."""
    return _player_to_dict(player)


def match_load_options():
    """Eager-load options needed by match_to_dict."""
    return (
        selectinload(Match.tournament),
        selectinload(Match.player1),
        selectinload(Match.player2),
    )


# Tournaments


async def list_tournaments(
    session: AsyncSession,
    is_grand_slam: Optional[bool] = None,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
) -> List[Dict]:
    """
    List tournaments ordered by name.

    Args:
        session: Database session
        is_grand_slam: Optional filter on the Grand Slam flag
        limit: Page size
        offset: Rows to skip

    Returns:
        List of tournament dicts
    """
    query = select(Tournament)
    if is_grand_slam is not None:
        query = query.where(Tournament.is_grand_slam == is_grand_slam)
    query = query.order_by(Tournament.name, Tournament.id).limit(limit).offset(offset)

    result = await session.execute(query)
    return [_tournament_to_dict(t) for t in result.scalars().all()]


async def get_tournament(session: AsyncSession, tournament_id: int) -> Dict:
    """
    Get a tournament by ID.

    Raises:
        NotFoundError: If the tournament does not exist
    """
    tournament = await session.get(Tournament, tournament_id)
    if not tournament:
        raise NotFoundError("Tournament not found")
    return _tournament_to_dict(tournament)


# Players


async def list_players(
    session: AsyncSession,
    search: Optional[str] = None,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
) -> List[Dict]:
    """
    List players ordered by name.

    Args:
        session: Database session
        search: Optional case-insensitive substring matched against name or slug
        limit: Page size
        offset: Rows to skip

    Returns:
        List of player dicts
    """
    query = select(Player)
    term = search.strip() if search else ""
    if term:
        pattern = f"%{term}%"
        query = query.where(or_(Player.name.ilike(pattern), Player.slug.ilike(pattern)))
    query = query.order_by(Player.name, Player.id).limit(limit).offset(offset)

    result = await session.execute(query)
    return [_player_to_dict(p) for p in result.scalars().all()]


async def get_player(session: AsyncSession, player_id: int) -> Dict:
    """
    Get a player by ID.

    Raises:
        NotFoundError: If the player does not exist
    """
    player = await session.get(Player, player_id)
    if not player:
        raise NotFoundError("Player not found")
    return _player_to_dict(player)


# Matches


async def list_matches(
    session: AsyncSession,
    tournament_id: Optional[int] = None,
    year: Optional[int] = None,
    best_of: Optional[int] = None,
    is_final: Optional[bool] = None,
    category: Optional[str] = None,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
) -> List[Dict]:
    """
    List matches, newest year first.

    Args:
        session: Database session
        tournament_id: Optional tournament filter
        year: Optional year filter
        best_of: Optional best-of filter (3 or 5)
        is_final: Optional finals-only filter
        category: Optional category filter (e.g. "men_singles")
        limit: Page size
        offset: Rows to skip

    Returns:
        List of match dicts with tournament and player summaries
    """
    query = select(Match).options(*match_load_options())
    if tournament_id is not None:
        query = query.where(Match.tournament_id == tournament_id)
    if year is not None:
        query = query.where(Match.year == year)
    if best_of is not None:
        query = query.where(Match.best_of == best_of)
    if is_final is not None:
        query = query.where(Match.is_final == is_final)
    if category:
        query = query.where(Match.category == category)
    query = query.order_by(Match.year.desc(), Match.created_at.desc(), Match.id.desc())
    query = query.limit(limit).offset(offset)

    result = await session.execute(query)
    return [match_to_dict(m) for m in result.scalars().all()]


async def get_match(session: AsyncSession, match_id: int) -> Dict:
    """
    Get a match by ID with tournament and players.

    Raises:
        NotFoundError: If the match does not exist
    """
    result = await session.execute(
        select(Match).options(*match_load_options()).where(Match.id == match_id)
    )
    match = result.scalar_one_or_none()
    if not match:
        raise NotFoundError("Match not found")
    return match_to_dict(match)


async def _matches_involving(session: AsyncSession, player_id: int) -> List[Dict]:
    result = await session.execute(
        select(Match)
        .options(*match_load_options())
        .where(or_(Match.player1_id == player_id, Match.player2_id == player_id))
        .order_by(Match.year.desc(), Match.created_at.desc(), Match.id.desc())
    )
    return [match_to_dict(m) for m in result.scalars().all()]


async def list_matches_for_player(session: AsyncSession, player_id: int) -> Dict:
    """
    List every match a player took part in.

    Returns:
        Dict with count and data

    Raises:
        NotFoundError: If the player has no matches
    """
    matches = await _matches_involving(session, player_id)
    if not matches:
        raise NotFoundError("No matches found for this player")
    return {"count": len(matches), "data": matches}


async def list_matches_for_player_slug(session: AsyncSession, slug: str) -> Dict:
    """
    List every match for the player with the given slug.

    Returns:
        Dict with count and data (data may be empty)

    Raises:
        NotFoundError: If no player has the slug
    """
    result = await session.execute(select(Player.id).where(Player.slug == slug))
    player_id = result.scalar_one_or_none()
    if player_id is None:
        raise NotFoundError("Player not found")
    matches = await _matches_involving(session, player_id)
    return {"count": len(matches), "data": matches}
