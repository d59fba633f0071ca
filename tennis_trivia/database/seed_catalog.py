"""
Seed tournaments, players and matches from JSON files on startup.

Idempotent: tournaments and players are matched by slug, matches by
(tournament, year, round, player1, player2). Existing rows are left untouched.
To force a full re-seed, delete rows from the catalog tables first.

Run manually with:
    python -m tennis_trivia.database.seed_catalog
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Dict, List

from sqlalchemy import select

from tennis_trivia.database.db import AsyncSessionLocal
from tennis_trivia.database.models import Match, Player, Tournament

logger = logging.getLogger(__name__)

SEED_DIR = Path(__file__).resolve().parent.parent / "seed"


def _load(seed_dir: Path, filename: str) -> List[Dict]:
    path = seed_dir / filename
    if not path.exists():
        logger.warning("Seed file not found: %s", path)
        return []
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


async def _seed_tournaments(session, rows: List[Dict]) -> Dict[str, int]:
    """Create missing tournaments. Returns slug -> id for every seeded slug."""
    ids = {}
    created = 0
    for row in rows:
        result = await session.execute(select(Tournament).where(Tournament.slug == row["slug"]))
        tournament = result.scalar_one_or_none()
        if tournament is None:
            tournament = Tournament(
                name=row["name"], slug=row["slug"], is_grand_slam=bool(row.get("isGrandSlam"))
            )
            session.add(tournament)
            await session.flush()
            created += 1
        ids[row["slug"]] = tournament.id
    if created:
        logger.info("Seeded %d new tournaments", created)
    return ids


async def _seed_players(session, rows: List[Dict]) -> Dict[str, int]:
    """Create missing players. Returns slug -> id for every seeded slug."""
    ids = {}
    created = 0
    for row in rows:
        result = await session.execute(select(Player).where(Player.slug == row["slug"]))
        player = result.scalar_one_or_none()
        if player is None:
            player = Player(name=row["name"], slug=row["slug"], country_code=row["countryCode"])
            session.add(player)
            await session.flush()
            created += 1
        ids[row["slug"]] = player.id
    if created:
        logger.info("Seeded %d new players", created)
    return ids


async def _seed_matches(
    session, rows: List[Dict], tournament_ids: Dict[str, int], player_ids: Dict[str, int]
) -> int:
    """Create missing matches, skipping rows with unknown references. Returns count created."""
    created = 0
    skipped = 0
    for index, row in enumerate(rows):
        tournament_id = tournament_ids.get(row["tournamentSlug"])
        player1_id = player_ids.get(row["player1Slug"])
        player2_id = player_ids.get(row["player2Slug"])
        if not tournament_id or not player1_id or not player2_id:
            logger.warning(
                "Skipping match %d: missing reference (tournament=%s, p1=%s, p2=%s)",
                index, row["tournamentSlug"], row["player1Slug"], row["player2Slug"],
            )
            skipped += 1
            continue

        result = await session.execute(
            select(Match.id).where(
                Match.tournament_id == tournament_id,
                Match.year == row["year"],
                Match.round == row["round"],
                Match.player1_id == player1_id,
                Match.player2_id == player2_id,
            )
        )
        if result.scalar_one_or_none() is not None:
            continue

        session.add(
            Match(
                tournament_id=tournament_id,
                year=row["year"],
                round=row["round"],
                is_final=bool(row.get("isFinal")),
                best_of=row["bestOf"],
                category=row["category"],
                player1_id=player1_id,
                player2_id=player2_id,
                score=row["score"],
                title=row["title"],
            )
        )
        created += 1

    await session.flush()
    if created:
        logger.info("Seeded %d new matches", created)
    if skipped:
        logger.warning("Skipped %d matches with missing references", skipped)
    return created


async def seed_catalog_data(session, seed_dir: Path = SEED_DIR) -> Dict[str, int]:
    """
    Seed the catalog using an existing session. The caller commits.

    Returns:
        Counts of seed rows read per entity
    """
    tournaments = _load(seed_dir, "tournaments.json")
    players = _load(seed_dir, "players.json")
    matches = _load(seed_dir, "matches.json")

    tournament_ids = await _seed_tournaments(session, tournaments)
    player_ids = await _seed_players(session, players)
    await _seed_matches(session, matches, tournament_ids, player_ids)

    return {"tournaments": len(tournaments), "players": len(players), "matches": len(matches)}


async def seed_catalog():
    """Seed the catalog. Called during app startup."""
    async with AsyncSessionLocal() as session:
        await seed_catalog_data(session)
        await session.commit()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    asyncio.run(seed_catalog())
