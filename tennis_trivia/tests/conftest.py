"""
Shared pytest configuration for tennis trivia tests.

Uses an in-memory SQLite database (aiosqlite) per test. Environment
variables are set before any application module is imported so that the
cached Settings, the engine and the rate limiter all see the test config.
"""

import os

os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_ACCESS_SECRET"] = "test-access-secret"
os.environ["JWT_REFRESH_SECRET"] = "test-refresh-secret"
os.environ["JWT_ACCESS_EXPIRES_IN"] = "15m"
os.environ["JWT_REFRESH_EXPIRES_IN"] = "7d"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from tennis_trivia.config import get_settings  # noqa: E402
from tennis_trivia.database.db import Base, enable_sqlite_foreign_keys  # noqa: E402
from tennis_trivia.database.models import MEN_SINGLES, Match, Player, Tournament  # noqa: E402
from tennis_trivia.services import auth_service, user_service  # noqa: E402


@pytest.fixture
def settings():
    """The process-wide test Settings."""
    return get_settings()


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a fresh in-memory database engine for each test."""
    # StaticPool keeps the single in-memory connection alive for the test
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(engine)

    async with engine.begin() as conn:
        from tennis_trivia.database import models  # noqa: F401

        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine):
    """Create a test database session."""
    async_session_maker = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with async_session_maker() as session:
        yield session


async def create_test_user(session, email="user@example.com", password="password123", display_name=None):
    """Create a user directly through the user service and commit."""
    user = await user_service.create_user(
        session, email, auth_service.hash_password(password), display_name
    )
    await session.commit()
    return user


@pytest_asyncio.fixture
async def test_user(db_session):
    return await create_test_user(db_session, "alice@example.com", display_name="Alice")


@pytest_asyncio.fixture
async def other_user(db_session):
    return await create_test_user(db_session, "bob@example.com", display_name="Bob")


@pytest_asyncio.fixture
async def catalog(db_session):
    """
    Seed a small catalog and return the created rows keyed by name.

    Matches:
        wimbledon_2008_final   best-of-5, Grand Slam final
        ao_2012_final          best-of-5, Grand Slam final
        rg_2013_semi           best-of-5, Grand Slam semifinal
        rome_2006_final        best-of-5, non-Slam final
        madrid_2009_semi       best-of-3, men's singles
        olympics_2012_semi     best-of-3, men's singles
        mixed_doubles          best-of-3, mixed doubles
    """
    wimbledon = Tournament(name="Wimbledon", slug="wimbledon", is_grand_slam=True)
    australian_open = Tournament(name="Australian Open", slug="australian-open", is_grand_slam=True)
    roland_garros = Tournament(name="Roland Garros", slug="roland-garros", is_grand_slam=True)
    rome = Tournament(name="Italian Open", slug="rome", is_grand_slam=False)
    madrid = Tournament(name="Madrid Open", slug="madrid-open", is_grand_slam=False)
    olympics = Tournament(name="Olympic Games", slug="olympics", is_grand_slam=False)
    federer = Player(name="Roger Federer", slug="roger-federer", country_code="SUI")
    nadal = Player(name="Rafael Nadal", slug="rafael-nadal", country_code="ESP")
    djokovic = Player(name="Novak Djokovic", slug="novak-djokovic", country_code="SRB")
    del_potro = Player(name="Juan Martin del Potro", slug="juan-martin-del-potro", country_code="ARG")
    thiem = Player(name="Dominic Thiem", slug="dominic-thiem", country_code="AUT")
    db_session.add_all(
        [wimbledon, australian_open, roland_garros, rome, madrid, olympics,
         federer, nadal, djokovic, del_potro, thiem]
    )
    await db_session.flush()

    def match(tournament, year, round_, is_final, best_of, p1, p2, score, title, category=MEN_SINGLES):
        return Match(
            tournament_id=tournament.id,
            year=year,
            round=round_,
            is_final=is_final,
            best_of=best_of,
            category=category,
            player1_id=p1.id,
            player2_id=p2.id,
            score=score,
            title=title,
        )

    matches = {
        "wimbledon_2008_final": match(
            wimbledon, 2008, "F", True, 5, nadal, federer, "6-4 6-4 6-7 6-7 9-7", "Wimbledon 2008 Final"
        ),
        "ao_2012_final": match(
            australian_open, 2012, "F", True, 5, djokovic, nadal, "5-7 6-4 6-2 6-7 7-5", "AO 2012 Final"
        ),
        "rg_2013_semi": match(
            roland_garros, 2013, "SF", False, 5, nadal, djokovic, "6-4 3-6 6-1 6-7 9-7", "RG 2013 Semifinal"
        ),
        "rome_2006_final": match(
            rome, 2006, "F", True, 5, nadal, federer, "6-7 7-6 6-4 2-6 7-6", "Rome 2006 Final"
        ),
        "madrid_2009_semi": match(
            madrid, 2009, "SF", False, 3, nadal, djokovic, "3-6 7-6 7-6", "Madrid 2009 Semifinal"
        ),
        "olympics_2012_semi": match(
            olympics, 2012, "SF", False, 3, federer, del_potro, "3-6 7-6 19-17", "London 2012 Semifinal"
        ),
        "mixed_doubles": match(
            wimbledon, 2019, "F", True, 3, federer, djokovic, "6-4 6-4", "Exhibition", category="mixed_doubles"
        ),
    }
    db_session.add_all(matches.values())
    await db_session.commit()

    return {
        "tournaments": {
            "wimbledon": wimbledon,
            "australian_open": australian_open,
            "roland_garros": roland_garros,
            "rome": rome,
            "madrid": madrid,
            "olympics": olympics,
        },
        "players": {
            "federer": federer,
            "nadal": nadal,
            "djokovic": djokovic,
            "del_potro": del_potro,
            "thiem": thiem,
        },
        "matches": matches,
    }
