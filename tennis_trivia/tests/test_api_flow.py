"""
End-to-end API flows over an in-memory database seeded from the bundled
catalog JSON files.
"""

import pytest
from unittest.mock import AsyncMock

from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from tennis_trivia.api import main
from tennis_trivia.database import db
from tennis_trivia.database.db import Base, enable_sqlite_foreign_keys, get_db_session
from tennis_trivia.database.seed_catalog import seed_catalog_data


@pytest.fixture
def client(monkeypatch):
    """TestClient whose requests share one seeded in-memory database."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(engine)
    session_maker = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )
    state = {"ready": False}

    async def override_get_db_session():
        if not state["ready"]:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            async with session_maker() as seed_session:
                await seed_catalog_data(seed_session)
                await seed_session.commit()
            state["ready"] = True
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    monkeypatch.setattr(main, "seed_catalog", AsyncMock())
    monkeypatch.setattr(db, "init_database", AsyncMock())
    main.app.dependency_overrides[get_db_session] = override_get_db_session

    # One portal for the whole test keeps the aiosqlite connection on one loop
    with TestClient(main.app) as test_client:
        yield test_client

    main.app.dependency_overrides.clear()


def register(client, email="alice@example.com", password="password123", display_name="Alice"):
    response = client.post(
        "/api/v1/auth/register",
        json={"email": email, "password": password, "displayName": display_name},
    )
    assert response.status_code == 201, response.text
    return response.json()


def auth_header(tokens):
    return {"Authorization": f"Bearer {tokens['accessToken']}"}


def find_match(client, **params):
    response = client.get("/api/v1/matches", params=dict(params, limit=100))
    assert response.status_code == 200
    return response.json()["data"]


def test_session_lifecycle(client):
    tokens = register(client)
    assert tokens["expiresIn"] == "15m"

    me = client.get("/api/v1/auth/me", headers=auth_header(tokens))
    assert me.status_code == 200
    assert me.json()["email"] == "alice@example.com"

    # Login is case-insensitive on email
    login = client.post(
        "/api/v1/auth/login", json={"email": "ALICE@example.com", "password": "password123"}
    )
    assert login.status_code == 200

    rotated = client.post("/api/v1/auth/refresh", json={"refreshToken": tokens["refreshToken"]})
    assert rotated.status_code == 200
    assert rotated.json()["refreshToken"] != tokens["refreshToken"]

    # The consumed refresh token cannot be used again
    replay = client.post("/api/v1/auth/refresh", json={"refreshToken": tokens["refreshToken"]})
    assert replay.status_code == 401

    logout = client.post(
        "/api/v1/auth/logout", json={"refreshToken": rotated.json()["refreshToken"]}
    )
    assert logout.status_code == 204
    after_logout = client.post(
        "/api/v1/auth/refresh", json={"refreshToken": rotated.json()["refreshToken"]}
    )
    assert after_logout.status_code == 401


def test_register_twice(client):
    register(client)
    response = client.post(
        "/api/v1/auth/register", json={"email": "Alice@Example.com", "password": "password123"}
    )
    assert response.status_code == 409
    assert response.json()["code"] == "EMAIL_EXISTS"


def test_seeded_catalog_is_browsable(client):
    slams = client.get("/api/v1/tournaments", params={"isGrandSlam": "true"})
    assert slams.status_code == 200
    assert len(slams.json()["data"]) == 4
    assert all(t["isGrandSlam"] for t in slams.json()["data"])

    players = client.get("/api/v1/players", params={"search": "federer"})
    assert [p["slug"] for p in players.json()["data"]] == ["roger-federer"]

    federer = client.get("/api/v1/matches/player/slug/roger-federer")
    assert federer.status_code == 200
    assert federer.json()["count"] == len(federer.json()["data"]) > 0

    years = [m["year"] for m in find_match(client)]
    assert years == sorted(years, reverse=True)

    assert client.get("/api/v1/matches/player/slug/nobody").status_code == 404


def test_picks_and_rankings(client):
    headers = auth_header(register(client))

    assert client.get("/api/v1/me/picks", headers=headers).json() == {"data": None}

    best_of5_final = next(
        m for m in find_match(client, bestOf=5, isFinal="true") if m["tournament"]["isGrandSlam"]
    )
    best_of3 = find_match(client, bestOf=3, category="men_singles")[0]

    picks = client.put(
        "/api/v1/me/picks",
        headers=headers,
        json={"bestGrandSlamFinalMatchId": best_of5_final["id"]},
    )
    assert picks.status_code == 200
    assert picks.json()["data"]["bestGrandSlamFinal"]["id"] == best_of5_final["id"]

    wrong = client.put(
        "/api/v1/me/picks",
        headers=headers,
        json={"favoriteBestOf5MatchId": best_of3["id"]},
    )
    assert wrong.status_code == 400
    assert wrong.json()["code"] == "INVALID_PICK"

    ranking = client.put(
        "/api/v1/me/rankings/best-of-3", headers=headers, json={"matchIds": [best_of3["id"]]}
    )
    assert ranking.status_code == 200
    assert ranking.json()["data"][0]["position"] == 1

    rejected = client.put(
        "/api/v1/me/rankings/best-of-3",
        headers=headers,
        json={"matchIds": [best_of5_final["id"]]},
    )
    assert rejected.status_code == 400
    assert rejected.json()["code"] == "INVALID_IDS"

    stored = client.get("/api/v1/me/rankings/best-of-3", headers=headers)
    assert [e["match"]["id"] for e in stored.json()["data"]] == [best_of3["id"]]


def test_forum_flow(client):
    alice = auth_header(register(client))
    bob = auth_header(register(client, email="bob@example.com", display_name="Bob"))

    forum = client.post(
        "/api/v1/forums", headers=alice, json={"title": "Greatest Finals", "description": "Debate"}
    )
    assert forum.status_code == 201
    forum_id = forum.json()["id"]
    assert forum.json()["slug"] == "greatest-finals"

    duplicate = client.post("/api/v1/forums", headers=bob, json={"title": "Greatest finals!"})
    assert duplicate.status_code == 409

    forbidden = client.patch(f"/api/v1/forums/{forum_id}", headers=bob, json={"title": "Mine"})
    assert forbidden.status_code == 403

    thread = client.post(
        f"/api/v1/forums/{forum_id}/threads",
        headers=bob,
        json={"title": "Wimbledon 2008", "body": "Best ever."},
    )
    assert thread.status_code == 201
    thread_id = thread.json()["id"]

    reply = client.post(f"/api/v1/threads/{thread_id}/posts", headers=alice, json={"body": "Agreed"})
    assert reply.status_code == 201

    detail = client.get(f"/api/v1/threads/{thread_id}")
    assert detail.status_code == 200
    assert detail.json()["postsTotal"] == 2
    assert [p["body"] for p in detail.json()["posts"]] == ["Best ever.", "Agreed"]

    edit = client.patch(f"/api/v1/posts/{reply.json()['id']}", headers=bob, json={"body": "Nope"})
    assert edit.status_code == 403

    forums = client.get("/api/v1/forums")
    assert forums.json()["total"] == 1
    assert forums.json()["data"][0]["threadCount"] == 1
