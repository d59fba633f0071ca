"""
HTTP-level tests for the API routes.

Services are mocked so these tests check routing, validation, status
codes, the error body shape and camelCase serialization without a database.
"""

import pytest
from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient

from tennis_trivia.api.main import app
from tennis_trivia.services import auth_service, user_service
from tennis_trivia.services.forum_service import ForumUpdate
from tennis_trivia.utils.errors import ConflictError, ForbiddenError, NotFoundError, UnauthorizedError
from tennis_trivia.utils.unset import UNSET

USER = {
    "id": 1,
    "email": "alice@example.com",
    "display_name": "Alice",
    "created_at": "2026-01-01T00:00:00+00:00",
    "updated_at": "2026-01-01T00:00:00+00:00",
}

PLAYER = {
    "id": 7,
    "name": "Roger Federer",
    "slug": "roger-federer",
    "country_code": "SUI",
    "created_at": "2026-01-01T00:00:00+00:00",
    "updated_at": "2026-01-01T00:00:00+00:00",
}

FORUM = {
    "id": 3,
    "title": "General",
    "slug": "general",
    "description": None,
    "created_by": 1,
    "creator": {"id": 1, "email": "alice@example.com", "display_name": "Alice"},
    "thread_count": 0,
    "created_at": "2026-01-01T00:00:00+00:00",
    "updated_at": "2026-01-01T00:00:00+00:00",
}


@pytest.fixture
def client():
    """Create a TestClient for the app."""
    return TestClient(app)


def make_client_with_auth(monkeypatch, user_id=1):
    """Helper to create an authenticated test client."""
    def fake_verify_token(token, settings):
        return {"sub": str(user_id), "email": USER["email"]}

    async def fake_get_user_by_id(session, uid):
        return dict(USER, id=user_id)

    monkeypatch.setattr(auth_service, "verify_token", fake_verify_token, raising=True)
    monkeypatch.setattr(user_service, "get_user_by_id", fake_get_user_by_id, raising=True)

    return TestClient(app), {"Authorization": "Bearer dummy"}


# ============================================================================
# Health and error shape
# ============================================================================


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_missing_authorization_header(client):
    """Protected routes return the shared error body with a Bearer challenge."""
    response = client.get("/api/v1/auth/me")

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"
    assert response.json() == {
        "statusCode": 401,
        "error": "Unauthorized",
        "message": "Missing or invalid Authorization header",
    }


def test_invalid_token(client, monkeypatch):
    monkeypatch.setattr(auth_service, "verify_token", lambda token, settings: None)

    response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer garbage"})

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid or expired token"


def test_token_for_deleted_user(client, monkeypatch):
    async def fake_get_user_by_id(session, uid):
        return None

    monkeypatch.setattr(auth_service, "verify_token", lambda token, settings: {"sub": "42"})
    monkeypatch.setattr(user_service, "get_user_by_id", fake_get_user_by_id)

    response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer dummy"})

    assert response.status_code == 401
    assert response.json()["message"] == "User not found"


def test_unknown_route_uses_error_shape(client):
    response = client.get("/api/v1/nothing-here")
    assert response.status_code == 404
    assert response.json()["statusCode"] == 404
    assert response.json()["error"] == "Not Found"


@patch("tennis_trivia.services.catalog_service.get_player", new_callable=AsyncMock)
def test_unhandled_error_returns_500(mock_get):
    mock_get.side_effect = RuntimeError("database exploded")
    client = TestClient(app, raise_server_exceptions=False)

    response = client.get("/api/v1/players/1")

    assert response.status_code == 500
    assert response.json() == {
        "statusCode": 500,
        "error": "Internal Server Error",
        "message": "Internal server error",
    }


# ============================================================================
# Auth
# ============================================================================


@patch("tennis_trivia.services.session_service.register", new_callable=AsyncMock)
def test_register_returns_201_camel_case(mock_register, client):
    mock_register.return_value = {
        "user": USER,
        "access_token": "access",
        "refresh_token": "refresh",
        "expires_in": "15m",
    }

    response = client.post(
        "/api/v1/auth/register",
        json={"email": "alice@example.com", "password": "password123", "displayName": "Alice"},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["accessToken"] == "access"
    assert data["refreshToken"] == "refresh"
    assert data["expiresIn"] == "15m"
    assert data["user"]["displayName"] == "Alice"
    assert "passwordHash" not in data["user"]
    assert mock_register.call_args.kwargs["display_name"] == "Alice"


def test_register_short_password(client):
    response = client.post(
        "/api/v1/auth/register", json={"email": "alice@example.com", "password": "short"}
    )

    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert "password" in body["message"]


def test_register_invalid_email(client):
    response = client.post(
        "/api/v1/auth/register", json={"email": "not-an-email", "password": "password123"}
    )
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


@patch("tennis_trivia.services.session_service.register", new_callable=AsyncMock)
def test_register_duplicate_email(mock_register, client):
    mock_register.side_effect = ConflictError("Email already registered", code="EMAIL_EXISTS")

    response = client.post(
        "/api/v1/auth/register", json={"email": "alice@example.com", "password": "password123"}
    )

    assert response.status_code == 409
    assert response.json()["code"] == "EMAIL_EXISTS"


@patch("tennis_trivia.services.session_service.login", new_callable=AsyncMock)
def test_login_bad_credentials(mock_login, client):
    mock_login.side_effect = UnauthorizedError("Invalid email or password")

    response = client.post(
        "/api/v1/auth/login", json={"email": "alice@example.com", "password": "wrong-password"}
    )

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid email or password"


@patch("tennis_trivia.services.session_service.refresh", new_callable=AsyncMock)
def test_refresh_returns_new_pair(mock_refresh, client):
    mock_refresh.return_value = {"access_token": "a2", "refresh_token": "r2", "expires_in": "15m"}

    response = client.post("/api/v1/auth/refresh", json={"refreshToken": "r1"})

    assert response.status_code == 200
    assert response.json() == {"accessToken": "a2", "refreshToken": "r2", "expiresIn": "15m"}
    assert mock_refresh.call_args.args[1] == "r1"


def test_refresh_requires_token(client):
    response = client.post("/api/v1/auth/refresh", json={})
    assert response.status_code == 400


@patch("tennis_trivia.services.session_service.logout", new_callable=AsyncMock)
def test_logout_returns_204(mock_logout, client):
    response = client.post("/api/v1/auth/logout", json={"refreshToken": "whatever"})

    assert response.status_code == 204
    assert response.content == b""
    mock_logout.assert_called_once()


def test_me(monkeypatch):
    client, headers = make_client_with_auth(monkeypatch)

    response = client.get("/api/v1/auth/me", headers=headers)

    assert response.status_code == 200
    assert response.json()["email"] == "alice@example.com"
    assert response.json()["displayName"] == "Alice"


# ============================================================================
# Catalog
# ============================================================================


@patch("tennis_trivia.services.catalog_service.list_tournaments", new_callable=AsyncMock)
def test_list_tournaments_filter(mock_list, client):
    mock_list.return_value = []

    response = client.get("/api/v1/tournaments?isGrandSlam=true&limit=5")

    assert response.status_code == 200
    assert response.json() == {"data": []}
    assert mock_list.call_args.kwargs["is_grand_slam"] is True
    assert mock_list.call_args.kwargs["limit"] == 5


@pytest.mark.parametrize("limit", [0, 101])
def test_pagination_bounds(client, limit):
    response = client.get(f"/api/v1/players?limit={limit}")
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


@patch("tennis_trivia.services.catalog_service.get_player", new_callable=AsyncMock)
def test_get_player(mock_get, client):
    mock_get.return_value = PLAYER

    response = client.get("/api/v1/players/7")

    assert response.status_code == 200
    assert response.json()["countryCode"] == "SUI"


@patch("tennis_trivia.services.catalog_service.get_player", new_callable=AsyncMock)
def test_get_player_not_found(mock_get, client):
    mock_get.side_effect = NotFoundError("Player not found")

    response = client.get("/api/v1/players/99999")

    assert response.status_code == 404
    assert response.json()["message"] == "Player not found"


def test_list_matches_rejects_best_of_4(client):
    response = client.get("/api/v1/matches?bestOf=4")
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


@patch("tennis_trivia.services.catalog_service.list_matches", new_callable=AsyncMock)
def test_list_matches_forwards_filters(mock_list, client):
    mock_list.return_value = []

    response = client.get("/api/v1/matches?tournamentId=2&year=2008&bestOf=5&isFinal=true")

    assert response.status_code == 200
    kwargs = mock_list.call_args.kwargs
    assert kwargs["tournament_id"] == 2
    assert kwargs["year"] == 2008
    assert kwargs["best_of"] == 5
    assert kwargs["is_final"] is True


@patch("tennis_trivia.services.catalog_service.list_matches_for_player_slug", new_callable=AsyncMock)
def test_matches_by_player_slug(mock_list, client):
    mock_list.return_value = {"count": 0, "data": []}

    response = client.get("/api/v1/matches/player/slug/roger-federer")

    assert response.status_code == 200
    assert response.json() == {"count": 0, "data": []}
    assert mock_list.call_args.args[1] == "roger-federer"


# ============================================================================
# Picks and rankings
# ============================================================================


def test_picks_require_auth(client):
    assert client.get("/api/v1/me/picks").status_code == 401


@patch("tennis_trivia.services.picks_service.get_picks", new_callable=AsyncMock)
def test_get_picks_when_never_set(mock_get, monkeypatch):
    client, headers = make_client_with_auth(monkeypatch)
    mock_get.return_value = None

    response = client.get("/api/v1/me/picks", headers=headers)

    assert response.status_code == 200
    assert response.json() == {"data": None}


@patch("tennis_trivia.services.picks_service.set_picks", new_callable=AsyncMock)
def test_set_picks_passes_only_supplied_fields(mock_set, monkeypatch):
    client, headers = make_client_with_auth(monkeypatch)
    mock_set.return_value = {
        "id": 1,
        "user_id": 1,
        "favorite_player_id": 7,
        "favorite_best_of5_match_id": None,
        "favorite_best_of3_match_id": None,
        "best_grand_slam_final_match_id": None,
        "favorite_player": PLAYER,
        "favorite_best_of5_match": None,
        "favorite_best_of3_match": None,
        "best_grand_slam_final": None,
    }

    response = client.put(
        "/api/v1/me/picks",
        headers=headers,
        json={"favoritePlayerId": 7, "favoriteBestOf3MatchId": None},
    )

    assert response.status_code == 200
    assert response.json()["data"]["favoritePlayer"]["slug"] == "roger-federer"
    update = mock_set.call_args.args[2]
    assert update.favorite_player_id == 7
    assert update.favorite_best_of3_match_id is None
    assert update.favorite_best_of5_match_id is UNSET
    assert update.best_grand_slam_final_match_id is UNSET


@patch("tennis_trivia.services.rankings_service.set_ranking", new_callable=AsyncMock)
def test_set_player_ranking(mock_set, monkeypatch):
    client, headers = make_client_with_auth(monkeypatch)
    mock_set.return_value = [{"position": 1, "player": PLAYER}]

    response = client.put(
        "/api/v1/me/rankings/players", headers=headers, json={"playerIds": [7]}
    )

    assert response.status_code == 200
    assert response.json()["data"][0]["position"] == 1
    assert response.json()["data"][0]["player"]["slug"] == "roger-federer"
    assert mock_set.call_args.args[2].name == "players"
    assert mock_set.call_args.args[3] == [7]


def test_ranking_body_must_be_a_list(monkeypatch):
    client, headers = make_client_with_auth(monkeypatch)

    response = client.put(
        "/api/v1/me/rankings/best-of-5", headers=headers, json={"matchIds": "1,2"}
    )

    assert response.status_code == 400


def test_unknown_ranking_kind(monkeypatch):
    client, headers = make_client_with_auth(monkeypatch)

    response = client.get("/api/v1/me/rankings/best-of-7", headers=headers)

    assert response.status_code == 404


# ============================================================================
# Forums
# ============================================================================


@patch("tennis_trivia.services.forum_service.create_forum", new_callable=AsyncMock)
def test_create_forum_returns_201(mock_create, monkeypatch):
    client, headers = make_client_with_auth(monkeypatch)
    mock_create.return_value = FORUM

    response = client.post("/api/v1/forums", headers=headers, json={"title": "General"})

    assert response.status_code == 201
    assert response.json()["slug"] == "general"
    assert response.json()["threadCount"] == 0
    assert mock_create.call_args.args[1] == 1


def test_create_forum_requires_auth(client):
    response = client.post("/api/v1/forums", json={"title": "General"})
    assert response.status_code == 401


@patch("tennis_trivia.services.forum_service.update_forum", new_callable=AsyncMock)
def test_update_forum_clear_description(mock_update, monkeypatch):
    client, headers = make_client_with_auth(monkeypatch)
    mock_update.return_value = FORUM

    response = client.patch("/api/v1/forums/3", headers=headers, json={"description": None})

    assert response.status_code == 200
    assert mock_update.call_args.args[3] == ForumUpdate(description=None)


def test_update_forum_null_title(monkeypatch):
    client, headers = make_client_with_auth(monkeypatch)

    response = client.patch("/api/v1/forums/3", headers=headers, json={"title": None})

    assert response.status_code == 400


@patch("tennis_trivia.services.forum_service.update_forum", new_callable=AsyncMock)
def test_update_forum_not_creator(mock_update, monkeypatch):
    client, headers = make_client_with_auth(monkeypatch, user_id=2)
    mock_update.side_effect = ForbiddenError("Not allowed to update this forum")

    response = client.patch("/api/v1/forums/3", headers=headers, json={"title": "Mine now"})

    assert response.status_code == 403
    assert response.json()["error"] == "Forbidden"


@patch("tennis_trivia.services.forum_service.create_post", new_callable=AsyncMock)
def test_create_post_in_missing_thread(mock_create, monkeypatch):
    client, headers = make_client_with_auth(monkeypatch)
    mock_create.side_effect = NotFoundError("Thread not found")

    response = client.post("/api/v1/threads/999/posts", headers=headers, json={"body": "Hi"})

    assert response.status_code == 404


def test_create_post_empty_body(monkeypatch):
    client, headers = make_client_with_auth(monkeypatch)

    response = client.post("/api/v1/threads/1/posts", headers=headers, json={"body": ""})

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"
