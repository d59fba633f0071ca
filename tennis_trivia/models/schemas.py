"""
Pydantic models for API request/response validation.

JSON uses camelCase field names; Python code uses snake_case. Every model
accepts either form on input and emits camelCase.
"""

import re
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from tennis_trivia.services.forum_service import ForumUpdate
from tennis_trivia.services.picks_service import PicksUpdate

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class CamelModel(BaseModel):
    """Base model with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# Auth


class RegisterRequest(CamelModel):
    """Request to create an account."""

    email: str = Field(max_length=255)
    password: str = Field(min_length=8)
    display_name: Optional[str] = Field(default=None, max_length=100)

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        value = value.strip()
        if not _EMAIL_RE.match(value):
            raise ValueError("Invalid email address")
        return value


class LoginRequest(CamelModel):
    """Request to login with email and password."""

    email: str
    password: str

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        value = value.strip()
        if not _EMAIL_RE.match(value):
            raise ValueError("Invalid email address")
        return value


class RefreshTokenRequest(CamelModel):
    """Body for refresh and logout."""

    refresh_token: str = Field(min_length=1)


class UserResponse(CamelModel):
    id: int
    email: str
    display_name: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class TokenResponse(CamelModel):
    """Token pair returned by refresh."""

    access_token: str
    refresh_token: str
    expires_in: str


class AuthResponse(TokenResponse):
    """Token pair plus the signed-in user (register and login)."""

    user: UserResponse


# Catalog


class TournamentSummary(CamelModel):
    id: int
    name: str
    slug: str
    is_grand_slam: bool


class TournamentResponse(TournamentSummary):
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class PlayerSummary(CamelModel):
    id: int
    name: str
    slug: str
    country_code: str


class PlayerResponse(PlayerSummary):
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class MatchResponse(CamelModel):
    """Match with its tournament and both players."""

    id: int
    tournament_id: int
    year: int
    round: str
    is_final: bool
    best_of: int
    category: str
    player1_id: int
    player2_id: int
    score: str
    title: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    tournament: Optional[TournamentSummary] = None
    player1: Optional[PlayerSummary] = None
    player2: Optional[PlayerSummary] = None


class TournamentListResponse(CamelModel):
    data: List[TournamentResponse]


class PlayerListResponse(CamelModel):
    data: List[PlayerResponse]


class MatchListResponse(CamelModel):
    data: List[MatchResponse]


class PlayerMatchesResponse(CamelModel):
    count: int
    data: List[MatchResponse]


# Picks


class SetPicksRequest(CamelModel):
    """
    Partial update of a user's picks.

    Omitted fields are left unchanged; null clears a pick.
    """

    favorite_player_id: Optional[int] = None
    favorite_best_of5_match_id: Optional[int] = None
    favorite_best_of3_match_id: Optional[int] = None
    best_grand_slam_final_match_id: Optional[int] = None

    def to_update(self) -> PicksUpdate:
        """Build a PicksUpdate carrying only the fields present in the request."""
        return PicksUpdate(**{name: getattr(self, name) for name in self.model_fields_set})


class PicksResponse(CamelModel):
    id: int
    user_id: int
    favorite_player_id: Optional[int] = None
    favorite_best_of5_match_id: Optional[int] = None
    favorite_best_of3_match_id: Optional[int] = None
    best_grand_slam_final_match_id: Optional[int] = None
    favorite_player: Optional[PlayerResponse] = None
    favorite_best_of5_match: Optional[MatchResponse] = None
    favorite_best_of3_match: Optional[MatchResponse] = None
    best_grand_slam_final: Optional[MatchResponse] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class PicksEnvelope(CamelModel):
    """data is null when the user has never set picks."""

    data: Optional[PicksResponse] = None


# Rankings


class MatchIdsRequest(CamelModel):
    match_ids: List[int]


class PlayerIdsRequest(CamelModel):
    player_ids: List[int]


class RankedMatch(CamelModel):
    position: int
    match: MatchResponse


class RankedPlayer(CamelModel):
    position: int
    player: PlayerResponse


class RankingResponse(CamelModel):
    data: List[Union[RankedMatch, RankedPlayer]]


# Forums


class UserSummary(CamelModel):
    id: int
    email: str
    display_name: Optional[str] = None


class CreateForumRequest(CamelModel):
    title: str = Field(min_length=1, max_length=200)
    slug: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = Field(default=None, max_length=2000)


class UpdateForumRequest(CamelModel):
    """Partial forum update. description may be null to clear it."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)

    @field_validator("title")
    @classmethod
    def title_not_null(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            raise ValueError("title cannot be null")
        return value

    def to_update(self) -> ForumUpdate:
        return ForumUpdate(**{name: getattr(self, name) for name in self.model_fields_set})


class ForumResponse(CamelModel):
    id: int
    title: str
    slug: str
    description: Optional[str] = None
    created_by: int
    creator: Optional[UserSummary] = None
    thread_count: int = 0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class ForumListResponse(CamelModel):
    data: List[ForumResponse]
    total: int


class CreateThreadRequest(CamelModel):
    title: str = Field(min_length=1, max_length=300)
    body: Optional[str] = Field(default=None, max_length=10000)


class ThreadResponse(CamelModel):
    id: int
    forum_id: int
    author_id: int
    title: str
    body: Optional[str] = None
    author: Optional[UserSummary] = None
    post_count: Optional[int] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class ThreadListResponse(CamelModel):
    data: List[ThreadResponse]
    total: int


class ForumSummary(CamelModel):
    id: int
    title: str
    slug: str


class PostRequest(CamelModel):
    """Body for creating or editing a post."""

    body: str = Field(min_length=1, max_length=10000)


class PostResponse(CamelModel):
    id: int
    thread_id: int
    author_id: int
    body: str
    author: Optional[UserSummary] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class ThreadDetailResponse(ThreadResponse):
    """Thread with its forum and a page of posts."""

    forum: ForumSummary
    posts: List[PostResponse]
    posts_total: int


class HealthResponse(BaseModel):
    ok: bool = True
