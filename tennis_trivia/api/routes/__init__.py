"""
API routes - combined router from all domain modules.

Shared infrastructure (limiter, pagination bounds) lives here; every
sub-router imports what it needs from this package.
"""

from fastapi import APIRouter
from slowapi import Limiter
from slowapi.util import get_remote_address

from tennis_trivia.config import get_settings
# Pagination bounds are re-exported for the sub-routers
from tennis_trivia.utils.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE  # noqa: F401

# ---------------------------------------------------------------------------
# Shared rate limiter
# ---------------------------------------------------------------------------
limiter = Limiter(key_func=get_remote_address)
if get_settings().is_test:

    def no_op_limit(*args, **kwargs):
        """No-op decorator for test mode - doesn't apply any rate limiting."""
        def decorator(func):
            return func
        return decorator

    limiter.limit = lambda *args, **kwargs: no_op_limit()

# Applied to register, login and refresh
CREDENTIALS_RATE_LIMIT = "10/minute"

# ---------------------------------------------------------------------------
# Import sub-routers and combine
# ---------------------------------------------------------------------------
from tennis_trivia.api.routes.auth import router as auth_router  # noqa: E402
from tennis_trivia.api.routes.tournaments import router as tournaments_router  # noqa: E402
from tennis_trivia.api.routes.players import router as players_router  # noqa: E402
from tennis_trivia.api.routes.matches import router as matches_router  # noqa: E402
from tennis_trivia.api.routes.picks import router as picks_router  # noqa: E402
from tennis_trivia.api.routes.rankings import router as rankings_router  # noqa: E402
from tennis_trivia.api.routes.forums import router as forums_router  # noqa: E402
from tennis_trivia.api.routes.threads import router as threads_router  # noqa: E402
from tennis_trivia.api.routes.posts import router as posts_router  # noqa: E402

router = APIRouter(prefix="/api/v1")
router.include_router(auth_router)
router.include_router(tournaments_router)
router.include_router(players_router)
router.include_router(matches_router)
router.include_router(picks_router)
router.include_router(rankings_router)
router.include_router(forums_router)
router.include_router(threads_router)
router.include_router(posts_router)
