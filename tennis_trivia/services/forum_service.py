"""
Forum service layer: forums, threads and posts.

Forums are editable only by their creator and posts only by their author.
Threads are not editable once created.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Union

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tennis_trivia.database.models import Forum, Post, Thread
from tennis_trivia.services.user_service import user_summary
from tennis_trivia.utils.constants import DEFAULT_PAGE_SIZE
from tennis_trivia.utils.datetime_utils import isoformat_or_none
from tennis_trivia.utils.errors import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from tennis_trivia.utils.slugify import slugify
from tennis_trivia.utils.unset import UNSET, UnsetType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ForumUpdate:
    """
    Requested change to a forum.

    title is UNSET or a new title; description is UNSET, None (clear) or text.
    """

    title: Union[str, UnsetType] = UNSET
    description: Union[str, None, UnsetType] = UNSET


def _clean_optional(text: Optional[str]) -> Optional[str]:
    """Trim text, mapping blank values to None."""
    if text is None:
        return None
    text = text.strip()
    return text or None


def _require_text(text: str, field: str) -> str:
    text = (text or "").strip()
    if not text:
        raise BadRequestError(f"{field} must not be empty")
    return text


# Serialization helpers


def _forum_to_dict(forum: Forum, thread_count: int = 0) -> Dict:
    return {
        "id": forum.id,
        "title": forum.title,
        "slug": forum.slug,
        "description": forum.description,
        "created_by": forum.created_by,
        "creator": user_summary(forum.creator),
        "thread_count": thread_count,
        "created_at": isoformat_or_none(forum.created_at),
        "updated_at": isoformat_or_none(forum.updated_at),
    }


def _forum_summary(forum: Forum) -> Dict:
    return {"id": forum.id, "title": forum.title, "slug": forum.slug}


def _thread_to_dict(thread: Thread, post_count: Optional[int] = None) -> Dict:
    data = {
        "id": thread.id,
        "forum_id": thread.forum_id,
        "author_id": thread.author_id,
        "title": thread.title,
        "body": thread.body,
        "author": user_summary(thread.author),
        "created_at": isoformat_or_none(thread.created_at),
        "updated_at": isoformat_or_none(thread.updated_at),
    }
    if post_count is not None:
        data["post_count"] = post_count
    return data


def _post_to_dict(post: Post) -> Dict:
    return {
        "id": post.id,
        "thread_id": post.thread_id,
        "author_id": post.author_id,
        "body": post.body,
        "author": user_summary(post.author),
        "created_at": isoformat_or_none(post.created_at),
        "updated_at": isoformat_or_none(post.updated_at),
    }


def _thread_count_subquery():
    return (
        select(func.count(Thread.id))
        .where(Thread.forum_id == Forum.id)
        .correlate(Forum)
        .scalar_subquery()
    )


def _post_count_subquery():
    return (
        select(func.count(Post.id))
        .where(Post.thread_id == Thread.id)
        .correlate(Thread)
        .scalar_subquery()
    )


# Forums


async def list_forums(
    session: AsyncSession, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0
) -> Dict:
    """
    List forums, newest first.

    Args:
        session: Database session
        limit: Page size
        offset: Rows to skip

    Returns:
        Dict with data (forums with creator and thread_count) and total
    """
    result = await session.execute(
        select(Forum, _thread_count_subquery().label("thread_count"))
        .options(selectinload(Forum.creator))
        .order_by(Forum.created_at.desc(), Forum.id.desc())
        .limit(limit)
        .offset(offset)
        .execution_options(populate_existing=True)
    )
    data = [_forum_to_dict(forum, thread_count) for forum, thread_count in result.all()]

    total = (await session.execute(select(func.count(Forum.id)))).scalar() or 0
    return {"data": data, "total": total}


async def get_forum(session: AsyncSession, forum_id: int) -> Dict:
    """
    Get a forum with its creator and thread count.

    Raises:
        NotFoundError: If the forum does not exist
    """
    result = await session.execute(
        select(Forum, _thread_count_subquery().label("thread_count"))
        .options(selectinload(Forum.creator))
        .where(Forum.id == forum_id)
        .execution_options(populate_existing=True)
    )
    row = result.first()
    if not row:
        raise NotFoundError("Forum not found")
    forum, thread_count = row
    return _forum_to_dict(forum, thread_count)


async def create_forum(
    session: AsyncSession,
    user_id: int,
    title: str,
    description: Optional[str] = None,
    slug: Optional[str] = None,
) -> Dict:
    """
    Create a forum.

    The slug is the supplied slug (trimmed) or, when absent or blank, one
    generated from the title.

    Args:
        session: Database session
        user_id: Creator's user ID
        title: Forum title
        description: Optional description (blank is stored as null)
        slug: Optional explicit slug

    Returns:
        Created forum dictionary

    Raises:
        BadRequestError: If no slug can be derived
        ConflictError: If the slug is already taken
    """
    title = _require_text(title, "Title")
    final_slug = (slug or "").strip() or slugify(title)
    if not final_slug:
        raise BadRequestError("Slug could not be generated from title")

    existing = await session.execute(select(Forum.id).where(Forum.slug == final_slug))
    if existing.scalar_one_or_none() is not None:
        raise ConflictError("Forum slug already exists", code="SLUG_EXISTS")

    forum = Forum(
        title=title,
        slug=final_slug,
        description=_clean_optional(description),
        created_by=user_id,
    )
    session.add(forum)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise ConflictError("Forum slug already exists", code="SLUG_EXISTS")

    logger.info(f"User {user_id} created forum {forum.id} ({final_slug})")
    return await get_forum(session, forum.id)


async def update_forum(
    session: AsyncSession, forum_id: int, user_id: int, update: ForumUpdate
) -> Dict:
    """
    Update a forum's title and/or description.

    Args:
        session: Database session
        forum_id: Forum ID
        user_id: Requesting user's ID
        update: Requested change

    Returns:
        Updated forum dictionary

    Raises:
        NotFoundError: If the forum does not exist
        ForbiddenError: If the user did not create the forum
    """
    forum = await session.get(Forum, forum_id)
    if not forum:
        raise NotFoundError("Forum not found")
    if forum.created_by != user_id:
        raise ForbiddenError("Not allowed to update this forum")

    if update.title is not UNSET:
        forum.title = _require_text(update.title, "Title")
    if update.description is not UNSET:
        forum.description = _clean_optional(update.description)
    await session.commit()

    return await get_forum(session, forum_id)


# Threads


async def _ensure_forum_exists(session: AsyncSession, forum_id: int) -> None:
    result = await session.execute(select(Forum.id).where(Forum.id == forum_id))
    if result.scalar_one_or_none() is None:
        raise NotFoundError("Forum not found")


async def list_threads(
    session: AsyncSession, forum_id: int, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0
) -> Dict:
    """
    List a forum's threads, newest first, with author and post count.

    Raises:
        NotFoundError: If the forum does not exist
    """
    await _ensure_forum_exists(session, forum_id)

    result = await session.execute(
        select(Thread, _post_count_subquery().label("post_count"))
        .options(selectinload(Thread.author))
        .where(Thread.forum_id == forum_id)
        .order_by(Thread.created_at.desc(), Thread.id.desc())
        .limit(limit)
        .offset(offset)
        .execution_options(populate_existing=True)
    )
    data = [_thread_to_dict(thread, post_count) for thread, post_count in result.all()]

    total = (
        await session.execute(select(func.count(Thread.id)).where(Thread.forum_id == forum_id))
    ).scalar() or 0
    return {"data": data, "total": total}


async def create_thread(
    session: AsyncSession, forum_id: int, user_id: int, title: str, body: Optional[str] = None
) -> Dict:
    """
    Create a thread in a forum.

    A non-blank body is also stored as the thread's first post, in the
    same transaction.

    Args:
        session: Database session
        forum_id: Forum ID
        user_id: Author's user ID
        title: Thread title
        body: Optional opening text

    Returns:
        Created thread dictionary

    Raises:
        NotFoundError: If the forum does not exist
    """
    await _ensure_forum_exists(session, forum_id)

    title = _require_text(title, "Title")
    body = _clean_optional(body)
    thread = Thread(forum_id=forum_id, author_id=user_id, title=title, body=body)
    session.add(thread)
    try:
        await session.flush()
        if body:
            session.add(Post(thread_id=thread.id, author_id=user_id, body=body))
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info(f"User {user_id} created thread {thread.id} in forum {forum_id}")
    result = await session.execute(
        select(Thread, _post_count_subquery().label("post_count"))
        .options(selectinload(Thread.author))
        .where(Thread.id == thread.id)
        .execution_options(populate_existing=True)
    )
    created, post_count = result.one()
    return _thread_to_dict(created, post_count)


async def get_thread(
    session: AsyncSession, thread_id: int, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0
) -> Dict:
    """
    Get a thread with its forum, author and a page of posts (oldest first).

    Returns:
        Thread dictionary with forum, posts and posts_total

    Raises:
        NotFoundError: If the thread does not exist
    """
    result = await session.execute(
        select(Thread)
        .options(selectinload(Thread.forum), selectinload(Thread.author))
        .where(Thread.id == thread_id)
        .execution_options(populate_existing=True)
    )
    thread = result.scalar_one_or_none()
    if not thread:
        raise NotFoundError("Thread not found")

    posts_result = await session.execute(
        select(Post)
        .options(selectinload(Post.author))
        .where(Post.thread_id == thread_id)
        .order_by(Post.created_at.asc(), Post.id.asc())
        .limit(limit)
        .offset(offset)
        .execution_options(populate_existing=True)
    )
    posts = [_post_to_dict(p) for p in posts_result.scalars().all()]
    posts_total = (
        await session.execute(select(func.count(Post.id)).where(Post.thread_id == thread_id))
    ).scalar() or 0

    data = _thread_to_dict(thread)
    data["forum"] = _forum_summary(thread.forum)
    data["posts"] = posts
    data["posts_total"] = posts_total
    return data


# Posts


async def _load_post(session: AsyncSession, post_id: int) -> Optional[Post]:
    result = await session.execute(
        select(Post)
        .options(selectinload(Post.author))
        .where(Post.id == post_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def create_post(session: AsyncSession, thread_id: int, user_id: int, body: str) -> Dict:
    """
    Reply to a thread.

    Raises:
        NotFoundError: If the thread does not exist
        BadRequestError: If the body is blank
    """
    result = await session.execute(select(Thread.id).where(Thread.id == thread_id))
    if result.scalar_one_or_none() is None:
        raise NotFoundError("Thread not found")

    post = Post(thread_id=thread_id, author_id=user_id, body=_require_text(body, "Body"))
    session.add(post)
    await session.commit()

    return _post_to_dict(await _load_post(session, post.id))


async def update_post(session: AsyncSession, post_id: int, user_id: int, body: str) -> Dict:
    """
    Edit a post's body.

    Raises:
        NotFoundError: If the post does not exist
        ForbiddenError: If the user is not the post's author
    """
    post = await session.get(Post, post_id)
    if not post:
        raise NotFoundError("Post not found")
    if post.author_id != user_id:
        raise ForbiddenError("Not allowed to edit this post")

    post.body = _require_text(body, "Body")
    await session.commit()

    return _post_to_dict(await _load_post(session, post_id))
