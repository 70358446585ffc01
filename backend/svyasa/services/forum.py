from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Literal, Optional

from sqlalchemy import delete, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from svyasa.core.errors import ModerationRejected, NotFoundError
from svyasa.core.logging import log
from svyasa.core.settings import Settings, settings as default_settings
from svyasa.models import Comment, Post
from svyasa.services.avatars import generate_random_seed
from svyasa.services.changefeed import ChangeEvent, ChangeFeed
from svyasa.services.moderation import TermFilter, get_filter, validate_submission
from svyasa.services.timefmt import as_utc, utcnow

SortMode = Literal["recent", "trending"]


@dataclass
class PostView:
    post: Post
    comment_count: int


@dataclass
class DashboardStats:
    total_posts: int
    total_comments: int
    active_posts: int


def _post_row(post: Post) -> dict:
    return {"id": str(post.id), "expires_at": post.expires_at.isoformat()}


def _comment_row(comment: Comment) -> dict:
    return {"id": str(comment.id), "post_id": str(comment.post_id)}


class ForumService:
    def __init__(
        self,
        db: AsyncSession,
        feed: ChangeFeed,
        settings: Settings | None = None,
        term_filter: TermFilter | None = None,
    ) -> None:
        self.db = db
        self.feed = feed
        self.settings = settings or default_settings
        self.term_filter = term_filter or get_filter(self.settings.banned_terms_path)

    # -- writes --------------------------------------------------------

    async def create_post(
        self, nickname: str, content: str, avatar_seed: str | None = None, now: datetime | None = None
    ) -> Post:
        created = as_utc(now) if now is not None else utcnow()
        post = Post(
            id=uuid.uuid4(),
            nickname=nickname,
            content=content,
            avatar_seed=avatar_seed or generate_random_seed(),
            created_at=created,
            expires_at=created + self.settings.post_ttl,
        )
        self.db.add(post)
        await self.db.commit()
        self.feed.publish(ChangeEvent("posts", "insert", _post_row(post)))
        return post

    async def create_comment(
        self,
        post_id: uuid.UUID,
        nickname: str,
        content: str,
        avatar_seed: str | None = None,
        now: datetime | None = None,
    ) -> Comment:
        created = as_utc(now) if now is not None else utcnow()
        await self.get_post(post_id, now=created)
        comment = Comment(
            id=uuid.uuid4(),
            post_id=post_id,
            nickname=nickname,
            content=content,
            avatar_seed=avatar_seed or generate_random_seed(),
            created_at=created,
        )
        self.db.add(comment)
        await self.db.commit()
        self.feed.publish(ChangeEvent("comments", "insert", _comment_row(comment)))
        return comment

    async def submit_post(self, nickname: str, content: str, now: datetime | None = None) -> Post:
        mod = validate_submission(nickname, content, self.term_filter)
        if not mod.valid:
            log.info("post rejected by moderation: %s", mod.kind)
            raise ModerationRejected(mod.kind, mod.message)
        return await self.create_post(nickname, content, generate_random_seed(), now=now)

    async def submit_comment(
        self, post_id: uuid.UUID, nickname: str, content: str, now: datetime | None = None
    ) -> Comment:
        mod = validate_submission(nickname, content, self.term_filter)
        if not mod.valid:
            log.info("comment on %s rejected by moderation: %s", post_id, mod.kind)
            raise ModerationRejected(mod.kind, mod.message)
        return await self.create_comment(post_id, nickname, content, generate_random_seed(), now=now)

    async def delete_post(self, post_id: uuid.UUID) -> None:
        post = (await self.db.execute(select(Post).where(Post.id == post_id))).scalar_one_or_none()
        if post is None:
            raise NotFoundError("Post not found")
        row = _post_row(post)
        comment_rows = [_comment_row(c) for c in await self.list_comments(post_id)]
        # explicit: SQLite does not enforce ON DELETE CASCADE unless asked to
        await self.db.execute(delete(Comment).where(Comment.post_id == post_id))
        await self.db.execute(delete(Post).where(Post.id == post_id))
        await self.db.commit()
        for crow in comment_rows:
            self.feed.publish(ChangeEvent("comments", "delete", crow))
        self.feed.publish(ChangeEvent("posts", "delete", row))

    # -- reads ---------------------------------------------------------

    async def get_post(self, post_id: uuid.UUID, now: datetime | None = None) -> Post:
        now = as_utc(now) if now is not None else utcnow()
        post = (
            await self.db.execute(select(Post).where(Post.id == post_id, Post.expires_at > now))
        ).scalar_one_or_none()
        if post is None:
            raise NotFoundError("Post not found or has expired")
        return post

    async def list_comments(self, post_id: uuid.UUID) -> list[Comment]:
        res = await self.db.execute(
            select(Comment).where(Comment.post_id == post_id).order_by(Comment.created_at.asc(), Comment.id.asc())
        )
        return list(res.scalars().all())

    async def count_comments(self, post_id: uuid.UUID) -> int:
        res = await self.db.execute(select(func.count()).select_from(Comment).where(Comment.post_id == post_id))
        return int(res.scalar_one())

    async def _with_counts(self, posts: list[Post]) -> list[PostView]:
        if not posts:
            return []
        res = await self.db.execute(
            select(Comment.post_id, func.count())
            .where(Comment.post_id.in_([p.id for p in posts]))
            .group_by(Comment.post_id)
        )
        counts = {pid: n for pid, n in res.all()}
        return [PostView(p, int(counts.get(p.id, 0))) for p in posts]

    async def list_active_posts(self, now: datetime | None = None, sort: SortMode = "recent") -> list[PostView]:
        now = as_utc(now) if now is not None else utcnow()
        res = await self.db.execute(
            select(Post).where(Post.expires_at > now).order_by(desc(Post.created_at), desc(Post.id))
        )
        views = await self._with_counts(list(res.scalars().all()))
        if sort == "trending":
            # stable sort keeps newest-first among equal counts
            views.sort(key=lambda v: v.comment_count, reverse=True)
        return views

    async def list_all_posts(self) -> list[PostView]:
        res = await self.db.execute(select(Post).order_by(desc(Post.created_at), desc(Post.id)))
        return await self._with_counts(list(res.scalars().all()))

    async def dashboard(self, now: Optional[datetime] = None) -> DashboardStats:
        now = as_utc(now) if now is not None else utcnow()
        total_posts = (await self.db.execute(select(func.count()).select_from(Post))).scalar_one()
        total_comments = (await self.db.execute(select(func.count()).select_from(Comment))).scalar_one()
        active = (
            await self.db.execute(select(func.count()).select_from(Post).where(Post.expires_at > now))
        ).scalar_one()
        return DashboardStats(int(total_posts), int(total_comments), int(active))
