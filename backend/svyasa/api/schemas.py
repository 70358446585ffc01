from __future__ import annotations
from pydantic import BaseModel, Field, field_validator
from typing import Optional
from uuid import UUID
from datetime import datetime

from svyasa.models.post import NICKNAME_MAX, POST_CONTENT_MAX
from svyasa.models.comment import COMMENT_CONTENT_MAX
from svyasa.services.avatars import avatar_url
from svyasa.services.timefmt import relative_time, time_remaining


class _Submission(BaseModel):
    # trimmed here, once; moderation and storage see the trimmed strings
    @field_validator("nickname", "content", mode="before", check_fields=False)
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v


class PostCreateIn(_Submission):
    nickname: str = Field(min_length=1, max_length=NICKNAME_MAX)
    content: str = Field(min_length=1, max_length=POST_CONTENT_MAX)


class CommentCreateIn(_Submission):
    nickname: str = Field(min_length=1, max_length=NICKNAME_MAX)
    content: str = Field(min_length=1, max_length=COMMENT_CONTENT_MAX)


class LoginIn(BaseModel):
    email: str = Field(min_length=3, max_length=254)
    password: str = Field(min_length=1, max_length=128)


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime


class PostOut(BaseModel):
    id: UUID
    nickname: str
    avatar_seed: str
    avatar_url: str
    content: str
    created_at: datetime
    expires_at: datetime
    relative_time: str
    time_remaining: str
    comment_count: int = 0

    @classmethod
    def build(cls, post, comment_count: int = 0, now: Optional[datetime] = None) -> "PostOut":
        return cls(
            id=post.id,
            nickname=post.nickname,
            avatar_seed=post.avatar_seed,
            avatar_url=avatar_url(post.avatar_seed),
            content=post.content,
            created_at=post.created_at,
            expires_at=post.expires_at,
            relative_time=relative_time(post.created_at, now),
            time_remaining=time_remaining(post.expires_at, now),
            comment_count=comment_count,
        )


class CommentOut(BaseModel):
    id: UUID
    post_id: UUID
    nickname: str
    avatar_seed: str
    avatar_url: str
    content: str
    created_at: datetime
    relative_time: str

    @classmethod
    def build(cls, comment, now: Optional[datetime] = None) -> "CommentOut":
        return cls(
            id=comment.id,
            post_id=comment.post_id,
            nickname=comment.nickname,
            avatar_seed=comment.avatar_seed,
            avatar_url=avatar_url(comment.avatar_seed),
            content=comment.content,
            created_at=comment.created_at,
            relative_time=relative_time(comment.created_at, now),
        )


class DashboardOut(BaseModel):
    total_posts: int
    total_comments: int
    active_posts: int
    posts: list[PostOut]
