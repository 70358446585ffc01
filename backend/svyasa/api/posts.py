from __future__ import annotations
from typing import Literal
from uuid import UUID
from fastapi import APIRouter, Depends, Response

from svyasa.api.deps import get_admin_session, get_forum
from svyasa.api.schemas import CommentCreateIn, CommentOut, PostCreateIn, PostOut
from svyasa.core.logging import log
from svyasa.services.auth import AdminSession
from svyasa.services.forum import ForumService
from svyasa.services.timefmt import utcnow

router = APIRouter(tags=["content"])


@router.get("/posts", response_model=list[PostOut])
async def list_posts(sort: Literal["recent", "trending"] = "recent", forum: ForumService = Depends(get_forum)):
    now = utcnow()
    views = await forum.list_active_posts(now=now, sort=sort)
    return [PostOut.build(v.post, v.comment_count, now) for v in views]


@router.post("/posts", response_model=PostOut, status_code=201)
async def create_post(data: PostCreateIn, forum: ForumService = Depends(get_forum)):
    post = await forum.submit_post(data.nickname, data.content)
    return PostOut.build(post, 0)


@router.get("/posts/{post_id}", response_model=PostOut)
async def get_post(post_id: UUID, forum: ForumService = Depends(get_forum)):
    now = utcnow()
    post = await forum.get_post(post_id, now=now)
    return PostOut.build(post, await forum.count_comments(post_id), now)


@router.delete("/posts/{post_id}", status_code=204)
async def delete_post(
    post_id: UUID,
    session: AdminSession = Depends(get_admin_session),
    forum: ForumService = Depends(get_forum),
):
    await forum.delete_post(post_id)
    log.info("admin %s deleted post %s", session.admin_id, post_id)
    return Response(status_code=204)


@router.get("/posts/{post_id}/comments", response_model=list[CommentOut])
async def list_comments(post_id: UUID, forum: ForumService = Depends(get_forum)):
    now = utcnow()
    return [CommentOut.build(c, now) for c in await forum.list_comments(post_id)]


@router.post("/posts/{post_id}/comments", response_model=CommentOut, status_code=201)
async def create_comment(post_id: UUID, data: CommentCreateIn, forum: ForumService = Depends(get_forum)):
    comment = await forum.submit_comment(post_id, data.nickname, data.content)
    return CommentOut.build(comment)
