from __future__ import annotations
import asyncio
from typing import Any, Literal
from uuid import UUID
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from svyasa.api.schemas import CommentOut, PostOut
from svyasa.core.errors import NotFoundError
from svyasa.core.logging import log
from svyasa.services.forum import ForumService
from svyasa.services.live import LiveQuery
from svyasa.services.timefmt import utcnow

router = APIRouter(tags=["realtime"])

POST_GONE_CLOSE_CODE = 4404


class SocketSender:
    """Serializes sends from the receive loop and the refresh task."""

    def __init__(self, ws: WebSocket) -> None:
        self.ws = ws
        self._lock = asyncio.Lock()

    async def send_json(self, data: Any) -> None:
        async with self._lock:
            await self.ws.send_json(data)

    async def close_with_error(self, detail: str, code: int = POST_GONE_CLOSE_CODE) -> None:
        async with self._lock:
            await self.ws.send_json({"type": "error", "detail": detail})
            await self.ws.close(code=code)


async def _serve(ws: WebSocket, sender: SocketSender, live: LiveQuery) -> None:
    # subscription and poll timer live exactly as long as the socket
    live.start()
    try:
        while True:
            text = await ws.receive_text()
            if text == "ping":
                await sender.send_json({"type": "pong"})
    except WebSocketDisconnect:
        pass
    finally:
        await live.close()


@router.websocket("/ws/posts")
async def posts_stream(ws: WebSocket, sort: Literal["recent", "trending"] = "recent"):
    state = ws.app.state
    await ws.accept()
    sender = SocketSender(ws)

    async def fetch():
        async with state.sessionmaker() as db:
            now = utcnow()
            views = await ForumService(db, state.feed, state.settings).list_active_posts(now=now, sort=sort)
            return [PostOut.build(v.post, v.comment_count, now).model_dump(mode="json") for v in views]

    async def push(items):
        await sender.send_json({"type": "posts", "items": items})

    live = LiveQuery(state.feed, "posts", fetch, push, interval=state.settings.poll_interval_seconds)
    await _serve(ws, sender, live)


@router.websocket("/ws/posts/{post_id}/comments")
async def comments_stream(ws: WebSocket, post_id: UUID):
    state = ws.app.state
    await ws.accept()
    sender = SocketSender(ws)

    async def fetch():
        async with state.sessionmaker() as db:
            forum = ForumService(db, state.feed, state.settings)
            now = utcnow()
            try:
                await forum.get_post(post_id, now=now)
            except NotFoundError as e:
                return e
            comments = await forum.list_comments(post_id)
            return [CommentOut.build(c, now).model_dump(mode="json") for c in comments]

    async def push(items):
        if isinstance(items, NotFoundError):
            # deleted or expired; the receive loop sees the disconnect and tears down
            await sender.close_with_error(items.message)
            return
        await sender.send_json({"type": "comments", "post_id": str(post_id), "items": items})

    live = LiveQuery(
        state.feed,
        "comments",
        fetch,
        push,
        filter={"post_id": post_id},
        interval=state.settings.poll_interval_seconds,
        also_watch=[("posts", {"id": post_id})],
    )
    log.debug("comment stream opened for %s", post_id)
    await _serve(ws, sender, live)
