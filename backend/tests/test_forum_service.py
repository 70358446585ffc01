from datetime import timedelta
import uuid

import pytest

from svyasa.core.errors import ModerationRejected, NotFoundError
from svyasa.services.moderation import CONTENT_MESSAGE, NICKNAME_MESSAGE

from conftest import T0


@pytest.mark.asyncio
async def test_submit_post_end_to_end(forum, feed, settings):
    events = []
    feed.subscribe("posts", events.append)

    post = await forum.submit_post("Anna", "I love someone at college", now=T0)

    assert post.nickname == "Anna"
    assert post.content == "I love someone at college"
    assert post.avatar_seed
    assert post.created_at == T0
    assert post.expires_at - post.created_at == settings.post_ttl
    assert [(e.table, e.op) for e in events] == [("posts", "insert")]

    listed = await forum.list_active_posts(now=T0 + timedelta(seconds=1))
    assert [v.post.id for v in listed] == [post.id]

    almost = post.expires_at - timedelta(seconds=1)
    assert len(await forum.list_active_posts(now=almost)) == 1
    assert await forum.list_active_posts(now=post.expires_at) == []
    assert await forum.list_active_posts(now=post.expires_at + timedelta(hours=1)) == []

    # expired, not deleted
    assert [v.post.id for v in await forum.list_all_posts()] == [post.id]


@pytest.mark.asyncio
async def test_rejected_content_never_reaches_store(forum, feed):
    events = []
    feed.subscribe("posts", events.append)

    with pytest.raises(ModerationRejected) as exc:
        await forum.submit_post("Anna", "you should kys", now=T0)

    assert exc.value.kind == "content"
    assert exc.value.message == CONTENT_MESSAGE
    assert events == []
    assert (await forum.dashboard(now=T0)).total_posts == 0


@pytest.mark.asyncio
async def test_rejected_nickname_reported_first(forum):
    with pytest.raises(ModerationRejected) as exc:
        await forum.submit_post("bitch", "you should kys", now=T0)
    assert exc.value.kind == "nickname"
    assert exc.value.message == NICKNAME_MESSAGE


@pytest.mark.asyncio
async def test_active_posts_newest_first(forum):
    a = await forum.create_post("a", "first", "s1", now=T0)
    b = await forum.create_post("b", "second", "s2", now=T0 + timedelta(minutes=1))
    c = await forum.create_post("c", "third", "s3", now=T0 + timedelta(minutes=2))

    views = await forum.list_active_posts(now=T0 + timedelta(minutes=3))
    assert [v.post.id for v in views] == [c.id, b.id, a.id]


@pytest.mark.asyncio
async def test_trending_orders_by_comment_count(forum):
    quiet = await forum.create_post("a", "quiet", "s1", now=T0)
    busy = await forum.create_post("b", "busy", "s2", now=T0 + timedelta(minutes=1))
    mid = await forum.create_post("c", "mid", "s3", now=T0 + timedelta(minutes=2))
    for i in range(3):
        await forum.create_comment(busy.id, "x", f"reply {i}", now=T0 + timedelta(minutes=5 + i))
    await forum.create_comment(mid.id, "y", "reply", now=T0 + timedelta(minutes=9))

    now = T0 + timedelta(minutes=10)
    trending = await forum.list_active_posts(now=now, sort="trending")
    assert [(v.post.id, v.comment_count) for v in trending] == [(busy.id, 3), (mid.id, 1), (quiet.id, 0)]

    recent = await forum.list_active_posts(now=now)
    assert [v.post.id for v in recent] == [mid.id, busy.id, quiet.id]


@pytest.mark.asyncio
async def test_comments_oldest_first_and_counted(forum, feed):
    post = await forum.create_post("a", "hello", "s", now=T0)
    events = []
    feed.subscribe("comments", events.append, filter={"post_id": post.id})

    c1 = await forum.submit_comment(post.id, "b", "first!", now=T0 + timedelta(minutes=1))
    c2 = await forum.submit_comment(post.id, "c", "second", now=T0 + timedelta(minutes=2))

    comments = await forum.list_comments(post.id)
    assert [c.id for c in comments] == [c1.id, c2.id]
    assert await forum.count_comments(post.id) == 2
    assert len(events) == 2


@pytest.mark.asyncio
async def test_comment_moderation(forum):
    post = await forum.create_post("a", "hello", "s", now=T0)
    with pytest.raises(ModerationRejected) as exc:
        await forum.submit_comment(post.id, "b", "go to hell", now=T0)
    assert exc.value.kind == "content"
    assert await forum.count_comments(post.id) == 0


@pytest.mark.asyncio
async def test_comment_on_missing_or_expired_post(forum, settings):
    with pytest.raises(NotFoundError):
        await forum.create_comment(uuid.uuid4(), "a", "hi", now=T0)

    post = await forum.create_post("a", "hello", "s", now=T0)
    with pytest.raises(NotFoundError):
        await forum.create_comment(post.id, "b", "late", now=T0 + settings.post_ttl)


@pytest.mark.asyncio
async def test_get_post(forum, settings):
    post = await forum.create_post("a", "hello", "s", now=T0)
    assert (await forum.get_post(post.id, now=T0)).id == post.id
    with pytest.raises(NotFoundError):
        await forum.get_post(post.id, now=T0 + settings.post_ttl)
    with pytest.raises(NotFoundError):
        await forum.get_post(uuid.uuid4(), now=T0)


@pytest.mark.asyncio
async def test_delete_post_removes_comments(forum, feed):
    post = await forum.create_post("a", "hello", "s", now=T0)
    await forum.create_comment(post.id, "b", "reply", now=T0)
    events = []
    feed.subscribe("posts", events.append)

    await forum.delete_post(post.id)

    assert [(e.op, e.row["id"]) for e in events] == [("delete", str(post.id))]
    assert await forum.list_all_posts() == []
    assert await forum.count_comments(post.id) == 0
    with pytest.raises(NotFoundError):
        await forum.delete_post(post.id)


@pytest.mark.asyncio
async def test_dashboard_counts(forum, settings):
    old = await forum.create_post("a", "old", "s", now=T0 - settings.post_ttl - timedelta(hours=1))
    fresh = await forum.create_post("b", "fresh", "s", now=T0)
    await forum.create_comment(fresh.id, "c", "reply", now=T0)

    stats = await forum.dashboard(now=T0 + timedelta(minutes=1))
    assert (stats.total_posts, stats.total_comments, stats.active_posts) == (2, 1, 1)
    assert {v.post.id for v in await forum.list_all_posts()} == {old.id, fresh.id}


@pytest.mark.asyncio
async def test_delete_post_announces_comment_removals(forum, feed):
    post = await forum.create_post("a", "hello", "s", now=T0)
    other = await forum.create_post("b", "other", "s", now=T0)
    c1 = await forum.create_comment(post.id, "b", "one", now=T0)
    c2 = await forum.create_comment(post.id, "c", "two", now=T0 + timedelta(seconds=1))
    await forum.create_comment(other.id, "d", "elsewhere", now=T0)
    events = []
    feed.subscribe("comments", events.append, filter={"post_id": post.id})

    await forum.delete_post(post.id)

    assert [(e.op, e.row["id"]) for e in events] == [("delete", str(c1.id)), ("delete", str(c2.id))]
    assert await forum.count_comments(other.id) == 1
