import uuid

from svyasa.services.changefeed import ChangeEvent, ChangeFeed


def test_subscribers_receive_matching_table_only():
    feed = ChangeFeed()
    posts, comments = [], []
    feed.subscribe("posts", posts.append)
    feed.subscribe("comments", comments.append)

    feed.publish(ChangeEvent("posts", "insert", {"id": "1"}))

    assert [e.row["id"] for e in posts] == ["1"]
    assert comments == []


def test_row_filter_is_equality_on_fields():
    feed = ChangeFeed()
    pid = uuid.uuid4()
    got = []
    feed.subscribe("comments", got.append, filter={"post_id": pid})

    feed.publish(ChangeEvent("comments", "insert", {"post_id": str(uuid.uuid4())}))
    feed.publish(ChangeEvent("comments", "insert", {"post_id": str(pid)}))

    assert len(got) == 1
    assert got[0].row["post_id"] == str(pid)


def test_cancel_stops_delivery_and_is_idempotent():
    feed = ChangeFeed()
    got = []
    sub = feed.subscribe("posts", got.append)
    assert feed.subscriber_count == 1

    sub.cancel()
    sub.cancel()
    feed.publish(ChangeEvent("posts", "delete", {"id": "1"}))

    assert got == []
    assert feed.subscriber_count == 0
    assert sub.active is False


def test_failing_subscriber_does_not_break_others():
    feed = ChangeFeed()
    got = []

    def boom(event):
        raise RuntimeError("view crashed")

    feed.subscribe("posts", boom)
    feed.subscribe("posts", got.append)

    delivered = feed.publish(ChangeEvent("posts", "insert", {"id": "1"}))

    assert delivered == 1
    assert len(got) == 1


def test_subscriber_may_cancel_during_publish():
    feed = ChangeFeed()
    calls = []
    holder = {}

    def once(event):
        calls.append(event)
        holder["sub"].cancel()

    holder["sub"] = feed.subscribe("posts", once)
    feed.publish(ChangeEvent("posts", "insert"))
    feed.publish(ChangeEvent("posts", "insert"))

    assert len(calls) == 1
