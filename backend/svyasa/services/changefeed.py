"""In-process change notifications for the posts and comments tables.

Writers publish a ``ChangeEvent`` after their transaction commits. Readers
register a callback per table with an optional equality filter on row fields
and keep the returned ``Subscription`` to release it when they go away.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any, Callable, Literal, Mapping, Optional

from svyasa.core.logging import log

ChangeOp = Literal["insert", "update", "delete"]


@dataclass(frozen=True)
class ChangeEvent:
    table: str
    op: ChangeOp
    row: Mapping[str, Any] = field(default_factory=dict)


ChangeCallback = Callable[[ChangeEvent], None]


class Subscription:
    def __init__(self, feed: "ChangeFeed", sub_id: int, table: str) -> None:
        self._feed = feed
        self.id = sub_id
        self.table = table
        self.active = True

    def cancel(self) -> None:
        if not self.active:
            return
        self.active = False
        self._feed._remove(self.id)


class ChangeFeed:
    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self._subs: dict[int, tuple[str, Optional[dict[str, Any]], ChangeCallback]] = {}

    def subscribe(self, table: str, callback: ChangeCallback, filter: Optional[Mapping[str, Any]] = None) -> Subscription:
        sub_id = next(self._ids)
        self._subs[sub_id] = (table, dict(filter) if filter else None, callback)
        return Subscription(self, sub_id, table)

    def _remove(self, sub_id: int) -> None:
        self._subs.pop(sub_id, None)

    @property
    def subscriber_count(self) -> int:
        return len(self._subs)

    @staticmethod
    def _matches(event: ChangeEvent, flt: Optional[dict[str, Any]]) -> bool:
        if not flt:
            return True
        return all(str(event.row.get(k)) == str(v) for k, v in flt.items())

    def publish(self, event: ChangeEvent) -> int:
        delivered = 0
        # snapshot: callbacks may cancel subscriptions while we iterate
        for sub_id, (table, flt, cb) in list(self._subs.items()):
            if table != event.table or not self._matches(event, flt):
                continue
            try:
                cb(event)
                delivered += 1
            except Exception:
                log.exception("change feed subscriber %s failed on %s/%s", sub_id, event.table, event.op)
        return delivered
