from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Mapping, Optional, Sequence

from svyasa.core.logging import log
from svyasa.services.changefeed import ChangeEvent, ChangeFeed, Subscription

Fetch = Callable[[], Awaitable[Any]]
OnUpdate = Callable[[Any], Awaitable[None]]


class LiveQuery:
    """Keeps a view's data fresh from change events and a wall-clock poll.

    ``fetch`` runs once at start, after every matching change event and every
    ``interval`` seconds. Each result goes to ``on_update``. Bursts of events
    collapse into a single pending refresh. ``also_watch`` lists further
    (table, filter) pairs that trigger a refresh too.
    """

    def __init__(
        self,
        feed: ChangeFeed,
        table: str,
        fetch: Fetch,
        on_update: OnUpdate,
        filter: Optional[Mapping[str, Any]] = None,
        interval: float = 60.0,
        also_watch: Sequence[tuple[str, Optional[Mapping[str, Any]]]] = (),
    ) -> None:
        self._feed = feed
        self._table = table
        self._watch = [(table, filter), *also_watch]
        self._fetch = fetch
        self._on_update = on_update
        self._interval = interval
        self._wake = asyncio.Event()
        self._subs: list[Subscription] = []
        self._task: asyncio.Task | None = None
        self.refreshes = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def _on_change(self, event: ChangeEvent) -> None:
        self._wake.set()

    async def refresh(self) -> None:
        try:
            result = await self._fetch()
        except Exception:
            # keep the view alive; the next tick or event retries
            log.exception("live refresh of %s failed", self._table)
            return
        self.refreshes += 1
        await self._on_update(result)

    async def _run(self) -> None:
        await self.refresh()
        while True:
            try:
                await asyncio.wait_for(self._wake.wait(), timeout=self._interval)
            except asyncio.TimeoutError:
                pass
            self._wake.clear()
            await self.refresh()

    def start(self) -> None:
        if self.running:
            return
        self._subs = [self._feed.subscribe(t, self._on_change, f) for t, f in self._watch]
        self._task = asyncio.create_task(self._run())

    async def wait(self) -> None:
        if self._task is not None:
            await self._task

    async def close(self) -> None:
        subs, self._subs = self._subs, []
        for sub in subs:
            sub.cancel()
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        except Exception as e:
            # on_update failed earlier, typically a consumer that went away
            log.debug("live view of %s ended with %r", self._table, e)
