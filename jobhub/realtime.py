# jobhub/realtime.py
"""
In-process change feed: insert events per table, delivered to registered listeners.

The gateway publishes each row after its transaction commits. Listeners may be scoped
by an equality filter on columns (e.g. {"worker_id": 7}). A Subscription is the
cancellation token returned on registration.
"""

import asyncio
import itertools
import logging
import threading
from typing import Callable, Optional

log = logging.getLogger(__name__)

RowListener = Callable[[dict], None]


class Subscription:
    """ Handle for one registered listener. unsubscribe() is idempotent. """

    def __init__(self, feed: "ChangeFeed", key: int, table: str, filter: Optional[dict]):
        self._feed = feed
        self._key = key
        self.table = table
        self.filter = dict(filter or {})
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self):
        if not self._active:
            return
        self._active = False
        self._feed._remove(self._key)
        log.debug(f"Listener {self._key} on '{self.table}' removed.")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.unsubscribe()


class ChangeFeed:
    """ Registry of insert listeners keyed by table. """

    def __init__(self):
        self._lock = threading.Lock()
        self._listeners = {}
        self._keys = itertools.count(1)

    def subscribe(self, table: str, on_row: RowListener, filter: Optional[dict] = None) -> Subscription:
        with self._lock:
            key = next(self._keys)
            self._listeners[key] = (table, dict(filter or {}), on_row)
        log.debug(f"Listener {key} registered on '{table}' with filter {filter or {}}.")
        return Subscription(self, key, table, filter)

    def _remove(self, key: int):
        with self._lock:
            self._listeners.pop(key, None)

    def listener_count(self, table: Optional[str] = None) -> int:
        with self._lock:
            if table is None:
                return len(self._listeners)
            return sum(1 for t, _, _ in self._listeners.values() if t == table)

    def publish(self, table: str, row: dict) -> int:
        """ Delivers row to every matching listener. Returns the number of deliveries. """
        with self._lock:
            targets = [
                (key, on_row) for key, (t, flt, on_row) in self._listeners.items()
                if t == table and all(row.get(column) == value for column, value in flt.items())
            ]
        delivered = 0
        for key, on_row in targets:
            try:
                on_row(row)
                delivered += 1
            except Exception as e:
                log.error(f"Listener {key} on '{table}' failed for row {row.get('id')}: {e}", exc_info=True)
        return delivered


async def stream_inserts(feed: ChangeFeed, table: str, filter: Optional[dict] = None):
    """ Async iterator over rows inserted into table; the listener goes away when the iterator closes. """
    loop = asyncio.get_running_loop()
    queue = asyncio.Queue()

    def on_row(row):
        loop.call_soon_threadsafe(queue.put_nowait, row)

    subscription = feed.subscribe(table, on_row, filter)
    try:
        while True:
            yield await queue.get()
    finally:
        subscription.unsubscribe()


# Shared by the HTTP app and the default gateway.
change_feed = ChangeFeed()
