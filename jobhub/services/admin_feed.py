# jobhub/services/admin_feed.py

import logging
import threading

from jobhub.errors import GatewayError, ValidationError

log = logging.getLogger(__name__)

ADMIN_DECISIONS = ("approved", "rejected")


def list_all(gateway) -> list:
    return gateway.fetch("admin_notifications", order="-created_at")


def set_status(gateway, notification_id: int, status: str) -> dict:
    """
    Marks a pending admin notification approved or rejected. Bookkeeping only: the job
    and its worker notifications are not touched.
    """
    if status not in ADMIN_DECISIONS:
        raise ValidationError(f"Status must be one of: {', '.join(ADMIN_DECISIONS)}.")
    current = gateway.fetch_one("admin_notifications", {"id": notification_id})
    if current is None:
        raise GatewayError(
            f"No admin_notifications row with id {notification_id}.", "update", "admin_notifications",
            kind="not_found",
        )
    if current["status"] != "pending":
        log.warning(f"Admin notification {notification_id} is {current['status']}, not pending.")
        raise ValidationError(f"This notification was already {current['status']}.")
    row = gateway.update("admin_notifications", notification_id, {"status": status})
    log.info(f"Admin notification {notification_id} marked {status}.")
    return row


class AdminNotificationFeed:
    """ Live list of every admin notification, newest first. """

    def __init__(self, gateway):
        self.gateway = gateway
        self.error = None
        self._items = []
        self._lock = threading.Lock()
        self._subscription = None

    @property
    def notifications(self) -> list:
        with self._lock:
            return list(self._items)

    def open(self) -> list:
        if self._subscription is None:
            self._subscription = self.gateway.subscribe_insert("admin_notifications", self._on_insert)
        try:
            items = list_all(self.gateway)
            with self._lock:
                loaded = {n["id"] for n in items}
                self._items = [n for n in self._items if n["id"] not in loaded] + items
            self.error = None
        except GatewayError as e:
            log.error(f"Error fetching admin notifications: {e}")
            self.error = "Failed to fetch notifications"
        return self.notifications

    def close(self):
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def _on_insert(self, row: dict):
        with self._lock:
            if any(n["id"] == row["id"] for n in self._items):
                return
            self._items.insert(0, row)

    def set_status(self, notification_id: int, status: str) -> dict:
        row = set_status(self.gateway, notification_id, status)
        with self._lock:
            self._items = [dict(n, status=status) if n["id"] == notification_id else n for n in self._items]
        return row
