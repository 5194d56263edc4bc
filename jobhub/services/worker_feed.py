# jobhub/services/worker_feed.py

import enum
import logging
import threading
from datetime import datetime, timezone

from jobhub.errors import GatewayError, RespondError, ValidationError

log = logging.getLogger(__name__)

EMPTY_MESSAGE = "No job notifications yet"
LOAD_FAILED_MESSAGE = "Failed to load notifications"


class Decision(str, enum.Enum):
    ACCEPT = "accept"
    DECLINE = "decline"

    @property
    def status(self) -> str:
        return "accepted" if self is Decision.ACCEPT else "declined"


def list_notifications(gateway, worker_id: int) -> list:
    """ Notifications addressed to the worker, each with its job, newest first. """
    return gateway.fetch(
        "worker_notifications", {"worker_id": worker_id}, order="-created_at", embed=("job",)
    )


def respond(gateway, notification_id: int, job_id: int, worker_id: int, decision) -> dict:
    """
    Accepts or declines a job notification. Returns the application row on accept,
    None on decline. The status update and the application insert are separate writes;
    a failed insert leaves the notification accepted (see reconcile_job).
    """
    decision = Decision(decision)
    verb = decision.value
    try:
        notification = gateway.fetch_one("worker_notifications", {"id": notification_id})
    except GatewayError as e:
        log.error(f"Error loading notification {notification_id}: {e}")
        raise RespondError(f"Failed to {verb} job")
    if notification is None or notification["worker_id"] != worker_id:
        log.warning(f"Worker {worker_id} tried to {verb} notification {notification_id} not addressed to them.")
        raise ValidationError("Notification not found.")
    if notification["job_id"] != job_id:
        raise ValidationError("Notification does not refer to this job.")
    if notification["status"] != "unread":
        log.warning(f"Notification {notification_id} already {notification['status']}.")
        raise ValidationError(f"This job was already {notification['status']}.")

    try:
        gateway.update("worker_notifications", notification_id, {
            "status": decision.status,
            "action_required": False,
        })
    except GatewayError as e:
        log.error(f"Error updating notification {notification_id} to {decision.status}: {e}")
        raise RespondError(f"Failed to {verb} job")

    application = None
    if decision is Decision.ACCEPT:
        try:
            application = gateway.insert("job_applications", {
                "job_id": job_id,
                "worker_id": worker_id,
                "status": "pending",
                "applied_at": datetime.now(timezone.utc),
            })[0]
        except GatewayError as e:
            log.error(
                f"Notification {notification_id} accepted but application for worker {worker_id}, "
                f"job {job_id} not created: {e}"
            )
            raise RespondError(f"Failed to {verb} job", notification_updated=True)

    log.info(f"Worker {worker_id} {decision.status} job {job_id} (notification {notification_id}).")
    return application


class WorkerNotificationFeed:
    """
    One worker's live notification list. open() loads the list and starts listening
    for notifications addressed to the worker; close() stops listening.
    """

    empty_message = EMPTY_MESSAGE

    def __init__(self, gateway, worker_id: int):
        self.gateway = gateway
        self.worker_id = worker_id
        self.error = None
        self.loading = False
        self._items = []
        self._processing = set()
        self._lock = threading.Lock()
        self._subscription = None

    @property
    def notifications(self) -> list:
        with self._lock:
            return list(self._items)

    @property
    def is_empty(self) -> bool:
        return not self.notifications

    @property
    def processing(self) -> frozenset:
        with self._lock:
            return frozenset(self._processing)

    def open(self) -> list:
        # listen before loading; rows pushed during the load are kept ahead of it
        if self._subscription is None:
            self._subscription = self.gateway.subscribe_insert(
                "worker_notifications", self._on_insert, filter={"worker_id": self.worker_id}
            )
        self.loading = True
        try:
            items = list_notifications(self.gateway, self.worker_id)
            with self._lock:
                loaded = {n["id"] for n in items}
                self._items = [n for n in self._items if n["id"] not in loaded] + items
            self.error = None
        except GatewayError as e:
            log.error(f"Error fetching notifications for worker {self.worker_id}: {e}")
            self.error = LOAD_FAILED_MESSAGE
        finally:
            self.loading = False
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
        # pushed rows arrive without their job
        row = dict(row)
        if row.get("job") is None:
            try:
                row["job"] = self.gateway.fetch_one("jobs", {"id": row["job_id"]})
            except GatewayError as e:
                log.warning(f"Job {row['job_id']} for pushed notification {row.get('id')} not loaded: {e}")
                row["job"] = None
        with self._lock:
            if any(n["id"] == row["id"] for n in self._items):
                return
            self._items.insert(0, row)
        log.debug(f"Notification {row.get('id')} pushed to worker {self.worker_id}.")

    def respond(self, notification_id: int, decision) -> dict:
        decision = Decision(decision)
        with self._lock:
            target = next((n for n in self._items if n["id"] == notification_id), None)
            if target is None:
                raise ValidationError("Notification not found.")
            if notification_id in self._processing:
                raise ValidationError("A response for this job is already in progress.")
            self._processing.add(notification_id)
        try:
            application = respond(
                self.gateway, notification_id, target["job_id"], self.worker_id, decision
            )
            with self._lock:
                self._items = [
                    dict(n, status=decision.status, action_required=False) if n["id"] == notification_id else n
                    for n in self._items
                ]
            return application
        finally:
            with self._lock:
                self._processing.discard(notification_id)
