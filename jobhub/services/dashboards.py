# jobhub/services/dashboards.py
"""
Per-role dashboards assembled from the feeds and listings. A tab whose data cannot be
loaded carries an error message; the rest of the dashboard still renders.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from jobhub.errors import AuthorizationError, JobHubError, NotFoundError
from jobhub.session import SessionUser, resolve_business, resolve_worker
from jobhub.services.admin_feed import list_all
from jobhub.services.job_posting import skill_summary
from jobhub.services.worker_feed import EMPTY_MESSAGE, list_notifications

log = logging.getLogger(__name__)


@dataclass
class DashboardTab:
    key: str
    label: str
    data: Any = None
    error: Optional[str] = None
    empty_message: Optional[str] = None


@dataclass
class Dashboard:
    role: str
    title: str
    tabs: list = field(default_factory=list)

    def tab(self, key: str) -> Optional[DashboardTab]:
        return next((t for t in self.tabs if t.key == key), None)


def _tab(key: str, label: str, load, empty_message: Optional[str] = None) -> DashboardTab:
    tab = DashboardTab(key=key, label=label)
    try:
        tab.data = load()
    except JobHubError as e:
        log.warning(f"Dashboard tab '{key}' failed: {e}")
        tab.error = e.message
    if empty_message and not tab.error and not tab.data:
        tab.empty_message = empty_message
    return tab


def _found(row: Optional[dict], message: str) -> dict:
    if row is None:
        raise NotFoundError(message)
    return row


def business_dashboard(gateway, user: SessionUser) -> Dashboard:
    dashboard = Dashboard(role="business", title="Business Dashboard")
    details = _tab(
        "business-details", "Business Details",
        lambda: _found(resolve_business(gateway, user), "Business not found for this account."),
    )
    business = details.data
    dashboard.tabs.append(details)

    def jobs():
        posted = gateway.fetch("jobs", {"business_id": business["id"]}, order="-posted_at") if business else []
        return {"skills": skill_summary(gateway), "posted": posted}

    def requests():
        if business is None:
            return []
        return gateway.fetch("worker_requests", {"business_id": business["id"]}, order="-created_at")

    dashboard.tabs.append(_tab("jobs", "Jobs", jobs))
    dashboard.tabs.append(_tab("requests", "Worker Requests", requests, empty_message="No worker requests yet"))
    return dashboard


def worker_dashboard(gateway, user: SessionUser) -> Dashboard:
    dashboard = Dashboard(role="worker", title="Worker Dashboard")
    profile = _tab(
        "profile", "Profile",
        lambda: _found(resolve_worker(gateway, user), "Worker profile not found for this account."),
    )
    worker = profile.data
    dashboard.tabs.append(profile)
    dashboard.tabs.append(_tab(
        "jobs", "Available Jobs",
        lambda: gateway.fetch("jobs", {"status": "active"}, order="-posted_at"),
        empty_message="No jobs available right now",
    ))
    dashboard.tabs.append(_tab(
        "notifications", "Job Notifications",
        lambda: list_notifications(gateway, worker["id"]) if worker else [],
        empty_message=EMPTY_MESSAGE,
    ))
    return dashboard


def admin_dashboard(gateway, user: SessionUser) -> Dashboard:
    dashboard = Dashboard(role="admin", title="Admin Dashboard")
    dashboard.tabs.append(_tab(
        "notifications", "Job Notifications", lambda: list_all(gateway), empty_message="No notifications yet"
    ))
    dashboard.tabs.append(_tab(
        "applications", "Job Applications",
        lambda: gateway.fetch("job_applications", order="-applied_at"),
        empty_message="No job applications yet",
    ))
    return dashboard


BUILDERS = {
    "business": business_dashboard,
    "worker": worker_dashboard,
    "admin": admin_dashboard,
}


def build_dashboard(gateway, user: SessionUser) -> Dashboard:
    builder = BUILDERS.get(user.user_type)
    if builder is None:
        raise AuthorizationError(f"No dashboard for role '{user.user_type}'.")
    log.debug(f"Building {user.user_type} dashboard for user {user.id}.")
    return builder(gateway, user)
