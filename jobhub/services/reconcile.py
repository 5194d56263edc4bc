# jobhub/services/reconcile.py
"""
Repairs the side effects that job posting and job responses leave behind when a
best-effort write fails: a job without its admin notification, matching workers who
were never notified, and accepted notifications without an application.
Running it twice changes nothing the second time.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from jobhub.errors import NotFoundError
from jobhub.services.job_posting import admin_notification_row, worker_notification_rows

log = logging.getLogger(__name__)


@dataclass
class ReconcileReport:
    job_id: int
    admin_notification_created: bool = False
    notifications_created: int = 0
    applications_created: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.admin_notification_created or self.notifications_created or self.applications_created)


def reconcile_job(gateway, job_id: int) -> ReconcileReport:
    job = gateway.fetch_one("jobs", {"id": job_id})
    if job is None:
        raise NotFoundError(f"Job with ID {job_id} not found.")
    report = ReconcileReport(job_id=job_id)

    business = gateway.fetch_one("businesses", {"id": job["business_id"]}) if job["business_id"] else None
    business_name = business["name"] if business else job["company"]

    if gateway.fetch_one("admin_notifications", {"job_id": job_id}) is None and business is not None:
        gateway.insert("admin_notifications", admin_notification_row(job, business))
        report.admin_notification_created = True

    notifications = gateway.fetch("worker_notifications", {"job_id": job_id})
    notified = {n["worker_id"] for n in notifications}
    missing = [w["id"] for w in gateway.fetch("workers", {"skill": job["title"]}, order="id") if w["id"] not in notified]
    if missing:
        gateway.insert("worker_notifications", worker_notification_rows(job, business_name, missing))
        report.notifications_created = len(missing)

    applied = {a["worker_id"] for a in gateway.fetch("job_applications", {"job_id": job_id})}
    orphaned = sorted({n["worker_id"] for n in notifications if n["status"] == "accepted"} - applied)
    if orphaned:
        now = datetime.now(timezone.utc)
        gateway.insert("job_applications", [
            {"job_id": job_id, "worker_id": worker_id, "status": "pending", "applied_at": now}
            for worker_id in orphaned
        ])
        report.applications_created = len(orphaned)

    if report.changed:
        log.info(
            f"Reconciled job {job_id}: admin_notification={report.admin_notification_created}, "
            f"notifications={report.notifications_created}, applications={report.applications_created}"
        )
    else:
        log.debug(f"Job {job_id} already consistent.")
    return report


@dataclass
class ReconcileSummary:
    reports: list = field(default_factory=list)
    failed_job_ids: list = field(default_factory=list)


def reconcile_active_jobs(gateway) -> ReconcileSummary:
    summary = ReconcileSummary()
    for job in gateway.fetch("jobs", {"status": "active"}, order="id"):
        try:
            summary.reports.append(reconcile_job(gateway, job["id"]))
        except Exception as e:
            log.error(f"Reconciling job {job['id']} failed: {e}", exc_info=True)
            summary.failed_job_ids.append(job["id"])
    return summary
