# jobhub/services/job_posting.py
"""
Business side of the marketplace: posting a job and fanning it out.

post_job runs one load-bearing part (validate, resolve the business, insert the job)
followed by best-effort steps (admin notification, skill lookup, worker notifications).
A best-effort failure never fails the posting; it is logged and reported as a
StepOutcome on the returned PostingResult.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from jobhub.db.data import DEFAULT_SKILLS, JOB_TYPES, REQUEST_PRIORITIES
from jobhub.errors import GatewayError, PostingError, ValidationError
from jobhub.session import SessionUser, resolve_business
from jobhub.utils import validate_user_email

log = logging.getLogger(__name__)

REQUIRED_FIELDS_MESSAGE = "Please fill in all required fields"
SUGGESTION_LIMIT = 3


def _positive_int(value, label: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{label} must be a positive whole number.")
    if number < 1 or (isinstance(value, float) and not value.is_integer()):
        raise ValidationError(f"{label} must be a positive whole number.")
    return number


@dataclass
class JobForm:
    title: str = ""
    description: str = ""
    company: str = ""
    location: str = ""
    job_type: str = "full-time"
    category: str = ""
    salary: str = ""
    requirements: str = ""
    contact_email: str = ""
    workers_needed: int = 1

    def validate(self):
        if not (self.title or "").strip() or not (self.description or "").strip():
            raise ValidationError(REQUIRED_FIELDS_MESSAGE)
        self.workers_needed = _positive_int(self.workers_needed, "Number of workers needed")
        if self.job_type not in JOB_TYPES:
            raise ValidationError(f"Job type must be one of: {', '.join(JOB_TYPES)}.")
        if self.contact_email:
            try:
                self.contact_email = validate_user_email(self.contact_email)
            except ValueError as ve:
                raise ValidationError(str(ve))
        return self


@dataclass
class StepOutcome:
    name: str
    ok: bool
    error: Optional[str] = None
    count: int = 0


@dataclass
class PostingResult:
    job: dict
    steps: list = field(default_factory=list)
    notified_worker_ids: list = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return all(step.ok for step in self.steps)

    def step(self, name: str) -> Optional[StepOutcome]:
        return next((s for s in self.steps if s.name == name), None)


def _now():
    return datetime.now(timezone.utc)


def admin_notification_row(job: dict, business: dict) -> dict:
    skill, needed = job["title"], job["workers_needed"]
    return {
        "type": "new_job",
        "job_id": job["id"],
        "business_id": business["id"],
        "business_name": business["name"],
        "skill": skill,
        "workers_needed": needed,
        "created_at": _now(),
        "status": "info",
        "title": f"New Job Posted: {skill}",
        "message": f"{business['name']} has posted a job for {needed} {skill}(s)",
    }


def worker_notification_rows(job: dict, business_name: str, worker_ids) -> list:
    skill, needed = job["title"], job["workers_needed"]
    created_at = _now()
    return [
        {
            "worker_id": worker_id,
            "job_id": job["id"],
            "type": "job_available",
            "created_at": created_at,
            "status": "unread",
            "title": f"New {skill} job available",
            "message": f"{business_name} is looking for {needed} {skill}(s)",
            "action_required": True,
            "action_type": "accept_decline",
        }
        for worker_id in worker_ids
    ]


def post_job(gateway, form: JobForm, session_user: SessionUser) -> PostingResult:
    form.validate()  # raises ValidationError before any gateway call
    log.info(f"PostJob attempt by user {session_user.id}: skill={form.title}, workers_needed={form.workers_needed}")

    try:
        business = resolve_business(gateway, session_user)
    except GatewayError as e:
        log.error(f"Error fetching business data for {session_user.email}: {e}")
        raise PostingError("Failed to fetch business information")
    if business is None:
        log.warning(f"PostJob failed: No business registered for {session_user.email}.")
        raise PostingError("Failed to fetch business information")

    try:
        job = gateway.insert("jobs", {
            "title": form.title,
            "company": business["name"],
            "location": form.location,
            "job_type": form.job_type,
            "category": form.category,
            "salary": form.salary,
            "description": form.description,
            "requirements": form.requirements,
            "contact_email": form.contact_email or session_user.email,
            "workers_needed": form.workers_needed,
            "posted_at": _now(),
            "status": "active",
            "business_id": business["id"],
        })[0]
    except GatewayError as e:
        log.error(f"Error creating job for business {business['id']}: {e}")
        raise PostingError("Failed to create job posting")
    log.info(f"Job created: ID={job['id']}, Skill={job['title']}, Business={business['id']}")

    result = PostingResult(job=job)

    try:
        gateway.insert("admin_notifications", admin_notification_row(job, business))
        result.steps.append(StepOutcome("admin_notification", ok=True, count=1))
    except GatewayError as e:
        log.warning(f"Admin notification for job {job['id']} not created: {e}")
        result.steps.append(StepOutcome("admin_notification", ok=False, error=str(e)))

    workers = None
    try:
        workers = gateway.fetch("workers", {"skill": form.title})
        result.steps.append(StepOutcome("worker_lookup", ok=True, count=len(workers)))
    except GatewayError as e:
        log.warning(f"Worker lookup for job {job['id']} failed: {e}")
        result.steps.append(StepOutcome("worker_lookup", ok=False, error=str(e)))

    if workers is None:
        result.steps.append(StepOutcome("worker_notifications", ok=False, error="Skipped: worker lookup failed."))
    elif not workers:
        log.info(f"No workers with skill '{form.title}'; job {job['id']} has no one to notify.")
        result.steps.append(StepOutcome("worker_notifications", ok=True, count=0))
    else:
        worker_ids = [w["id"] for w in workers]
        try:
            gateway.insert("worker_notifications", worker_notification_rows(job, business["name"], worker_ids))
            result.notified_worker_ids = worker_ids
            result.steps.append(StepOutcome("worker_notifications", ok=True, count=len(worker_ids)))
        except GatewayError as e:
            log.warning(f"Worker notifications for job {job['id']} not created: {e}")
            result.steps.append(StepOutcome("worker_notifications", ok=False, error=str(e)))

    if not result.complete:
        failed = [s.name for s in result.steps if not s.ok]
        log.warning(f"Job {job['id']} posted with incomplete side effects: {failed}")
    return result


def list_business_jobs(gateway, session_user: SessionUser) -> list:
    business = resolve_business(gateway, session_user)
    if business is None:
        raise PostingError("Failed to fetch business information")
    return gateway.fetch("jobs", {"business_id": business["id"]}, order="-posted_at")


# --- Skill availability ---
@dataclass
class SkillSummary:
    skill: str
    count: int = 0
    workers: list = field(default_factory=list)


def skill_summary(gateway) -> list:
    """ Available workers grouped under each default skill. """
    summary = {skill: SkillSummary(skill) for skill in DEFAULT_SKILLS}
    try:
        workers = gateway.fetch("workers", {"status": "Available"}, order="name")
    except GatewayError as e:
        log.error(f"Error fetching workers for skill summary: {e}")
        return list(summary.values())
    for worker in workers:
        entry = summary.get(worker["skill"])
        if entry is None:
            continue
        entry.count += 1
        entry.workers.append({
            "id": worker["id"],
            "name": worker["name"],
            "experience": worker.get("experience") or 0,
            "rating": worker.get("rating") or 0,
        })
    return list(summary.values())


# --- Worker requests ---
@dataclass
class WorkerRequestForm:
    skill: str = ""
    workers_needed: int = 1
    priority: str = "Normal"
    duration: str = ""
    description: str = ""

    def validate(self):
        if not (self.skill or "").strip():
            raise ValidationError(REQUIRED_FIELDS_MESSAGE)
        self.workers_needed = _positive_int(self.workers_needed, "Number of workers needed")
        if self.priority not in REQUEST_PRIORITIES:
            raise ValidationError(f"Priority must be one of: {', '.join(REQUEST_PRIORITIES)}.")
        return self


@dataclass
class WorkerRequestResult:
    request: dict
    suggestions: Optional[list] = None
    error: Optional[str] = None


def request_workers(gateway, form: WorkerRequestForm, session_user: SessionUser) -> WorkerRequestResult:
    """ Files a request for workers and suggests the first available matches. """
    form.validate()
    try:
        business = resolve_business(gateway, session_user)
    except GatewayError as e:
        log.error(f"Error fetching business data for {session_user.email}: {e}")
        business = None
    if business is None:
        raise PostingError("Business not loaded. Please wait and try again.")
    try:
        request = gateway.insert("worker_requests", {
            "business_id": business["id"],
            "business_name": business["name"],
            "workers_needed": form.workers_needed,
            "skill": form.skill,
            "priority": form.priority,
            "duration": form.duration,
            "description": form.description,
            "status": "pending",
            "created_at": _now(),
        })[0]
    except GatewayError as e:
        log.error(f"Error creating worker request for business {business['id']}: {e}")
        raise PostingError(f"Failed to submit request: {e.message}")

    try:
        suggestions = gateway.fetch(
            "workers", {"skill": form.skill, "status": "Available"}, order="id", limit=SUGGESTION_LIMIT
        )
    except GatewayError as e:
        log.warning(f"Suggestions for worker request {request['id']} failed: {e}")
        return WorkerRequestResult(request=request, error=f"Request submitted, but failed to suggest workers: {e.message}")
    return WorkerRequestResult(request=request, suggestions=suggestions)
