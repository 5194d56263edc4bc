import pytest

from jobhub.db.data import DEFAULT_SKILLS
from jobhub.errors import PostingError, ValidationError
from jobhub.services.job_posting import (
    JobForm, WorkerRequestForm, post_job, request_workers, skill_summary, list_business_jobs,
)


def plumber_form(**overrides):
    values = {"title": "Plumber", "description": "Fix the mains", "workers_needed": 2, "location": "Pune"}
    values.update(overrides)
    return JobForm(**values)


class TestPostJob:
    def test_fans_out_to_every_matching_worker(self, gateway, acme, plumbers, business_session):
        gateway.insert("workers", {"name": "Sunil", "skill": "Electrician", "email": "s@example.com"})

        result = post_job(gateway, plumber_form(), business_session)

        jobs = gateway.fetch("jobs")
        notifications = gateway.fetch("worker_notifications")
        admin = gateway.fetch("admin_notifications")
        assert len(jobs) == 1
        assert jobs[0]["status"] == "active"
        assert jobs[0]["company"] == "Acme Builders"
        assert jobs[0]["business_id"] == acme["id"]
        assert sorted(n["worker_id"] for n in notifications) == sorted(w["id"] for w in plumbers)
        assert all(n["job_id"] == jobs[0]["id"] for n in notifications)
        assert len(admin) == 1 and admin[0]["status"] == "info"
        assert result.complete
        assert result.step("worker_notifications").count == 2

    def test_notification_content(self, gateway, acme, plumbers, business_session):
        post_job(gateway, plumber_form(), business_session)

        notification = gateway.fetch("worker_notifications")[0]
        admin = gateway.fetch("admin_notifications")[0]
        assert notification["title"] == "New Plumber job available"
        assert notification["message"] == "Acme Builders is looking for 2 Plumber(s)"
        assert notification["status"] == "unread"
        assert notification["action_required"] is True
        assert notification["action_type"] == "accept_decline"
        assert admin["title"] == "New Job Posted: Plumber"
        assert admin["message"] == "Acme Builders has posted a job for 2 Plumber(s)"
        assert admin["business_name"] == "Acme Builders"
        assert admin["skill"] == "Plumber"
        assert admin["workers_needed"] == 2

    def test_no_matching_workers_still_succeeds(self, gateway, acme, business_session):
        result = post_job(gateway, plumber_form(), business_session)

        assert result.complete
        assert result.notified_worker_ids == []
        assert gateway.fetch("worker_notifications") == []
        assert len(gateway.fetch("jobs")) == 1

    def test_skill_match_is_case_sensitive(self, gateway, acme, business_session):
        gateway.insert("workers", {"name": "Lower", "skill": "plumber", "email": "l@example.com"})

        result = post_job(gateway, plumber_form(), business_session)

        assert result.notified_worker_ids == []

    def test_contact_email_defaults_to_session_email(self, gateway, acme, business_session):
        result = post_job(gateway, plumber_form(), business_session)

        assert result.job["contact_email"] == "owner@acme.example"

    @pytest.mark.parametrize("form", [
        plumber_form(title=""),
        plumber_form(description="   "),
    ])
    def test_missing_required_fields_make_no_calls(self, flaky, form, business_session):
        gateway = flaky()

        with pytest.raises(ValidationError, match="Please fill in all required fields"):
            post_job(gateway, form, business_session)
        assert gateway.calls == []

    @pytest.mark.parametrize("workers_needed", [0, -3, "many", 1.5])
    def test_workers_needed_must_be_positive_integer(self, gateway, workers_needed, business_session):
        with pytest.raises(ValidationError, match="positive whole number"):
            post_job(gateway, plumber_form(workers_needed=workers_needed), business_session)

    def test_rejects_unknown_job_type(self, gateway, business_session):
        with pytest.raises(ValidationError, match="Job type"):
            post_job(gateway, plumber_form(job_type="forever"), business_session)

    def test_rejects_malformed_contact_email(self, gateway, business_session):
        with pytest.raises(ValidationError, match="Invalid email"):
            post_job(gateway, plumber_form(contact_email="not-an-email"), business_session)

    def test_unknown_business_fails_without_writes(self, gateway, plumbers, business_session):
        with pytest.raises(PostingError, match="Failed to fetch business information"):
            post_job(gateway, plumber_form(), business_session)
        assert gateway.fetch("jobs") == []

    def test_job_insert_failure_fails_the_posting(self, flaky, acme, plumbers, business_session):
        gateway = flaky(("insert", "jobs"))

        with pytest.raises(PostingError, match="Failed to create job posting"):
            post_job(gateway, plumber_form(), business_session)
        assert gateway.inner.fetch("worker_notifications") == []

    def test_admin_notification_failure_is_reported_not_raised(self, flaky, acme, plumbers, business_session):
        gateway = flaky(("insert", "admin_notifications"))

        result = post_job(gateway, plumber_form(), business_session)

        assert not result.complete
        assert result.step("admin_notification").ok is False
        assert len(gateway.inner.fetch("worker_notifications")) == 2

    def test_worker_lookup_failure_skips_fanout(self, flaky, acme, plumbers, business_session):
        gateway = flaky(("fetch", "workers"))

        result = post_job(gateway, plumber_form(), business_session)

        assert len(gateway.inner.fetch("jobs")) == 1
        assert result.step("worker_lookup").ok is False
        assert result.step("worker_notifications").ok is False
        assert gateway.inner.fetch("worker_notifications") == []

    def test_fanout_failure_leaves_job_in_place(self, flaky, acme, plumbers, business_session):
        gateway = flaky(("insert", "worker_notifications"))

        result = post_job(gateway, plumber_form(), business_session)

        assert len(gateway.inner.fetch("jobs")) == 1
        assert result.step("worker_notifications").ok is False
        assert result.notified_worker_ids == []


def test_list_business_jobs_only_returns_own_jobs(gateway, acme, business_session):
    other = gateway.insert("businesses", {"name": "Other", "email": "other@example.com"})[0]
    gateway.insert("jobs", {"title": "Cook", "description": "x", "workers_needed": 1, "business_id": other["id"]})
    post_job(gateway, plumber_form(), business_session)

    jobs = list_business_jobs(gateway, business_session)

    assert [j["title"] for j in jobs] == ["Plumber"]


class TestSkillSummary:
    def test_counts_available_workers_per_default_skill(self, gateway, plumbers):
        gateway.insert("workers", [
            {"name": "Busy", "skill": "Plumber", "status": "Busy"},
            {"name": "Juggler", "skill": "Juggler", "status": "Available"},
        ])

        summary = {s.skill: s for s in skill_summary(gateway)}

        assert list(summary) == DEFAULT_SKILLS
        assert summary["Plumber"].count == 2
        assert sorted(w["name"] for w in summary["Plumber"].workers) == ["Anita", "Ravi"]
        assert summary["Cook"].count == 0

    def test_falls_back_to_defaults_on_failure(self, flaky, plumbers):
        summary = skill_summary(flaky(("fetch", "workers")))

        assert [s.skill for s in summary] == DEFAULT_SKILLS
        assert all(s.count == 0 for s in summary)


class TestRequestWorkers:
    def test_files_request_and_suggests_up_to_three(self, gateway, acme, plumbers, business_session):
        gateway.insert("workers", [
            {"name": f"Extra {i}", "skill": "Plumber", "status": "Available"} for i in range(3)
        ])

        result = request_workers(gateway, WorkerRequestForm(skill="Plumber", workers_needed=4), business_session)

        assert result.request["status"] == "pending"
        assert result.request["business_name"] == "Acme Builders"
        assert len(result.suggestions) == 3
        assert result.error is None

    def test_suggestion_failure_keeps_request(self, flaky, acme, business_session):
        gateway = flaky(("fetch", "workers"))

        result = request_workers(gateway, WorkerRequestForm(skill="Cook"), business_session)

        assert result.suggestions is None
        assert result.error.startswith("Request submitted, but failed to suggest workers")
        assert len(gateway.inner.fetch("worker_requests")) == 1

    def test_requires_a_business(self, gateway, business_session):
        with pytest.raises(PostingError, match="Business not loaded"):
            request_workers(gateway, WorkerRequestForm(skill="Cook"), business_session)

    def test_rejects_unknown_priority(self, gateway, business_session):
        with pytest.raises(ValidationError, match="Priority"):
            request_workers(gateway, WorkerRequestForm(skill="Cook", priority="Yesterday"), business_session)
