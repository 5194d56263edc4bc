from datetime import datetime

import pytest

from jobhub.errors import RespondError, ValidationError
from jobhub.services.job_posting import JobForm, post_job
from jobhub.services.worker_feed import (
    Decision, WorkerNotificationFeed, list_notifications, respond, EMPTY_MESSAGE,
)


@pytest.fixture
def posted(gateway, acme, plumbers, business_session):
    form = JobForm(title="Plumber", description="Fix the mains", workers_needed=2)
    return post_job(gateway, form, business_session).job


def _notification_for(gateway, worker_id):
    return gateway.fetch_one("worker_notifications", {"worker_id": worker_id})


class TestListNotifications:
    def test_newest_first_with_job(self, gateway, acme, plumbers):
        worker_id = plumbers[0]["id"]
        job = gateway.insert("jobs", {"title": "Plumber", "description": "x", "workers_needed": 1,
                                      "company": "Acme Builders", "business_id": acme["id"]})[0]
        stamps = [datetime(2024, 1, 3), datetime(2024, 1, 1), datetime(2024, 1, 2)]
        gateway.insert("worker_notifications", [
            {"worker_id": worker_id, "job_id": job["id"], "created_at": stamp} for stamp in stamps
        ])

        rows = list_notifications(gateway, worker_id)

        assert [r["created_at"] for r in rows] == sorted(stamps, reverse=True)
        assert rows[0]["job"]["company"] == "Acme Builders"

    def test_worker_without_offers_gets_empty_list(self, gateway, plumbers):
        assert list_notifications(gateway, plumbers[0]["id"]) == []


class TestRespond:
    def test_accept_creates_one_pending_application(self, gateway, posted, plumbers):
        worker_id = plumbers[0]["id"]
        notification = _notification_for(gateway, worker_id)

        application = respond(gateway, notification["id"], posted["id"], worker_id, Decision.ACCEPT)

        updated = gateway.fetch_one("worker_notifications", {"id": notification["id"]})
        assert updated["status"] == "accepted"
        assert updated["action_required"] is False
        applications = gateway.fetch("job_applications")
        assert len(applications) == 1
        assert applications[0]["status"] == "pending"
        assert applications[0]["id"] == application["id"]
        assert (applications[0]["job_id"], applications[0]["worker_id"]) == (posted["id"], worker_id)

    def test_decline_creates_no_application(self, gateway, posted, plumbers):
        worker_id = plumbers[1]["id"]
        notification = _notification_for(gateway, worker_id)

        assert respond(gateway, notification["id"], posted["id"], worker_id, "decline") is None

        assert gateway.fetch_one("worker_notifications", {"id": notification["id"]})["status"] == "declined"
        assert gateway.fetch("job_applications") == []

    def test_a_notification_is_answered_once(self, gateway, posted, plumbers):
        worker_id = plumbers[0]["id"]
        notification = _notification_for(gateway, worker_id)
        respond(gateway, notification["id"], posted["id"], worker_id, "decline")

        with pytest.raises(ValidationError, match="already declined"):
            respond(gateway, notification["id"], posted["id"], worker_id, "accept")
        assert gateway.fetch("job_applications") == []

    def test_cannot_answer_someone_elses_notification(self, gateway, posted, plumbers):
        notification = _notification_for(gateway, plumbers[0]["id"])

        with pytest.raises(ValidationError, match="not found"):
            respond(gateway, notification["id"], posted["id"], plumbers[1]["id"], "accept")

    def test_job_must_match_notification(self, gateway, posted, plumbers):
        notification = _notification_for(gateway, plumbers[0]["id"])

        with pytest.raises(ValidationError, match="does not refer to this job"):
            respond(gateway, notification["id"], posted["id"] + 100, plumbers[0]["id"], "accept")

    def test_rejects_unknown_decision(self, gateway, posted, plumbers):
        notification = _notification_for(gateway, plumbers[0]["id"])

        with pytest.raises(ValueError):
            respond(gateway, notification["id"], posted["id"], plumbers[0]["id"], "maybe")

    def test_failed_status_update_writes_nothing(self, flaky, posted, plumbers):
        gateway = flaky(("update", "worker_notifications"))
        notification = _notification_for(gateway.inner, plumbers[0]["id"])

        with pytest.raises(RespondError) as excinfo:
            respond(gateway, notification["id"], posted["id"], plumbers[0]["id"], "accept")

        assert excinfo.value.notification_updated is False
        assert gateway.inner.fetch_one("worker_notifications", {"id": notification["id"]})["status"] == "unread"

    def test_failed_application_insert_leaves_notification_accepted(self, flaky, posted, plumbers):
        gateway = flaky(("insert", "job_applications"))
        notification = _notification_for(gateway.inner, plumbers[0]["id"])

        with pytest.raises(RespondError, match="Failed to accept job") as excinfo:
            respond(gateway, notification["id"], posted["id"], plumbers[0]["id"], "accept")

        assert excinfo.value.notification_updated is True
        assert gateway.inner.fetch_one("worker_notifications", {"id": notification["id"]})["status"] == "accepted"
        assert gateway.inner.fetch("job_applications") == []


class TestWorkerNotificationFeed:
    def test_empty_feed_has_empty_state_message(self, gateway, plumbers):
        with WorkerNotificationFeed(gateway, plumbers[0]["id"]) as feed:
            assert feed.is_empty
            assert feed.error is None
            assert feed.empty_message == EMPTY_MESSAGE

    def test_new_offers_are_pushed_to_the_top(self, gateway, acme, plumbers, business_session):
        worker_id = plumbers[0]["id"]
        feed = WorkerNotificationFeed(gateway, worker_id)
        feed.open()

        post_job(gateway, JobForm(title="Plumber", description="first", workers_needed=1), business_session)
        post_job(gateway, JobForm(title="Plumber", description="second", workers_needed=1), business_session)

        items = feed.notifications
        assert [n["job"]["description"] for n in items] == ["second", "first"]
        assert all(n["worker_id"] == worker_id for n in items)
        feed.close()

    def test_close_stops_pushes(self, gateway, feed, acme, plumbers, business_session):
        worker_feed = WorkerNotificationFeed(gateway, plumbers[0]["id"])
        worker_feed.open()
        worker_feed.close()

        post_job(gateway, JobForm(title="Plumber", description="late", workers_needed=1), business_session)

        assert worker_feed.notifications == []
        assert feed.listener_count() == 0

    def test_respond_updates_local_list(self, gateway, posted, plumbers):
        with WorkerNotificationFeed(gateway, plumbers[0]["id"]) as feed:
            notification = feed.notifications[0]

            feed.respond(notification["id"], Decision.ACCEPT)

            assert feed.notifications[0]["status"] == "accepted"
            assert feed.notifications[0]["action_required"] is False
            assert feed.processing == frozenset()

    def test_failed_respond_keeps_local_list(self, flaky, posted, plumbers):
        gateway = flaky(("insert", "job_applications"))
        with WorkerNotificationFeed(gateway, plumbers[0]["id"]) as feed:
            notification = feed.notifications[0]

            with pytest.raises(RespondError):
                feed.respond(notification["id"], "accept")

            assert feed.notifications[0]["status"] == "unread"
            assert feed.processing == frozenset()

    def test_duplicate_submission_is_refused_while_in_flight(self, flaky, posted, plumbers):
        gateway = flaky()
        refused = []
        with WorkerNotificationFeed(gateway, plumbers[0]["id"]) as feed:
            notification_id = feed.notifications[0]["id"]

            def second_click():
                assert notification_id in feed.processing
                with pytest.raises(ValidationError, match="already in progress"):
                    feed.respond(notification_id, "accept")
                refused.append(True)

            gateway.before_update = second_click
            feed.respond(notification_id, "accept")

        assert refused == [True]
        assert len(gateway.inner.fetch("job_applications")) == 1

    def test_load_failure_leaves_empty_list_with_error(self, flaky, plumbers):
        gateway = flaky(("fetch", "worker_notifications"))
        with WorkerNotificationFeed(gateway, plumbers[0]["id"]) as feed:
            assert feed.notifications == []
            assert feed.error == "Failed to load notifications"
            assert ("subscribe", "worker_notifications") in gateway.calls


class InsertsWhileLoading:
    """ Inserts one notification while the feed loads its list, before or after the read. """

    def __init__(self, inner, row, after_read):
        self.inner = inner
        self.row = row
        self.after_read = after_read

    def __getattr__(self, name):
        return getattr(self.inner, name)

    def fetch(self, table, *args, **kwargs):
        if table != "worker_notifications" or self.row is None:
            return self.inner.fetch(table, *args, **kwargs)
        row, self.row = self.row, None
        if not self.after_read:
            self.inner.insert(table, row)
        rows = self.inner.fetch(table, *args, **kwargs)
        if self.after_read:
            self.inner.insert(table, row)
        return rows


class TestFeedLoadRace:
    @pytest.mark.parametrize("after_read", [True, False])
    def test_offer_created_during_load_is_listed_once(self, gateway, posted, plumbers, after_read):
        worker_id = plumbers[0]["id"]
        row = {"worker_id": worker_id, "job_id": posted["id"], "title": "Plumber job reposted"}

        with WorkerNotificationFeed(InsertsWhileLoading(gateway, row, after_read), worker_id) as feed:
            items = feed.notifications

        assert len(items) == 2
        assert len({n["id"] for n in items}) == 2
        assert items[0]["title"] == "Plumber job reposted"
        assert items[0]["job"]["id"] == posted["id"]
