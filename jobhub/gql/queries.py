from graphene import ObjectType, List, Field, Int, String
from graphql import GraphQLError
import logging

from jobhub.errors import JobHubError
from jobhub.gql.context import get_gateway
from jobhub.gql.types import (
    SessionUserObject, JobObject, BusinessObject, WorkerObject, WorkerNotificationObject,
    JobApplicationObject, AdminNotificationObject, WorkerRequestObject, SkillSummaryObject,
    DashboardObject,
)
from jobhub.services.admin_feed import list_all
from jobhub.services.dashboards import build_dashboard
from jobhub.services.job_posting import list_business_jobs, skill_summary
from jobhub.services.worker_feed import list_notifications
from jobhub.session import resolve_business, resolve_worker
from jobhub.utils import authd_user, admin_user, business_user, worker_user, get_authenticated_user

log = logging.getLogger(__name__)


class Query(ObjectType):
    """ Defines the available GraphQL queries. """

    me = Field(SessionUserObject, description="The identity of the current session.")
    jobs = List(JobObject, status=String(), description="Jobs, optionally filtered by status. (Requires Auth)")
    job = Field(JobObject, id=Int(required=True), description="A specific job by ID. (Requires Auth)")
    my_jobs = List(JobObject, description="Jobs posted by the current business. (Business Only)")
    skills = List(SkillSummaryObject, description="Available workers per skill. (Business Only)")
    worker_notifications = List(WorkerNotificationObject, description="Job offers for the current worker, newest first. (Worker Only)")
    admin_notifications = List(AdminNotificationObject, description="Marketplace events, newest first. (Admin Only)")
    job_applications = List(JobApplicationObject, description="Job applications. (Requires Auth - Filtered by role)")
    worker_requests = List(WorkerRequestObject, description="Worker requests. (Business: own, Admin: all)")
    businesses = List(BusinessObject, description="All businesses. (Admin Only)")
    workers = List(WorkerObject, description="All workers. (Admin Only)")
    dashboard = Field(DashboardObject, description="The dashboard for the current user's role. (Requires Auth)")

    # --- RESOLVERS ---

    @staticmethod
    @authd_user
    def resolve_me(root, info):
        return get_authenticated_user(info.context).as_dict()

    @staticmethod
    @authd_user
    def resolve_jobs(root, info, status=None):
        try:
            filters = {"status": status} if status else None
            return get_gateway(info).fetch("jobs", filters, order="-posted_at")
        except JobHubError as e:
            log.error(f"Error resolving jobs: {e}")
            raise GraphQLError("Could not retrieve jobs due to an internal error.")

    @staticmethod
    @authd_user
    def resolve_job(root, info, id):
        try:
            job = get_gateway(info).fetch_one("jobs", {"id": id})
        except JobHubError as e:
            log.error(f"Error resolving job(id={id}): {e}")
            raise GraphQLError("Could not retrieve job details due to an internal error.")
        if not job:
            raise GraphQLError("Job not found.")
        return job

    @staticmethod
    @business_user
    def resolve_my_jobs(root, info):
        try:
            return list_business_jobs(get_gateway(info), get_authenticated_user(info.context))
        except JobHubError as e:
            log.warning(f"Error resolving my_jobs: {e}")
            raise GraphQLError(e.message)

    @staticmethod
    @business_user
    def resolve_skills(root, info):
        return skill_summary(get_gateway(info))

    @staticmethod
    @worker_user
    def resolve_worker_notifications(root, info):
        user = get_authenticated_user(info.context)
        gateway = get_gateway(info)
        try:
            worker = resolve_worker(gateway, user)
            if worker is None:
                return []
            return list_notifications(gateway, worker["id"])
        except JobHubError as e:
            log.error(f"Error fetching notifications for user {user.id}: {e}")
            raise GraphQLError("Failed to load notifications")

    @staticmethod
    @admin_user
    def resolve_admin_notifications(root, info):
        try:
            return list_all(get_gateway(info))
        except JobHubError as e:
            log.error(f"Error fetching admin notifications: {e}")
            raise GraphQLError("Failed to fetch notifications")

    @staticmethod
    @authd_user
    def resolve_job_applications(root, info):
        """ Workers see their own, businesses those for their jobs, admins all. """
        user = get_authenticated_user(info.context)
        gateway = get_gateway(info)
        try:
            if user.user_type == "admin":
                return gateway.fetch("job_applications", order="-applied_at")
            if user.user_type == "worker":
                worker = resolve_worker(gateway, user)
                return gateway.fetch("job_applications", {"worker_id": worker["id"]}, order="-applied_at") if worker else []
            business = resolve_business(gateway, user)
            if business is None:
                return []
            applications = []
            for job in gateway.fetch("jobs", {"business_id": business["id"]}):
                applications.extend(gateway.fetch("job_applications", {"job_id": job["id"]}))
            return sorted(applications, key=lambda a: (a["applied_at"], a["id"]), reverse=True)
        except JobHubError as e:
            log.error(f"Error resolving job_applications for user {user.id}: {e}")
            raise GraphQLError("Could not retrieve job applications due to an internal error.")

    @staticmethod
    @authd_user
    def resolve_worker_requests(root, info):
        user = get_authenticated_user(info.context, "business", "admin")
        gateway = get_gateway(info)
        try:
            if user.user_type == "admin":
                return gateway.fetch("worker_requests", order="-created_at")
            business = resolve_business(gateway, user)
            if business is None:
                return []
            return gateway.fetch("worker_requests", {"business_id": business["id"]}, order="-created_at")
        except JobHubError as e:
            log.error(f"Error resolving worker_requests for user {user.id}: {e}")
            raise GraphQLError("Could not retrieve worker requests due to an internal error.")

    @staticmethod
    @admin_user
    def resolve_businesses(root, info):
        try:
            return get_gateway(info).fetch("businesses", order="name")
        except JobHubError as e:
            log.error(f"Error resolving businesses: {e}")
            raise GraphQLError("Could not retrieve businesses due to an internal error.")

    @staticmethod
    @admin_user
    def resolve_workers(root, info):
        try:
            return get_gateway(info).fetch("workers", order="name")
        except JobHubError as e:
            log.error(f"Error resolving workers: {e}")
            raise GraphQLError("Could not retrieve workers due to an internal error.")

    @staticmethod
    @authd_user
    def resolve_dashboard(root, info):
        try:
            return build_dashboard(get_gateway(info), get_authenticated_user(info.context))
        except JobHubError as e:
            log.warning(f"Error building dashboard: {e}")
            raise GraphQLError(e.message)
