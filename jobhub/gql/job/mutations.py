from graphene import Mutation, String, Int, Field, Boolean, List
from graphql import GraphQLError
import logging

from jobhub.errors import JobHubError, ValidationError, PostingError
from jobhub.gql.context import get_gateway
from jobhub.gql.types import JobObject, StepOutcomeObject, WorkerRequestObject, WorkerObject
from jobhub.services.job_posting import JobForm, WorkerRequestForm, post_job, request_workers
from jobhub.services.reconcile import reconcile_job
from jobhub.utils import admin_user, business_user, get_authenticated_user

log = logging.getLogger(__name__)


class PostJob(Mutation):
    """ Posts a job for the current business and notifies workers with the skill (Business Only). """
    class Arguments:
        title = String(required=True, description="The required skill.")
        description = String(required=True)
        workers_needed = Int(required=True)
        location = String()
        job_type = String()
        category = String()
        salary = String()
        requirements = String()
        contact_email = String()
    job = Field(lambda: JobObject)
    complete = Boolean(description="False when a best-effort side effect failed.")
    workers_notified = Int()
    steps = List(StepOutcomeObject)

    @business_user
    def mutate(root, info, title, description, workers_needed, location="", job_type="full-time",
               category="", salary="", requirements="", contact_email=""):
        user = get_authenticated_user(info.context)
        form = JobForm(
            title=title, description=description, workers_needed=workers_needed, location=location,
            job_type=job_type or "full-time", category=category, salary=salary,
            requirements=requirements, contact_email=contact_email,
        )
        try:
            result = post_job(get_gateway(info), form, user)
        except ValidationError as e:
            log.warning(f"PostJob rejected for user {user.id}: {e.message}")
            raise GraphQLError(e.message)
        except PostingError as e:
            log.warning(f"PostJob failed for user {user.id}: {e.message}")
            raise GraphQLError(e.message)
        except Exception as e:
            log.error(f"Error posting job for user {user.id}: {e}", exc_info=True)
            raise GraphQLError("Failed to post job. Please try again.")
        return PostJob(
            job=result.job,
            complete=result.complete,
            workers_notified=len(result.notified_worker_ids),
            steps=result.steps,
        )


class RequestWorkers(Mutation):
    """ Files a request for workers and suggests available matches (Business Only). """
    class Arguments:
        skill = String(required=True)
        workers_needed = Int(required=True)
        priority = String()
        duration = String()
        description = String()
    worker_request = Field(lambda: WorkerRequestObject)
    suggestions = List(WorkerObject)
    message = String()

    @business_user
    def mutate(root, info, skill, workers_needed, priority="Normal", duration="", description=""):
        user = get_authenticated_user(info.context)
        form = WorkerRequestForm(
            skill=skill, workers_needed=workers_needed, priority=priority or "Normal",
            duration=duration, description=description,
        )
        try:
            result = request_workers(get_gateway(info), form, user)
        except JobHubError as e:
            log.warning(f"RequestWorkers failed for user {user.id}: {e.message}")
            raise GraphQLError(e.message)
        if result.error:
            message = result.error
        elif result.suggestions:
            message = f"Request submitted! Top matches: {', '.join(w['name'] for w in result.suggestions)}"
        else:
            message = "Request submitted! Top matches: No available workers found."
        return RequestWorkers(worker_request=result.request, suggestions=result.suggestions or [], message=message)


class ReconcileJob(Mutation):
    """ Creates any notifications and applications a job is missing (Admin Only). """
    class Arguments:
        job_id = Int(required=True)
    admin_notification_created = Boolean()
    notifications_created = Int()
    applications_created = Int()

    @admin_user
    def mutate(root, info, job_id):
        try:
            report = reconcile_job(get_gateway(info), job_id)
        except JobHubError as e:
            log.warning(f"ReconcileJob failed for job {job_id}: {e.message}")
            raise GraphQLError(e.message)
        return ReconcileJob(
            admin_notification_created=report.admin_notification_created,
            notifications_created=report.notifications_created,
            applications_created=report.applications_created,
        )
