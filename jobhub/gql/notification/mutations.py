from graphene import Mutation, String, Int, Field, Boolean
from graphql import GraphQLError
import logging

from jobhub.errors import JobHubError, RespondError, ValidationError
from jobhub.gql.context import get_gateway
from jobhub.gql.types import AdminNotificationObject, JobApplicationObject
from jobhub.services.admin_feed import set_status
from jobhub.services.worker_feed import Decision, respond
from jobhub.session import resolve_worker
from jobhub.utils import admin_user, worker_user, get_authenticated_user

log = logging.getLogger(__name__)


class RespondToJob(Mutation):
    """ Accepts or declines a job offer addressed to the current worker (Worker Only). """
    class Arguments:
        notification_id = Int(required=True)
        job_id = Int(required=True)
        decision = String(required=True, description="'accept' or 'decline'")
    status = String()
    job_application = Field(lambda: JobApplicationObject)
    message = String()

    @worker_user
    def mutate(root, info, notification_id, job_id, decision):
        try:
            decision = Decision(decision)
        except ValueError:
            raise GraphQLError("Decision must be 'accept' or 'decline'.")
        user = get_authenticated_user(info.context)
        gateway = get_gateway(info)
        try:
            worker = resolve_worker(gateway, user)
            if worker is None:
                raise ValidationError("Worker profile not found for this account.")
            application = respond(gateway, notification_id, job_id, worker["id"], decision)
        except RespondError as e:
            if e.notification_updated:
                log.error(f"Notification {notification_id} left {decision.status} without an application.")
            raise GraphQLError(e.message)
        except JobHubError as e:
            log.warning(f"RespondToJob rejected for user {user.id}: {e.message}")
            raise GraphQLError(e.message)
        return RespondToJob(
            status=decision.status,
            job_application=application,
            message=f"Job {decision.status} successfully",
        )


class SetAdminNotificationStatus(Mutation):
    """ Marks an admin notification approved or rejected; informational only (Admin Only). """
    class Arguments:
        id = Int(required=True)
        status = String(required=True, description="'approved' or 'rejected'")
    notification = Field(lambda: AdminNotificationObject)
    success = Boolean()

    @admin_user
    def mutate(root, info, id, status):
        try:
            row = set_status(get_gateway(info), id, status)
        except JobHubError as e:
            log.warning(f"Failed updating admin notification {id}: {e.message}")
            if getattr(e, "kind", None) == "not_found":
                raise GraphQLError("Notification not found")
            raise GraphQLError(e.message if isinstance(e, ValidationError) else "Failed to update status")
        return SetAdminNotificationStatus(notification=row, success=True)
