from graphene import Mutation, String, Int, Float, Field
from graphql import GraphQLError
import logging

from jobhub.db.data import WORKER_STATUSES
from jobhub.errors import JobHubError
from jobhub.gql.context import get_gateway
from jobhub.gql.types import WorkerObject
from jobhub.session import resolve_worker
from jobhub.utils import authd_user, worker_user, get_authenticated_user, validate_user_email

log = logging.getLogger(__name__)


class AddWorker(Mutation):
    """ Creates a worker profile (Admin, or a worker user for its own email). """
    class Arguments:
        name = String(required=True)
        skill = String(required=True)
        email = String()
        phone = String()
        experience = Int()
        rating = Float()
        status = String()
    worker = Field(lambda: WorkerObject)

    @authd_user
    def mutate(root, info, name, skill, email=None, phone=None, experience=0, rating=0.0, status="Available"):
        user = get_authenticated_user(info.context, "admin", "worker")
        log.info(f"AddWorker attempt by user {user.id}: Name={name}, Skill={skill}")
        if not email and not phone:
            raise GraphQLError("A worker needs an email or a phone number.")
        normalized_email = None
        if email:
            try:
                normalized_email = validate_user_email(email)
            except ValueError as ve:
                raise GraphQLError(str(ve))
        phone = phone.strip() if phone else None
        if user.user_type == "worker" and normalized_email != user.email and phone != user.phone:
            log.warning(f"User {user.id} tried to register a worker profile that is not theirs.")
            raise GraphQLError("Workers can only register their own profile.")
        if status not in WORKER_STATUSES:
            raise GraphQLError(f"Status must be one of: {', '.join(WORKER_STATUSES)}.")
        if experience is not None and experience < 0:
            raise GraphQLError("Experience cannot be negative.")

        gateway = get_gateway(info)
        try:
            worker = gateway.insert("workers", {
                "name": name.strip(), "skill": skill, "email": normalized_email, "phone": phone,
                "experience": experience or 0, "rating": rating or 0.0, "status": status,
            })[0]
        except JobHubError as e:
            log.error(f"Error adding worker {name}: {e}")
            raise GraphQLError("An internal server error occurred while adding the worker.")
        log.info(f"Worker added successfully: ID={worker['id']}, Skill={skill}")
        return AddWorker(worker=worker)


class UpdateWorkerStatus(Mutation):
    """ Sets the current worker's availability (Worker Only). """
    class Arguments:
        status = String(required=True)
    worker = Field(lambda: WorkerObject)

    @worker_user
    def mutate(root, info, status):
        if status not in WORKER_STATUSES:
            raise GraphQLError(f"Status must be one of: {', '.join(WORKER_STATUSES)}.")
        user = get_authenticated_user(info.context)
        gateway = get_gateway(info)
        try:
            worker = resolve_worker(gateway, user)
            if worker is None:
                raise GraphQLError("Worker profile not found for this account.")
            if worker["status"] == status:
                log.info(f"No effective change for worker ID={worker['id']}")
                return UpdateWorkerStatus(worker=worker)
            worker = gateway.update("workers", worker["id"], {"status": status})
        except GraphQLError as e:
            raise e
        except JobHubError as e:
            log.error(f"Error updating status for user {user.id}: {e}")
            raise GraphQLError("An internal server error occurred while updating the worker.")
        log.info(f"Worker {worker['id']} status set to {status}")
        return UpdateWorkerStatus(worker=worker)
