import asyncio

from graphene import ObjectType, Field
from graphql import GraphQLError
import logging

from jobhub.gql.context import get_gateway
from jobhub.gql.types import WorkerNotificationObject, AdminNotificationObject
from jobhub.realtime import stream_inserts
from jobhub.session import resolve_worker
from jobhub.utils import get_authenticated_user

log = logging.getLogger(__name__)


class Subscription(ObjectType):
    """ Live inserts, pushed over the GraphQL websocket. """

    worker_notification_added = Field(
        WorkerNotificationObject, description="Job offers addressed to the current worker. (Worker Only)"
    )
    admin_notification_added = Field(
        AdminNotificationObject, description="New marketplace events. (Admin Only)"
    )

    # token and worker lookups hit the database; keep them off the websocket's event loop
    @staticmethod
    async def subscribe_worker_notification_added(root, info):
        loop = asyncio.get_running_loop()
        user = await loop.run_in_executor(None, get_authenticated_user, info.context, "worker")
        gateway = get_gateway(info)
        worker = await loop.run_in_executor(None, resolve_worker, gateway, user)
        if worker is None:
            raise GraphQLError("Worker profile not found for this account.")
        log.info(f"Worker {worker['id']} subscribed to notifications.")
        return stream_inserts(gateway.feed, "worker_notifications", {"worker_id": worker["id"]})

    @staticmethod
    async def subscribe_admin_notification_added(root, info):
        loop = asyncio.get_running_loop()
        user = await loop.run_in_executor(None, get_authenticated_user, info.context, "admin")
        log.info(f"Admin {user.id} subscribed to admin notifications.")
        return stream_inserts(get_gateway(info).feed, "admin_notifications")
