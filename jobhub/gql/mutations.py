from graphene import ObjectType
from jobhub.gql.job.mutations import PostJob, RequestWorkers, ReconcileJob
from jobhub.gql.notification.mutations import RespondToJob, SetAdminNotificationStatus
from jobhub.gql.business.mutations import AddBusiness
from jobhub.gql.worker.mutations import AddWorker, UpdateWorkerStatus
from jobhub.gql.user.mutations import LoginUser, LogoutUser, AddUser


class Mutation(ObjectType):
    """ Aggregates all mutations for the GraphQL schema. """

    # User Mutations
    login_user = LoginUser.Field()      # Public Access
    logout_user = LogoutUser.Field()    # Requires Authentication
    add_user = AddUser.Field()          # Public Access (admin role requires an admin)

    # Profiles
    add_business = AddBusiness.Field()                 # Admin or own business
    add_worker = AddWorker.Field()                     # Admin or own worker profile
    update_worker_status = UpdateWorkerStatus.Field()  # Worker

    # Jobs (Business)
    post_job = PostJob.Field()
    request_workers = RequestWorkers.Field()

    # Notifications
    respond_to_job = RespondToJob.Field()                              # Worker
    set_admin_notification_status = SetAdminNotificationStatus.Field()  # Admin
    reconcile_job = ReconcileJob.Field()                               # Admin
