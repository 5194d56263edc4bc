from fastapi.encoders import jsonable_encoder
from graphene import ObjectType, String, Int, Float, Boolean, List, Field, DateTime
from graphene.types.generic import GenericScalar

from jobhub.gql.context import get_gateway


class SessionUserObject(ObjectType):
    id = Int()
    email = String()
    phone = String()
    user_type = String()


class BusinessObject(ObjectType):
    id = Int()
    name = String()
    email = String()
    phone = String()
    industry = String()
    created_at = DateTime()


class WorkerObject(ObjectType):
    id = Int()
    name = String()
    email = String()
    phone = String()
    skill = String()
    experience = Int()
    rating = Float()
    status = String()


class JobObject(ObjectType):
    id = Int()
    title = String()
    company = String()
    location = String()
    job_type = String()
    category = String()
    salary = String()
    description = String()
    requirements = String()
    contact_email = String()
    workers_needed = Int()
    posted_at = DateTime()
    status = String()
    business_id = Int()


class WorkerNotificationObject(ObjectType):
    id = Int()
    worker_id = Int()
    job_id = Int()
    type = String()
    title = String()
    message = String()
    created_at = DateTime()
    status = String()
    action_required = Boolean()
    action_type = String()
    job = Field(lambda: JobObject)

    # Rows pushed by the change feed arrive without their job
    @staticmethod
    def resolve_job(root, info):
        if root.get("job") is not None:
            return root["job"]
        return get_gateway(info).fetch_one("jobs", {"id": root["job_id"]})


class JobApplicationObject(ObjectType):
    id = Int()
    job_id = Int()
    worker_id = Int()
    status = String()
    applied_at = DateTime()


class AdminNotificationObject(ObjectType):
    id = Int()
    type = String()
    job_id = Int()
    business_id = Int()
    business_name = String()
    skill = String()
    workers_needed = Int()
    title = String()
    message = String()
    created_at = DateTime()
    status = String()


class WorkerRequestObject(ObjectType):
    id = Int()
    business_id = Int()
    business_name = String()
    workers_needed = Int()
    skill = String()
    priority = String()
    duration = String()
    description = String()
    status = String()
    created_at = DateTime()


class SkillWorkerObject(ObjectType):
    id = Int()
    name = String()
    experience = Int()
    rating = Float()


class SkillSummaryObject(ObjectType):
    skill = String()
    count = Int()
    workers = List(SkillWorkerObject)


class StepOutcomeObject(ObjectType):
    name = String()
    ok = Boolean()
    error = String()
    count = Int()


class DashboardTabObject(ObjectType):
    key = String()
    label = String()
    data = GenericScalar()
    error = String()
    empty_message = String()

    @staticmethod
    def resolve_data(root, info):
        return jsonable_encoder(root.data)


class DashboardObject(ObjectType):
    role = String()
    title = String()
    tabs = List(DashboardTabObject)
