# main.py
import logging

from graphene import Schema
from fastapi import FastAPI
from fastapi.responses import RedirectResponse
from starlette_graphene3 import GraphQLApp, make_playground_handler

from jobhub.config import (
    APP_ENV, GRAPHQL_MAX_DEPTH, GRAPHQL_MAX_ALIASES, GRAPHQL_INTROSPECTION_MAX_DEPTH
)
from jobhub.db.data import DEFAULT_SKILLS
from jobhub.db.database import prepare_database
from jobhub.gql.context import build_context, default_gateway
from jobhub.gql.queries import Query
from jobhub.gql.mutations import Mutation
from jobhub.gql.subscriptions import Subscription
from jobhub.middleware.query_limits import QueryLimitsMiddleware

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
log = logging.getLogger(__name__)

log.info(
    f"Running in {APP_ENV.upper()} mode. Applying query limits: "
    f"General={GRAPHQL_MAX_DEPTH}, Introspection={GRAPHQL_INTROSPECTION_MAX_DEPTH}, Aliases={GRAPHQL_MAX_ALIASES}"
)

schema = Schema(query=Query, mutation=Mutation, subscription=Subscription)
app = FastAPI(title="JobHub")


@app.on_event("startup")
def startup_event():
    prepare_database()


@app.get("/", include_in_schema=False)
async def redirect_to_graphql():
    """
    Redirects the root path to the GraphQL Playground.
    """
    return RedirectResponse(url="/graphql", status_code=307)


# --- REST endpoints ---
@app.get("/api/v1/system/readiness")
def readiness():
    return {"status": "ready"}


@app.get("/api/v1/skills")
def get_skills():
    return {"skills": DEFAULT_SKILLS}


@app.get("/api/v1/jobs")
def get_active_jobs():
    return default_gateway().fetch("jobs", {"status": "active"}, order="-posted_at")


# --- Mount GraphQLApp with middleware ---
app.mount(
    "/graphql",
    GraphQLApp(
        schema=schema,
        context_value=build_context,
        middleware=[
            QueryLimitsMiddleware(
                max_depth=GRAPHQL_MAX_DEPTH,
                max_aliases=GRAPHQL_MAX_ALIASES,
                introspection_max_depth=GRAPHQL_INTROSPECTION_MAX_DEPTH,
            )
        ],
        on_get=make_playground_handler(),
    ),
)
