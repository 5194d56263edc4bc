from graphene import Mutation, String, Field
from graphql import GraphQLError
import logging

from jobhub.errors import JobHubError
from jobhub.gql.context import get_gateway
from jobhub.gql.types import BusinessObject
from jobhub.utils import authd_user, get_authenticated_user, validate_user_email

log = logging.getLogger(__name__)


class AddBusiness(Mutation):
    """ Creates a business profile (Admin, or a business user for its own email). """
    class Arguments:
        name = String(required=True)
        email = String(required=True)
        phone = String()
        industry = String()
    business = Field(lambda: BusinessObject)

    @authd_user
    def mutate(root, info, name, email, phone=None, industry=None):
        user = get_authenticated_user(info.context, "admin", "business")
        log.info(f"AddBusiness attempt by user {user.id}: Name={name}, Email={email}")
        try:
            normalized_email = validate_user_email(email)
        except ValueError as ve:
            log.warning(f"Invalid email format for AddBusiness: {ve}")
            raise GraphQLError(str(ve))
        if user.user_type == "business" and normalized_email != user.email:
            log.warning(f"User {user.id} tried to register a business for {normalized_email}.")
            raise GraphQLError("Businesses can only register a profile for their own email.")
        if not name.strip():
            raise GraphQLError("Business name cannot be empty.")

        gateway = get_gateway(info)
        try:
            if gateway.fetch_one("businesses", {"email": normalized_email}):
                log.warning(f"AddBusiness failed: Business with email {normalized_email} already exists.")
                raise GraphQLError(f"Business with email {normalized_email} already exists.")
            business = gateway.insert("businesses", {
                "name": name.strip(), "email": normalized_email, "phone": phone, "industry": industry,
            })[0]
        except GraphQLError as e:
            raise e
        except JobHubError as e:
            log.error(f"Error adding business {name}: {e}")
            raise GraphQLError("An internal server error occurred while adding the business.")
        log.info(f"Business added successfully: ID={business['id']}, Name={business['name']}")
        return AddBusiness(business=business)
