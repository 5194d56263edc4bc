import logging
from sqlalchemy.exc import IntegrityError
from graphene import Mutation, String, Field, Boolean
from graphql import GraphQLError

from jobhub.db.database import Session
from jobhub.db.models import User
from jobhub.gql.types import SessionUserObject
from jobhub.session import ROLES, SessionUser
from jobhub.utils import (
    login_user, logout_user, get_session, get_authenticated_user,
    hash_password, is_password_strong, validate_user_email,
)

log = logging.getLogger(__name__)


class LoginUser(Mutation):
    """ Authenticates a user and returns a JWT carrying the session identity. """
    class Arguments:
        email = String(required=True)
        password = String(required=True)
    token = String()
    user = Field(lambda: SessionUserObject)

    @staticmethod
    def mutate(root, info, email, password):
        log.info(f"Login attempt for email: {email}")
        try:
            token, session_user = login_user(email, password)
        except GraphQLError as e:
            log.warning(f"Login failed for {email}: {e.message}")
            raise e
        except Exception as e:
            log.error(f"Error during login process for {email}: {e}", exc_info=True)
            raise GraphQLError("An internal server error occurred during login.")
        get_session(info.context).load(session_user, token=token)
        log.info(f"Login successful for user ID {session_user.id}")
        return LoginUser(token=token, user=session_user.as_dict())


class LogoutUser(Mutation):
    """ Revokes the bearer token of the current session. """
    success = Boolean()

    @staticmethod
    def mutate(root, info):
        session_context = get_session(info.context)
        if not session_context.is_authenticated:
            raise GraphQLError("Authentication required.")
        return LogoutUser(success=logout_user(session_context))


class AddUser(Mutation):
    """ Creates a login for a business, a worker or (admins only) another admin. """
    class Arguments:
        email = String(required=True)
        password = String(required=True)
        role = String(required=True, description="'business', 'worker' or 'admin'")
        phone = String()
    user = Field(lambda: SessionUserObject)

    @staticmethod
    def mutate(root, info, email, password, role, phone=None):
        log.info(f"AddUser attempt: email={email}, role={role}")
        if role not in ROLES:
            log.warning(f"Invalid role provided: {role}")
            raise GraphQLError("Invalid role specified. Must be 'business', 'worker' or 'admin'.")
        if role == "admin":
            requester = get_authenticated_user(info.context, "admin")
            log.info(f"Admin creation authorized for requester ID {requester.id}")
        try:
            normalized_email = validate_user_email(email)
            is_password_strong(password, email=normalized_email)
        except ValueError as ve:
            log.warning(f"Input validation failed: {ve}")
            raise GraphQLError(str(ve))
        phone = phone.strip() if phone else None

        with Session() as session:
            existing_user = session.query(User).filter(User.email == normalized_email).first()
            if existing_user:
                log.warning(f"User creation failed: Email {normalized_email} already exists.")
                raise GraphQLError("Cannot create user: Email already exists.")
            try:
                password_hash = hash_password(password)
            except ValueError as ve:
                raise GraphQLError(str(ve))
            new_user = User(email=normalized_email, phone=phone, password_hash=password_hash, role=role)
            try:
                session.add(new_user)
                session.commit()
                session.refresh(new_user)
                log.info(f"User created successfully: ID={new_user.id}, Email={normalized_email}, Role={role}")
            except IntegrityError as e:
                session.rollback()
                log.error(f"Database integrity error adding user {normalized_email}: {e}", exc_info=True)
                raise GraphQLError("Could not create user due to a data conflict.")
            except Exception as e:
                session.rollback()
                log.error(f"Unexpected error saving user {normalized_email} to database: {e}", exc_info=True)
                raise GraphQLError("An internal server error occurred while saving the user.")
            created = SessionUser(id=new_user.id, email=new_user.email, phone=new_user.phone, user_type=new_user.role)
        return AddUser(user=created.as_dict())
