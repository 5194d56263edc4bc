# jobhub/utils.py

import jwt
import re
import uuid
import logging
from datetime import datetime, timedelta, timezone
from functools import wraps

import pwnedpasswords
from argon2 import PasswordHasher
from argon2.exceptions import VerifyMismatchError, VerificationError, InvalidHash
from email_validator import validate_email, EmailNotValidError
from graphql import GraphQLError

from jobhub.config import (
    ALGORITHM, SECRET_KEY, TOKEN_EXPIRATION_TIME_MINUTES, PASSWORD_MIN_LENGTH, PASSWORD_BREACH_CHECK
)
from jobhub.db.database import Session
from jobhub.db.models import User, RevokedToken
from jobhub.errors import JobHubError
from jobhub.session import SessionContext, SessionUser

log = logging.getLogger(__name__)

TOKEN_PREFIX = "Bearer "


# --- JWT Token Handling ---
def generate_token(user: SessionUser) -> str:
    """Generates a JWT carrying the session identity of the given user."""
    log.debug(f"Generating token for user ID: {user.id}")
    now = datetime.now(timezone.utc)
    payload = dict(user.to_claims())
    payload.update({
        "jti": uuid.uuid4().hex,
        "exp": now + timedelta(minutes=TOKEN_EXPIRATION_TIME_MINUTES),
        "iat": now,
    })
    try:
        token = jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)
        log.info(f"Token generated successfully for user ID: {user.id}")
        return token
    except Exception as e:
        log.error(f"Error encoding JWT for user {user.id}: {e}", exc_info=True)
        raise GraphQLError("Could not generate token due to an internal server error.")


def decode_token(token: str) -> dict:
    """Decodes and checks a token, including revocation. Raises GraphQLError when unusable."""
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        log.warning("Authentication failed: Token has expired.")
        raise GraphQLError("Token has expired.")
    except jwt.InvalidTokenError as e:
        log.warning(f"Authentication failed: Invalid JWT token - {e}")
        raise GraphQLError("Invalid authentication token.")
    if not payload.get("sub") or payload.get("uid") is None or not payload.get("user_type"):
        log.warning("Invalid token payload: Missing session claims.")
        raise GraphQLError("Invalid token payload.")
    with Session() as session:
        if payload.get("jti") and session.get(RevokedToken, payload["jti"]) is not None:
            log.warning(f"Authentication failed: Token {payload['jti']} was revoked.")
            raise GraphQLError("Token has been revoked.")
    return payload


def _bearer_token(context: dict):
    request_object = context.get('request')
    if request_object is None:
        log.warning("Authentication context missing 'request' object.")
        return None
    auth_header = request_object.headers.get('Authorization')
    if not auth_header or not auth_header.startswith(TOKEN_PREFIX):
        return None
    return auth_header[len(TOKEN_PREFIX):] or None


def get_session(context: dict) -> SessionContext:
    """
    The SessionContext of this request, loaded from the bearer token on first use and
    cached on the context. An absent token yields an unauthenticated session; a bad
    token raises GraphQLError.
    """
    existing = context.get('session')
    if isinstance(existing, SessionContext):
        return existing
    session_context = SessionContext()
    token = _bearer_token(context)
    if token:
        log.debug("Authorization header found, attempting JWT decode.")
        payload = decode_token(token)
        session_context.load(SessionUser.from_claims(payload), token=token)
    context['session'] = session_context
    return session_context


def get_authenticated_user(context: dict, *roles: str) -> SessionUser:
    """Returns the acting user, requiring one of roles when given."""
    try:
        return get_session(context).require(*roles)
    except JobHubError as e:
        raise GraphQLError(e.message)


def login_user(email: str, password: str) -> tuple:
    """Verifies credentials and returns (token, SessionUser)."""
    with Session() as session:
        user = session.query(User).filter(User.email == email.strip().lower()).first()
        if not user:
            log.warning(f"Login failed: User not found for email {email}")
            raise GraphQLError("Invalid email or password")
        verify_password(user.password_hash, password)
        session_user = SessionUser(id=user.id, email=user.email, phone=user.phone, user_type=user.role)
    return generate_token(session_user), session_user


def logout_user(session_context: SessionContext) -> bool:
    """Revokes the session's token and clears the session."""
    token = session_context.token
    if not token:
        session_context.clear()
        return False
    payload = decode_token(token)
    with Session() as session:
        try:
            session.add(RevokedToken(jti=payload["jti"]))
            session.commit()
        except Exception as e:
            session.rollback()
            log.error(f"Error revoking token for user {payload.get('uid')}: {e}", exc_info=True)
            raise GraphQLError("An internal server error occurred during logout.")
    log.info(f"User ID {payload.get('uid')} logged out.")
    session_context.clear()
    return True


# --- Password Handling ---
def hash_password(pwd: str) -> str:
    """Hashes a password using Argon2."""
    ph = PasswordHasher()
    try:
        return ph.hash(pwd)
    except Exception as e:
        log.error(f"Error hashing password: {e}", exc_info=True)
        raise ValueError("Could not hash password due to internal error.")


def verify_password(pwd_hash: str, pwd: str) -> bool:
    """Verifies a plaintext password against an Argon2 hash."""
    ph = PasswordHasher()
    try:
        ph.verify(pwd_hash, pwd)
        log.debug("Password verification successful.")
        return True
    except VerifyMismatchError:
        log.warning("Password verification failed: Mismatch.")
        raise GraphQLError("Invalid email or password")
    except (VerificationError, InvalidHash) as e:
        log.error(f"Password verification error: Hash format or verification issue - {e}", exc_info=True)
        raise GraphQLError("Error during password verification process.")


# --- Password Policy ---
def is_password_strong(password: str, email: str | None = None) -> bool:
    """
    Checks if the password meets security policy requirements.
    Raises ValueError with a user-friendly message if the policy is not met.
    """
    if not password or len(password) < PASSWORD_MIN_LENGTH:
        log.warning(f"Password policy violation: Too short (length {len(password) if password else 0}).")
        raise ValueError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters long.")

    if not re.search(r"[A-Z]", password):
        raise ValueError("Password must contain at least one uppercase letter.")
    if not re.search(r"[a-z]", password):
        raise ValueError("Password must contain at least one lowercase letter.")
    if not re.search(r"[0-9]", password):
        raise ValueError("Password must contain at least one digit.")
    if not re.search(r"[!@#$%^&*(),.?\":{}|<>]", password):
        raise ValueError("Password must contain at least one special character (e.g., !@#$%).")

    if email:
        local_part = email.split('@')[0]
        if local_part and local_part.lower() in password.lower():
            log.warning("Password policy violation: Contains email prefix.")
            raise ValueError("Password cannot contain your email address prefix.")

    if PASSWORD_BREACH_CHECK:
        try:
            count = pwnedpasswords.check(password)
        except Exception as e:
            # lookup failures do not block registration
            log.error(f"Error checking pwnedpasswords (network issue?): {e}", exc_info=True)
            count = 0
        if count > 0:
            log.warning(f"Password policy violation: Found in {count} breaches.")
            raise ValueError("This password has appeared in data breaches; please choose a stronger, unique password.")
    else:
        log.debug("Breach check disabled by PASSWORD_BREACH_CHECK.")

    log.info("Password passed all policy checks.")
    return True


# --- Email Validation ---
def validate_user_email(email: str) -> str:
    """Validates email format using email-validator. Returns normalized email."""
    if not email:
        raise ValueError("Email address cannot be empty.")
    try:
        email_info = validate_email(email, check_deliverability=False)
        return email_info.normalized.lower()
    except EmailNotValidError as e:
        log.warning(f"Invalid email format detected for '{email}': {e}")
        raise ValueError(f"Invalid email address format: {str(e)}")


# --- Authorization Decorators ---
def role_required(*roles):
    """ Decorator: authenticated user must hold one of roles. """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            if len(args) < 2:
                log.error(f"Decorator '@role_required' applied incorrectly to function '{func.__name__}' - missing 'info' argument?")
                raise GraphQLError("Internal server error: Authorization setup incorrect.")
            info = args[1]
            user = get_authenticated_user(info.context, *roles)
            log.debug(f"{user.user_type} access granted for user {user.id} to '{func.__name__}'.")
            return func(*args, **kwargs)
        return wrapper
    return decorator


admin_user = role_required("admin")
business_user = role_required("business")
worker_user = role_required("worker")
authd_user = role_required()
