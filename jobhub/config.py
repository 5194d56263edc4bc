# jobhub/config.py

import os
import logging
from dotenv import load_dotenv

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
log = logging.getLogger(__name__)

load_dotenv()


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        log.warning(f"Invalid {name} in .env ({raw!r}), using default {default}.")
        return default


def _bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


# --- Database ---
DB_URL = os.getenv("DB_URL", "sqlite:///./jobhub.db")
SEED_DEMO_DATA = _bool_env("SEED_DEMO_DATA", False)

# --- Tokens ---
ALGORITHM = os.getenv("ALGORITHM", "HS256")
SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    log.critical("FATAL: SECRET_KEY not found in environment variables!")
    raise ValueError("SECRET_KEY must be set in the environment variables.")
TOKEN_EXPIRATION_TIME_MINUTES = _int_env("TOKEN_EXPIRATION_TIME_MINUTES", 30)

# --- Password policy ---
PASSWORD_MIN_LENGTH = 8
PASSWORD_BREACH_CHECK = _bool_env("PASSWORD_BREACH_CHECK", True)

# --- GraphQL limits ---
APP_ENV = os.getenv("APP_ENV", "production").lower()
GRAPHQL_MAX_DEPTH = _int_env("GRAPHQL_MAX_DEPTH", 5)
GRAPHQL_MAX_ALIASES = _int_env("GRAPHQL_MAX_ALIASES", 5)
GRAPHQL_INTROSPECTION_MAX_DEPTH = _int_env("GRAPHQL_INTROSPECTION_MAX_DEPTH", 15)
