import os

from dotenv import load_dotenv

# Load .env from the project root
load_dotenv()

APP_NAME = os.getenv("APP_NAME", "Helpdesk")
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./helpdesk.db")
ENV = os.getenv("ENV", "dev")
ENV_NORMALIZED = ENV.lower()
IS_DEV = ENV_NORMALIZED in {"dev", "development", "local", "test"}
IS_PROD = ENV_NORMALIZED in {"prod", "production"}

# Tenants are addressed as <subdomain>.<BASE_DOMAIN>
BASE_DOMAIN = os.getenv("BASE_DOMAIN", "helpdesk.localhost").strip().lower()

# Paths served without tenant resolution
TENANT_EXEMPT_PATHS = frozenset({"/", "/health"})
ROOT_PATH = "/"
LOGIN_PATH = "/login"

SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "helpdesk_session")
SESSION_SECRET = os.getenv("SESSION_SECRET", "insecure-dev-session-secret" if IS_DEV else "")
SESSION_MAX_AGE_SECONDS = int(os.getenv("SESSION_MAX_AGE_SECONDS", "28800"))
SESSION_COOKIE_SECURE = os.getenv(
    "SESSION_COOKIE_SECURE",
    "0" if IS_DEV else "1",
).strip().lower() in {"1", "true", "yes", "on"}
SESSION_COOKIE_SAMESITE = os.getenv("SESSION_COOKIE_SAMESITE", "lax").strip().lower()
if SESSION_COOKIE_SAMESITE not in {"lax", "strict", "none"}:
    SESSION_COOKIE_SAMESITE = "lax"

# bcrypt cost factor; 12 is the library default
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
