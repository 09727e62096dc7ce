import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Base directory of the project
BASE_DIR = Path(__file__).resolve().parent

TEMPLATES_DIR = BASE_DIR / "templates"
STATIC_DIR = BASE_DIR / "static"


def _flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    """
    Runtime configuration, built once at startup and handed to the
    application factory. Components read it from ``app.state.settings``.
    """

    # SQLite database location
    database_url: str = f"sqlite:///{BASE_DIR / 'products.db'}"

    # Session token signing
    jwt_secret: str = "techstore_jwt_secret_key_2024"
    jwt_algorithm: str = "HS256"
    token_expiry_seconds: int = 24 * 60 * 60
    cookie_name: str = "techstore-auth-token"
    cookie_httponly: bool = True

    host: str = "127.0.0.1"
    port: int = 3000

    # Lab switches. The defaults reproduce the teaching behaviour:
    # catalog text is rendered unescaped, the delete query is parameterised,
    # admin is whoever is called "admin", and any logged-in user may review.
    escape_html: bool = False
    unsafe_delete_sql: bool = False
    admin_by_role: bool = False
    review_requires_admin: bool = False

    seed_on_startup: bool = True
    log_level: str = "INFO"


def load_settings() -> Settings:
    """Build Settings from the environment (and a .env file, if present)."""
    load_dotenv()
    defaults = Settings()
    return Settings(
        database_url=os.getenv("DATABASE_URL", defaults.database_url),
        jwt_secret=os.getenv("JWT_SECRET", defaults.jwt_secret),
        token_expiry_seconds=int(
            os.getenv("JWT_EXPIRY_SECONDS", str(defaults.token_expiry_seconds))
        ),
        host=os.getenv("HOST", defaults.host),
        port=int(os.getenv("PORT", str(defaults.port))),
        escape_html=_flag("ESCAPE_HTML", defaults.escape_html),
        unsafe_delete_sql=_flag("UNSAFE_DELETE_SQL", defaults.unsafe_delete_sql),
        admin_by_role=_flag("ADMIN_BY_ROLE", defaults.admin_by_role),
        review_requires_admin=_flag(
            "REVIEW_REQUIRES_ADMIN", defaults.review_requires_admin
        ),
        seed_on_startup=_flag("SEED_ON_STARTUP", defaults.seed_on_startup),
        log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
    )
