import logging
import sys

from pydantic_settings import BaseSettings
from sqlalchemy.engine import make_url


class Settings(BaseSettings):
    # ─── App ──────────────────────────────────────
    environment: str = "development"
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_log_level: str = "info"
    domain: str = "localhost"

    # ─── Database (Supabase Postgres) ─────────────
    database_url: str = ""
    database_url_sync: str = ""
    database_echo: bool = False

    # ─── Redis ────────────────────────────────────
    redis_url: str = "redis://redis:6379/0"

    # ─── Rate limiting ────────────────────────────
    rate_limit_enabled: bool = True
    rate_limit_default: str = "120/minute"

    # ─── Firestore export (migration source) ──────
    firestore_export_path: str = ""

    # ─── Optional third-party keys ────────────────
    gemini_api_key: str = ""
    gemini_model: str = "gemini-1.5-flash"
    gemini_api_url: str = "https://generativelanguage.googleapis.com/v1beta/models"
    google_maps_api_key: str = ""

    # ─── Harmony defaults ─────────────────────────
    default_query_limit: int = 50
    rent_reminder_days: int = 3

    # Look for .env in current dir (Docker) or parent dir (local dev from api/)
    model_config = {"env_file": [".env", "../.env"], "extra": "ignore"}

    @property
    def sync_database_url(self) -> str:
        """Sync driver URL for Celery tasks; derived from DATABASE_URL when not set."""
        if self.database_url_sync:
            return self.database_url_sync
        url = make_url(self.database_url)
        return url.set(drivername=url.get_backend_name()).render_as_string(hide_password=False)

    @property
    def ai_enabled(self) -> bool:
        return bool(self.gemini_api_key)

    @property
    def maps_enabled(self) -> bool:
        return bool(self.google_maps_api_key)


def _validate_settings(s: Settings) -> None:
    """Abort startup if database credentials are missing; warn on degraded features."""
    errors: list[str] = []

    if not s.database_url:
        errors.append("DATABASE_URL is not set")
    else:
        try:
            make_url(s.database_url)
        except Exception:
            errors.append("DATABASE_URL is not a valid SQLAlchemy URL")

    if errors:
        # Without a database nothing in this package can work
        print("FATAL: Invalid database configuration:", file=sys.stderr)
        for e in errors:
            print(f"  - {e}", file=sys.stderr)
        sys.exit(1)

    log = logging.getLogger("harmony.config")
    if not s.ai_enabled:
        log.info("GEMINI_API_KEY not set; conflict coach will use fallback analysis")
    if not s.maps_enabled:
        log.info("GOOGLE_MAPS_API_KEY not set; map embeds disabled")


settings = Settings()
_validate_settings(settings)
