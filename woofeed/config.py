
# ----------------------------------------------------------------
# Import configuration variables to be used throughout the project
# ----------------------------------------------------------------
import os
from dotenv import load_dotenv

# Load .env (allow container env to override file values)
load_dotenv(override=True)


def _get_bool(name: str, default: bool = False) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return str(v).strip().lower() in {"1", "true", "yes", "on", "y"}


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name, "")
    try:
        return int(raw) if raw.strip() else default
    except ValueError:
        return default


class Settings:
    # ── Runtime ──────────────────────────────────────────────────────────────
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development").strip().lower()
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # ── Feed generation ──────────────────────────────────────────────────────
    # Re-validate items while building a feed (on by default in production only)
    FEED_VALIDATE_ENTRIES: bool = _get_bool("FEED_VALIDATE_ENTRIES", ENVIRONMENT == "production")
    # Drop items that fail re-validation instead of shipping them with errors
    FEED_SKIP_INVALID_ENTRIES: bool = _get_bool("FEED_SKIP_INVALID_ENTRIES", True)

    # ── Storage ──────────────────────────────────────────────────────────────
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./data/woofeed.db")
    # Products per transaction when clearing overrides
    REPROCESS_BATCH_SIZE: int = _get_int("REPROCESS_BATCH_SIZE", 50)

    # ── Paths ────────────────────────────────────────────────────────────────
    # Empty means the attribute table bundled with the package
    FEED_SPEC_PATH: str = os.getenv("FEED_SPEC_PATH", "")

    # ── CORS ─────────────────────────────────────────────────────────────────
    # Comma-separated list in .env, e.g. "https://example.com, https://foo.bar"
    CORS_ORIGINS: list[str] = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]


settings = Settings()
