import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_RFP_TYPE = "Private Aviation Workflow Modernization"
DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://localhost:5173"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _split_csv(raw: str) -> list[str]:
    return [x.strip() for x in raw.split(",") if x.strip()]


@dataclass(frozen=True)
class Settings:
    app_env: str = "development"
    record_store: str = "sql"
    airtable_api_key: str = ""
    airtable_base_id: str = ""
    airtable_timeout_sec: float = 30.0
    airtable_max_retries: int = 3
    store_scan_limit: int = 500
    draft_retention_days: int = 30
    upload_dir: Path = Path("data/uploads")
    max_upload_bytes: int = 10 * 1024 * 1024
    session_secret: str = "change-me"
    session_ttl_minutes: int = 720
    admin_email: str = ""
    admin_password: str = ""
    notify_webhook_url: str = ""
    notify_timeout_sec: float = 10.0
    bcrypt_rounds: int = 10
    cors_origins: list[str] = field(default_factory=lambda: _split_csv(DEFAULT_CORS_ORIGINS))
    rfp_type: str = DEFAULT_RFP_TYPE

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


def get_settings() -> Settings:
    """Read settings from the environment on every call so tests can monkeypatch env."""
    return Settings(
        app_env=os.getenv("APP_ENV", "development").strip().lower() or "development",
        record_store=os.getenv("RECORD_STORE", "sql").strip().lower() or "sql",
        airtable_api_key=os.getenv("AIRTABLE_API_KEY", "").strip(),
        airtable_base_id=os.getenv("AIRTABLE_BASE_ID", "").strip(),
        airtable_timeout_sec=_env_float("AIRTABLE_TIMEOUT_SEC", 30.0),
        airtable_max_retries=_env_int("AIRTABLE_MAX_RETRIES", 3),
        store_scan_limit=_env_int("STORE_SCAN_LIMIT", 500),
        draft_retention_days=_env_int("DRAFT_RETENTION_DAYS", 30),
        upload_dir=Path(os.getenv("UPLOAD_DIR", "data/uploads")),
        max_upload_bytes=_env_int("MAX_UPLOAD_BYTES", 10 * 1024 * 1024),
        session_secret=os.getenv("SESSION_SECRET", "change-me"),
        session_ttl_minutes=_env_int("SESSION_TTL_MINUTES", 720),
        admin_email=os.getenv("ADMIN_EMAIL", "").strip(),
        admin_password=os.getenv("ADMIN_PASSWORD", ""),
        notify_webhook_url=os.getenv("NOTIFY_WEBHOOK_URL", "").strip(),
        notify_timeout_sec=_env_float("NOTIFY_TIMEOUT_SEC", 10.0),
        bcrypt_rounds=_env_int("BCRYPT_ROUNDS", 10),
        cors_origins=_split_csv(os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)),
        rfp_type=os.getenv("RFP_TYPE", DEFAULT_RFP_TYPE).strip() or DEFAULT_RFP_TYPE,
    )
