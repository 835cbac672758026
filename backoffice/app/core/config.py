import json
import re
from functools import lru_cache
from typing import Annotated, Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _split_list_value(raw: Any) -> list[str]:
    """Split a list-valued environment variable.

    Accepts a JSON array or a comma/whitespace separated string. Blank
    entries are dropped.
    """
    if raw is None:
        return []
    if isinstance(raw, (list, tuple, set, frozenset)):
        items = [str(v).strip() for v in raw]
        return [v for v in items if v]

    raw = str(raw).strip()
    if not raw or raw == "[]":
        return []

    if raw.startswith("["):
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list):
            items = [str(v).strip() for v in parsed]
            return [v for v in items if v]

    return [p for p in re.split(r"[,\s]+", raw) if p]


def _parse_cors_origins(raw: Any) -> list[str]:
    parts = _split_list_value(raw)
    if "*" in parts:
        return ["*"]

    origins: list[str] = []
    for part in parts:
        if "://" in part:
            origins.append(part)
            continue
        # Browsers include the scheme in the Origin header.
        origins.append(f"http://{part}")
        origins.append(f"https://{part}")

    # Deduplicate while preserving order.
    seen: set[str] = set()
    result: list[str] = []
    for origin in origins:
        if origin in seen:
            continue
        seen.add(origin)
        result.append(origin)
    return result


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be configured via environment variables or .env file.
    """

    # Debug mode - enables detailed error responses
    debug: bool = False

    # Database settings
    database_url: str = "sqlite+aiosqlite:///./backoffice.db"
    db_pool_size: int = 10
    db_max_overflow: int = 20
    db_pool_timeout: int = 30
    db_pool_recycle: int = 300
    db_pool_pre_ping: bool = True
    db_echo: bool = False

    # Admin allow-list (comma separated emails)
    admin_emails: Annotated[list[str], NoDecode] = []

    # Identity provider (Firebase) settings
    firebase_project_id: str = ""
    firebase_client_email: str = ""
    firebase_private_key: str = ""
    firebase_jwks_url: str = (
        "https://www.googleapis.com/service_accounts/v1/jwk/"
        "securetoken@system.gserviceaccount.com"
    )
    jwks_refresh_interval: int = 3600
    # Unknown key ids trigger at most one refetch per interval
    jwks_min_refresh_interval: float = 60.0

    # Token checks applied on top of the provider's own validation
    token_min_length: int = 100
    token_max_age_seconds: int = 3600

    # Rate limiting settings (fixed window, per client address and route)
    rate_limit_window_seconds: int = 60
    rate_limit_read_requests: int = 100
    rate_limit_write_requests: int = 30
    rate_limit_delete_requests: int = 10
    rate_limit_max_entries: int = 10000
    rate_limit_sweep_interval_seconds: float = 60.0

    # Request gate settings
    max_body_size: int = 1024 * 1024  # 1MB, checked by the gate after auth
    max_request_size: int = 10 * 1024 * 1024  # 10MB, transport ceiling for every request
    gate_timeout_seconds: float = 10.0
    store_timeout_seconds: float = 15.0

    # HTTP client settings (identity provider key fetches)
    httpx_timeout: float = 10.0
    httpx_connect_timeout: float = 5.0
    httpx_read_timeout: float = 10.0
    httpx_write_timeout: float = 5.0
    httpx_pool_timeout: float = 5.0
    httpx_max_connections: int = 20
    httpx_max_keepalive_connections: int = 5
    httpx_keepalive_expiry: float = 30.0

    # Logging settings
    log_level: str = "INFO"
    log_format: str = "text"  # text | structured | json

    # CORS settings
    cors_origins: Annotated[list[str], NoDecode] = []

    @field_validator("admin_emails", mode="before")
    @classmethod
    def decode_admin_emails(cls, v: Any) -> list[str]:
        return [email.lower() for email in _split_list_value(v)]

    @field_validator("cors_origins", mode="before")
    @classmethod
    def decode_cors_origins(cls, v: Any) -> list[str]:
        return _parse_cors_origins(v)

    @field_validator("firebase_private_key", mode="before")
    @classmethod
    def normalize_private_key(cls, v: Any) -> str:
        """Secret stores often keep the PEM with escaped newlines."""
        if v is None:
            return ""
        return str(v).replace("\\n", "\n")

    @field_validator(
        "rate_limit_window_seconds",
        "rate_limit_read_requests",
        "rate_limit_write_requests",
        "rate_limit_delete_requests",
        "rate_limit_max_entries",
    )
    @classmethod
    def validate_rate_limit_positive(cls, v: int) -> int:
        """Validate rate limit values are positive."""
        if v < 1:
            raise ValueError("Rate limit values must be at least 1")
        return v

    @field_validator(
        "gate_timeout_seconds",
        "store_timeout_seconds",
        "rate_limit_sweep_interval_seconds",
        "httpx_timeout",
        "httpx_connect_timeout",
        "httpx_read_timeout",
    )
    @classmethod
    def validate_timeout_positive(cls, v: float) -> float:
        """Validate timeout values are positive."""
        if v <= 0:
            raise ValueError("Timeout values must be positive")
        return v

    @field_validator("max_body_size", "max_request_size", "token_max_age_seconds")
    @classmethod
    def validate_limit_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Limit values must be at least 1")
        return v

    @property
    def firebase_issuer(self) -> str:
        return f"https://securetoken.google.com/{self.firebase_project_id}"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
