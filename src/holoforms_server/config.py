"""Server configuration — reads settings from environment variables.

All settings have sensible defaults for local development.  In production
the values are typically overridden via env vars or a ``.env`` file.
"""

import os
from dataclasses import dataclass, field

# --- Pagination defaults ---
# Read at import time so FastAPI Query() defaults can reference them.
DEFAULT_PAGE_LIMIT = int(os.getenv("DEFAULT_PAGE_LIMIT", "50"))
MAX_PAGE_LIMIT = int(os.getenv("MAX_PAGE_LIMIT", "500"))


@dataclass(frozen=True)
class ServerSettings:
    """Immutable server configuration read from environment at startup."""

    # Network
    host: str = "0.0.0.0"
    port: int = 8080

    # CORS: comma-separated origins, or "*" for wide-open dev mode
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    # Logging
    log_level: str = "INFO"

    # Trusted proxy secret: when set, every request that carries
    # X-User-ID must also carry a matching X-Proxy-Secret, proving the
    # identity header came from the API gateway.
    trusted_proxy_secret: str | None = None

    # Attachment storage: "local" or "s3"
    storage_backend: str = "local"
    local_storage_path: str = "./uploads"
    public_storage_base_url: str = "http://localhost:8080/uploads"
    s3_bucket: str | None = None
    s3_region: str | None = None
    s3_endpoint_url: str | None = None
    # Public URL prefix of the bucket; derived from bucket/region when unset
    s3_public_base_url: str | None = None


def load_settings() -> ServerSettings:
    """Build settings from environment variables."""
    raw_origins = os.getenv("SERVER_CORS_ORIGINS", "*")
    origins = [o.strip() for o in raw_origins.split(",") if o.strip()]

    return ServerSettings(
        host=os.getenv("SERVER_HOST", "0.0.0.0"),
        port=int(os.getenv("SERVER_PORT", "8080")),
        cors_origins=origins,
        log_level=os.getenv("SERVER_LOG_LEVEL", "INFO").upper(),
        trusted_proxy_secret=os.getenv("TRUSTED_PROXY_SECRET") or None,
        storage_backend=os.getenv("STORAGE_BACKEND", "local").lower(),
        local_storage_path=os.getenv("LOCAL_STORAGE_PATH", "./uploads"),
        public_storage_base_url=os.getenv(
            "PUBLIC_STORAGE_BASE_URL", "http://localhost:8080/uploads"
        ),
        s3_bucket=os.getenv("S3_BUCKET") or None,
        s3_region=os.getenv("S3_REGION") or None,
        s3_endpoint_url=os.getenv("S3_ENDPOINT_URL") or None,
        s3_public_base_url=os.getenv("S3_PUBLIC_BASE_URL") or None,
    )
