import logging
import os
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from src.shared.exceptions import ConfigurationError


logger = logging.getLogger(__name__)

REQUIRED_ENV_VARS = (
    "MINIO_ENDPOINT",
    "MINIO_ACCESS_KEY",
    "MINIO_SECRET_KEY",
    "MINIO_BUCKET",
)

UNLIMITED_ATTEMPTS = {"0", "unlimited", "inf", "none"}
TRUTHY = {"1", "true", "yes", "on"}


class RetryPolicy(BaseModel):
    """How long startup waits for the storage backend.

    ``max_attempts=None`` retries forever.
    """

    model_config = ConfigDict(frozen=True)

    max_attempts: int | None = Field(default=10, ge=1)
    interval_seconds: float = Field(default=2.0, ge=0)

    @property
    def is_unbounded(self) -> bool:
        return self.max_attempts is None


class GatewayConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    endpoint: str = Field(min_length=1)
    access_key: str = Field(min_length=1)
    secret_key: str = Field(min_length=1)
    bucket: str = Field(min_length=1)
    secure: bool = False
    retry: RetryPolicy = RetryPolicy()
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


def normalize_endpoint(endpoint: str) -> tuple[str, bool | None]:
    """Strip a URL scheme from the endpoint.

    The MinIO client wants ``host:port``. Returns the bare endpoint and the
    transport security implied by the scheme, or ``None`` if there was none.
    """
    endpoint = endpoint.strip()
    if endpoint.startswith("https://"):
        return endpoint[len("https://"):].strip("/"), True
    if endpoint.startswith("http://"):
        return endpoint[len("http://"):].strip("/"), False
    return endpoint.strip("/"), None


def _parse_max_attempts(raw: str) -> int | None:
    if raw.strip().lower() in UNLIMITED_ATTEMPTS:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"STORAGE_MAX_ATTEMPTS must be an integer, got {raw!r}")


def _parse_interval(raw: str) -> float:
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"STORAGE_RETRY_INTERVAL must be a number, got {raw!r}")


def load_env_file(path: str) -> bool:
    """Load KEY=VALUE pairs from ``path`` without overriding the environment."""
    loaded = load_dotenv(path, override=False)
    if not loaded:
        logger.info("No %s file found or failed to load it", path)
    return loaded


def load_config() -> GatewayConfig:
    load_env_file(os.getenv("GATEWAY_ENV_FILE", ".env"))

    missing = [name for name in REQUIRED_ENV_VARS if not os.getenv(name)]
    if missing:
        raise ConfigurationError(
            "One or more required environment variables are missing: "
            + ", ".join(missing)
        )

    endpoint, scheme_secure = normalize_endpoint(os.environ["MINIO_ENDPOINT"])
    secure_env = os.getenv("MINIO_SECURE")
    if secure_env is not None:
        secure = secure_env.strip().lower() in TRUTHY
    else:
        secure = bool(scheme_secure)

    max_attempts = _parse_max_attempts(os.getenv("STORAGE_MAX_ATTEMPTS", "10"))
    interval = _parse_interval(os.getenv("STORAGE_RETRY_INTERVAL", "2"))

    try:
        return GatewayConfig(
            endpoint=endpoint,
            access_key=os.environ["MINIO_ACCESS_KEY"],
            secret_key=os.environ["MINIO_SECRET_KEY"],
            bucket=os.environ["MINIO_BUCKET"],
            secure=secure,
            retry=RetryPolicy(max_attempts=max_attempts, interval_seconds=interval),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
    except ValidationError as e:
        raise ConfigurationError(f"Invalid gateway configuration: {e}") from e
