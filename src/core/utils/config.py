"""Service configuration loaded from the Lambda environment.

The configuration is read once per process and then shared read-only by
every invocation handled by that process.
"""

import os
from functools import lru_cache

from pydantic import BaseModel, ConfigDict, Field

from core.utils.constants import (
    COMPILER_PASSTHROUGH,
    CORS_ORIGIN,
    DEFAULT_AWS_REGION,
    DEFAULT_DESCRIPTOR_PREFIX,
    DEFAULT_IMAGE_PREFIX,
    ENV_ADMIN_TABLE_NAME,
    ENV_ALLOWED_ORIGINS,
    ENV_ARTIFACT_PUBLIC_BASE_URL,
    ENV_AWS_ENDPOINT_URL,
    ENV_AWS_REGION,
    ENV_COGNITO_USER_POOL_ID,
    ENV_DESCRIPTOR_COMPILER,
    ENV_DESCRIPTOR_COMPILER_COMMAND,
    ENV_DESCRIPTOR_COMPILER_TIMEOUT,
    ENV_DESCRIPTOR_COMPILER_URL,
    ENV_IMAGE_FETCH_TIMEOUT,
    ENV_PROFILE_TABLE_NAME,
    ENV_TARGET_ARTIFACT_BUCKET_NAME,
    ENV_TARGET_CATALOG_TABLE_NAME,
    ENV_TARGET_DESCRIPTOR_PREFIX,
    ENV_TARGET_IMAGE_PREFIX,
)


class ServiceConfig(BaseModel):
    """Immutable snapshot of the environment-provided settings."""

    model_config = ConfigDict(frozen=True)

    aws_endpoint_url: str | None = None
    aws_region: str = DEFAULT_AWS_REGION

    artifact_bucket: str | None = None
    catalog_table: str | None = None
    admin_table: str | None = None
    profile_table: str | None = None
    user_pool_id: str | None = None

    allowed_origins: tuple[str, ...] = (CORS_ORIGIN,)
    public_base_url: str | None = None
    image_prefix: str = DEFAULT_IMAGE_PREFIX
    descriptor_prefix: str = DEFAULT_DESCRIPTOR_PREFIX

    compiler_backend: str = COMPILER_PASSTHROUGH
    compiler_url: str | None = None
    compiler_command: str | None = None
    compiler_timeout: float | None = Field(None, gt=0)
    image_fetch_timeout: float | None = Field(None, gt=0)

    @classmethod
    def from_env(cls) -> "ServiceConfig":
        """Build a configuration from the current process environment."""
        origins = os.getenv(ENV_ALLOWED_ORIGINS) or CORS_ORIGIN

        return cls(
            aws_endpoint_url=os.getenv(ENV_AWS_ENDPOINT_URL) or None,
            aws_region=os.getenv(ENV_AWS_REGION) or DEFAULT_AWS_REGION,
            artifact_bucket=os.getenv(ENV_TARGET_ARTIFACT_BUCKET_NAME) or None,
            catalog_table=os.getenv(ENV_TARGET_CATALOG_TABLE_NAME) or None,
            admin_table=os.getenv(ENV_ADMIN_TABLE_NAME) or None,
            profile_table=os.getenv(ENV_PROFILE_TABLE_NAME) or None,
            user_pool_id=os.getenv(ENV_COGNITO_USER_POOL_ID) or None,
            allowed_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
            public_base_url=os.getenv(ENV_ARTIFACT_PUBLIC_BASE_URL) or None,
            image_prefix=_strip_slashes(
                os.getenv(ENV_TARGET_IMAGE_PREFIX) or DEFAULT_IMAGE_PREFIX
            ),
            descriptor_prefix=_strip_slashes(
                os.getenv(ENV_TARGET_DESCRIPTOR_PREFIX) or DEFAULT_DESCRIPTOR_PREFIX
            ),
            compiler_backend=(
                os.getenv(ENV_DESCRIPTOR_COMPILER) or COMPILER_PASSTHROUGH
            ).strip().lower(),
            compiler_url=os.getenv(ENV_DESCRIPTOR_COMPILER_URL) or None,
            compiler_command=os.getenv(ENV_DESCRIPTOR_COMPILER_COMMAND) or None,
            compiler_timeout=_optional_float(ENV_DESCRIPTOR_COMPILER_TIMEOUT),
            image_fetch_timeout=_optional_float(ENV_IMAGE_FETCH_TIMEOUT),
        )

    def allows_origin(self, origin: str | None) -> bool:
        """Return True if a request from `origin` may be served."""
        if not origin or CORS_ORIGIN in self.allowed_origins:
            return True
        return origin in self.allowed_origins

    def require(self, value: str | None, env_name: str) -> str:
        """Return a required setting or fail loudly when it is missing."""
        if not value:
            raise RuntimeError(f"{env_name} environment variable is not set")
        return value


def _strip_slashes(value: str) -> str:
    return value.strip().strip("/")


def _optional_float(env_name: str) -> float | None:
    raw = os.getenv(env_name)
    if raw is None or not raw.strip():
        return None
    return float(raw)


@lru_cache(maxsize=1)
def get_config() -> ServiceConfig:
    """Return the process-wide configuration, loading it on first use."""
    return ServiceConfig.from_env()
