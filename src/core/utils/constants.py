"""Global constants used throughout the application.

This module centralizes error codes, storage layout defaults, and the names
of the environment variables the service reads. Using constants prevents
hardcoding values and makes it easy to change them globally.
"""

from typing import Final

# ============================================================================
# Error Codes
# ============================================================================


# Client Errors
ERROR_CODE_VALIDATION_FAILED = "VALIDATION_FAILED"
ERROR_CODE_UNAUTHENTICATED = "UNAUTHENTICATED"
ERROR_CODE_FORBIDDEN = "FORBIDDEN"
ERROR_CODE_ORIGIN_NOT_ALLOWED = "ORIGIN_NOT_ALLOWED"

# Identity / Authorization Errors
ERROR_CODE_IDENTITY_PROVIDER = "IDENTITY_PROVIDER_ERROR"
ERROR_CODE_IDENTITY_DELETE_FAILED = "IDENTITY_DELETE_FAILED"
ERROR_CODE_ADMIN_CHECK_FAILED = "ADMIN_CHECK_FAILED"

# Storage Errors
ERROR_CODE_ARTIFACT_UPLOAD_FAILED = "ARTIFACT_UPLOAD_FAILED"
ERROR_CODE_ARTIFACT_DELETE_FAILED = "ARTIFACT_DELETE_FAILED"
ERROR_CODE_IMAGE_FETCH_FAILED = "IMAGE_FETCH_FAILED"

# Compilation Errors
ERROR_CODE_COMPILATION_FAILED = "COMPILATION_FAILED"

# Catalog / DynamoDB Errors
ERROR_CODE_CATALOG = "CATALOG_ERROR"
ERROR_CODE_CATALOG_INSERT_FAILED = "CATALOG_INSERT_FAILED"
ERROR_CODE_CATALOG_DELETE_FAILED = "CATALOG_DELETE_FAILED"
ERROR_CODE_DOMAIN_CLEANUP_FAILED = "DOMAIN_CLEANUP_FAILED"


# ============================================================================
# Target Upload Constraints
# ============================================================================

MAX_IMAGE_SIZE = 4 * 1024 * 1024  # 4MB in bytes

DEFAULT_IMAGE_EXTENSION = "jpg"
DESCRIPTOR_EXTENSION = "mind"
DESCRIPTOR_CONTENT_TYPE = "application/octet-stream"

MIME_TYPE_EXTENSION_MAP: Final[dict[str, tuple[str, ...]]] = {
    "image/jpeg": ("jpg", "jpeg"),
    "image/png": ("png",),
    "image/gif": ("gif",),
    "image/webp": ("webp",),
}

# ============================================================================
# Storage Layout
# ============================================================================

DEFAULT_IMAGE_PREFIX = "targets"
DEFAULT_DESCRIPTOR_PREFIX = "minds"

# ============================================================================
# DynamoDB Layout
# ============================================================================

TARGET_ID_ATTRIBUTE = "target_id"
USER_ID_ATTRIBUTE = "user_id"
TARGET_USER_INDEX = "user-created-index"

# Domain tables removed for a user, in deletion order
DOMAIN_TABLE_TARGETS = "targets"
DOMAIN_TABLE_ADMINS = "admins"
DOMAIN_TABLE_PROFILES = "profiles"

# ============================================================================
# Descriptor Compiler Backends
# ============================================================================

COMPILER_PASSTHROUGH = "passthrough"
COMPILER_REMOTE = "remote"
COMPILER_COMMAND = "command"

# ============================================================================
# API Gateway Configuration
# ============================================================================

CORS_ORIGIN = "*"
CORS_METHODS = "GET,POST,OPTIONS"
CORS_HEADERS = "Content-Type,Authorization,X-Api-Key"
DEFAULT_CONTENT_TYPE = "application/json"
BEARER_SCHEME = "bearer"

METRICS_NAMESPACE = "MindTargetService"

# ============================================================================
# Environment Variable Names
# ============================================================================

ENV_AWS_ENDPOINT_URL = "AWS_ENDPOINT_URL"
ENV_AWS_REGION = "AWS_REGION"
ENV_TARGET_ARTIFACT_BUCKET_NAME = "TARGET_ARTIFACT_BUCKET_NAME"
ENV_TARGET_CATALOG_TABLE_NAME = "TARGET_CATALOG_TABLE_NAME"
ENV_ADMIN_TABLE_NAME = "ADMIN_TABLE_NAME"
ENV_PROFILE_TABLE_NAME = "PROFILE_TABLE_NAME"
ENV_COGNITO_USER_POOL_ID = "COGNITO_USER_POOL_ID"
ENV_ALLOWED_ORIGINS = "ALLOWED_ORIGINS"
ENV_ARTIFACT_PUBLIC_BASE_URL = "ARTIFACT_PUBLIC_BASE_URL"
ENV_TARGET_IMAGE_PREFIX = "TARGET_IMAGE_PREFIX"
ENV_TARGET_DESCRIPTOR_PREFIX = "TARGET_DESCRIPTOR_PREFIX"
ENV_DESCRIPTOR_COMPILER = "DESCRIPTOR_COMPILER"
ENV_DESCRIPTOR_COMPILER_URL = "DESCRIPTOR_COMPILER_URL"
ENV_DESCRIPTOR_COMPILER_COMMAND = "DESCRIPTOR_COMPILER_COMMAND"
ENV_DESCRIPTOR_COMPILER_TIMEOUT = "DESCRIPTOR_COMPILER_TIMEOUT"
ENV_IMAGE_FETCH_TIMEOUT = "IMAGE_FETCH_TIMEOUT"

DEFAULT_AWS_REGION = "us-east-1"


# ============================================================================
# Helper Functions
# ============================================================================


def get_max_image_size_mb() -> int:
    """Get maximum image size in megabytes."""
    return MAX_IMAGE_SIZE // (1024 * 1024)
