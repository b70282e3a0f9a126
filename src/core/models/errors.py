"""Custom exception classes for the target service."""

from typing import Any

from core.utils.constants import (
    ERROR_CODE_ADMIN_CHECK_FAILED,
    ERROR_CODE_ARTIFACT_DELETE_FAILED,
    ERROR_CODE_ARTIFACT_UPLOAD_FAILED,
    ERROR_CODE_CATALOG,
    ERROR_CODE_COMPILATION_FAILED,
    ERROR_CODE_DOMAIN_CLEANUP_FAILED,
    ERROR_CODE_FORBIDDEN,
    ERROR_CODE_IDENTITY_PROVIDER,
    ERROR_CODE_IMAGE_FETCH_FAILED,
    ERROR_CODE_UNAUTHENTICATED,
    ERROR_CODE_VALIDATION_FAILED,
)


class TargetServiceError(Exception):
    """
    Base exception for all target service errors.

    All custom errors must inherit from this class.
    Callers must explicitly provide a message and error code.
    Optional contextual information can be supplied via `details`.
    """

    message: str
    error_code: str
    details: dict[str, Any]

    def __init__(
        self,
        *,
        message: str,
        error_code: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.details = details or {}

        super().__init__(self.message)


class ValidationError(TargetServiceError):
    """Raised when request validation fails."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_VALIDATION_FAILED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)


class UnauthenticatedError(TargetServiceError):
    """Raised when the caller's credential is absent or invalid."""

    def __init__(
        self,
        *,
        message: str = "Not authenticated",
        error_code: str = ERROR_CODE_UNAUTHENTICATED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)


class ForbiddenError(TargetServiceError):
    """Raised when an authenticated caller lacks the required privilege."""

    def __init__(
        self,
        *,
        message: str = "Forbidden: admin only",
        error_code: str = ERROR_CODE_FORBIDDEN,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)


class InternalError(TargetServiceError):
    """Base class for infrastructure failures surfaced as HTTP 500."""


class AdminCheckFailedError(InternalError):
    """Raised when the admin lookup itself fails (not when the entry is absent)."""

    def __init__(
        self,
        *,
        message: str = "Admin check failed",
        error_code: str = ERROR_CODE_ADMIN_CHECK_FAILED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)


class IdentityProviderError(InternalError):
    """Raised when a Cognito operation fails for infrastructure reasons."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_IDENTITY_PROVIDER,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)


class ArtifactUploadFailedError(InternalError):
    """Raised when storing an artifact fails."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_ARTIFACT_UPLOAD_FAILED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)


class ArtifactDeletionFailedError(InternalError):
    """Raised when deleting an artifact fails."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_ARTIFACT_DELETE_FAILED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)


class ImageFetchFailedError(InternalError):
    """Raised when a source image cannot be downloaded from its URL."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_IMAGE_FETCH_FAILED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)


class CompilationFailedError(InternalError):
    """Raised when a descriptor cannot be compiled from an image."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_COMPILATION_FAILED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)


class CatalogError(InternalError):
    """Raised when a DynamoDB catalog operation fails."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_CATALOG,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)


class DomainCleanupError(InternalError):
    """Raised when one or more domain tables could not be cleaned for a user."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_DOMAIN_CLEANUP_FAILED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)
