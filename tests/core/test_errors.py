import pytest
from core.models.errors import (
    AdminCheckFailedError,
    ArtifactDeletionFailedError,
    ArtifactUploadFailedError,
    CatalogError,
    CompilationFailedError,
    DomainCleanupError,
    ForbiddenError,
    IdentityProviderError,
    ImageFetchFailedError,
    InternalError,
    TargetServiceError,
    UnauthenticatedError,
    ValidationError,
)
from core.utils.constants import (
    ERROR_CODE_ADMIN_CHECK_FAILED,
    ERROR_CODE_FORBIDDEN,
    ERROR_CODE_UNAUTHENTICATED,
    ERROR_CODE_VALIDATION_FAILED,
)


class TestTargetServiceError:
    def test_base_error_sets_fields(self) -> None:
        err = TargetServiceError(message="boom", error_code="X", details={"a": 1})

        assert err.message == "boom"
        assert err.error_code == "X"
        assert err.details == {"a": 1}
        assert str(err) == "boom"

    def test_details_default_to_empty_dict(self) -> None:
        assert TargetServiceError(message="m", error_code="c").details == {}

    def test_arguments_are_keyword_only(self) -> None:
        with pytest.raises(TypeError):
            TargetServiceError("m", "c")  # type: ignore[misc]


class TestClientErrors:
    def test_validation_error_code(self) -> None:
        err = ValidationError(message="bad input")
        assert err.error_code == ERROR_CODE_VALIDATION_FAILED

    def test_unauthenticated_default_message(self) -> None:
        err = UnauthenticatedError()
        assert err.message == "Not authenticated"
        assert err.error_code == ERROR_CODE_UNAUTHENTICATED

    def test_forbidden_default_message(self) -> None:
        err = ForbiddenError()
        assert err.message == "Forbidden: admin only"
        assert err.error_code == ERROR_CODE_FORBIDDEN

    def test_client_errors_are_not_internal(self) -> None:
        for err in (ValidationError(message="m"), UnauthenticatedError(), ForbiddenError()):
            assert not isinstance(err, InternalError)


class TestInternalErrors:
    @pytest.mark.parametrize(
        "error_type",
        [
            IdentityProviderError,
            ArtifactUploadFailedError,
            ArtifactDeletionFailedError,
            ImageFetchFailedError,
            CompilationFailedError,
            CatalogError,
            DomainCleanupError,
        ],
    )
    def test_internal_family(self, error_type) -> None:
        err = error_type(message="failed")

        assert isinstance(err, InternalError)
        assert isinstance(err, TargetServiceError)
        assert err.error_code

    def test_admin_check_failed_defaults(self) -> None:
        err = AdminCheckFailedError()
        assert err.message == "Admin check failed"
        assert err.error_code == ERROR_CODE_ADMIN_CHECK_FAILED

    def test_internal_error_requires_code(self) -> None:
        with pytest.raises(TypeError):
            InternalError(message="m")  # type: ignore[call-arg]
