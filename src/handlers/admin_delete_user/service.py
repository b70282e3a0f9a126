"""Business logic for privileged user deletion.

The deletion flow for one request is:

    checking_self -> checking_admin -> deleting_domain -> deleting_identity -> done

Authorization failures stop the flow before anything is deleted. Domain
cleanup is best-effort: a failing table does not stop the remaining tables
or the identity step. An identity failure after a clean domain pass is a
partial success (`domain_only`), since the domain rows cannot be restored.
"""

from dataclasses import dataclass, field
from enum import Enum

from aws_lambda_powertools import Logger

from core.infrastructure.aws.cognito_identity import CognitoIdentityGateway
from core.infrastructure.aws.dynamodb_catalog import (
    DynamoDBAdminRegistry,
    DynamoDBTargetCatalog,
    DynamoDBUserTable,
)
from core.models.errors import (
    DomainCleanupError,
    ForbiddenError,
    IdentityProviderError,
    TargetServiceError,
    ValidationError,
)
from core.models.target import Identity
from core.repositories.identity_repository import AdminRegistry, IdentityGateway
from core.repositories.metadata_repository import UserScopedTable
from core.utils.config import ServiceConfig, get_config
from core.utils.constants import (
    DOMAIN_TABLE_ADMINS,
    DOMAIN_TABLE_PROFILES,
    DOMAIN_TABLE_TARGETS,
    ENV_COGNITO_USER_POOL_ID,
)

logger = Logger(UTC=True)

STATUS_DELETED = "deleted"
STATUS_DOMAIN_ONLY = "domain_only"


class DeletionStage(str, Enum):
    CHECKING_SELF = "checking_self"
    CHECKING_ADMIN = "checking_admin"
    DELETING_DOMAIN = "deleting_domain"
    DELETING_IDENTITY = "deleting_identity"
    DONE = "done"


@dataclass
class DeletionResult:
    """Outcome of a deletion that got past authorization."""

    status: str
    user_id: str
    deleted_rows: dict[str, int] = field(default_factory=dict)
    identity_deleted: bool = False
    warning: str | None = None
    detail: str | None = None


class CascadingDeleter:
    """Application service that removes a user and every row they own.

    Domain tables are cleaned in a fixed order: targets, admins, profiles.
    """

    def __init__(
        self,
        *,
        identity: IdentityGateway | None = None,
        admins: AdminRegistry | None = None,
        domain_tables: list[tuple[str, UserScopedTable]] | None = None,
        config: ServiceConfig | None = None,
    ) -> None:
        """Initialize the deleter, defaulting to the AWS-backed collaborators."""
        if identity is None or admins is None or domain_tables is None:
            config = config or get_config()

        if identity is None:
            # required before any domain row is deleted
            config.require(config.user_pool_id, ENV_COGNITO_USER_POOL_ID)

        self.identity = identity or CognitoIdentityGateway(config=config)
        self.admins = admins or DynamoDBAdminRegistry(config=config)
        self.domain_tables = domain_tables or [
            (DOMAIN_TABLE_TARGETS, DynamoDBTargetCatalog(config=config)),
            (DOMAIN_TABLE_ADMINS, DynamoDBUserTable.admins(config)),
            (DOMAIN_TABLE_PROFILES, DynamoDBUserTable.profiles(config)),
        ]

    def authenticate(self, auth_header: str | None) -> Identity:
        """Resolve the caller from the `Authorization` header.

        Raises:
            UnauthenticatedError: If the credential is absent or invalid
            IdentityProviderError: If the identity provider fails
        """
        return self.identity.resolve(auth_header)

    def authorize(self, *, caller: Identity, target_user_id: str) -> None:
        """Run the self-deletion and admin checks.

        Raises:
            ValidationError: If the caller targets their own account
            ForbiddenError: If the caller has no admin entry
            AdminCheckFailedError: If the admin lookup fails
        """
        logger.debug(
            "Authorizing deletion",
            extra={"stage": DeletionStage.CHECKING_SELF.value, "caller_id": caller.user_id},
        )
        if target_user_id == caller.user_id:
            logger.warning("Self-deletion attempt rejected", extra={"caller_id": caller.user_id})
            raise ValidationError(
                message="Admins cannot delete their own account",
                details={"stage": DeletionStage.CHECKING_SELF.value},
            )

        if not self.admins.is_admin(user_id=caller.user_id):
            logger.warning(
                "Non-admin deletion attempt rejected",
                extra={"stage": DeletionStage.CHECKING_ADMIN.value, "caller_id": caller.user_id},
            )
            raise ForbiddenError(details={"stage": DeletionStage.CHECKING_ADMIN.value})

    def run(self, *, caller: Identity, target_user_id: str) -> DeletionResult:
        """Authorize the caller, then delete the target user's rows and account.

        Returns:
            `deleted` when every step succeeded (including repeat calls that
            find nothing left), `domain_only` when only the identity step failed

        Raises:
            ValidationError: If the caller targets their own account
            ForbiddenError: If the caller has no admin entry
            AdminCheckFailedError: If the admin lookup fails
            DomainCleanupError: If any domain table could not be cleaned
        """
        self.authorize(caller=caller, target_user_id=target_user_id)

        logger.info(
            "Deleting user",
            extra={"caller_id": caller.user_id, "target_user_id": target_user_id},
        )

        deleted_rows, failures = self._delete_domain(target_user_id)

        identity_deleted = False
        identity_error: IdentityProviderError | None = None

        logger.debug(
            "Deleting identity account",
            extra={"stage": DeletionStage.DELETING_IDENTITY.value, "target_user_id": target_user_id},
        )
        try:
            identity_deleted = self.identity.delete_account(user_id=target_user_id)
        except IdentityProviderError as exc:
            identity_error = exc

        if failures:
            logger.error(
                "Domain cleanup incomplete",
                extra={
                    "target_user_id": target_user_id,
                    "failed_tables": list(failures),
                    "identity_deleted": identity_deleted,
                },
            )
            raise DomainCleanupError(
                message=f"Domain cleanup failed for: {', '.join(failures)}",
                details={
                    "stage": DeletionStage.DELETING_DOMAIN.value,
                    "failed_tables": failures,
                    "deleted_rows": deleted_rows,
                    "identity_deleted": identity_deleted,
                    "identity_error": identity_error.message if identity_error else None,
                },
            )

        if identity_error is not None:
            logger.warning(
                "Identity deletion failed after domain cleanup",
                extra={"target_user_id": target_user_id, "error": identity_error.message},
            )
            return DeletionResult(
                status=STATUS_DOMAIN_ONLY,
                user_id=target_user_id,
                deleted_rows=deleted_rows,
                identity_deleted=False,
                warning="Auth delete failed",
                detail=identity_error.message,
            )

        logger.info(
            "User deleted",
            extra={
                "stage": DeletionStage.DONE.value,
                "target_user_id": target_user_id,
                "deleted_rows": deleted_rows,
                "identity_deleted": identity_deleted,
            },
        )
        return DeletionResult(
            status=STATUS_DELETED,
            user_id=target_user_id,
            deleted_rows=deleted_rows,
            identity_deleted=identity_deleted,
        )

    def _delete_domain(self, user_id: str) -> tuple[dict[str, int], dict[str, str]]:
        """Delete the user's rows from every domain table, in order.

        Returns:
            (rows deleted per table, error message per failed table)
        """
        deleted_rows: dict[str, int] = {}
        failures: dict[str, str] = {}

        for name, table in self.domain_tables:
            logger.debug(
                "Deleting domain rows",
                extra={"stage": DeletionStage.DELETING_DOMAIN.value, "table": name, "user_id": user_id},
            )
            try:
                deleted_rows[name] = table.delete_by_user(user_id=user_id)
            except TargetServiceError as exc:
                logger.exception("Domain table cleanup failed", extra={"table": name, "user_id": user_id})
                failures[name] = exc.message

        return deleted_rows, failures
