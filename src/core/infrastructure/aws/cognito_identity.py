"""Cognito-backed implementation of IdentityGateway."""

from aws_lambda_powertools import Logger
from botocore.exceptions import ClientError

from core.infrastructure.adapters.cognito_adapter import CognitoAdapter, CognitoAdapterProtocol
from core.models.errors import IdentityProviderError, UnauthenticatedError
from core.models.target import Identity
from core.repositories.identity_repository import IdentityGateway
from core.utils.config import ServiceConfig
from core.utils.constants import BEARER_SCHEME, ERROR_CODE_IDENTITY_DELETE_FAILED

logger = Logger(UTC=True)

# Cognito error codes that mean "this credential does not identify anyone"
_REJECTED_TOKEN_CODES = frozenset({"NotAuthorizedException", "UserNotFoundException"})


def extract_bearer_token(auth_header: str | None) -> str:
    """Return the token from a `Bearer <token>` header value.

    Raises:
        UnauthenticatedError: If the header is empty or malformed
    """
    if not auth_header or not auth_header.strip():
        raise UnauthenticatedError()

    parts = auth_header.strip().split()
    if len(parts) != 2 or parts[0].lower() != BEARER_SCHEME:
        raise UnauthenticatedError(message="Malformed Authorization header")

    return parts[1]


class CognitoIdentityGateway(IdentityGateway):
    """Resolves access tokens against a Cognito user pool.

    The caller's user id is the Cognito username. Raw tokens are never
    logged.
    """

    def __init__(
        self,
        adapter: CognitoAdapterProtocol | None = None,
        config: ServiceConfig | None = None,
    ) -> None:
        self._cognito: CognitoAdapterProtocol = adapter or CognitoAdapter(config)

    def resolve(self, auth_header: str | None) -> Identity:
        token = extract_bearer_token(auth_header)

        try:
            response = self._cognito.get_user(access_token=token)

        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code")
            if code in _REJECTED_TOKEN_CODES:
                logger.info("Access token rejected", extra={"error_code": code})
                raise UnauthenticatedError() from exc

            logger.error("Cognito get_user failed", extra={"error_code": code})
            raise IdentityProviderError(
                message="Unable to verify credentials at this time",
            ) from exc

        except Exception as exc:
            logger.exception("Unexpected error resolving identity")
            raise IdentityProviderError(
                message="Unable to verify credentials at this time",
            ) from exc

        username = response.get("Username")
        if not username:
            raise UnauthenticatedError()

        attributes = {
            attr.get("Name"): attr.get("Value") for attr in response.get("UserAttributes", [])
        }

        logger.debug("Identity resolved", extra={"user_id": username})
        return Identity(user_id=username, email=attributes.get("email"))

    def delete_account(self, *, user_id: str) -> bool:
        logger.debug("Deleting identity account", extra={"user_id": user_id})

        try:
            self._cognito.admin_delete_user(username=user_id)

        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code")
            if code == "UserNotFoundException":
                logger.info("Identity account already absent", extra={"user_id": user_id})
                return False

            logger.error(
                "Cognito admin_delete_user failed",
                extra={"user_id": user_id, "error_code": code},
            )
            raise IdentityProviderError(
                message=f"Auth delete failed: {code or 'unknown error'}",
                error_code=ERROR_CODE_IDENTITY_DELETE_FAILED,
                details={"user_id": user_id},
            ) from exc

        except Exception as exc:
            logger.exception("Unexpected error deleting identity account")
            raise IdentityProviderError(
                message=f"Auth delete failed: {exc}",
                error_code=ERROR_CODE_IDENTITY_DELETE_FAILED,
                details={"user_id": user_id},
            ) from exc

        logger.info("Identity account deleted", extra={"user_id": user_id})
        return True
