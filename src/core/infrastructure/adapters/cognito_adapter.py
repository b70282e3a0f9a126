"""Thin adapter for the Amazon Cognito user pool API."""

from typing import Any, Protocol

import boto3

from core.utils.config import ServiceConfig, get_config
from core.utils.constants import ENV_COGNITO_USER_POOL_ID


class _Boto3CognitoClient(Protocol):
    """Internal typing for boto3 cognito-idp client (AWS-facing only)."""

    def get_user(self, *, AccessToken: str) -> dict[str, Any]: ...

    def admin_delete_user(self, *, UserPoolId: str, Username: str) -> Any: ...


class CognitoAdapterProtocol(Protocol):
    """Minimal Cognito adapter protocol (gateway-facing)."""

    def get_user(self, *, access_token: str) -> dict[str, Any]: ...

    def admin_delete_user(self, *, username: str) -> None: ...


class CognitoAdapter:
    """Low-level Cognito operations (mechanical, no error handling).

    This adapter:
    - Wraps boto3 cognito-idp client; the user pool is only needed for admin calls
    - Does NOT handle errors (lets them bubble up)
    - Domain implementations catch and translate errors
    """

    def __init__(self, config: ServiceConfig | None = None) -> None:
        """Create Cognito client from environment configuration."""
        config = config or get_config()

        self._config = config
        self._client: _Boto3CognitoClient = boto3.client(
            "cognito-idp",
            endpoint_url=config.aws_endpoint_url,
            region_name=config.aws_region,
        )

    def get_user(self, *, access_token: str) -> dict[str, Any]:
        """Return the user owning an access token.
        Raises boto3 exceptions - caught by domain implementation.
        """
        return self._client.get_user(AccessToken=access_token)

    def admin_delete_user(self, *, username: str) -> None:
        """Delete a user from the pool with service credentials.
        Raises RuntimeError if no user pool is configured, and boto3
        exceptions - caught by domain implementation.
        """
        self._client.admin_delete_user(
            UserPoolId=self._config.require(self._config.user_pool_id, ENV_COGNITO_USER_POOL_ID),
            Username=username,
        )
