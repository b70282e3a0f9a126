"""Abstract contracts for the identity provider and admin registry."""

from abc import ABC, abstractmethod

from core.models.target import Identity


class IdentityGateway(ABC):
    """Resolves bearer credentials and manages identity accounts."""

    @abstractmethod
    def resolve(self, auth_header: str | None) -> Identity:
        """Resolve an `Authorization` header value to the caller identity.

        Raises:
            UnauthenticatedError: If the header is absent, malformed or rejected
            IdentityProviderError: If the identity provider is unavailable
        """

    @abstractmethod
    def delete_account(self, *, user_id: str) -> bool:
        """Delete the identity account for `user_id`.

        Returns:
            True if an account was deleted, False if none existed

        Raises:
            IdentityProviderError: If the deletion fails
        """


class AdminRegistry(ABC):
    """Answers whether an identity holds operator privileges."""

    @abstractmethod
    def is_admin(self, *, user_id: str) -> bool:
        """Return True if `user_id` has an admin entry.

        Raises:
            AdminCheckFailedError: If the lookup itself fails
        """
