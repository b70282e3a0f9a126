"""Abstract contracts for catalog and user-owned table persistence."""

from abc import ABC, abstractmethod

from core.models.target import TargetRecord


class UserScopedTable(ABC):
    """A table whose rows can be removed by owning user id."""

    @abstractmethod
    def delete_by_user(self, *, user_id: str) -> int:
        """Delete every row owned by `user_id`.

        Deleting a user with no rows succeeds and returns 0.

        Returns:
            Number of rows deleted

        Raises:
            CatalogError: If the delete fails
        """


class CatalogWriter(UserScopedTable):
    """Contract for the target catalog.

    Implementations could be DynamoDB, PostgreSQL, MongoDB, etc.
    """

    @abstractmethod
    def insert(self, *, record: TargetRecord) -> str:
        """Insert a target record and return its id.

        Raises:
            CatalogError: If the insert fails or the id already exists
        """
