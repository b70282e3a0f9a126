"""DynamoDB-backed implementations of the catalog, user tables and admin registry."""

from typing import Any

from aws_lambda_powertools import Logger
from boto3.dynamodb.conditions import Key
from botocore.exceptions import ClientError

from core.infrastructure.adapters.dynamodb_adapter import DynamoDBAdapter, DynamoDBAdapterProtocol
from core.models.errors import AdminCheckFailedError, CatalogError
from core.models.target import TargetRecord
from core.repositories.identity_repository import AdminRegistry
from core.repositories.metadata_repository import CatalogWriter, UserScopedTable
from core.utils.config import ServiceConfig, get_config
from core.utils.constants import (
    ENV_ADMIN_TABLE_NAME,
    ENV_PROFILE_TABLE_NAME,
    ENV_TARGET_CATALOG_TABLE_NAME,
    ERROR_CODE_CATALOG_DELETE_FAILED,
    ERROR_CODE_CATALOG_INSERT_FAILED,
    TARGET_ID_ATTRIBUTE,
    TARGET_USER_INDEX,
    USER_ID_ATTRIBUTE,
)

logger = Logger(UTC=True)


class DynamoDBTargetCatalog(CatalogWriter):
    """Target catalog stored in DynamoDB.

    Rows are keyed by `target_id`; owned rows are reachable through the
    `user-created-index` GSI. All boto3 errors are caught and translated
    into `CatalogError`.
    """

    def __init__(
        self,
        adapter: DynamoDBAdapterProtocol | None = None,
        config: ServiceConfig | None = None,
    ) -> None:
        """Initialize with DynamoDB adapter."""
        if adapter is None:
            config = config or get_config()
            adapter = DynamoDBAdapter(
                config.require(config.catalog_table, ENV_TARGET_CATALOG_TABLE_NAME),
                config,
            )
        self._db: DynamoDBAdapterProtocol = adapter

    def insert(self, *, record: TargetRecord) -> str:
        """Insert a target row.

        Raises:
            CatalogError: If the id already exists or the put fails
        """
        item = record.to_item()
        log_extra = {"target_id": record.target_id, "user_id": record.user_id}

        logger.debug("Inserting target record", extra=log_extra)

        try:
            self._db.put_item(
                item=item,
                condition_expression=f"attribute_not_exists({TARGET_ID_ATTRIBUTE})",
            )

        except ClientError as exc:
            logger.error("DynamoDB put_item failed", extra=log_extra)

            if exc.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException":
                raise CatalogError(
                    message="Target record already exists",
                    error_code=ERROR_CODE_CATALOG_INSERT_FAILED,
                    details={"target_id": record.target_id},
                ) from exc

            raise CatalogError(
                message="Database insert failed",
                error_code=ERROR_CODE_CATALOG_INSERT_FAILED,
                details={"target_id": record.target_id},
            ) from exc

        except Exception as exc:
            logger.exception("Unexpected error inserting target record")
            raise CatalogError(
                message="Database insert failed",
                error_code=ERROR_CODE_CATALOG_INSERT_FAILED,
                details={"target_id": record.target_id},
            ) from exc

        logger.info("Target record created", extra=log_extra)
        return record.target_id

    def delete_by_user(self, *, user_id: str) -> int:
        """Delete every target owned by `user_id`.

        The user index is paged through until exhausted; each match is then
        deleted by its primary key. The index is eventually consistent, so a
        target inserted moments before the call can be missed and survive
        as residue, like an orphaned artifact.

        Raises:
            CatalogError: If the query or a delete fails
        """
        logger.debug("Deleting targets for user", extra={"user_id": user_id})

        query_kwargs: dict[str, Any] = {
            "IndexName": TARGET_USER_INDEX,
            "KeyConditionExpression": Key(USER_ID_ATTRIBUTE).eq(user_id),
        }
        target_ids: list[str] = []
        last_evaluated_key: dict[str, Any] | None = None

        try:
            while True:
                if last_evaluated_key:
                    query_kwargs["ExclusiveStartKey"] = last_evaluated_key

                response = self._db.query(**query_kwargs)
                target_ids.extend(item[TARGET_ID_ATTRIBUTE] for item in response.get("Items", []))

                last_evaluated_key = response.get("LastEvaluatedKey")
                if not last_evaluated_key:
                    break

            for target_id in target_ids:
                self._db.delete_item(key={TARGET_ID_ATTRIBUTE: target_id})

        except ClientError as exc:
            logger.error(
                "DynamoDB delete by user failed",
                extra={"user_id": user_id, "table": self._db.table_name},
            )
            raise CatalogError(
                message="Unable to delete target records",
                error_code=ERROR_CODE_CATALOG_DELETE_FAILED,
                details={"user_id": user_id, "table": self._db.table_name},
            ) from exc

        except Exception as exc:
            logger.exception("Unexpected error deleting target records")
            raise CatalogError(
                message="Unable to delete target records",
                error_code=ERROR_CODE_CATALOG_DELETE_FAILED,
                details={"user_id": user_id, "table": self._db.table_name},
            ) from exc

        logger.info("Target records deleted", extra={"user_id": user_id, "count": len(target_ids)})
        return len(target_ids)


class DynamoDBUserTable(UserScopedTable):
    """A DynamoDB table whose partition key is `user_id` (admins, profiles)."""

    def __init__(self, adapter: DynamoDBAdapterProtocol) -> None:
        self._db = adapter

    @classmethod
    def profiles(cls, config: ServiceConfig | None = None) -> "DynamoDBUserTable":
        config = config or get_config()
        return cls(DynamoDBAdapter(config.require(config.profile_table, ENV_PROFILE_TABLE_NAME), config))

    @classmethod
    def admins(cls, config: ServiceConfig | None = None) -> "DynamoDBUserTable":
        config = config or get_config()
        return cls(DynamoDBAdapter(config.require(config.admin_table, ENV_ADMIN_TABLE_NAME), config))

    def delete_by_user(self, *, user_id: str) -> int:
        """Delete the row keyed by `user_id`; returns 1 if it existed, else 0.

        Raises:
            CatalogError: If the delete fails
        """
        table = self._db.table_name
        logger.debug("Deleting user row", extra={"user_id": user_id, "table": table})

        try:
            response = self._db.delete_item(key={USER_ID_ATTRIBUTE: user_id}, return_old=True)

        except ClientError as exc:
            logger.error("DynamoDB delete_item failed", extra={"user_id": user_id, "table": table})
            raise CatalogError(
                message=f"Unable to delete rows from {table}",
                error_code=ERROR_CODE_CATALOG_DELETE_FAILED,
                details={"user_id": user_id, "table": table},
            ) from exc

        except Exception as exc:
            logger.exception("Unexpected error deleting user row")
            raise CatalogError(
                message=f"Unable to delete rows from {table}",
                error_code=ERROR_CODE_CATALOG_DELETE_FAILED,
                details={"user_id": user_id, "table": table},
            ) from exc

        count = 1 if response.get("Attributes") else 0
        logger.info("User row deleted", extra={"user_id": user_id, "table": table, "count": count})
        return count


class DynamoDBAdminRegistry(AdminRegistry):
    """Admin entries stored in DynamoDB, one row per privileged user id."""

    def __init__(
        self,
        adapter: DynamoDBAdapterProtocol | None = None,
        config: ServiceConfig | None = None,
    ) -> None:
        if adapter is None:
            config = config or get_config()
            adapter = DynamoDBAdapter(
                config.require(config.admin_table, ENV_ADMIN_TABLE_NAME),
                config,
            )
        self._db: DynamoDBAdapterProtocol = adapter

    def is_admin(self, *, user_id: str) -> bool:
        """Check whether `user_id` has an admin entry.

        BEHAVIOR ON ERROR:
        - A missing entry is a normal `False`
        - A failed lookup raises (fail-closed); it is never read as `False`

        Raises:
            AdminCheckFailedError: If the lookup fails
        """
        try:
            response = self._db.get_item(key={USER_ID_ATTRIBUTE: user_id}, consistent_read=True)

        except ClientError as exc:
            logger.error("DynamoDB admin lookup failed", extra={"user_id": user_id})
            raise AdminCheckFailedError(details={"user_id": user_id}) from exc

        except Exception as exc:
            logger.exception("Unexpected error checking admin entry")
            raise AdminCheckFailedError(details={"user_id": user_id}) from exc

        is_admin = response.get("Item") is not None
        logger.debug("Admin check completed", extra={"user_id": user_id, "is_admin": is_admin})
        return is_admin
