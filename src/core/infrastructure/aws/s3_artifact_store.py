"""S3-backed implementation of ArtifactStore."""

from aws_lambda_powertools import Logger
from botocore.exceptions import ClientError

from core.infrastructure.adapters.s3_adapter import S3Adapter, S3AdapterProtocol
from core.models.errors import ArtifactDeletionFailedError, ArtifactUploadFailedError
from core.repositories.storage_repository import ArtifactStore
from core.utils.config import ServiceConfig, get_config

logger = Logger(UTC=True)


class S3ArtifactStore(ArtifactStore):
    """Artifact storage implementation backed by Amazon S3.

    Public URLs are served from `ARTIFACT_PUBLIC_BASE_URL` when it is set
    (CDN or S3-compatible gateway), otherwise from the virtual-hosted S3
    endpoint of the bucket.
    """

    def __init__(
        self,
        adapter: S3AdapterProtocol | None = None,
        config: ServiceConfig | None = None,
    ) -> None:
        """Create storage using the provided S3 adapter."""
        config = config or get_config()

        self._s3: S3AdapterProtocol = adapter or S3Adapter(config)
        self._public_base_url = (config.public_base_url or "").rstrip("/")
        self._region = config.aws_region

    def public_url(self, *, bucket: str, path: str) -> str:
        """Return the public URL for an object key."""
        if self._public_base_url:
            return f"{self._public_base_url}/{bucket}/{path}"

        return f"https://{bucket}.s3.{self._region}.amazonaws.com/{path}"

    def put(self, *, bucket: str, path: str, data: bytes, content_type: str) -> str:
        """Upload artifact bytes to S3 and return the public URL."""
        logger.debug(
            "Uploading artifact",
            extra={
                "bucket": bucket,
                "key": path,
                "size": len(data),
                "content_type": content_type,
            },
        )

        try:
            self._s3.put_object(
                bucket=bucket,
                key=path,
                body=data,
                content_type=content_type,
                metadata={"source": "mind-target-service"},
            )

        except ClientError as exc:
            logger.error("S3 upload failed", extra={"bucket": bucket, "key": path})
            raise ArtifactUploadFailedError(
                message="Unable to upload artifact at this time",
                details={"bucket": bucket, "key": path},
            ) from exc

        except Exception as exc:
            logger.exception("Unexpected error uploading artifact")
            raise ArtifactUploadFailedError(
                message="Unable to upload artifact at this time",
                details={"bucket": bucket, "key": path},
            ) from exc

        logger.info("Artifact uploaded successfully", extra={"bucket": bucket, "key": path})
        return self.public_url(bucket=bucket, path=path)

    def delete(self, *, bucket: str, path: str) -> None:
        """Delete an artifact object from S3."""
        logger.debug("Deleting artifact", extra={"bucket": bucket, "key": path})

        try:
            self._s3.delete_object(bucket=bucket, key=path)
            logger.info("Artifact deleted successfully", extra={"bucket": bucket, "key": path})

        except ClientError as exc:
            logger.error("S3 deletion failed", extra={"bucket": bucket, "key": path})
            raise ArtifactDeletionFailedError(
                message="Unable to delete artifact at this time",
                details={"bucket": bucket, "key": path},
            ) from exc

        except Exception as exc:
            logger.exception("Unexpected error deleting artifact")
            raise ArtifactDeletionFailedError(
                message="Unable to delete artifact at this time",
                details={"bucket": bucket, "key": path},
            ) from exc
