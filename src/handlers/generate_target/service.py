"""Business logic for target generation.

This module runs the ingestion pipeline for one request:

    validating -> uploading_image -> compiling -> uploading_descriptor
    -> recording -> done

Each stage runs at most once. A failing stage aborts the pipeline with the
stage's domain error; artifacts uploaded by earlier stages are left in place
and logged as orphaned, never rolled back.
"""

import uuid
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import TypeVar

from aws_lambda_powertools import Logger

from core.infrastructure.aws.dynamodb_catalog import DynamoDBTargetCatalog
from core.infrastructure.aws.s3_artifact_store import S3ArtifactStore
from core.infrastructure.compilers.descriptor_compilers import build_descriptor_compiler
from core.infrastructure.http.image_fetcher import HttpImageFetcher
from core.models.errors import (
    ArtifactUploadFailedError,
    CatalogError,
    CompilationFailedError,
    ImageFetchFailedError,
    InternalError,
    ValidationError,
)
from core.models.target import TargetRecord
from core.repositories.compiler_repository import DescriptorCompiler
from core.repositories.metadata_repository import CatalogWriter
from core.repositories.storage_repository import ArtifactStore
from core.utils.config import ServiceConfig, get_config
from core.utils.constants import (
    DESCRIPTOR_CONTENT_TYPE,
    DESCRIPTOR_EXTENSION,
    ENV_TARGET_ARTIFACT_BUCKET_NAME,
    MAX_IMAGE_SIZE,
    get_max_image_size_mb,
)
from core.utils.mime import detect_mime_type, resolve_extension
from core.utils.time import utc_now_iso

logger = Logger(UTC=True)

T = TypeVar("T")


class IngestionStage(str, Enum):
    VALIDATING = "validating"
    FETCHING_IMAGE = "fetching_image"
    UPLOADING_IMAGE = "uploading_image"
    COMPILING = "compiling"
    UPLOADING_DESCRIPTOR = "uploading_descriptor"
    RECORDING = "recording"
    DONE = "done"


_STAGE_FAILURES: dict[IngestionStage, tuple[type[InternalError], str]] = {
    IngestionStage.FETCHING_IMAGE: (ImageFetchFailedError, "Failed to fetch image"),
    IngestionStage.UPLOADING_IMAGE: (ArtifactUploadFailedError, "Failed to upload image"),
    IngestionStage.COMPILING: (CompilationFailedError, "Failed to compile .mind file"),
    IngestionStage.UPLOADING_DESCRIPTOR: (ArtifactUploadFailedError, "Failed to upload .mind file"),
    IngestionStage.RECORDING: (CatalogError, "Database insert failed"),
}


@dataclass(frozen=True)
class IngestionResult:
    """Outcome of a completed pipeline run."""

    target_id: str
    image_url: str
    mind_url: str
    image_uploaded: bool


class TargetIngestor:
    """Application service that turns a reference image into a catalogued target.

    Storage layout (clients resolve descriptors by this convention):
    - images:      `{image_prefix}/{target_id}.{ext}`
    - descriptors: `{descriptor_prefix}/{target_id}.mind`
    """

    def __init__(
        self,
        *,
        storage: ArtifactStore | None = None,
        compiler: DescriptorCompiler | None = None,
        catalog: CatalogWriter | None = None,
        fetcher: HttpImageFetcher | None = None,
        config: ServiceConfig | None = None,
    ) -> None:
        """Initialize the ingestor, defaulting to the AWS-backed collaborators."""
        self.config = config or get_config()
        self.bucket = self.config.require(self.config.artifact_bucket, ENV_TARGET_ARTIFACT_BUCKET_NAME)

        self.storage = storage or S3ArtifactStore(config=self.config)
        self.compiler = compiler or build_descriptor_compiler(self.config)
        self.catalog = catalog or DynamoDBTargetCatalog(config=self.config)
        self.fetcher = fetcher or HttpImageFetcher(timeout=self.config.image_fetch_timeout)

    @staticmethod
    def generate_target_id() -> str:
        """Generate a unique target identifier."""
        return str(uuid.uuid4())

    def image_path(self, target_id: str, extension: str) -> str:
        return f"{self.config.image_prefix}/{target_id}.{extension}"

    def descriptor_path(self, target_id: str) -> str:
        return f"{self.config.descriptor_prefix}/{target_id}.{DESCRIPTOR_EXTENSION}"

    def ingest_upload(
        self,
        *,
        image: bytes | None,
        video_url: str | None,
        filename: str | None = None,
        content_type: str | None = None,
        owner_id: str | None = None,
    ) -> IngestionResult:
        """Store an uploaded image, compile and store its descriptor, record both.

        Raises:
            ValidationError: If the image or the video reference is missing
            ArtifactUploadFailedError: If either upload fails
            CompilationFailedError: If the descriptor cannot be compiled
            CatalogError: If the catalog insert fails
        """
        image = self._validate_image(image)
        video_url = self._validate_video_url(video_url)

        target_id = self.generate_target_id()
        mime_type = content_type or detect_mime_type(image) or DESCRIPTOR_CONTENT_TYPE
        extension = resolve_extension(filename, mime_type)
        image_path = self.image_path(target_id, extension)
        uploaded: list[str] = []

        logger.debug(
            "Starting target ingestion",
            extra={"target_id": target_id, "size": len(image), "mime_type": mime_type},
        )

        image_url = self._run_stage(
            IngestionStage.UPLOADING_IMAGE,
            target_id,
            uploaded,
            lambda: self.storage.put(
                bucket=self.bucket,
                path=image_path,
                data=image,
                content_type=mime_type,
            ),
        )
        uploaded.append(image_path)

        mind_url = self._compile_and_record(
            target_id=target_id,
            image=image,
            image_url=image_url,
            video_url=video_url,
            owner_id=owner_id,
            uploaded=uploaded,
        )

        return IngestionResult(
            target_id=target_id,
            image_url=image_url,
            mind_url=mind_url,
            image_uploaded=True,
        )

    def ingest_from_url(
        self,
        *,
        image_url: str | None,
        video_url: str | None,
        owner_id: str | None = None,
    ) -> IngestionResult:
        """Fetch an image by URL, then compile, store and record its descriptor.

        The source image is not copied; the record keeps the given URL.

        Raises:
            ValidationError: If the image URL or the video reference is missing
            ImageFetchFailedError: If the image cannot be downloaded
            CompilationFailedError: If the descriptor cannot be compiled
            ArtifactUploadFailedError: If the descriptor upload fails
            CatalogError: If the catalog insert fails
        """
        if not image_url or not image_url.strip():
            raise ValidationError(message="Missing image URL", details={"stage": IngestionStage.VALIDATING.value})
        image_url = image_url.strip()
        video_url = self._validate_video_url(video_url)

        target_id = self.generate_target_id()
        uploaded: list[str] = []

        image, _ = self._run_stage(
            IngestionStage.FETCHING_IMAGE,
            target_id,
            uploaded,
            lambda: self.fetcher.fetch(image_url),
        )

        mind_url = self._compile_and_record(
            target_id=target_id,
            image=image,
            image_url=image_url,
            video_url=video_url,
            owner_id=owner_id,
            uploaded=uploaded,
        )

        return IngestionResult(
            target_id=target_id,
            image_url=image_url,
            mind_url=mind_url,
            image_uploaded=False,
        )

    def _compile_and_record(
        self,
        *,
        target_id: str,
        image: bytes,
        image_url: str,
        video_url: str,
        owner_id: str | None,
        uploaded: list[str],
    ) -> str:
        descriptor = self._run_stage(
            IngestionStage.COMPILING,
            target_id,
            uploaded,
            lambda: self.compiler.compile(image),
        )

        descriptor_path = self.descriptor_path(target_id)
        mind_url = self._run_stage(
            IngestionStage.UPLOADING_DESCRIPTOR,
            target_id,
            uploaded,
            lambda: self.storage.put(
                bucket=self.bucket,
                path=descriptor_path,
                data=descriptor,
                content_type=DESCRIPTOR_CONTENT_TYPE,
            ),
        )
        uploaded.append(descriptor_path)

        record = TargetRecord(
            target_id=target_id,
            image_url=image_url,
            video_url=video_url,
            mind_url=mind_url,
            created_at=utc_now_iso(),
            user_id=owner_id,
        )
        self._run_stage(
            IngestionStage.RECORDING,
            target_id,
            uploaded,
            lambda: self.catalog.insert(record=record),
        )

        logger.info(
            "Target ingestion completed",
            extra={
                "target_id": target_id,
                "stage": IngestionStage.DONE.value,
                "compiler": self.compiler.name,
                "user_id": owner_id,
            },
        )
        return mind_url

    def _run_stage(
        self,
        stage: IngestionStage,
        target_id: str,
        uploaded: list[str],
        action: Callable[[], T],
    ) -> T:
        """Run one pipeline stage, converting any failure into the stage's error."""
        logger.debug("Entering ingestion stage", extra={"target_id": target_id, "stage": stage.value})

        try:
            return action()

        except Exception as exc:
            error_type, message = _STAGE_FAILURES[stage]
            cause = exc.message if isinstance(exc, InternalError) else str(exc)

            logger.exception(
                "Target ingestion failed",
                extra={"target_id": target_id, "stage": stage.value, "error": cause},
            )
            if uploaded:
                # No compensating delete: these objects stay in the bucket.
                logger.warning(
                    "Orphaned artifacts left after failed ingestion",
                    extra={"target_id": target_id, "bucket": self.bucket, "keys": list(uploaded)},
                )

            raise error_type(
                message=message,
                details={
                    "stage": stage.value,
                    "target_id": target_id,
                    "cause": cause,
                    "orphaned_artifacts": list(uploaded),
                },
            ) from exc

    @staticmethod
    def _validate_video_url(video_url: str | None) -> str:
        if not video_url or not video_url.strip():
            raise ValidationError(message="Missing video URL", details={"stage": IngestionStage.VALIDATING.value})
        return video_url.strip()

    @staticmethod
    def _validate_image(image: bytes | None) -> bytes:
        if not image:
            raise ValidationError(message="Missing image file", details={"stage": IngestionStage.VALIDATING.value})

        if len(image) > MAX_IMAGE_SIZE:
            raise ValidationError(
                message=f"File size exceeds {get_max_image_size_mb()}MB limit",
                details={"stage": IngestionStage.VALIDATING.value, "size": len(image)},
            )

        return image
