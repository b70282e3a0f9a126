"""Abstract contract for artifact blob storage."""

from abc import ABC, abstractmethod


class ArtifactStore(ABC):
    """Contract for storing target artifacts (images and descriptors).

    Implementations could be S3, GCS, local disk, etc.
    Services depend on this interface, not the implementation.
    """

    @abstractmethod
    def put(self, *, bucket: str, path: str, data: bytes, content_type: str) -> str:
        """Store bytes at `bucket`/`path` and return their public URL.

        Writing the same path twice overwrites the object. The URL is a
        deterministic function of bucket and path.

        Raises:
            ArtifactUploadFailedError: If the upload fails
        """

    @abstractmethod
    def delete(self, *, bucket: str, path: str) -> None:
        """Delete the object at `bucket`/`path`; missing objects are ignored.

        Raises:
            ArtifactDeletionFailedError: If deletion fails
        """

    @abstractmethod
    def public_url(self, *, bucket: str, path: str) -> str:
        """Return the public URL an object at `bucket`/`path` is served from."""
