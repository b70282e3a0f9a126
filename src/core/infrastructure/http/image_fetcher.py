"""Downloads source images referenced by URL."""

import requests
from aws_lambda_powertools import Logger

from core.models.errors import ImageFetchFailedError
from core.utils.constants import MAX_IMAGE_SIZE

logger = Logger(UTC=True)


class HttpImageFetcher:
    """Fetches image bytes over HTTP(S) with `requests`."""

    def __init__(
        self,
        *,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self._timeout = timeout
        self._session = session or requests.Session()

    def fetch(self, url: str) -> tuple[bytes, str | None]:
        """Return the image bytes and the server-reported content type.

        Raises:
            ImageFetchFailedError: If the download fails, is empty or is too large
        """
        logger.debug("Fetching source image", extra={"url": url})

        try:
            response = self._session.get(url, timeout=self._timeout)
            response.raise_for_status()

        except requests.RequestException as exc:
            logger.error("Image download failed", extra={"url": url, "error": str(exc)})
            raise ImageFetchFailedError(
                message="Failed to fetch image",
                details={"image_url": url},
            ) from exc

        content = response.content
        if not content:
            raise ImageFetchFailedError(
                message="Fetched image is empty",
                details={"image_url": url},
            )

        if len(content) > MAX_IMAGE_SIZE:
            raise ImageFetchFailedError(
                message=f"Fetched image exceeds {MAX_IMAGE_SIZE // (1024 * 1024)}MB limit",
                details={"image_url": url},
            )

        content_type = response.headers.get("Content-Type")
        logger.info("Source image fetched", extra={"url": url, "size": len(content)})
        return content, content_type.split(";")[0].strip() if content_type else None
