from unittest.mock import MagicMock

import pytest
import requests
from core.infrastructure.http.image_fetcher import HttpImageFetcher
from core.models.errors import ImageFetchFailedError
from core.utils.constants import MAX_IMAGE_SIZE


def session_returning(content: bytes, content_type: str | None = "image/png") -> MagicMock:
    session = MagicMock()
    session.get.return_value.content = content
    session.get.return_value.headers = {"Content-Type": content_type} if content_type else {}
    return session


class TestHttpImageFetcher:
    def test_fetch_success(self) -> None:
        session = session_returning(b"png-bytes", "image/png; charset=binary")

        data, content_type = HttpImageFetcher(timeout=3, session=session).fetch("https://img.example.com/a.png")

        assert data == b"png-bytes"
        assert content_type == "image/png"
        session.get.assert_called_once_with("https://img.example.com/a.png", timeout=3)

    def test_missing_content_type(self) -> None:
        _, content_type = HttpImageFetcher(session=session_returning(b"x", None)).fetch("https://x")

        assert content_type is None

    def test_http_error(self) -> None:
        session = MagicMock()
        session.get.return_value.raise_for_status.side_effect = requests.HTTPError("404")

        with pytest.raises(ImageFetchFailedError) as exc_info:
            HttpImageFetcher(session=session).fetch("https://img.example.com/missing.png")

        assert exc_info.value.details == {"image_url": "https://img.example.com/missing.png"}

    def test_timeout(self) -> None:
        session = MagicMock()
        session.get.side_effect = requests.Timeout("slow")

        with pytest.raises(ImageFetchFailedError):
            HttpImageFetcher(session=session).fetch("https://x")

    def test_empty_body(self) -> None:
        with pytest.raises(ImageFetchFailedError, match="empty"):
            HttpImageFetcher(session=session_returning(b"")).fetch("https://x")

    def test_too_large(self) -> None:
        with pytest.raises(ImageFetchFailedError, match="limit"):
            HttpImageFetcher(session=session_returning(b"x" * (MAX_IMAGE_SIZE + 1))).fetch("https://x")
