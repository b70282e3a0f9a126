import base64
import json
from collections.abc import Callable
from types import SimpleNamespace
from typing import Any

import pytest

BOUNDARY = "----mindtargetboundary"
VIDEO_URL = "https://video.example.com/clip.mp4"


@pytest.fixture
def lambda_context(monkeypatch):
    context = SimpleNamespace(
        aws_request_id="test-request-id",
        function_name="test-function",
        memory_limit_in_mb=256,
        invoked_function_arn="arn:aws:lambda:us-east-1:000000000000:function:test",
        log_group_name="/aws/lambda/test-function",
        log_stream_name="2024/01/01/[$LATEST]test",
    )

    monkeypatch.setattr(
        "aws_lambda_powertools.utilities.typing.LambdaContext",
        lambda: context,
        raising=False,
    )

    return context


def build_multipart(fields: dict[str, Any]) -> bytes:
    """Encode a multipart body; a (filename, bytes, content_type) tuple marks a file field."""
    chunks: list[bytes] = []
    for name, value in fields.items():
        if isinstance(value, tuple):
            filename, data, content_type = value
            head = (
                f'Content-Disposition: form-data; name="{name}"; filename="{filename}"\r\n'
                f"Content-Type: {content_type}\r\n"
            )
        else:
            data = value.encode("utf-8")
            head = f'Content-Disposition: form-data; name="{name}"\r\n'
        chunks.append(f"--{BOUNDARY}\r\n{head}\r\n".encode() + data + b"\r\n")
    chunks.append(f"--{BOUNDARY}--\r\n".encode())
    return b"".join(chunks)


@pytest.fixture
def multipart_event() -> Callable[..., dict[str, Any]]:
    """
    Build an API Gateway event carrying a multipart upload.

    Usage:
        event = multipart_event({"file": ("a.jpg", data, "image/jpeg"), "videoUrl": url})
    """

    def _build(fields: dict[str, Any], *, headers: dict[str, str] | None = None) -> dict[str, Any]:
        return {
            "httpMethod": "POST",
            "path": "/generate-target",
            "headers": {
                "Content-Type": f"multipart/form-data; boundary={BOUNDARY}",
                **(headers or {}),
            },
            "body": base64.b64encode(build_multipart(fields)).decode("ascii"),
            "isBase64Encoded": True,
        }

    return _build


@pytest.fixture
def json_event() -> Callable[..., dict[str, Any]]:
    def _build(
        payload: Any,
        *,
        path: str = "/generate-target",
        method: str = "POST",
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        return {
            "httpMethod": method,
            "path": path,
            "headers": {"Content-Type": "application/json", **(headers or {})},
            "body": payload if isinstance(payload, str) else json.dumps(payload),
            "isBase64Encoded": False,
        }

    return _build


@pytest.fixture
def upload_event(multipart_event, sample_jpeg_binary) -> dict[str, Any]:
    return multipart_event({"file": ("poster.jpg", sample_jpeg_binary, "image/jpeg"), "videoUrl": VIDEO_URL})

