import base64
import json
from types import SimpleNamespace
from typing import Any

import pytest

BOUNDARY = "----functionalboundary"


@pytest.fixture
def lambda_context():
    return SimpleNamespace(aws_request_id="functional-request-id", function_name="functional")


@pytest.fixture
def upload_request():
    def _build(image: bytes, video_url: str, *, filename: str = "poster.jpg", token: str | None = None):
        body = (
            f"--{BOUNDARY}\r\n"
            f'Content-Disposition: form-data; name="file"; filename="{filename}"\r\n'
            "Content-Type: image/jpeg\r\n\r\n"
        ).encode() + image + (
            f"\r\n--{BOUNDARY}\r\n"
            'Content-Disposition: form-data; name="videoUrl"\r\n\r\n'
            f"{video_url}\r\n"
            f"--{BOUNDARY}--\r\n"
        ).encode()

        headers = {"content-type": f"multipart/form-data; boundary={BOUNDARY}"}
        if token:
            headers["authorization"] = f"Bearer {token}"

        return {
            "httpMethod": "POST",
            "path": "/generate-target",
            "headers": headers,
            "body": base64.b64encode(body).decode("ascii"),
            "isBase64Encoded": True,
        }

    return _build


@pytest.fixture
def delete_request():
    def _build(user_id: Any, *, token: str | None) -> dict[str, Any]:
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return {
            "httpMethod": "POST",
            "path": "/admin-delete-user",
            "headers": headers,
            "body": json.dumps({"user_id": user_id}),
        }

    return _build
