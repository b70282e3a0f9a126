"""
Helpers for reading API Gateway proxy events.

API Gateway preserves the client's header casing and base64-encodes binary
bodies, so handlers go through these helpers instead of touching the raw
event dictionary.
"""

import base64
import json
from dataclasses import dataclass
from email.parser import BytesParser
from email.policy import HTTP
from typing import Any


@dataclass(frozen=True)
class FormField:
    """One part of a multipart/form-data body."""

    name: str
    data: bytes
    filename: str | None = None
    content_type: str | None = None

    @property
    def text(self) -> str:
        return self.data.decode("utf-8", errors="replace").strip()


def get_header(event: dict[str, Any], name: str) -> str | None:
    """Case-insensitive header lookup."""
    headers = event.get("headers") or {}
    wanted = name.lower()

    for key, value in headers.items():
        if key.lower() == wanted:
            return value

    return None


def read_body(event: dict[str, Any]) -> bytes:
    """Return the raw request body, decoding base64 when API Gateway did."""
    body = event.get("body")
    if not body:
        return b""

    if event.get("isBase64Encoded"):
        return base64.b64decode(body)

    return body.encode("utf-8") if isinstance(body, str) else body


def read_json_body(event: dict[str, Any]) -> dict[str, Any]:
    """Parse the body as a JSON object.

    Raises:
        ValueError: If the body is not valid JSON or not an object
    """
    raw = read_body(event)
    if not raw:
        return {}

    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError("Invalid JSON body") from exc

    if not isinstance(payload, dict):
        raise ValueError("Invalid JSON body: expected an object")

    return payload


def parse_multipart_form(body: bytes, content_type: str) -> dict[str, FormField]:
    """Split a multipart/form-data body into its named fields.

    Raises:
        ValueError: If the body is not a well-formed multipart message
    """
    preamble = f"Content-Type: {content_type}\r\nMIME-Version: 1.0\r\n\r\n".encode()
    message = BytesParser(policy=HTTP).parsebytes(preamble + body)

    if not message.is_multipart():
        raise ValueError("Malformed multipart/form-data body")

    fields: dict[str, FormField] = {}

    for part in message.iter_parts():
        name = part.get_param("name", header="content-disposition")
        if not name:
            continue

        payload = part.get_payload(decode=True) or b""
        fields[str(name)] = FormField(
            name=str(name),
            data=payload,
            filename=part.get_filename(),
            content_type=part.get_content_type() if part.get("content-type") else None,
        )

    return fields
