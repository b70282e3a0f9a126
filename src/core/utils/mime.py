from collections.abc import Mapping
from pathlib import PurePath

from core.utils.constants import DEFAULT_IMAGE_EXTENSION, MIME_TYPE_EXTENSION_MAP

MAGIC_BYTES: Mapping[bytes, str] = {
    b"\xff\xd8\xff": "image/jpeg",
    b"\x89PNG\r\n\x1a\n": "image/png",
    b"GIF87a": "image/gif",
    b"GIF89a": "image/gif",
    b"RIFF": "image/webp",
}


def detect_mime_type(file_data: bytes) -> str | None:
    for signature, mime in MAGIC_BYTES.items():
        if file_data.startswith(signature):
            return mime

    return None


def resolve_extension(filename: str | None, content_type: str | None) -> str:
    """Pick the storage extension for an uploaded image.

    The file-name suffix wins; otherwise the content type is mapped, and
    anything unknown falls back to `jpg`.
    """
    if filename:
        suffix = PurePath(filename).suffix.lower().lstrip(".")
        if suffix.isalnum():
            return suffix

    extensions = MIME_TYPE_EXTENSION_MAP.get((content_type or "").lower())
    if extensions:
        return extensions[0]

    return DEFAULT_IMAGE_EXTENSION
