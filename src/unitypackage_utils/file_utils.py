"""Byte, text and MIME helpers shared by the package and CLI code."""

import base64
import binascii
import re

# Extension (lowercase, no dot) -> MIME type
MIME_TYPES = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "bmp": "image/bmp",
    "webp": "image/webp",
    "tga": "image/x-tga",
    "txt": "text/plain",
    "json": "application/json",
    "xml": "application/xml",
    "csv": "text/csv",
    "cs": "text/x-csharp",
    "shader": "text/plain",
    "anim": "application/x-yaml",
    "controller": "application/x-yaml",
    "mat": "application/x-yaml",
    "prefab": "application/x-yaml",
    "unity": "application/x-yaml",
    "asset": "application/x-yaml",
    "meta": "application/x-yaml",
    "wav": "audio/wav",
    "mp3": "audio/mpeg",
    "ogg": "audio/ogg",
    "fbx": "application/octet-stream",
    "unitypackage": "application/gzip",
}

DEFAULT_MIME_TYPE = "application/octet-stream"

FILE_SIZE_UNITS = ["B", "KB", "MB", "GB", "TB"]

FILE_SIGNATURES = {
    "png": b"\x89PNG\r\n\x1a\n",
    "jpeg": b"\xff\xd8\xff",
    "gif": b"GIF8",
}

_DATA_URL_MIME = re.compile(r"^data:([^;,]+)[;,]")


def string_to_bytes(text: str) -> bytes:
    """Encode text as UTF-8."""
    return text.encode("utf-8")


def bytes_to_string(data: bytes) -> str:
    """Decode UTF-8 bytes, replacing invalid sequences."""
    return data.decode("utf-8", errors="replace")


def data_url_to_bytes(data_url: str) -> bytes:
    """Decode a base64 data URL (``data:image/png;base64,...``).

    Args:
        data_url: The data URL string

    Returns:
        Decoded payload bytes

    Raises:
        ValueError: If the string is not a data URL, is not base64 encoded,
                    or carries invalid base64
    """
    if not data_url.startswith("data:"):
        raise ValueError("Invalid data URL: missing 'data:' prefix")

    marker = "base64,"
    base64_index = data_url.find(marker)
    if base64_index == -1:
        raise ValueError("Invalid data URL: payload is not base64 encoded")

    payload = data_url[base64_index + len(marker):]
    try:
        return base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid data URL: malformed base64 payload ({e})") from e


def extract_mime_type(data_url: str) -> str:
    """Return the MIME type declared by a data URL.

    Raises:
        ValueError: If no MIME type can be found
    """
    match = _DATA_URL_MIME.match(data_url)
    if not match:
        raise ValueError(f"Could not extract MIME type from data URL: {data_url[:32]!r}")
    return match.group(1)


def get_mime_type_from_extension(filename: str) -> str:
    """Guess a MIME type from a file name's extension."""
    extension = filename.lower().rpartition(".")[2]
    return MIME_TYPES.get(extension, DEFAULT_MIME_TYPE)


def format_file_size(size_bytes: int) -> str:
    """Format a byte count for display (e.g. ``1.5 KB``)."""
    if size_bytes <= 0:
        return "0 B"

    size = float(size_bytes)
    unit = 0
    while size >= 1024 and unit < len(FILE_SIZE_UNITS) - 1:
        size /= 1024
        unit += 1

    return f"{size:.1f} {FILE_SIZE_UNITS[unit]}"


def validate_file_type(data: bytes, expected_type: str) -> bool:
    """Check a payload's leading signature bytes.

    Args:
        data: File payload
        expected_type: One of ``png``, ``jpeg``, ``gif``

    Returns:
        True if the payload starts with the signature of ``expected_type``
    """
    if len(data) < 8:
        return False

    signature = FILE_SIGNATURES.get(expected_type)
    if signature is None:
        return False

    return data.startswith(signature)
