"""Upload rules shared by the API and the client uploader.

Both sides must reject exactly the same files, so the allow-list and the
size cap are defined once here.
"""

from __future__ import annotations

MAX_FILE_SIZE = 10 * 1024 * 1024
MAX_FILES_PER_REQUEST = 10

IMAGE_MIME_TYPES = frozenset(
    {
        "image/jpeg",
        "image/png",
        "image/gif",
        "image/webp",
    }
)

ALLOWED_MIME_TYPES = IMAGE_MIME_TYPES | frozenset(
    {
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",  # docx
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",  # xlsx
        "text/plain",
        "application/zip",
        "application/x-rar-compressed",
    }
)

INVALID_TYPE_MESSAGE = "Invalid file type. Only images, documents, and archives are allowed."


def normalize_mimetype(mimetype: str | None) -> str:
    """Lowercase a content type and drop parameters such as charset."""
    if not mimetype:
        return ""
    return mimetype.split(";", 1)[0].strip().lower()


def is_allowed_mimetype(mimetype: str | None) -> bool:
    return normalize_mimetype(mimetype) in ALLOWED_MIME_TYPES


def is_image_mimetype(mimetype: str | None) -> bool:
    return normalize_mimetype(mimetype) in IMAGE_MIME_TYPES


def size_limit_message(max_size: int = MAX_FILE_SIZE) -> str:
    return f"File too large. Maximum size is {max_size // (1024 * 1024)}MB"


def validate_declared_file(
    filename: str | None,
    mimetype: str | None,
    size: int | None,
    *,
    max_size: int = MAX_FILE_SIZE,
) -> str | None:
    """Check a file against the allow-list and size cap.

    Args:
        filename: Original file name
        mimetype: Declared content type
        size: Byte length if known, None when it can only be found by reading
        max_size: Size cap in bytes (inclusive)

    Returns:
        None if the file is acceptable, otherwise the rejection message
    """
    if not filename:
        return "No file uploaded"
    if not is_allowed_mimetype(mimetype):
        return INVALID_TYPE_MESSAGE
    if size is not None and size > max_size:
        return size_limit_message(max_size)
    return None
