"""
Upload validation shared by document and image uploads.

The MIME type is taken from the upload itself and falls back to a
guess from the file name.
"""

import mimetypes

from shared.domain.base import DomainError

MEGABYTE = 1024 * 1024


class UploadValidationError(DomainError):
    default_message = "Invalid upload"


def detect_content_type(upload) -> str:
    content_type = getattr(upload, "content_type", None)
    if content_type and content_type != "application/octet-stream":
        return content_type.lower()
    guessed, _ = mimetypes.guess_type(getattr(upload, "name", "") or "")
    return (guessed or "application/octet-stream").lower()


def validate_upload(upload, allowed_types, max_size: int, *, label: str = "File") -> str:
    """Check type and size of an uploaded file and return its MIME type."""
    if upload is None:
        raise UploadValidationError("No file provided")
    content_type = detect_content_type(upload)
    if content_type not in allowed_types:
        allowed = ", ".join(sorted(allowed_types))
        raise UploadValidationError(f"Invalid file type {content_type}. Allowed types: {allowed}")
    if upload.size > max_size:
        raise UploadValidationError(
            f"{label} size must be less than {max_size // MEGABYTE}MB"
        )
    return content_type
