import base64
import binascii
from typing import Optional

from app.domain.errors import ValidationError

UPLOADS_DIR = "uploads"
INDEX_FILE_PATH = f"{UPLOADS_DIR}/index.json"
DEFAULT_BASE_NAME = "upload"
DEFAULT_EXTENSION = "bin"

# Anything that could move the object out of uploads/ once joined into a URL.
_UNSAFE_FRAGMENTS = ("/", "\\", "..")


def file_extension(original_name: Optional[str]) -> str:
    """
    Text after the last dot of the original filename, or ``bin`` when the
    name has no dot at all.
    """
    if original_name and "." in original_name:
        return original_name.rsplit(".", 1)[1]
    return DEFAULT_EXTENSION


def _check_segment(value: str, label: str) -> None:
    if any(fragment in value for fragment in _UNSAFE_FRAGMENTS):
        raise ValidationError(f"Invalid {label}: must not contain '/', '\\' or '..'")


def final_file_name(file_name: Optional[str], original_name: Optional[str]) -> str:
    """
    ``<file_name or upload>.<extension>``. Names that would leave the uploads
    directory are rejected with a ValidationError.
    """
    if file_name and not file_name.strip():
        raise ValidationError("Invalid file name: must not be blank")
    base_name = file_name or DEFAULT_BASE_NAME
    extension = file_extension(original_name)
    _check_segment(base_name, "file name")
    _check_segment(extension, "file extension")
    return f"{base_name}.{extension}"


def upload_path(file_name: Optional[str], original_name: Optional[str]) -> str:
    """
    Repository path for an upload. The manifest path itself is reserved.
    """
    path = f"{UPLOADS_DIR}/{final_file_name(file_name, original_name)}"
    if path == INDEX_FILE_PATH:
        raise ValidationError(f"{INDEX_FILE_PATH} is reserved for the uploads index")
    return path


def decode_payload(payload: str) -> bytes:
    """
    Decode the base64 file payload. Embedded whitespace and newlines are
    ignored; any other non-alphabet character is rejected.
    """
    compact = "".join(payload.split())
    try:
        return base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError(f"File content is not valid base64: {e}")


def encode_text(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")
