"""
Normalizes uploads, camera captures and model results into ImageHandle objects.
"""

import base64
import io
import mimetypes
from dataclasses import dataclass, field
from typing import Any, Optional

from PIL import Image

from frontend.config import DOWNLOAD_BASENAME, SUPPORTED_MIME_TYPES
from frontend.errors import IngestionFailed


@dataclass(frozen=True)
class ImageHandle:
    data_url: str
    mime_type: str
    source_file: Optional[Any] = field(default=None, compare=False, repr=False)

    @property
    def base64_data(self) -> str:
        return self.data_url.split(",", 1)[1]

    def to_bytes(self) -> bytes:
        return base64.b64decode(self.base64_data)


def to_data_url(data: bytes, mime_type: str) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('utf-8')}"


def detect_mime_type(data: bytes) -> str:
    """Open the bytes with Pillow and return the detected mime type."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.verify()
            image_format = img.format
    except Exception as e:
        raise IngestionFailed(f"Not a readable image: {e}") from e

    mime_type = Image.MIME.get(image_format)
    if mime_type is None:
        raise IngestionFailed(f"Unsupported image format: {image_format}")
    return mime_type


def from_file(file) -> ImageHandle:
    """
    Read an uploaded file (a Streamlit UploadedFile or any binary file-like
    object) into an ImageHandle that keeps a reference to the file.
    """
    try:
        data = file.getvalue() if hasattr(file, "getvalue") else file.read()
    except OSError as e:
        raise IngestionFailed(f"Could not read {getattr(file, 'name', 'file')}: {e}") from e

    if not data:
        raise IngestionFailed("Empty file received")

    detected = detect_mime_type(data)
    declared = getattr(file, "type", None)
    mime_type = declared if declared and declared.startswith("image/") else detected
    if mime_type not in SUPPORTED_MIME_TYPES:
        raise IngestionFailed(f"Unsupported image type: {mime_type}")

    return ImageHandle(data_url=to_data_url(data, mime_type), mime_type=mime_type, source_file=file)


def from_capture(data: bytes, mime_type: str = "image/png") -> ImageHandle:
    """Wrap an encoded camera frame. Captures have no source file."""
    if not data:
        raise IngestionFailed("Empty capture received")
    return ImageHandle(data_url=to_data_url(data, mime_type), mime_type=mime_type)


def from_result(mime_type: str, base64_data: str) -> ImageHandle:
    return ImageHandle(data_url=f"data:{mime_type};base64,{base64_data}", mime_type=mime_type)


def download_name(handle: ImageHandle) -> str:
    extension = mimetypes.guess_extension(handle.mime_type) or ".png"
    if extension in (".jpe", ".jpeg"):
        extension = ".jpg"
    return f"{DOWNLOAD_BASENAME}{extension}"
