"""
Input format detection by file extension or content sniffing
"""

import io
from pathlib import Path
from typing import Optional, Union

from PIL import Image, UnidentifiedImageError

from schemas import Document, DocumentKind

PDF_MIME = "application/pdf"
DEFAULT_MIME = "image/png"

EXTENSION_MIME_TYPES = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "tiff": "image/tiff",
    "tif": "image/tiff",
    "bmp": "image/bmp",
    "webp": "image/webp",
    "pdf": PDF_MIME,
}

# Pillow format names -> MIME types we send to the endpoint
PIL_FORMAT_MIME_TYPES = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
    "MPO": "image/jpeg",
    "TIFF": "image/tiff",
    "BMP": "image/bmp",
    "WEBP": "image/webp",
}


def detect_mime(path: Union[str, Path]) -> str:
    """
    Map a file extension to a MIME type

    Unknown or missing extensions fall back to image/png. Only the name is
    inspected; the file is never opened.
    """
    suffix = Path(path).suffix.lower().lstrip(".")
    return EXTENSION_MIME_TYPES.get(suffix, DEFAULT_MIME)


def is_paginated(mime_type: str) -> bool:
    return mime_type == PDF_MIME


def sniff_mime(data: bytes) -> str:
    """
    Detect the MIME type of raw document bytes (used for stdin input)

    Args:
        data: Leading bytes or the whole document

    Returns:
        MIME type, image/png when nothing matches
    """
    if data.startswith(b"%PDF-"):
        return PDF_MIME
    try:
        with Image.open(io.BytesIO(data)) as img:
            return PIL_FORMAT_MIME_TYPES.get(img.format, DEFAULT_MIME)
    except (UnidentifiedImageError, OSError):
        return DEFAULT_MIME


def detect_document(path: Union[str, Path], mime_type: Optional[str] = None) -> Document:
    """Classify an input file as a direct image or a paginated document"""
    mime_type = mime_type or detect_mime(path)
    kind = DocumentKind.PAGINATED if is_paginated(mime_type) else DocumentKind.IMAGE
    return Document(path=Path(path), mime_type=mime_type, kind=kind)
