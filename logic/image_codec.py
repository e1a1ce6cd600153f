"""Conversions between raw image bytes, transport images and data URLs."""

from __future__ import annotations

import base64
import binascii
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Tuple

from logic.errors import MalformedEncodingError
from models.closet_item import TransportImage

DATA_URL_PREFIX = "data:"
BASE64_MARKER = ";base64"


def encode(raw_bytes: bytes, mime_type: str) -> TransportImage:
    """Wrap raw image bytes as a base64 transport image."""

    return TransportImage(data=base64.b64encode(raw_bytes).decode("ascii"), mime_type=mime_type)


def decode(image: TransportImage) -> bytes:
    """Return the raw bytes of a transport image."""

    try:
        return base64.b64decode(image.data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise MalformedEncodingError("Image payload is not valid base64.") from exc


def to_data_url(image: TransportImage) -> str:
    return f"{DATA_URL_PREFIX}{image.mime_type}{BASE64_MARKER},{image.data}"


def from_data_url(data_url: str) -> TransportImage:
    """Split a ``data:<mime>;base64,<payload>`` string into a transport image.

    Raises:
        MalformedEncodingError: If the string has no header/payload split, the
            header is not a base64 data URL header, or it names no MIME type.
    """

    if not isinstance(data_url, str) or "," not in data_url:
        raise MalformedEncodingError("Expected a data URL with a header and a payload.")
    header, payload = data_url.split(",", 1)
    if not header.startswith(DATA_URL_PREFIX) or not header.endswith(BASE64_MARKER):
        raise MalformedEncodingError("Data URL header must look like 'data:<mime>;base64'.")
    mime_type = header[len(DATA_URL_PREFIX) : -len(BASE64_MARKER)].split(";", 1)[0].strip()
    if not mime_type:
        raise MalformedEncodingError("Data URL header does not name a MIME type.")
    return TransportImage(data=payload, mime_type=mime_type)


def encode_many(files: Iterable[Tuple[bytes, str]], max_workers: int = 4) -> List[TransportImage]:
    """Encode several uploads on a thread pool, keeping the input order."""

    pending = list(files)
    if not pending:
        return []
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(pending)))) as pool:
        return list(pool.map(lambda entry: encode(*entry), pending))


__all__ = ["encode", "decode", "to_data_url", "from_data_url", "encode_many"]
