"""Raster codec helpers: base64 payloads, signature sniffing, OpenCV decode/encode."""

from __future__ import annotations

import base64
import binascii
import math

import numpy as np

from vttimport.core.contracts import MB
from vttimport.core.exceptions import ImageDecodeError

PNG = "image/png"
WEBP = "image/webp"

EXTENSIONS = {PNG: "png", WEBP: "webp"}

# libwebp rejects any side longer than this
WEBP_MAX_SIDE = 16383


def decode_base64_payload(payload: str) -> bytes:
    """Decode an embedded image payload, tolerating a ``data:...;base64,`` prefix."""
    if payload.startswith("data:") and "," in payload:
        payload = payload.split(",", 1)[1]
    try:
        data = base64.b64decode(payload)
    except (binascii.Error, ValueError) as e:
        raise ImageDecodeError("Failed to load image: invalid base64 payload", {"error": str(e)}) from e
    if not data:
        raise ImageDecodeError("Failed to load image: empty payload")
    return data


def sniff_mime_type(data: bytes) -> str:
    """PNG or WebP from the leading bytes; anything else is reported as PNG."""
    if data[:4] == b"\x89PNG":
        return PNG
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return WEBP
    return PNG


def megapixels(width: int, height: int) -> float:
    return width * height / MB


def decode_raster(data: bytes) -> np.ndarray:
    import cv2

    try:
        image = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_UNCHANGED)
    except cv2.error as e:
        raise ImageDecodeError("Failed to load image", {"error": str(e)}) from e
    if image is None:
        raise ImageDecodeError("Failed to load image")
    if image.dtype != np.uint8:
        # 16-bit PNGs; WebP only takes 8-bit channels
        image = (image / 257).astype(np.uint8)
    return image


def fit_megapixels(
    image: np.ndarray,
    max_megapixels: float,
    max_side: int | None = None,
) -> tuple[np.ndarray, bool]:
    """Scale down uniformly by sqrt(ceiling / actual) when over the megapixel ceiling.

    With ``max_side`` the longer side is also capped; the smaller of the two
    scales wins, so aspect ratio is kept either way.

    Returns:
        (image, resized)
    """
    import cv2

    height, width = image.shape[:2]
    actual = megapixels(width, height)
    scale = 1.0
    if actual > max_megapixels:
        scale = math.sqrt(max_megapixels / actual)
    if max_side is not None and max(width, height) > max_side:
        scale = min(scale, max_side / max(width, height))
    if scale >= 1.0:
        return image, False
    new_w = max(1, math.floor(width * scale))
    new_h = max(1, math.floor(height * scale))
    return cv2.resize(image, (new_w, new_h), interpolation=cv2.INTER_AREA), True


def encode_raster(image: np.ndarray, mime_type: str, quality: int | None = None) -> bytes:
    """Encode to PNG or WebP. ``quality`` (1-100) applies to WebP; None means lossless."""
    import cv2

    ext = "." + EXTENSIONS[mime_type]
    params: list[int] = []
    if mime_type == WEBP and quality is not None:
        params = [cv2.IMWRITE_WEBP_QUALITY, max(1, min(100, quality))]
    try:
        ok, buf = cv2.imencode(ext, image, params)
    except cv2.error as e:
        raise ImageDecodeError("Could not encode image", {"error": str(e)}) from e
    if not ok:
        raise ImageDecodeError("Could not encode image", {"format": mime_type})
    return buf.tobytes()
