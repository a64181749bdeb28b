"""Step 03: Recompress the embedded map image under a size and megapixel ceiling."""

from __future__ import annotations

import logging
from typing import ClassVar

from vttimport.core.contracts import COMPRESSION_LIMITS, MB, CompressionLimits, CompressionMode
from vttimport.core.step_base import BaseStep
from ._codec import (
    EXTENSIONS,
    WEBP,
    WEBP_MAX_SIDE,
    decode_base64_payload,
    decode_raster,
    encode_raster,
    fit_megapixels,
    sniff_mime_type,
)
from .config import OptimizeImageConfig
from .contracts import OptimizedImage, OptimizeImageInput, OptimizeImageOutput

logger = logging.getLogger(__name__)


def resolve_limits(config: OptimizeImageConfig) -> CompressionLimits:
    """Mode defaults with any explicit overrides from config."""
    limits = COMPRESSION_LIMITS[config.compression_mode]
    return CompressionLimits(
        max_size_bytes=config.max_size_bytes or limits.max_size_bytes,
        max_megapixels=config.max_megapixels or limits.max_megapixels,
    )


def optimize_image(data: bytes, config: OptimizeImageConfig | None = None) -> OptimizedImage:
    """Re-encode ``data`` to fit the compression mode's ceilings.

    ``none`` keeps images under the size ceiling untouched, otherwise does a
    single lossless encode in the source format. ``standard`` and ``high``
    always encode to WebP, lowering quality by a fixed step while the result
    is over budget and quality is above the floor. The floor wins: the last
    attempt is accepted even when still too large.

    Raises:
        ImageDecodeError: the payload is not a decodable raster, or encoding failed.
    """
    config = config or OptimizeImageConfig()
    limits = resolve_limits(config)
    source_type = sniff_mime_type(data)

    if config.compression_mode is CompressionMode.NONE and len(data) <= limits.max_size_bytes:
        return OptimizedImage(data=data, mime_type=source_type, passthrough=True)

    target_type = source_type if config.compression_mode is CompressionMode.NONE else WEBP
    max_side = WEBP_MAX_SIDE if target_type == WEBP else None

    image = decode_raster(data)
    image, resized = fit_megapixels(image, limits.max_megapixels, max_side)
    height, width = image.shape[:2]
    if resized:
        logger.info(f"Resized to {width}x{height} to fit {target_type} size limits")

    if config.compression_mode is CompressionMode.NONE:
        encoded = encode_raster(image, target_type)
        return OptimizedImage(
            data=encoded,
            mime_type=target_type,
            width=width,
            height=height,
            resized=resized,
            within_budget=len(encoded) <= limits.max_size_bytes,
        )

    # Integer percent keeps the step exact and the loop bound predictable
    quality = round(config.initial_quality * 100)
    floor = round(config.quality_floor * 100)
    step = round(config.quality_step * 100)

    trail: list[float] = []
    while True:
        encoded = encode_raster(image, WEBP, quality=quality)
        trail.append(quality / 100)
        if len(encoded) > limits.max_size_bytes and quality > floor:
            quality -= step
            continue
        break

    within_budget = len(encoded) <= limits.max_size_bytes
    if not within_budget:
        logger.warning(
            f"Image still {len(encoded) / MB:.2f}MB at quality floor "
            f"({limits.max_size_bytes / MB:.0f}MB ceiling); accepting"
        )
    return OptimizedImage(
        data=encoded,
        mime_type=WEBP,
        width=width,
        height=height,
        quality=quality / 100,
        quality_trail=trail,
        resized=resized,
        within_budget=within_budget,
    )


class OptimizeImageStep(BaseStep[OptimizeImageInput, OptimizeImageOutput, OptimizeImageConfig]):
    """Decode the base64 map image, optimize it, and write it under data_root."""

    name: ClassVar[str] = "optimize_image"
    input_type: ClassVar = OptimizeImageInput
    output_type: ClassVar = OptimizeImageOutput
    config_type: ClassVar = OptimizeImageConfig

    def validate_inputs(self, inputs: OptimizeImageInput) -> bool:
        if not inputs.image_payload:
            logger.error("Empty image payload")
            return False
        return True

    def run(self, inputs: OptimizeImageInput) -> OptimizeImageOutput:
        output_dir = self.data_root / "interim" / "s03_optimize_image"
        output_dir.mkdir(parents=True, exist_ok=True)

        data = decode_base64_payload(inputs.image_payload)
        logger.info(
            f"Decoded {sniff_mime_type(data)} payload ({len(data) / MB:.2f}MB), "
            f"mode={self.config.compression_mode.value}"
        )
        result = optimize_image(data, self.config)

        filename = f"{self.config.output_name}.{EXTENSIONS[result.mime_type]}"
        image_path = output_dir / filename
        image_path.write_bytes(result.data)
        logger.info(f"Saved {result.size_bytes / MB:.2f}MB {result.mime_type} -> {image_path}")

        return OptimizeImageOutput(
            image_path=image_path,
            mime_type=result.mime_type,
            filename=filename,
            size_bytes=result.size_bytes,
            width=result.width,
            height=result.height,
            quality=result.quality,
            attempts=len(result.quality_trail),
            resized=result.resized,
            passthrough=result.passthrough,
            within_budget=result.within_budget,
        )
