"""Configuration for Step 03: Map image optimization."""

from pydantic import BaseModel, Field

from vttimport.core.contracts import CompressionMode


class OptimizeImageConfig(BaseModel):
    compression_mode: CompressionMode = Field(
        CompressionMode.STANDARD, description="none | standard (24MB, 67MP) | high (49MB, 144MP)"
    )
    max_size_bytes: int | None = Field(
        None, gt=0, description="Override the mode's size ceiling (None = mode default)"
    )
    max_megapixels: float | None = Field(
        None, gt=0, description="Override the mode's megapixel ceiling (None = mode default)"
    )
    initial_quality: float = Field(1.0, gt=0, le=1, description="First WebP quality tried")
    quality_floor: float = Field(0.1, ge=0, lt=1, description="Stop lowering quality at or below this")
    quality_step: float = Field(0.05, ge=0.01, le=1, description="Quality decrement per attempt")
    output_name: str = Field("map", description="Output file stem")
