"""I/O contracts for Step 03: Map image optimization."""

from pathlib import Path

from pydantic import BaseModel, Field


class OptimizedImage(BaseModel):
    """In-memory result of the size/quality search."""

    data: bytes
    mime_type: str
    width: int | None = None
    height: int | None = None
    quality: float | None = Field(None, description="WebP quality used; None for lossless/pass-through")
    quality_trail: list[float] = Field(default_factory=list, description="Qualities tried, in order")
    resized: bool = False
    passthrough: bool = False
    within_budget: bool = True

    @property
    def size_bytes(self) -> int:
        return len(self.data)


class OptimizeImageInput(BaseModel):
    image_payload: str = Field(..., description="Base64 map image from the document")


class OptimizeImageOutput(BaseModel):
    image_path: Path = Field(..., description="Optimized image written under data_root")
    mime_type: str = Field(..., description="image/png or image/webp")
    filename: str = Field(..., description="Upload file name, e.g. map.webp")
    size_bytes: int = Field(..., description="Size of the optimized image")
    width: int | None = Field(None, description="Pixel width (None when passed through)")
    height: int | None = Field(None, description="Pixel height (None when passed through)")
    quality: float | None = Field(None, description="Final WebP quality")
    attempts: int = Field(0, description="Encode attempts made by the quality search")
    resized: bool = Field(False, description="Downscaled to meet the megapixel ceiling")
    passthrough: bool = Field(False, description="Original bytes kept unmodified")
    within_budget: bool = Field(True, description="Final size is under the size ceiling")
