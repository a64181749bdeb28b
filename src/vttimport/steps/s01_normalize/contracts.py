"""I/O contracts for Step 01: Format normalization."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from vttimport.core.contracts import CanonicalGeometry


class DocumentKind(str, Enum):
    LEGACY = "legacy"
    CANONICAL = "canonical"
    UNRECOGNIZED = "unrecognized"


class NormalizeInput(BaseModel):
    document: Any = Field(..., description="Parsed JSON document (legacy or canonical schema)")
    source_name: str = Field("", description="File name the document was read from, for logging")
    keep_image: bool = Field(True, description="Carry the embedded map image through")


class NormalizeOutput(BaseModel):
    kind: DocumentKind = Field(..., description="Detected source schema")
    geometry: CanonicalGeometry = Field(..., description="Geometry in grid space")
    image_payload: str | None = Field(None, description="Raw base64 map image, if kept")
    num_walls: int = Field(0, description="Wall segments kept after normalization")
    num_doors: int = Field(0, description="Door segments kept after normalization")

    @property
    def has_image(self) -> bool:
        return bool(self.image_payload)
