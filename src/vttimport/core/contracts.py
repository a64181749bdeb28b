"""Common Pydantic models shared across pipeline steps."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

MB = 1024 * 1024

DOOR_METADATA_KEY = "rodeo.owlbear.dynamic-fog/doors"


# ── Geometry ─────────────────────────────────────────────────────────

class Vector2(BaseModel):
    """2D point or scale pair."""

    model_config = ConfigDict(frozen=True)

    x: float
    y: float


class Resolution(BaseModel):
    """Map resolution block: origin and size in grid units, plus pixels per grid cell."""

    model_config = ConfigDict(frozen=True)

    map_origin: Vector2 = Vector2(x=0, y=0)
    map_size: Vector2 = Vector2(x=0, y=0)
    pixels_per_grid: float | None = None


class WallSegment(BaseModel):
    """Open polyline in grid space. Point order defines the path."""

    model_config = ConfigDict(frozen=True)

    points: tuple[Vector2, ...] = Field(..., min_length=2)


class DoorSegment(BaseModel):
    """Door span in grid space. Only the first and last bound points are drawn."""

    model_config = ConfigDict(frozen=True)

    bounds: tuple[Vector2, ...] = Field(..., min_length=2)
    closed: bool = True


class CanonicalGeometry(BaseModel):
    """Unified geometry model both source schemas normalize into."""

    model_config = ConfigDict(frozen=True)

    walls: tuple[WallSegment, ...] = ()
    doors: tuple[DoorSegment, ...] = ()
    resolution: Resolution


class Anchor(BaseModel):
    """Placement origin and scale applied to imported geometry."""

    position: Vector2 = Vector2(x=0, y=0)
    scale: Vector2 = Vector2(x=1, y=1)


# ── Primitives (store representation) ───────────────────────────────

class Command(int, Enum):
    """Path command codes understood by the scene store."""

    MOVE = 0
    LINE = 1
    QUAD = 2
    CONIC = 3
    CUBIC = 4
    CLOSE = 5


class PathStyle(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    fill_color: str = "black"
    fill_opacity: float = Field(0.0, ge=0, le=1)
    stroke_color: str = "#000000"
    stroke_opacity: float = Field(1.0, ge=0, le=1)
    stroke_width: float = Field(2.0, gt=0)
    stroke_dash: list[float] = Field(default_factory=list)


class DoorAnchor(BaseModel):
    distance: float
    index: int = 0


class DoorMetadata(BaseModel):
    """Dynamic-fog door entry: open flag and the span covered along the path."""

    open: bool
    start: DoorAnchor
    end: DoorAnchor


class PathPrimitive(BaseModel):
    """A drawable path item: a wall polyline or a door span."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    type: Literal["PATH"] = "PATH"
    name: str
    layer: str = "FOG"
    visible: bool = True
    position: Vector2 = Vector2(x=0, y=0)
    commands: list[tuple[int, float, float]] = Field(default_factory=list)
    fill_rule: str = "nonzero"
    style: PathStyle = Field(default_factory=PathStyle)
    metadata: dict[str, Any] = Field(default_factory=dict)

    def to_store_dict(self) -> dict[str, Any]:
        """Serialize in the camelCase shape the scene store accepts."""
        return self.model_dump(mode="json", by_alias=True)


# ── Image asset / compression ────────────────────────────────────────

class CompressionMode(str, Enum):
    NONE = "none"
    STANDARD = "standard"
    HIGH = "high"


class CompressionLimits(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_size_bytes: int = Field(..., gt=0)
    max_megapixels: float = Field(..., gt=0)


COMPRESSION_LIMITS: dict[CompressionMode, CompressionLimits] = {
    CompressionMode.NONE: CompressionLimits(max_size_bytes=24 * MB, max_megapixels=144),
    CompressionMode.STANDARD: CompressionLimits(max_size_bytes=24 * MB, max_megapixels=67),
    CompressionMode.HIGH: CompressionLimits(max_size_bytes=49 * MB, max_megapixels=144),
}


class ImageAsset(BaseModel):
    """Base map image uploaded with a new scene."""

    name: str = "Imported Map"
    dpi: float = Field(..., gt=0)
    mime_type: str
    filename: str
    path: Path


class SceneBundle(BaseModel):
    """One-shot upload unit for a new scene: base map plus its initial items."""

    name: str
    grid_type: str = "SQUARE"
    base_map: ImageAsset
    items: list[PathPrimitive] = Field(default_factory=list)


# ── Pipeline configuration ───────────────────────────────────────────

class StoreConfig(BaseModel):
    """Which scene store to talk to and how."""

    kind: Literal["local", "http"] = "local"
    base_url: str = "http://localhost:8080"
    timeout_seconds: float = Field(30.0, gt=0)
    pixel_density: float = Field(150.0, gt=0, description="Grid-to-pixel multiplier for the local store")
    scene_ready: bool = True
    selection: Anchor | None = Field(
        None, description="Selected item (position and scale) reported by the local store"
    )


class PipelineConfig(BaseModel):
    """Top-level pipeline configuration loaded from pipeline.yaml."""

    project_name: str = "vtt_import"
    data_root: Path = Path("./data")
    store: StoreConfig = Field(default_factory=StoreConfig)
    steps: list[StepEntry] = Field(default_factory=list)


class StepEntry(BaseModel):
    """One entry in the pipeline step list."""

    name: str
    module: str
    config_file: str | None = None


# Fix forward reference
PipelineConfig.model_rebuild()
