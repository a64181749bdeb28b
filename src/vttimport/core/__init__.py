"""vttimport core: orchestrator, base step, shared contracts, errors."""

from .step_base import BaseStep
from .contracts import (
    Anchor,
    CanonicalGeometry,
    CompressionMode,
    DoorSegment,
    PathPrimitive,
    PipelineConfig,
    Resolution,
    SceneBundle,
    StepEntry,
    Vector2,
    WallSegment,
)
from .exceptions import (
    ImageDecodeError,
    MissingResolution,
    SceneNotReady,
    TransportError,
    UnsupportedFormat,
    UnsupportedForSceneCreation,
    VTTImportError,
)
from .pipeline_runner import ImportPipeline, load_pipeline_config
from .logging import setup_logging

__all__ = [
    "BaseStep",
    "Anchor",
    "CanonicalGeometry",
    "CompressionMode",
    "DoorSegment",
    "PathPrimitive",
    "PipelineConfig",
    "Resolution",
    "SceneBundle",
    "StepEntry",
    "Vector2",
    "WallSegment",
    "ImageDecodeError",
    "MissingResolution",
    "SceneNotReady",
    "TransportError",
    "UnsupportedFormat",
    "UnsupportedForSceneCreation",
    "VTTImportError",
    "ImportPipeline",
    "load_pipeline_config",
    "setup_logging",
]
