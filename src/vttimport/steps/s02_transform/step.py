"""Step 02: Map grid-space walls and doors to pixel-space path primitives."""

from __future__ import annotations

import logging
from typing import ClassVar

from vttimport.core.contracts import (
    DOOR_METADATA_KEY,
    Anchor,
    CanonicalGeometry,
    DoorAnchor,
    DoorMetadata,
    DoorSegment,
    PathPrimitive,
    WallSegment,
)
from vttimport.core.step_base import BaseStep
from vttimport.utils.geometry import polyline_commands, span_length, to_pixel_space
from .config import TransformConfig
from .contracts import TransformInput, TransformOutput

logger = logging.getLogger(__name__)


def build_wall(
    segment: WallSegment,
    density: float,
    anchor: Anchor,
    config: TransformConfig,
) -> PathPrimitive | None:
    """Open polyline through every transformed point, in source order."""
    if len(segment.points) < 2:
        return None
    xy = to_pixel_space(segment.points, density, anchor.scale)
    return PathPrimitive(
        name=config.wall_name,
        layer=config.layer,
        position=anchor.position,
        commands=polyline_commands(xy),
        style=config.wall_style.model_copy(),
    )


def build_door(
    segment: DoorSegment,
    density: float,
    anchor: Anchor,
    config: TransformConfig,
) -> PathPrimitive | None:
    """Straight span between the first and last transformed bound points.

    Intermediate bound points are ignored. The door length is measured on the
    transformed coordinates.
    """
    if len(segment.bounds) < 2:
        return None
    xy = to_pixel_space(segment.bounds, density, anchor.scale)
    span = xy[[0, -1]]
    length = span_length(span)
    door = DoorMetadata(
        open=not segment.closed,
        start=DoorAnchor(distance=0, index=0),
        end=DoorAnchor(distance=length, index=0),
    )
    return PathPrimitive(
        name=config.door_name,
        layer=config.layer,
        position=anchor.position,
        commands=polyline_commands(span),
        style=config.door_style.model_copy(),
        metadata={DOOR_METADATA_KEY: [door.model_dump()]},
    )


def transform_geometry(
    geometry: CanonicalGeometry,
    density: float,
    anchor: Anchor | None = None,
    config: TransformConfig | None = None,
) -> tuple[list[PathPrimitive], list[PathPrimitive], int]:
    """Build wall and door primitives. Returns (walls, doors, num_skipped)."""
    anchor = anchor or Anchor()
    config = config or TransformConfig()

    walls, doors = [], []
    skipped = 0
    for segment in geometry.walls:
        item = build_wall(segment, density, anchor, config)
        if item is None:
            skipped += 1
        else:
            walls.append(item)
    for segment in geometry.doors:
        item = build_door(segment, density, anchor, config)
        if item is None:
            skipped += 1
        else:
            doors.append(item)
    return walls, doors, skipped


class TransformStep(BaseStep[TransformInput, TransformOutput, TransformConfig]):
    name: ClassVar[str] = "transform"
    input_type: ClassVar = TransformInput
    output_type: ClassVar = TransformOutput
    config_type: ClassVar = TransformConfig

    def validate_inputs(self, inputs: TransformInput) -> bool:
        if inputs.pixel_density <= 0:
            logger.error(f"Pixel density must be positive, got {inputs.pixel_density}")
            return False
        return True

    def run(self, inputs: TransformInput) -> TransformOutput:
        walls, doors, skipped = transform_geometry(
            inputs.geometry, inputs.pixel_density, inputs.anchor, self.config
        )
        if not inputs.geometry.walls:
            logger.warning("No wall data found in the file")
        logger.info(
            f"Transformed at density {inputs.pixel_density} "
            f"scale ({inputs.anchor.scale.x}, {inputs.anchor.scale.y}): "
            f"{len(walls)} walls, {len(doors)} doors, {skipped} skipped"
        )
        return TransformOutput(walls=walls, doors=doors, num_skipped=skipped)
