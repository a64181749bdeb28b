"""Step 01: Detect the source schema and normalize it into canonical grid-space geometry."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, ClassVar

from pydantic import ValidationError

from vttimport.core.contracts import (
    CanonicalGeometry,
    DoorSegment,
    Resolution,
    Vector2,
    WallSegment,
)
from vttimport.core.exceptions import MissingResolution, UnsupportedFormat
from vttimport.core.step_base import BaseStep
from ._schemas import CanonicalDocument, LegacyDocument, classify_document
from .config import NormalizeConfig
from .contracts import DocumentKind, NormalizeInput, NormalizeOutput

logger = logging.getLogger(__name__)

UNSUPPORTED_MESSAGE = (
    "Unsupported file format. Please use a valid UVTT, DD2VTT, or FoundryVTT JSON file."
)


def read_document(path: Path, allowed_extensions: list[str] | None = None) -> Any:
    """Read a UTF-8 JSON map export. The extension is advisory only."""
    path = Path(path)
    if allowed_extensions and path.suffix.lower() not in allowed_extensions:
        logger.warning(
            f"Unexpected extension '{path.suffix}' for {path.name}; detecting format from content"
        )
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise UnsupportedFormat(
            f"{path.name} is not valid UTF-8 JSON", {"error": str(e)}
        ) from e


def _legacy_to_geometry(doc: LegacyDocument, door_closed: bool) -> CanonicalGeometry:
    """Convert pixel-space legacy wall records into grid-space segments."""
    g = doc.grid
    if g <= 0:
        raise MissingResolution(
            "No valid grid resolution data found in the file", {"grid": str(g)}
        )

    walls: list[WallSegment] = []
    doors: list[DoorSegment] = []
    skipped = 0
    for wall in doc.walls:
        x1, y1, x2, y2 = wall.c
        points = (Vector2(x=x1 / g, y=y1 / g), Vector2(x=x2 / g, y=y2 / g))
        if wall.door == 0:
            walls.append(WallSegment(points=points))
        elif wall.door == 1:
            doors.append(DoorSegment(bounds=points, closed=door_closed))
        else:
            skipped += 1
    if skipped:
        logger.debug(f"Skipped {skipped} legacy walls with unsupported door type")

    resolution = Resolution(
        map_origin=Vector2(x=0, y=0),
        map_size=Vector2(x=doc.width, y=doc.height),
        pixels_per_grid=g,
    )
    return CanonicalGeometry(walls=tuple(walls), doors=tuple(doors), resolution=resolution)


def _canonical_to_geometry(doc: CanonicalDocument) -> CanonicalGeometry:
    polylines = (*doc.line_of_sight, *doc.objects_line_of_sight)
    walls = tuple(WallSegment(points=p) for p in polylines if len(p) >= 2)
    doors = tuple(
        DoorSegment(bounds=portal.bounds, closed=portal.closed)
        for portal in doc.portals
        if len(portal.bounds) >= 2
    )
    dropped = len(polylines) - len(walls) + len(doc.portals) - len(doors)
    if dropped:
        logger.debug(f"Dropped {dropped} segments with fewer than 2 points")
    return CanonicalGeometry(walls=walls, doors=doors, resolution=doc.resolution)


def normalize_document(
    raw: Any,
    legacy_door_closed: bool = True,
    keep_image: bool = True,
) -> tuple[DocumentKind, CanonicalGeometry, str | None]:
    """Classify ``raw`` and return (kind, geometry, image payload).

    Raises:
        UnsupportedFormat: the document matches neither schema.
        MissingResolution: a legacy document has a non-positive grid size.
    """
    kind = classify_document(raw)
    try:
        if kind is DocumentKind.LEGACY:
            legacy = LegacyDocument.model_validate(raw)
            return kind, _legacy_to_geometry(legacy, legacy_door_closed), None
        if kind is DocumentKind.CANONICAL:
            if not keep_image:
                raw = {k: v for k, v in raw.items() if k != "image"}
            canonical = CanonicalDocument.model_validate(raw)
            image = canonical.image or None
            return kind, _canonical_to_geometry(canonical), image
    except ValidationError as e:
        raise UnsupportedFormat(UNSUPPORTED_MESSAGE, {"error": str(e)}) from e
    raise UnsupportedFormat(UNSUPPORTED_MESSAGE)


def require_pixels_per_grid(geometry: CanonicalGeometry) -> float:
    """Return the positive pixels-per-grid value or raise MissingResolution."""
    ppg = geometry.resolution.pixels_per_grid
    if not ppg or ppg <= 0:
        raise MissingResolution("No valid grid resolution data found in the file")
    return ppg


class NormalizeStep(BaseStep[NormalizeInput, NormalizeOutput, NormalizeConfig]):
    """Turn a parsed legacy or canonical document into CanonicalGeometry."""

    name: ClassVar[str] = "normalize"
    input_type: ClassVar = NormalizeInput
    output_type: ClassVar = NormalizeOutput
    config_type: ClassVar = NormalizeConfig

    def validate_inputs(self, inputs: NormalizeInput) -> bool:
        if inputs.document is None:
            logger.error("No document given")
            return False
        return True

    def run(self, inputs: NormalizeInput) -> NormalizeOutput:
        kind, geometry, image = normalize_document(
            inputs.document,
            legacy_door_closed=self.config.legacy_door_closed,
            keep_image=inputs.keep_image,
        )
        source = inputs.source_name or "document"
        logger.info(
            f"Detected {kind.value} format in {source}: "
            f"{len(geometry.walls)} walls, {len(geometry.doors)} doors, "
            f"image={'yes' if image else 'no'}"
        )
        return NormalizeOutput(
            kind=kind,
            geometry=geometry,
            image_payload=image,
            num_walls=len(geometry.walls),
            num_doors=len(geometry.doors),
        )
