"""Source schemas and structural classification.

Two dialects are recognized:

* legacy (Foundry VTT scene export): pixel-space wall records ``c=[x1, y1, x2, y2]``
  with a ``door`` flag and a ``grid`` size in pixels.
* canonical (Universal VTT / dd2vtt): grid-space polylines in ``line_of_sight`` and
  ``objects_line_of_sight``, ``portals`` for doors, and a ``resolution`` block.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from vttimport.core.contracts import Resolution, Vector2
from .contracts import DocumentKind


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_legacy(doc: dict) -> bool:
    walls = doc.get("walls")
    return (
        _is_number(doc.get("grid"))
        and _is_number(doc.get("gridDistance"))
        and isinstance(walls, list)
        and all(
            isinstance(w, dict)
            and isinstance(w.get("c"), list)
            and len(w["c"]) == 4
            and all(_is_number(v) for v in w["c"])
            for w in walls
        )
    )


def _is_canonical(doc: dict) -> bool:
    return (
        _is_number(doc.get("format"))
        and isinstance(doc.get("resolution"), dict)
        and (
            isinstance(doc.get("line_of_sight"), list)
            or isinstance(doc.get("objects_line_of_sight"), list)
        )
    )


def classify_document(raw: Any) -> DocumentKind:
    """Classify a parsed document. Legacy is checked first; first match wins."""
    if not isinstance(raw, dict):
        return DocumentKind.UNRECOGNIZED
    if _is_legacy(raw):
        return DocumentKind.LEGACY
    if _is_canonical(raw):
        return DocumentKind.CANONICAL
    return DocumentKind.UNRECOGNIZED


# ── Legacy (Foundry) ─────────────────────────────────────────────────

class LegacyWall(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    c: tuple[float, float, float, float]
    door: int = 0
    move: int | None = None
    sense: int | None = None
    sound: int | None = None


class LegacyDocument(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    name: str = ""
    width: float = 0
    height: float = 0
    grid: float
    grid_distance: float = Field(..., alias="gridDistance")
    grid_units: str = Field("", alias="gridUnits")
    walls: tuple[LegacyWall, ...] = ()


# ── Canonical (Universal VTT) ────────────────────────────────────────

class Portal(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    position: Vector2 | None = None
    bounds: tuple[Vector2, ...] = ()
    rotation: float = 0
    closed: bool = True
    freestanding: bool = False


class CanonicalDocument(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    format: float
    resolution: Resolution
    line_of_sight: tuple[tuple[Vector2, ...], ...] = ()
    objects_line_of_sight: tuple[tuple[Vector2, ...], ...] = ()
    portals: tuple[Portal, ...] = ()
    image: str | None = None

    @field_validator("line_of_sight", "objects_line_of_sight", "portals", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any) -> Any:
        return () if value is None else value
