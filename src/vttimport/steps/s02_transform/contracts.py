"""I/O contracts for Step 02: Grid-to-pixel geometry transform."""

from pydantic import BaseModel, Field

from vttimport.core.contracts import Anchor, CanonicalGeometry, PathPrimitive


class TransformInput(BaseModel):
    geometry: CanonicalGeometry = Field(..., description="Normalized grid-space geometry")
    pixel_density: float = Field(..., description="Target scene grid-to-pixel multiplier")
    anchor: Anchor = Field(default_factory=Anchor, description="Placement origin and scale")


class TransformOutput(BaseModel):
    walls: list[PathPrimitive] = Field(default_factory=list, description="Wall paths, source order")
    doors: list[PathPrimitive] = Field(default_factory=list, description="Door paths, source order")
    num_skipped: int = Field(0, description="Segments skipped for having fewer than 2 points")

    @property
    def items(self) -> list[PathPrimitive]:
        return [*self.walls, *self.doors]
