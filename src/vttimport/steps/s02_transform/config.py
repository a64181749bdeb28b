"""Configuration for Step 02: Grid-to-pixel geometry transform."""

from pydantic import BaseModel, Field

from vttimport.core.contracts import PathStyle


class TransformConfig(BaseModel):
    layer: str = Field("FOG", description="Scene layer for walls and doors (fog-relevant)")
    wall_name: str = Field("Wall", description="Item name given to wall paths")
    door_name: str = Field("Door", description="Item name given to door paths")
    wall_style: PathStyle = Field(
        default_factory=lambda: PathStyle(stroke_color="#000000", stroke_width=2),
        description="Solid black stroke, no fill",
    )
    door_style: PathStyle = Field(
        default_factory=lambda: PathStyle(stroke_color="#FF0000", stroke_width=5),
        description="Red stroke, no fill",
    )
