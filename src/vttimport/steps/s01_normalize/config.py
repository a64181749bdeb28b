"""Configuration for Step 01: Format normalization."""

from pydantic import BaseModel, Field


class NormalizeConfig(BaseModel):
    legacy_door_closed: bool = Field(
        True, description="Closed state given to legacy doors, which carry no open/closed flag"
    )
    allowed_extensions: list[str] = Field(
        default_factory=lambda: [".uvtt", ".dd2vtt", ".json"],
        description="Expected file extensions. Others only log a warning; content decides the format.",
    )
