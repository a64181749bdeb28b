"""Configuration for Step 04: Batched submission to the scene store."""

from pydantic import BaseModel, Field


class EmitBatchesConfig(BaseModel):
    batch_size: int = Field(50, ge=1, description="Maximum items per store submission")
