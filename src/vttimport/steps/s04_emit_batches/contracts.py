"""I/O contracts for Step 04: Batched submission to the scene store."""

from pydantic import BaseModel, Field

from vttimport.core.contracts import PathPrimitive


class EmitBatchesInput(BaseModel):
    items: list[PathPrimitive] = Field(default_factory=list, description="Primitives in submission order")
    label: str = Field("items", description="What is being emitted, for logging")


class EmitBatchesOutput(BaseModel):
    num_items: int = Field(..., description="Items submitted")
    num_batches: int = Field(..., description="Store submissions made")
