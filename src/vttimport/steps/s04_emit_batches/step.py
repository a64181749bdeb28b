"""Step 04: Submit primitives to the scene store in ordered, bounded batches."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, ClassVar, Iterator, Sequence, TypeVar

from vttimport.core.step_base import BaseStep
from vttimport.store.base import SceneStore
from .config import EmitBatchesConfig
from .contracts import EmitBatchesInput, EmitBatchesOutput

logger = logging.getLogger(__name__)

T = TypeVar("T")


def iter_batches(items: Sequence[T], batch_size: int) -> Iterator[list[T]]:
    """Contiguous, non-overlapping slices of at most ``batch_size`` items."""
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")
    for start in range(0, len(items), batch_size):
        yield list(items[start:start + batch_size])


def emit_in_batches(
    items: Sequence[T],
    batch_size: int,
    submit: Callable[[list[T]], None],
) -> int:
    """Submit batches one after another. Returns the number of submissions.

    The first failing ``submit`` propagates; later batches are not sent and
    earlier ones are not rolled back.
    """
    count = 0
    for batch in iter_batches(items, batch_size):
        submit(batch)
        count += 1
    return count


class EmitBatchesStep(BaseStep[EmitBatchesInput, EmitBatchesOutput, EmitBatchesConfig]):
    name: ClassVar[str] = "emit_batches"
    input_type: ClassVar = EmitBatchesInput
    output_type: ClassVar = EmitBatchesOutput
    config_type: ClassVar = EmitBatchesConfig

    def __init__(self, config: EmitBatchesConfig, data_root: Path, store: SceneStore | None = None):
        super().__init__(config, data_root)
        self.store = store

    def validate_inputs(self, inputs: EmitBatchesInput) -> bool:
        if self.store is None:
            logger.error("No scene store configured")
            return False
        return True

    def run(self, inputs: EmitBatchesInput) -> EmitBatchesOutput:
        num_batches = emit_in_batches(
            inputs.items, self.config.batch_size, self.store.submit_primitive_batch
        )
        logger.info(
            f"Submitted {len(inputs.items)} {inputs.label} in {num_batches} batches "
            f"(batch_size={self.config.batch_size})"
        )
        return EmitBatchesOutput(num_items=len(inputs.items), num_batches=num_batches)
