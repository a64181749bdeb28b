"""Base class for all pipeline steps.

Every step declares typed Input, Output, Config via Pydantic models.
The heavy lifting lives in plain functions next to each step, so the
step class only wires config and data_root around them.
"""

from __future__ import annotations

import time
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Generic, TypeVar, ClassVar

from pydantic import BaseModel

InputT = TypeVar("InputT", bound=BaseModel)
OutputT = TypeVar("OutputT", bound=BaseModel)
ConfigT = TypeVar("ConfigT", bound=BaseModel)

logger = logging.getLogger(__name__)


class BaseStep(ABC, Generic[InputT, OutputT, ConfigT]):
    """One typed import stage: validate the input model, run, log elapsed time.

    Concrete steps pin ``input_type`` / ``output_type`` / ``config_type`` so the
    orchestrator can build them from YAML and expose their JSON schemas.
    A failed ``validate_inputs`` surfaces as ``ValueError`` from ``execute``.
    """

    name: ClassVar[str] = ""
    input_type: ClassVar[type[BaseModel]]
    output_type: ClassVar[type[BaseModel]]
    config_type: ClassVar[type[BaseModel]]

    def __init__(self, config: ConfigT, data_root: Path):
        self.config = config
        self.data_root = Path(data_root)

    @abstractmethod
    def run(self, inputs: InputT) -> OutputT:
        """Do the step's work on already-validated inputs."""
        ...

    @abstractmethod
    def validate_inputs(self, inputs: InputT) -> bool:
        """Return False (after logging why) when the inputs cannot be processed."""
        ...

    def execute(self, inputs: InputT) -> OutputT:
        """Validate, run and time the step; raises ValueError on invalid inputs."""
        step_name = self.name or self.__class__.__name__
        logger.info(f"[{step_name}] Validating inputs...")

        if not self.validate_inputs(inputs):
            raise ValueError(f"[{step_name}] Input validation failed")

        logger.info(f"[{step_name}] Starting...")
        t0 = time.time()
        result = self.run(inputs)
        elapsed = time.time() - t0
        logger.info(f"[{step_name}] Done in {elapsed:.2f}s")
        return result

    @classmethod
    def get_input_schema(cls) -> dict:
        """Return JSON schema for inputs."""
        return cls.input_type.model_json_schema()

    @classmethod
    def get_output_schema(cls) -> dict:
        """Return JSON schema for outputs."""
        return cls.output_type.model_json_schema()

    @classmethod
    def get_config_schema(cls) -> dict:
        """Return JSON schema for config."""
        return cls.config_type.model_json_schema()
