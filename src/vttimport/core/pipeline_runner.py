"""Pipeline orchestrator: the "create scene" and "add to current scene" flows.

Steps are resolved from pipeline.yaml entries (module + optional YAML config),
so every flow runs the same typed steps with the same logging and timing.
User notifications are sent only from here.
"""

from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from .contracts import (
    Anchor,
    CompressionMode,
    ImageAsset,
    MB,
    PipelineConfig,
    SceneBundle,
    StepEntry,
)
from .exceptions import (
    SceneNotReady,
    TransportError,
    UnsupportedFormat,
    UnsupportedForSceneCreation,
    VTTImportError,
)
from .step_base import BaseStep

logger = logging.getLogger(__name__)

DEFAULT_STEPS = [
    StepEntry(name="normalize", module="vttimport.steps.s01_normalize"),
    StepEntry(name="transform", module="vttimport.steps.s02_transform"),
    StepEntry(name="optimize_image", module="vttimport.steps.s03_optimize_image"),
    StepEntry(name="emit_batches", module="vttimport.steps.s04_emit_batches"),
]


def load_pipeline_config(config_path: Path) -> PipelineConfig:
    """Load and validate pipeline.yaml.

    Relative step ``config_file`` paths are resolved against the directory
    holding pipeline.yaml.
    """
    config_path = Path(config_path)
    with open(config_path, encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    cfg = PipelineConfig(**raw)
    base_dir = config_path.resolve().parent
    steps = [
        entry.model_copy(update={"config_file": str(base_dir / entry.config_file)})
        if entry.config_file and not Path(entry.config_file).is_absolute()
        else entry
        for entry in cfg.steps
    ]
    return cfg.model_copy(update={"steps": steps})


def load_step_config(config_path: Path, config_class: type[BaseModel]) -> BaseModel:
    """Load a step-specific YAML config into its Pydantic model."""
    with open(config_path, encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    return config_class(**raw)


def import_step_class(module_path: str):
    """Dynamically import a step class from its module path.

    Expects module_path like 'vttimport.steps.s01_normalize'
    and looks for a class ending in 'Step' in that module's step.py.
    """
    step_module = importlib.import_module(f"{module_path}.step")
    for attr_name in dir(step_module):
        attr = getattr(step_module, attr_name)
        if (
            isinstance(attr, type)
            and hasattr(attr, "run")
            and attr_name.endswith("Step")
            and attr_name != "BaseStep"
        ):
            return attr
    raise ImportError(f"No Step class found in {module_path}.step")


def resolve_step_entries(pipeline_cfg: PipelineConfig) -> dict[str, StepEntry]:
    """Configured entries by name, falling back to the built-in steps."""
    entries = {entry.name: entry for entry in DEFAULT_STEPS}
    entries.update({entry.name: entry for entry in pipeline_cfg.steps})
    return entries


class AddToSceneResult(BaseModel):
    """Summary of an add-to-current-scene import."""

    num_walls: int = 0
    num_doors: int = 0
    num_batches: int = 0
    anchor: Anchor = Field(default_factory=Anchor)


class ImportPipeline:
    """Runs the import flows against a scene store.

    Args:
        pipeline_cfg: Project settings and step entries.
        store: Scene store collaborator (``vttimport.store.SceneStore``).
        notifier: Optional user-feedback sink; its failures are logged and ignored.
    """

    def __init__(self, pipeline_cfg: PipelineConfig, store, notifier=None):
        self.cfg = pipeline_cfg
        self.store = store
        self.notifier = notifier
        self.entries = resolve_step_entries(pipeline_cfg)

    def build_step(self, name: str, config_updates: dict[str, Any] | None = None, **kwargs) -> BaseStep:
        entry = self.entries[name]
        step_cls = import_step_class(entry.module)
        if entry.config_file:
            step_config = load_step_config(Path(entry.config_file), step_cls.config_type)
        else:
            step_config = step_cls.config_type()
        if config_updates:
            step_config = step_config.model_copy(update=config_updates)
        return step_cls(config=step_config, data_root=self.cfg.data_root, **kwargs)

    def _notify(self, message: str, severity: str = "INFO") -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.notify(message, severity)
        except Exception as e:  # noqa: BLE001
            logger.warning(f"Notification failed ({severity}: {message}): {e}")

    def _read(self, file_path: Path) -> tuple[Any, Any]:
        """Read the file and build the normalize step (for its extension list)."""
        from vttimport.steps.s01_normalize.step import read_document

        normalize = self.build_step("normalize")
        raw = read_document(file_path, normalize.config.allowed_extensions)
        return raw, normalize

    # ── Create scene ─────────────────────────────────────────────────

    def create_scene(
        self,
        file_path: Path,
        compression_mode: CompressionMode | str | None = None,
    ) -> SceneBundle:
        """Create a new scene (base map + walls + doors) from a canonical file with an image."""
        try:
            return self._create_scene(Path(file_path), compression_mode)
        except VTTImportError as e:
            logger.error(f"Scene creation failed: {e.message}")
            self._notify(f"Error creating scene: {e.message}", "ERROR")
            raise

    def _create_scene(self, file_path: Path, compression_mode) -> SceneBundle:
        from vttimport.steps.s01_normalize.contracts import DocumentKind, NormalizeInput
        from vttimport.steps.s01_normalize.step import classify_document, require_pixels_per_grid
        from vttimport.steps.s02_transform.contracts import TransformInput
        from vttimport.steps.s03_optimize_image.contracts import OptimizeImageInput

        raw, normalize = self._read(file_path)
        kind = classify_document(raw)
        if kind is DocumentKind.LEGACY:
            raise UnsupportedForSceneCreation(
                "FoundryVTT files do not contain map images and cannot be used to create "
                "scenes. Add them to the current scene instead."
            )
        if kind is DocumentKind.UNRECOGNIZED:
            raise UnsupportedFormat(
                "Unsupported VTT file format. Please use a valid UVTT file for creating new scenes."
            )

        normalized = normalize.execute(
            NormalizeInput(document=raw, source_name=file_path.name, keep_image=True)
        )
        del raw
        if not normalized.has_image:
            raise UnsupportedForSceneCreation(
                "No map image found in UVTT file. A map image is required to create a new scene."
            )
        pixels_per_grid = require_pixels_per_grid(normalized.geometry)

        self._notify("Importing scene (map and items)...", "INFO")

        updates = {"compression_mode": CompressionMode(compression_mode)} if compression_mode else None
        optimize = self.build_step("optimize_image", config_updates=updates)
        image = optimize.execute(OptimizeImageInput(image_payload=normalized.image_payload))
        if image.passthrough:
            self._notify(f"Image kept as-is ({image.size_bytes / MB:.2f}MB)", "INFO")
        elif image.quality is not None:
            self._notify(
                f"Image compressed: {image.quality * 100:.0f}% quality ({image.size_bytes / MB:.2f}MB)",
                "INFO",
            )
        else:
            self._notify(f"Image re-encoded ({image.size_bytes / MB:.2f}MB)", "INFO")

        density = self._pixel_density()
        transform = self.build_step("transform")
        primitives = transform.execute(
            TransformInput(geometry=normalized.geometry, pixel_density=density, anchor=Anchor())
        )

        bundle = SceneBundle(
            name=file_path.stem,
            base_map=ImageAsset(
                dpi=pixels_per_grid,
                mime_type=image.mime_type,
                filename=image.filename,
                path=image.image_path,
            ),
            items=primitives.items,
        )
        self.store.submit_scene_bundle(bundle)
        logger.info(f"Scene '{bundle.name}' submitted with {len(bundle.items)} items")
        self._notify(f"Scene '{bundle.name}' created", "SUCCESS")
        return bundle

    # ── Add to current scene ─────────────────────────────────────────

    def add_to_scene(self, file_path: Path, use_selection: bool = False) -> AddToSceneResult:
        """Add walls and doors from a legacy or canonical file to the current scene."""
        try:
            return self._add_to_scene(Path(file_path), use_selection)
        except VTTImportError as e:
            logger.error(f"Adding to scene failed: {e.message}")
            self._notify(f"Error adding to scene: {e.message}", "ERROR")
            raise

    def _add_to_scene(self, file_path: Path, use_selection: bool) -> AddToSceneResult:
        from vttimport.steps.s01_normalize.contracts import NormalizeInput
        from vttimport.steps.s01_normalize.step import require_pixels_per_grid
        from vttimport.steps.s02_transform.contracts import TransformInput
        from vttimport.steps.s04_emit_batches.contracts import EmitBatchesInput

        if not self.store.is_scene_ready():
            raise SceneNotReady("Scene is not ready. Please wait until the scene is fully loaded.")

        raw, normalize = self._read(file_path)
        normalized = normalize.execute(
            NormalizeInput(document=raw, source_name=file_path.name, keep_image=False)
        )
        del raw
        require_pixels_per_grid(normalized.geometry)

        anchor = self._resolve_anchor(use_selection)
        density = self._pixel_density()
        transform = self.build_step("transform")
        primitives = transform.execute(
            TransformInput(geometry=normalized.geometry, pixel_density=density, anchor=anchor)
        )

        emit = self.build_step("emit_batches", store=self.store)
        num_batches = 0
        if primitives.walls:
            num_batches += emit.execute(EmitBatchesInput(items=primitives.walls, label="walls")).num_batches
        if primitives.doors:
            num_batches += emit.execute(EmitBatchesInput(items=primitives.doors, label="doors")).num_batches

        self.store.set_fog_filled(True)
        self._notify("Import complete!", "SUCCESS")
        return AddToSceneResult(
            num_walls=len(primitives.walls),
            num_doors=len(primitives.doors),
            num_batches=num_batches,
            anchor=anchor,
        )

    def _pixel_density(self) -> float:
        density = self.store.get_pixel_density()
        if density <= 0:
            raise TransportError(
                "Scene store returned an invalid grid density", {"dpi": str(density)}
            )
        return density

    def _resolve_anchor(self, use_selection: bool) -> Anchor:
        if use_selection:
            selected = self.store.get_selection_anchor()
            if selected is not None:
                logger.info(
                    f"Anchoring at selection ({selected.position.x}, {selected.position.y}) "
                    f"scale ({selected.scale.x}, {selected.scale.y})"
                )
                return selected
            logger.info("Nothing selected; anchoring at origin")
        return Anchor()
