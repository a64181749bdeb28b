"""Directory-backed scene store for offline imports and tests.

Layout under ``root``::

    items.json                  every primitive batch, appended in order
    fog.json                    {"filled": bool}
    scenes/<name>/scene.json    uploaded scene bundles
    scenes/<name>/<map file>    base map image
"""

from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path

from vttimport.core.contracts import Anchor, PathPrimitive, SceneBundle
from vttimport.core.exceptions import TransportError
from .base import SceneStore

logger = logging.getLogger(__name__)


class LocalSceneStore(SceneStore):
    def __init__(
        self,
        root: Path,
        pixel_density: float = 150.0,
        anchor: Anchor | None = None,
        scene_ready: bool = True,
    ):
        self.root = Path(root)
        self.pixel_density = pixel_density
        self.anchor = anchor
        self.scene_ready = scene_ready

    @property
    def items_path(self) -> Path:
        return self.root / "items.json"

    def load_items(self) -> list[dict]:
        if not self.items_path.exists():
            return []
        with open(self.items_path, encoding="utf-8") as f:
            return json.load(f)

    def is_scene_ready(self) -> bool:
        return self.scene_ready

    def get_pixel_density(self) -> float:
        return self.pixel_density

    def get_selection_anchor(self) -> Anchor | None:
        return self.anchor

    def submit_primitive_batch(self, items: list[PathPrimitive]) -> None:
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            stored = self.load_items()
            stored.extend(item.to_store_dict() for item in items)
            with open(self.items_path, "w", encoding="utf-8") as f:
                json.dump(stored, f, indent=2)
        except OSError as e:
            raise TransportError(f"Could not write items to {self.items_path}", {"error": str(e)}) from e
        logger.debug(f"Stored {len(items)} items ({len(stored)} total)")

    def submit_scene_bundle(self, bundle: SceneBundle) -> None:
        scene_dir = self.root / "scenes" / bundle.name
        base_map = bundle.base_map
        payload = {
            "name": bundle.name,
            "gridType": bundle.grid_type,
            "baseMap": {
                "name": base_map.name,
                "dpi": base_map.dpi,
                "mimeType": base_map.mime_type,
                "file": base_map.filename,
            },
            "items": [item.to_store_dict() for item in bundle.items],
        }
        try:
            scene_dir.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(base_map.path, scene_dir / base_map.filename)
            with open(scene_dir / "scene.json", "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
        except OSError as e:
            raise TransportError(f"Could not write scene '{bundle.name}'", {"error": str(e)}) from e
        logger.info(f"Scene '{bundle.name}' saved -> {scene_dir}")

    def set_fog_filled(self, filled: bool) -> None:
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            with open(self.root / "fog.json", "w", encoding="utf-8") as f:
                json.dump({"filled": filled}, f)
        except OSError as e:
            raise TransportError("Could not update fog state", {"error": str(e)}) from e
