"""Shared pytest fixtures for vttimport tests."""

import base64
import json
from pathlib import Path

import numpy as np
import pytest

from vttimport.core.contracts import Anchor, PathPrimitive, PipelineConfig, SceneBundle
from vttimport.core.exceptions import TransportError
from vttimport.store.base import Notifier, SceneStore


def make_image_bytes(width: int = 64, height: int = 48, ext: str = ".png", seed: int = 0) -> bytes:
    """Random-noise raster encoded with OpenCV (noise keeps WebP sizes quality-sensitive)."""
    import cv2

    rng = np.random.default_rng(seed)
    img = rng.integers(0, 256, (height, width, 3), dtype=np.uint8)
    ok, buf = cv2.imencode(ext, img)
    assert ok
    return buf.tobytes()


class RecordingStore(SceneStore):
    """In-memory store that records every call in order."""

    def __init__(self, density: float = 70.0, anchor: Anchor | None = None,
                 ready: bool = True, fail_on_batch: int | None = None):
        self.density = density
        self.anchor = anchor
        self.ready = ready
        self.fail_on_batch = fail_on_batch
        self.calls: list[str] = []
        self.batches: list[list[PathPrimitive]] = []
        self.bundles: list[SceneBundle] = []
        self.fog_filled: bool | None = None

    def is_scene_ready(self) -> bool:
        self.calls.append("is_scene_ready")
        return self.ready

    def get_pixel_density(self) -> float:
        self.calls.append("get_pixel_density")
        return self.density

    def get_selection_anchor(self) -> Anchor | None:
        self.calls.append("get_selection_anchor")
        return self.anchor

    def submit_primitive_batch(self, items: list[PathPrimitive]) -> None:
        self.calls.append("submit_primitive_batch")
        if self.fail_on_batch is not None and len(self.batches) == self.fail_on_batch:
            raise TransportError("store rejected batch")
        self.batches.append(list(items))

    def submit_scene_bundle(self, bundle: SceneBundle) -> None:
        self.calls.append("submit_scene_bundle")
        self.bundles.append(bundle)

    def set_fog_filled(self, filled: bool) -> None:
        self.calls.append("set_fog_filled")
        self.fog_filled = filled


class RecordingNotifier(Notifier):
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.messages: list[tuple[str, str]] = []

    def notify(self, message: str, severity: str = "INFO") -> None:
        self.messages.append((message, severity))
        if self.fail:
            raise RuntimeError("notification channel down")


@pytest.fixture
def data_root(tmp_path: Path) -> Path:
    root = tmp_path / "data"
    root.mkdir()
    return root


@pytest.fixture
def pipeline_cfg(data_root: Path) -> PipelineConfig:
    return PipelineConfig(project_name="test", data_root=data_root)


@pytest.fixture
def png_bytes() -> bytes:
    return make_image_bytes()


@pytest.fixture
def canonical_doc(png_bytes: bytes) -> dict:
    """Universal VTT document: one 3-point wall, one object wall, one open door, a PNG map."""
    return {
        "format": 0.3,
        "resolution": {
            "map_origin": {"x": 0, "y": 0},
            "map_size": {"x": 10, "y": 8},
            "pixels_per_grid": 100,
        },
        "line_of_sight": [
            [{"x": 0, "y": 0}, {"x": 1, "y": 0}, {"x": 1, "y": 1}],
        ],
        "objects_line_of_sight": [
            [{"x": 2, "y": 2}, {"x": 3, "y": 2}],
        ],
        "portals": [
            {
                "position": {"x": 4.5, "y": 0},
                "bounds": [{"x": 4, "y": 0}, {"x": 4.5, "y": 0}, {"x": 5, "y": 0}],
                "rotation": 0,
                "closed": False,
                "freestanding": False,
            }
        ],
        "lights": [],
        "image": base64.b64encode(png_bytes).decode("ascii"),
    }


@pytest.fixture
def legacy_doc() -> dict:
    """Foundry VTT scene export: one wall, one door, one secret door."""
    return {
        "name": "Cellar",
        "width": 1000,
        "height": 800,
        "grid": 100,
        "gridDistance": 5,
        "gridUnits": "ft",
        "walls": [
            {"c": [100, 100, 200, 100], "move": 1, "sense": 1, "door": 0, "sound": 1},
            {"c": [200, 100, 200, 300], "move": 1, "sense": 1, "door": 1, "sound": 1},
            {"c": [300, 300, 400, 300], "move": 1, "sense": 1, "door": 2, "sound": 1},
        ],
    }


def _write(path: Path, doc: dict) -> Path:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(doc, f)
    return path


@pytest.fixture
def canonical_file(tmp_path: Path, canonical_doc: dict) -> Path:
    return _write(tmp_path / "tavern.uvtt", canonical_doc)


@pytest.fixture
def legacy_file(tmp_path: Path, legacy_doc: dict) -> Path:
    return _write(tmp_path / "cellar.json", legacy_doc)


@pytest.fixture
def imageless_file(tmp_path: Path, canonical_doc: dict) -> Path:
    doc = dict(canonical_doc)
    del doc["image"]
    return _write(tmp_path / "noimage.dd2vtt", doc)
