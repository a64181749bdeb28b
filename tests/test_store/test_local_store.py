"""Tests for the directory-backed scene store and the store factory."""

import json
from pathlib import Path

import pytest

from vttimport.core.contracts import (
    Anchor,
    ImageAsset,
    PathPrimitive,
    SceneBundle,
    StoreConfig,
    Vector2,
)
from vttimport.core.exceptions import TransportError
from vttimport.store import HttpSceneStore, LocalSceneStore, build_store


def _items(*names):
    return [PathPrimitive(name=n, commands=[(0, 0, 0), (1, 1, 1)]) for n in names]


class TestLocalSceneStore:
    def test_batches_appended_in_order(self, tmp_path: Path):
        store = LocalSceneStore(tmp_path / "store")
        store.submit_primitive_batch(_items("a", "b"))
        store.submit_primitive_batch(_items("c"))
        stored = store.load_items()
        assert [i["name"] for i in stored] == ["a", "b", "c"]
        assert stored[0]["commands"] == [[0, 0.0, 0.0], [1, 1.0, 1.0]]

    def test_collaborator_values(self, tmp_path: Path):
        anchor = Anchor(position=Vector2(x=1, y=2))
        store = LocalSceneStore(tmp_path, pixel_density=70, anchor=anchor, scene_ready=False)
        assert store.get_pixel_density() == 70
        assert store.get_selection_anchor() == anchor
        assert store.is_scene_ready() is False

    def test_fog(self, tmp_path: Path):
        store = LocalSceneStore(tmp_path)
        store.set_fog_filled(True)
        assert json.loads((tmp_path / "fog.json").read_text()) == {"filled": True}

    def test_scene_bundle(self, tmp_path: Path):
        image = tmp_path / "map.webp"
        image.write_bytes(b"RIFF0000WEBPdata")
        bundle = SceneBundle(
            name="tavern",
            base_map=ImageAsset(dpi=100, mime_type="image/webp", filename="map.webp", path=image),
            items=_items("Wall"),
        )
        store = LocalSceneStore(tmp_path / "store")
        store.submit_scene_bundle(bundle)

        scene_dir = tmp_path / "store" / "scenes" / "tavern"
        scene = json.loads((scene_dir / "scene.json").read_text())
        assert scene["gridType"] == "SQUARE"
        assert scene["baseMap"] == {
            "name": "Imported Map", "dpi": 100.0, "mimeType": "image/webp", "file": "map.webp",
        }
        assert [i["name"] for i in scene["items"]] == ["Wall"]
        assert (scene_dir / "map.webp").read_bytes() == image.read_bytes()

    def test_missing_image_is_transport_error(self, tmp_path: Path):
        bundle = SceneBundle(
            name="broken",
            base_map=ImageAsset(dpi=100, mime_type="image/png", filename="map.png",
                                path=tmp_path / "missing.png"),
        )
        with pytest.raises(TransportError):
            LocalSceneStore(tmp_path).submit_scene_bundle(bundle)


class TestBuildStore:
    def test_local(self, tmp_path: Path):
        store = build_store(StoreConfig(pixel_density=42), tmp_path)
        assert isinstance(store, LocalSceneStore)
        assert store.root == tmp_path / "store"
        assert store.get_pixel_density() == 42

    def test_local_selection(self, tmp_path: Path):
        config = StoreConfig(selection={"position": {"x": 300, "y": 100}, "scale": {"x": 2, "y": 2}})
        store = build_store(config, tmp_path)
        assert store.get_selection_anchor() == Anchor(
            position=Vector2(x=300, y=100), scale=Vector2(x=2, y=2)
        )

    def test_local_without_selection(self, tmp_path: Path):
        assert build_store(StoreConfig(), tmp_path).get_selection_anchor() is None

    def test_http(self, tmp_path: Path):
        store = build_store(StoreConfig(kind="http", base_url="http://obr.local/", timeout_seconds=5), tmp_path)
        assert isinstance(store, HttpSceneStore)
        assert store.base_url == "http://obr.local"
        assert store.timeout == 5
