"""Tests for S02: Grid-to-pixel transform and primitive construction."""

import math
from pathlib import Path

import pytest

from vttimport.core.contracts import (
    DOOR_METADATA_KEY,
    Anchor,
    CanonicalGeometry,
    Command,
    DoorSegment,
    Resolution,
    Vector2,
    WallSegment,
)
from vttimport.steps.s01_normalize.step import normalize_document
from vttimport.steps.s02_transform.config import TransformConfig
from vttimport.steps.s02_transform.contracts import TransformInput, TransformOutput
from vttimport.steps.s02_transform.step import (
    TransformStep,
    build_door,
    build_wall,
    transform_geometry,
)

MOVE, LINE = Command.MOVE.value, Command.LINE.value


def _v(x, y):
    return Vector2(x=x, y=y)


def _geometry(walls=(), doors=()):
    return CanonicalGeometry(
        walls=tuple(WallSegment(points=tuple(_v(*p) for p in w)) for w in walls),
        doors=tuple(DoorSegment(bounds=tuple(_v(*p) for p in b), closed=c) for b, c in doors),
        resolution=Resolution(pixels_per_grid=100),
    )


def _door_entry(item):
    return item.metadata[DOOR_METADATA_KEY][0]


# ---------------------------------------------------------------------------
# A. Walls
# ---------------------------------------------------------------------------

class TestBuildWall:
    def test_three_point_wall_density_70(self):
        geometry = _geometry(walls=[[(0, 0), (1, 0), (1, 1)]])
        walls, doors, skipped = transform_geometry(geometry, 70)
        assert len(walls) == 1 and not doors and skipped == 0
        assert walls[0].commands == [(MOVE, 0, 0), (LINE, 70, 0), (LINE, 70, 70)]

    def test_non_uniform_scale(self):
        wall = WallSegment(points=(_v(1, 1), _v(2, 3)))
        item = build_wall(wall, 10, Anchor(scale=_v(2, 0.5)), TransformConfig())
        assert item.commands == [(MOVE, 20, 5), (LINE, 40, 15)]

    def test_order_and_duplicates_preserved(self):
        wall = WallSegment(points=(_v(1, 1), _v(1, 1), _v(0, 0), _v(1, 1)))
        item = build_wall(wall, 1, Anchor(), TransformConfig())
        assert [c[1:] for c in item.commands] == [(1, 1), (1, 1), (0, 0), (1, 1)]
        assert [c[0] for c in item.commands] == [MOVE, LINE, LINE, LINE]

    def test_style_and_layer(self):
        wall = WallSegment(points=(_v(0, 0), _v(1, 0)))
        item = build_wall(wall, 50, Anchor(), TransformConfig())
        assert item.name == "Wall"
        assert item.layer == "FOG"
        assert item.style.stroke_color == "#000000"
        assert item.style.stroke_width == 2
        assert item.style.fill_opacity == 0
        assert item.metadata == {}

    def test_anchor_position_is_placement_origin(self):
        wall = WallSegment(points=(_v(1, 1), _v(2, 1)))
        item = build_wall(wall, 50, Anchor(position=_v(300, -40)), TransformConfig())
        assert (item.position.x, item.position.y) == (300, -40)
        # position does not offset the path itself
        assert item.commands[0] == (MOVE, 50, 50)

    def test_legacy_scenario_density_50(self, legacy_doc):
        legacy_doc["walls"] = [{"c": [100, 100, 200, 100], "door": 0}]
        _, geometry, _ = normalize_document(legacy_doc)
        walls, _, _ = transform_geometry(geometry, 50)
        assert walls[0].commands == [(MOVE, 50, 50), (LINE, 100, 50)]


# ---------------------------------------------------------------------------
# B. Doors
# ---------------------------------------------------------------------------

class TestBuildDoor:
    def test_length_3_4_5(self):
        door = DoorSegment(bounds=(_v(0, 0), _v(3, 4)), closed=True)
        item = build_door(door, 1, Anchor(), TransformConfig())
        entry = _door_entry(item)
        assert entry["end"]["distance"] == pytest.approx(5.0)
        assert entry["start"] == {"distance": 0, "index": 0}
        assert entry["open"] is False

    def test_only_endpoints_used(self):
        door = DoorSegment(bounds=(_v(0, 0), _v(5, 5), _v(2, 0)), closed=False)
        item = build_door(door, 10, Anchor(), TransformConfig())
        assert item.commands == [(MOVE, 0, 0), (LINE, 20, 0)]
        assert _door_entry(item)["end"]["distance"] == pytest.approx(20.0)
        assert _door_entry(item)["open"] is True

    def test_length_measured_after_scale(self):
        door = DoorSegment(bounds=(_v(0, 0), _v(1, 1)), closed=True)
        item = build_door(door, 10, Anchor(scale=_v(3, 4)), TransformConfig())
        assert _door_entry(item)["end"]["distance"] == pytest.approx(50.0)

    def test_coincident_endpoints_zero_length(self):
        door = DoorSegment(bounds=(_v(2, 2), _v(9, 9), _v(2, 2)), closed=True)
        item = build_door(door, 70, Anchor(), TransformConfig())
        assert _door_entry(item)["end"]["distance"] == 0

    @pytest.mark.parametrize("a,b,density,scale", [
        ((0, 0), (1, 0), 70, (1, 1)),
        ((-2, 3), (4, -1), 50, (0.5, 2)),
        ((1.5, 1.5), (1.5, 1.5), 140, (1, 1)),
        ((0, 0), (0, 0.001), 1, (1, 1)),
    ])
    def test_length_is_euclidean_and_non_negative(self, a, b, density, scale):
        door = DoorSegment(bounds=(_v(*a), _v(*b)), closed=True)
        item = build_door(door, density, Anchor(scale=_v(*scale)), TransformConfig())
        (_, x0, y0), (_, x1, y1) = item.commands
        length = _door_entry(item)["end"]["distance"]
        assert length == pytest.approx(math.hypot(x1 - x0, y1 - y0))
        assert length >= 0
        assert (length == 0) == ((x0, y0) == (x1, y1))

    def test_style(self):
        door = DoorSegment(bounds=(_v(0, 0), _v(1, 0)), closed=True)
        item = build_door(door, 1, Anchor(), TransformConfig())
        assert item.name == "Door"
        assert item.layer == "FOG"
        assert item.style.stroke_color == "#FF0000"
        assert item.style.stroke_width == 5
        assert item.style.fill_opacity == 0


# ---------------------------------------------------------------------------
# C. Store serialization
# ---------------------------------------------------------------------------

class TestStoreShape:
    def test_camel_case_keys(self):
        door = DoorSegment(bounds=(_v(0, 0), _v(1, 0)), closed=True)
        data = build_door(door, 1, Anchor(), TransformConfig()).to_store_dict()
        assert data["type"] == "PATH"
        assert data["fillRule"] == "nonzero"
        assert data["style"]["strokeColor"] == "#FF0000"
        assert data["style"]["strokeWidth"] == 5
        assert data["style"]["strokeDash"] == []
        assert data["commands"] == [[0, 0.0, 0.0], [1, 1.0, 0.0]]
        assert DOOR_METADATA_KEY in data["metadata"]


# ---------------------------------------------------------------------------
# D. Step
# ---------------------------------------------------------------------------

class TestTransformStep:
    def test_execute(self, data_root: Path, canonical_doc):
        _, geometry, _ = normalize_document(canonical_doc)
        step = TransformStep(config=TransformConfig(), data_root=data_root)
        out = step.execute(TransformInput(geometry=geometry, pixel_density=70))
        assert isinstance(out, TransformOutput)
        assert len(out.walls) == 2
        assert len(out.doors) == 1
        assert out.items == [*out.walls, *out.doors]

    def test_zero_density_fails_validation(self, data_root: Path):
        step = TransformStep(config=TransformConfig(), data_root=data_root)
        with pytest.raises(ValueError):
            step.execute(TransformInput(geometry=_geometry(), pixel_density=0))

    def test_custom_layer(self, data_root: Path):
        step = TransformStep(config=TransformConfig(layer="DRAWING"), data_root=data_root)
        out = step.execute(TransformInput(geometry=_geometry(walls=[[(0, 0), (1, 1)]]), pixel_density=1))
        assert out.walls[0].layer == "DRAWING"
