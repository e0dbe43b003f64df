"""Tests for room, placement, palette and catalog models."""

import math

import pytest
from pydantic import ValidationError
from shapely.geometry import Point

from tilefit.catalog.loader import (
    get_catalog_path,
    list_catalogs,
    load_catalog,
    validate_catalog_yaml,
)
from tilefit.errors import InvalidInput
from tilefit.models.catalog import TileCatalog
from tilefit.models.placement import Palette, TilePlacement
from tilefit.models.room import Room, RoomOutline


class TestTilePlacement:
    def test_length_defaults_to_longer_side(self):
        assert TilePlacement(x=0, y=0, width=1.26, height=4).length == 4
        assert TilePlacement(x=0, y=0, width=2, height=1.26).length == 2

    def test_derived_edges(self):
        p = TilePlacement(x=1, y=2, width=4, height=1.26)
        assert p.right == 5
        assert p.top == pytest.approx(3.26)
        assert p.bounds == (1, 2, 5, p.top)
        assert p.orientation == "horizontal"
        assert p.short_side == 1.26

    def test_contains_point_is_closed(self):
        p = TilePlacement(x=0, y=0, width=2, height=1)
        assert p.contains_point(0, 0)
        assert p.contains_point(2, 1)
        assert not p.contains_point(2.01, 0.5)

    def test_moved_to_keeps_size(self):
        p = TilePlacement(x=0, y=0, width=2, height=1.26)
        q = p.moved_to(3, 4)
        assert (q.x, q.y, q.width, q.height, q.length) == (3, 4, 2, 1.26, 2)
        assert (p.x, p.y) == (0, 0)

    def test_frozen(self):
        p = TilePlacement(x=0, y=0, width=2, height=1.26)
        with pytest.raises(ValidationError):
            p.x = 5

    def test_rejects_non_positive_size(self):
        with pytest.raises(ValidationError):
            TilePlacement(x=0, y=0, width=0, height=1.26)

    def test_shapely_polygon(self):
        poly = TilePlacement(x=1, y=1, width=4, height=1.26).to_shapely_polygon()
        assert poly.bounds == pytest.approx((1, 1, 5, 2.26))


class TestPalette:
    def test_sorted_descending_without_duplicates(self):
        palette = Palette(lengths=[1, 4, 2, 4])
        assert palette.lengths == [4, 2, 1]
        assert palette.min_length == 1
        assert palette.max_length == 4
        assert len(palette) == 3

    def test_membership(self):
        palette = Palette.of(4, 2, 1)
        assert 2 in palette
        assert 3 not in palette

    @pytest.mark.parametrize("lengths", [[], [4, 0], [-1], [float("nan")]])
    def test_invalid_lengths_rejected(self, lengths):
        with pytest.raises(ValidationError):
            Palette(lengths=lengths)


class TestRoom:
    def test_closing_point_dropped(self):
        room = Room(points=[(0, 0), (4, 0), (4, 3), (0, 3), (0, 0)])
        assert len(room.points) == 4
        assert room.to_shapely_polygon().area == pytest.approx(12)

    def test_too_few_points_rejected(self):
        with pytest.raises(ValidationError):
            Room(points=[(0, 0), (1, 0)])

    def test_non_finite_vertex_rejected(self):
        with pytest.raises(ValidationError):
            Room(points=[(0, 0), (math.inf, 0), (1, 1)])

    def test_negative_margin_rejected(self):
        with pytest.raises(ValidationError):
            Room.rectangle(4, 3, margin=-0.1)

    def test_inner_polygon(self):
        inner = Room.rectangle(10, 6, margin=0.207).inner_polygon()
        assert inner.bounds == pytest.approx((0.207, 0.207, 9.793, 5.793), abs=1e-6)

    @pytest.mark.parametrize("points", [
        [(0, 0), (4, 0), (4, 3), (0, 3)],
        [(0, 3), (4, 3), (4, 0), (0, 0)],
    ])
    def test_margin_guides_point_inward(self, points):
        """Guides sit inside the room for either winding."""
        room = Room(points=points, margin=0.5)
        guides = room.margin_guide_segments()

        assert len(guides) == 4
        polygon = room.to_shapely_polygon()
        for start, end in guides:
            mid = ((start[0] + end[0]) / 2, (start[1] + end[1]) / 2)
            assert polygon.distance(Point(mid)) == 0
            assert polygon.exterior.distance(Point(mid)) == pytest.approx(0.5)


class TestRoomOutline:
    def test_square_by_sides(self):
        outline = RoomOutline()
        for angle in (0, 90, 180):
            assert outline.add_side(5, angle)
        assert outline.close()

        room = outline.to_room(margin=0.2)
        assert room.points[0] == (5, 0)
        assert room.points[1] == pytest.approx((5, 5))
        assert room.margin == 0.2
        assert room.to_shapely_polygon().area == pytest.approx(12.5)

    @pytest.mark.parametrize("length, angle", [
        (0, 0), (None, 0), (math.nan, 0), (5, None), (5, math.inf),
    ])
    def test_invalid_sides_ignored(self, length, angle):
        outline = RoomOutline()
        assert not outline.add_side(length, angle)
        assert outline.points == []

    def test_no_sides_after_close(self):
        outline = RoomOutline()
        for angle in (0, 90, 180):
            outline.add_side(3, angle)
        outline.close()

        assert not outline.add_side(3, 270)
        assert len(outline.points) == 3

    def test_close_needs_three_points(self):
        outline = RoomOutline()
        outline.add_side(3, 0)
        outline.add_side(3, 90)
        assert not outline.close()
        with pytest.raises(InvalidInput):
            outline.to_room()

    def test_reset(self):
        outline = RoomOutline()
        for angle in (0, 90, 180):
            outline.add_side(3, angle)
        outline.close()
        outline.reset()

        assert outline.points == []
        assert not outline.closed
        assert outline.add_side(3, 0)


class TestCatalog:
    def test_default_catalog_values(self):
        catalog = load_catalog("default")
        assert catalog.palette == [4, 2, 1]
        assert catalog.tile_short_side == 1.26
        assert catalog.margin == 0.207
        assert catalog.price_for(4) == 20
        assert catalog.price_for(3) == 0.0
        assert catalog.boundary.join_style == "mitre"

    def test_list_catalogs(self):
        names = [c["name"] for c in list_catalogs()]
        assert "default" in names
        assert "compact" in names
        assert all(c["description"] for c in list_catalogs())

    def test_missing_catalog(self):
        with pytest.raises(FileNotFoundError):
            get_catalog_path("no_such_catalog")

    def test_override_merges_nested(self):
        catalog = load_catalog(
            "default",
            {"price_per_meter": 4.5, "boundary": {"join_style": "round"}},
        )
        assert catalog.price_per_meter == 4.5
        assert catalog.boundary.join_style == "round"
        assert catalog.boundary.quad_segs == 1
        assert catalog.palette == [4, 2, 1]

    def test_override_prices_from_json_keys(self):
        catalog = load_catalog("default", {"prices": {"4": 25, "2": 13, "1": 7}})
        assert catalog.price_for(4.0) == 25

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            TileCatalog(prices={4: -1})

    def test_validate_catalog_yaml(self):
        ok, error = validate_catalog_yaml("name: mine\npalette: [3, 1.5]\n")
        assert ok and error is None

        ok, error = validate_catalog_yaml("tile_short_side: -1\n")
        assert not ok and error

        ok, error = validate_catalog_yaml("palette: [1, 2\n")
        assert not ok and error
