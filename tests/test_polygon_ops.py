"""Tests for polygon offsetting, fusing and rectangle union."""

import math

import pytest
from shapely.errors import GEOSException
from shapely.geometry import MultiPolygon, Polygon, box

from tilefit.geometry.polygon_ops import (
    buffer_polygon,
    create_rectangle,
    fuse_polygon,
    inset_polygon,
    offset_polygon,
    polygon_from_coords,
    polygon_perimeter,
    polygon_rings,
    polygon_to_coords,
    ring_length,
    union_rectangles,
)


# L-shaped room (8m x 6m with a 4m x 3m notch)
L_ROOM = Polygon([(0, 0), (8, 0), (8, 3), (4, 3), (4, 6), (0, 6)])


class _BrokenGeometry:
    """Stand-in for a geometry the geometry engine chokes on."""

    is_empty = False
    is_valid = True

    def buffer(self, *args, **kwargs):
        raise GEOSException("TopologyException: side location conflict")


class TestOffsetPolygon:
    """Test signed-distance offsetting."""

    def test_erosion_shrinks_rectangle_by_margin(self):
        """A 10x6 room eroded by 0.207 keeps its shape, inset on every side."""
        inner = offset_polygon(box(0, 0, 10, 6), -0.207)

        min_x, min_y, max_x, max_y = inner.bounds
        assert min_x == pytest.approx(0.207, abs=1e-6)
        assert min_y == pytest.approx(0.207, abs=1e-6)
        assert max_x == pytest.approx(9.793, abs=1e-6)
        assert max_y == pytest.approx(5.793, abs=1e-6)
        assert inner.area == pytest.approx(9.586 * 5.586, rel=1e-6)

    @pytest.mark.parametrize("margin", [0.05, 0.207, 1.0, 1.9])
    def test_erosion_is_contained_in_room(self, margin):
        """Erosion below the inscribed radius is non-empty and inside the room."""
        inner = offset_polygon(L_ROOM, -margin)

        assert not inner.is_empty
        assert L_ROOM.covers(inner)

    def test_erosion_past_inscribed_radius_is_empty(self):
        """A 1m square cannot be eroded by 0.6m."""
        inner = offset_polygon(box(0, 0, 1, 1), -0.6)
        assert inner.is_empty

    def test_erosion_can_split_room(self):
        """Two rooms joined by a narrow corridor split into separate parts."""
        dumbbell = Polygon([
            (0, 0), (4, 0), (4, 1.8), (6, 1.8), (6, 0), (10, 0),
            (10, 4), (6, 4), (6, 2.2), (4, 2.2), (4, 4), (0, 4),
        ])
        inner = offset_polygon(dumbbell, -0.5)

        assert isinstance(inner, MultiPolygon)
        assert len(inner.geoms) == 2

    def test_zero_distance_returns_input(self):
        room = box(0, 0, 5, 5)
        assert offset_polygon(room, 0.0) is room

    def test_empty_input_returns_empty(self):
        assert offset_polygon(Polygon(), -1.0).is_empty
        assert offset_polygon(Polygon(), 1.0).is_empty

    def test_non_finite_distance_returns_input(self):
        room = box(0, 0, 5, 5)
        assert offset_polygon(room, math.nan) is room

    def test_dilation_grows_rectangle_with_mitre_corners(self):
        outer = offset_polygon(box(0, 0, 4, 2), 0.5, join_style="mitre")
        assert outer.bounds == pytest.approx((-0.5, -0.5, 4.5, 2.5))
        assert outer.area == pytest.approx(5 * 3)

    def test_dilation_with_coarse_round_join_chamfers_corners(self):
        """quad_segs=1 puts a single chord across each corner."""
        outer = offset_polygon(box(0, 0, 4, 2), 0.5, quad_segs=1, join_style="round")
        corner_cut = 4 * 0.5 * 0.5 / 2
        assert outer.area == pytest.approx(5 * 3 - corner_cut)

    def test_shapely_fallback_matches_pyclipper(self):
        via_clipper = inset_polygon(L_ROOM, 0.3)
        via_shapely = inset_polygon(L_ROOM, 0.3, use_pyclipper=False)
        assert via_clipper.symmetric_difference(via_shapely).area == pytest.approx(0.0, abs=1e-4)


class TestDegenerateGeometry:
    """Failures in the geometry engine are recovered, never raised."""

    def test_failed_dilation_returns_input(self):
        broken = _BrokenGeometry()
        assert buffer_polygon(broken, 0.2) is broken

    def test_failed_fuse_returns_input(self):
        broken = _BrokenGeometry()
        assert fuse_polygon(broken) is broken

    def test_failed_shapely_inset_returns_empty(self):
        assert inset_polygon(_BrokenGeometry(), 0.2, use_pyclipper=False).is_empty

    def test_too_few_points_give_empty_polygon(self):
        assert polygon_from_coords([(0, 0), (1, 1)]).is_empty
        assert polygon_from_coords([]).is_empty

    def test_closing_point_is_dropped(self):
        poly = polygon_from_coords([(0, 0), (2, 0), (2, 2), (0, 0)])
        assert poly.area == pytest.approx(2.0)

    def test_unknown_join_style_rejected(self):
        with pytest.raises(ValueError):
            buffer_polygon(box(0, 0, 1, 1), 0.1, join_style="sharp")


class TestUnionRectangles:
    """Test the pairwise union fold."""

    def test_empty_input_is_empty_region(self):
        assert union_rectangles([]).is_empty

    def test_touching_rectangles_merge(self):
        union = union_rectangles([create_rectangle(0, 0, 4, 1.26), create_rectangle(4, 0, 2, 1.26)])
        assert union.area == pytest.approx(6 * 1.26)
        assert fuse_polygon(union).bounds == pytest.approx((0, 0, 6, 1.26))

    def test_disjoint_rectangles_stay_separate(self):
        union = union_rectangles([box(0, 0, 1, 1), box(3, 3, 4, 4)])
        assert isinstance(union, MultiPolygon)
        assert union.area == pytest.approx(2.0)

    def test_union_is_associative(self):
        a, b, c = box(0, 0, 4, 1.26), box(3, 0, 5, 2), box(4.5, 1, 6, 3)
        left = union_rectangles([union_rectangles([a, b]), c])
        right = union_rectangles([a, union_rectangles([b, c])])
        assert left.symmetric_difference(right).area == pytest.approx(0.0, abs=1e-9)

    def test_union_is_commutative(self):
        rects = [box(0, 0, 4, 1.26), box(2, 1, 3.26, 5), box(6, 0, 7, 1)]
        forward = union_rectangles(rects)
        backward = union_rectangles(reversed(rects))
        assert forward.symmetric_difference(backward).area == pytest.approx(0.0, abs=1e-9)


class TestFusePolygon:
    """Test the epsilon fuse."""

    def test_fuse_preserves_area(self):
        union = union_rectangles([box(0, 0, 2, 1), box(2, 0, 4, 1), box(0, 1, 4, 2)])
        fused = fuse_polygon(union)
        assert fused.area == pytest.approx(8.0, abs=1e-5)
        assert isinstance(fused, Polygon)

    def test_fuse_closes_micro_gap(self):
        """Tiles 1e-7 apart become one region."""
        union = union_rectangles([box(0, 0, 2, 1), box(2 + 1e-7, 0, 4, 1)])
        assert isinstance(union, MultiPolygon)
        assert isinstance(fuse_polygon(union), Polygon)


class TestRingMeasurement:
    """Test ring extraction and length."""

    def test_rings_are_explicitly_closed(self):
        rings = polygon_rings(box(0, 0, 2, 1))
        assert len(rings) == 1
        assert rings[0][0] == rings[0][-1]

    def test_ring_length_of_rectangle(self):
        assert ring_length([(0, 0), (2, 0), (2, 1), (0, 1), (0, 0)]) == pytest.approx(6.0)

    def test_holes_excluded_unless_requested(self):
        frame = box(0, 0, 10, 10).difference(box(2, 2, 8, 8))
        assert polygon_perimeter(frame) == pytest.approx(40.0)
        assert polygon_perimeter(frame, include_interiors=True) == pytest.approx(64.0)

    def test_multipolygon_sums_all_parts(self):
        parts = MultiPolygon([box(0, 0, 1, 1), box(5, 5, 7, 6)])
        assert polygon_perimeter(parts) == pytest.approx(4.0 + 6.0)

    def test_polygon_to_coords(self):
        coords = polygon_to_coords(create_rectangle(1, 1, 2, 1))
        assert coords[0] == (1, 1)
        assert coords[0] == coords[-1]
        assert len(coords) == 5
        assert polygon_to_coords(Polygon()) == []
