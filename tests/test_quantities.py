"""Tests for tile cost, quantity takeoff and GeoJSON export."""

import pytest

from tilefit.export.geojson import filter_geojson_by_layer, layout_to_geojson
from tilefit.export.quantities import compute_quantities, count_tiles, tile_cost
from tilefit.models.catalog import TileCatalog
from tilefit.models.placement import TilePlacement
from tilefit.models.room import Room
from tilefit.pipeline import build_boundary, quote_layout


PRICES = {4: 20, 2: 12, 1: 6}


def horizontal(x, y, length):
    return TilePlacement(x=x, y=y, width=length, height=1.26, length=length)


@pytest.fixture
def row():
    """One row of 4 + 4 + 1."""
    return [horizontal(0.207, 0.207, 4), horizontal(4.207, 0.207, 4), horizontal(8.207, 0.207, 1)]


class TestTileCost:
    def test_sum_of_prices(self, row):
        assert tile_cost(row, PRICES) == pytest.approx(46.0)

    def test_no_tiles(self):
        assert tile_cost([], PRICES) == 0.0

    def test_missing_price_counts_zero(self, row):
        assert tile_cost(row, {4: 20}) == pytest.approx(40.0)

    def test_orientation_does_not_change_price(self):
        tiles = [horizontal(0, 0, 2), TilePlacement(x=5, y=0, width=1.26, height=2)]
        assert tile_cost(tiles, PRICES) == pytest.approx(24.0)


class TestQuantityTakeoff:
    def test_counts_include_unused_palette_lengths(self, row):
        assert count_tiles(row, [4, 2, 1]) == {4.0: 2, 2.0: 0, 1.0: 1}

    def test_counts_include_off_palette_lengths(self):
        assert count_tiles([horizontal(0, 0, 3)], [4]) == {4.0: 0, 3.0: 1}

    def test_takeoff_totals(self, row):
        takeoff = compute_quantities(
            row, PRICES, boundary_length_m=20.0, price_per_meter=1.5, palette=[4, 2, 1]
        )
        assert takeoff.tile_count == 3
        assert takeoff.tile_cost == pytest.approx(46.0)
        assert takeoff.tile_area_m2 == pytest.approx(9 * 1.26)
        assert takeoff.boundary_cost == pytest.approx(30.0)
        assert takeoff.grand_total == pytest.approx(76.0)

    def test_to_dict_uses_plain_length_keys(self, row):
        data = compute_quantities(row, PRICES, palette=[4, 2, 1, 0.5]).to_dict()
        assert data["tile_counts"] == {"4": 2, "2": 0, "1": 1, "0.5": 0}
        assert data["currency"] == "EUR"
        assert data["grand_total"] == 46.0

    def test_csv_export(self, row):
        csv_text = compute_quantities(row, PRICES).to_csv_string()
        assert "Tile Layout Quantity Takeoff" in csv_text
        assert "Grand Total,46.0,EUR" in csv_text

    def test_quote_layout_prices_boundary(self, row):
        catalog = TileCatalog(price_per_meter=2.0)
        takeoff = quote_layout(row, catalog)

        expected_length = 2 * (9 + 2 * 0.207) + 2 * (1.26 + 2 * 0.207)
        assert takeoff.boundary_length_m == pytest.approx(expected_length, abs=1e-4)
        assert takeoff.boundary_cost == pytest.approx(2.0 * expected_length, abs=1e-3)
        assert takeoff.tile_cost == pytest.approx(46.0)

    def test_quote_layout_price_override(self, row):
        takeoff = quote_layout(row, TileCatalog(), price_by_length={4: 10, 1: 1})
        assert takeoff.tile_cost == pytest.approx(21.0)


class TestGeoJSON:
    def test_layers(self, row):
        room = Room.rectangle(10, 6, margin=0.207)
        boundary = build_boundary(row, room.margin)
        geojson = layout_to_geojson(
            row,
            room=room,
            inner=room.inner_polygon(),
            boundary=boundary.polygon,
            include_guides=True,
        )

        kinds = [f["properties"]["kind"] for f in geojson["features"]]
        assert kinds.count("room") == 1
        assert kinds.count("margin_guide") == 4
        assert kinds.count("inner_room") == 1
        assert kinds.count("tile") == 3
        assert kinds.count("boundary") == 1

    def test_tile_properties(self, row):
        tiles = layout_to_geojson(row)["features"]
        assert [f["properties"]["index"] for f in tiles] == [0, 1, 2]
        assert tiles[2]["properties"]["length"] == 1
        assert tiles[0]["properties"]["orientation"] == "horizontal"
        assert tiles[0]["geometry"]["type"] == "Polygon"

    def test_filter_by_layer(self, row):
        room = Room.rectangle(10, 6)
        geojson = layout_to_geojson(row, room=room)
        only_tiles = filter_geojson_by_layer(geojson, ["tiles"])
        assert len(only_tiles["features"]) == 3
