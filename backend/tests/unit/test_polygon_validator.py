"""Unit tests for PolygonValidator."""

import json

import pytest

from landguard.config import Settings
from landguard.geometry.validator import PolygonValidator

from conftest import STEP, rect


@pytest.fixture
def validator(settings):
    return PolygonValidator(settings)


def polygon(*points) -> dict:
    return {"type": "Polygon", "coordinates": [[list(p) for p in points]]}


class TestValidPolygons:
    def test_square_is_valid(self, validator, square_geojson):
        result = validator.validate(square_geojson)
        assert result.is_valid
        assert result.errors == []
        assert result.warnings == []

    def test_metrics(self, validator, square_geojson):
        metrics = validator.validate(square_geojson).metrics
        assert metrics.num_vertices == 4
        assert metrics.is_convex is True
        assert metrics.area_m2 == pytest.approx(12392, rel=1e-3)
        assert metrics.perimeter_m == pytest.approx(445.3, rel=1e-3)
        assert metrics.centroid == pytest.approx((STEP / 2, STEP / 2))

    def test_json_string_input(self, validator, square_geojson):
        assert validator.validate(json.dumps(square_geojson)).is_valid

    def test_validation_is_repeatable(self, validator, square_geojson):
        assert validator.validate(square_geojson) == validator.validate(square_geojson)


class TestStructuralErrors:
    def test_unparseable_input(self, validator):
        result = validator.validate("not geojson")
        assert not result.is_valid
        assert result.errors[0].startswith("Invalid GeoJSON format")
        assert result.metrics is None

    def test_oversized_coordinate_is_an_error(self, validator):
        result = validator.validate(
            {"type": "Polygon", "coordinates": [[[0, 0], [10**400, 0], [1, 1], [0, 0]]]}
        )
        assert not result.is_valid
        assert "point[1]" in result.errors[0]

    def test_undecodable_bytes_are_an_error(self, validator):
        result = validator.validate(b'{"type": "Polygon", "coordinates": "\xff"}')
        assert not result.is_valid
        assert result.errors[0].startswith("Invalid GeoJSON format")

    def test_too_few_points(self, validator):
        result = validator.validate(polygon((0, 0), (STEP, 0), (0, 0)))
        assert not result.is_valid
        assert "at least 4 points" in result.errors[0]
        assert result.metrics is None

    def test_unclosed_ring(self, validator):
        result = validator.validate(polygon((0, 0), (STEP, 0), (STEP, STEP), (0, STEP)))
        assert not result.is_valid
        assert result.errors == ["Polygon ring is not closed (first and last points differ)"]
        assert result.metrics is not None

    def test_repeated_point(self, validator):
        result = validator.validate(
            polygon((0, 0), (STEP, 0), (STEP, 0), (STEP, STEP), (0, STEP), (0, 0))
        )
        assert not result.is_valid
        assert "point[2] repeats the previous point" in result.errors[0]

    def test_bowtie(self, validator, bowtie_geojson):
        result = validator.validate(bowtie_geojson)
        assert not result.is_valid
        assert result.errors[0] == "Polygon has self-intersections (invalid geometry)"

    def test_near_zero_area(self, validator):
        tiny = 1e-6
        result = validator.validate(rect(0.0, 0.0, tiny, tiny))
        assert not result.is_valid
        assert "zero or near zero" in result.errors[0]


class TestWarnings:
    def test_small_parcel(self, validator):
        # About 2.2 m x 2.2 m
        result = validator.validate(rect(0.0, 0.0, 0.00002, 0.00002))
        assert result.is_valid
        assert any("very small" in w for w in result.warnings)

    def test_large_parcel(self, validator):
        result = validator.validate(rect(0.0, 0.0, 0.2, 0.2))
        assert result.is_valid
        assert any("very large" in w for w in result.warnings)

    def test_elongated_parcel(self, validator):
        result = validator.validate(rect(0.0, 0.0, STEP, STEP / 100))
        assert result.is_valid
        assert any("unusual elongation" in w for w in result.warnings)

    def test_many_vertices(self):
        validator = PolygonValidator(Settings(_env_file=None, max_vertices=4))
        result = validator.validate(
            polygon((0, 0), (STEP / 2, 0), (STEP, 0), (STEP, STEP), (0, STEP), (0, 0))
        )
        assert result.is_valid
        assert any("many vertices" in w for w in result.warnings)

    def test_outside_service_region(self, square_geojson):
        validator = PolygonValidator(
            Settings(_env_file=None, service_region_bounds=(10.0, 10.0, 20.0, 20.0))
        )
        result = validator.validate(square_geojson)
        assert result.is_valid
        assert "Polygon centroid is outside the service region" in result.warnings

    def test_inside_service_region(self, square_geojson):
        validator = PolygonValidator(
            Settings(_env_file=None, service_region_bounds=(-1.0, -1.0, 1.0, 1.0))
        )
        assert validator.validate(square_geojson).warnings == []

    def test_parse_warnings_are_kept(self, validator, square_geojson):
        collection = {
            "type": "FeatureCollection",
            "features": [{"type": "Feature", "geometry": square_geojson}] * 2,
        }
        result = validator.validate(collection)
        assert result.is_valid
        assert any("only the first" in w for w in result.warnings)
