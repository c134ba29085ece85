"""Tests for glue flap generation."""

import math

import pytest
from shapely.geometry import LineString, Polygon, box

from sheetnest.errors import DegenerateGeometryError
from sheetnest.geometry.flaps import flap_outline, generate_flaps


class TestGenerateFlaps:
    """Tests for generate_flaps."""

    @pytest.fixture
    def square(self):
        """Create a 10 x 10 square."""
        return box(0, 0, 10, 10)

    def test_one_flap_per_edge(self, square):
        """Test counts of generated elements."""
        result = generate_flaps(square, offset_distance=2.0)

        assert len(result.flaps) == 4
        assert len(result.edges) == 4
        assert len(result.offset_edges) == 4
        assert len(result.centers) == 4
        assert len(result.center_vectors) == 4
        assert len(result.connection_lines) == 8

    def test_flaps_point_outward(self, square):
        """Test that flaps lie outside the part."""
        result = generate_flaps(square, offset_distance=2.0)

        for flap in result.flaps:
            assert flap.area == pytest.approx(20)
            assert flap.intersection(square).area == pytest.approx(0, abs=1e-9)

    def test_clockwise_input_points_outward(self):
        """Test that ring orientation does not flip the flaps inward."""
        clockwise = Polygon([(0, 0), (0, 10), (10, 10), (10, 0)])
        result = generate_flaps(clockwise, offset_distance=2.0)

        for flap in result.flaps:
            assert flap.intersection(clockwise).area == pytest.approx(0, abs=1e-9)

    def test_center_vectors_have_offset_length(self, square):
        """Test vector length equals the offset distance."""
        result = generate_flaps(square, offset_distance=3.0)

        for vx, vy in result.center_vectors:
            assert math.hypot(vx, vy) == pytest.approx(3.0)

    def test_scaled_flaps_are_trapezoids(self, square):
        """Test that scaling shortens the outer edge."""
        result = generate_flaps(square, offset_distance=2.0, scale=0.5)

        for flap, (start, end) in zip(result.flaps, result.offset_edges):
            assert math.dist(start, end) == pytest.approx(5.0)
            assert flap.area == pytest.approx(15.0)

    def test_rejects_non_polygon(self):
        """Test that lines are rejected."""
        with pytest.raises(DegenerateGeometryError):
            generate_flaps(LineString([(0, 0), (1, 1)]))

    def test_rejects_empty(self):
        """Test that empty polygons are rejected."""
        with pytest.raises(DegenerateGeometryError):
            generate_flaps(Polygon())

    def test_to_dict(self, square):
        """Test serialization."""
        d = generate_flaps(square).to_dict()

        assert len(d["flaps"]) == 4
        assert "connection_lines" in d


class TestFlapHelpers:
    """Tests for flap helper functions."""

    def test_flap_outline_area(self):
        """Test union of part and flaps."""
        outline = flap_outline(box(0, 0, 10, 10), offset_distance=2.0)

        assert outline.geom_type == "Polygon"
        assert outline.area == pytest.approx(180)

    def test_edge_lines(self):
        """Test part edges and offset edges are interleaved."""
        result = generate_flaps(box(0, 0, 10, 10), offset_distance=1.0)
        lines = result.edge_lines()

        assert len(lines) == 8
        assert lines[0].length == pytest.approx(10)
