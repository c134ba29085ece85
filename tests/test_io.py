"""Tests for loading parts from JSON."""

import json

import pytest

from sheetnest.errors import InvalidInput
from sheetnest.io import load_parts, part_from_dict, parts_from_data


class TestPartFromDict:
    """Tests for part_from_dict."""

    def test_points(self):
        """Test exterior ring from points."""
        part = part_from_dict({"name": "tri", "points": [[0, 0], [4, 0], [0, 3]]})

        assert part.name == "tri"
        assert part.shape.area == pytest.approx(6)
        assert part.pivot is None

    def test_points_with_holes(self):
        """Test holes are cut out."""
        part = part_from_dict({
            "points": [[0, 0], [10, 0], [10, 10], [0, 10]],
            "holes": [[[2, 2], [4, 2], [4, 4], [2, 4]]],
        })

        assert part.shape.area == pytest.approx(96)

    def test_wkt(self):
        """Test WKT input."""
        part = part_from_dict({"wkt": "POLYGON ((0 0, 2 0, 2 2, 0 2, 0 0))"}, index=4)

        assert part.name == "part_5"
        assert part.shape.area == pytest.approx(4)

    def test_missing_geometry(self):
        """Test entries without geometry are rejected."""
        with pytest.raises(InvalidInput):
            part_from_dict({"name": "nothing"})

    def test_bad_wkt(self):
        """Test unparsable WKT is rejected."""
        with pytest.raises(InvalidInput):
            part_from_dict({"wkt": "POLYGON ((nonsense"})


class TestLoadParts:
    """Tests for load_parts."""

    def test_list_document(self, tmp_path):
        """Test a plain list of parts."""
        path = tmp_path / "parts.json"
        path.write_text(json.dumps([
            {"name": "a", "points": [[0, 0], [1, 0], [1, 1]]},
            {"points": [[0, 0], [2, 0], [2, 2]]},
        ]))
        parts = load_parts(path)

        assert [p.name for p in parts] == ["a", "part_2"]

    def test_object_document(self):
        """Test an object with a parts list."""
        parts = parts_from_data({"parts": [{"points": [[0, 0], [1, 0], [1, 1]]}]})

        assert len(parts) == 1

    def test_wrong_document(self):
        """Test documents without a parts list."""
        with pytest.raises(InvalidInput):
            parts_from_data({"shapes": []})
        with pytest.raises(InvalidInput):
            parts_from_data([1, 2])

    def test_invalid_json(self, tmp_path):
        """Test malformed JSON files."""
        path = tmp_path / "broken.json"
        path.write_text("[{")

        with pytest.raises(InvalidInput):
            load_parts(path)
