"""Tests for shelf packing."""

import itertools

import pytest
from shapely.geometry import Polygon, box

from sheetnest.errors import Cancelled, InvalidInput, MissingRequiredInput, OversizedPartWarning
from sheetnest.geometry.kernel import Rectangle
from sheetnest.nesting.cancellation import CancellationToken
from sheetnest.nesting.shelf_packer import (
    PackerState,
    PackingResult,
    Placement,
    Sheet,
    ShelfPacker,
)


def rect(width, height, x=0.0, y=0.0):
    return Rectangle(x=x, y=y, width=width, height=height)


class TestShelfPackerInit:
    """Tests for packer construction."""

    def test_missing_width(self):
        """Test a missing sheet width."""
        with pytest.raises(MissingRequiredInput) as excinfo:
            ShelfPacker(sheet_width=None, sheet_height=100)

        assert excinfo.value.name == "sheet_width"

    def test_missing_height(self):
        """Test a missing sheet height."""
        with pytest.raises(MissingRequiredInput):
            ShelfPacker(sheet_width=100, sheet_height=None)

    def test_non_positive_size(self):
        """Test zero sheet size is rejected."""
        with pytest.raises(InvalidInput):
            ShelfPacker(sheet_width=0, sheet_height=100)

    def test_negative_spacing(self):
        """Test negative spacing is rejected."""
        with pytest.raises(InvalidInput):
            ShelfPacker(sheet_width=100, sheet_height=100, spacing=-1)

    def test_default_spacing(self):
        """Test spacing falls back to 5."""
        assert ShelfPacker(100, 100).spacing == 5.0
        assert ShelfPacker(100, 100, spacing=None).spacing == 5.0

    def test_sheet_origin(self):
        """Test sheets are laid out in one row."""
        packer = ShelfPacker(100, 50, spacing=10)

        assert packer.sheet_origin(0) == 0
        assert packer.sheet_origin(1) == 110
        assert packer.sheet_origin(3) == 330


class TestScenarios:
    """Reference layouts."""

    def test_single_rectangle(self):
        """Test one 10 x 5 rectangle on a 100 x 100 sheet."""
        result = ShelfPacker(100, 100, spacing=5).pack([rect(10, 5)])

        assert result.placed_rectangles == [rect(10, 5, 0, 0)]
        assert result.sheet_outlines == [Rectangle(0, 0, 100, 100)]
        assert result.placed_shapes == []

    def test_two_rectangles_share_a_row(self):
        """Test larger area goes first and the second fits exactly."""
        packer = ShelfPacker(20, 30, spacing=2)
        result = packer.pack([rect(10, 5), rect(8, 8)])

        placed = result.placed_rectangles
        assert (placed[0].width, placed[0].height) == (8, 8)
        assert (placed[0].x, placed[0].y) == (0, 0)
        assert (placed[1].width, placed[1].height) == (10, 5)
        assert (placed[1].x, placed[1].y) == (10, 0)
        assert result.sheet_count == 1

    def test_two_rectangles_row_height(self):
        """Test the row height after both placements."""
        packer = ShelfPacker(20, 30, spacing=2)
        state = PackerState()
        state, _ = packer.step(state, rect(8, 8))
        state, _ = packer.step(state, rect(10, 5))

        assert state.max_row_height == 8
        assert state.x_offset == 22

    def test_three_large_squares(self):
        """Test each 60 x 60 square lands on its own sheet."""
        result = ShelfPacker(100, 100, spacing=0).pack([rect(60, 60)] * 3)

        assert result.sheet_count == 3
        assert [(r.x, r.y) for r in result.placed_rectangles] == [(0, 0), (100, 0), (200, 0)]
        assert [o.x for o in result.sheet_outlines] == [0, 100, 200]
        assert [len(s.placements) for s in result.sheets] == [1, 1, 1]


class TestWorkingSet:
    """Tests for association and deduplication."""

    @pytest.fixture
    def packer(self):
        """Create a packer."""
        return ShelfPacker(100, 100, spacing=1)

    def test_same_key_later_shape_wins(self, packer):
        """Test two shapes with the same bounds collapse to the later one."""
        square = box(0, 0, 10, 10)
        diamond = Polygon([(5, 0), (10, 5), (5, 10), (0, 5)])

        result = packer.pack([], [square, diamond])

        assert len(result.placed_rectangles) == 1
        assert len(result.placed_shapes) == 1
        assert result.placed_shapes[0].area == pytest.approx(50)

    def test_rectangle_matching_shape_not_duplicated(self, packer):
        """Test a bare rectangle with a shape's key is not packed twice."""
        shape = box(3, 4, 13, 9)
        result = packer.pack([Rectangle(3, 4, 10, 5)], [shape])

        assert len(result.placed_rectangles) == 1
        assert len(result.placed_shapes) == 1

    def test_working_set_order(self, packer):
        """Test shapes come first, then unmatched rectangles."""
        shapes = [box(0, 0, 2, 2), box(10, 0, 13, 3)]
        items, association = packer.working_set([rect(5, 5, 50, 50), rect(2, 2)], shapes)

        assert items == [rect(2, 2), rect(3, 3, 10, 0), rect(5, 5, 50, 50)]
        assert len(association) == 2

    def test_key_tolerance(self, packer):
        """Test float noise below the key precision still matches."""
        shape = box(0.1 + 0.2, 0, 10.3, 5)
        result = packer.pack([Rectangle(0.3, 0, 10, 5)], [shape])

        assert len(result.placed_rectangles) == 1

    def test_bare_duplicates_are_kept(self, packer):
        """Test identical rectangles without shapes are separate parts."""
        result = packer.pack([rect(10, 10), rect(10, 10)])

        assert len(result.placed_rectangles) == 2

    def test_placed_shapes_skip_bare_rectangles(self, packer):
        """Test placed shapes only include associated footprints."""
        result = packer.pack([rect(30, 30, 200, 200)], [box(0, 0, 10, 10)])

        assert len(result.placed_rectangles) == 2
        assert len(result.placed_shapes) == 1


class TestPacking:
    """Tests for the packing loop."""

    def test_stable_order_for_equal_areas(self):
        """Test equal areas keep their input order."""
        packer = ShelfPacker(100, 100, spacing=1)
        result = packer.pack([rect(10, 4), rect(4, 10), rect(8, 5)])

        assert [(r.width, r.height) for r in result.placed_rectangles] == [(10, 4), (4, 10), (8, 5)]
        assert [r.x for r in result.placed_rectangles] == [0, 11, 16]

    def test_row_wrap_adds_spacing(self):
        """Test the next row starts below the tallest footprint plus spacing."""
        result = ShelfPacker(20, 100, spacing=2).pack([rect(15, 5), rect(15, 4)])

        second = result.placed_rectangles[1]
        assert (second.x, second.y) == (0, 7)

    def test_shape_moved_with_its_rectangle(self):
        """Test a placed shape sits at its rectangle's position."""
        result = ShelfPacker(100, 100).pack([], [box(30, 40, 40, 50)])

        assert result.placed_shapes[0].bounds == (0, 0, 10, 10)
        assert result.placements[0].shape is result.placed_shapes[0]

    def test_shapes_on_later_sheets(self):
        """Test shapes on a second sheet are offset by the sheet origin."""
        shapes = [box(0, 0, 60, 60), box(0, 0, 60, 61)]
        result = ShelfPacker(100, 100, spacing=5).pack([], shapes)

        assert result.sheet_count == 2
        assert result.placed_shapes[0].bounds == (0, 0, 60, 61)
        assert result.placed_shapes[1].bounds == (105, 0, 165, 60)

    def test_no_overlap_within_sheet(self):
        """Test placements that fit the sheet never overlap."""
        sizes = [(30, 20), (25, 25), (40, 10), (10, 40), (35, 15), (20, 20), (15, 30), (45, 12), (22, 18)]
        result = ShelfPacker(80, 60, spacing=2).pack([rect(w, h) for w, h in sizes * 2])

        assert len(result.placed_rectangles) == len(sizes) * 2
        for sheet in result.sheets:
            outline = sheet.outline.to_polygon()
            polys = [p.rectangle.to_polygon() for p in sheet.placements]
            for poly in polys:
                assert outline.contains(poly)
            for a, b in itertools.combinations(polys, 2):
                assert a.intersection(b).area == 0

    def test_oversized_warns_and_overflows(self):
        """Test a too-wide footprint is still placed."""
        packer = ShelfPacker(100, 100)

        with pytest.warns(OversizedPartWarning):
            result = packer.pack([rect(150, 10)])

        assert len(result.warnings) == 1
        assert result.placed_rectangles[0].max_x == 150

    def test_oversized_first_part_leaves_empty_sheet(self):
        """Test a too-tall first footprint wraps past an empty sheet."""
        packer = ShelfPacker(100, 100, spacing=0)

        with pytest.warns(OversizedPartWarning):
            result = packer.pack([rect(10, 150)])

        assert result.sheet_count == 2
        assert result.sheets[0].placements == ()
        assert result.placements[0].sheet_index == 1
        assert result.placed_rectangles[0].x == 100

    def test_empty_input(self):
        """Test nothing to pack gives no sheets."""
        result = ShelfPacker(100, 100).pack([])

        assert result.sheet_count == 0
        assert result.placed_rectangles == []
        assert result.sheet_outlines == []

    def test_deterministic(self):
        """Test repeated runs give identical output."""
        packer = ShelfPacker(50, 50, spacing=1)
        rects = [rect(w, h) for w, h in [(10, 20), (20, 10), (30, 5), (5, 30), (25, 25)]]

        assert packer.pack(rects).to_dict() == packer.pack(rects).to_dict()

    def test_cancelled(self):
        """Test cancellation discards the layout."""
        token = CancellationToken()
        token.cancel()

        with pytest.raises(Cancelled):
            ShelfPacker(100, 100).pack([rect(1, 1)], cancel_token=token)


class TestPackerState:
    """Tests for the immutable scan state."""

    def test_step_returns_new_state(self):
        """Test step does not mutate its input."""
        packer = ShelfPacker(100, 100, spacing=1)
        start = PackerState()
        state, placement = packer.step(start, rect(10, 10))

        assert start == PackerState()
        assert state.x_offset == 11
        assert state.open_placements == (placement,)

    def test_close_sheet(self):
        """Test closing moves open placements to the closed list."""
        placement = Placement(rectangle=rect(1, 1), sheet_index=0)
        state = PackerState(x_offset=5, y_offset=5, max_row_height=3, open_placements=(placement,))
        closed = state.close_sheet()

        assert closed.sheet_index == 1
        assert closed.x_offset == 0 and closed.y_offset == 0 and closed.max_row_height == 0
        assert closed.closed_sheets == ((placement,),)
        assert closed.open_placements == ()


class TestResults:
    """Tests for Sheet and PackingResult."""

    def test_sheet_utilization(self):
        """Test utilization percentage."""
        placement = Placement(rectangle=rect(50, 50), sheet_index=0)
        sheet = Sheet(index=0, x=0, width=100, height=100, placements=(placement,))

        assert sheet.utilization == 25.0
        assert sheet.outline == Rectangle(0, 0, 100, 100)

    def test_result_to_dict(self):
        """Test serialization."""
        result = ShelfPacker(100, 100).pack([rect(10, 10)])
        d = result.to_dict()

        assert d["sheet_count"] == 1
        assert len(d["sheets"][0]["placements"]) == 1
        assert d["warnings"] == []

    def test_empty_result_utilization(self):
        """Test utilization of an empty result."""
        assert PackingResult().utilization == 0.0
