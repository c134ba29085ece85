"""
Shelf packing of rectangular footprints onto stock sheets.

Footprints are sorted largest-first and laid out left to right in rows;
a row that would run past the sheet width wraps downward, and a row that
would run past the sheet height starts a new sheet to the right of the
previous one. The scan state is a single immutable ``PackerState`` threaded
through ``ShelfPacker.step``, so packing is a fold over the sorted list.
"""

import warnings
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sheetnest.errors import InvalidInput, MissingRequiredInput, OversizedPartWarning
from sheetnest.geometry.kernel import KEY_PRECISION, GeometryKernel, Rectangle, RectKey, default_kernel
from sheetnest.nesting.cancellation import CancellationToken
from sheetnest.utils import get_logger

logger = get_logger("nesting.shelf_packer")

DEFAULT_SPACING = 5.0


@dataclass(frozen=True)
class Placement:
    """A footprint at its absolute position, with the moved shape if it has one."""
    rectangle: Rectangle
    sheet_index: int
    shape: Any = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "sheet_index": self.sheet_index,
            "rectangle": self.rectangle.to_dict(),
            "wkt": getattr(self.shape, "wkt", None),
        }


@dataclass(frozen=True)
class Sheet:
    """One stock sheet and the footprints placed on it."""
    index: int
    x: float
    width: float
    height: float
    placements: Tuple[Placement, ...] = ()

    @property
    def outline(self) -> Rectangle:
        return Rectangle(x=self.x, y=0.0, width=self.width, height=self.height)

    @property
    def utilization(self) -> float:
        """Percentage of the sheet covered by footprints."""
        used = sum(p.rectangle.area for p in self.placements)
        return min(100.0, used / (self.width * self.height) * 100)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "index": self.index,
            "outline": self.outline.to_dict(),
            "utilization": self.utilization,
            "placements": [p.to_dict() for p in self.placements],
        }


@dataclass(frozen=True)
class PackerState:
    """Scan state between two placement steps."""
    sheet_index: int = 0
    x_offset: float = 0.0
    y_offset: float = 0.0
    max_row_height: float = 0.0
    open_placements: Tuple[Placement, ...] = ()
    closed_sheets: Tuple[Tuple[Placement, ...], ...] = ()

    def close_sheet(self) -> "PackerState":
        """Close the open sheet and start an empty one."""
        return PackerState(
            sheet_index=self.sheet_index + 1,
            closed_sheets=self.closed_sheets + (self.open_placements,),
        )


@dataclass
class PackingResult:
    """Result of a packing run."""
    sheets: List[Sheet] = field(default_factory=list)
    placed_shapes: List[Any] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def placed_rectangles(self) -> List[Rectangle]:
        """All placed footprints, sheet by sheet, in placement order."""
        return [p.rectangle for sheet in self.sheets for p in sheet.placements]

    @property
    def sheet_outlines(self) -> List[Rectangle]:
        return [sheet.outline for sheet in self.sheets]

    @property
    def placements(self) -> List[Placement]:
        return [p for sheet in self.sheets for p in sheet.placements]

    @property
    def sheet_count(self) -> int:
        return len(self.sheets)

    @property
    def utilization(self) -> float:
        """Average utilization across all sheets."""
        if not self.sheets:
            return 0.0
        return sum(s.utilization for s in self.sheets) / len(self.sheets)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "sheet_count": self.sheet_count,
            "utilization": self.utilization,
            "sheets": [s.to_dict() for s in self.sheets],
            "warnings": list(self.warnings),
        }


class ShelfPacker:
    """
    Greedy row-by-row packer across fixed-size sheets.

    Usage:
        packer = ShelfPacker(sheet_width=1200, sheet_height=600, spacing=5)
        result = packer.pack(rectangles, shapes)
        print(result.sheet_count)
    """

    def __init__(
        self,
        sheet_width: float,
        sheet_height: float,
        spacing: Optional[float] = DEFAULT_SPACING,
        kernel: Optional[GeometryKernel] = None,
        key_precision: int = KEY_PRECISION,
    ):
        """
        Initialize shelf packer.

        Args:
            sheet_width: Sheet width, required
            sheet_height: Sheet height, required
            spacing: Gap between footprints, rows and sheets; None means default
            kernel: Geometry kernel used for shapes, shapely by default
            key_precision: Decimal places used when matching rectangle keys
        """
        if sheet_width is None:
            raise MissingRequiredInput("sheet_width")
        if sheet_height is None:
            raise MissingRequiredInput("sheet_height")
        if spacing is None:
            spacing = DEFAULT_SPACING
        if sheet_width <= 0 or sheet_height <= 0:
            raise InvalidInput(
                f"Sheet size must be positive, got {sheet_width} x {sheet_height}"
            )
        if spacing < 0:
            raise InvalidInput(f"Spacing must not be negative, got {spacing}")

        self.sheet_width = float(sheet_width)
        self.sheet_height = float(sheet_height)
        self.spacing = float(spacing)
        self.kernel = kernel or default_kernel()
        self.key_precision = key_precision

    def sheet_origin(self, index: int) -> float:
        """X coordinate of a sheet's left edge. Sheets sit in a single row."""
        return index * (self.sheet_width + self.spacing)

    def working_set(
        self,
        rectangles: Iterable[Rectangle],
        shapes: Optional[Iterable[Any]] = None,
    ) -> Tuple[List[Rectangle], Dict[RectKey, Any]]:
        """
        Merge shape footprints and bare rectangles into the list to pack.

        Shapes with the same key collapse into one entry that keeps the
        position of the first and the shape of the last. Rectangles whose
        key matches a shape are not added again.

        Returns:
            (unsorted working list, key -> shape association)
        """
        association: Dict[RectKey, Any] = {}
        shape_rects: Dict[RectKey, Rectangle] = {}

        for shape in shapes or []:
            rect = self.kernel.bounding_rectangle(shape)
            key = rect.key(self.key_precision)
            if key in association:
                logger.debug(f"Shape key {key} already associated; keeping the later shape")
            association[key] = shape
            shape_rects[key] = rect

        items = list(shape_rects.values())
        for rect in rectangles or []:
            if rect.key(self.key_precision) not in association:
                items.append(rect)

        return items, association

    def sort_by_area(self, rectangles: List[Rectangle]) -> List[Rectangle]:
        """Largest area first; equal areas keep their input order."""
        return sorted(rectangles, key=lambda r: r.area, reverse=True)

    def step(self, state: PackerState, rect: Rectangle,
             shape: Any = None) -> Tuple[PackerState, Placement]:
        """
        Place one footprint.

        A sheet wrap is not re-checked: a footprint taller or wider than
        the sheet is still placed on the new sheet and overflows it.
        """
        width, height = rect.width, rect.height

        if state.x_offset + width > self.sheet_width:
            state = replace(
                state,
                x_offset=0.0,
                y_offset=state.y_offset + state.max_row_height + self.spacing,
                max_row_height=0.0,
            )

        if state.y_offset + height > self.sheet_height:
            state = state.close_sheet()

        x = self.sheet_origin(state.sheet_index) + state.x_offset
        y = state.y_offset

        moved_shape = None
        if shape is not None:
            min_x, min_y = self.kernel.min_corner(shape)
            moved_shape = self.kernel.translate(shape, x - min_x, y - min_y)

        placement = Placement(
            rectangle=rect.moved_to(x, y),
            sheet_index=state.sheet_index,
            shape=moved_shape,
        )

        state = replace(
            state,
            x_offset=state.x_offset + width + self.spacing,
            max_row_height=max(state.max_row_height, height),
            open_placements=state.open_placements + (placement,),
        )
        return state, placement

    def pack(
        self,
        rectangles: Iterable[Rectangle] = (),
        shapes: Optional[Iterable[Any]] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> PackingResult:
        """
        Pack footprints onto sheets.

        Args:
            rectangles: Bare footprints with no geometry attached
            shapes: Shapes whose bounding rectangles are packed and which
                are moved along with them
            cancel_token: Checked once per footprint

        Returns:
            PackingResult with sheets, placed shapes and oversize warnings
        """
        items, association = self.working_set(rectangles, shapes)
        items = self.sort_by_area(items)

        state = PackerState()
        placed_shapes = []
        oversize = []

        for rect in items:
            if cancel_token is not None:
                cancel_token.raise_if_cancelled("Packing")

            if rect.width > self.sheet_width or rect.height > self.sheet_height:
                message = (
                    f"Footprint {rect.width:g} x {rect.height:g} exceeds sheet "
                    f"{self.sheet_width:g} x {self.sheet_height:g}; it will overflow"
                )
                warnings.warn(message, OversizedPartWarning, stacklevel=2)
                logger.warning(message)
                oversize.append(message)

            key = rect.key(self.key_precision)
            state, placement = self.step(state, rect, association.get(key))
            if placement.shape is not None:
                placed_shapes.append(placement.shape)

        if state.open_placements:
            state = state.close_sheet()

        sheets = [
            Sheet(
                index=i,
                x=self.sheet_origin(i),
                width=self.sheet_width,
                height=self.sheet_height,
                placements=placements,
            )
            for i, placements in enumerate(state.closed_sheets)
        ]

        logger.info(f"Packed {len(items)} footprints onto {len(sheets)} sheet(s)")
        return PackingResult(sheets=sheets, placed_shapes=placed_shapes, warnings=oversize)
