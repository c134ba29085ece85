"""
Geometry kernel used by the nesting pipeline.

The optimizer and packer only need four capabilities from a geometry
library: a shape's axis-aligned bounding rectangle, rotation about a pivot,
translation, and the bounding rectangle's min corner. ``GeometryKernel``
names that contract; ``ShapelyKernel`` implements it for shapely geometries.
"""

import math
from dataclasses import dataclass
from typing import Any, Protocol, Tuple

from shapely import affinity
from shapely.geometry import box
from shapely.geometry.base import BaseGeometry

from sheetnest.errors import DegenerateGeometryError

# Decimal places kept when deriving a rectangle key from its corners
KEY_PRECISION = 6

RectKey = Tuple[float, float, float, float]


def _quantize(value: float, precision: int) -> float:
    # + 0.0 folds -0.0 into 0.0 so mirrored rounding yields the same key
    return round(value, precision) + 0.0


@dataclass(frozen=True)
class Rectangle:
    """An axis-aligned rectangle given by its min corner and size."""
    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_bounds(cls, min_x: float, min_y: float, max_x: float, max_y: float) -> "Rectangle":
        """Create from (min_x, min_y, max_x, max_y)."""
        return cls(x=min_x, y=min_y, width=max_x - min_x, height=max_y - min_y)

    @property
    def max_x(self) -> float:
        return self.x + self.width

    @property
    def max_y(self) -> float:
        return self.y + self.height

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.width / 2.0, self.y + self.height / 2.0)

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        return (self.x, self.y, self.max_x, self.max_y)

    def key(self, precision: int = KEY_PRECISION) -> RectKey:
        """
        Geometric identity of this rectangle.

        Corner coordinates rounded to ``precision`` decimal places. Two
        rectangles whose corners agree after rounding share a key.
        """
        return tuple(_quantize(v, precision) for v in self.bounds)

    def moved_to(self, x: float, y: float) -> "Rectangle":
        """Return a copy with its min corner at (x, y)."""
        return Rectangle(x=x, y=y, width=self.width, height=self.height)

    def to_polygon(self):
        """Return the rectangle as a shapely polygon."""
        return box(self.x, self.y, self.max_x, self.max_y)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
        }


class GeometryKernel(Protocol):
    """Capabilities the nesting pipeline needs from a geometry library."""

    def bounding_rectangle(self, shape: Any) -> Rectangle:
        ...

    def rotate(self, shape: Any, angle_degrees: float, pivot: Tuple[float, float]) -> Any:
        ...

    def translate(self, shape: Any, dx: float, dy: float) -> Any:
        ...

    def min_corner(self, shape: Any) -> Tuple[float, float]:
        ...


class ShapelyKernel:
    """Geometry kernel backed by shapely."""

    def bounding_rectangle(self, shape: BaseGeometry) -> Rectangle:
        """
        Axis-aligned bounding rectangle of a shape.

        Raises:
            DegenerateGeometryError: if the shape is missing, empty, or has
                non-finite bounds
        """
        if shape is None:
            raise DegenerateGeometryError("Shape is missing")
        if not isinstance(shape, BaseGeometry):
            raise DegenerateGeometryError(f"Unsupported shape type: {type(shape).__name__}")
        if shape.is_empty:
            raise DegenerateGeometryError("Shape is empty")

        bounds = shape.bounds
        if not all(math.isfinite(v) for v in bounds):
            raise DegenerateGeometryError(f"Shape has non-finite bounds: {bounds}")

        return Rectangle.from_bounds(*bounds)

    def rotate(self, shape: BaseGeometry, angle_degrees: float,
               pivot: Tuple[float, float]) -> BaseGeometry:
        """Rotate counter-clockwise about a pivot point."""
        return affinity.rotate(shape, angle_degrees, origin=pivot, use_radians=False)

    def translate(self, shape: BaseGeometry, dx: float, dy: float) -> BaseGeometry:
        """Move a shape by a vector."""
        return affinity.translate(shape, xoff=dx, yoff=dy)

    def min_corner(self, shape: BaseGeometry) -> Tuple[float, float]:
        """Min corner of the shape's bounding rectangle."""
        rect = self.bounding_rectangle(shape)
        return (rect.x, rect.y)


_default_kernel = ShapelyKernel()


def default_kernel() -> ShapelyKernel:
    """Shared shapely kernel instance. The kernel is stateless."""
    return _default_kernel
