"""
Glue flap generation for flattened parts.

Each edge of a part outline gets a trapezoidal flap: the edge is offset
outward by a fixed distance, the offset edge is scaled about its own
midpoint, and the two edges are joined into a quadrilateral.

The ring is re-oriented counter-clockwise first, so flaps always point away
from the part whatever the winding of the input. Holes get no flaps.
"""

import math
from dataclasses import dataclass, field
from typing import List, Tuple

from shapely.geometry import LineString, Polygon
from shapely.geometry.polygon import orient
from shapely.ops import unary_union

from sheetnest.errors import DegenerateGeometryError
from sheetnest.utils import get_logger

logger = get_logger("geometry.flaps")

Point2D = Tuple[float, float]
Segment = Tuple[Point2D, Point2D]


@dataclass
class FlapResult:
    """Flaps generated for one polygon outline."""
    edges: List[Segment] = field(default_factory=list)
    offset_edges: List[Segment] = field(default_factory=list)
    centers: List[Point2D] = field(default_factory=list)
    center_vectors: List[Point2D] = field(default_factory=list)
    connection_lines: List[Segment] = field(default_factory=list)
    flaps: List[Polygon] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "edges": [list(map(list, e)) for e in self.edges],
            "offset_edges": [list(map(list, e)) for e in self.offset_edges],
            "centers": [list(c) for c in self.centers],
            "center_vectors": [list(v) for v in self.center_vectors],
            "connection_lines": [list(map(list, c)) for c in self.connection_lines],
            "flaps": [list(map(list, f.exterior.coords)) for f in self.flaps],
        }

    def edge_lines(self) -> List[LineString]:
        """Part edges and offset edges as shapely lines, interleaved per edge."""
        lines = []
        for edge, offset_edge in zip(self.edges, self.offset_edges):
            lines.append(LineString(edge))
            lines.append(LineString(offset_edge))
        return lines


def _midpoint(a: Point2D, b: Point2D) -> Point2D:
    return ((a[0] + b[0]) / 2.0, (a[1] + b[1]) / 2.0)


def generate_flaps(polygon: Polygon, offset_distance: float = 1.0,
                   scale: float = 1.0) -> FlapResult:
    """
    Build a flap on every edge of a polygon's exterior.

    Args:
        polygon: Planar part outline
        offset_distance: Flap depth, measured outward from the edge
        scale: Length of the flap's outer edge relative to the part edge

    Returns:
        FlapResult with edges, offset edges, centers, center vectors,
        connection lines and flap polygons, one entry per edge (two
        connection lines per edge)
    """
    if polygon is None or polygon.is_empty or polygon.geom_type != "Polygon":
        raise DegenerateGeometryError("Flaps need a non-empty polygon")

    # Counter-clockwise exterior: the outward normal of edge (dx, dy) is (dy, -dx)
    ring = list(orient(polygon, sign=1.0).exterior.coords)
    result = FlapResult()

    for start, end in zip(ring, ring[1:]):
        start = (start[0], start[1])
        end = (end[0], end[1])
        dx, dy = end[0] - start[0], end[1] - start[1]
        length = math.hypot(dx, dy)
        if length == 0:
            continue

        nx, ny = dy / length * offset_distance, -dx / length * offset_distance
        center = _midpoint(start, end)
        offset_center = (center[0] + nx, center[1] + ny)

        outer_start = (
            offset_center[0] + (start[0] + nx - offset_center[0]) * scale,
            offset_center[1] + (start[1] + ny - offset_center[1]) * scale,
        )
        outer_end = (
            offset_center[0] + (end[0] + nx - offset_center[0]) * scale,
            offset_center[1] + (end[1] + ny - offset_center[1]) * scale,
        )

        result.edges.append((start, end))
        result.offset_edges.append((outer_start, outer_end))
        result.centers.append(center)
        result.center_vectors.append((nx, ny))
        result.connection_lines.append((start, outer_start))
        result.connection_lines.append((end, outer_end))
        result.flaps.append(Polygon([start, end, outer_end, outer_start]))

    logger.debug(f"Generated {len(result.flaps)} flaps")
    return result


def flap_outline(polygon: Polygon, offset_distance: float = 1.0,
                 scale: float = 1.0):
    """Union of a polygon and all of its flaps, for nesting with flaps attached."""
    result = generate_flaps(polygon, offset_distance, scale)
    return unary_union([polygon, *result.flaps])
