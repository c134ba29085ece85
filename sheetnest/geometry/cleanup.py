"""
Shape cleanup before nesting.

Repairs invalid polygons, drops repeated vertices and simplifies edges
within a tolerance, reporting what was changed.
"""

from dataclasses import dataclass, field
from typing import List

import shapely
from shapely.geometry.base import BaseGeometry
from shapely.ops import unary_union
from shapely.validation import explain_validity, make_valid

from sheetnest.errors import DegenerateGeometryError
from sheetnest.utils import get_logger

logger = get_logger("geometry.cleanup")

POLYGONAL_TYPES = ("Polygon", "MultiPolygon")


@dataclass
class CleanResult:
    """A cleaned shape and the operations performed on it."""
    shape: BaseGeometry
    issues: List[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.issues)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "wkt": self.shape.wkt,
            "issues": list(self.issues),
        }


def _polygonal_part(geom: BaseGeometry) -> BaseGeometry:
    """Keep only the polygonal members of a (possibly mixed) geometry."""
    if geom.geom_type in POLYGONAL_TYPES:
        return geom
    parts = [g for g in getattr(geom, "geoms", []) if g.geom_type in POLYGONAL_TYPES]
    return unary_union(parts)


def clean_shape(shape: BaseGeometry, tolerance: float = 0.01) -> CleanResult:
    """
    Clean a flat part outline.

    Args:
        shape: Polygon or MultiPolygon
        tolerance: Distance below which vertices are merged and edge
            deviations are simplified away

    Returns:
        CleanResult with the cleaned shape and a list of issue strings

    Raises:
        DegenerateGeometryError: if the input or the cleaned result is empty
    """
    if shape is None or shape.is_empty:
        raise DegenerateGeometryError("Cannot clean an empty shape")

    issues = []
    cleaned = shape

    if not cleaned.is_valid:
        reason = explain_validity(cleaned)
        cleaned = _polygonal_part(make_valid(cleaned))
        issues.append(f"Repaired invalid geometry ({reason}).")

    count_before = shapely.get_num_coordinates(cleaned)
    cleaned = shapely.remove_repeated_points(cleaned, tolerance)
    count_after = shapely.get_num_coordinates(cleaned)
    if count_after < count_before:
        issues.append(f"Removed {count_before - count_after} repeated points.")

    simplified = cleaned.simplify(tolerance, preserve_topology=True)
    count_simplified = shapely.get_num_coordinates(simplified)
    if count_simplified < count_after:
        issues.append(
            f"Simplified edges. Reduced vertex count from {count_after} to {count_simplified}."
        )
        cleaned = simplified

    if cleaned.is_empty:
        raise DegenerateGeometryError("Shape collapsed to nothing during cleanup")

    if issues:
        logger.debug("; ".join(issues))

    return CleanResult(shape=cleaned, issues=issues)
