"""Loading flat parts from JSON files."""

import json
from pathlib import Path
from typing import Any, List, Union

from shapely import wkt
from shapely.errors import ShapelyError
from shapely.geometry import Polygon

from sheetnest.errors import InvalidInput
from sheetnest.nesting.rotation_optimizer import Part
from sheetnest.utils import get_logger

logger = get_logger("io")


def part_from_dict(data: dict, index: int = 0) -> Part:
    """
    Build a part from one JSON entry.

    Entries carry an optional ``name`` and either ``wkt`` or ``points``
    (exterior ring) with optional ``holes`` (list of rings).
    """
    name = data.get("name") or f"part_{index + 1}"

    if "wkt" not in data and "points" not in data:
        raise InvalidInput(f"Part {name} has neither 'wkt' nor 'points'")

    try:
        if "wkt" in data:
            shape = wkt.loads(data["wkt"])
        else:
            shape = Polygon(data["points"], holes=data.get("holes") or None)
    except (ShapelyError, ValueError, TypeError) as e:
        raise InvalidInput(f"Part {name} has invalid geometry: {e}") from e

    return Part(shape=shape, name=name)


def parts_from_data(data: Any) -> List[Part]:
    """Build parts from a decoded JSON document (a list, or an object with 'parts')."""
    if isinstance(data, dict):
        data = data.get("parts")
    if not isinstance(data, list):
        raise InvalidInput("Expected a list of parts or an object with a 'parts' list")

    parts = []
    for i, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise InvalidInput(f"Part entry {i} is not an object")
        parts.append(part_from_dict(entry, i))
    return parts


def load_parts(path: Union[str, Path]) -> List[Part]:
    """
    Load parts from a JSON file.

    Args:
        path: JSON file path

    Returns:
        Named parts in file order
    """
    path = Path(path)
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise InvalidInput(f"{path.name} is not valid JSON: {e}") from e

    parts = parts_from_data(data)
    logger.debug(f"Loaded {len(parts)} parts from {path}")
    return parts
