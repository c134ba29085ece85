"""Nesting module: rotation search and shelf packing of flat parts onto sheets.

Provides the two pipeline stages and a convenience function running both.
"""

from sheetnest.nesting.cancellation import CancellationToken
from sheetnest.nesting.rotation_optimizer import (
    DegeneratePolicy,
    OrientedFootprint,
    Part,
    RotationOptimizer,
)
from sheetnest.nesting.shelf_packer import (
    PackerState,
    PackingResult,
    Placement,
    Sheet,
    ShelfPacker,
)
from sheetnest.nesting.pipeline import (
    NestingConfig,
    NestingResult,
    nest_shapes,
    optimize_rotation,
    pack_sheets,
)

__all__ = [
    "CancellationToken",
    "DegeneratePolicy",
    "OrientedFootprint",
    "Part",
    "RotationOptimizer",
    "PackerState",
    "PackingResult",
    "Placement",
    "Sheet",
    "ShelfPacker",
    "NestingConfig",
    "NestingResult",
    "nest_shapes",
    "optimize_rotation",
    "pack_sheets",
]
