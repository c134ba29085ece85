"""sheetnest - nest flat parts onto rectangular stock sheets."""

__version__ = "0.1.0"

from sheetnest.errors import (
    Cancelled,
    DegenerateGeometryError,
    InvalidInput,
    MissingRequiredInput,
    NestingError,
    OversizedPartWarning,
)
from sheetnest.geometry import Rectangle, ShapelyKernel
from sheetnest.nesting import (
    CancellationToken,
    DegeneratePolicy,
    NestingConfig,
    NestingResult,
    OrientedFootprint,
    PackingResult,
    Part,
    RotationOptimizer,
    ShelfPacker,
    nest_shapes,
    optimize_rotation,
    pack_sheets,
)

__all__ = [
    "__version__",
    "Cancelled",
    "DegenerateGeometryError",
    "InvalidInput",
    "MissingRequiredInput",
    "NestingError",
    "OversizedPartWarning",
    "Rectangle",
    "ShapelyKernel",
    "CancellationToken",
    "DegeneratePolicy",
    "NestingConfig",
    "NestingResult",
    "OrientedFootprint",
    "PackingResult",
    "Part",
    "RotationOptimizer",
    "ShelfPacker",
    "nest_shapes",
    "optimize_rotation",
    "pack_sheets",
]
