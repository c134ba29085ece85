"""Geometry helpers: kernel contract, shape cleanup and glue flaps."""

from sheetnest.geometry.kernel import (
    KEY_PRECISION,
    GeometryKernel,
    Rectangle,
    ShapelyKernel,
    default_kernel,
)
from sheetnest.geometry.cleanup import CleanResult, clean_shape
from sheetnest.geometry.flaps import FlapResult, flap_outline, generate_flaps

__all__ = [
    "KEY_PRECISION",
    "GeometryKernel",
    "Rectangle",
    "ShapelyKernel",
    "default_kernel",
    "CleanResult",
    "clean_shape",
    "FlapResult",
    "flap_outline",
    "generate_flaps",
]
