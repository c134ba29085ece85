"""
Laser cutting output for nested layouts.

Exports packed sheets to DXF and SVG for laser/CNC software.
"""

from .dxf_export import (
    DXFExporter,
    export_to_dxf,
    layout_to_dxf,
)
from .svg_export import (
    SVGExporter,
    export_to_svg,
    layout_to_svg,
)

__all__ = [
    "DXFExporter",
    "export_to_dxf",
    "layout_to_dxf",
    "SVGExporter",
    "export_to_svg",
    "layout_to_svg",
]
