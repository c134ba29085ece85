"""
DXF Export for nested sheet layouts.

Generates DXF (AutoCAD Drawing Exchange Format) files from a packing result.
DXF is widely supported by laser cutting software and CAD programs.
"""

from pathlib import Path
from typing import Any, Iterable, List, Tuple, Union

from sheetnest.geometry.kernel import Rectangle
from sheetnest.nesting.shelf_packer import PackingResult

Point = Tuple[float, float]

# Layer name and ACI (AutoCAD Color Index) color per layout element
DXF_LAYERS = {
    'sheet': ('SHEET', 7),   # White
    'parts': ('PARTS', 1),   # Red - cut
    'boxes': ('BOXES', 3),   # Green - reference only
}


def shape_rings(shape: Any) -> List[Tuple[List[Point], bool]]:
    """
    Flatten a shapely geometry into (points, is_closed) rings.

    Polygons contribute their exterior and every hole; lines stay open.
    """
    if shape is None or shape.is_empty:
        return []

    geom_type = shape.geom_type
    if geom_type == 'Polygon':
        rings = [shape.exterior] + list(shape.interiors)
        return [([(x, y) for x, y, *_ in ring.coords][:-1], True) for ring in rings]
    if geom_type in ('LineString', 'LinearRing'):
        points = [(x, y) for x, y, *_ in shape.coords]
        return [(points, geom_type == 'LinearRing')]
    if hasattr(shape, 'geoms'):
        rings = []
        for part in shape.geoms:
            rings.extend(shape_rings(part))
        return rings
    return []


def rectangle_points(rect: Rectangle) -> List[Point]:
    """Corners of a rectangle, counter-clockwise from the min corner."""
    return [
        (rect.x, rect.y),
        (rect.max_x, rect.y),
        (rect.max_x, rect.max_y),
        (rect.x, rect.max_y),
    ]


class DXFExporter:
    """
    Exports a packed layout to DXF format for laser cutting.

    Creates DXF files compatible with:
    - AutoCAD
    - LibreCAD
    - Lightburn
    - Most CNC/laser software

    Usage:
        exporter = DXFExporter()
        dxf_content = exporter.layout_to_dxf(result)
        exporter.save(result, 'layout.dxf')
    """

    def __init__(self, precision: int = 6, include_boxes: bool = False):
        """
        Initialize DXF exporter.

        Args:
            precision: Decimal precision for coordinates
            include_boxes: Also draw the placed bounding rectangles
        """
        self.precision = precision
        self.include_boxes = include_boxes

    def layout_to_dxf(self, result: PackingResult) -> str:
        """
        Convert a packing result to a DXF string.

        Args:
            result: Packed layout

        Returns:
            DXF content as string
        """
        layers = [DXF_LAYERS['sheet'], DXF_LAYERS['parts']]
        if self.include_boxes:
            layers.append(DXF_LAYERS['boxes'])

        lines = []
        lines.extend(self._dxf_header())
        lines.extend(self._dxf_tables(layers))

        lines.extend(['0', 'SECTION', '2', 'ENTITIES'])

        sheet_layer = DXF_LAYERS['sheet'][0]
        for outline in result.sheet_outlines:
            lines.extend(self._polyline(rectangle_points(outline), True, sheet_layer))

        parts_layer = DXF_LAYERS['parts'][0]
        for shape in result.placed_shapes:
            for points, is_closed in shape_rings(shape):
                if len(points) >= 2:
                    lines.extend(self._polyline(points, is_closed, parts_layer))

        if self.include_boxes:
            boxes_layer = DXF_LAYERS['boxes'][0]
            for rect in result.placed_rectangles:
                lines.extend(self._polyline(rectangle_points(rect), True, boxes_layer))

        lines.extend(['0', 'ENDSEC', '0', 'EOF'])

        return '\n'.join(lines)

    def save(self, result: PackingResult, filepath: Union[str, Path]) -> Path:
        """
        Save a packed layout to a DXF file.

        Args:
            result: Packed layout
            filepath: Output file path

        Returns:
            The written path
        """
        dxf_content = self.layout_to_dxf(result)

        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        with open(filepath, 'w') as f:
            f.write(dxf_content)
        return filepath

    def _dxf_header(self) -> List[str]:
        """Generate DXF header section."""
        return [
            '0', 'SECTION',
            '2', 'HEADER',
            '9', '$ACADVER',
            '1', 'AC1014',  # AutoCAD R14 format (widely compatible)
            '9', '$INSUNITS',
            '70', '4',  # Millimeters
            '9', '$MEASUREMENT',
            '70', '1',  # Metric
            '0', 'ENDSEC',
        ]

    def _dxf_tables(self, layers: Iterable[Tuple[str, int]]) -> List[str]:
        """Generate DXF tables section with layers."""
        layers = list(layers)
        lines = [
            '0', 'SECTION',
            '2', 'TABLES',
            '0', 'TABLE',
            '2', 'LAYER',
            '70', str(len(layers)),
        ]

        for layer_name, color in layers:
            lines.extend([
                '0', 'LAYER',
                '2', layer_name,
                '70', '0',  # Layer state (0 = on)
                '62', str(color),
                '6', 'CONTINUOUS',
            ])

        lines.extend(['0', 'ENDTAB', '0', 'ENDSEC'])
        return lines

    def _polyline(self, points: List[Point], is_closed: bool, layer: str) -> List[str]:
        """Build an LWPOLYLINE entity."""
        lines = [
            '0', 'LWPOLYLINE',
            '8', layer,
            '90', str(len(points)),
            '70', '1' if is_closed else '0',
        ]
        for x, y in points:
            lines.extend([
                '10', f'{x:.{self.precision}f}',
                '20', f'{y:.{self.precision}f}',
            ])
        return lines


def export_to_dxf(result: PackingResult, filepath: Union[str, Path],
                  include_boxes: bool = False) -> Path:
    """Convenience function to export a layout to a DXF file."""
    return DXFExporter(include_boxes=include_boxes).save(result, filepath)


def layout_to_dxf(result: PackingResult, include_boxes: bool = False) -> str:
    """Convenience function to convert a layout to a DXF string."""
    return DXFExporter(include_boxes=include_boxes).layout_to_dxf(result)
