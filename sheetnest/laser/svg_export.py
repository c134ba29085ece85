"""
SVG Export for nested sheet layouts.

Writes one SVG with a group per layer: sheet outlines, placed parts and,
optionally, the placed bounding rectangles. Y is flipped so the layout
reads the same way as in CAD.
"""

from pathlib import Path
from typing import List, Tuple, Union

from sheetnest.laser.dxf_export import rectangle_points, shape_rings
from sheetnest.nesting.shelf_packer import PackingResult

SVG_STYLES = {
    'sheet': 'fill:none;stroke:#000000;stroke-width:0.5',
    'parts': 'fill:none;stroke:#ff0000;stroke-width:0.2',
    'boxes': 'fill:none;stroke:#00aa00;stroke-width:0.1;stroke-dasharray:2,2',
}


class SVGExporter:
    """
    Exports a packed layout to SVG.

    Usage:
        exporter = SVGExporter()
        svg = exporter.layout_to_svg(result)
        exporter.save(result, 'layout.svg')
    """

    def __init__(self, precision: int = 3, margin: float = 10.0, include_boxes: bool = False):
        self.precision = precision
        self.margin = margin
        self.include_boxes = include_boxes

    def layout_to_svg(self, result: PackingResult) -> str:
        """Convert a packing result to an SVG document string."""
        min_x, min_y, max_x, max_y = self._extent(result)
        width = max_x - min_x + 2 * self.margin
        height = max_y - min_y + 2 * self.margin
        # Flip Y around the layout extent
        origin = (min_x - self.margin, max_y + self.margin)

        lines = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            f'<svg xmlns="http://www.w3.org/2000/svg" '
            f'width="{self._fmt(width)}mm" height="{self._fmt(height)}mm" '
            f'viewBox="0 0 {self._fmt(width)} {self._fmt(height)}">',
        ]

        lines.append(f'<g id="sheet" style="{SVG_STYLES["sheet"]}">')
        for outline in result.sheet_outlines:
            lines.append(self._path(rectangle_points(outline), True, origin))
        lines.append('</g>')

        lines.append(f'<g id="parts" style="{SVG_STYLES["parts"]}">')
        for shape in result.placed_shapes:
            rings = shape_rings(shape)
            if rings:
                lines.append(self._path_group(rings, origin))
        lines.append('</g>')

        if self.include_boxes:
            lines.append(f'<g id="boxes" style="{SVG_STYLES["boxes"]}">')
            for rect in result.placed_rectangles:
                lines.append(self._path(rectangle_points(rect), True, origin))
            lines.append('</g>')

        lines.append('</svg>')
        return '\n'.join(lines)

    def save(self, result: PackingResult, filepath: Union[str, Path]) -> Path:
        """Save a packed layout to an SVG file."""
        svg_content = self.layout_to_svg(result)

        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        with open(filepath, 'w') as f:
            f.write(svg_content)
        return filepath

    def _extent(self, result: PackingResult) -> Tuple[float, float, float, float]:
        boxes = [r.bounds for r in result.sheet_outlines + result.placed_rectangles]
        if not boxes:
            return (0.0, 0.0, 0.0, 0.0)
        return (
            min(b[0] for b in boxes),
            min(b[1] for b in boxes),
            max(b[2] for b in boxes),
            max(b[3] for b in boxes),
        )

    def _fmt(self, value: float) -> str:
        return f'{value:.{self.precision}f}'

    def _d(self, points: List[Tuple[float, float]], is_closed: bool,
           origin: Tuple[float, float]) -> str:
        ox, oy = origin
        coords = [f'{self._fmt(x - ox)},{self._fmt(oy - y)}' for x, y in points]
        d = 'M ' + ' L '.join(coords)
        return d + ' Z' if is_closed else d

    def _path(self, points: List[Tuple[float, float]], is_closed: bool,
              origin: Tuple[float, float]) -> str:
        return f'<path d="{self._d(points, is_closed, origin)}"/>'

    def _path_group(self, rings, origin: Tuple[float, float]) -> str:
        # Holes go in the same path so even-odd filling stays correct
        d = ' '.join(self._d(points, closed, origin) for points, closed in rings if len(points) >= 2)
        return f'<path fill-rule="evenodd" d="{d}"/>'


def export_to_svg(result: PackingResult, filepath: Union[str, Path],
                  include_boxes: bool = False) -> Path:
    """Convenience function to export a layout to an SVG file."""
    return SVGExporter(include_boxes=include_boxes).save(result, filepath)


def layout_to_svg(result: PackingResult, include_boxes: bool = False) -> str:
    """Convenience function to convert a layout to an SVG string."""
    return SVGExporter(include_boxes=include_boxes).layout_to_svg(result)
