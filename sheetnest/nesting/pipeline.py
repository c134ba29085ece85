"""
Two-stage nesting pipeline.

Stage one orients every part independently (``optimize_rotation``); stage
two packs the resulting footprints in a single sequential pass
(``pack_sheets``). ``nest_shapes`` runs both with one ``NestingConfig``.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, List, Optional, Sequence

from sheetnest.config import Settings, get_settings
from sheetnest.errors import InvalidInput
from sheetnest.geometry.kernel import KEY_PRECISION, GeometryKernel, Rectangle
from sheetnest.nesting.cancellation import CancellationToken
from sheetnest.nesting.rotation_optimizer import (
    DEFAULT_ANGLE_STEP,
    DegeneratePolicy,
    OrientedFootprint,
    Part,
    RotationOptimizer,
)
from sheetnest.nesting.shelf_packer import DEFAULT_SPACING, PackingResult, ShelfPacker
from sheetnest.utils import get_logger

logger = get_logger("nesting.pipeline")


@dataclass
class NestingConfig:
    """Configuration for one nesting run."""
    # Stock sheet (mm); both are required before packing
    sheet_width: Optional[float] = None
    sheet_height: Optional[float] = None
    spacing: float = DEFAULT_SPACING

    # Rotation
    optimize: bool = True
    manual_angle: int = 0
    angle_step: int = DEFAULT_ANGLE_STEP
    degenerate_policy: DegeneratePolicy = DegeneratePolicy.RAISE
    max_workers: int = 1

    # Packing
    key_precision: int = KEY_PRECISION

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "sheet_width": self.sheet_width,
            "sheet_height": self.sheet_height,
            "spacing": self.spacing,
            "optimize": self.optimize,
            "manual_angle": self.manual_angle,
            "angle_step": self.angle_step,
            "degenerate_policy": self.degenerate_policy.value,
            "max_workers": self.max_workers,
            "key_precision": self.key_precision,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "NestingConfig":
        """Create from dictionary."""
        return cls(
            sheet_width=data.get("sheet_width"),
            sheet_height=data.get("sheet_height"),
            spacing=data.get("spacing", DEFAULT_SPACING),
            optimize=data.get("optimize", True),
            manual_angle=data.get("manual_angle", 0),
            angle_step=data.get("angle_step", DEFAULT_ANGLE_STEP),
            degenerate_policy=DegeneratePolicy(data.get("degenerate_policy", "raise")),
            max_workers=data.get("max_workers", 1),
            key_precision=data.get("key_precision", KEY_PRECISION),
        )

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, **overrides) -> "NestingConfig":
        """Create from application settings, with explicit overrides applied on top."""
        settings = settings or get_settings()
        config = cls(
            sheet_width=settings.sheet_width,
            sheet_height=settings.sheet_height,
            spacing=settings.spacing,
            angle_step=settings.angle_step,
            degenerate_policy=DegeneratePolicy(settings.degenerate_policy),
            max_workers=settings.max_workers,
            key_precision=settings.key_precision,
        )
        for name, value in overrides.items():
            if value is not None:
                setattr(config, name, value)
        return config


@dataclass
class NestingResult:
    """Footprints from stage one and the packed layout from stage two."""
    footprints: List[OrientedFootprint] = field(default_factory=list)
    packing: PackingResult = field(default_factory=PackingResult)
    skipped_parts: List[int] = field(default_factory=list)
    processing_time: float = 0.0

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "footprints": [fp.to_dict() for fp in self.footprints],
            "packing": self.packing.to_dict(),
            "skipped_parts": list(self.skipped_parts),
            "processing_time": self.processing_time,
        }


def optimize_rotation(
    parts: Iterable[Part],
    manual_angle_degrees: int = 0,
    optimize: bool = True,
    *,
    kernel: Optional[GeometryKernel] = None,
    angle_step: int = DEFAULT_ANGLE_STEP,
    policy: DegeneratePolicy = DegeneratePolicy.RAISE,
    max_workers: int = 1,
    cancel_token: Optional[CancellationToken] = None,
) -> List[OrientedFootprint]:
    """
    Orient parts to minimise their bounding rectangles.

    Args:
        parts: Parts to orient
        manual_angle_degrees: Fixed angle used when ``optimize`` is False
        optimize: Search sampled angles instead of using the manual angle
        kernel: Geometry kernel, shapely by default
        angle_step: Sampling step in degrees
        policy: Degenerate geometry handling
        max_workers: Threads for the per-part search
        cancel_token: Cooperative cancellation

    Returns:
        Footprints in part order
    """
    optimizer = RotationOptimizer(
        kernel=kernel,
        angle_step=angle_step,
        policy=policy,
        max_workers=max_workers,
    )
    return optimizer.optimize(parts, manual_angle_degrees, optimize, cancel_token=cancel_token)


def pack_sheets(
    rectangles: Iterable[Rectangle],
    shapes: Optional[Iterable[Any]] = None,
    sheet_width: Optional[float] = None,
    sheet_height: Optional[float] = None,
    spacing: float = DEFAULT_SPACING,
    *,
    kernel: Optional[GeometryKernel] = None,
    key_precision: int = KEY_PRECISION,
    cancel_token: Optional[CancellationToken] = None,
) -> PackingResult:
    """
    Pack rectangles, and optionally the shapes they came from, onto sheets.

    Returns:
        PackingResult with ``placed_rectangles``, ``sheet_outlines`` and
        ``placed_shapes``

    Raises:
        MissingRequiredInput: if the sheet width or height is None
    """
    packer = ShelfPacker(
        sheet_width=sheet_width,
        sheet_height=sheet_height,
        spacing=spacing,
        kernel=kernel,
        key_precision=key_precision,
    )
    return packer.pack(rectangles, shapes, cancel_token=cancel_token)


def nest_shapes(
    shapes: Sequence[Any],
    config: Optional[NestingConfig] = None,
    names: Optional[Sequence[str]] = None,
    *,
    kernel: Optional[GeometryKernel] = None,
    cancel_token: Optional[CancellationToken] = None,
) -> NestingResult:
    """
    Orient and pack a list of shapes.

    Args:
        shapes: Flat part outlines
        config: Nesting configuration; defaults come from settings
        names: Optional part names, parallel to ``shapes``
        kernel: Geometry kernel, shapely by default
        cancel_token: Cooperative cancellation for both stages

    Returns:
        NestingResult with footprints and the packed layout

    Raises:
        MissingRequiredInput: if the sheet width or height is None
        InvalidInput: if the sheet size or spacing is out of range
    """
    start_time = datetime.now()
    config = config or NestingConfig.from_settings()

    # Sheet size and spacing are validated before any part is rotated
    packer = ShelfPacker(
        sheet_width=config.sheet_width,
        sheet_height=config.sheet_height,
        spacing=config.spacing,
        kernel=kernel,
        key_precision=config.key_precision,
    )

    names = list(names) if names is not None else [None] * len(shapes)
    if len(names) != len(shapes):
        raise InvalidInput(f"Got {len(names)} names for {len(shapes)} shapes")
    parts = [Part(shape=shape, name=name) for shape, name in zip(shapes, names)]

    footprints = optimize_rotation(
        parts,
        config.manual_angle,
        config.optimize,
        kernel=kernel,
        angle_step=config.angle_step,
        policy=config.degenerate_policy,
        max_workers=config.max_workers,
        cancel_token=cancel_token,
    )

    kept = {fp.part_index for fp in footprints}
    skipped = [i for i in range(len(parts)) if i not in kept]

    packing = packer.pack(
        [fp.rectangle for fp in footprints],
        [fp.shape for fp in footprints],
        cancel_token=cancel_token,
    )

    processing_time = (datetime.now() - start_time).total_seconds()
    logger.info(
        f"Nested {len(footprints)} parts on {packing.sheet_count} sheet(s) "
        f"in {processing_time:.2f}s"
    )

    return NestingResult(
        footprints=footprints,
        packing=packing,
        skipped_parts=skipped,
        processing_time=processing_time,
    )
