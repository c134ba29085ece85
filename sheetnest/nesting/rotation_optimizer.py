"""
Rotation search for minimal bounding footprints.

Each part is rotated about the centre of its bounding rectangle, either by a
single manual angle or at every sampled angle (0, 5, ..., 355 by default),
and the orientation with the smallest bounding-rectangle area is kept.
Parts are independent of each other, so the search can run on a thread pool.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from sheetnest.errors import DegenerateGeometryError, InvalidInput, MissingRequiredInput
from sheetnest.geometry.kernel import GeometryKernel, Rectangle, default_kernel
from sheetnest.nesting.cancellation import CancellationToken
from sheetnest.utils import get_logger

logger = get_logger("nesting.rotation_optimizer")

DEFAULT_ANGLE_STEP = 5


class DegeneratePolicy(str, Enum):
    """How the optimizer treats parts without a bounding rectangle."""
    RAISE = "raise"  # Abort the whole batch
    SKIP = "skip"  # Log and drop the part


@dataclass(frozen=True)
class Part:
    """A flat part to be oriented. Pivot defaults to its bounding-rectangle centre."""
    shape: Any
    pivot: Optional[Tuple[float, float]] = None
    name: Optional[str] = None

    @classmethod
    def from_shape(cls, shape: Any, name: Optional[str] = None,
                   kernel: Optional[GeometryKernel] = None) -> "Part":
        """Create a part with its pivot resolved up front."""
        kernel = kernel or default_kernel()
        return cls(shape=shape, pivot=kernel.bounding_rectangle(shape).center, name=name)


@dataclass(frozen=True)
class OrientedFootprint:
    """A part at its chosen orientation."""
    shape: Any
    rectangle: Rectangle
    area: float
    angle: float
    part_index: int
    name: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "part_index": self.part_index,
            "angle": self.angle,
            "area": self.area,
            "rectangle": self.rectangle.to_dict(),
            "wkt": getattr(self.shape, "wkt", None),
        }


class RotationOptimizer:
    """
    Finds the orientation of each part that minimises its bounding area.

    Usage:
        optimizer = RotationOptimizer()
        footprints = optimizer.optimize(parts)
        for fp in footprints:
            print(fp.angle, fp.area)
    """

    def __init__(
        self,
        kernel: Optional[GeometryKernel] = None,
        angle_step: int = DEFAULT_ANGLE_STEP,
        policy: DegeneratePolicy = DegeneratePolicy.RAISE,
        max_workers: int = 1,
    ):
        """
        Initialize rotation optimizer.

        Args:
            kernel: Geometry kernel, shapely by default
            angle_step: Sampling step in degrees; must divide into (0, 360]
            policy: Degenerate geometry handling
            max_workers: Threads used to evaluate parts; 1 runs inline
        """
        if angle_step is None or not 0 < angle_step <= 360:
            raise InvalidInput(f"angle_step must be in (0, 360], got {angle_step}")
        if max_workers < 1:
            raise InvalidInput(f"max_workers must be at least 1, got {max_workers}")

        self.kernel = kernel or default_kernel()
        self.angle_step = angle_step
        self.policy = DegeneratePolicy(policy)
        self.max_workers = max_workers

    def sample_angles(self) -> List[int]:
        """Angles tried in optimize mode, ascending."""
        return list(range(0, 360, self.angle_step))

    def optimize(
        self,
        parts: Iterable[Part],
        manual_angle_degrees: int = 0,
        optimize: bool = True,
        cancel_token: Optional[CancellationToken] = None,
    ) -> List[OrientedFootprint]:
        """
        Orient every part.

        Args:
            parts: Parts to orient
            manual_angle_degrees: Angle used when ``optimize`` is False
            optimize: Search sampled angles for the smallest bounding area
            cancel_token: Checked once per part

        Returns:
            One footprint per part, in input order. Under
            ``DegeneratePolicy.SKIP`` degenerate parts are left out; each
            footprint's ``part_index`` names its source part.

        Raises:
            MissingRequiredInput: if the angle or optimize flag is None
            DegenerateGeometryError: under ``DegeneratePolicy.RAISE``
            Cancelled: if the token is cancelled mid-batch
        """
        if optimize is None:
            raise MissingRequiredInput("optimize")
        if not optimize and manual_angle_degrees is None:
            raise MissingRequiredInput("manual_angle_degrees")

        parts = list(parts)
        angles = self.sample_angles() if optimize else [manual_angle_degrees]

        def evaluate(indexed: Tuple[int, Part]) -> Optional[OrientedFootprint]:
            index, part = indexed
            if cancel_token is not None:
                cancel_token.raise_if_cancelled("Rotation optimization")
            try:
                return self._best_orientation(index, part, angles)
            except DegenerateGeometryError as e:
                label = part.name or f"#{index}"
                if self.policy == DegeneratePolicy.RAISE:
                    raise DegenerateGeometryError(f"Part {label}: {e}", part_index=index) from e
                logger.warning(f"Skipping part {label}: {e}")
                return None

        if self.max_workers > 1 and len(parts) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                results = list(executor.map(evaluate, enumerate(parts)))
        else:
            results = [evaluate(item) for item in enumerate(parts)]

        footprints = [r for r in results if r is not None]
        logger.info(
            f"Oriented {len(footprints)}/{len(parts)} parts "
            f"({'optimized' if optimize else f'manual {manual_angle_degrees} deg'})"
        )
        return footprints

    def _best_orientation(self, index: int, part: Part,
                          angles: Sequence[float]) -> OrientedFootprint:
        """Scan angles in order; a later angle wins only with a strictly smaller area."""
        pivot = part.pivot
        if pivot is None:
            pivot = self.kernel.bounding_rectangle(part.shape).center

        best = None
        for angle in angles:
            rotated = self.kernel.rotate(part.shape, angle, pivot)
            rect = self.kernel.bounding_rectangle(rotated)
            if best is None or rect.area < best.area:
                best = OrientedFootprint(
                    shape=rotated,
                    rectangle=rect,
                    area=rect.area,
                    angle=angle,
                    part_index=index,
                    name=part.name,
                )
        return best
