"""Base models and geometric value types for DXF window extraction."""

from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict, model_validator


class DrawingModel(BaseModel):
    """Base class for all drawing models."""

    model_config = ConfigDict(from_attributes=True)


class Point(DrawingModel):
    """Point in drawing space (WCS or block-local)."""

    model_config = ConfigDict(frozen=True)

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def replace(self, **coords: float) -> "Point":
        """Return a copy with the given coordinates replaced."""
        return self.model_copy(update=coords)


class BBox(DrawingModel):
    """Axis-aligned bounding box.

    Construction orders the X and Y extents so that ``min`` is always the
    lower-left corner. Z is stored as given.
    """

    model_config = ConfigDict(frozen=True)

    min: Point = Point()
    max: Point = Point()

    @model_validator(mode="before")
    @classmethod
    def _order_corners(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        # A missing corner is the origin, as with the field defaults
        lo = Point.model_validate(data.get("min", Point()))
        hi = Point.model_validate(data.get("max", Point()))
        return {
            **data,
            "min": Point(x=min(lo.x, hi.x), y=min(lo.y, hi.y), z=lo.z),
            "max": Point(x=max(lo.x, hi.x), y=max(lo.y, hi.y), z=hi.z),
        }

    @classmethod
    def from_point(cls, point: Point) -> "BBox":
        """Degenerate box covering a single point."""
        return cls(min=point, max=point)

    @classmethod
    def from_points(cls, points: Iterable[Point]) -> "BBox":
        """Smallest box covering all points (3D)."""
        points = list(points)
        if not points:
            return cls()
        return cls(
            min=Point(
                x=min(p.x for p in points),
                y=min(p.y for p in points),
                z=min(p.z for p in points),
            ),
            max=Point(
                x=max(p.x for p in points),
                y=max(p.y for p in points),
                z=max(p.z for p in points),
            ),
        )

    @property
    def width(self) -> float:
        """Extent along X."""
        return self.max.x - self.min.x

    @property
    def height(self) -> float:
        """Extent along Y."""
        return self.max.y - self.min.y

    @property
    def center(self) -> Point:
        """XY center (z = 0)."""
        return Point(x=(self.min.x + self.max.x) / 2, y=(self.min.y + self.max.y) / 2)

    def corners(self) -> list[Point]:
        """All 8 corners of the 3D box."""
        return [
            Point(x=x, y=y, z=z)
            for z in (self.min.z, self.max.z)
            for x, y in (
                (self.min.x, self.min.y),
                (self.max.x, self.min.y),
                (self.max.x, self.max.y),
                (self.min.x, self.max.y),
            )
        ]

    def union(self, other: "BBox") -> "BBox":
        """Smallest box covering both boxes."""
        return BBox.from_points([self.min, self.max, other.min, other.max])

    def expand_to(self, *points: Point) -> "BBox":
        """Grow the XY extents to cover the given points."""
        min_x, min_y = self.min.x, self.min.y
        max_x, max_y = self.max.x, self.max.y
        for p in points:
            min_x, min_y = min(min_x, p.x), min(min_y, p.y)
            max_x, max_y = max(max_x, p.x), max(max_y, p.y)
        return BBox(
            min=self.min.replace(x=min_x, y=min_y),
            max=self.max.replace(x=max_x, y=max_y),
        )

    def contains(self, other: "BBox") -> bool:
        """Check whether ``other`` lies inside this box in XY."""
        return (
            self.min.x <= other.min.x
            and self.min.y <= other.min.y
            and other.max.x <= self.max.x
            and other.max.y <= self.max.y
        )
