"""Entity models parsed from DXF tag streams.

Each entity variant owns its parse routine. ``parse`` is called with the
scanner positioned on the entity's type tag (code 0) and returns with the
scanner on the next code-0 tag, which it does not consume.
"""

import math
import re
from typing import TYPE_CHECKING, Callable, ClassVar, Optional

from pydantic import Field

from .base import BBox, DrawingModel, Point

if TYPE_CHECKING:
    from dxfwin.models.document import Document
    from dxfwin.pipeline.stage_scan import Tag, TagScanner


# Inline MTEXT formatting such as \A1; or \fSimSun|b0|i0;
FORMAT_ESCAPE = re.compile(r"\\[A-Za-z].*?;")
DECIMAL_NUMBER = re.compile(r"\d+(?:\.\d+)?|\.\d+")

# Placeholder meaning "use the measured value"
AUTO_TEXT = "<>"


def round_half_away(value: float, precision: int) -> float:
    """Round to ``precision`` decimals, halves away from zero."""
    factor = 10.0 ** precision
    return math.copysign(math.floor(abs(value) * factor + 0.5), value) / factor


class Entity(DrawingModel):
    """
    Base drawing entity.

    Subclasses declare ``type_name`` and map coordinate group codes to
    point fields through ``point_codes``; anything else they need goes in
    ``apply_tag``. Unknown group codes are ignored.
    """

    type_name: ClassVar[str] = ""
    # group code -> (point field, axis)
    point_codes: ClassVar[dict[int, tuple[str, str]]] = {}

    layer: str = ""
    handle: str = ""

    @property
    def entity_type(self) -> str:
        """DXF type name, e.g. 'LINE'."""
        return self.type_name

    def parse(self, scanner: "TagScanner", registry: Optional["EntityRegistry"] = None) -> None:
        """Read group codes until the next code-0 tag."""
        while scanner.next() and scanner.last_tag.code != 0:
            self.apply_tag(scanner.last_tag)

    def apply_tag(self, tag: "Tag") -> None:
        """Apply one group code to this entity."""
        if tag.code == 8:
            self.layer = tag.as_string()
        elif tag.code == 5:
            self.handle = tag.as_string()
        elif tag.code in self.point_codes:
            name, axis = self.point_codes[tag.code]
            setattr(self, name, getattr(self, name).replace(**{axis: tag.as_float()}))

    def bbox(self) -> BBox:
        """Bounding box in the entity's own (block-local) coordinates."""
        return BBox()


class Line(Entity):
    """Straight line segment."""

    type_name: ClassVar[str] = "LINE"
    point_codes: ClassVar[dict[int, tuple[str, str]]] = {
        10: ("start", "x"),
        20: ("start", "y"),
        30: ("start", "z"),
        11: ("end", "x"),
        21: ("end", "y"),
        31: ("end", "z"),
    }

    start: Point = Point()
    end: Point = Point()

    def bbox(self) -> BBox:
        return BBox.from_points([self.start, self.end])


class LWPolyline(Entity):
    """Light-weight polyline; vertices are 2D."""

    type_name: ClassVar[str] = "LWPOLYLINE"

    vertices: list[Point] = Field(default_factory=list)
    closed: bool = False

    def parse(self, scanner: "TagScanner", registry: Optional["EntityRegistry"] = None) -> None:
        x = 0.0
        while scanner.next() and scanner.last_tag.code != 0:
            tag = scanner.last_tag
            if tag.code == 10:
                x = tag.as_float()
            elif tag.code == 20:
                self.vertices.append(Point(x=x, y=tag.as_float()))
            elif tag.code == 70:
                self.closed = bool(tag.as_int() & 1)
            else:
                self.apply_tag(tag)

    def bbox(self) -> BBox:
        return BBox.from_points(self.vertices)


class Attrib(Entity):
    """Attribute attached to an Insert (key/text pair)."""

    type_name: ClassVar[str] = "ATTRIB"
    point_codes: ClassVar[dict[int, tuple[str, str]]] = {
        10: ("location", "x"),
        20: ("location", "y"),
        30: ("location", "z"),
    }

    location: Point = Point()
    tag: str = Field(default="", description="Attribute key, e.g. '序号'")
    text: str = Field(default="", description="Attribute value")
    height: float = 0.0

    def apply_tag(self, tag: "Tag") -> None:
        if tag.code == 2:
            self.tag = tag.as_string()
        elif tag.code == 1:
            self.text = tag.as_string()
        elif tag.code == 40:
            self.height = tag.as_float()
        else:
            super().apply_tag(tag)

    def bbox(self) -> BBox:
        # Text extents are not modeled
        return BBox.from_point(self.location)


class Insert(Entity):
    """
    Block reference.

    Places a named block with per-axis scale, rotation (degrees) and an
    insertion point. The block itself is looked up by name in the Document.
    """

    type_name: ClassVar[str] = "INSERT"
    point_codes: ClassVar[dict[int, tuple[str, str]]] = {
        10: ("insertion_point", "x"),
        20: ("insertion_point", "y"),
        30: ("insertion_point", "z"),
        41: ("scale", "x"),
        42: ("scale", "y"),
        43: ("scale", "z"),
    }

    block_name: str = ""
    insertion_point: Point = Point()
    scale: Point = Point(x=1.0, y=1.0, z=1.0)
    rotation: float = 0.0
    attributes: list[Attrib] = Field(default_factory=list)

    def parse(self, scanner: "TagScanner", registry: Optional["EntityRegistry"] = None) -> None:
        has_attributes = False
        while scanner.next() and scanner.last_tag.code != 0:
            tag = scanner.last_tag
            if tag.code == 2:
                self.block_name = tag.as_string()
            elif tag.code == 50:
                self.rotation = tag.as_float()
            elif tag.code == 66:
                has_attributes = tag.as_int() == 1
            else:
                self.apply_tag(tag)

        if has_attributes and not scanner.done:
            self._parse_attributes(scanner, registry or default_registry())

    def _parse_attributes(self, scanner: "TagScanner", registry: "EntityRegistry") -> None:
        """Collect ATTRIB children up to and including SEQEND."""
        while True:
            tag = scanner.last_tag
            if tag.code == 0:
                if tag.is_marker("SEQEND"):
                    scanner.next()
                    return
                child = registry.create(tag.value)
                if isinstance(child, Attrib):
                    child.parse(scanner, registry)
                    self.attributes.append(child)
                    continue
            if not scanner.next():
                return

    def attribute_map(self) -> dict[str, str]:
        """Attribute key -> text; later duplicates win."""
        return {attrib.tag: attrib.text for attrib in self.attributes}

    def attribute(self, key: str) -> str:
        """Text of attribute ``key``, empty when absent."""
        return self.attribute_map().get(key, "")

    def bbox(self) -> BBox:
        # Real extents need the block definition, see world_bbox_of
        return BBox.from_point(self.insertion_point)


class Dimension(Entity):
    """
    Dimension annotation.

    Only linear dimensions (``dim_type == 0``) take part in window matching;
    other kinds are parsed so they can be told apart.
    """

    type_name: ClassVar[str] = "DIMENSION"
    point_codes: ClassVar[dict[int, tuple[str, str]]] = {
        10: ("definition_point", "x"),
        20: ("definition_point", "y"),
        11: ("text_midpoint", "x"),
        21: ("text_midpoint", "y"),
        13: ("measure_start", "x"),
        23: ("measure_start", "y"),
        14: ("measure_end", "x"),
        24: ("measure_end", "y"),
    }

    dim_type: int = Field(default=0, description="Low 3 bits of group code 70")
    style_name: str = ""
    actual_measurement: float = 0.0
    text: str = Field(default="", description="Text override, '<>' stands for the measurement")
    angle: float = Field(default=0.0, description="Dimension line angle in degrees")

    definition_point: Point = Point()
    text_midpoint: Point = Point()
    measure_start: Point = Point()
    measure_end: Point = Point()

    def apply_tag(self, tag: "Tag") -> None:
        if tag.code == 3:
            self.style_name = tag.as_string().upper()
        elif tag.code == 1:
            self.text = tag.as_string()
        elif tag.code == 42:
            self.actual_measurement = tag.as_float()
        elif tag.code == 50:
            self.angle = tag.as_float()
        elif tag.code == 70:
            self.dim_type = tag.as_int() & 0x07
        else:
            super().apply_tag(tag)

    @property
    def is_linear(self) -> bool:
        """Rotated, horizontal or vertical linear dimension."""
        return self.dim_type == 0

    def extension_points(self) -> tuple[Point, Point]:
        """Project both measured points onto the dimension line.

        Returns:
            Corner points on the dimension line for measure_start and
            measure_end, in that order.
        """
        rad = math.radians(self.angle)
        dx, dy = math.cos(rad), math.sin(rad)
        origin = self.definition_point

        corners = []
        for p in (self.measure_start, self.measure_end):
            dot = (p.x - origin.x) * dx + (p.y - origin.y) * dy
            corners.append(Point(x=origin.x + dx * dot, y=origin.y + dy * dot))
        return corners[0], corners[1]

    def perfect_rectangle(self, extension_length: float = 0.0) -> BBox:
        """Box covering what the dimension draws.

        The dimension line corners are pushed outward (away from the
        measured points) by ``extension_length`` along the extension line
        direction, then boxed together with both measured points and the
        text midpoint.
        """
        start_corner, end_corner = self.extension_points()

        rad = math.radians(self.angle + 90.0)
        ux, uy = math.cos(rad), math.sin(rad)

        dot = (start_corner.x - self.measure_start.x) * ux + (start_corner.y - self.measure_start.y) * uy
        direction = -1.0 if dot < 0 else 1.0
        push_x = ux * extension_length * direction
        push_y = uy * extension_length * direction

        points = [
            self.measure_start,
            self.measure_end,
            Point(x=start_corner.x + push_x, y=start_corner.y + push_y),
            Point(x=end_corner.x + push_x, y=end_corner.y + push_y),
            self.text_midpoint,
        ]
        return BBox(
            min=Point(x=min(p.x for p in points), y=min(p.y for p in points)),
            max=Point(x=max(p.x for p in points), y=max(p.y for p in points)),
        )

    def override_value(self) -> Optional[float]:
        """Number written in the text override, None if there is none."""
        if not self.text or AUTO_TEXT in self.text:
            return None
        match = DECIMAL_NUMBER.search(FORMAT_ESCAPE.sub("", self.text))
        if match is None:
            return None
        return float(match.group())

    def measured_value(self, doc: "Document") -> float:
        """Value the drawing displays for this dimension."""
        value = self.override_value()
        if value is not None:
            return value
        style = doc.dim_style(self.style_name)
        precision = style.precision if style else 0
        return round_half_away(self.actual_measurement, precision)

    def bbox(self) -> BBox:
        return self.perfect_rectangle(0.0)


EntityFactory = Callable[[], Entity]


class EntityRegistry:
    """Maps DXF type names to entity constructors.

    Lets callers skip entity types they do not model instead of failing
    the whole document.
    """

    def __init__(self):
        self._factories: dict[str, EntityFactory] = {}

    def register(self, type_name: str, factory: EntityFactory) -> None:
        """Register (or replace) the constructor for ``type_name``."""
        self._factories[type_name.strip().upper()] = factory

    def create(self, type_name: str) -> Optional[Entity]:
        """Construct an empty entity, None for unknown type names."""
        factory = self._factories.get(type_name.strip().upper())
        if factory is None:
            return None
        return factory()

    def __contains__(self, type_name: str) -> bool:
        return type_name.strip().upper() in self._factories

    @property
    def type_names(self) -> list[str]:
        """Registered type names."""
        return sorted(self._factories)


def default_registry() -> EntityRegistry:
    """Registry with every entity variant this package models."""
    registry = EntityRegistry()
    for entity_cls in (Line, LWPolyline, Insert, Attrib, Dimension):
        registry.register(entity_cls.type_name, entity_cls)
    return registry
