"""Extraction result models: windows, drawing pages and run summaries."""

from pydantic import Field

from .base import BBox, DrawingModel
from .entity import Dimension

# Attribute keys of the info block
SERIAL_KEY = "序号"
BUILDING_KEY = "楼号"
AREA_KEY = "面积"
AMOUNT_KEY = "金额"


class Window(DrawingModel):
    """
    Resolved window/door opening.

    ``box`` is the union of the outline fragments, ``area`` is ``box``
    grown to cover every matched dimension.
    """

    box: BBox
    area: BBox
    matched_dimensions: list[Dimension] = Field(default_factory=list)
    widths: list[float] = Field(default_factory=list, description="Horizontal dimension values")
    heights: list[float] = Field(default_factory=list, description="Vertical dimension values")

    @property
    def width(self) -> float:
        """Measured geometric width."""
        return self.box.width

    @property
    def height(self) -> float:
        """Measured geometric height."""
        return self.box.height

    @property
    def max_width(self) -> float:
        """Largest annotated width, 0 without width dimensions."""
        return max(self.widths, default=0.0)

    @property
    def max_height(self) -> float:
        """Largest annotated height, 0 without height dimensions."""
        return max(self.heights, default=0.0)

    def verify_width(self, epsilon: float) -> bool:
        """Annotated width agrees with the geometry."""
        return bool(self.widths) and abs(self.width - self.max_width) <= epsilon

    def verify_height(self, epsilon: float) -> bool:
        """Annotated height agrees with the geometry."""
        return bool(self.heights) and abs(self.height - self.max_height) <= epsilon

    def verified(self, epsilon: float) -> bool:
        """Both annotated sizes agree; False flags the window for review."""
        return self.verify_width(epsilon) and self.verify_height(epsilon)


class DrawingPage(DrawingModel):
    """
    One form page of the drawing (a frame block insert).

    Holds the attribute records of the info blocks placed on the page and
    the windows found inside the frame, in reading order.
    """

    box: BBox
    attributes: list[dict[str, str]] = Field(default_factory=list)
    windows: list[Window] = Field(default_factory=list)

    def attribute(self, key: str) -> str:
        """First non-empty value of ``key`` across the attribute records."""
        for record in self.attributes:
            if record.get(key):
                return record[key]
        return ""

    @property
    def serial(self) -> str:
        return self.attribute(SERIAL_KEY)

    @property
    def building(self) -> str:
        return self.attribute(BUILDING_KEY)

    @property
    def area(self) -> str:
        return self.attribute(AREA_KEY)

    @property
    def amount(self) -> str:
        return self.attribute(AMOUNT_KEY)


class ExtractionSummary(DrawingModel):
    """Totals over all extracted pages."""

    page_count: int = Field(default=0, ge=0)
    attribute_count: int = Field(default=0, ge=0, description="Info records, expected one per page")
    window_count: int = Field(default=0, ge=0)
    total_area: float = Field(default=0.0, description="Sum of window areas in square meters")
    mismatch_count: int = Field(default=0, ge=0, description="Windows failing verification")

    @property
    def attributes_complete(self) -> bool:
        """Every page has exactly one info record."""
        return self.attribute_count == self.page_count
