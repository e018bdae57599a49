"""Annotation Matching Stage - Attach dimension annotations to windows.

A dimension belongs to a window when its perfect rectangle touches the
window box within a gap tolerance. Matching runs in rounds: every match
grows the box, so an outer "total span" dimension can be caught once the
inner "clear opening" dimension has been absorbed.

Matched dimensions are classified by line angle:
- 0 / 180 degrees: widths
- 90 / 270 degrees: heights
Other angles still grow the box but are not reported as sizes.
"""

import functools
import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from dxfwin.config import settings
from dxfwin.models import BBox, Dimension, Document, Window

from .stage_cluster import is_separate, merge_boxes

logger = logging.getLogger(__name__)

WIDTH_ANGLES = (0, 180)
HEIGHT_ANGLES = (90, 270)


@dataclass
class MatchRound:
    """Result of one matching round."""

    rest: list[Dimension] = field(default_factory=list)  # unmatched, fed to the next round
    matched: list[Dimension] = field(default_factory=list)
    box: Optional[BBox] = None  # input box grown by every match


def match_annotations(
    doc: Document,
    dimensions: Sequence[Dimension],
    box: BBox,
    gap: float,
) -> MatchRound:
    """Run one matching round against ``box``.

    Non-linear dimensions pass straight through to ``rest``. Every match is
    tested against the box the round started with; the returned box covers
    all rectangles matched in this round.
    """
    result = MatchRound(box=box)

    for dimension in dimensions:
        if not dimension.is_linear:
            result.rest.append(dimension)
            continue

        rect = dimension.perfect_rectangle(doc.extension_length(dimension))
        if is_separate(box, rect, gap):
            result.rest.append(dimension)
            continue

        result.matched.append(dimension)
        result.box = result.box.expand_to(rect.min, rect.max)

    return result


def expand_annotations(
    doc: Document,
    dimensions: Sequence[Dimension],
    box: BBox,
    gap: float,
) -> tuple[list[Dimension], BBox]:
    """Repeat matching rounds until one matches nothing.

    Returns:
        Tuple of (all matched dimensions in match order, grown box).
    """
    pool = list(dimensions)
    matched: list[Dimension] = []
    rounds = 0

    while True:
        result = match_annotations(doc, pool, box, gap)
        if not result.matched:
            break
        rounds += 1
        matched.extend(result.matched)
        pool, box = result.rest, result.box

    logger.debug("Matched %d dimensions in %d rounds", len(matched), rounds)
    return matched, box


def classify_angle(angle: float) -> Optional[str]:
    """'width', 'height' or None for a dimension line angle in degrees."""
    degrees = int(angle) % 360
    if degrees in WIDTH_ANGLES:
        return "width"
    if degrees in HEIGHT_ANGLES:
        return "height"
    return None


def classify_dimensions(
    doc: Document, dimensions: Sequence[Dimension]
) -> tuple[list[float], list[float]]:
    """Split matched dimensions into (widths, heights) display values."""
    widths: list[float] = []
    heights: list[float] = []
    for dimension in dimensions:
        kind = classify_angle(dimension.angle)
        if kind == "width":
            widths.append(dimension.measured_value(doc))
        elif kind == "height":
            heights.append(dimension.measured_value(doc))
    return widths, heights


def sort_reading_order(boxes: Sequence[BBox], row_tolerance: float = 500.0) -> list[BBox]:
    """Order boxes top row first, left to right within a row.

    Boxes whose tops differ by more than ``row_tolerance`` are ordered by
    Y descending, otherwise by X ascending.
    """

    def compare(a: BBox, b: BBox) -> int:
        if abs(a.max.y - b.max.y) > row_tolerance:
            return -1 if a.max.y > b.max.y else 1
        if a.min.x != b.min.x:
            return -1 if a.min.x < b.min.x else 1
        return 0

    return sorted(boxes, key=functools.cmp_to_key(compare))


class WindowResolver:
    """Resolves window records from outline fragments and dimensions."""

    def __init__(
        self,
        doc: Document,
        window_gap: Optional[float] = None,
        dimension_gap: Optional[float] = None,
        row_tolerance: Optional[float] = None,
    ):
        """Initialize the resolver.

        Args:
            doc: Parsed document (dimension styles are read from it).
            window_gap: Tolerance for merging outline fragments.
            dimension_gap: Tolerance for touching a dimension rectangle.
            row_tolerance: Y distance treated as the same row.
        """
        self.doc = doc
        self.window_gap = settings.window_gap if window_gap is None else window_gap
        self.dimension_gap = settings.dimension_gap if dimension_gap is None else dimension_gap
        self.row_tolerance = settings.row_tolerance if row_tolerance is None else row_tolerance

    def resolve(self, fragments: Sequence[BBox], dimensions: Sequence[Dimension]) -> list[Window]:
        """Build windows in reading order.

        Every window is matched against the entire dimension pool.
        """
        boxes = sort_reading_order(merge_boxes(fragments, self.window_gap), self.row_tolerance)
        return [self.resolve_window(box, dimensions) for box in boxes]

    def resolve_window(self, box: BBox, dimensions: Sequence[Dimension]) -> Window:
        """Match annotations for a single window box."""
        matched, area = expand_annotations(self.doc, dimensions, box, self.dimension_gap)
        widths, heights = classify_dimensions(self.doc, matched)
        return Window(
            box=box,
            area=area,
            matched_dimensions=matched,
            widths=widths,
            heights=heights,
        )
