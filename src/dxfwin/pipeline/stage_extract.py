"""Page Extraction Stage - Split the drawing into form pages and resolve windows.

A drawing holds several A4 form frames side by side. Each frame is an
insert of the frame block; the building info block inserted inside a
frame carries the page attributes, and outline fragments whose center
lies inside the frame are that page's windows.
"""

import logging
from typing import Callable, Optional, Sequence

from dxfwin.config import settings
from dxfwin.models import (
    BBox,
    Dimension,
    Document,
    DrawingPage,
    ExtractionSummary,
    Insert,
)

from .stage_cluster import in_box
from .stage_match import WindowResolver
from .stage_transform import collect_layer_boxes, world_bbox_of

logger = logging.getLogger(__name__)

# Receives (percent, label); must not raise
ProgressCallback = Callable[[int, str], None]


def percent(value: int, total: int) -> int:
    """Integer percentage, 100 for an empty total."""
    if total <= 0:
        return 100
    return value * 100 // total


class PageExtractor:
    """Extracts DrawingPage records from a parsed Document."""

    def __init__(
        self,
        doc: Document,
        outline_layer: Optional[str] = None,
        annotation_layer: Optional[str] = None,
        frame_block: Optional[str] = None,
        info_block: Optional[str] = None,
        resolver: Optional[WindowResolver] = None,
    ):
        """Initialize the extractor.

        Args:
            doc: Parsed document.
            outline_layer: Layer of window outline fragments (default from settings).
            annotation_layer: Only dimensions on this layer are matched; None keeps all.
            frame_block: Block name of the page frame.
            info_block: Block name of the attributed info block.
            resolver: Window resolver (default built from settings).
        """
        self.doc = doc
        self.outline_layer = outline_layer or settings.outline_layer
        self.annotation_layer = annotation_layer if annotation_layer is not None else settings.annotation_layer
        self.frame_block = (frame_block or settings.frame_block).upper()
        self.info_block = (info_block or settings.info_block).upper()
        self.resolver = resolver or WindowResolver(doc)

        self.frames: list[Insert] = []
        self.infos: list[Insert] = []
        self.dimensions: list[Dimension] = []
        self.fragments: list[BBox] = []

    def collect(self, progress: Optional[ProgressCallback] = None) -> None:
        """Sort top-level entities into frames, info blocks, dimensions and fragments."""
        entities = self.doc.entities
        logger.info("Processing %d entities", len(entities))
        self.frames, self.infos, self.dimensions, self.fragments = [], [], [], []

        for i, entity in enumerate(entities, start=1):
            if progress:
                progress(percent(i, len(entities)), "Collecting entities")

            if isinstance(entity, Insert):
                name = entity.block_name.upper()
                if name == self.frame_block:
                    self.frames.append(entity)
                elif name == self.info_block:
                    self.infos.append(entity)
            elif isinstance(entity, Dimension):
                if self.annotation_layer is None or entity.layer == self.annotation_layer:
                    self.dimensions.append(entity)

            self.fragments.extend(collect_layer_boxes(self.doc, self.outline_layer, entity))

        # Left to right, as the frames are laid out
        self.frames.sort(key=lambda frame: frame.insertion_point.x)

        logger.info(
            "Found %d pages, %d info blocks, %d dimensions, %d outline fragments",
            len(self.frames),
            len(self.infos),
            len(self.dimensions),
            len(self.fragments),
        )

    def extract(self, progress: Optional[ProgressCallback] = None) -> list[DrawingPage]:
        """Build one DrawingPage per frame, in reading order."""
        self.collect(progress)

        pages = []
        for i, frame in enumerate(self.frames, start=1):
            if progress:
                progress(percent(i, len(self.frames)), "Resolving windows")
            pages.append(self.extract_page(frame))
        return pages

    def extract_page(self, frame: Insert) -> DrawingPage:
        """Resolve the attributes and windows inside one frame."""
        box = world_bbox_of(self.doc, frame)

        attributes = [
            info.attribute_map() for info in self.infos if in_box(box, info.insertion_point)
        ]
        fragments = [fragment for fragment in self.fragments if in_box(box, fragment.center)]

        windows = self.resolver.resolve(fragments, self.dimensions)
        logger.debug("Page at %s: %d windows", frame.insertion_point, len(windows))

        return DrawingPage(box=box, attributes=attributes, windows=windows)


def extract_pages(
    doc: Document,
    progress: Optional[ProgressCallback] = None,
    **options,
) -> list[DrawingPage]:
    """Extract all pages of a document.

    Args:
        doc: Parsed document.
        progress: Optional (percent, label) callback.
        **options: Forwarded to PageExtractor.
    """
    return PageExtractor(doc, **options).extract(progress)


def summarize(pages: Sequence[DrawingPage], epsilon: Optional[float] = None) -> ExtractionSummary:
    """Totals over pages; areas are converted from mm² to m²."""
    epsilon = settings.epsilon if epsilon is None else epsilon
    windows = [window for page in pages for window in page.windows]
    return ExtractionSummary(
        page_count=len(pages),
        attribute_count=sum(len(page.attributes) for page in pages),
        window_count=len(windows),
        total_area=sum(w.width * w.height for w in windows) / 1_000_000,
        mismatch_count=sum(1 for w in windows if not w.verified(epsilon)),
    )
