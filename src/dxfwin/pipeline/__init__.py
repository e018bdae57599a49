"""Pipeline stages for DXF window extraction.

Deterministic, single-pass stages:
1. stage_scan - DXF text to (group code, value) tags
2. stage_parse - Tags to Document (blocks, entities, dimension styles)
3. stage_transform - Block-local geometry to world coordinates
4. stage_cluster - Outline fragments to window boxes
5. stage_match - Dimension annotations to windows
6. stage_extract - Form pages with attributes and windows

Each stage can be used on its own or driven through ``extract_pages``.
"""

from .stage_cluster import in_box, is_separate, merge_boxes
from .stage_extract import PageExtractor, extract_pages, summarize
from .stage_match import (
    MatchRound,
    WindowResolver,
    classify_dimensions,
    expand_annotations,
    match_annotations,
    sort_reading_order,
)
from .stage_parse import DocumentParseError, DocumentParser, load_document, parse_document
from .stage_scan import ScanError, Tag, TagScanner, iter_tags
from .stage_transform import (
    collect_layer_boxes,
    combine_inserts,
    transform_bbox,
    transform_point,
    world_bbox_of,
)

__all__ = [
    # Scan
    "Tag",
    "TagScanner",
    "ScanError",
    "iter_tags",
    # Parse
    "DocumentParser",
    "DocumentParseError",
    "parse_document",
    "load_document",
    # Transform
    "transform_point",
    "transform_bbox",
    "combine_inserts",
    "collect_layer_boxes",
    "world_bbox_of",
    # Cluster
    "is_separate",
    "in_box",
    "merge_boxes",
    # Match
    "MatchRound",
    "match_annotations",
    "expand_annotations",
    "classify_dimensions",
    "sort_reading_order",
    "WindowResolver",
    # Extract
    "PageExtractor",
    "extract_pages",
    "summarize",
]
