"""Drawing models for DXF window extraction.

This module defines the Pydantic models that flow through the pipeline
stages: geometric value types, parsed entities and the document, and the
extraction results.

Model Hierarchy:
- Document → Blocks → Entities
- Document → Entities (top level) → Insert → Attribs
- Document → DimStyles
- DrawingPage → Windows → Dimensions
"""

from .base import BBox, DrawingModel, Point
from .document import Block, DimStyle, Document
from .entity import (
    Attrib,
    Dimension,
    Entity,
    EntityRegistry,
    Insert,
    Line,
    LWPolyline,
    default_registry,
    round_half_away,
)
from .window import DrawingPage, ExtractionSummary, Window

__all__ = [
    # Base types
    "DrawingModel",
    "Point",
    "BBox",
    # Entities
    "Entity",
    "Line",
    "LWPolyline",
    "Insert",
    "Attrib",
    "Dimension",
    "EntityRegistry",
    "default_registry",
    "round_half_away",
    # Document
    "Block",
    "DimStyle",
    "Document",
    # Results
    "Window",
    "DrawingPage",
    "ExtractionSummary",
]
