"""Document-level models: blocks, dimension styles and the parsed drawing."""

from typing import Optional

from pydantic import Field

from .base import DrawingModel
from .entity import Dimension, Entity, Insert


class DimStyle(DrawingModel):
    """Dimension style from the DIMSTYLE table."""

    name: str
    precision: int = Field(default=0, description="DIMDEC, displayed decimal places (271)")
    extension_length: float = Field(
        default=0.0, description="DIMEXE, dimension line overshoot past extension lines (44)"
    )
    # Multiplicative, must never default to 0
    scale: float = Field(default=1.0, description="DIMSCALE, overall scale factor (40)")


class Block(DrawingModel):
    """Named, reusable entity collection referenced by Inserts."""

    name: str
    entities: list[Entity] = Field(default_factory=list, description="In drawing order")


class Document(DrawingModel):
    """
    Parsed DXF drawing.

    Built once by the parser and read-only afterwards. Blocks and dimension
    styles are keyed by upper-cased name.
    """

    blocks: dict[str, Block] = Field(default_factory=dict)
    entities: list[Entity] = Field(default_factory=list)
    dim_styles: dict[str, DimStyle] = Field(default_factory=dict)

    def block(self, name: str) -> Optional[Block]:
        """Look up a block by (case-insensitive) name."""
        return self.blocks.get(name.strip().upper())

    def block_for(self, insert: Insert) -> Optional[Block]:
        """Block referenced by an Insert, None if undefined."""
        return self.block(insert.block_name)

    def dim_style(self, name: str) -> Optional[DimStyle]:
        """Look up a dimension style by (case-insensitive) name."""
        return self.dim_styles.get(name.strip().upper())

    def extension_length(self, dimension: Dimension) -> float:
        """Scaled extension length for a dimension's style, 0 if unknown."""
        style = self.dim_style(dimension.style_name)
        if style is None:
            return 0.0
        return style.extension_length * style.scale

    def entities_of_type(self, type_name: str) -> list[Entity]:
        """Top-level entities with the given DXF type name."""
        return [e for e in self.entities if e.entity_type == type_name]
