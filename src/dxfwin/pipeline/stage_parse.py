"""Document Parsing Stage - Build a Document from the DXF tag stream.

Dispatches on top-level sections:
- TABLES: only the DIMSTYLE table is read
- BLOCKS: named block definitions
- ENTITIES: top-level drawing entities

Every other section is skipped. Entity types missing from the registry are
skipped as well; only a malformed tag stream fails the parse.
"""

import logging
from pathlib import Path
from typing import IO, Iterator, Optional, Union

from dxfwin.config import settings
from dxfwin.models import Block, DimStyle, Document, Entity, EntityRegistry, default_registry

from .stage_scan import ScanError, TagScanner

logger = logging.getLogger(__name__)


class DocumentParseError(ValueError):
    """Raised when a drawing cannot be parsed."""


class DocumentParser:
    """Section-level state machine driving the scanner and entity parsers."""

    def __init__(self, scanner: TagScanner, registry: Optional[EntityRegistry] = None):
        """Initialize the parser.

        Args:
            scanner: Tag scanner over the drawing stream.
            registry: Entity constructors by type name (default: all modeled types).
        """
        self.scanner = scanner
        self.registry = registry or default_registry()
        self._sections = {
            "TABLES": self._parse_tables,
            "BLOCKS": self._parse_blocks,
            "ENTITIES": self._parse_entities,
        }
        self.skipped: dict[str, int] = {}

    def parse(self) -> Document:
        """Parse the whole stream.

        Returns:
            Populated Document.

        Raises:
            DocumentParseError: If the tag stream is malformed or truncated.
        """
        document = Document()
        scanner = self.scanner

        while scanner.next():
            if not scanner.last_tag.is_marker("SECTION"):
                continue
            if not scanner.next():
                break
            name = scanner.last_tag.as_string().upper()
            handler = self._sections.get(name)
            if handler is not None:
                logger.debug("Parsing section %s", name)
                handler(document)

        if scanner.err is not None:
            raise DocumentParseError(f"Failed to parse drawing: {scanner.err}") from scanner.err

        if self.skipped:
            logger.debug("Skipped unmodeled entity types: %s", self.skipped)
        logger.info(
            "Parsed %d entities, %d blocks, %d dimension styles",
            len(document.entities),
            len(document.blocks),
            len(document.dim_styles),
        )
        return document

    def _iter_entities(self, *stop_markers: str) -> Iterator[Entity]:
        """Parse entities from the current tag until a stop marker.

        Leaves the scanner on the stop marker (or at the end of the stream).
        """
        scanner = self.scanner
        while True:
            tag = scanner.last_tag
            if tag.code == 0:
                if any(tag.is_marker(marker) for marker in stop_markers):
                    return
                entity = self.registry.create(tag.value)
                if entity is not None:
                    entity.parse(scanner, self.registry)
                    yield entity
                    if scanner.done:
                        return
                    continue
                type_name = tag.as_string()
                self.skipped[type_name] = self.skipped.get(type_name, 0) + 1
            if not scanner.next():
                return

    def _parse_entities(self, document: Document) -> None:
        document.entities.extend(self._iter_entities("ENDSEC"))

    def _parse_blocks(self, document: Document) -> None:
        scanner = self.scanner
        while scanner.next():
            if scanner.last_tag.is_marker("ENDSEC"):
                return
            if not scanner.last_tag.is_marker("BLOCK"):
                continue

            block = self._parse_block()
            if block.name:
                document.blocks[block.name] = block
            else:
                logger.debug("Dropping unnamed block with %d entities", len(block.entities))

            if scanner.last_tag.is_marker("ENDSEC"):
                return

    def _parse_block(self) -> Block:
        """Parse one block definition, starting on its BLOCK tag."""
        scanner = self.scanner
        name = ""
        # Block header: the first name code wins
        while scanner.next() and scanner.last_tag.code != 0:
            if scanner.last_tag.code == 2 and not name:
                name = scanner.last_tag.as_string().upper()

        block = Block(name=name)
        if not scanner.done:
            block.entities.extend(self._iter_entities("ENDBLK", "ENDSEC"))
        return block

    def _parse_tables(self, document: Document) -> None:
        scanner = self.scanner
        while scanner.next():
            tag = scanner.last_tag
            if tag.is_marker("ENDSEC"):
                return
            if not tag.is_marker("TABLE"):
                continue
            if not scanner.next():
                return
            if scanner.last_tag.as_string().upper() == "DIMSTYLE":
                self._parse_dim_styles(document)
                if scanner.last_tag.is_marker("ENDSEC"):
                    return

    def _parse_dim_styles(self, document: Document) -> None:
        """Parse DIMSTYLE records until ENDTAB."""
        scanner = self.scanner
        while True:
            tag = scanner.last_tag
            if tag.is_marker("ENDTAB") or tag.is_marker("ENDSEC"):
                return
            if tag.is_marker("DIMSTYLE"):
                style = self._parse_dim_style()
                if style.name:
                    document.dim_styles[style.name] = style
                if scanner.done:
                    return
                continue
            if not scanner.next():
                return

    def _parse_dim_style(self) -> DimStyle:
        """Parse one DIMSTYLE record, leaving the scanner on the next code 0."""
        scanner = self.scanner
        style = DimStyle(name="")
        while scanner.next():
            tag = scanner.last_tag
            if tag.code == 0:
                break
            if tag.code == 2:
                style.name = tag.as_string().upper()
            elif tag.code == 271:
                style.precision = tag.as_int()
            elif tag.code == 44:
                style.extension_length = tag.as_float()
            elif tag.code == 40:
                style.scale = tag.as_float()
        return style


def parse_document(
    stream: Union[IO[str], IO[bytes]],
    encoding: Optional[str] = None,
    registry: Optional[EntityRegistry] = None,
) -> Document:
    """Parse a DXF stream into a Document.

    Args:
        stream: Text or binary stream.
        encoding: Encoding for binary streams (default from settings).
        registry: Entity registry (default: all modeled types).

    Raises:
        DocumentParseError: If the tag stream is malformed or truncated.
    """
    scanner = TagScanner(stream, encoding=encoding or settings.encoding)
    return DocumentParser(scanner, registry=registry).parse()


def load_document(
    dxf_path: Union[str, Path],
    encoding: Optional[str] = None,
    registry: Optional[EntityRegistry] = None,
) -> Document:
    """Open and parse a DXF file.

    Raises:
        FileNotFoundError: If the file does not exist.
        DocumentParseError: If the tag stream is malformed or truncated.
    """
    dxf_path = Path(dxf_path)
    if not dxf_path.exists():
        raise FileNotFoundError(f"DXF not found: {dxf_path}")

    logger.info("Loading %s", dxf_path)
    with open(dxf_path, "rb") as f:
        return parse_document(f, encoding=encoding, registry=registry)


__all__ = [
    "DocumentParseError",
    "DocumentParser",
    "ScanError",
    "load_document",
    "parse_document",
]
