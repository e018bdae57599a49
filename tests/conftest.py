"""Pytest configuration and fixtures."""

import io

import pytest

from dxfwin.models import Dimension, Document, Insert, Point
from dxfwin.pipeline import TagScanner, parse_document


def dxf(*pairs) -> str:
    """Render (code, value) pairs as DXF text."""
    return "".join(f"{code}\n{value}\n" for code, value in pairs)


def section(name, *pairs):
    return (("0", "SECTION"), ("2", name), *pairs, ("0", "ENDSEC"))


def line(x1, y1, x2, y2, layer="PJ"):
    return (("0", "LINE"), ("8", layer), ("10", x1), ("20", y1), ("11", x2), ("21", y2))


def insert(name, x=0.0, y=0.0, layer="0", scale=None, rotation=None):
    pairs = [("0", "INSERT"), ("8", layer), ("2", name), ("10", x), ("20", y)]
    if scale is not None:
        pairs += [("41", scale[0]), ("42", scale[1])]
    if rotation is not None:
        pairs.append(("50", rotation))
    return tuple(pairs)


def dimension(start, end, definition, angle=0.0, measurement=None, style="STANDARD", text=None, kind=32):
    """Linear dimension entity pairs (group code 70 = 32 | kind bits)."""
    if measurement is None:
        measurement = abs(end[0] - start[0]) if angle in (0, 180) else abs(end[1] - start[1])
    pairs = [
        ("0", "DIMENSION"),
        ("8", "BZ"),
        ("3", style),
        ("70", kind),
        ("10", definition[0]),
        ("20", definition[1]),
        ("11", definition[0]),
        ("21", definition[1]),
        ("13", start[0]),
        ("23", start[1]),
        ("14", end[0]),
        ("24", end[1]),
        ("42", measurement),
        ("50", angle),
    ]
    if text is not None:
        pairs.append(("1", text))
    return tuple(pairs)


def scanner_for(text: str) -> TagScanner:
    return TagScanner(io.StringIO(text))


def parse_text(text: str) -> Document:
    return parse_document(io.StringIO(text))


def make_insert(x=0.0, y=0.0, scale=(1.0, 1.0, 1.0), rotation=0.0, block_name="B") -> Insert:
    return Insert(
        block_name=block_name,
        insertion_point=Point(x=x, y=y),
        scale=Point(x=scale[0], y=scale[1], z=scale[2]),
        rotation=rotation,
    )


def make_dimension(start, end, definition, angle=0.0, text_mid=None, **fields) -> Dimension:
    return Dimension(
        measure_start=Point(x=start[0], y=start[1]),
        measure_end=Point(x=end[0], y=end[1]),
        definition_point=Point(x=definition[0], y=definition[1]),
        text_midpoint=Point(x=text_mid[0], y=text_mid[1]) if text_mid else Point(x=definition[0], y=definition[1]),
        angle=angle,
        **fields,
    )


@pytest.fixture
def window_drawing():
    """Two A4 frames side by side, each with an SC info block and windows.

    Page 1 (x 0..3000) has a 1200 x 1500 window built from four PJ lines
    inside a nested block, with a width and a height dimension.
    Page 2 (x 4000..7000) has one 900 x 600 window drawn at top level.
    """
    blocks = section(
        "BLOCKS",
        ("0", "BLOCK"), ("8", "0"), ("2", "TKA4"), ("70", "0"), ("10", "0"), ("20", "0"),
        *line(0, 0, 3000, 0, layer="0"),
        *line(3000, 0, 3000, 4000, layer="0"),
        *line(3000, 4000, 0, 4000, layer="0"),
        *line(0, 4000, 0, 0, layer="0"),
        ("0", "ENDBLK"), ("8", "0"),
        ("0", "BLOCK"), ("8", "0"), ("2", "SC"), ("70", "2"), ("10", "0"), ("20", "0"),
        *line(0, 0, 10, 0, layer="0"),
        ("0", "ENDBLK"), ("8", "0"),
        ("0", "BLOCK"), ("8", "0"), ("2", "FRAME"), ("70", "0"), ("10", "0"), ("20", "0"),
        *line(0, 0, 1200, 0),
        *line(1200, 0, 1200, 1500),
        *line(1200, 1500, 0, 1500),
        *line(0, 1500, 0, 0),
        ("0", "ENDBLK"), ("8", "0"),
        ("0", "BLOCK"), ("8", "0"), ("2", "WIN"), ("70", "0"), ("10", "0"), ("20", "0"),
        *insert("FRAME", 0, 0),
        ("0", "ENDBLK"), ("8", "0"),
    )
    entities = section(
        "ENTITIES",
        *insert("TKA4", 4000, 0),
        *insert("TKA4", 0, 0),
        ("0", "INSERT"), ("8", "0"), ("2", "SC"), ("66", "1"), ("10", "100"), ("20", "3800"),
        ("0", "ATTRIB"), ("8", "0"), ("10", "100"), ("20", "3800"), ("2", "序号"), ("1", "1"),
        ("0", "ATTRIB"), ("8", "0"), ("10", "100"), ("20", "3700"), ("2", "楼号"), ("1", "A-1"),
        ("0", "SEQEND"), ("8", "0"),
        ("0", "INSERT"), ("8", "0"), ("2", "SC"), ("66", "1"), ("10", "4100"), ("20", "3800"),
        ("0", "ATTRIB"), ("8", "0"), ("10", "4100"), ("20", "3800"), ("2", "序号"), ("1", "2"),
        ("0", "ATTRIB"), ("8", "0"), ("10", "4100"), ("20", "3700"), ("2", "楼号"), ("1", "B-2"),
        ("0", "SEQEND"), ("8", "0"),
        *insert("WIN", 500, 1000),
        *dimension((500, 1000), (1700, 1000), (500, 980), angle=0),
        *dimension((1700, 1000), (1700, 2500), (1720, 1000), angle=90),
        *line(4500, 1000, 5400, 1000),
        *line(5400, 1000, 5400, 1600),
        *line(5400, 1600, 4500, 1600),
        *line(4500, 1600, 4500, 1000),
        *dimension((4500, 1000), (5400, 1000), (4500, 975), angle=0),
        *dimension((5400, 1000), (5400, 1600), (5425, 1000), angle=90),
    )
    return dxf(*blocks, *entities, ("0", "EOF"))
