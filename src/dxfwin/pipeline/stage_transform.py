"""Transform Stage - Resolve block-local geometry into world coordinates.

An Insert maps block-local coordinates to its parent space by
scale (per axis) -> rotate about Z -> translate. Nested inserts are
flattened by composing these maps with ``combine_inserts``.
"""

import logging
import math
from typing import Optional

import numpy as np

from dxfwin.models import BBox, Document, Entity, Insert, Point

logger = logging.getLogger(__name__)


def _rotation(insert: Insert) -> tuple[float, float]:
    rad = math.radians(insert.rotation)
    return math.cos(rad), math.sin(rad)


def transform_point(point: Point, insert: Insert) -> Point:
    """Map a block-local point into the insert's parent space."""
    cos, sin = _rotation(insert)

    # Scale
    tx = point.x * insert.scale.x
    ty = point.y * insert.scale.y
    tz = point.z * insert.scale.z

    # Rotate about Z, then translate
    return Point(
        x=tx * cos - ty * sin + insert.insertion_point.x,
        y=tx * sin + ty * cos + insert.insertion_point.y,
        z=tz + insert.insertion_point.z,
    )


def transform_bbox(local: BBox, insert: Insert) -> BBox:
    """Map a block-local box into the insert's parent space.

    All 8 corners are transformed because rotation does not preserve
    axis alignment; the result is the axis-aligned box around them.
    """
    cos, sin = _rotation(insert)

    corners = np.array([(p.x, p.y, p.z) for p in local.corners()], dtype=float)
    scaled = corners * np.array([insert.scale.x, insert.scale.y, insert.scale.z])

    world = np.empty_like(scaled)
    world[:, 0] = scaled[:, 0] * cos - scaled[:, 1] * sin + insert.insertion_point.x
    world[:, 1] = scaled[:, 0] * sin + scaled[:, 1] * cos + insert.insertion_point.y
    world[:, 2] = scaled[:, 2] + insert.insertion_point.z

    lo, hi = world.min(axis=0), world.max(axis=0)
    return BBox(
        min=Point(x=float(lo[0]), y=float(lo[1]), z=float(lo[2])),
        max=Point(x=float(hi[0]), y=float(hi[1]), z=float(hi[2])),
    )


def combine_inserts(parent: Insert, child: Insert) -> Insert:
    """Synthetic Insert placing ``child``'s block directly in ``parent``'s parent space.

    Rotations add, scales multiply per axis and the child's insertion point
    is mapped through the parent transform.
    """
    return Insert(
        block_name=child.block_name,
        layer=child.layer,
        rotation=parent.rotation + child.rotation,
        scale=Point(
            x=parent.scale.x * child.scale.x,
            y=parent.scale.y * child.scale.y,
            z=parent.scale.z * child.scale.z,
        ),
        insertion_point=transform_point(child.insertion_point, parent),
    )


def collect_layer_boxes(
    doc: Document,
    layer: str,
    entity: Optional[Entity],
    parent: Optional[Insert] = None,
    _chain: tuple[str, ...] = (),
) -> list[BBox]:
    """Collect world boxes of every entity on ``layer`` below ``entity``.

    Leaf entities on the layer contribute their local box transformed by
    the accumulated insert chain. Inserts are followed into their blocks;
    references to undefined blocks contribute nothing.

    Args:
        doc: Parsed document providing block definitions.
        layer: Target layer name, e.g. 'PJ'.
        entity: Entity to walk.
        parent: Composed transform of the enclosing inserts, None at top level.

    Returns:
        Boxes in world coordinates, in drawing order.
    """
    if entity is None:
        return []

    if not isinstance(entity, Insert):
        if entity.layer != layer:
            return []
        local = entity.bbox()
        return [local if parent is None else transform_bbox(local, parent)]

    block = doc.block_for(entity)
    if block is None:
        logger.debug("Insert references undefined block %r", entity.block_name)
        return []
    if block.name in _chain:
        logger.warning("Block %r references itself, skipping", block.name)
        return []

    transform = entity if parent is None else combine_inserts(parent, entity)
    chain = _chain + (block.name,)

    boxes: list[BBox] = []
    for child in block.entities:
        boxes.extend(collect_layer_boxes(doc, layer, child, transform, chain))
    return boxes


def world_bbox_of(doc: Document, entity: Entity) -> BBox:
    """World box of an entity, used for page frame inserts.

    For an Insert this is the union of the direct children of its block
    (grandchild blocks are not entered), transformed once by the insert.
    Undefined or empty blocks give the insertion point box.
    """
    if not isinstance(entity, Insert):
        return entity.bbox()

    block = doc.block_for(entity)
    if block is None or not block.entities:
        return entity.bbox()

    boxes = [child.bbox() for child in block.entities]
    local = BBox(
        min=Point(x=min(b.min.x for b in boxes), y=min(b.min.y for b in boxes)),
        max=Point(x=max(b.max.x for b in boxes), y=max(b.max.y for b in boxes)),
    )
    return transform_bbox(local, entity)
