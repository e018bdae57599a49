"""Clustering Stage - Merge scattered outline fragments into window boxes.

Window outlines are drawn as many short lines and polylines. Fragments
closer than a gap tolerance are unioned until no two boxes are within
tolerance of each other.
"""

from typing import Sequence

from dxfwin.models import BBox, Point


def is_separate(a: BBox, b: BBox, gap: float) -> bool:
    """True when the boxes do not touch even after padding by ``gap``."""
    return (
        a.max.x + gap < b.min.x
        or a.min.x - gap > b.max.x
        or a.max.y + gap < b.min.y
        or a.min.y - gap > b.max.y
    )


def in_box(box: BBox, point: Point) -> bool:
    """XY containment, edges inclusive."""
    return box.min.x <= point.x <= box.max.x and box.min.y <= point.y <= box.max.y


def merge_boxes(boxes: Sequence[BBox], gap: float) -> list[BBox]:
    """Union boxes within ``gap`` of each other until nothing changes.

    Each pass greedily grows an accumulator from every not yet visited box
    over all later unvisited boxes it touches. Passes repeat until one
    performs no union.
    """
    boxes = list(boxes)
    if len(boxes) < 2:
        return boxes

    while True:
        changed = False
        merged: list[BBox] = []
        visited = [False] * len(boxes)

        for i, box in enumerate(boxes):
            if visited[i]:
                continue
            visited[i] = True
            current = box
            for j in range(i + 1, len(boxes)):
                if not visited[j] and not is_separate(current, boxes[j], gap):
                    current = current.union(boxes[j])
                    visited[j] = True
                    changed = True
            merged.append(current)

        boxes = merged
        if not changed:
            return boxes
