# Copyright (c) 2026 Coriro
# SPDX-License-Identifier: MIT

"""
Octree-style palette quantization.

The tree is a mean-centroid 8-way space partition, not a fixed bit-plane
octree: a leaf splits by comparing each of its colors against the mean
R/G/B of the leaf, giving a 3-bit child index
(bit 0: r > mean, bit 1: g > mean, bit 2: b > mean).

Phases:
1. Grow: all distinct colors start in a single root leaf; the leaf with
   the most colors is split until there are at least max_colors leaves.
2. Reduce: while there are more than max_colors leaves, the smallest
   mergeable leaf is folded back into its parent.
3. Minimum palette: fewer than MIN_PALETTE_SIZE leaves forces further
   splits, then synthetic entries if no leaf can split.

Nodes live in an arena (a list) and refer to each other by index.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional, Union

import numpy as np
from numpy.typing import NDArray
from loguru import logger

from rangemask.schema import PixelBuffer, QuantizationResult, RGBColor
from rangemask.core.palette import ColorTally, build_result, tally_colors, weighted_average


# Fixed engine minimum, independent of the requested max_colors
MIN_PALETTE_SIZE = 8

# Channel offsets for synthetic palette entries, cycled by entry number
_SYNTHETIC_STEPS = (30, 40, 50)


@dataclass
class _Leaf:
    parent: Optional[int]
    colors: NDArray[np.int64]  # indices into the tally


@dataclass
class _Internal:
    parent: Optional[int]
    children: list[Optional[int]]


_Node = Union[_Leaf, _Internal]


def _child_index(rgb: NDArray[np.int64], mean: NDArray[np.float64]) -> NDArray[np.int64]:
    """3-bit child slot of each color relative to the mean color."""
    above = rgb > mean
    return (
        above[:, 0].astype(np.int64)
        | (above[:, 1].astype(np.int64) << 1)
        | (above[:, 2].astype(np.int64) << 2)
    )


class ColorTree:
    """
    Mean-centroid partition tree over a color tally.

    Node 0 is the root. Collapsed subtrees leave dead (None) slots in the
    arena; ids are never reused within one tree.
    """

    def __init__(self, tally: ColorTally):
        self.tally = tally
        self.nodes: list[Optional[_Node]] = [
            _Leaf(parent=None, colors=np.arange(len(tally), dtype=np.int64))
        ]
        self.leaf_count = 1

    # -------------------------------------------------------------------------
    # Traversal
    # -------------------------------------------------------------------------

    def leaves(self) -> Iterator[int]:
        """Leaf ids in depth-first, child-slot order."""
        stack = [0]
        while stack:
            node_id = stack.pop()
            node = self.nodes[node_id]
            if isinstance(node, _Leaf):
                yield node_id
            else:
                for child in reversed(node.children):
                    if child is not None:
                        stack.append(child)

    def leaf_size(self, node_id: int) -> int:
        return len(self.nodes[node_id].colors)

    # -------------------------------------------------------------------------
    # Split / merge
    # -------------------------------------------------------------------------

    def split(self, node_id: int) -> int:
        """
        Split a leaf into up to 8 children around its mean color.

        Returns the number of children created. Leaves with fewer than two
        colors are left alone.
        """
        leaf = self.nodes[node_id]
        if not isinstance(leaf, _Leaf) or len(leaf.colors) <= 1:
            return 0

        rgb = self.tally.rgb[leaf.colors]
        slots = _child_index(rgb, rgb.mean(axis=0))

        children: list[Optional[int]] = [None] * 8
        for slot in np.unique(slots).tolist():
            child_id = len(self.nodes)
            self.nodes.append(_Leaf(parent=node_id, colors=leaf.colors[slots == slot]))
            children[slot] = child_id

        self.nodes[node_id] = _Internal(parent=leaf.parent, children=children)
        created = sum(1 for c in children if c is not None)
        self.leaf_count += created - 1
        return created

    def collapse(self, node_id: int) -> None:
        """Fold every (leaf) child of an internal node back into it."""
        node = self.nodes[node_id]
        child_ids = [c for c in node.children if c is not None]
        colors = np.concatenate([self.nodes[c].colors for c in child_ids])
        for c in child_ids:
            self.nodes[c] = None
        self.nodes[node_id] = _Leaf(parent=node.parent, colors=colors)
        self.leaf_count -= len(child_ids) - 1

    def _is_mergeable(self, leaf_id: int) -> bool:
        """A leaf can merge when it has a parent whose children are all leaves."""
        parent_id = self.nodes[leaf_id].parent
        if parent_id is None:
            return False
        parent = self.nodes[parent_id]
        return all(
            isinstance(self.nodes[c], _Leaf) for c in parent.children if c is not None
        )

    # -------------------------------------------------------------------------
    # Phases
    # -------------------------------------------------------------------------

    def largest_splittable_leaf(self) -> Optional[int]:
        """Leaf with the most colors (> 1); first in traversal order on ties."""
        best = None
        best_size = 1
        for leaf_id in self.leaves():
            size = self.leaf_size(leaf_id)
            if size > best_size:
                best = leaf_id
                best_size = size
        return best

    def smallest_mergeable_leaf(self) -> Optional[int]:
        """Mergeable leaf with the fewest colors, searched across the whole tree."""
        best = None
        best_size = None
        for leaf_id in self.leaves():
            if not self._is_mergeable(leaf_id):
                continue
            size = self.leaf_size(leaf_id)
            if best_size is None or size < best_size:
                best = leaf_id
                best_size = size
        return best

    def grow(self, target: int) -> None:
        """Split the largest leaf until there are at least `target` leaves."""
        while self.leaf_count < target:
            leaf_id = self.largest_splittable_leaf()
            if leaf_id is None:
                break
            self.split(leaf_id)

    def reduce(self, target: int) -> None:
        """Merge the smallest leaves until there are at most `target` leaves."""
        while self.leaf_count > target:
            leaf_id = self.smallest_mergeable_leaf()
            if leaf_id is None:
                break
            self.collapse(self.nodes[leaf_id].parent)

    def palette(self) -> list[RGBColor]:
        """Weighted average color of every leaf."""
        result = []
        for leaf_id in self.leaves():
            idx = self.nodes[leaf_id].colors
            if len(idx) == 0:
                continue
            result.append(weighted_average(self.tally.rgb[idx], self.tally.counts[idx]))
        return result


def synthesize_colors(palette: list[RGBColor], count: int) -> list[RGBColor]:
    """
    Derive `count` extra palette entries from existing ones.

    Each entry offsets a base color by fixed per-channel steps, stepping
    down instead of up where the channel would pass 255. Synthetic entries
    cover no pixels (count 0).

    This is a padding heuristic: the offsets are unrelated to image content.
    """
    extra = []
    for i in range(count):
        base = palette[i % len(palette)]
        step = i + 1
        channels = []
        for value, unit in zip((base.r, base.g, base.b), _SYNTHETIC_STEPS):
            offset = (step * unit) % 100
            channels.append(value + offset if value + offset <= 255 else value - offset)
        extra.append(RGBColor(r=channels[0], g=channels[1], b=channels[2], count=0))
    return extra


class OctreeQuantizer:
    """
    Octree-style quantizer.

    The palette has at least MIN_PALETTE_SIZE entries for any non-empty
    image, even when max_colors is smaller.
    """

    def __init__(self, max_colors: int = 256):
        if max_colors < 1:
            raise ValueError(f"max_colors must be >= 1, got {max_colors}")
        self.max_colors = max_colors

    def quantize(self, pixels: PixelBuffer) -> QuantizationResult:
        """
        Reduce the image's colors to a bounded palette.

        Args:
            pixels: RGBA pixel buffer (alpha ignored)

        Returns:
            QuantizationResult; an empty image yields an empty palette
        """
        tally = tally_colors(pixels)
        if len(tally) == 0:
            return build_result(tally, [])

        tree = ColorTree(tally)
        tree.grow(self.max_colors)
        tree.reduce(self.max_colors)
        logger.debug(
            f"Octree: {len(tally)} colors → {tree.leaf_count} leaves (target {self.max_colors})"
        )

        if tree.leaf_count < MIN_PALETTE_SIZE:
            tree.grow(MIN_PALETTE_SIZE)

        palette = tree.palette()
        if len(palette) < MIN_PALETTE_SIZE:
            missing = MIN_PALETTE_SIZE - len(palette)
            logger.debug(f"Octree: padding palette with {missing} synthetic colors")
            palette.extend(synthesize_colors(palette, missing))

        return build_result(tally, palette)
