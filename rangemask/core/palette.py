# Copyright (c) 2026 Coriro
# SPDX-License-Identifier: MIT

"""
Shared palette machinery for the quantizers.

Both quantizers start from the same color tally and finish with the same
nearest-palette mapping; only the reduction in between differs.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from rangemask.schema import PixelBuffer, QuantizationResult, RGBColor
from rangemask.core.colorspace import round_half_up


@dataclass(frozen=True, eq=False)
class ColorTally:
    """
    Distinct colors of an image with their pixel counts.

    Colors are kept in first-seen (row-major) order.

    Attributes:
        rgb: (K, 3) int64 array of distinct colors
        counts: (K,) int64 array of pixel counts
    """
    rgb: NDArray[np.int64]
    counts: NDArray[np.int64]

    def __len__(self) -> int:
        return len(self.counts)

    @property
    def total_pixels(self) -> int:
        return int(self.counts.sum())


def tally_colors(pixels: PixelBuffer) -> ColorTally:
    """
    Count every exact (r, g, b) in the image; alpha is ignored.
    """
    rgb = pixels.rgb.astype(np.int64)
    if len(rgb) == 0:
        return ColorTally(
            rgb=np.empty((0, 3), dtype=np.int64),
            counts=np.empty(0, dtype=np.int64),
        )

    # Pack to a single integer for fast counting
    keys = (rgb[:, 0] << 16) | (rgb[:, 1] << 8) | rgb[:, 2]
    unique_keys, first_index, counts = np.unique(keys, return_index=True, return_counts=True)

    order = np.argsort(first_index, kind="stable")
    unique_keys = unique_keys[order]
    counts = counts[order]

    colors = np.stack(
        [(unique_keys >> 16) & 0xFF, (unique_keys >> 8) & 0xFF, unique_keys & 0xFF],
        axis=1,
    )
    return ColorTally(rgb=colors.astype(np.int64), counts=counts.astype(np.int64))


def weighted_average(rgb: NDArray[np.int64], counts: NDArray[np.int64]) -> RGBColor:
    """
    Frequency-weighted average of a group of colors.

    The returned color's count is the group's total pixel count.
    """
    total = int(counts.sum())
    if total == 0:
        return RGBColor(0, 0, 0, 0)
    mean = (rgb * counts[:, np.newaxis]).sum(axis=0) / total
    r, g, b = (int(v) for v in np.clip(round_half_up(mean), 0, 255))
    return RGBColor(r=r, g=g, b=b, count=total)


def palette_to_array(palette) -> NDArray[np.int64]:
    """(P, 3) array of palette channels."""
    if len(palette) == 0:
        return np.empty((0, 3), dtype=np.int64)
    return np.array([[c.r, c.g, c.b] for c in palette], dtype=np.int64)


def nearest_palette_indices(
    rgb: NDArray[np.int64],
    palette: NDArray[np.int64],
) -> NDArray[np.int64]:
    """
    Index of the nearest palette entry for each color.

    Distance is squared Euclidean in RGB; on ties the earliest palette
    entry wins.
    """
    best = np.zeros(len(rgb), dtype=np.int64)
    best_dist = np.full(len(rgb), np.iinfo(np.int64).max, dtype=np.int64)
    # One palette entry at a time keeps memory at O(K)
    for i, entry in enumerate(palette):
        dist = ((rgb - entry) ** 2).sum(axis=1)
        closer = dist < best_dist
        best[closer] = i
        best_dist[closer] = dist[closer]
    return best


def build_result(tally: ColorTally, palette: list[RGBColor]) -> QuantizationResult:
    """Assemble a QuantizationResult, mapping every tallied color to the palette."""
    color_map: dict[tuple[int, int, int], RGBColor] = {}
    if palette and len(tally):
        indices = nearest_palette_indices(tally.rgb, palette_to_array(palette))
        for (r, g, b), idx in zip(tally.rgb.tolist(), indices.tolist()):
            color_map[(r, g, b)] = palette[idx]

    return QuantizationResult(
        palette=tuple(palette),
        color_map=color_map,
        total_colors=len(palette),
        original_colors=len(tally),
    )


def color_distance_sq(a: RGBColor, b: RGBColor) -> int:
    """Squared Euclidean RGB distance between two colors."""
    dr = a.r - b.r
    dg = a.g - b.g
    db = a.b - b.b
    return dr * dr + dg * dg + db * db
