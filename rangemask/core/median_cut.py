# Copyright (c) 2026 Coriro
# SPDX-License-Identifier: MIT

"""
Median-cut palette quantization.

Recursive bucket splitting: the bucket with the most distinct colors is
sorted along its widest channel and cut in half, until there are
max_colors buckets or no bucket holds more than one color.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray
from loguru import logger

from rangemask.schema import PixelBuffer, QuantizationResult, RGBColor
from rangemask.core.palette import build_result, tally_colors, weighted_average


def _widest_channel(rgb: NDArray[np.int64]) -> int:
    """Channel (0=r, 1=g, 2=b) with the largest value range; r wins ties, then g."""
    ranges = rgb.max(axis=0) - rgb.min(axis=0)
    return int(np.argmax(ranges))


def split_bucket(
    bucket: NDArray[np.int64],
    rgb: NDArray[np.int64],
) -> tuple[NDArray[np.int64], NDArray[np.int64]]:
    """
    Split a bucket of tally indices at its median along the widest channel.

    The sort is stable, so colors with equal channel values keep their
    tally order.
    """
    channel = _widest_channel(rgb[bucket])
    order = np.argsort(rgb[bucket, channel], kind="stable")
    ordered = bucket[order]
    mid = len(ordered) // 2
    return ordered[:mid], ordered[mid:]


class MedianCutQuantizer:
    """Median-cut quantizer; the palette never exceeds max_colors."""

    def __init__(self, max_colors: int = 256):
        if max_colors < 1:
            raise ValueError(f"max_colors must be >= 1, got {max_colors}")
        self.max_colors = max_colors

    def quantize(self, pixels: PixelBuffer) -> QuantizationResult:
        """
        Reduce the image's colors to at most max_colors entries.

        Args:
            pixels: RGBA pixel buffer (alpha ignored)

        Returns:
            QuantizationResult; an empty image yields an empty palette
        """
        tally = tally_colors(pixels)
        if len(tally) == 0:
            return build_result(tally, [])

        if len(tally) <= self.max_colors:
            palette = [
                RGBColor(r=r, g=g, b=b, count=n)
                for (r, g, b), n in zip(tally.rgb.tolist(), tally.counts.tolist())
            ]
            return build_result(tally, palette)

        buckets: list[NDArray[np.int64]] = [np.arange(len(tally), dtype=np.int64)]
        while len(buckets) < self.max_colors:
            sizes = [len(b) for b in buckets]
            largest = int(np.argmax(sizes))
            if sizes[largest] <= 1:
                break
            lower, upper = split_bucket(buckets[largest], tally.rgb)
            buckets[largest] = lower
            buckets.append(upper)

        logger.debug(f"Median cut: {len(tally)} colors → {len(buckets)} buckets")

        palette = [
            weighted_average(tally.rgb[b], tally.counts[b]) for b in buckets if len(b) > 0
        ]
        return build_result(tally, palette)
