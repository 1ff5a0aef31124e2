# Copyright (c) 2026 Coriro
# SPDX-License-Identifier: MIT

"""Tests for the median-cut quantizer."""

import numpy as np
import pytest

from rangemask.schema import PixelBuffer
from rangemask.core.median_cut import MedianCutQuantizer, split_bucket
from rangemask.core.palette import tally_colors


def _random_image(height=32, width=32, seed=0):
    rng = np.random.RandomState(seed)
    return PixelBuffer.from_array(rng.randint(0, 256, size=(height, width, 3)).astype(np.uint8))


class TestMedianCutBasics:

    def test_empty_image(self):
        pixels = PixelBuffer(data=np.zeros(0, dtype=np.uint8), width=0, height=0)
        result = MedianCutQuantizer(8).quantize(pixels)
        assert result.palette == ()
        assert result.original_colors == 0

    def test_few_colors_kept_in_first_seen_order(self):
        img = np.array([[[9, 9, 9], [200, 0, 0], [9, 9, 9], [0, 0, 200]]], dtype=np.uint8)
        result = MedianCutQuantizer(8).quantize(PixelBuffer.from_array(img))
        assert [c.key for c in result.palette] == [(9, 9, 9), (200, 0, 0), (0, 0, 200)]
        assert [c.count for c in result.palette] == [2, 1, 1]

    def test_single_bucket_is_weighted_average(self):
        img = np.array([[[0, 0, 0], [0, 0, 0], [0, 0, 0], [255, 255, 255]]], dtype=np.uint8)
        result = MedianCutQuantizer(1).quantize(PixelBuffer.from_array(img))
        assert len(result.palette) == 1
        # 255 / 4 = 63.75
        assert result.palette[0].key == (64, 64, 64)
        assert result.palette[0].count == 4

    def test_invalid_max_colors(self):
        with pytest.raises(ValueError):
            MedianCutQuantizer(0)


class TestMedianCutProperties:

    @pytest.mark.parametrize("max_colors", [1, 2, 7, 16, 64])
    def test_palette_never_exceeds_max(self, max_colors):
        result = MedianCutQuantizer(max_colors).quantize(_random_image(seed=max_colors))
        assert 1 <= result.total_colors <= max_colors

    @pytest.mark.parametrize("max_colors", [3, 16])
    def test_frequency_conservation(self, max_colors):
        pixels = _random_image(seed=4)
        result = MedianCutQuantizer(max_colors).quantize(pixels)
        assert sum(c.count for c in result.palette) == pixels.pixel_count

    def test_reaches_max_with_many_colors(self):
        result = MedianCutQuantizer(16).quantize(_random_image(seed=8))
        assert result.total_colors == 16

    def test_color_map_is_total_and_nearest(self):
        pixels = _random_image(10, 10, seed=6)
        result = MedianCutQuantizer(12).quantize(pixels)
        tally = tally_colors(pixels)
        assert len(result.color_map) == len(tally)
        channels = np.array([[c.r, c.g, c.b] for c in result.palette])
        for key, mapped in result.color_map.items():
            dists = ((channels - np.array(key)) ** 2).sum(axis=1)
            assert mapped is result.palette[int(np.argmin(dists))]


class TestSplitBucket:

    def test_splits_along_widest_channel(self):
        rgb = np.array([
            [10, 200, 5],
            [12, 0, 6],
            [11, 100, 7],
            [13, 50, 8],
        ], dtype=np.int64)
        lower, upper = split_bucket(np.arange(4), rgb)
        # Green has the widest range: sorted by g → 0, 50, 100, 200
        assert lower.tolist() == [1, 3]
        assert upper.tolist() == [2, 0]

    def test_odd_bucket_puts_extra_in_upper_half(self):
        rgb = np.array([[0, 0, 0], [50, 0, 0], [100, 0, 0]], dtype=np.int64)
        lower, upper = split_bucket(np.arange(3), rgb)
        assert len(lower) == 1
        assert len(upper) == 2
