# Copyright (c) 2026 Coriro
# SPDX-License-Identifier: MIT

"""Tests for the adjustment range mask manager."""

import asyncio
import math

import numpy as np
import pytest

from rangemask import AdjustmentRangeMaskManager, generate_adjustment_range_mask
from rangemask.schema import (
    AdjustmentRangeOptions,
    BlendMode,
    HSLRange,
    MaskOptions,
    PixelBuffer,
    QuantizationAlgorithm,
    RGBColor,
)
from rangemask.core.manager import auto_select_colors, create_quantizer
from rangemask.core.median_cut import MedianCutQuantizer
from rangemask.core.octree import OctreeQuantizer
from rangemask.core.presets import PRESET_NAMES, create_preset


RED = RGBColor(255, 0, 0)
BLUE = RGBColor(0, 0, 255)

RED_RANGE = HSLRange(hue=0.0, hue_tolerance=30.0, saturation=100.0, saturation_tolerance=30.0,
                     lightness=50.0, lightness_tolerance=30.0, feather=0.0)


def _red_blue(height=4, width=8):
    """Left half red, right half blue."""
    img = np.zeros((height, width, 3), dtype=np.uint8)
    img[:, : width // 2] = (255, 0, 0)
    img[:, width // 2 :] = (0, 0, 255)
    return PixelBuffer.from_array(img)


def _left_half(pixels):
    left = np.zeros((pixels.height, pixels.width), dtype=bool)
    left[:, : pixels.width // 2] = True
    return left.reshape(-1)


def _random_image(height=12, width=12, seed=0):
    rng = np.random.RandomState(seed)
    return PixelBuffer.from_array(rng.randint(0, 256, size=(height, width, 3)).astype(np.uint8))


class TestOptions:

    def test_defaults(self):
        opts = AdjustmentRangeMaskManager().get_options()
        assert opts.quantization_algorithm is QuantizationAlgorithm.OCTREE
        assert opts.max_colors == 64
        assert opts.blend_mode is BlendMode.MAX
        assert opts.mask_options == MaskOptions(smooth=True, smooth_radius=1)
        assert opts.color_tolerance == 30.0

    def test_constructor_overrides(self):
        manager = AdjustmentRangeMaskManager(max_colors=16, blend_mode="min")
        assert manager.get_options().max_colors == 16
        assert manager.get_options().blend_mode is BlendMode.MIN

    def test_update_merges_shallowly(self):
        manager = AdjustmentRangeMaskManager()
        before = manager.get_options()
        after = manager.update_options(max_colors=32)
        assert after.max_colors == 32
        assert after.hsl_range == before.hsl_range
        assert after.mask_options == before.mask_options
        assert before.max_colors == 64

    def test_update_accepts_strings(self):
        manager = AdjustmentRangeMaskManager()
        opts = manager.update_options({"quantization_algorithm": "median-cut", "blend_mode": "add"})
        assert opts.quantization_algorithm is QuantizationAlgorithm.MEDIAN_CUT
        assert opts.blend_mode is BlendMode.ADD

    def test_keywords_win_over_dict(self):
        manager = AdjustmentRangeMaskManager()
        opts = manager.update_options({"max_colors": 8}, max_colors=12)
        assert opts.max_colors == 12

    def test_update_with_preset(self):
        manager = AdjustmentRangeMaskManager()
        opts = manager.update_options(create_preset("highlights"))
        assert opts.use_quantization is False
        assert opts.hsl_range.lightness == 80.0

    def test_unknown_preset_changes_nothing(self):
        manager = AdjustmentRangeMaskManager()
        before = manager.get_options()
        assert manager.update_options(create_preset("sepia")) == before

    def test_every_preset_applies(self):
        for name in PRESET_NAMES:
            opts = AdjustmentRangeMaskManager().update_options(create_preset(name))
            assert opts.use_hsl_mask

    def test_invalid_values_raise(self):
        manager = AdjustmentRangeMaskManager()
        with pytest.raises(ValueError):
            manager.update_options(blend_mode="screen")
        with pytest.raises(ValueError):
            manager.update_options(max_colors=0)
        with pytest.raises(ValueError):
            AdjustmentRangeOptions(color_tolerance=-1)

    def test_create_quantizer(self):
        assert isinstance(create_quantizer("octree", 8), OctreeQuantizer)
        assert isinstance(create_quantizer(QuantizationAlgorithm.MEDIAN_CUT, 8), MedianCutQuantizer)


class TestAutoSelectColors:

    @pytest.mark.parametrize("size,expected", [(2, 2), (8, 3), (20, 4), (64, 10), (100, 10)])
    def test_selection_size(self, size, expected):
        palette = [RGBColor(i, 0, 0, count=i) for i in range(size)]
        assert len(auto_select_colors(palette)) == expected

    def test_sorted_by_count(self):
        palette = [RGBColor(i, i, i, count=c) for i, c in enumerate([5, 50, 1, 20, 7, 9, 3, 2])]
        selected = auto_select_colors(palette)
        assert [c.count for c in selected] == [50, 20, 9]

    def test_empty_palette(self):
        assert auto_select_colors([]) == ()


class TestGenerate:

    def test_nothing_enabled_gives_zeros(self):
        pixels = _random_image()
        opts = AdjustmentRangeOptions(use_quantization=False, use_hsl_mask=False)
        result = generate_adjustment_range_mask(pixels, opts)
        assert result.mask.shape == (pixels.pixel_count,)
        assert not result.mask.any()
        assert result.quantization_result is None
        assert result.hsl_mask_result is None

    def test_quantization_without_selection_contributes_nothing(self):
        pixels = _random_image()
        opts = AdjustmentRangeOptions(use_hsl_mask=False)
        result = generate_adjustment_range_mask(pixels, opts)
        assert result.quantization_result is not None
        assert not result.mask.any()

    def test_selected_color_picks_its_region(self):
        pixels = _red_blue()
        opts = AdjustmentRangeOptions(
            use_hsl_mask=False,
            selected_colors=(RED,),
            mask_options=MaskOptions(),
        )
        result = generate_adjustment_range_mask(pixels, opts)
        left = _left_half(pixels)
        assert np.all(result.mask[left] == 255)
        assert np.all(result.mask[~left] == 0)
        assert result.statistics.mask_ratio == pytest.approx(0.5)
        assert result.statistics.selected_colors == (RED,)

    def test_hsl_only_matches_generate_mask(self):
        from rangemask.core.hsl_mask import generate_mask

        pixels = _random_image(seed=3)
        opts = AdjustmentRangeOptions(use_quantization=False, hsl_range=RED_RANGE)
        result = generate_adjustment_range_mask(pixels, opts)
        expected = generate_mask(pixels, RED_RANGE, opts.mask_options).mask
        np.testing.assert_array_equal(result.mask, expected)
        np.testing.assert_array_equal(result.hsl_mask_result.mask, expected)

    def test_max_blend_unions_selections(self):
        pixels = _red_blue()
        opts = AdjustmentRangeOptions(
            hsl_range=RED_RANGE,
            selected_colors=(BLUE,),
            mask_options=MaskOptions(),
            blend_mode="max",
        )
        result = generate_adjustment_range_mask(pixels, opts)
        assert np.all(result.mask == 255)

    def test_min_blend_intersects_selections(self):
        pixels = _red_blue()
        opts = AdjustmentRangeOptions(
            hsl_range=RED_RANGE,
            selected_colors=(BLUE,),
            mask_options=MaskOptions(),
            blend_mode=BlendMode.MIN,
        )
        result = generate_adjustment_range_mask(pixels, opts)
        assert not result.mask.any()

    def test_auto_select_stays_local(self):
        manager = AdjustmentRangeMaskManager(auto_select_colors=True, use_hsl_mask=False)
        result = manager.generate_adjustment_range_mask(_red_blue())
        assert len(result.statistics.selected_colors) == 3
        assert manager.get_options().selected_colors == ()

    def test_auto_select_covers_dominant_colors(self):
        manager = AdjustmentRangeMaskManager(
            auto_select_colors=True, use_hsl_mask=False, mask_options=MaskOptions()
        )
        result = manager.generate_adjustment_range_mask(_red_blue())
        assert np.all(result.mask == 255)

    def test_median_cut_path(self):
        manager = AdjustmentRangeMaskManager(
            quantization_algorithm="median-cut",
            max_colors=4,
            selected_colors=(RED,),
            use_hsl_mask=False,
        )
        result = manager.generate_adjustment_range_mask(_red_blue())
        assert result.quantization_result.total_colors == 2

    def test_async_matches_sync(self):
        pixels = _random_image(seed=5)
        manager = AdjustmentRangeMaskManager(hsl_range=RED_RANGE, use_quantization=False)
        sync = manager.generate_adjustment_range_mask(pixels)
        result = asyncio.run(manager.generate_adjustment_range_mask_async(pixels))
        np.testing.assert_array_equal(result.mask, sync.mask)


class TestClickHelpers:

    def test_click_selects_nearby_palette_colors(self):
        pixels = _red_blue()
        manager = AdjustmentRangeMaskManager()
        selected = manager.auto_select_colors_from_click(pixels, 0, 0)
        assert RED.key in [c.key for c in selected]
        for color in selected:
            dist = math.dist(color.key, RED.key)
            assert dist <= 30.0
        assert manager.get_options().selected_colors == selected

    def test_click_with_zero_tolerance(self):
        pixels = _red_blue()
        manager = AdjustmentRangeMaskManager()
        selected = manager.auto_select_colors_from_click(pixels, 7, 3, tolerance=0)
        assert [c.key for c in selected] == [BLUE.key]

    def test_click_outside_raises(self):
        with pytest.raises(ValueError):
            AdjustmentRangeMaskManager().auto_select_colors_from_click(_red_blue(), 8, 0)

    def test_auto_generate_hsl_range_updates_options(self):
        manager = AdjustmentRangeMaskManager()
        rng = manager.auto_generate_hsl_range(_red_blue(), 6, 1, radius=1)
        assert rng.hue == pytest.approx(240.0)
        assert manager.get_options().hsl_range == rng


class TestOutputHelpers:

    def test_export_mask_as_image_data(self):
        mask = np.array([0, 128, 255, 7], dtype=np.uint8)
        image = AdjustmentRangeMaskManager().export_mask_as_image_data(mask, 2, 2)
        assert (image.width, image.height) == (2, 2)
        np.testing.assert_array_equal(image.rgba[:, 0], mask)
        np.testing.assert_array_equal(image.rgba[:, 1], mask)
        np.testing.assert_array_equal(image.rgba[:, 2], mask)
        assert np.all(image.alpha == 255)

    def test_export_rejects_wrong_size(self):
        with pytest.raises(ValueError):
            AdjustmentRangeMaskManager().export_mask_as_image_data(np.zeros(3, dtype=np.uint8), 2, 2)

    def test_apply_mask_scales_alpha(self):
        pixels = _red_blue(1, 4)
        mask = np.array([255, 128, 0, 255], dtype=np.uint8)
        out = AdjustmentRangeMaskManager().apply_mask_to_image(pixels, mask)
        np.testing.assert_array_equal(out.alpha, [255, 128, 0, 255])
        np.testing.assert_array_equal(out.rgb, pixels.rgb)

    def test_apply_mask_with_intensity(self):
        pixels = _red_blue(1, 2)
        mask = np.full(2, 255, dtype=np.uint8)
        out = AdjustmentRangeMaskManager().apply_mask_to_image(pixels, mask, intensity=0.5)
        np.testing.assert_array_equal(out.alpha, [128, 128])

    def test_apply_leaves_input_untouched(self):
        pixels = _red_blue(1, 2)
        AdjustmentRangeMaskManager().apply_mask_to_image(pixels, np.zeros(2, dtype=np.uint8))
        assert np.all(pixels.alpha == 255)


class TestStaticHelpers:

    def test_quantized_color_blocks(self):
        blocks = AdjustmentRangeMaskManager.generate_quantized_color_blocks(_random_image(seed=9))
        assert len(blocks) >= 8

    def test_common_blocks(self):
        blocks = AdjustmentRangeMaskManager.generate_common_hsl_blocks()
        assert len(blocks) == 8
        assert blocks[0].name == "Skin tone"

    def test_create_preset_is_a_copy(self):
        preset = AdjustmentRangeMaskManager.create_preset("greens")
        preset["max_colors"] = 3
        assert "max_colors" not in create_preset("greens")
