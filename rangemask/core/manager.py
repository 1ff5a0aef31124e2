# Copyright (c) 2026 Coriro
# SPDX-License-Identifier: MIT

"""
Adjustment range mask manager.

Combines palette quantization and HSL range masking into one selection
mask. The pure entry point is generate_adjustment_range_mask(pixels,
options); AdjustmentRangeMaskManager owns one options object and routes
every change through update_options().
"""

from __future__ import annotations

import asyncio
import math
from dataclasses import replace
from typing import Optional, Sequence, Union

import numpy as np
from numpy.typing import NDArray
from loguru import logger

from rangemask.schema import (
    AdjustmentRangeOptions,
    AdjustmentRangeResult,
    AdjustmentRangeStatistics,
    HSLRange,
    MaskResult,
    PixelBuffer,
    QuantizationAlgorithm,
    QuantizationResult,
    RGBColor,
)
from rangemask.core.hsl_mask import (
    auto_select_hsl_range,
    combine_masks,
    compute_mask_statistics,
    generate_mask,
    generate_mask_from_quantization,
)
from rangemask.core.image import apply_mask_to_image, export_mask_as_image_data
from rangemask.core.median_cut import MedianCutQuantizer
from rangemask.core.octree import OctreeQuantizer
from rangemask.core.palette import color_distance_sq
from rangemask.core.presets import create_preset, generate_common_hsl_blocks


# Auto-selection takes the top 20% of the palette, within these bounds
AUTO_SELECT_FRACTION = 0.2
AUTO_SELECT_MIN = 3
AUTO_SELECT_MAX = 10


def create_quantizer(
    algorithm: Union[QuantizationAlgorithm, str],
    max_colors: int,
) -> Union[OctreeQuantizer, MedianCutQuantizer]:
    """Instantiate the quantizer for an algorithm name."""
    if QuantizationAlgorithm(algorithm) is QuantizationAlgorithm.MEDIAN_CUT:
        return MedianCutQuantizer(max_colors)
    return OctreeQuantizer(max_colors)


def auto_select_colors(palette: Sequence[RGBColor]) -> tuple[RGBColor, ...]:
    """
    Most frequent palette colors.

    Takes ceil(20%) of the palette, at least 3 and at most 10 (bounded by
    the palette size), ordered by descending pixel count.
    """
    if len(palette) == 0:
        return ()
    n = max(AUTO_SELECT_MIN, min(AUTO_SELECT_MAX, math.ceil(len(palette) * AUTO_SELECT_FRACTION)))
    ranked = sorted(palette, key=lambda c: c.count, reverse=True)
    return tuple(ranked[:n])


def generate_adjustment_range_mask(
    pixels: PixelBuffer,
    options: AdjustmentRangeOptions,
) -> AdjustmentRangeResult:
    """
    Build the combined selection mask for one image.

    Steps:
    1. Quantize (if use_quantization) and mask pixels near the selected
       palette colors (auto-selected or options.selected_colors).
    2. Mask pixels inside options.hsl_range (if use_hsl_mask).
    3. Combine the collected masks with options.blend_mode; no masks
       gives an all-zero mask.

    Args:
        pixels: RGBA pixel buffer
        options: Full configuration

    Returns:
        AdjustmentRangeResult with the combined mask and intermediates
    """
    masks: list[NDArray[np.uint8]] = []
    quantization_result: Optional[QuantizationResult] = None
    hsl_mask_result: Optional[MaskResult] = None
    selected = options.selected_colors

    if options.use_quantization:
        quantizer = create_quantizer(options.quantization_algorithm, options.max_colors)
        quantization_result = quantizer.quantize(pixels)
        logger.debug(
            f"Quantized {quantization_result.original_colors} colors "
            f"to {quantization_result.total_colors} "
            f"({options.quantization_algorithm.value})"
        )

        if options.auto_select_colors:
            selected = auto_select_colors(quantization_result.palette)

        if selected:
            quantized_mask = generate_mask_from_quantization(
                pixels,
                quantization_result.palette,
                selected,
                options.mask_options,
            )
            masks.append(quantized_mask.mask)

    if options.use_hsl_mask:
        hsl_mask_result = generate_mask(pixels, options.hsl_range, options.mask_options)
        masks.append(hsl_mask_result.mask)

    final_mask = combine_masks(masks, pixels.width, pixels.height, options.blend_mode)
    stats = compute_mask_statistics(final_mask)

    logger.info(
        f"Adjustment range mask: {len(masks)} source mask(s), "
        f"{stats.masked_pixels}/{stats.total_pixels} pixels selected"
    )

    return AdjustmentRangeResult(
        mask=final_mask,
        width=pixels.width,
        height=pixels.height,
        statistics=AdjustmentRangeStatistics(
            total_pixels=stats.total_pixels,
            masked_pixels=stats.masked_pixels,
            mask_ratio=stats.mask_ratio,
            average_intensity=stats.average_intensity,
            selected_colors=tuple(selected),
        ),
        quantization_result=quantization_result,
        hsl_mask_result=hsl_mask_result,
    )


class AdjustmentRangeMaskManager:
    """
    Stateful front end over generate_adjustment_range_mask().

    Holds one AdjustmentRangeOptions. The click helpers replace the
    manager's hsl_range / selected_colors; overlapping calls on one
    instance are not serialized, so callers debounce rapid edits.
    """

    def __init__(self, options: Optional[AdjustmentRangeOptions] = None, **overrides):
        base = options or AdjustmentRangeOptions()
        self._options = replace(base, **overrides) if overrides else base

    # -------------------------------------------------------------------------
    # Options
    # -------------------------------------------------------------------------

    def get_options(self) -> AdjustmentRangeOptions:
        return self._options

    def update_options(self, changes: Optional[dict] = None, **kwargs) -> AdjustmentRangeOptions:
        """
        Shallow-merge changes into the current options.

        Accepts a partial dict (e.g. from create_preset()) and/or keyword
        arguments; keywords win on conflicts.
        """
        merged = {**(changes or {}), **kwargs}
        if merged:
            self._options = replace(self._options, **merged)
        return self._options

    # -------------------------------------------------------------------------
    # Mask generation
    # -------------------------------------------------------------------------

    def generate_adjustment_range_mask(self, pixels: PixelBuffer) -> AdjustmentRangeResult:
        return generate_adjustment_range_mask(pixels, self._options)

    async def generate_adjustment_range_mask_async(
        self,
        pixels: PixelBuffer,
    ) -> AdjustmentRangeResult:
        """Run generate_adjustment_range_mask() in a worker thread."""
        options = self._options
        return await asyncio.to_thread(generate_adjustment_range_mask, pixels, options)

    def quantize(self, pixels: PixelBuffer) -> QuantizationResult:
        """Quantize with the configured algorithm and palette size."""
        quantizer = create_quantizer(
            self._options.quantization_algorithm, self._options.max_colors
        )
        return quantizer.quantize(pixels)

    # -------------------------------------------------------------------------
    # Click helpers
    # -------------------------------------------------------------------------

    def auto_generate_hsl_range(
        self,
        pixels: PixelBuffer,
        x: int,
        y: int,
        radius: int = 10,
    ) -> HSLRange:
        """Replace hsl_range with one estimated around (x, y)."""
        hsl_range = auto_select_hsl_range(pixels, x, y, radius)
        self.update_options(hsl_range=hsl_range)
        return hsl_range

    def auto_select_colors_from_click(
        self,
        pixels: PixelBuffer,
        x: int,
        y: int,
        tolerance: Optional[float] = None,
    ) -> tuple[RGBColor, ...]:
        """
        Replace selected_colors with the palette entries near the clicked pixel.

        Args:
            pixels: RGBA pixel buffer
            x, y: Clicked pixel
            tolerance: RGB distance limit (defaults to options.color_tolerance)
        """
        r, g, b = pixels.pixel(x, y)
        target = RGBColor(r=r, g=g, b=b)
        tol = self._options.color_tolerance if tolerance is None else tolerance

        palette = self.quantize(pixels).palette
        similar = tuple(c for c in palette if color_distance_sq(target, c) <= tol * tol)
        logger.debug(f"Click at ({x}, {y}): {len(similar)} of {len(palette)} palette colors within {tol}")

        self.update_options(selected_colors=similar)
        return similar

    # -------------------------------------------------------------------------
    # Output helpers
    # -------------------------------------------------------------------------

    def export_mask_as_image_data(
        self,
        mask: NDArray[np.uint8],
        width: int,
        height: int,
    ) -> PixelBuffer:
        return export_mask_as_image_data(mask, width, height)

    def apply_mask_to_image(
        self,
        pixels: PixelBuffer,
        mask: NDArray[np.uint8],
        intensity: float = 1.0,
    ) -> PixelBuffer:
        return apply_mask_to_image(pixels, mask, intensity)

    # -------------------------------------------------------------------------
    # Static helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def generate_quantized_color_blocks(
        pixels: PixelBuffer,
        max_colors: int = 8,
    ) -> tuple[RGBColor, ...]:
        """Octree palette of the image, for color-block pickers."""
        return OctreeQuantizer(max_colors).quantize(pixels).palette

    @staticmethod
    def generate_common_hsl_blocks() -> list[HSLRange]:
        return generate_common_hsl_blocks()

    @staticmethod
    def create_preset(name: str) -> dict:
        return create_preset(name)
