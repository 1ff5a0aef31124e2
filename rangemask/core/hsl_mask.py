# Copyright (c) 2026 Coriro
# SPDX-License-Identifier: MIT

"""
HSL range masks.

Scores every pixel's membership in an HSLRange and post-processes the
resulting byte mask:

    distance  = ‖(Δh / tol_h, Δs / tol_s, Δl / tol_l)‖     (Δh circular, Δh/tol_h ≤ 1)
    member    = clip(1 - distance, 0, 1)
    value     = clip(member·(1 - feather) + feather·e^(-2·distance), 0, 1)
    byte      = round(255 · value)

Post-processing runs threshold → box blur → inversion.

Also provides mask combination, a palette-distance mask for quantized
color selections, and HSL range estimation around a clicked point.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence, Union

import numpy as np
from numpy.typing import NDArray
from loguru import logger

from rangemask.schema import (
    BlendMode,
    HSLRange,
    MaskOptions,
    MaskResult,
    MaskStatistics,
    PixelBuffer,
    RGBColor,
)
from rangemask.core.colorspace import hue_distance, rgb_array_to_hsl, rgb_to_hsl, round_half_up
from rangemask.core.palette import palette_to_array


# Distance (RGB units) at which the quantized-color mask falls to zero
QUANTIZATION_TOLERANCE = 100.0

# Adaptive tolerance bounds for auto-selected ranges
HUE_TOLERANCE_BOUNDS = (5.0, 90.0)
SL_TOLERANCE_BOUNDS = (5.0, 50.0)
AUTO_RANGE_FEATHER = 0.3


def _resolve_options(options: Optional[MaskOptions], overrides: dict) -> MaskOptions:
    opts = options or MaskOptions()
    if overrides:
        opts = replace(opts, **overrides)
    return opts


# =============================================================================
# Scoring
# =============================================================================


def score_hsl(hsl: NDArray[np.float64], hsl_range: HSLRange) -> NDArray[np.float64]:
    """
    Membership in [0, 1] of each (h, s, l) row in the range.

    Args:
        hsl: Array of shape (N, 3) from rgb_array_to_hsl
        hsl_range: Target range

    Returns:
        Array of shape (N,) with membership values
    """
    hue_dist = np.minimum(1.0, hue_distance(hsl[:, 0], hsl_range.hue) / hsl_range.hue_tolerance)
    sat_dist = np.abs(hsl[:, 1] - hsl_range.saturation) / hsl_range.saturation_tolerance
    light_dist = np.abs(hsl[:, 2] - hsl_range.lightness) / hsl_range.lightness_tolerance

    total = np.sqrt(hue_dist ** 2 + sat_dist ** 2 + light_dist ** 2)

    membership = np.clip(1.0 - total, 0.0, 1.0)
    feather = hsl_range.feather
    value = membership * (1.0 - feather) + feather * np.exp(-2.0 * total)
    return np.clip(value, 0.0, 1.0)


def to_byte_mask(values: NDArray[np.float64]) -> NDArray[np.uint8]:
    """Scale [0, 1] values to a 0-255 byte mask."""
    return np.clip(round_half_up(values * 255.0), 0, 255).astype(np.uint8)


# =============================================================================
# Post-processing
# =============================================================================


def apply_threshold(mask: NDArray[np.uint8], threshold: int) -> NDArray[np.uint8]:
    """Values above the threshold become 255, everything else 0."""
    return np.where(mask > threshold, 255, 0).astype(np.uint8)


def smooth_mask(
    mask: NDArray[np.uint8],
    width: int,
    height: int,
    radius: int = 1,
) -> NDArray[np.uint8]:
    """
    Box blur with a (2·radius + 1)² window.

    Edge pixels average only their in-bounds neighbors (no wraparound,
    no padding). Radius 0 returns an unchanged copy.
    """
    mask = np.asarray(mask, dtype=np.uint8).reshape(-1)
    if radius <= 0 or mask.size == 0:
        return mask.copy()

    grid = mask.reshape(height, width).astype(np.int64)

    # Summed-area table with a leading zero row/column
    integral = np.zeros((height + 1, width + 1), dtype=np.int64)
    integral[1:, 1:] = grid.cumsum(axis=0).cumsum(axis=1)

    ys = np.arange(height)
    xs = np.arange(width)
    y0 = np.clip(ys - radius, 0, height)
    y1 = np.clip(ys + radius + 1, 0, height)
    x0 = np.clip(xs - radius, 0, width)
    x1 = np.clip(xs + radius + 1, 0, width)

    sums = (
        integral[np.ix_(y1, x1)]
        - integral[np.ix_(y0, x1)]
        - integral[np.ix_(y1, x0)]
        + integral[np.ix_(y0, x0)]
    )
    counts = (y1 - y0)[:, np.newaxis] * (x1 - x0)[np.newaxis, :]

    # Integer round-half-up of sums / counts
    smoothed = (2 * sums + counts) // (2 * counts)
    return smoothed.astype(np.uint8).reshape(-1)


def invert_mask(mask: NDArray[np.uint8]) -> NDArray[np.uint8]:
    return (255 - np.asarray(mask, dtype=np.uint8)).astype(np.uint8)


def post_process(
    mask: NDArray[np.uint8],
    width: int,
    height: int,
    options: MaskOptions,
    *,
    use_threshold: bool = True,
) -> NDArray[np.uint8]:
    """Apply threshold, smoothing and inversion in that order."""
    if use_threshold and options.threshold is not None:
        mask = apply_threshold(mask, options.threshold)
    if options.smooth:
        radius = 1 if options.smooth_radius is None else options.smooth_radius
        mask = smooth_mask(mask, width, height, radius)
    if options.invert:
        mask = invert_mask(mask)
    return mask


def compute_mask_statistics(mask: NDArray[np.uint8]) -> MaskStatistics:
    """
    Count masked (non-zero) pixels and the mean intensity.

    A zero-pixel mask reports ratio and intensity 0.0.
    """
    mask = np.asarray(mask).reshape(-1)
    total = int(mask.size)
    masked = int(np.count_nonzero(mask))
    intensity = int(mask.astype(np.int64).sum())
    if total == 0:
        return MaskStatistics(total_pixels=0, masked_pixels=0, mask_ratio=0.0, average_intensity=0.0)
    return MaskStatistics(
        total_pixels=total,
        masked_pixels=masked,
        mask_ratio=masked / total,
        average_intensity=intensity / total,
    )


# =============================================================================
# Mask generation
# =============================================================================


def generate_mask(
    pixels: PixelBuffer,
    hsl_range: HSLRange,
    options: Optional[MaskOptions] = None,
    **overrides,
) -> MaskResult:
    """
    Score every pixel against an HSL range.

    Args:
        pixels: RGBA pixel buffer
        hsl_range: Color region to select
        options: Post-processing settings (defaults: none applied)
        **overrides: Individual MaskOptions fields (threshold, smooth,
            smooth_radius, invert) overriding `options`

    Returns:
        MaskResult with a (width * height,) uint8 mask
    """
    opts = _resolve_options(options, overrides)

    hsl = rgb_array_to_hsl(pixels.rgb)
    mask = to_byte_mask(score_hsl(hsl, hsl_range))
    mask = post_process(mask, pixels.width, pixels.height, opts)

    return MaskResult(
        mask=mask,
        width=pixels.width,
        height=pixels.height,
        statistics=compute_mask_statistics(mask),
    )


def generate_mask_from_quantization(
    pixels: PixelBuffer,
    palette: Sequence[RGBColor],
    target_colors: Sequence[RGBColor],
    options: Optional[MaskOptions] = None,
    **overrides,
) -> MaskResult:
    """
    Mask pixels by RGB distance to the nearest target color.

    byte = clip(round(255 · (1 - d / QUANTIZATION_TOLERANCE)), 0, 255), where
    d is the Euclidean distance to the nearest target. No targets yields an
    all-zero mask. Thresholding does not apply to this mask; smoothing and
    inversion do.

    Args:
        pixels: RGBA pixel buffer
        palette: Palette the targets were chosen from
        target_colors: Selected colors
        options: Post-processing settings
        **overrides: Individual MaskOptions fields
    """
    opts = _resolve_options(options, overrides)
    logger.debug(f"Quantized mask: {len(target_colors)} of {len(palette)} palette colors selected")

    if len(target_colors) == 0:
        mask = np.zeros(pixels.pixel_count, dtype=np.uint8)
    else:
        rgb = pixels.rgb.astype(np.int64)
        targets = palette_to_array(target_colors)
        min_dist = np.full(len(rgb), np.iinfo(np.int64).max, dtype=np.int64)
        for target in targets:
            np.minimum(min_dist, ((rgb - target) ** 2).sum(axis=1), out=min_dist)
        values = 255.0 * (1.0 - np.sqrt(min_dist) / QUANTIZATION_TOLERANCE)
        mask = np.clip(round_half_up(values), 0, 255).astype(np.uint8)

    mask = post_process(mask, pixels.width, pixels.height, opts, use_threshold=False)

    return MaskResult(
        mask=mask,
        width=pixels.width,
        height=pixels.height,
        statistics=compute_mask_statistics(mask),
    )


# =============================================================================
# Combination
# =============================================================================


def blend_pair(
    base: NDArray[np.uint8],
    layer: NDArray[np.uint8],
    mode: Union[BlendMode, str],
) -> NDArray[np.uint8]:
    """Blend two equal-length masks pointwise."""
    mode = BlendMode(mode)
    a = base.astype(np.int64)
    b = layer.astype(np.int64)

    if mode is BlendMode.ADD:
        out = np.minimum(255, a + b)
    elif mode is BlendMode.MULTIPLY:
        # round(a·b / 255), half up
        out = (2 * a * b + 255) // 510
    elif mode is BlendMode.MAX:
        out = np.maximum(a, b)
    else:
        out = np.minimum(a, b)
    return out.astype(np.uint8)


def combine_masks(
    masks: Sequence[NDArray[np.uint8]],
    width: int,
    height: int,
    mode: Union[BlendMode, str] = BlendMode.MAX,
) -> NDArray[np.uint8]:
    """
    Left-fold several masks into one.

    Zero masks give an all-zero mask of width * height; a single mask is
    returned as a copy.
    """
    mode = BlendMode(mode)
    size = width * height
    if len(masks) == 0:
        return np.zeros(size, dtype=np.uint8)

    for i, m in enumerate(masks):
        if np.asarray(m).size != size:
            raise ValueError(
                f"Mask {i} has {np.asarray(m).size} values, expected {size} ({width}x{height})"
            )

    combined = np.asarray(masks[0], dtype=np.uint8).reshape(-1).copy()
    for m in masks[1:]:
        combined = blend_pair(combined, np.asarray(m, dtype=np.uint8).reshape(-1), mode)
    return combined


# =============================================================================
# Auto range
# =============================================================================


def _adaptive_tolerance(values: NDArray[np.float64], bounds: tuple[float, float]) -> float:
    """Twice the population standard deviation, clamped to bounds."""
    lo, hi = bounds
    if len(values) == 0:
        return 20.0
    return float(np.clip(2.0 * values.std(), lo, hi))


def auto_select_hsl_range(
    pixels: PixelBuffer,
    x: int,
    y: int,
    radius: int = 10,
) -> HSLRange:
    """
    Estimate an HSL range from the neighborhood of a point.

    The center pixel's HSL is the target; each tolerance is twice the
    standard deviation of that channel over the square window (clipped to
    the image), clamped to sane bounds.

    Raises:
        ValueError: If (x, y) lies outside the image
    """
    r, g, b = pixels.pixel(x, y)
    center = rgb_to_hsl(r, g, b)

    y0, y1 = max(0, y - radius), min(pixels.height, y + radius + 1)
    x0, x1 = max(0, x - radius), min(pixels.width, x + radius + 1)
    window = pixels.rgb.reshape(pixels.height, pixels.width, 3)[y0:y1, x0:x1]
    hsl = rgb_array_to_hsl(window.reshape(-1, 3))

    return HSLRange(
        hue=center.h,
        hue_tolerance=_adaptive_tolerance(hsl[:, 0], HUE_TOLERANCE_BOUNDS),
        saturation=center.s,
        saturation_tolerance=_adaptive_tolerance(hsl[:, 1], SL_TOLERANCE_BOUNDS),
        lightness=center.l,
        lightness_tolerance=_adaptive_tolerance(hsl[:, 2], SL_TOLERANCE_BOUNDS),
        feather=AUTO_RANGE_FEATHER,
    )


class HSLMaskGenerator:
    """Namespace bundling the stateless mask operations."""

    generate_mask = staticmethod(generate_mask)
    generate_mask_from_quantization = staticmethod(generate_mask_from_quantization)
    combine_masks = staticmethod(combine_masks)
    auto_select_hsl_range = staticmethod(auto_select_hsl_range)
    apply_threshold = staticmethod(apply_threshold)
    smooth_mask = staticmethod(smooth_mask)
    invert_mask = staticmethod(invert_mask)
    compute_mask_statistics = staticmethod(compute_mask_statistics)
