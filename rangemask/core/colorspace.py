# Copyright (c) 2026 Coriro
# SPDX-License-Identifier: MIT

"""
Color space conversions.

Conversion pair: RGB [0, 255] ↔ HSL (H degrees [0, 360), S/L percent [0, 100])

Scalar functions serve single colors (palette entries, clicked pixels);
the array form converts whole images in one NumPy pass and produces the
same numbers as the scalar form.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from rangemask.schema import HSLColor, RGBColor


def round_half_up(values):
    """Round .5 away from zero for non-negative values (matches canvas byte rounding)."""
    return np.floor(np.asarray(values, dtype=np.float64) + 0.5)


# =============================================================================
# Scalar conversions
# =============================================================================


def rgb_to_hsl(r: int, g: int, b: int) -> HSLColor:
    """
    Convert an RGB triple [0, 255] to HSL.

    Achromatic colors (max == min) get hue 0 and saturation 0.
    """
    r /= 255.0
    g /= 255.0
    b /= 255.0

    hi = max(r, g, b)
    lo = min(r, g, b)
    h = 0.0
    s = 0.0
    l = (hi + lo) / 2.0

    if hi != lo:
        d = hi - lo
        s = d / (2.0 - hi - lo) if l > 0.5 else d / (hi + lo)

        if hi == r:
            h = (g - b) / d + (6.0 if g < b else 0.0)
        elif hi == g:
            h = (b - r) / d + 2.0
        else:
            h = (r - g) / d + 4.0
        h /= 6.0

    return HSLColor(h=h * 360.0, s=s * 100.0, l=l * 100.0)


def hue_to_rgb(p: float, q: float, t: float) -> float:
    """Piecewise hue helper for HSL → RGB."""
    if t < 0:
        t += 1
    if t > 1:
        t -= 1
    if t < 1 / 6:
        return p + (q - p) * 6 * t
    if t < 1 / 2:
        return q
    if t < 2 / 3:
        return p + (q - p) * (2 / 3 - t) * 6
    return p


def hsl_to_rgb(h: float, s: float, l: float) -> RGBColor:
    """
    Convert HSL to an RGB color with count 0.

    Exact inverse of rgb_to_hsl up to channel rounding.
    """
    h /= 360.0
    s /= 100.0
    l /= 100.0

    if s == 0:
        r = g = b = l
    else:
        q = l * (1 + s) if l < 0.5 else l + s - l * s
        p = 2 * l - q
        r = hue_to_rgb(p, q, h + 1 / 3)
        g = hue_to_rgb(p, q, h)
        b = hue_to_rgb(p, q, h - 1 / 3)

    r8, g8, b8 = (int(v) for v in np.clip(round_half_up([r * 255, g * 255, b * 255]), 0, 255))
    return RGBColor(r=r8, g=g8, b=b8, count=0)


# =============================================================================
# Array conversion
# =============================================================================


def rgb_array_to_hsl(rgb: NDArray[np.uint8]) -> NDArray[np.float64]:
    """
    Convert (N, 3) RGB [0, 255] to (N, 3) HSL.

    Args:
        rgb: Array of shape (N, 3), any integer or float dtype

    Returns:
        Array of shape (N, 3) with columns (h, s, l)
    """
    rgb = np.asarray(rgb, dtype=np.float64).reshape(-1, 3) / 255.0
    r = rgb[:, 0]
    g = rgb[:, 1]
    b = rgb[:, 2]

    hi = rgb.max(axis=1)
    lo = rgb.min(axis=1)
    d = hi - lo
    l = (hi + lo) / 2.0

    chromatic = d > 0
    # Placeholder divisor keeps achromatic lanes finite; they are masked out below
    d_safe = np.where(chromatic, d, 1.0)

    denom = np.where(l > 0.5, 2.0 - hi - lo, hi + lo)
    s = np.where(chromatic, d / np.where(chromatic, denom, 1.0), 0.0)

    # Branch order matters when two channels tie for the maximum: r, then g, then b
    h = np.select(
        [hi == r, hi == g],
        [
            (g - b) / d_safe + np.where(g < b, 6.0, 0.0),
            (b - r) / d_safe + 2.0,
        ],
        default=(r - g) / d_safe + 4.0,
    )
    h = np.where(chromatic, h / 6.0, 0.0)

    return np.stack([h * 360.0, s * 100.0, l * 100.0], axis=-1)


def hue_distance(h1, h2):
    """
    Circular hue distance in degrees.

    Works on scalars or arrays: min(|h1 - h2|, 360 - |h1 - h2|).
    """
    diff = np.abs(np.asarray(h1, dtype=np.float64) - np.asarray(h2, dtype=np.float64))
    result = np.minimum(diff, 360.0 - diff)
    if np.ndim(result) == 0:
        return float(result)
    return result
