# Copyright (c) 2026 Coriro
# SPDX-License-Identifier: MIT

"""Conversions between single-channel masks and RGBA pixel buffers."""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from rangemask.schema import PixelBuffer
from rangemask.core.colorspace import round_half_up


def _check_mask(mask: NDArray[np.uint8], pixel_count: int) -> NDArray[np.uint8]:
    mask = np.asarray(mask, dtype=np.uint8).reshape(-1)
    if mask.size != pixel_count:
        raise ValueError(f"Mask has {mask.size} values, expected {pixel_count}")
    return mask


def mask_to_rgba(mask: NDArray[np.uint8]) -> NDArray[np.uint8]:
    """Flat gray RGBA bytes (R = G = B = mask, A = 255)."""
    mask = np.asarray(mask, dtype=np.uint8).reshape(-1)
    rgba = np.empty((mask.size, 4), dtype=np.uint8)
    rgba[:, :3] = mask[:, np.newaxis]
    rgba[:, 3] = 255
    return rgba.reshape(-1)


def filled_mask(width: int, height: int, value: int = 255) -> NDArray[np.uint8]:
    """Uniform single-channel mask, fully selected by default."""
    return np.full(width * height, value, dtype=np.uint8)


def export_mask_as_image_data(
    mask: NDArray[np.uint8],
    width: int,
    height: int,
) -> PixelBuffer:
    """Render a mask as an opaque grayscale RGBA image."""
    mask = _check_mask(mask, width * height)
    return PixelBuffer(data=mask_to_rgba(mask), width=width, height=height)


def apply_mask_to_image(
    pixels: PixelBuffer,
    mask: NDArray[np.uint8],
    intensity: float = 1.0,
) -> PixelBuffer:
    """
    Multiply the image's alpha by mask intensity.

    alpha' = round(alpha · mask / 255 · intensity), clamped to 0-255.
    Color channels are copied unchanged.
    """
    mask = _check_mask(mask, pixels.pixel_count)
    rgba = pixels.rgba.copy()
    weight = mask.astype(np.float64) / 255.0 * intensity
    alpha = round_half_up(rgba[:, 3].astype(np.float64) * weight)
    rgba[:, 3] = np.clip(alpha, 0, 255).astype(np.uint8)
    return PixelBuffer(data=rgba.reshape(-1), width=pixels.width, height=pixels.height)
