# Copyright (c) 2026 Coriro
# SPDX-License-Identifier: MIT

"""
Layered selections.

Each visible AdjustmentLayer contributes one mask (an HSL range or a
single palette color), scaled by the layer's intensity and folded onto
the layers below it with the layer's own blend mode.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence

import numpy as np
from numpy.typing import NDArray
from loguru import logger

from rangemask.schema import (
    AdjustmentLayer,
    AdjustmentRangeOptions,
    LayerType,
    MaskOptions,
    PixelBuffer,
)
from rangemask.core.colorspace import round_half_up
from rangemask.core.hsl_mask import blend_pair
from rangemask.core.image import filled_mask
from rangemask.core.manager import generate_adjustment_range_mask


DEFAULT_LAYER_TOLERANCE = 30.0


def layer_options(
    layer: AdjustmentLayer,
    base: AdjustmentRangeOptions,
    mask_options: Optional[MaskOptions] = None,
) -> Optional[AdjustmentRangeOptions]:
    """
    Manager options that render a single layer.

    Returns None for a layer missing its color / range.
    """
    mask_opts = mask_options or base.mask_options

    if layer.type is LayerType.HSL:
        if layer.hsl_range is None:
            return None
        return replace(
            base,
            use_quantization=False,
            use_hsl_mask=True,
            hsl_range=layer.hsl_range,
            mask_options=mask_opts,
        )

    if layer.color is None:
        return None
    return replace(
        base,
        use_quantization=True,
        use_hsl_mask=False,
        auto_select_colors=False,
        selected_colors=(layer.color,),
        color_tolerance=layer.tolerance or DEFAULT_LAYER_TOLERANCE,
        mask_options=mask_opts,
    )


def scale_mask(mask: NDArray[np.uint8], intensity: float) -> NDArray[np.uint8]:
    """Multiply a mask by an intensity in [0, 1]."""
    if intensity >= 1.0:
        return mask
    return np.clip(round_half_up(mask.astype(np.float64) * intensity), 0, 255).astype(np.uint8)


def generate_layered_mask(
    pixels: PixelBuffer,
    layers: Sequence[AdjustmentLayer],
    *,
    base_options: Optional[AdjustmentRangeOptions] = None,
    mask_options: Optional[MaskOptions] = None,
) -> NDArray[np.uint8]:
    """
    Render and blend every visible layer into one mask.

    The first rendered layer is the base; each later layer folds onto the
    running result with its own blend_mode.

    Args:
        pixels: RGBA pixel buffer
        layers: Layers, bottom first
        base_options: Options shared by every layer (quantizer, palette size)
        mask_options: Post-processing for every layer

    Returns:
        (width * height,) uint8 mask. No visible layers selects everything
        (all 255); visible layers that render nothing select nothing.
    """
    base = base_options or AdjustmentRangeOptions()
    visible = [layer for layer in layers if layer.visible]
    if not visible:
        return filled_mask(pixels.width, pixels.height)

    rendered: list[tuple[AdjustmentLayer, NDArray[np.uint8]]] = []
    for layer in visible:
        options = layer_options(layer, base, mask_options)
        if options is None:
            logger.warning(f"Layer {layer.id!r} has no {layer.type.value} source, skipped")
            continue
        result = generate_adjustment_range_mask(pixels, options)
        rendered.append((layer, scale_mask(result.mask, layer.intensity)))

    if not rendered:
        return np.zeros(pixels.pixel_count, dtype=np.uint8)

    final = rendered[0][1].copy()
    for layer, mask in rendered[1:]:
        final = blend_pair(final, mask, layer.blend_mode)
    return final
