# Copyright (c) 2026 Coriro
# SPDX-License-Identifier: MIT

"""
rangemask -- Selective-color masking engine.

Turns an RGBA pixel buffer into a single-channel weight mask selecting a
color region: an HSL range ("skin tones", "sky blue") and/or the image's
own dominant palette colors.

Quick start::

    import numpy as np
    from rangemask import AdjustmentRangeMaskManager, PixelBuffer

    pixels = PixelBuffer.from_array(image)          # (H, W, 3|4) uint8
    manager = AdjustmentRangeMaskManager()
    manager.update_options(AdjustmentRangeMaskManager.create_preset("sky-blue"))
    result = manager.generate_adjustment_range_mask(pixels)
    result.mask                                     # (H*W,) uint8

Logging goes through loguru and is disabled by default; enable it with
``logger.enable("rangemask")``.
"""

from __future__ import annotations

__version__ = "1.0.0"

from loguru import logger

from rangemask.core import (
    AdjustmentRangeMaskManager,
    HSLMaskGenerator,
    MedianCutQuantizer,
    OctreeQuantizer,
    combine_masks,
    generate_adjustment_range_mask,
    generate_layered_mask,
    generate_mask,
)
from rangemask.schema import (
    AdjustmentLayer,
    AdjustmentRangeOptions,
    AdjustmentRangeResult,
    BlendMode,
    HSLColor,
    HSLRange,
    LayerType,
    MaskOptions,
    MaskResult,
    PixelBuffer,
    QuantizationAlgorithm,
    QuantizationResult,
    RGBColor,
)

logger.disable("rangemask")

__all__ = [
    # Core API
    "AdjustmentRangeMaskManager",
    "generate_adjustment_range_mask",
    "HSLMaskGenerator",
    "generate_mask",
    "combine_masks",
    "OctreeQuantizer",
    "MedianCutQuantizer",
    "generate_layered_mask",
    # Types (commonly needed)
    "PixelBuffer",
    "RGBColor",
    "HSLColor",
    "HSLRange",
    "MaskOptions",
    "AdjustmentRangeOptions",
    "AdjustmentLayer",
    "LayerType",
    "BlendMode",
    "QuantizationAlgorithm",
    "QuantizationResult",
    "MaskResult",
    "AdjustmentRangeResult",
    # Version
    "__version__",
]
