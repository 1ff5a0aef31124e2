# Copyright (c) 2026 Coriro
# SPDX-License-Identifier: MIT

"""
Schema definitions for selective-color masking.

All types in this module are immutable (frozen dataclasses).
Configuration is replaced, never mutated in place.
"""

from rangemask.schema.range_mask import (
    DEFAULT_HSL_RANGE,
    AdjustmentLayer,
    AdjustmentRangeOptions,
    AdjustmentRangeResult,
    AdjustmentRangeStatistics,
    BlendMode,
    HSLColor,
    HSLRange,
    LayerType,
    MaskOptions,
    MaskResult,
    MaskStatistics,
    PixelBuffer,
    QuantizationAlgorithm,
    QuantizationResult,
    RGBColor,
)

__all__ = [
    # Input
    "PixelBuffer",
    # Colors
    "RGBColor",
    "HSLColor",
    "HSLRange",
    # Results
    "QuantizationResult",
    "MaskStatistics",
    "MaskResult",
    "AdjustmentRangeStatistics",
    "AdjustmentRangeResult",
    # Configuration
    "BlendMode",
    "QuantizationAlgorithm",
    "MaskOptions",
    "AdjustmentRangeOptions",
    "DEFAULT_HSL_RANGE",
    # Layers
    "LayerType",
    "AdjustmentLayer",
]
