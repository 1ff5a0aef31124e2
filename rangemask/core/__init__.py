# Copyright (c) 2026 Coriro
# SPDX-License-Identifier: MIT

"""
Masking core for rangemask.

Palette quantization, HSL range scoring and mask orchestration.
All operations are pixel-based, synchronous and deterministic.
"""

from rangemask.core.hsl_mask import HSLMaskGenerator, combine_masks, generate_mask
from rangemask.core.layers import generate_layered_mask
from rangemask.core.manager import AdjustmentRangeMaskManager, generate_adjustment_range_mask
from rangemask.core.median_cut import MedianCutQuantizer
from rangemask.core.octree import OctreeQuantizer
from rangemask.core.selection import collect_selected_colors, create_mask_manager_options

__all__ = [
    "AdjustmentRangeMaskManager",
    "generate_adjustment_range_mask",
    "HSLMaskGenerator",
    "generate_mask",
    "combine_masks",
    "OctreeQuantizer",
    "MedianCutQuantizer",
    "generate_layered_mask",
    "collect_selected_colors",
    "create_mask_manager_options",
]
