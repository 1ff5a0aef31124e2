# Copyright (c) 2026 Coriro
# SPDX-License-Identifier: MIT

"""
Color-block selection.

A picker shows two rows of blocks: the image's quantized colors
("quantized-<i>") and the fixed HSL regions ("hsl-<i>"). These helpers
turn a list of selected block ids into manager options.
"""

from __future__ import annotations

from enum import Enum
from typing import Sequence

from rangemask.schema import HSLRange, MaskOptions, RGBColor
from rangemask.core.colorspace import hsl_to_rgb


class BlockKind(Enum):
    """Row a color block belongs to."""

    QUANTIZED = "quantized"
    HSL = "hsl"


def block_id(kind: BlockKind, index: int) -> str:
    """Id of the index-th block of a row, e.g. 'hsl-2'."""
    return f"{BlockKind(kind).value}-{index}"


def parse_block_id(value: str) -> tuple[BlockKind, int]:
    """
    Split a block id into its row and index.

    Raises:
        ValueError: If the id is not '<quantized|hsl>-<non-negative int>'
    """
    prefix, sep, index = value.rpartition("-")
    if not sep or not index.isdigit():
        raise ValueError(f"Malformed color block id: {value!r}")
    return BlockKind(prefix), int(index)


def collect_selected_colors(
    selected_ids: Sequence[str],
    quantized_blocks: Sequence[RGBColor],
    hsl_blocks: Sequence[HSLRange],
) -> tuple[list[RGBColor], list[HSLRange]]:
    """
    Resolve selected block ids to palette colors and HSL ranges.

    Ids pointing past the end of their row are skipped. Order follows
    `selected_ids`.
    """
    colors: list[RGBColor] = []
    ranges: list[HSLRange] = []

    for value in selected_ids:
        kind, index = parse_block_id(value)
        if kind is BlockKind.QUANTIZED and index < len(quantized_blocks):
            colors.append(quantized_blocks[index])
        elif kind is BlockKind.HSL and index < len(hsl_blocks):
            ranges.append(hsl_blocks[index])

    return colors, ranges


def create_mask_manager_options(
    selected_colors: Sequence[RGBColor],
    selected_ranges: Sequence[HSLRange],
    *,
    smooth: bool = True,
    invert: bool = False,
) -> dict:
    """
    Partial manager options for a block selection.

    Quantization runs only with selected colors and HSL masking only with
    selected ranges; the first range becomes the active hsl_range.
    """
    options = {
        "use_quantization": len(selected_colors) > 0,
        "use_hsl_mask": len(selected_ranges) > 0,
        "selected_colors": tuple(selected_colors),
        "auto_select_colors": False,
        "mask_options": MaskOptions(smooth=smooth, invert=invert),
    }
    if selected_ranges:
        options["hsl_range"] = selected_ranges[0]
    return options


def hsl_block_color(hsl_range: HSLRange) -> str:
    """CSS swatch color of an HSL block's center, e.g. 'rgb(194, 153, 112)'."""
    color = hsl_to_rgb(hsl_range.hue, hsl_range.saturation, hsl_range.lightness)
    return f"rgb({color.r}, {color.g}, {color.b})"
