# Copyright (c) 2026 Coriro
# SPDX-License-Identifier: MIT

"""
Named color regions and configuration presets.

The common blocks are the fixed swatches offered next to the image's own
quantized colors. Presets are partial manager configurations meant for
AdjustmentRangeMaskManager.update_options().
"""

from __future__ import annotations

from rangemask.schema import BlendMode, HSLRange


# Full hue and saturation span: selects by lightness alone
_ANY_HUE = dict(hue=0.0, hue_tolerance=360.0, saturation=0.0, saturation_tolerance=100.0)


COMMON_HSL_BLOCKS: tuple[HSLRange, ...] = (
    HSLRange(name="Skin tone", hue=30.0, hue_tolerance=20.0, saturation=40.0,
             saturation_tolerance=30.0, lightness=60.0, lightness_tolerance=25.0, feather=0.1),
    HSLRange(name="Sky blue", hue=210.0, hue_tolerance=30.0, saturation=60.0,
             saturation_tolerance=40.0, lightness=70.0, lightness_tolerance=30.0, feather=0.1),
    HSLRange(name="Green foliage", hue=120.0, hue_tolerance=40.0, saturation=50.0,
             saturation_tolerance=35.0, lightness=45.0, lightness_tolerance=35.0, feather=0.1),
    HSLRange(name="Red", hue=0.0, hue_tolerance=15.0, saturation=70.0,
             saturation_tolerance=30.0, lightness=50.0, lightness_tolerance=30.0, feather=0.1),
    HSLRange(name="Yellow", hue=60.0, hue_tolerance=20.0, saturation=80.0,
             saturation_tolerance=20.0, lightness=60.0, lightness_tolerance=25.0, feather=0.1),
    HSLRange(name="Purple", hue=270.0, hue_tolerance=25.0, saturation=50.0,
             saturation_tolerance=35.0, lightness=45.0, lightness_tolerance=30.0, feather=0.3),
    HSLRange(name="Highlights", lightness=80.0, lightness_tolerance=20.0, feather=0.2, **_ANY_HUE),
    HSLRange(name="Shadows", lightness=30.0, lightness_tolerance=20.0, feather=0.2, **_ANY_HUE),
)


_PRESETS: dict[str, dict] = {
    "skin-tone": {
        "hsl_range": HSLRange(hue=30.0, hue_tolerance=20.0, saturation=40.0,
                              saturation_tolerance=30.0, lightness=60.0,
                              lightness_tolerance=25.0, feather=0.4),
        "use_quantization": True,
        "use_hsl_mask": True,
        "blend_mode": BlendMode.MAX,
    },
    "sky-blue": {
        "hsl_range": HSLRange(hue=210.0, hue_tolerance=30.0, saturation=60.0,
                              saturation_tolerance=40.0, lightness=70.0,
                              lightness_tolerance=30.0, feather=0.3),
        "use_quantization": True,
        "use_hsl_mask": True,
        "blend_mode": BlendMode.MAX,
    },
    "greens": {
        "hsl_range": HSLRange(hue=120.0, hue_tolerance=40.0, saturation=50.0,
                              saturation_tolerance=35.0, lightness=45.0,
                              lightness_tolerance=35.0, feather=0.3),
        "use_quantization": True,
        "use_hsl_mask": True,
        "blend_mode": BlendMode.MAX,
    },
    "highlights": {
        "hsl_range": HSLRange(lightness=80.0, lightness_tolerance=20.0, feather=0.2, **_ANY_HUE),
        "use_quantization": False,
        "use_hsl_mask": True,
        "blend_mode": BlendMode.MAX,
    },
    "shadows": {
        "hsl_range": HSLRange(lightness=30.0, lightness_tolerance=20.0, feather=0.2, **_ANY_HUE),
        "use_quantization": False,
        "use_hsl_mask": True,
        "blend_mode": BlendMode.MAX,
    },
}

PRESET_NAMES = tuple(_PRESETS)


def generate_common_hsl_blocks() -> list[HSLRange]:
    """The eight fixed named color regions."""
    return list(COMMON_HSL_BLOCKS)


def create_preset(name: str) -> dict:
    """
    Partial manager configuration for a named preset.

    Unknown names return an empty dict (no changes).
    """
    return dict(_PRESETS.get(name, {}))
