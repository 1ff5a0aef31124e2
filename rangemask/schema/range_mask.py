# Copyright (c) 2026 Coriro
# SPDX-License-Identifier: MIT

"""
Value types for selective-color masking.

Design principles:
- Immutable: All types are frozen dataclasses
- Deterministic: Same pixels + same options → same mask
- Byte masks: Every mask is a flat uint8 array, one byte per pixel, row-major

Color conventions:
- RGB channels are integers 0-255
- HSL: H in degrees [0, 360), S and L in percent [0, 100]
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import numpy as np
from numpy.typing import NDArray


# =============================================================================
# Enums
# =============================================================================


class BlendMode(Enum):
    """Pointwise rule used to fold several masks into one."""

    ADD = "add"
    MULTIPLY = "multiply"
    MAX = "max"
    MIN = "min"


class QuantizationAlgorithm(Enum):
    """Palette reduction algorithm used by the mask manager."""

    OCTREE = "octree"
    MEDIAN_CUT = "median-cut"


class LayerType(Enum):
    """Source of an adjustment layer's mask."""

    QUANTIZED = "quantized"
    HSL = "hsl"


# =============================================================================
# Pixel Buffer
# =============================================================================


@dataclass(frozen=True, eq=False)
class PixelBuffer:
    """
    A rasterized RGBA image.

    Attributes:
        data: Flat uint8 array of length width * height * 4, row-major RGBA
        width: Image width in pixels
        height: Image height in pixels

    Alpha is carried through but never used for color scoring.
    """
    data: NDArray[np.uint8]
    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError(
                f"Image dimensions must be non-negative, got {self.width}x{self.height}"
            )
        data = np.asarray(self.data)
        if data.dtype != np.uint8:
            raise ValueError(f"Expected uint8 pixel data, got {data.dtype}")
        data = data.reshape(-1)
        expected = self.width * self.height * 4
        if data.size != expected:
            raise ValueError(
                f"Pixel data has {data.size} bytes, expected {expected} "
                f"for a {self.width}x{self.height} RGBA image"
            )
        object.__setattr__(self, "data", data)

    @classmethod
    def from_array(cls, image: NDArray[np.uint8]) -> PixelBuffer:
        """
        Wrap an (H, W, 4) or (H, W, 3) uint8 array.

        RGB arrays get an opaque alpha channel.
        """
        if not isinstance(image, np.ndarray):
            raise TypeError(f"Expected numpy array, got {type(image)}")
        if image.ndim != 3 or image.shape[2] not in (3, 4):
            raise ValueError(
                f"Expected (H, W, 3) or (H, W, 4) array, got shape {image.shape}"
            )
        if image.dtype != np.uint8:
            raise ValueError(f"Expected uint8 array, got {image.dtype}")

        height, width = image.shape[:2]
        if image.shape[2] == 3:
            alpha = np.full((height, width, 1), 255, dtype=np.uint8)
            image = np.concatenate([image, alpha], axis=2)
        return cls(data=np.ascontiguousarray(image).reshape(-1), width=width, height=height)

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    @property
    def rgba(self) -> NDArray[np.uint8]:
        """(N, 4) view of the pixels."""
        return self.data.reshape(-1, 4)

    @property
    def rgb(self) -> NDArray[np.uint8]:
        """(N, 3) view of the color channels."""
        return self.rgba[:, :3]

    @property
    def alpha(self) -> NDArray[np.uint8]:
        return self.rgba[:, 3]

    def pixel(self, x: int, y: int) -> tuple[int, int, int]:
        """RGB of the pixel at column x, row y."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise ValueError(
                f"Pixel ({x}, {y}) is outside the {self.width}x{self.height} image"
            )
        r, g, b = self.rgb[y * self.width + x]
        return int(r), int(g), int(b)


# =============================================================================
# Color Types
# =============================================================================


@dataclass(frozen=True, slots=True)
class RGBColor:
    """
    An RGB color with a pixel count.

    Attributes:
        r, g, b: Channels 0-255
        count: Number of source pixels this color (or its palette bucket)
            represents. Synthetic palette entries have count 0.
    """
    r: int
    g: int
    b: int
    count: int = 0

    def __post_init__(self) -> None:
        for name in ("r", "g", "b"):
            value = getattr(self, name)
            if not 0 <= value <= 255:
                raise ValueError(f"Channel {name} must be 0-255, got {value}")
        if self.count < 0:
            raise ValueError(f"Count must be >= 0, got {self.count}")

    @property
    def key(self) -> tuple[int, int, int]:
        """Exact (r, g, b) tuple, used as the color map key."""
        return (self.r, self.g, self.b)

    @property
    def hex(self) -> str:
        return f"#{self.r:02X}{self.g:02X}{self.b:02X}"

    def to_dict(self) -> dict:
        return {"r": self.r, "g": self.g, "b": self.b, "count": self.count}

    @classmethod
    def from_dict(cls, data: dict) -> RGBColor:
        return cls(r=data["r"], g=data["g"], b=data["b"], count=data.get("count", 0))


@dataclass(frozen=True, slots=True)
class HSLColor:
    """A color in HSL space: h in degrees, s and l in percent."""
    h: float
    s: float
    l: float


@dataclass(frozen=True, slots=True)
class HSLRange:
    """
    A user-describable color region in HSL space.

    A pixel's distance to the range is measured per channel in units of
    the channel's tolerance, so tolerances must be strictly positive.

    Attributes:
        hue: Center hue in degrees (0-360)
        hue_tolerance: Hue half-width in degrees (360 selects every hue)
        saturation: Center saturation (0-100)
        saturation_tolerance: Saturation half-width
        lightness: Center lightness (0-100)
        lightness_tolerance: Lightness half-width
        feather: Soft-edge factor (0-1) mixing a linear falloff with an
            exponential one
        name: Optional display name
    """
    hue: float
    hue_tolerance: float
    saturation: float
    saturation_tolerance: float
    lightness: float
    lightness_tolerance: float
    feather: float = 0.0
    name: Optional[str] = None

    def __post_init__(self) -> None:
        if not 0.0 <= self.hue <= 360.0:
            raise ValueError(f"Hue must be 0-360, got {self.hue}")
        for attr in ("hue_tolerance", "saturation_tolerance", "lightness_tolerance"):
            if getattr(self, attr) <= 0:
                raise ValueError(f"{attr} must be > 0, got {getattr(self, attr)}")
        if not 0.0 <= self.feather <= 1.0:
            raise ValueError(f"Feather must be 0-1, got {self.feather}")

    def to_dict(self) -> dict:
        d = {
            "hue": self.hue,
            "hue_tolerance": self.hue_tolerance,
            "saturation": self.saturation,
            "saturation_tolerance": self.saturation_tolerance,
            "lightness": self.lightness,
            "lightness_tolerance": self.lightness_tolerance,
            "feather": self.feather,
        }
        if self.name is not None:
            d["name"] = self.name
        return d

    @classmethod
    def from_dict(cls, data: dict) -> HSLRange:
        return cls(
            hue=data["hue"],
            hue_tolerance=data["hue_tolerance"],
            saturation=data["saturation"],
            saturation_tolerance=data["saturation_tolerance"],
            lightness=data["lightness"],
            lightness_tolerance=data["lightness_tolerance"],
            feather=data.get("feather", 0.0),
            name=data.get("name"),
        )


# =============================================================================
# Results
# =============================================================================


@dataclass(frozen=True)
class QuantizationResult:
    """
    Output of a single quantize() call.

    Attributes:
        palette: Representative colors, each with the pixel count it covers
        color_map: Every distinct input (r, g, b) → its nearest palette entry
        total_colors: len(palette)
        original_colors: Number of distinct input colors
    """
    palette: tuple[RGBColor, ...]
    color_map: dict[tuple[int, int, int], RGBColor]
    total_colors: int
    original_colors: int


@dataclass(frozen=True, slots=True)
class MaskStatistics:
    """Summary of a byte mask."""
    total_pixels: int
    masked_pixels: int
    mask_ratio: float
    average_intensity: float

    def to_dict(self) -> dict:
        return {
            "total_pixels": self.total_pixels,
            "masked_pixels": self.masked_pixels,
            "mask_ratio": self.mask_ratio,
            "average_intensity": self.average_intensity,
        }


@dataclass(frozen=True, eq=False)
class MaskResult:
    """A single-channel mask with its dimensions and statistics."""
    mask: NDArray[np.uint8]
    width: int
    height: int
    statistics: MaskStatistics


@dataclass(frozen=True, slots=True)
class AdjustmentRangeStatistics:
    """Mask statistics plus the palette colors that drove the mask."""
    total_pixels: int
    masked_pixels: int
    mask_ratio: float
    average_intensity: float
    selected_colors: tuple[RGBColor, ...] = ()

    def to_dict(self) -> dict:
        return {
            "total_pixels": self.total_pixels,
            "masked_pixels": self.masked_pixels,
            "mask_ratio": self.mask_ratio,
            "average_intensity": self.average_intensity,
            "selected_colors": [c.to_dict() for c in self.selected_colors],
        }


@dataclass(frozen=True, eq=False)
class AdjustmentRangeResult:
    """Combined mask from the manager, with the intermediate results."""
    mask: NDArray[np.uint8]
    width: int
    height: int
    statistics: AdjustmentRangeStatistics
    quantization_result: Optional[QuantizationResult] = None
    hsl_mask_result: Optional[MaskResult] = None


# =============================================================================
# Configuration
# =============================================================================


DEFAULT_HSL_RANGE = HSLRange(
    hue=0.0,
    hue_tolerance=30.0,
    saturation=50.0,
    saturation_tolerance=30.0,
    lightness=50.0,
    lightness_tolerance=30.0,
    feather=0.3,
)


@dataclass(frozen=True)
class MaskOptions:
    """
    Post-processing applied to a freshly scored mask.

    Steps run in order: threshold, smoothing, inversion.

    Attributes:
        threshold: If set, values above it become 255 and the rest 0
        smooth: Apply a box blur
        smooth_radius: Box blur radius (None → 1, 0 → no blur)
        invert: Replace every value v with 255 - v
    """
    threshold: Optional[int] = None
    smooth: bool = False
    smooth_radius: Optional[int] = None
    invert: bool = False

    def __post_init__(self) -> None:
        if self.threshold is not None and not 0 <= self.threshold <= 255:
            raise ValueError(f"Threshold must be 0-255, got {self.threshold}")
        if self.smooth_radius is not None and self.smooth_radius < 0:
            raise ValueError(f"Smooth radius must be >= 0, got {self.smooth_radius}")


@dataclass(frozen=True)
class AdjustmentRangeOptions:
    """
    Full configuration of the adjustment range mask manager.

    Enum fields also accept their string values ("median-cut", "add", ...).
    """

    # Quantization
    quantization_algorithm: QuantizationAlgorithm = QuantizationAlgorithm.OCTREE
    max_colors: int = 64

    # HSL mask
    hsl_range: HSLRange = DEFAULT_HSL_RANGE
    mask_options: MaskOptions = field(
        default_factory=lambda: MaskOptions(smooth=True, smooth_radius=1)
    )

    # Combination
    use_quantization: bool = True
    use_hsl_mask: bool = True
    blend_mode: BlendMode = BlendMode.MAX

    # Color selection
    auto_select_colors: bool = False
    selected_colors: tuple[RGBColor, ...] = ()
    color_tolerance: float = 30.0

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "quantization_algorithm", QuantizationAlgorithm(self.quantization_algorithm)
        )
        object.__setattr__(self, "blend_mode", BlendMode(self.blend_mode))
        object.__setattr__(self, "selected_colors", tuple(self.selected_colors))
        if isinstance(self.mask_options, dict):
            object.__setattr__(self, "mask_options", MaskOptions(**self.mask_options))
        if isinstance(self.hsl_range, dict):
            object.__setattr__(self, "hsl_range", HSLRange.from_dict(self.hsl_range))
        if self.max_colors < 1:
            raise ValueError(f"max_colors must be >= 1, got {self.max_colors}")
        if self.color_tolerance < 0:
            raise ValueError(f"color_tolerance must be >= 0, got {self.color_tolerance}")


@dataclass(frozen=True)
class AdjustmentLayer:
    """
    One mask source in a layered selection.

    A quantized layer selects pixels near `color` (within the fixed
    quantization falloff); an HSL layer selects pixels in `hsl_range`.

    Attributes:
        id: Stable identifier
        name: Display name
        type: LayerType.QUANTIZED or LayerType.HSL
        visible: Hidden layers contribute nothing
        intensity: Scale (0-1) applied to the layer's mask
        blend_mode: How this layer folds onto the layers below it
        color: Palette color for quantized layers
        tolerance: Color tolerance for quantized layers
        hsl_range: Range for HSL layers
    """
    id: str
    name: str
    type: LayerType
    visible: bool = True
    intensity: float = 1.0
    blend_mode: BlendMode = BlendMode.MAX
    color: Optional[RGBColor] = None
    tolerance: Optional[float] = None
    hsl_range: Optional[HSLRange] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", LayerType(self.type))
        object.__setattr__(self, "blend_mode", BlendMode(self.blend_mode))
        if not 0.0 <= self.intensity <= 1.0:
            raise ValueError(f"Intensity must be 0-1, got {self.intensity}")
