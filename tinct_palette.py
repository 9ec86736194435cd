# -*- coding: utf-8 -*-
"""
Tinct: Perceptual theme colours for the terminal
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Theme palette: OKLCH colour records, the 8-bit Rgb result type and the
fixed table of semantic theme colours.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, NamedTuple, Optional

import numpy as np

from tinct_colorengine import ColorSpaceEngine, quantize_channel


# ---------------------------------------------------------------------------
# 1.  Colour records
# ---------------------------------------------------------------------------
@dataclass(slots=True, frozen=True)
class Oklch:
    """
    One OKLCH coordinate: lightness, chroma and hue in degrees.

    ``hue=None`` marks an achromatic colour whose hue carries no meaning.
    A NaN hue is accepted and normalised to ``None``. Ranges are nominal
    (L in [0, 1], C >= 0) and are not enforced.
    """
    lightness: float
    chroma:    float
    hue:       Optional[float] = None

    def __post_init__(self) -> None:
        if self.hue is not None and math.isnan(self.hue):
            object.__setattr__(self, "hue", None)

    @property
    def achromatic(self) -> bool:
        return self.hue is None

    def to_array(self) -> np.ndarray:
        """(3,) float64 array; an undefined hue is carried as NaN."""
        hue = np.nan if self.hue is None else self.hue
        return np.array([self.lightness, self.chroma, hue], dtype=np.float64)

    def css(self) -> str:
        """CSS Color 4 notation, e.g. ``oklch(0.8348 0.1302 160.908)``."""
        parts = (self.lightness, self.chroma, self.hue)
        return f"oklch({' '.join(format_number(p) for p in parts)})"


class Rgb(NamedTuple):
    """Quantized sRGB triple, each channel in [0, 255]."""
    r: int
    g: int
    b: int

    def __str__(self) -> str:
        return f"Rgb({self.r}, {self.g}, {self.b})"

    @property
    def hex(self) -> str:
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"


def format_number(value: Optional[float]) -> str:
    """
    Shortest round-trip decimal form; integral values drop the fraction.

    ``None`` renders as ``none``, the CSS keyword for a missing component.
    """
    if value is None:
        return "none"
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


# ---------------------------------------------------------------------------
# 2.  Conversion
# ---------------------------------------------------------------------------
def to_rgb(color: Oklch) -> Rgb:
    """Runs the full OKLCH -> 8-bit sRGB chain for one colour."""
    srgb = ColorSpaceEngine.oklch_to_srgb(color.to_array())
    r, g, b = (quantize_channel(c) for c in srgb)
    return Rgb(r, g, b)


# ---------------------------------------------------------------------------
# 3.  Theme table
# ---------------------------------------------------------------------------
# Studio brand colours. Declaration order is the emission order.
THEME_COLORS: Mapping[str, Oklch] = MappingProxyType({
    "primary":     Oklch(0.8348, 0.1302, 160.9080),
    "destructive": Oklch(0.5523, 0.1927, 32.7272),
    "info":        Oklch(0.6231, 0.1880, 259.8145),
    "warning":     Oklch(0.7686, 0.1647, 70.0804),
})
