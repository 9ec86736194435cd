# -*- coding: utf-8 -*-
"""
Tinct: Perceptual theme colours for the terminal
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

OKLCH -> sRGB Color Engine
==========================
JIT-compiled conversion chain from the cylindrical OKLCH model down to
quantized 8-bit sRGB channels:

    OKLCH -> OKLab -> LMS' -> LMS -> XYZ (D65) -> linear sRGB -> sRGB -> uint8

Design points:
1. Exactness: Matrices are the published double-precision Oklab / sRGB
   coefficients, not re-derived inverses.
2. Sign safety: Every power law is evaluated as ``sign(x) * |x|**p`` so
   out-of-gamut (negative) components travel through the chain intact
   and are only corrected by the final clamp.
3. Achromatic hues: An undefined hue (NaN inside arrays) zeroes the a/b
   axes before any trigonometry is evaluated.

References:
    - Ottosson, B. (2020). "A perceptual color space for image processing".
    - IEC 61966-2-1:1999 (sRGB Standard)
    - CSS Color Module Level 4, Section 17 (Oklab / OKLCH sample code)
"""

import functools
import logging
from typing import Any, Callable, Final, Sequence, TypeAlias, Union

import numpy as np
import numpy.typing as npt
from numba import njit

__all__ = [
    # --- Type Aliases ---
    "ArrayFloat",

    # --- Constants ---
    "DEG2RAD",
    "SRGB_LINEAR_THRESHOLD",
    "SRGB_ENCODED_THRESHOLD",
    "CHANNEL_MAX",

    # --- Configuration ---
    "set_strict_ieee",

    # --- Matrices ---
    "M_OKLAB_TO_LMS_PRIME",
    "M_LMS_TO_XYZ",
    "M_XYZ_TO_LINEAR_SRGB",

    # --- Decorators ---
    "handle_shapes",

    # --- Functions ---
    "matvec3",
    "round_half_away_from_zero",
    "quantize_channel",

    # --- Classes ---
    "ColorSpaceEngine",
]

logger = logging.getLogger(__name__)

# --- Type Aliases ---
# Kernels compile to float64; other dtypes are cast on entry.
ArrayFloat: TypeAlias = npt.NDArray[np.floating]

# --- Constants ---

DEG2RAD: Final[float] = np.pi / 180.0

# IEC 61966-2-1 transfer function breakpoints.
SRGB_LINEAR_THRESHOLD: Final[float] = 0.0031308
SRGB_ENCODED_THRESHOLD: Final[float] = 0.04045

CHANNEL_MAX: Final[int] = 255

# Oklab M2^-1: (L, a, b) -> cube-root cone response LMS'.
M_OKLAB_TO_LMS_PRIME: Final[ArrayFloat] = np.array([
    [1.0,  0.3963377773761749,  0.2158037573099136],
    [1.0, -0.1055613458156586, -0.0638541728258133],
    [1.0, -0.0894841775298119, -1.2914855480194092]
], dtype=np.float64)

# Oklab M1^-1: linear cone response LMS -> CIE XYZ (D65).
M_LMS_TO_XYZ: Final[ArrayFloat] = np.array([
    [ 1.2268798758459243, -0.5578149944602171,  0.2813910456659647],
    [-0.0405757452148008,  1.1122868032803170, -0.0717110580655164],
    [-0.0763729366746601, -0.4214933324022432,  1.5869240198367816]
], dtype=np.float64)

# XYZ (D65) -> linear sRGB, rational form from the sRGB primaries.
M_XYZ_TO_LINEAR_SRGB: Final[ArrayFloat] = np.array([
    [ 3.2409699419045226,  -1.537383177570094,   -0.4986107602930034],
    [-0.9692436362808796,   1.8759675015077202,   0.04155505740717559],
    [ 0.05563007969699366, -0.20397695888897652,  1.0569715142428786]
], dtype=np.float64)


# --- Runtime Configuration ---
# When True, the transfer-function kernels run with fastmath=False so
# that strict IEEE 754 semantics hold (no FP reassociation).
#
# Toggle at runtime via:
#     import tinct_colorengine as ce
#     ce.set_strict_ieee(True)   # enable strict mode
#     ce.set_strict_ieee(False)  # back to fast mode (default)
_STRICT_IEEE: bool = False

def set_strict_ieee(enabled: bool = True) -> None:
    """
    Toggle between fast (default) and strict IEEE 754 transfer kernels.

    Args:
        enabled: If True, use strict IEEE mode.
    """
    global _STRICT_IEEE
    _STRICT_IEEE = bool(enabled)


# =============================================================================
# 1. ROBUST DECORATORS
# =============================================================================

def handle_shapes(func: Callable[..., np.ndarray]) -> Callable[..., np.ndarray]:
    """
    Decorator to normalize inputs to contiguous float64 (N, 3) batches.

    Args:
        func: The function to decorate.

    Returns:
        The wrapped function with shape handling.
        - If input is (3,), returns (3,)
        - If input is (N, 3), returns (N, 3)
    """
    @functools.wraps(func)
    def wrapper(arr: Any, *args: Any, **kwargs: Any) -> np.ndarray:
        arr_in = np.ascontiguousarray(np.atleast_2d(arr), dtype=np.float64)

        if arr_in.shape[-1] != 3:
            raise ValueError(f"Expected last dimension size 3, got {arr_in.shape[-1]}")

        res = func(arr_in, *args, **kwargs)

        if np.ndim(arr) == 1:
            return res[0]
        return res
    return wrapper


# =============================================================================
# 2. LOW-LEVEL MATH KERNELS (Numba Optimized)
# =============================================================================
# Kernels are compiled without cache=True so that a run never writes to
# disk. Only the sRGB transfer functions come in a fastmath flavour; the
# basis changes and hue projection always run strict.

@njit(fastmath=False)
def _matvec_kernel(matrix: ArrayFloat, vecs: ArrayFloat) -> ArrayFloat:
    """
    Row-wise ``matrix @ v`` for every row ``v`` of an (N, 3) batch.

    Written as three explicit dot products per row; *matrix* is a
    row-major (3, 3) float64 array.
    """
    n = vecs.shape[0]
    out = np.empty_like(vecs)
    for i in range(n):
        x, y, z = vecs[i, 0], vecs[i, 1], vecs[i, 2]
        out[i, 0] = matrix[0, 0] * x + matrix[0, 1] * y + matrix[0, 2] * z
        out[i, 1] = matrix[1, 0] * x + matrix[1, 1] * y + matrix[1, 2] * z
        out[i, 2] = matrix[2, 0] * x + matrix[2, 1] * y + matrix[2, 2] * z
    return out

@njit(fastmath=False)
def _oklch_to_oklab_kernel(lch: ArrayFloat) -> ArrayFloat:
    """
    Low-level kernel for OKLCH -> OKLab.
    Input shape (N, 3), Output shape (N, 3).

    A NaN hue marks an achromatic colour and yields a = b = 0. The kernel
    must stay fastmath=False, otherwise LLVM may fold the NaN test away.
    """
    n = lch.shape[0]
    lab = np.empty_like(lch)

    for i in range(n):
        L, C, h_deg = lch[i, 0], lch[i, 1], lch[i, 2]
        lab[i, 0] = L
        if np.isnan(h_deg):
            lab[i, 1] = 0.0
            lab[i, 2] = 0.0
        else:
            h_rad = h_deg * DEG2RAD
            lab[i, 1] = C * np.cos(h_rad)
            lab[i, 2] = C * np.sin(h_rad)
    return lab

@njit(fastmath=True)
def _fast_gamma_srgb(linear: ArrayFloat) -> ArrayFloat:
    """
    Applies the sRGB OETF (linear -> gamma encoded), sign preserving.

    Standard: IEC 61966-2-1, extended to negative inputs by odd symmetry.
    """
    n = linear.shape[0]
    out = np.empty_like(linear)
    for i in range(n):
        for j in range(3):
            v = linear[i, j]
            mag = abs(v)
            if mag <= SRGB_LINEAR_THRESHOLD:
                out[i, j] = 12.92 * v
            else:
                sign = -1.0 if v < 0.0 else 1.0
                out[i, j] = sign * (1.055 * (mag ** (1.0 / 2.4)) - 0.055)
    return out

@njit(fastmath=True)
def _fast_inverse_gamma_srgb(srgb: ArrayFloat) -> ArrayFloat:
    """
    Applies the sRGB EOTF (gamma encoded -> linear), sign preserving.

    Standard: IEC 61966-2-1
    """
    n = srgb.shape[0]
    out = np.empty_like(srgb)
    for i in range(n):
        for j in range(3):
            v = srgb[i, j]
            mag = abs(v)
            if mag <= SRGB_ENCODED_THRESHOLD:
                out[i, j] = v / 12.92
            else:
                sign = -1.0 if v < 0.0 else 1.0
                out[i, j] = sign * (((mag + 0.055) / 1.055) ** 2.4)
    return out


# --- Strict IEEE 754 kernel variants (fastmath=False) ---

@njit(fastmath=False)
def _fast_gamma_srgb_strict(linear: ArrayFloat) -> ArrayFloat:
    """sRGB OETF, strict IEEE 754 variant."""
    n = linear.shape[0]
    out = np.empty_like(linear)
    for i in range(n):
        for j in range(3):
            v = linear[i, j]
            mag = abs(v)
            if mag <= SRGB_LINEAR_THRESHOLD:
                out[i, j] = 12.92 * v
            else:
                sign = -1.0 if v < 0.0 else 1.0
                out[i, j] = sign * (1.055 * (mag ** (1.0 / 2.4)) - 0.055)
    return out

@njit(fastmath=False)
def _fast_inverse_gamma_srgb_strict(srgb: ArrayFloat) -> ArrayFloat:
    """sRGB EOTF, strict IEEE 754 variant."""
    n = srgb.shape[0]
    out = np.empty_like(srgb)
    for i in range(n):
        for j in range(3):
            v = srgb[i, j]
            mag = abs(v)
            if mag <= SRGB_ENCODED_THRESHOLD:
                out[i, j] = v / 12.92
            else:
                sign = -1.0 if v < 0.0 else 1.0
                out[i, j] = sign * (((mag + 0.055) / 1.055) ** 2.4)
    return out


# --- Kernel dispatchers ---

def _gamma_srgb(linear: ArrayFloat) -> ArrayFloat:
    """Dispatch sRGB OETF to fast or strict kernel."""
    if _STRICT_IEEE:
        return _fast_gamma_srgb_strict(linear)
    return _fast_gamma_srgb(linear)

def _inverse_gamma_srgb(srgb: ArrayFloat) -> ArrayFloat:
    """Dispatch sRGB EOTF to fast or strict kernel."""
    if _STRICT_IEEE:
        return _fast_inverse_gamma_srgb_strict(srgb)
    return _fast_inverse_gamma_srgb(srgb)


# =============================================================================
# 3. SCALAR HELPERS
# =============================================================================

def matvec3(matrix: Union[ArrayFloat, Sequence[float]], vector: Union[ArrayFloat, Sequence[float]]) -> ArrayFloat:
    """
    Multiplies a row-major 3x3 matrix by a 3-vector.

    Args:
        matrix: (3, 3) array or a flat sequence of 9 scalars, row-major.
        vector: Sequence of 3 scalars.

    Returns:
        The (3,) product.
    """
    m = np.asarray(matrix, dtype=np.float64)
    if m.size != 9:
        raise ValueError(f"Expected a 3x3 matrix (9 scalars), got {m.size}")
    v = np.asarray(vector, dtype=np.float64)
    if v.shape != (3,):
        raise ValueError(f"Expected a vector of shape (3,), got {v.shape}")
    return _matvec_kernel(np.ascontiguousarray(m.reshape(3, 3)), np.ascontiguousarray(v.reshape(1, 3)))[0]

def round_half_away_from_zero(x: Union[float, ArrayFloat]) -> Union[float, ArrayFloat]:
    """
    Rounds to the nearest integer, ties away from zero (2.5 -> 3, -2.5 -> -3).

    ``floor(|x| + 0.5)`` is avoided because the addition itself rounds up
    for 0.49999999999999994; the fractional part is compared instead.
    """
    mag = np.abs(x)
    whole = np.floor(mag)
    rounded = whole + (mag - whole >= 0.5)
    return np.copysign(rounded, x)

def quantize_channel(value: float) -> int:
    """
    Maps one gamma-encoded channel to an 8-bit integer.

    The value is scaled by 255, rounded half away from zero and clamped to
    [0, 255]. Clamping is the only out-of-gamut correction in the chain
    and is silent apart from a debug record.
    """
    scaled = float(round_half_away_from_zero(value * CHANNEL_MAX))
    clamped = min(max(scaled, 0.0), float(CHANNEL_MAX))
    if clamped != scaled:
        logger.debug("[quantize] clamped %g -> %d", scaled, clamped)
    return int(clamped)


# =============================================================================
# 4. COLOR SPACE ENGINE
# =============================================================================

class ColorSpaceEngine:
    """Static utility class for the OKLCH -> 8-bit sRGB chain.

    Core transforms provide both a public ``@handle_shapes`` decorated API
    and an internal ``_raw`` fast-path that assumes pre-validated (N, 3)
    float64 input. Composite pipelines (``oklch_to_srgb``,
    ``oklch_to_rgb8``) chain the ``_raw`` variants.
    """

    # =====================================================================
    #  Internal _raw fast-path methods  (assume validated (N, 3) float64)
    # =====================================================================

    @staticmethod
    def _oklch_to_oklab_raw(lch_array: ArrayFloat) -> ArrayFloat:
        """Raw OKLCH → OKLab."""
        return _oklch_to_oklab_kernel(lch_array)

    @staticmethod
    def _oklab_to_xyz_raw(oklab_array: ArrayFloat) -> ArrayFloat:
        """Raw OKLab → XYZ. Cubing keeps the sign of negative LMS'."""
        lms_prime = _matvec_kernel(M_OKLAB_TO_LMS_PRIME, oklab_array)
        lms = lms_prime ** 3
        return _matvec_kernel(M_LMS_TO_XYZ, lms)

    @staticmethod
    def _xyz_to_linear_srgb_raw(xyz_array: ArrayFloat) -> ArrayFloat:
        """Raw XYZ → linear sRGB, unclipped."""
        return _matvec_kernel(M_XYZ_TO_LINEAR_SRGB, xyz_array)

    @staticmethod
    def _linear_to_srgb_raw(linear_array: ArrayFloat) -> ArrayFloat:
        """Raw linear sRGB → gamma encoded sRGB."""
        return _gamma_srgb(linear_array)

    @staticmethod
    def _srgb_to_rgb8_raw(srgb_array: ArrayFloat) -> npt.NDArray[np.uint8]:
        """Raw gamma sRGB → uint8, same rounding and clamp as ``quantize_channel``."""
        scaled = round_half_away_from_zero(srgb_array * CHANNEL_MAX)
        clamped = np.clip(scaled, 0.0, float(CHANNEL_MAX))
        n_clamped = int(np.count_nonzero(clamped != scaled))
        if n_clamped:
            logger.debug("[quantize] clamped %d of %d channels", n_clamped, scaled.size)
        return clamped.astype(np.uint8)

    @staticmethod
    def _oklch_to_srgb_raw(lch_array: ArrayFloat) -> ArrayFloat:
        """Raw OKLCH → gamma encoded sRGB."""
        lab = ColorSpaceEngine._oklch_to_oklab_raw(lch_array)
        xyz = ColorSpaceEngine._oklab_to_xyz_raw(lab)
        linear = ColorSpaceEngine._xyz_to_linear_srgb_raw(xyz)
        return ColorSpaceEngine._linear_to_srgb_raw(linear)

    # =====================================================================
    #  Public API  (shape-safe wrappers)
    # =====================================================================

    @staticmethod
    @handle_shapes
    def oklch_to_oklab(lch_array: ArrayFloat) -> ArrayFloat:
        """
        Converts OKLCH to OKLab.

        Args:
            lch_array: (L, C, h) data, hue in degrees, shape (N, 3) or (3,).
                A NaN hue denotes an achromatic colour.

        Returns:
            OKLab coordinates (L, a, b). Achromatic rows have a = b = 0.
        """
        return ColorSpaceEngine._oklch_to_oklab_raw(lch_array)

    @staticmethod
    @handle_shapes
    def oklab_to_xyz(oklab_array: ArrayFloat) -> ArrayFloat:
        """
        Converts OKLab to CIE XYZ (D65) via the LMS cone space.

        Args:
            oklab_array: OKLab input, shape (N, 3) or (3,).

        Returns:
            XYZ coordinates. Out-of-gamut inputs may yield negative values.
        """
        return ColorSpaceEngine._oklab_to_xyz_raw(oklab_array)

    @staticmethod
    @handle_shapes
    def xyz_to_linear_srgb(xyz_array: ArrayFloat) -> ArrayFloat:
        """
        Converts XYZ (D65) to linear-light sRGB.

        No clipping is applied; components may fall outside [0, 1].
        """
        return ColorSpaceEngine._xyz_to_linear_srgb_raw(xyz_array)

    @staticmethod
    @handle_shapes
    def linear_to_srgb(linear_array: ArrayFloat) -> ArrayFloat:
        """
        Applies the sign-preserving sRGB OETF.

        Args:
            linear_array: Linear sRGB, any real values.

        Returns:
            Gamma encoded sRGB with the input's signs.
        """
        return ColorSpaceEngine._linear_to_srgb_raw(linear_array)

    @staticmethod
    @handle_shapes
    def srgb_to_linear(srgb_array: ArrayFloat) -> ArrayFloat:
        """
        Applies the sign-preserving sRGB EOTF, the dual of ``linear_to_srgb``.

        Not used by the OKLCH pipeline itself.
        """
        return _inverse_gamma_srgb(srgb_array)

    @staticmethod
    @handle_shapes
    def srgb_to_rgb8(srgb_array: ArrayFloat) -> npt.NDArray[np.uint8]:
        """Quantizes gamma encoded sRGB to clamped 8-bit channels."""
        return ColorSpaceEngine._srgb_to_rgb8_raw(srgb_array)

    @staticmethod
    @handle_shapes
    def oklch_to_srgb(lch_array: ArrayFloat) -> ArrayFloat:
        """Direct conversion OKLCH -> gamma encoded sRGB (unclipped)."""
        return ColorSpaceEngine._oklch_to_srgb_raw(lch_array)

    @staticmethod
    @handle_shapes
    def oklch_to_rgb8(lch_array: ArrayFloat) -> npt.NDArray[np.uint8]:
        """Direct conversion OKLCH -> 8-bit sRGB."""
        srgb = ColorSpaceEngine._oklch_to_srgb_raw(lch_array)
        return ColorSpaceEngine._srgb_to_rgb8_raw(srgb)
