"""Frictional resistance lines.

- Grigson (1993) friction line, used throughout the analysis
- ITTC-1957 model-ship correlation line, kept as alternative
"""

from enum import Enum
import warnings

import numpy as np

import wjlib.analysis_error as analysis_error

# Reynolds number where the Grigson line changes its fitted branch
GRIGSON_BOUNDARY = 1e7


def froude_number(speed, lwl: float, gravity: float):
    return np.asarray(speed, dtype=np.float64) / np.sqrt(gravity * lwl)


def reynolds_number(speed, lwl: float, kinematic_viscosity: float):
    return np.asarray(speed, dtype=np.float64) * lwl / kinematic_viscosity


def _check_reynolds(reynolds) -> np.ndarray:
    reynolds = np.asarray(reynolds, dtype=np.float64)
    if not np.all(np.isfinite(reynolds)) or np.any(reynolds <= 1):
        raise analysis_error.NumericDomainError(
            f"Reynolds number must be finite and > 1, got {reynolds}"
        )
    return reynolds


def _grigson_low(x):
    return 10 ** (2.98651 - 10.8843 * x + 5.15283 * x**2)


def _grigson_high(x):
    return 10 ** (-9.57459 + 26.6084 * x - 30.8285 * x**2 + 10.8914 * x**3)


def grigson_cf(reynolds):
    """Grigson frictional resistance coefficient, piecewise on Re = 1e7.

    The two fitted branches do not meet exactly at the boundary, see
    `grigson_boundary_jump`.
    """
    reynolds = _check_reynolds(reynolds)
    x = np.log10(np.log10(reynolds))
    cf = np.where(reynolds < GRIGSON_BOUNDARY, _grigson_low(x), _grigson_high(x))
    return cf if cf.ndim else np.float64(cf)


def grigson_boundary_jump() -> np.float64:
    """Difference between the high and the low Reynolds branches of the
    Grigson line, both evaluated at the boundary."""
    x = np.log10(np.log10(GRIGSON_BOUNDARY))
    return np.float64(_grigson_high(x) - _grigson_low(x))


def ittc57_cf(reynolds):
    """ITTC-1957 model-ship correlation line."""
    reynolds = _check_reynolds(reynolds)
    if np.any(reynolds <= 100):
        raise analysis_error.NumericDomainError(
            f"ITTC-1957 line is singular for Re <= 100, got {reynolds}"
        )
    cf = 0.075 / (np.log10(reynolds) - 2.0) ** 2
    return cf if cf.ndim else np.float64(cf)


class FrictionLine(Enum):
    GRIGSON = "grigson"
    ITTC57 = "ittc57"

    def cf(self, reynolds):
        if self is FrictionLine.GRIGSON:
            return grigson_cf(reynolds)
        return ittc57_cf(reynolds)


def roughness_allowance(roughness: float, lwl: float, reynolds) -> np.float64:
    """Roughness allowance, ITTC 1978 (Bowden-Davison with Re correction)."""
    reynolds = _check_reynolds(reynolds)
    return np.float64(
        0.044 * ((roughness / lwl) ** (1 / 3) - 10 * reynolds ** (-1 / 3)) + 0.000125
    )


def correlation_allowance(reynolds) -> np.float64:
    """Correlation allowance from ship Reynolds number, in the form used by
    the ITTC 1978 performance prediction method."""
    reynolds = _check_reynolds(reynolds)
    return np.float64((5.68 - 0.6 * np.log10(reynolds)) * 1e-3)


def warn_if_straddling(reynolds_a: float, reynolds_b: float) -> None:
    """Two Reynolds numbers on different Grigson branches give coefficients
    with an inherited step between them."""
    if (reynolds_a < GRIGSON_BOUNDARY) != (reynolds_b < GRIGSON_BOUNDARY):
        warnings.warn(
            f"Reynolds numbers {reynolds_a:.4g} and {reynolds_b:.4g} straddle the "
            + f"Grigson branch boundary, jump={grigson_boundary_jump():.3e}"
        )
