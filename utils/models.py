import numpy as np
from scipy.interpolate import PchipInterpolator


def eval_poly(coeffs, x):
    """Evaluate polynomial coefficients using Horner's method.

    Coefficients are in ascending order: coeffs[0] + coeffs[1]*x + ...
    """
    coeffs = list(coeffs)
    if len(coeffs) == 0:
        return 0.0
    if len(coeffs) == 1:
        return coeffs[0] + 0.0 * x

    result = 0.0
    for c in reversed(coeffs[1:]):
        result = result * x + c
    return result * x + coeffs[0]


def polyfit(x, y, degree: int) -> np.ndarray:
    """Least-squares polynomial fit, returning ascending coefficients
    (compatible with `eval_poly`)."""
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    if x.size != y.size:
        raise ValueError(f"x and y must have the same size: {x.size} != {y.size}")
    if np.unique(x).size <= degree:
        raise ValueError(
            f"At least {degree + 1} distinct x values are needed for a degree {degree} fit."
        )
    return np.polynomial.polynomial.polyfit(x, y, degree)


def r_squared(y, y_fit) -> np.float64:
    """Coefficient of determination of a fit."""
    y = np.asarray(y, dtype=np.float64)
    y_fit = np.asarray(y_fit, dtype=np.float64)
    ss_res = np.sum((y - y_fit) ** 2)
    ss_tot = np.sum((y - np.mean(y)) ** 2)
    if ss_tot == 0:
        return np.float64(1.0) if ss_res == 0 else np.float64(0.0)
    return np.float64(1.0 - ss_res / ss_tot)


def spline_interp(x, y, x0) -> np.float64:
    """
    Monotonic (PCHIP) interpolation through (x, y), extrapolating beyond the
    data range. Repeated x values are collapsed, so x must map to a single y.
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)

    x_unique, index = np.unique(x, return_index=True)
    if x_unique.size < 2:
        raise ValueError("At least 2 distinct x values are needed to interpolate.")

    # A straight segment is the exact interpolant of 2 points.
    if x_unique.size == 2:
        y0, y1 = y[index]
        return np.float64(
            y0 + (y1 - y0) * (x0 - x_unique[0]) / (x_unique[1] - x_unique[0])
        )

    return np.float64(PchipInterpolator(x_unique, y[index], extrapolate=True)(x0))


def inverse_interp(x, y, y0) -> np.float64:
    """Solves y(x) = y0 by interpolating x as a function of y."""
    y = np.asarray(y, dtype=np.float64)
    if np.unique(y).size < 2:
        raise ValueError("Cannot invert a constant function.")
    return spline_interp(y, x, y0)
