import numpy as np
from scipy import integrate as spi
from typing import Any, Callable, Dict, Optional, Tuple, Union
from sysidtools.exceptions import (
    SysidDataError,
    SysidDomainError,
    SysidEstimationError,
)

# Numerical services the thresholding routines depend on. Any callable with
# the same signature can be passed in place of the defaults.
Integrator = Callable[[Callable[[float], float], float, float], float]
Decomposer = Callable[[np.ndarray], Tuple[np.ndarray, np.ndarray, np.ndarray]]

MEDIAN_SEARCH_POINTS: int = 5
MEDIAN_SEARCH_TOLERANCE: float = 1e-5


def quad_integrate(func: Callable[[float], float], lower: float, upper: float) -> float:
    """Definite integral of `func` over [lower, upper] with adaptive quadrature."""
    value, _ = spi.quad(func, lower, upper, limit=200)
    return float(value)


def svd_decompose(input_matrix: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Thin SVD of `input_matrix`.

    Returns
    -------
    Tuple[np.ndarray, np.ndarray, np.ndarray]
        ``(U, S, Vh)`` with ``input_matrix == U @ np.diag(S) @ Vh`` and `S`
        sorted in descending order.
    """
    try:
        return np.linalg.svd(input_matrix, full_matrices=False)
    except np.linalg.LinAlgError as e:
        raise SysidEstimationError(f"SVD computation failed: {e}") from e


def _validate_aspect_ratio(beta: float) -> float:
    if isinstance(beta, bool) or not isinstance(beta, (float, int, np.floating, np.integer)):
        raise SysidDataError("Input `beta` must be a float.")
    if not (0 < beta <= 1):
        raise SysidDomainError(
            f"The aspect ratio must lie in (0, 1], got {beta}. "
            "Pass the smaller matrix dimension first."
        )
    return float(beta)


def marcenko_pastur_bounds(beta: float) -> Tuple[float, float]:
    """Support ``((1 - sqrt(beta))**2, (1 + sqrt(beta))**2)`` of the Marchenko-Pastur law."""
    beta = _validate_aspect_ratio(beta)
    lower = (1 - np.sqrt(beta)) ** 2
    upper = (1 + np.sqrt(beta)) ** 2
    return float(lower), float(upper)


def marcenko_pastur_density(
    t: Union[float, np.ndarray], beta: float
) -> Union[float, np.ndarray]:
    """
    Marchenko-Pastur probability density with shape parameter `beta`.

    Parameters
    ----------
    t : float or np.ndarray
        Point(s) at which to evaluate the density.
    beta : float
        Aspect ratio in (0, 1].

    Returns
    -------
    float or np.ndarray
        ``sqrt((upper - t) * (t - lower)) / (2 * pi * beta * t)`` strictly
        inside the support and zero elsewhere. Scalars in, scalar out.
    """
    lower, upper = marcenko_pastur_bounds(beta)
    points = np.asarray(t, dtype=float)
    product = (upper - points) * (points - lower)
    with np.errstate(divide="ignore", invalid="ignore"):
        density = np.where(
            product > 0,
            np.sqrt(np.clip(product, 0, None)) / (2 * np.pi * beta * points),
            0.0,
        )
    if density.ndim == 0:
        return float(density)
    return density


def incremental_marcenko_pastur(
    x: float,
    beta: float,
    gamma: float = 0,
    integrate: Integrator = quad_integrate,
) -> float:
    """
    Integral of ``t**gamma`` against the Marchenko-Pastur density from `x` to the
    upper edge of the support.

    With ``gamma == 0`` this is the upper tail probability ``P(T >= x)``.
    """
    _, upper = marcenko_pastur_bounds(beta)
    if gamma == 0:
        integrand = lambda t: marcenko_pastur_density(t, beta)
    else:
        integrand = lambda t: (t ** gamma) * marcenko_pastur_density(t, beta)
    return integrate(integrand, x, upper)


def median_marcenko_pastur(
    beta: float,
    tol: float = MEDIAN_SEARCH_TOLERANCE,
    integrate: Integrator = quad_integrate,
) -> float:
    """
    Median of the Marchenko-Pastur distribution with shape parameter `beta`.

    The support is narrowed iteratively: five equally spaced points are placed
    in the current bracket and the CDF is evaluated at each. The lower bound
    moves to the largest point with CDF below one half, the upper bound to the
    smallest point with CDF above one half.

    Parameters
    ----------
    beta : float
        Aspect ratio in (0, 1].
    tol : float, default 1e-5
        Absolute bracket width at which the search stops.
    integrate : Integrator, default quad_integrate
        Definite integrator used for the tail probabilities.

    Returns
    -------
    float
        Midpoint of the final bracket.

    Notes
    -----
    The search also stops as soon as no sampled point can move one of the
    bounds. The midpoint of the bracket reached at that point is returned
    even if it is wider than `tol`.
    """
    lower, upper = marcenko_pastur_bounds(beta)
    if tol <= 0:
        raise SysidDataError("Input `tol` must be positive.")

    moved = True
    while moved and (upper - lower > tol):
        sample_points = np.linspace(lower, upper, MEDIAN_SEARCH_POINTS)
        cdf_values = np.array(
            [1.0 - incremental_marcenko_pastur(x, beta, 0, integrate=integrate) for x in sample_points]
        )

        below = sample_points[cdf_values < 0.5]
        above = sample_points[cdf_values > 0.5]
        if below.size:
            lower = float(below.max())
        else:
            moved = False
        if above.size:
            upper = float(above.min())
        else:
            moved = False

    return (lower + upper) / 2


def optimal_svht(
    m: int,
    n: int,
    known_noise: bool = False,
    integrate: Integrator = quad_integrate,
) -> float:
    """
    Optimal hard threshold coefficient for the singular values of an ``m x n`` matrix.

    Parameters
    ----------
    m : int
        Smaller matrix dimension.
    n : int
        Larger matrix dimension.
    known_noise : bool, default False
        If True, return the coefficient ``c(beta)`` to be multiplied by
        ``sqrt(n) * sigma`` for a known noise level ``sigma``. Otherwise the
        coefficient is divided by the square root of the Marchenko-Pastur
        median so that it applies to ``median(S)``.

    Returns
    -------
    float
        Threshold coefficient ``tau``.

    Raises
    ------
    SysidDomainError
        If ``m / n`` is not in (0, 1].

    References
    ----------
    Gavish, M., Donoho, D. L. (2014). The Optimal Hard Threshold for Singular
    Values is 4/sqrt(3). IEEE Trans. Inf. Theory 60(8), 5040-5053.
    """
    if n == 0:
        raise SysidDomainError("Matrix dimension `n` must be non-zero.")
    beta = _validate_aspect_ratio(m / n)

    omega = (8 * beta) / (beta + 1 + np.sqrt(beta ** 2 + 14 * beta + 1))
    coefficient = float(np.sqrt(2 * (beta + 1) + omega))

    if known_noise:
        return coefficient
    median = median_marcenko_pastur(beta, integrate=integrate)
    return coefficient / float(np.sqrt(median))


def svht_truncation(
    input_matrix: np.ndarray,
    sigma: Optional[float] = None,
    decompose: Decomposer = svd_decompose,
    integrate: Integrator = quad_integrate,
) -> Dict[str, Any]:
    """
    Decompose `input_matrix` and truncate its spectrum at the optimal hard threshold.

    Parameters
    ----------
    input_matrix : np.ndarray
        2D data matrix.
    sigma : Optional[float], default None
        Known noise standard deviation. When given, the cutoff is
        ``optimal_svht(m, n, known_noise=True) * sqrt(n) * sigma``; otherwise
        it is ``optimal_svht(m, n) * median(S)``.
    decompose : Decomposer, default svd_decompose
        Thin SVD returning ``(U, S, Vh)``.
    integrate : Integrator, default quad_integrate
        Definite integrator used for the Marchenko-Pastur median.

    Returns
    -------
    Dict[str, Any]
        Keys ``"reconstruction"``, ``"U"``, ``"S"``, ``"Vh"``, ``"keep"``
        (boolean mask over `S`), ``"rank"``, ``"tau"``, ``"cutoff"``,
        ``"median"`` and ``"aspect_ratio"``.
    """
    if not isinstance(input_matrix, np.ndarray):
        raise SysidDataError("Input `input_matrix` must be a NumPy array.")
    if input_matrix.ndim != 2:
        raise SysidDataError("Input `input_matrix` must be a 2D array.")
    if input_matrix.size == 0:
        raise SysidDataError("Input `input_matrix` cannot be empty.")

    m, n = min(input_matrix.shape), max(input_matrix.shape)
    left, singular_values, right_h = decompose(input_matrix)
    median_singular_value = float(np.median(singular_values))

    if sigma is None:
        tau = optimal_svht(m, n, integrate=integrate)
        cutoff = tau * median_singular_value
    else:
        if isinstance(sigma, bool) or not isinstance(sigma, (float, int, np.floating, np.integer)):
            raise SysidDataError("Input `sigma` must be a float.")
        if sigma <= 0:
            raise SysidDataError("Input `sigma` must be positive.")
        tau = optimal_svht(m, n, known_noise=True)
        cutoff = tau * np.sqrt(n) * sigma

    keep = singular_values >= cutoff
    # An empty selection reconstructs to zeros of the original shape.
    reconstruction = left[:, keep] @ np.diag(singular_values[keep]) @ right_h[keep, :]

    return {
        "reconstruction": reconstruction,
        "U": left,
        "S": singular_values,
        "Vh": right_h,
        "keep": keep,
        "rank": int(np.count_nonzero(keep)),
        "tau": float(tau),
        "cutoff": float(cutoff),
        "median": median_singular_value,
        "aspect_ratio": m / n,
    }


def optimal_shrinkage(
    input_matrix: np.ndarray,
    decompose: Decomposer = svd_decompose,
    integrate: Integrator = quad_integrate,
) -> np.ndarray:
    """
    Denoised copy of `input_matrix` by optimal singular value hard thresholding.

    Singular values below ``optimal_svht(m, n) * median(S)`` are discarded,
    with ``m, n`` the smaller and larger dimension. If none survive, the
    result is a zero matrix of the input shape. The input is not modified.
    """
    return svht_truncation(input_matrix, decompose=decompose, integrate=integrate)["reconstruction"]


def optimal_shrinkage_inplace(
    input_matrix: np.ndarray,
    decompose: Decomposer = svd_decompose,
    integrate: Integrator = quad_integrate,
) -> None:
    """
    Overwrite `input_matrix` with :func:`optimal_shrinkage` of itself.

    Raises
    ------
    SysidDataError
        If the reconstruction cannot be stored in the dtype of `input_matrix`
        without truncation, e.g. for integer arrays.
    """
    write_inplace(input_matrix, optimal_shrinkage(input_matrix, decompose=decompose, integrate=integrate))


def write_inplace(target: np.ndarray, result: np.ndarray) -> None:
    """Copy `result` into `target`, refusing casts that would truncate values."""
    if not np.can_cast(result.dtype, target.dtype, casting="same_kind"):
        raise SysidDataError(
            f"Cannot write a {result.dtype} reconstruction into an array of dtype "
            f"{target.dtype} in place. Convert the input to a floating or complex dtype first."
        )
    target[...] = result
