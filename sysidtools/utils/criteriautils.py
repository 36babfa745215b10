import numpy as np
from typing import Callable, Dict
from sysidtools.exceptions import (
    SysidConfigError,
    SysidDataError,
    SysidDomainError,
    SysidShapeMismatchError,
)

# Scalar comparison of an observed array and its model estimate.
Likelihood = Callable[[np.ndarray, np.ndarray], float]


def sum_squared_error(observed: np.ndarray, estimated: np.ndarray) -> float:
    """Sum of squared elementwise differences between two equal-shaped arrays."""
    return float(np.sum(np.abs(observed - estimated) ** 2))


def _validate_inputs(num_parameters: int, observed: np.ndarray, estimated: np.ndarray) -> None:
    if isinstance(num_parameters, bool) or not isinstance(num_parameters, (int, np.integer)):
        raise SysidConfigError("Input `num_parameters` must be an integer.")
    if num_parameters < 0:
        raise SysidConfigError("Input `num_parameters` must be non-negative.")
    if not isinstance(observed, np.ndarray):
        raise SysidDataError("Input `observed` must be a NumPy array.")
    if not isinstance(estimated, np.ndarray):
        raise SysidDataError("Input `estimated` must be a NumPy array.")
    if observed.shape != estimated.shape:
        raise SysidShapeMismatchError(
            f"Dimensions of trajectories should be equal: observed has shape "
            f"{observed.shape}, estimated has shape {estimated.shape}."
        )


def _log_likelihood(
    likelihood: Likelihood, observed: np.ndarray, estimated: np.ndarray
) -> float:
    value = likelihood(observed, estimated)
    if np.ndim(value) != 0:
        raise SysidDataError(
            "The likelihood function must return a scalar, got an array of "
            f"shape {np.shape(value)}."
        )
    # Non-positive values are left to numpy: log(0) is -inf.
    return float(np.log(value))


def _sample_count(observed: np.ndarray) -> int:
    """Number of samples: trailing dimension of a matrix, length of a vector."""
    if observed.ndim == 1:
        return len(observed)
    if observed.ndim == 2:
        return observed.shape[1]
    raise SysidDataError(
        f"Input `observed` must be a 1D or 2D array, got {observed.ndim} dimensions."
    )


def AIC(
    num_parameters: int,
    observed: np.ndarray,
    estimated: np.ndarray,
    likelihood: Likelihood = sum_squared_error,
) -> float:
    """
    Akaike Information Criterion (AIC) of a model estimate.

    Parameters
    ----------
    num_parameters : int
        Number of free parameters ``k`` of the fitted model.
    observed : np.ndarray
        Observed data ``X``.
    estimated : np.ndarray
        Model estimate ``Y`` of the data, same shape as `observed`.
    likelihood : Callable[[np.ndarray, np.ndarray], float], default sum_squared_error
        Any scalar function of ``(X, Y)``. It must return a strictly positive
        value; zero yields an infinite criterion.

    Returns
    -------
    float
        :math:`2k - 2 \\ln L(X, Y)`.

    Raises
    ------
    SysidShapeMismatchError
        If `observed` and `estimated` have different shapes.

    References
    ----------
    Mangan, N. M., Kutz, J. N., Brunton, S. L., Proctor, J. L. (2017).
    Model selection for dynamical systems via sparse regression and
    information criteria. Proc. R. Soc. A 473: 20170009.
    """
    _validate_inputs(num_parameters, observed, estimated)
    return 2 * num_parameters - 2 * _log_likelihood(likelihood, observed, estimated)


def AICC(
    num_parameters: int,
    observed: np.ndarray,
    estimated: np.ndarray,
    likelihood: Likelihood = sum_squared_error,
) -> float:
    """
    AIC corrected for finite samples.

    Adds :math:`2(k+1)(k+2) / (n - k - 2)` to :func:`AIC`, where ``n`` is the
    number of columns for matrix input and the length for vector input.

    Raises
    ------
    SysidShapeMismatchError
        If `observed` and `estimated` have different shapes.
    SysidDomainError
        If ``n - k - 2 <= 0``; the correction term is undefined or negative
        there.
    """
    _validate_inputs(num_parameters, observed, estimated)
    num_samples = _sample_count(observed)
    denominator = num_samples - num_parameters - 2
    if denominator <= 0:
        raise SysidDomainError(
            f"AICC requires more samples than parameters plus two: got "
            f"n={num_samples} samples for k={num_parameters} parameters."
        )
    correction = 2 * (num_parameters + 1) * (num_parameters + 2) / denominator
    return AIC(num_parameters, observed, estimated, likelihood=likelihood) + correction


def BIC(
    num_parameters: int,
    observed: np.ndarray,
    estimated: np.ndarray,
    likelihood: Likelihood = sum_squared_error,
) -> float:
    """
    Bayes Information Criterion (BIC): :math:`-2 \\ln L(X, Y) + k \\ln n`.

    ``n`` is defined as in :func:`AICC`.
    """
    _validate_inputs(num_parameters, observed, estimated)
    num_samples = _sample_count(observed)
    return float(
        -2 * _log_likelihood(likelihood, observed, estimated)
        + num_parameters * np.log(num_samples)
    )


CRITERIA: Dict[str, Callable[..., float]] = {"AIC": AIC, "AICC": AICC, "BIC": BIC}


def information_criterion(
    name: str,
    num_parameters: int,
    observed: np.ndarray,
    estimated: np.ndarray,
    likelihood: Likelihood = sum_squared_error,
) -> float:
    """Evaluate the criterion called `name` ("AIC", "AICC" or "BIC")."""
    if not isinstance(name, str) or name.upper() not in CRITERIA:
        raise SysidConfigError(
            f"Unknown information criterion '{name}'. Choose one of {sorted(CRITERIA)}."
        )
    return CRITERIA[name.upper()](num_parameters, observed, estimated, likelihood=likelihood)
