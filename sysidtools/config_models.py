from typing import Any, Callable, Dict, Optional, Union
import numpy as np
import pandas as pd
from pydantic import BaseModel, Field, model_validator
from sysidtools.exceptions import (
    SysidConfigError,
    SysidDataError,
    SysidShapeMismatchError,
)
from sysidtools.utils.criteriautils import CRITERIA


class BaseSysidConfig(BaseModel):
    """
    Base Pydantic model for estimator configurations.
    Holds the input data array and the plotting options shared by estimators.
    """
    data: np.ndarray = Field(..., description="Observed data array.")
    display_graphs: bool = Field(default=False, description="Whether to display plots of results.")
    save: Union[bool, Dict[str, Any]] = Field(default=False, description="Configuration for saving plots. If False (default), plots are not saved. If True, plots are saved with default names. If a dict, it may set 'filename', 'extension', 'directory' and 'display'.")

    class Config:
        arbitrary_types_allowed = True
        extra = 'forbid' # Forbid extra fields not defined in the model

    @model_validator(mode='after')
    def check_data(cls, values: Any) -> Any:
        data = values.data
        if data.size == 0:
            raise SysidDataError("Input array 'data' cannot be empty.")
        if np.issubdtype(data.dtype, np.number) and not np.all(np.isfinite(data)):
            raise SysidDataError("Input array 'data' contains NaN or infinite values.")
        return values


class SVHTConfig(BaseSysidConfig):
    """
    Configuration for the optimal singular value hard thresholding estimator.

    If `sigma` is None the noise level is unknown and the cutoff is scaled
    by the median singular value; otherwise the cutoff is
    ``c(beta) * sqrt(n) * sigma``.
    """
    sigma: Optional[float] = Field(default=None, gt=0, description="Known noise standard deviation.")
    inplace: bool = Field(default=False, description="Overwrite `data` with the denoised matrix.")

    @model_validator(mode='after')
    def check_matrix(cls, values: Any) -> Any:
        if values.data.ndim != 2:
            raise SysidDataError(
                f"Input array 'data' must be 2D, got {values.data.ndim} dimensions."
            )
        return values


class ModelSelectionConfig(BaseSysidConfig):
    """
    Configuration for ranking candidate model estimates by an information criterion.

    `estimates` and `num_parameters` are keyed by model name and must carry
    the same names. Every estimate must have the shape of `data`.
    """
    estimates: Dict[str, np.ndarray] = Field(..., description="Model estimates of `data`, keyed by model name.")
    num_parameters: Dict[str, int] = Field(..., description="Number of free parameters of each model.")
    criterion: str = Field(default="AICC", description="Information criterion: 'AIC', 'AICC' or 'BIC'.")
    likelihood: Optional[Callable[[np.ndarray, np.ndarray], float]] = Field(default=None, description="Scalar comparison of data and estimate. Defaults to the sum of squared errors.")

    @model_validator(mode='after')
    def check_candidates(cls, values: Any) -> Any:
        criterion = values.criterion.upper()
        if criterion not in CRITERIA:
            raise SysidConfigError(
                f"criterion must be one of {sorted(CRITERIA)}; got '{values.criterion}'"
            )
        values.criterion = criterion

        if not values.estimates:
            raise SysidConfigError("At least one candidate estimate is required.")

        missing = set(values.estimates) ^ set(values.num_parameters)
        if missing:
            raise SysidConfigError(
                f"estimates and num_parameters must name the same models; mismatched: {', '.join(sorted(missing))}"
            )

        for name, estimate in values.estimates.items():
            if not isinstance(estimate, np.ndarray):
                raise SysidDataError(f"Estimate '{name}' must be a NumPy array.")
            if estimate.shape != values.data.shape:
                raise SysidShapeMismatchError(
                    f"Estimate '{name}' has shape {estimate.shape}, expected {values.data.shape}."
                )
            if values.num_parameters[name] < 0:
                raise SysidConfigError(f"num_parameters['{name}'] must be non-negative.")
        return values


# --- Pydantic Models for Standardized Estimator Results ---

class SVHTResults(BaseModel):
    """Outcome of optimal singular value hard thresholding."""
    denoised: np.ndarray = Field(..., description="Rank-reduced reconstruction of the data.")
    singular_values: np.ndarray = Field(..., description="Full singular value spectrum of the data.")
    kept_singular_values: np.ndarray = Field(..., description="Singular values at or above the cutoff.")
    rank: int = Field(..., description="Number of singular values kept.")
    threshold_coefficient: float = Field(..., description="Optimal threshold coefficient tau.")
    cutoff: float = Field(..., description="Absolute cutoff applied to the singular values.")
    aspect_ratio: float = Field(..., description="Ratio of smaller to larger matrix dimension.")
    median_singular_value: float = Field(..., description="Median of the singular value spectrum.")
    known_noise: bool = Field(default=False, description="Whether a known noise level set the cutoff.")

    class Config:
        arbitrary_types_allowed = True
        extra = 'forbid'


class ModelSelectionResults(BaseModel):
    """Information criterion scores and ranking of candidate models."""
    criterion: str = Field(..., description="Criterion used for scoring.")
    scores: Dict[str, float] = Field(..., description="Criterion value of each model.")
    best_model: str = Field(..., description="Name of the model with the lowest score.")
    table: pd.DataFrame = Field(..., description="Ranking with columns k, score, delta, weight and support, sorted by score.")

    class Config:
        arbitrary_types_allowed = True
        extra = 'forbid'
