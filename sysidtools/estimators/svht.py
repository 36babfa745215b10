import warnings
from typing import Any, Dict, Optional, Union
import numpy as np
from pydantic import ValidationError

from ..utils.denoiseutils import svht_truncation, write_inplace
from ..utils.resultutils import plot_spectrum
from ..exceptions import (
    SysidError,
    SysidDataError,
    SysidEstimationError,
    SysidPlottingError,
)
from ..config_models import SVHTConfig, SVHTResults


class SVHT:
    """
    Optimal Singular Value Hard Thresholding (SVHT) estimator.

    Denoises a data matrix by discarding the singular values that fall below
    the optimal hard threshold of Gavish and Donoho. With an unknown noise
    level the cutoff is ``optimal_svht(m, n) * median(S)``; with a known
    noise standard deviation ``sigma`` it is
    ``optimal_svht(m, n, known_noise=True) * sqrt(n) * sigma``, where
    ``m <= n`` are the matrix dimensions.

    Parameters
    ----------
    config : SVHTConfig or dict
        Configuration object or dictionary containing:
        - data : np.ndarray
            2D data matrix to denoise.
        - sigma : float, optional
            Known noise standard deviation.
        - inplace : bool, default=False
            Whether to overwrite `data` with the denoised matrix.
        - display_graphs : bool, default=False
            Whether to plot the spectrum against the cutoff after fitting.
        - save : Union[bool, dict], default=False
            Controls whether the plot is saved.

    References
    ----------
    Gavish, M., Donoho, D. L. (2014). The Optimal Hard Threshold for Singular
    Values is 4/sqrt(3). IEEE Trans. Inf. Theory 60(8), 5040-5053.

    Examples
    --------
    >>> import numpy as np
    >>> from sysidtools import SVHT
    >>> rng = np.random.default_rng(0)
    >>> signal = rng.normal(size=(50, 2)) @ rng.normal(size=(2, 80))
    >>> noisy = signal + 0.1 * rng.normal(size=signal.shape)
    >>> results = SVHT({"data": noisy}).fit()
    >>> results.rank
    2
    """

    def __init__(self, config: Union[SVHTConfig, Dict[str, Any]]) -> None:
        if isinstance(config, dict):
            config = SVHTConfig(**config)
        self.config = config
        self.data: np.ndarray = config.data
        self.sigma: Optional[float] = config.sigma
        self.inplace: bool = config.inplace
        self.display_graphs: bool = config.display_graphs
        self.save: Union[bool, dict] = config.save

    def fit(self) -> SVHTResults:
        """
        Threshold the spectrum of the configured data matrix.

        Returns
        -------
        SVHTResults
            Denoised matrix together with the spectrum, the threshold
            coefficient, the absolute cutoff and the retained rank.

        Raises
        ------
        SysidDataError
            If the data cannot be decomposed as a matrix.
        SysidEstimationError
            If the decomposition or threshold computation fails, or the
            results cannot be assembled.
        """
        try:
            truncation = svht_truncation(self.data, sigma=self.sigma)
        except SysidError:
            raise
        except Exception as e:
            raise SysidEstimationError(f"Unexpected error during SVHT estimation: {str(e)}") from e

        if truncation["rank"] == 0:
            warnings.warn(
                "No singular value reached the optimal hard threshold; "
                "the denoised matrix is identically zero.",
                UserWarning,
            )

        if self.inplace:
            write_inplace(self.data, truncation["reconstruction"])

        try:
            results = SVHTResults(
                denoised=truncation["reconstruction"],
                singular_values=truncation["S"],
                kept_singular_values=truncation["S"][truncation["keep"]],
                rank=truncation["rank"],
                threshold_coefficient=truncation["tau"],
                cutoff=truncation["cutoff"],
                aspect_ratio=truncation["aspect_ratio"],
                median_singular_value=truncation["median"],
                known_noise=self.sigma is not None,
            )
        except ValidationError as e:
            raise SysidEstimationError(f"Error creating results structure: {str(e)}") from e

        if self.display_graphs:
            try:
                plot_spectrum(
                    singular_values=truncation["S"],
                    cutoff=truncation["cutoff"],
                    rank=truncation["rank"],
                    estimation_method_name="SVHT",
                    save_plot_config=self.save,
                )
            except (SysidPlottingError, SysidDataError) as e:
                warnings.warn(f"Plotting failed: {str(e)}", UserWarning)
            except Exception as e:
                warnings.warn(f"Unexpected plotting error: {str(e)}", UserWarning)

        return results
