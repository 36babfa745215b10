from typing import Any, Dict, Union
import numpy as np
import pandas as pd
from pydantic import ValidationError

from ..utils.criteriautils import information_criterion, sum_squared_error
from ..exceptions import SysidError, SysidEstimationError
from ..config_models import ModelSelectionConfig, ModelSelectionResults


def support_label(delta: float) -> str:
    """Rule-of-thumb support for a model given its criterion gap to the best model."""
    if delta <= 2:
        return "substantial"
    if 4 <= delta <= 7:
        return "considerably less"
    if delta > 10:
        return "essentially none"
    return "weak"


class ICSELECT:
    """
    Information criterion model selection.

    Scores candidate estimates of the same data with AIC, AICC or BIC and
    ranks them. For each model the gap ``delta`` to the best score and the
    relative likelihood weight ``exp(-delta / 2) / sum(exp(-delta_j / 2))``
    are reported, along with the usual rule-of-thumb support label
    (``delta <= 2`` substantial, ``4 <= delta <= 7`` considerably less,
    ``delta > 10`` essentially none).

    Parameters
    ----------
    config : ModelSelectionConfig or dict
        Configuration object or dictionary containing:
        - data : np.ndarray
            Observed data.
        - estimates : Dict[str, np.ndarray]
            Estimates of `data` from each candidate model.
        - num_parameters : Dict[str, int]
            Free parameter count of each candidate model.
        - criterion : str, default="AICC"
            One of "AIC", "AICC", "BIC".
        - likelihood : callable, optional
            Scalar comparison of data and estimate; sum of squared errors
            by default.

    Notes
    -----
    Every criterion enters ``-2 * ln(likelihood(data, estimate))``, so the
    likelihood should grow with the quality of the fit. The default sum of
    squared errors does the opposite and is kept for compatibility with
    :func:`~sysidtools.utils.criteriautils.AIC`; pass e.g.
    ``lambda X, Y: 1 / sum_squared_error(X, Y)`` to rank by residual size.

    References
    ----------
    Mangan, N. M., Kutz, J. N., Brunton, S. L., Proctor, J. L. (2017).
    Model selection for dynamical systems via sparse regression and
    information criteria. Proc. R. Soc. A 473: 20170009.
    """

    def __init__(self, config: Union[ModelSelectionConfig, Dict[str, Any]]) -> None:
        if isinstance(config, dict):
            config = ModelSelectionConfig(**config)
        self.config = config
        self.data: np.ndarray = config.data
        self.estimates: Dict[str, np.ndarray] = config.estimates
        self.num_parameters: Dict[str, int] = config.num_parameters
        self.criterion: str = config.criterion
        self.likelihood = config.likelihood or sum_squared_error

    def fit(self) -> ModelSelectionResults:
        """
        Score and rank the candidate models.

        Returns
        -------
        ModelSelectionResults
            Scores per model, the best model name and a ranking table.

        Raises
        ------
        SysidDomainError
            If AICC is requested for a model with too many parameters for
            the number of samples.
        SysidEstimationError
            If the scores are not finite or results cannot be assembled.
        """
        try:
            scores = {
                name: information_criterion(
                    self.criterion,
                    self.num_parameters[name],
                    self.data,
                    estimate,
                    likelihood=self.likelihood,
                )
                for name, estimate in self.estimates.items()
            }
        except SysidError:
            raise
        except Exception as e:
            raise SysidEstimationError(f"Unexpected error while scoring models: {str(e)}") from e

        non_finite = [name for name, score in scores.items() if not np.isfinite(score)]
        if non_finite:
            raise SysidEstimationError(
                f"{self.criterion} is not finite for: {', '.join(non_finite)}. "
                "The likelihood must be strictly positive."
            )

        table = pd.DataFrame(
            {
                "k": [self.num_parameters[name] for name in scores],
                "score": list(scores.values()),
            },
            index=pd.Index(list(scores), name="model"),
        ).sort_values("score", kind="stable")
        table["delta"] = table["score"] - table["score"].min()
        relative_likelihood = np.exp(-table["delta"] / 2)
        table["weight"] = relative_likelihood / relative_likelihood.sum()
        table["support"] = table["delta"].map(support_label)

        try:
            return ModelSelectionResults(
                criterion=self.criterion,
                scores=scores,
                best_model=str(table.index[0]),
                table=table,
            )
        except ValidationError as e:
            raise SysidEstimationError(f"Error creating results structure: {str(e)}") from e
