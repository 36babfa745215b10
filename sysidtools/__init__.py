from .estimators.svht import SVHT
from .estimators.icselect import ICSELECT
from .utils.criteriautils import AIC, AICC, BIC, information_criterion, sum_squared_error
from .utils.denoiseutils import (
    median_marcenko_pastur,
    optimal_svht,
    optimal_shrinkage,
    optimal_shrinkage_inplace,
)

# Define __all__ to specify the public API of the sysidtools package
__all__ = [
    "SVHT",
    "ICSELECT",
    "AIC",
    "AICC",
    "BIC",
    "information_criterion",
    "sum_squared_error",
    "median_marcenko_pastur",
    "optimal_svht",
    "optimal_shrinkage",
    "optimal_shrinkage_inplace",
]
