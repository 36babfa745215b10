import numpy as np
import pandas as pd
import pytest
from pydantic import ValidationError
from typing import Any, Dict

from sysidtools.exceptions import SysidConfigError, SysidDataError, SysidShapeMismatchError
from sysidtools.config_models import (
    SVHTConfig,
    ModelSelectionConfig,
    SVHTResults,
    ModelSelectionResults,
)


@pytest.fixture
def sample_matrix() -> np.ndarray:
    return np.arange(12, dtype=float).reshape(3, 4)

@pytest.fixture
def selection_config_data() -> Dict[str, Any]:
    data = np.linspace(0.0, 1.0, 20)
    return {
        "data": data,
        "estimates": {"linear": data + 0.01, "constant": np.full(20, 0.5)},
        "num_parameters": {"linear": 2, "constant": 1},
    }

# ---------- SVHTConfig ----------
def test_svht_config_valid(sample_matrix: np.ndarray):
    config = SVHTConfig(data=sample_matrix)
    assert config.sigma is None
    assert config.inplace is False
    assert config.display_graphs is False
    assert config.save is False

def test_svht_config_requires_matrix():
    with pytest.raises(SysidDataError, match="must be 2D"):
        SVHTConfig(data=np.ones(5))

def test_svht_config_rejects_empty():
    with pytest.raises(SysidDataError, match="cannot be empty"):
        SVHTConfig(data=np.empty((0, 4)))

def test_svht_config_rejects_nan(sample_matrix: np.ndarray):
    sample_matrix[0, 0] = np.nan
    with pytest.raises(SysidDataError, match="NaN or infinite"):
        SVHTConfig(data=sample_matrix)

def test_svht_config_rejects_non_positive_sigma(sample_matrix: np.ndarray):
    with pytest.raises(ValidationError):
        SVHTConfig(data=sample_matrix, sigma=-1.0)

def test_svht_config_forbids_extra_fields(sample_matrix: np.ndarray):
    with pytest.raises(ValidationError):
        SVHTConfig(data=sample_matrix, rank=3)

def test_svht_config_rejects_non_array():
    with pytest.raises(ValidationError):
        SVHTConfig(data=[[1.0, 2.0], [3.0, 4.0]])

# ---------- ModelSelectionConfig ----------
def test_selection_config_valid(selection_config_data: Dict[str, Any]):
    config = ModelSelectionConfig(**selection_config_data)
    assert config.criterion == "AICC"
    assert config.likelihood is None
    assert set(config.estimates) == {"linear", "constant"}

def test_selection_config_normalizes_criterion(selection_config_data: Dict[str, Any]):
    config = ModelSelectionConfig(**selection_config_data, criterion="bic")
    assert config.criterion == "BIC"

def test_selection_config_unknown_criterion(selection_config_data: Dict[str, Any]):
    with pytest.raises(SysidConfigError, match="criterion must be one of"):
        ModelSelectionConfig(**selection_config_data, criterion="HQIC")

def test_selection_config_mismatched_names(selection_config_data: Dict[str, Any]):
    selection_config_data["num_parameters"] = {"linear": 2, "quadratic": 3}
    with pytest.raises(SysidConfigError, match="mismatched: constant, quadratic"):
        ModelSelectionConfig(**selection_config_data)

def test_selection_config_shape_mismatch(selection_config_data: Dict[str, Any]):
    selection_config_data["estimates"]["constant"] = np.full(19, 0.5)
    with pytest.raises(SysidShapeMismatchError, match="Estimate 'constant' has shape"):
        ModelSelectionConfig(**selection_config_data)

def test_selection_config_empty_estimates(selection_config_data: Dict[str, Any]):
    selection_config_data["estimates"] = {}
    selection_config_data["num_parameters"] = {}
    with pytest.raises(SysidConfigError, match="At least one candidate"):
        ModelSelectionConfig(**selection_config_data)

def test_selection_config_negative_parameters(selection_config_data: Dict[str, Any]):
    selection_config_data["num_parameters"]["linear"] = -1
    with pytest.raises(SysidConfigError, match="must be non-negative"):
        ModelSelectionConfig(**selection_config_data)

def test_selection_config_custom_likelihood(selection_config_data: Dict[str, Any]):
    mean_abs = lambda a, b: float(np.mean(np.abs(a - b)))
    config = ModelSelectionConfig(**selection_config_data, likelihood=mean_abs)
    assert config.likelihood is mean_abs

# ---------- Result models ----------
def test_svht_results_construction():
    results = SVHTResults(
        denoised=np.zeros((2, 2)),
        singular_values=np.array([1.0, 0.5]),
        kept_singular_values=np.array([]),
        rank=0,
        threshold_coefficient=2.858,
        cutoff=2.1,
        aspect_ratio=1.0,
        median_singular_value=0.75,
    )
    assert results.known_noise is False
    assert results.rank == 0

def test_model_selection_results_construction():
    table = pd.DataFrame({"k": [1], "score": [0.0]}, index=pd.Index(["m"], name="model"))
    results = ModelSelectionResults(criterion="AIC", scores={"m": 0.0}, best_model="m", table=table)
    assert results.table is table
