import numpy as np
import pytest
from unittest.mock import patch

from sysidtools import SVHT
from sysidtools.config_models import SVHTConfig, SVHTResults
from sysidtools.exceptions import SysidDataError, SysidPlottingError
from sysidtools.utils.denoiseutils import optimal_shrinkage, optimal_svht


def test_svht_fit_recovers_rank(low_rank_noisy):
    results = SVHT({"data": low_rank_noisy["noisy"]}).fit()
    assert isinstance(results, SVHTResults)
    assert results.rank == 2
    assert results.kept_singular_values.shape == (2,)
    assert results.singular_values.shape == (40,)
    assert results.aspect_ratio == pytest.approx(40 / 60)
    assert results.threshold_coefficient == pytest.approx(optimal_svht(40, 60))
    assert results.cutoff == pytest.approx(results.threshold_coefficient * results.median_singular_value)
    assert results.known_noise is False
    np.testing.assert_allclose(results.denoised, optimal_shrinkage(low_rank_noisy["noisy"]))

def test_svht_accepts_config_object(low_rank_noisy):
    config = SVHTConfig(data=low_rank_noisy["noisy"])
    estimator = SVHT(config)
    assert estimator.config is config
    assert estimator.fit().rank == 2

def test_svht_known_sigma(low_rank_noisy):
    results = SVHT({"data": low_rank_noisy["noisy"], "sigma": 0.01}).fit()
    assert results.known_noise is True
    assert results.threshold_coefficient == pytest.approx(optimal_svht(40, 60, known_noise=True))
    assert results.cutoff == pytest.approx(results.threshold_coefficient * np.sqrt(60) * 0.01)
    assert results.rank == 2

def test_svht_does_not_modify_data_by_default(low_rank_noisy):
    data = low_rank_noisy["noisy"].copy()
    SVHT({"data": data}).fit()
    np.testing.assert_array_equal(data, low_rank_noisy["noisy"])

def test_svht_inplace_overwrites_data(low_rank_noisy):
    data = low_rank_noisy["noisy"].copy()
    results = SVHT({"data": data, "inplace": True}).fit()
    np.testing.assert_array_equal(data, results.denoised)

def test_svht_inplace_rejects_integer_data():
    data = np.arange(12 * 20, dtype=np.int64).reshape(12, 20) % 7
    original = data.copy()
    with pytest.raises(SysidDataError, match="in place"):
        SVHT({"data": data, "inplace": True}).fit()
    np.testing.assert_array_equal(data, original)

def test_svht_integer_data_without_inplace():
    data = np.arange(12 * 20, dtype=np.int64).reshape(12, 20) % 7
    results = SVHT({"data": data}).fit()
    assert results.denoised.dtype == np.float64

def test_svht_zero_rank_warns():
    with pytest.warns(UserWarning, match="No singular value reached"):
        results = SVHT({"data": np.eye(8)}).fit()
    assert results.rank == 0
    np.testing.assert_array_equal(results.denoised, np.zeros((8, 8)))

def test_svht_invalid_config():
    with pytest.raises(SysidDataError):
        SVHT({"data": np.ones(10)})

@patch("sysidtools.utils.resultutils.plt.show")
def test_svht_display_graphs(mock_plt_show, low_rank_noisy):
    SVHT({"data": low_rank_noisy["noisy"], "display_graphs": True}).fit()
    mock_plt_show.assert_called_once()

@patch("sysidtools.estimators.svht.plot_spectrum", side_effect=SysidPlottingError("cannot draw"))
def test_svht_plotting_failure_warns(mock_plot, low_rank_noisy):
    with pytest.warns(UserWarning, match="Plotting failed: cannot draw"):
        results = SVHT({"data": low_rank_noisy["noisy"], "display_graphs": True}).fit()
    assert results.rank == 2
    mock_plot.assert_called_once()

@patch("sysidtools.estimators.svht.plot_spectrum")
def test_svht_no_plot_by_default(mock_plot, low_rank_noisy):
    SVHT({"data": low_rank_noisy["noisy"]}).fit()
    mock_plot.assert_not_called()
