# tests/conftest.py
import matplotlib
matplotlib.use("Agg")

import numpy as np
import pytest


@pytest.fixture
def low_rank_noisy():
    """Rank-2 40 x 60 matrix plus small white noise, with the clean signal."""
    rng = np.random.default_rng(42)
    signal = rng.normal(size=(40, 2)) @ rng.normal(size=(2, 60))
    noisy = signal + 0.01 * rng.normal(size=signal.shape)
    return {"signal": signal, "noisy": noisy}
