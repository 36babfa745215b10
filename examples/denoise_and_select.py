from sysidtools import SVHT, ICSELECT
from sysidtools.utils.criteriautils import sum_squared_error
import numpy as np
import os

# Damped oscillator sampled on a grid, observed with white measurement noise
rng = np.random.default_rng(1234)
t = np.linspace(0.0, 10.0, 400)
clean = np.vstack([
    np.exp(-0.1 * t) * np.cos(2.0 * t),
    np.exp(-0.1 * t) * np.sin(2.0 * t),
])
noisy = clean + 0.05 * rng.normal(size=clean.shape)

# Delay-embed the first state into a Hankel matrix and denoise it
delays = 40
hankel = np.array([noisy[0, i:i + t.size - delays] for i in range(delays)])

save_directory = os.path.join(os.getcwd(), "svht")
os.makedirs(save_directory, exist_ok=True)

config = {
    "data": hankel,
    "display_graphs": True,
    "save": {"filename": "SVHT_Oscillator", "extension": "png", "directory": save_directory},
}
denoised = SVHT(config).fit()
print(f"Retained rank: {denoised.rank} (cutoff {denoised.cutoff:.4f})")

# Compare polynomial fits of increasing degree for the envelope of the first state
candidates = {}
num_parameters = {}
for degree in range(1, 8):
    coefficients = np.polyfit(t, noisy[0], degree)
    candidates[f"poly{degree}"] = np.polyval(coefficients, t)
    num_parameters[f"poly{degree}"] = degree + 1

selection = ICSELECT({
    "data": noisy[0],
    "estimates": candidates,
    "num_parameters": num_parameters,
    "criterion": "AICC",
    "likelihood": lambda X, Y: 1.0 / sum_squared_error(X, Y),
}).fit()
print(selection.table)
print(f"Selected model: {selection.best_model}")
