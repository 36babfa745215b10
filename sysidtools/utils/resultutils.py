import numpy as np
import matplotlib.pyplot as plt
import os
from matplotlib import rc_context
from typing import Any, Dict, Union
from sysidtools.exceptions import SysidDataError, SysidPlottingError


def plot_spectrum(
    singular_values: np.ndarray,
    cutoff: float,
    rank: int,
    estimation_method_name: str = "SVHT",
    kept_color: str = "black",
    discarded_color: str = "grey",
    cutoff_color: str = "red",
    save_plot_config: Union[bool, Dict[str, Any]] = False,
) -> None:
    """Plot a singular value spectrum against its hard threshold.

    Singular values are drawn on a log scale, split into those kept and
    those discarded, with a horizontal line at the cutoff.

    Parameters
    ----------
    singular_values : np.ndarray
        1D spectrum, sorted in descending order.
    cutoff : float
        Absolute cutoff applied to the singular values.
    rank : int
        Number of singular values kept. Used in the legend.
    estimation_method_name : str, default "SVHT"
        Used for constructing default plot filenames if `save_plot_config`
        is True.
    kept_color, discarded_color, cutoff_color : str
        Colors of the kept values, discarded values and cutoff line.
    save_plot_config : Union[bool, Dict[str, Any]], default False
        Controls saving the plot:

        - If ``False`` (default): The plot is displayed using `plt.show()`
          but not saved.
        - If ``True``: The plot is saved as
          ``{estimation_method_name}_spectrum.png`` in the current working
          directory and not displayed.
        - If a ``dict``: Allows specifying 'filename', 'extension', and
          'directory'. The plot is displayed unless 'display' is set to
          ``False``.

    Examples
    --------
    >>> from unittest.mock import patch
    >>> with patch("matplotlib.pyplot.show"): # doctest: +SKIP
    ...     plot_spectrum(np.array([10.0, 5.0, 0.2, 0.1]), cutoff=1.0, rank=2) # doctest: +SKIP
    """
    if not isinstance(singular_values, np.ndarray) or singular_values.ndim != 1:
        raise SysidDataError("singular_values must be a 1D NumPy array.")
    if singular_values.size == 0:
        raise SysidDataError("singular_values cannot be empty.")

    plot_theme_settings = {
        "figure.facecolor": "white",
        "figure.figsize": (11, 5),
        "figure.dpi": 100,
        "lines.linewidth": 1.2,
        "xtick.direction": "out",
        "ytick.direction": "out",
        "font.size": 14,
        "axes.grid": True,
        "axes.facecolor": "white",
        "axes.titleweight": "bold",
        "axes.labelweight": "bold",
        "axes.spines.top": False,
        "axes.spines.right": False,
        "grid.alpha": 0.1,
        "grid.color": "#000000",
        "legend.framealpha": 0.5,
        "legend.loc": "best",
        "legend.fontsize": "small",
    }

    with rc_context(rc=plot_theme_settings):
        index = np.arange(1, singular_values.size + 1)
        kept = singular_values >= cutoff
        # Zero singular values cannot be shown on a log axis.
        positive = singular_values > 0

        plt.semilogy(
            index[kept & positive], singular_values[kept & positive],
            "o", color=kept_color, label=f"Kept (rank {rank})",
        )
        plt.semilogy(
            index[~kept & positive], singular_values[~kept & positive],
            "o", color=discarded_color, fillstyle="none", label="Discarded",
        )
        plt.axhline(y=cutoff, color=cutoff_color, linestyle="--", linewidth=1.8, label=f"Cutoff {cutoff:.4g}")

        plt.xlabel("Index")
        plt.ylabel("Singular value")
        plt.title("Singular Value Spectrum and Optimal Hard Threshold", loc="left")
        plt.legend()

        if save_plot_config:
            if isinstance(save_plot_config, dict):
                filename = save_plot_config.get("filename", f"{estimation_method_name}_spectrum")
                extension = save_plot_config.get("extension", "png")
                directory = save_plot_config.get("directory", os.getcwd())
            else:
                filename = f"{estimation_method_name}_spectrum"
                extension = "png"
                directory = os.getcwd()

            os.makedirs(directory, exist_ok=True)
            filepath = os.path.join(directory, f"{filename}.{extension}")

            try:
                plt.savefig(filepath)
                print(f"Plot saved to: {filepath}")
            except OSError as e:
                raise SysidPlottingError(f"Failed to save plot to {filepath}: {e}") from e

        if not save_plot_config or (isinstance(save_plot_config, dict) and save_plot_config.get("display", True)):
            plt.show()

        plt.close()
