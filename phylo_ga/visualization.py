"""
Plots for finished runs.
"""

from pathlib import Path
from typing import Optional, Tuple, Union

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from .printers import FitnessHistory


def plot_fitness_history(history: FitnessHistory,
                         save_path: Union[str, Path],
                         title: Optional[str] = None,
                         figsize: Tuple[int, int] = (10, 6)) -> Path:
    """
    Plot best, average and worst fitness per generation.

    Args:
        history: Statistics recorded during the run
        save_path: PNG file to write
        title: Figure title
        figsize: Figure size (width, height)

    Returns:
        Path to the saved figure

    Raises:
        ValueError: If the history is empty
    """
    if len(history) == 0:
        raise ValueError("Fitness history is empty; nothing to plot")

    save_path = Path(save_path)
    save_path.parent.mkdir(parents=True, exist_ok=True)

    fig, ax = plt.subplots(figsize=figsize)
    ax.plot(history.generations, history.best, label="Best", color="green", linewidth=2)
    ax.plot(history.generations, history.average, label="Average", color="blue")
    ax.plot(history.generations, history.worst, label="Worst", color="red", alpha=0.6)
    ax.fill_between(history.generations, history.best, history.worst, color="gray", alpha=0.15)

    ax.set_xlabel("Generation")
    ax.set_ylabel("Parsimony cost")
    ax.set_title(title or "Fitness by generation")
    ax.grid(True, alpha=0.3)
    ax.legend()

    fig.tight_layout()
    fig.savefig(save_path, dpi=150, bbox_inches='tight')
    plt.close(fig)

    return save_path
