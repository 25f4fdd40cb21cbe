"""
Matplotlib plots of evolution progress.
"""

from pathlib import Path
from typing import Optional, Tuple, Union

# Matplotlib imports with non-GUI backend
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from .history import EvolutionHistory


def plot_fitness_history(
    history: EvolutionHistory,
    output_path: Optional[Union[str, Path]] = None,
    title: str = 'Evolution Progress',
    figsize: Tuple[int, int] = (10, 6),
) -> plt.Figure:
    """
    Plot best and mean fitness per generation.

    Args:
        history: Recorded evolution history
        output_path: If given, the figure is saved there as PNG and closed
        title: Plot title
        figsize: Figure size

    Returns:
        The matplotlib Figure
    """
    if not history.fitness_trajectory:
        raise ValueError("No fitness trajectory data to plot")

    generations = [g.generation for g in history.generations]

    fig, ax = plt.subplots(figsize=figsize)
    ax.plot(generations, history.fitness_trajectory, 'b-', linewidth=2, label='Best')
    ax.plot(generations, history.mean_trajectory, 'g--', linewidth=1.5, label='Mean')
    ax.set_xlabel('Generation', fontsize=12)
    ax.set_ylabel('Fitness', fontsize=12)
    ax.set_title(title, fontsize=14)
    ax.grid(True, alpha=0.3)
    ax.legend()

    if output_path is not None:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(output_path, dpi=150, bbox_inches='tight')
        plt.close(fig)

    return fig
