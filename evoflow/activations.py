"""
Activation functions available to evolved networks.

Evolved genomes carry an activation *name* rather than a function so that a
child can inherit it from its first parent and so that genomes print
cleanly. The output layer is always linear; the named activation applies to
every other layer.
"""

import numpy as np
from typing import Callable, Dict


def linear(x: np.ndarray) -> np.ndarray:
    """Pass-through; used for the output layer."""
    return x


def tanh(x: np.ndarray) -> np.ndarray:
    """Default hidden-layer activation, range (-1, 1)."""
    return np.tanh(x)


def sigmoid(x: np.ndarray) -> np.ndarray:
    """Logistic function, range (0, 1)."""
    # exp overflows past ~709
    z = np.clip(x, -500.0, 500.0)
    return 1.0 / (1.0 + np.exp(-z))


def relu(x: np.ndarray) -> np.ndarray:
    """max(0, x), elementwise."""
    return np.maximum(x, 0.0)


class Activation:
    """Named wrapper around an elementwise activation function."""

    def __init__(self, name: str, func: Callable):
        self.name = name
        self.func = func

    def __call__(self, x: np.ndarray) -> np.ndarray:
        return self.func(x)

    def __repr__(self):
        return f"<Activation {self.name!r}>"


# Names a Genome may carry in its `activation` field
ACTIVATIONS: Dict[str, Activation] = {
    name: Activation(name, func)
    for name, func in (('linear', linear), ('tanh', tanh), ('sigmoid', sigmoid), ('relu', relu))
}

DEFAULT_ACTIVATION = 'tanh'


def get_activation(name: str) -> Activation:
    """Look up a registered activation; unknown names raise ValueError."""
    try:
        return ACTIVATIONS[name]
    except KeyError:
        raise ValueError(
            f"Unknown activation {name!r}, expected one of {sorted(ACTIVATIONS)}"
        ) from None
