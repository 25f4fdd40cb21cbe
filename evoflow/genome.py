"""
Genome representation for evolved feed-forward networks.

A Genome is a fixed-topology, fully-connected network. Its genes are the
per-layer weight matrices; evolution never changes the architecture, only
the weights.

Key features:
- Forward evaluation with a linear output layer
- In-place Gaussian mutation with clamping
- Weighted recombination of two parents, biased toward the fitter one
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence
import numpy as np

from .activations import get_activation, DEFAULT_ACTIVATION


# Constant prepended to every input vector; multiplies the bias column.
BIAS_INPUT = 1.0

# Standard deviation multiplier for mutation noise
MUTATION_SCALE = 0.1

# Weights are clamped into this range after mutation
WEIGHT_FLOOR = 0.0
WEIGHT_CEILING = 1.0


@dataclass(eq=False)
class Layer:
    """
    One fully-connected layer.

    Attributes:
        weights: Matrix of shape (neurons, inputs + 1); column 0 is the bias
        pre_activations: Scratch vector of weighted sums from the last evaluation
        outputs: Scratch vector of activated outputs from the last evaluation
    """
    weights: np.ndarray
    pre_activations: np.ndarray = field(default=None)
    outputs: np.ndarray = field(default=None)

    def __post_init__(self):
        self.weights = np.asarray(self.weights, dtype=float)
        if self.weights.ndim != 2 or self.weights.shape[1] < 2:
            raise ValueError(
                f"Layer weights must be a (neurons, inputs + 1) matrix, got shape {self.weights.shape}"
            )
        if self.pre_activations is None:
            self.pre_activations = np.zeros(self.n_neurons)
        if self.outputs is None:
            self.outputs = np.zeros(self.n_neurons)

    @classmethod
    def random(cls, n_neurons: int, n_inputs: int, rng: np.random.Generator) -> 'Layer':
        """Create a layer with weights drawn uniformly from [-1, 1]."""
        return cls(weights=rng.uniform(-1.0, 1.0, size=(n_neurons, n_inputs + 1)))

    @property
    def n_neurons(self) -> int:
        return self.weights.shape[0]

    @property
    def n_inputs(self) -> int:
        """Input width, excluding the bias column."""
        return self.weights.shape[1] - 1

    def copy(self) -> 'Layer':
        return Layer(
            weights=self.weights.copy(),
            pre_activations=self.pre_activations.copy(),
            outputs=self.outputs.copy(),
        )

    def __str__(self) -> str:
        rows = []
        for row in self.weights:
            rows.append('[' + ''.join(f"{w}, " for w in row) + ']')
        return '\n'.join(rows) + '\n'


@dataclass(eq=False)
class Genome:
    """
    A candidate network: layer weight matrices plus activation and fitness.

    Attributes:
        layers: Ordered layers; layer i takes layer i-1's outputs as input
        activation: Name of the activation applied to every non-output layer
        fitness: Last computed fitness (None until evaluated by a fitness function)
    """
    layers: List[Layer]
    activation: str = DEFAULT_ACTIVATION
    fitness: Optional[float] = None

    def __post_init__(self):
        """Validate genome consistency."""
        if not self.layers:
            raise ValueError("Genome must have at least one layer")
        # Raises for unknown names
        get_activation(self.activation)
        for i in range(1, len(self.layers)):
            if self.layers[i].n_inputs != self.layers[i - 1].n_neurons:
                raise ValueError(
                    f"Layer {i} expects {self.layers[i].n_inputs} inputs but "
                    f"layer {i - 1} has {self.layers[i - 1].n_neurons} neurons"
                )

    @property
    def input_size(self) -> int:
        return self.layers[0].n_inputs

    @property
    def output_size(self) -> int:
        return self.layers[-1].n_neurons

    @property
    def architecture(self) -> List[int]:
        """Layer widths including the input layer, e.g. [2, 2, 1]."""
        return [self.input_size] + [layer.n_neurons for layer in self.layers]

    @property
    def total_params(self) -> int:
        return sum(layer.weights.size for layer in self.layers)

    def evaluate(self, inputs: Sequence[float]) -> np.ndarray:
        """
        Run a forward pass and return the output layer's values.

        The first layer takes the dot product of each weight row with the
        bias-prefixed input. Later layers add the bias column to the dot
        product of the remaining columns with the previous layer's outputs.
        The last layer is linear unless it is also the first layer.

        Args:
            inputs: Input vector of length input_size

        Returns:
            Copy of the output layer's values
        """
        x = np.asarray(inputs, dtype=float).ravel()
        if x.shape[0] != self.input_size:
            raise ValueError(
                f"Expected {self.input_size} inputs, got {x.shape[0]}"
            )
        x = np.concatenate(([BIAS_INPUT], x))

        act = get_activation(self.activation)
        last = len(self.layers) - 1
        previous = x

        for i, layer in enumerate(self.layers):
            if i == 0:
                z = layer.weights @ x
                layer.outputs[:] = act(z)
            else:
                z = layer.weights[:, 0] + layer.weights[:, 1:] @ previous
                layer.outputs[:] = z if i == last else act(z)
            layer.pre_activations[:] = z
            previous = layer.outputs

        return self.layers[-1].outputs.copy()

    def mutate(self, frequency: float, rng: Optional[np.random.Generator] = None) -> None:
        """
        Perturb weights in place.

        Each weight is independently selected with probability `frequency`;
        selected weights get 0.1 * N(0, 1) added and are clamped to [0, 1].
        """
        if rng is None:
            rng = np.random.default_rng()

        for layer in self.layers:
            shape = layer.weights.shape
            selected = rng.random(shape) < frequency
            noise = MUTATION_SCALE * rng.standard_normal(shape)
            layer.weights[selected] = np.clip(
                layer.weights[selected] + noise[selected],
                WEIGHT_FLOOR,
                WEIGHT_CEILING,
            )

    @classmethod
    def recombine(
        cls,
        parent_a: 'Genome',
        parent_b: 'Genome',
        fitness_a: float,
        fitness_b: float,
        rng: Optional[np.random.Generator] = None,
    ) -> 'Genome':
        """
        Build a child whose weights are drawn from two parents.

        Topology and activation come from parent_a. For every weight a
        uniform draw above fitness_a / (fitness_a + fitness_b) takes
        parent_b's value, otherwise parent_a's value is kept.

        When the fitness sum is zero the fitter parent is copied outright
        (parent_a on a tie).

        Args:
            parent_a: First parent, supplies topology and activation
            parent_b: Second parent, must share parent_a's topology
            fitness_a: Fitness of parent_a at selection time
            fitness_b: Fitness of parent_b at selection time
            rng: Random generator

        Returns:
            New genome with fitness unset
        """
        if rng is None:
            rng = np.random.default_rng()
        if parent_a.architecture != parent_b.architecture:
            raise ValueError(
                f"Cannot recombine {parent_a.architecture} with {parent_b.architecture}"
            )

        total = fitness_a + fitness_b
        if total == 0:
            ratio = 0.0 if fitness_a < fitness_b else 1.0
        else:
            ratio = fitness_a / total

        layers = []
        for layer_a, layer_b in zip(parent_a.layers, parent_b.layers):
            draws = rng.random(layer_a.weights.shape)
            layers.append(Layer(weights=np.where(draws > ratio, layer_b.weights, layer_a.weights)))

        return cls(layers=layers, activation=parent_a.activation)

    def copy(self) -> 'Genome':
        """Create a deep copy of this genome."""
        return Genome(
            layers=[layer.copy() for layer in self.layers],
            activation=self.activation,
            fitness=self.fitness,
        )

    def __str__(self) -> str:
        body = ''.join(f"layer\n{layer}" for layer in self.layers)
        return f"fitness: {self.fitness}\n{body}"

    def __repr__(self) -> str:
        fitness_str = f", fitness={self.fitness:.3f}" if self.fitness is not None else ""
        return (
            f"Genome(arch={self.architecture}, activation={self.activation}, "
            f"params={self.total_params}{fitness_str})"
        )


def create_random_genome(
    architecture: Sequence[int],
    activation: str = DEFAULT_ACTIVATION,
    rng: Optional[np.random.Generator] = None,
) -> Genome:
    """
    Create a randomly initialised genome.

    Args:
        architecture: Layer widths including input, e.g. [2, 2, 1]
        activation: Activation name for non-output layers
        rng: Random generator

    Returns:
        Genome with weights uniform in [-1, 1] and fitness unset
    """
    if len(architecture) < 2:
        raise ValueError(
            f"Architecture needs an input and at least one layer, got {list(architecture)}"
        )
    if rng is None:
        rng = np.random.default_rng()

    layers = [
        Layer.random(architecture[i], architecture[i - 1], rng)
        for i in range(1, len(architecture))
    ]
    return Genome(layers=layers, activation=activation)
