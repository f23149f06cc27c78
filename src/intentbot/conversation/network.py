"""
IntentNetwork: feed-forward sigmoid classifier over encoded text.

Key Design Decisions:
- One sigmoid output per intent tag, trained against one-hot targets
- Full-corpus gradient steps with momentum SGD on the summed squared error
- Early stop once mean squared error falls below the configured threshold
- Training builds a new module and swaps it in under the lock, so inference
  keeps serving the previous weights until the new ones are complete
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

import torch
import torch.nn as nn

from intentbot.config.constants import (
    HIDDEN_LAYERS,
    INITIAL_WEIGHT_RANGE,
    LEARNING_RATE,
    MOMENTUM,
    TRAINING_ERROR_THRESHOLD,
    TRAINING_ITERATIONS,
    TRAINING_LOG_PERIOD,
    VECTOR_SIZE,
)
from intentbot.conversation.corpus import TrainingExample
from intentbot.errors import TrainingError


logger = logging.getLogger(__name__)

NETWORK_FORMAT = "feedforward"


@dataclass
class TrainingStats:
    """Outcome of a training run."""
    iterations: int
    error: float


class IntentNetworkModule(nn.Module):
    """
    Fully connected sigmoid network.

    Architecture:
    - Linear + Sigmoid for each hidden width
    - Linear + Sigmoid output layer, one unit per intent

    Args:
        input_size: Length of the encoded input vector
        hidden_layers: Widths of the hidden layers
        output_size: Number of intent tags
    """

    def __init__(self, input_size: int, hidden_layers: Sequence[int], output_size: int):
        super().__init__()
        self.sizes = [input_size, *hidden_layers, output_size]

        layers: List[nn.Module] = []
        for fan_in, fan_out in zip(self.sizes[:-1], self.sizes[1:]):
            layers.append(nn.Linear(fan_in, fan_out))
            layers.append(nn.Sigmoid())
        self.layers = nn.Sequential(*layers)

    def linear_layers(self) -> List[nn.Linear]:
        return [m for m in self.layers if isinstance(m, nn.Linear)]

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        return self.layers(x)


class IntentNetwork:
    """
    Trainable intent classifier with thread-safe inference.

    Wraps IntentNetworkModule with:
    - Tag bookkeeping (output unit order = first appearance in training data)
    - Seeded weight initialisation
    - JSON-friendly (de)serialisation of topology and weights

    Args:
        input_size: Encoded vector length
        hidden_layers: Hidden layer widths
        seed: Optional seed for weight initialisation

    Example:
        >>> network = IntentNetwork(seed=7)
        >>> network.train(examples)
        >>> network.run(encoder.encode("hello"))
        {'greeting': 0.93, 'goodbye': 0.04}
    """

    def __init__(
        self,
        input_size: int = VECTOR_SIZE,
        hidden_layers: Sequence[int] = HIDDEN_LAYERS,
        seed: Optional[int] = None,
    ):
        self._input_size = input_size
        self._hidden_layers = list(hidden_layers)
        self._seed = seed
        self._lock = threading.RLock()

        self._module: Optional[IntentNetworkModule] = None
        self._tags: List[str] = []

    @property
    def is_trained(self) -> bool:
        with self._lock:
            return self._module is not None

    @property
    def tags(self) -> List[str]:
        with self._lock:
            return list(self._tags)

    @property
    def hidden_layers(self) -> List[int]:
        return list(self._hidden_layers)

    def _init_weights(self, module: IntentNetworkModule) -> None:
        """Uniform weights and biases in [-range, range]."""
        generator = torch.Generator()
        if self._seed is not None:
            generator.manual_seed(self._seed)
        else:
            generator.seed()
        with torch.no_grad():
            for param in module.parameters():
                noise = torch.rand(param.shape, generator=generator)
                param.copy_((noise * 2.0 - 1.0) * INITIAL_WEIGHT_RANGE)

    def train(
        self,
        examples: Sequence[TrainingExample],
        iterations: int = TRAINING_ITERATIONS,
        error_threshold: float = TRAINING_ERROR_THRESHOLD,
        learning_rate: float = LEARNING_RATE,
        momentum: float = MOMENTUM,
    ) -> TrainingStats:
        """
        Train a fresh network on the examples.

        Args:
            examples: Encoded vectors labelled by tag
            iterations: Maximum passes over the corpus
            error_threshold: Stop once mean squared error is below this
            learning_rate: SGD learning rate
            momentum: SGD momentum

        Returns:
            TrainingStats with iterations run and final error

        Raises:
            TrainingError: If there are no examples
            ValueError: If a vector has the wrong length
        """
        if not examples:
            raise TrainingError("No training examples")

        tags: List[str] = []
        for example in examples:
            if example.target_tag not in tags:
                tags.append(example.target_tag)
        tag_index = {tag: i for i, tag in enumerate(tags)}

        inputs = torch.tensor([ex.vector for ex in examples], dtype=torch.float32)
        if inputs.shape[1] != self._input_size:
            raise ValueError(
                f"Training vectors have length {inputs.shape[1]}, "
                f"expected {self._input_size}"
            )
        targets = torch.zeros(len(examples), len(tags))
        for row, example in enumerate(examples):
            targets[row, tag_index[example.target_tag]] = 1.0

        module = IntentNetworkModule(self._input_size, self._hidden_layers, len(tags))
        self._init_weights(module)
        optimizer = torch.optim.SGD(module.parameters(), lr=learning_rate, momentum=momentum)

        module.train()
        error = 1.0
        iteration = 0
        for iteration in range(1, iterations + 1):
            optimizer.zero_grad()
            outputs = module(inputs)
            diff = outputs - targets
            loss = 0.5 * diff.pow(2).sum()
            loss.backward()
            optimizer.step()

            error = diff.detach().pow(2).mean().item()
            if iteration % TRAINING_LOG_PERIOD == 0:
                logger.debug(f"iterations: {iteration}, training error: {error:.6f}")
            if error < error_threshold:
                break
        module.eval()

        with self._lock:
            self._module = module
            self._tags = tags

        logger.info(
            f"Intent network trained: {len(examples)} examples, {len(tags)} tags, "
            f"{iteration} iterations, error={error:.6f}"
        )
        return TrainingStats(iterations=iteration, error=error)

    def run(self, vector: Sequence[float]) -> Dict[str, float]:
        """
        Score every known tag for an encoded vector.

        Args:
            vector: Encoded input of length `input_size`

        Returns:
            Mapping tag -> activation in [0, 1]; empty when untrained
        """
        with self._lock:
            module, tags = self._module, self._tags
        if module is None:
            return {}

        x = torch.as_tensor(vector, dtype=torch.float32)
        if x.shape != (self._input_size,):
            raise ValueError(f"Expected vector of length {self._input_size}, got {tuple(x.shape)}")
        with torch.no_grad():
            activations = module(x).tolist()
        return dict(zip(tags, activations))

    def resolve(self, vector: Sequence[float]) -> Tuple[str, float]:
        """
        Pick the strongest tag.

        Returns:
            (tag, activation); ("", 0.0) if untrained or every activation is 0.
            Ties keep the earliest tag.
        """
        best_tag, best_score = "", 0.0
        for tag, score in self.run(vector).items():
            if score > best_score:
                best_tag, best_score = tag, score
        return best_tag, best_score

    def to_dict(self) -> Dict[str, Any]:
        """Serialise topology, tag order and weights to plain JSON types."""
        with self._lock:
            module, tags = self._module, list(self._tags)
        if module is None:
            return {
                "type": NETWORK_FORMAT,
                "activation": "sigmoid",
                "sizes": [self._input_size, *self._hidden_layers],
                "outputs": [],
                "layers": [],
            }
        return {
            "type": NETWORK_FORMAT,
            "activation": "sigmoid",
            "sizes": list(module.sizes),
            "outputs": tags,
            "layers": [
                {"weights": layer.weight.detach().tolist(), "biases": layer.bias.detach().tolist()}
                for layer in module.linear_layers()
            ],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], seed: Optional[int] = None) -> IntentNetwork:
        """
        Rebuild a network from `to_dict` output.

        Raises:
            ValueError: If the data is not a compatible network
        """
        if data.get("type") != NETWORK_FORMAT or data.get("activation") != "sigmoid":
            raise ValueError(f"Unsupported network format: {data.get('type')}/{data.get('activation')}")

        sizes = [int(s) for s in data.get("sizes", [])]
        tags = list(data.get("outputs", []))
        layers = data.get("layers", [])
        if len(sizes) < 2:
            raise ValueError("Network sizes must include input and at least one layer")

        if not tags:
            return cls(input_size=sizes[0], hidden_layers=sizes[1:], seed=seed)

        network = cls(input_size=sizes[0], hidden_layers=sizes[1:-1], seed=seed)
        if sizes[-1] != len(tags):
            raise ValueError(f"Output layer has {sizes[-1]} units for {len(tags)} tags")

        module = IntentNetworkModule(sizes[0], sizes[1:-1], sizes[-1])
        linear_layers = module.linear_layers()
        if len(layers) != len(linear_layers):
            raise ValueError(f"Expected {len(linear_layers)} layers, found {len(layers)}")

        with torch.no_grad():
            for linear, saved in zip(linear_layers, layers):
                weights = torch.tensor(saved["weights"], dtype=torch.float32)
                biases = torch.tensor(saved["biases"], dtype=torch.float32)
                if weights.shape != linear.weight.shape or biases.shape != linear.bias.shape:
                    raise ValueError(
                        f"Layer shape mismatch: {tuple(weights.shape)} vs {tuple(linear.weight.shape)}"
                    )
                linear.weight.copy_(weights)
                linear.bias.copy_(biases)
        module.eval()

        network._module = module
        network._tags = tags
        return network

    def __repr__(self) -> str:
        return (
            f"IntentNetwork(sizes={[self._input_size, *self._hidden_layers]}, "
            f"tags={len(self._tags)}, trained={self.is_trained})"
        )
