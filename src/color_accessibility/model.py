"""Training loop and predictor for the color accessibility network."""

from __future__ import annotations

import enum
import math
from collections.abc import Sequence

import torch
from loguru import logger

from color_accessibility.config import TrainingConfig
from color_accessibility.context import ExecutionContext
from color_accessibility.data.datamodule import check_widths, prepare_training_set
from color_accessibility.data.normalize import normalize_colors
from color_accessibility.data.provider import InputProvider, draw_batch
from color_accessibility.errors import InvalidStateError
from color_accessibility.models.network import ColorAccessibilityNetwork
from color_accessibility.schedule import learning_rate
from color_accessibility.types import RGB, RGB_CHANNELS, TrainingSet


class ModelState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"


class ColorAccessibilityModel:
    """Train a small dense network mapping RGB colors to 2 accessibility scores.

    Lifecycle: construct, call :meth:`setup` exactly once with a training set,
    then call :meth:`train` repeatedly and :meth:`predict` at any time. The
    network weights are owned here; :meth:`train` is the only writer and
    :meth:`predict` never mutates them. Both run under the execution
    context's lock.

    Args:
        config: Tunables (learning rate schedule, batch size, topology, seed).
        context: Execution context. A CPU context seeded from ``config.seed``
            is created when omitted.
    """

    def __init__(
        self,
        config: TrainingConfig | None = None,
        context: ExecutionContext | None = None,
    ) -> None:
        self.config = config or TrainingConfig()
        self.context = context or ExecutionContext(seed=self.config.seed)
        self._state = ModelState.UNINITIALIZED
        self._network: ColorAccessibilityNetwork | None = None
        self._optimizer: torch.optim.SGD | None = None
        self._input_provider: InputProvider | None = None
        self._target_provider: InputProvider | None = None

    @property
    def state(self) -> ModelState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is ModelState.READY

    @property
    def network(self) -> ColorAccessibilityNetwork | None:
        return self._network

    def learning_rate(self, step: int) -> float:
        """Learning rate applied by :meth:`train` at ``step``."""
        return learning_rate(
            step,
            initial_rate=self.config.initial_learning_rate,
            decay_factor=self.config.decay_factor,
            decay_interval=self.config.decay_interval,
        )

    def setup(self, training_set: TrainingSet) -> None:
        """Build the network, normalize the training set and wire the providers.

        Nothing is kept if any step fails: the model stays uninitialized.

        Raises:
            InvalidStateError: If called more than once.
            ConfigurationError: On mismatched or malformed training data,
                invalid layer sizes, or a last layer that is not 2 wide.
        """
        if self._state is not ModelState.UNINITIALIZED:
            raise InvalidStateError("setup() must be called exactly once")

        input_provider, target_provider = prepare_training_set(
            training_set, dtype=self.context.dtype, generator=self.context.generator
        )
        with self.context.seeded():
            network = ColorAccessibilityNetwork(
                layer_sizes=self.config.layer_sizes,
                initial_learning_rate=self.config.initial_learning_rate,
                decay_factor=self.config.decay_factor,
                decay_interval=self.config.decay_interval,
            )
        network.to(device=self.context.device, dtype=self.context.dtype)
        network.train()

        self._network = network
        self._optimizer = network.build_optimizer()
        self._input_provider = input_provider
        self._target_provider = target_provider
        self._state = ModelState.READY

        num_params = sum(p.numel() for p in network.parameters())
        logger.info(
            f"Model ready: {len(training_set['raw_inputs'])} samples | "
            f"layers={list(self.config.layer_sizes)} | params={num_params:,} | "
            f"{self.context}"
        )

    def train(self, step: int, compute_cost: bool = False) -> float | None:
        """Run one SGD update on one batch.

        The learning rate is recomputed from ``step`` on every call.

        Args:
            step: Non-negative training step index, driving the decay schedule.
            compute_cost: Whether to return the batch's mean squared error.
                When false the loss never leaves the device.

        Returns:
            The mean cost of the batch before the update, or ``None``.

        Raises:
            InvalidStateError: If :meth:`setup` has not been called.
        """
        network, optimizer = self._require_ready()
        lr = self.learning_rate(step)
        logger.debug(f"step={step} lr={lr:.6g}")

        with self.context.scope(network):
            for group in optimizer.param_groups:
                group["lr"] = lr
            batch = draw_batch(
                self._input_provider,  # type: ignore[arg-type]
                self._target_provider,  # type: ignore[arg-type]
                self.config.batch_size,
            )
            batch = {
                "inputs": batch["inputs"].to(self.context.device),
                "targets": batch["targets"].to(self.context.device),
            }
            loss, _ = network.compute_loss(batch)
            loss.backward()
            optimizer.step()

            if not compute_cost:
                return None
            cost = loss.item()

        if not math.isfinite(cost):
            logger.warning(f"Non-finite cost {cost} at step {step}")
        return cost

    def predict(self, rgb: RGB) -> list[float]:
        """Predict the 2 accessibility scores for one RGB color.

        Raises:
            InvalidStateError: If :meth:`setup` has not been called.
            ConfigurationError: If ``rgb`` does not have 3 channels.
        """
        return self.predict_batch([rgb])[0]

    def predict_batch(self, rgbs: Sequence[RGB]) -> list[list[float]]:
        """Predict scores for several colors in one forward pass.

        Raises:
            InvalidStateError: If :meth:`setup` has not been called.
            ConfigurationError: If a color does not have 3 channels.
        """
        network, _ = self._require_ready()
        check_widths(rgbs, RGB_CHANNELS, "rgb")
        if not rgbs:
            return []
        with self.context.scope(), torch.no_grad():
            inputs = normalize_colors(self.context.tensor([list(rgb) for rgb in rgbs]))
            outputs: list[list[float]] = network(inputs).cpu().tolist()
        return outputs

    def _require_ready(self) -> tuple[ColorAccessibilityNetwork, torch.optim.SGD]:
        if self._network is None or self._optimizer is None:
            raise InvalidStateError(
                f"model is {self._state.value}; call setup() first"
            )
        return self._network, self._optimizer
