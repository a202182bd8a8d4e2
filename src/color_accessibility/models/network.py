"""Dense regression network for RGB -> accessibility scores."""

from __future__ import annotations

from collections import OrderedDict
from collections.abc import Sequence
from typing import Any

import lightning as L
import torch
from torch import nn
from torch.optim.lr_scheduler import LambdaLR
from torchmetrics.regression import MeanSquaredError

from color_accessibility.config import (
    DECAY_FACTOR,
    DECAY_INTERVAL,
    INITIAL_LEARNING_RATE,
    LAYER_SIZES,
)
from color_accessibility.errors import ConfigurationError
from color_accessibility.schedule import step_decay_lambda
from color_accessibility.types import RGB_CHANNELS, TARGET_WIDTH, RegressionBatch
from color_accessibility.utils.hydra import register


def layer_name(index: int) -> str:
    """Stable name of the dense layer at ``index``."""
    return f"fully_connected_{index}"


def build_network(
    layer_sizes: Sequence[int] = LAYER_SIZES,
    in_features: int = RGB_CHANNELS,
    out_features: int | None = None,
) -> nn.Sequential:
    """Stack of dense layers with ReLU on all but the last.

    Layers are named ``fully_connected_0`` .. ``fully_connected_{n-1}`` so two
    builds of the same topology have identical ``state_dict`` keys. The last
    layer is linear: it emits raw scores.

    Raises:
        ConfigurationError: If ``layer_sizes`` is empty or holds anything but
            positive integers, or if ``out_features`` is given and the last
            layer has a different width.
    """
    if not layer_sizes:
        raise ConfigurationError("layer_sizes must not be empty")
    for size in (in_features, *layer_sizes):
        # bool is an int subclass but never a valid width
        if isinstance(size, bool) or not isinstance(size, int) or size <= 0:
            raise ConfigurationError(
                f"layer sizes must be positive integers, got {list(layer_sizes)} "
                f"(in_features={in_features})"
            )
    if out_features is not None and layer_sizes[-1] != out_features:
        raise ConfigurationError(
            f"last layer must have {out_features} units to match the targets, "
            f"got {layer_sizes[-1]}"
        )

    modules: OrderedDict[str, nn.Module] = OrderedDict()
    width = in_features
    last = len(layer_sizes) - 1
    for i, units in enumerate(layer_sizes):
        modules[layer_name(i)] = nn.Linear(width, units)
        if i != last:
            modules[f"relu_{i}"] = nn.ReLU()
        width = units
    return nn.Sequential(modules)


@register(group="model", name="network")
class ColorAccessibilityNetwork(L.LightningModule):
    """LightningModule wrapping the dense stack with its MSE loss and SGD optimizer.

    Usable standalone with ``L.Trainer`` (see
    :class:`~color_accessibility.data.datamodule.ColorDataModule`), and as the
    weight holder behind
    :class:`~color_accessibility.model.ColorAccessibilityModel`.
    """

    def __init__(
        self,
        layer_sizes: Sequence[int] = LAYER_SIZES,
        initial_learning_rate: float = INITIAL_LEARNING_RATE,
        decay_factor: float = DECAY_FACTOR,
        decay_interval: int = DECAY_INTERVAL,
    ) -> None:
        super().__init__()
        # Hydra hands lists over as ListConfig; normalise before validating.
        layer_sizes = tuple(layer_sizes)
        self.save_hyperparameters()
        self.layers = build_network(layer_sizes, out_features=TARGET_WIDTH)
        self.loss_fn = nn.MSELoss(reduction="mean")
        self.train_mse = MeanSquaredError(num_outputs=layer_sizes[-1])

    def forward(self, inputs: torch.Tensor) -> torch.Tensor:
        return self.layers(inputs)  # type: ignore[no-any-return]

    def compute_loss(self, batch: RegressionBatch) -> tuple[torch.Tensor, torch.Tensor]:
        """Return ``(loss, predictions)`` for one batch."""
        predictions = self(batch["inputs"])
        loss: torch.Tensor = self.loss_fn(predictions, batch["targets"])
        return loss, predictions

    def build_optimizer(self) -> torch.optim.SGD:
        return torch.optim.SGD(
            self.parameters(), lr=self.hparams["initial_learning_rate"]
        )

    def training_step(self, batch: RegressionBatch, batch_idx: int) -> torch.Tensor:
        loss, predictions = self.compute_loss(batch)
        self.log("train/loss", loss, on_step=True, on_epoch=True, prog_bar=True)
        self.train_mse.update(predictions, batch["targets"])
        return loss

    def on_train_epoch_end(self) -> None:
        self.log("train/mse", self.train_mse.compute().mean())
        self.train_mse.reset()

    def configure_optimizers(self) -> dict[str, Any]:  # type: ignore[override]
        optimizer = self.build_optimizer()
        scheduler = LambdaLR(
            optimizer,
            lr_lambda=step_decay_lambda(
                self.hparams["decay_factor"], self.hparams["decay_interval"]
            ),
        )
        return {
            "optimizer": optimizer,
            "lr_scheduler": {"scheduler": scheduler, "interval": "step"},
        }
