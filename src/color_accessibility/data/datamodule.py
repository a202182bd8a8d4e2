"""LightningDataModule feeding shuffled color batches to ``L.Trainer``."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import Any

import lightning as L
import torch
from loguru import logger
from torch.utils.data import DataLoader, IterableDataset

from color_accessibility.config import BATCH_SIZE
from color_accessibility.data.normalize import normalize_color
from color_accessibility.data.provider import (
    InputProvider,
    ShuffledInputProviderBuilder,
    draw_batch,
)
from color_accessibility.errors import ConfigurationError
from color_accessibility.types import (
    RGB,
    RGB_CHANNELS,
    TARGET_WIDTH,
    RegressionBatch,
    TrainingSet,
)
from color_accessibility.utils.hydra import register


def prepare_training_set(
    training_set: TrainingSet,
    dtype: torch.dtype = torch.float32,
    generator: torch.Generator | None = None,
) -> tuple[InputProvider, InputProvider]:
    """Normalize a raw training set and wire lockstep input/target providers.

    Raises:
        ConfigurationError: If inputs and targets differ in length, the set is
            empty, or a sample has the wrong number of values.
    """
    raw_inputs = training_set["raw_inputs"]
    raw_targets = training_set["raw_targets"]
    if len(raw_inputs) != len(raw_targets):
        raise ConfigurationError(
            f"raw_inputs and raw_targets must have the same length, "
            f"got {len(raw_inputs)} and {len(raw_targets)}"
        )
    check_widths(raw_inputs, RGB_CHANNELS, "raw_inputs")
    check_widths(raw_targets, TARGET_WIDTH, "raw_targets")

    inputs = [torch.tensor(normalize_color(rgb), dtype=dtype) for rgb in raw_inputs]
    targets = [torch.tensor(list(t), dtype=dtype) for t in raw_targets]
    builder = ShuffledInputProviderBuilder([inputs, targets], generator=generator)
    input_provider, target_provider = builder.get_input_providers()
    return input_provider, target_provider


def check_widths(rows: Sequence[Sequence[float]], width: int, name: str) -> None:
    for i, row in enumerate(rows):
        if len(row) != width:
            raise ConfigurationError(
                f"{name}[{i}] must have {width} values, got {len(row)}"
            )


class ShuffledBatchDataset(IterableDataset[RegressionBatch]):
    """Endless stream of shuffled ``RegressionBatch`` dicts.

    Use with ``DataLoader(batch_size=None)`` and bound training with
    ``max_steps``; the stream never ends on its own.
    """

    def __init__(
        self,
        input_provider: InputProvider,
        target_provider: InputProvider,
        batch_size: int = BATCH_SIZE,
    ) -> None:
        super().__init__()
        self.input_provider = input_provider
        self.target_provider = target_provider
        self.batch_size = batch_size

    def __iter__(self) -> Iterator[RegressionBatch]:
        while True:
            yield draw_batch(self.input_provider, self.target_provider, self.batch_size)


@register(group="data", name="colors")
class ColorDataModule(L.LightningDataModule):
    """DataModule over an in-memory color training set.

    Args:
        raw_inputs: RGB triplets in [0, 255].
        raw_targets: 2-element targets, index-aligned with ``raw_inputs``.
        batch_size: Examples per optimizer step.
        seed: Seed for the shuffle generator.
        **kwargs: Absorbs extra Hydra-injected keys (_target_, _recursive_, etc.).
    """

    def __init__(
        self,
        raw_inputs: Sequence[RGB] = (),
        raw_targets: Sequence[Sequence[float]] = (),
        batch_size: int = BATCH_SIZE,
        seed: int = 42,
        **kwargs: Any,
    ) -> None:
        super().__init__()
        self._training_set: TrainingSet = {
            "raw_inputs": [list(v) for v in raw_inputs],
            "raw_targets": [list(v) for v in raw_targets],
        }
        self._batch_size = batch_size
        self._seed = seed
        self._train_dataset: ShuffledBatchDataset | None = None

    @property
    def batch_size(self) -> int:
        return self._batch_size

    def setup(self, stage: str | None = None) -> None:
        if stage not in ("fit", None) or self._train_dataset is not None:
            return
        generator = torch.Generator().manual_seed(self._seed)
        input_provider, target_provider = prepare_training_set(
            self._training_set, generator=generator
        )
        self._train_dataset = ShuffledBatchDataset(
            input_provider, target_provider, self._batch_size
        )
        logger.info(
            f"Setup fit: {len(self._training_set['raw_inputs'])} samples, "
            f"batch_size={self._batch_size}"
        )

    def train_dataloader(self) -> DataLoader[RegressionBatch]:
        if self._train_dataset is None:
            self.setup("fit")
        # Batches are assembled by the dataset; worker processes would each
        # hold their own copy of the provider state.
        return DataLoader(self._train_dataset, batch_size=None, num_workers=0)  # type: ignore[arg-type]
