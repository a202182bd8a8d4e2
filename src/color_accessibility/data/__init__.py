"""Data pipeline for color_accessibility."""

from color_accessibility.data.datamodule import (
    ColorDataModule,
    ShuffledBatchDataset,
    prepare_training_set,
)
from color_accessibility.data.normalize import normalize_color, normalize_colors
from color_accessibility.data.provider import (
    InputProvider,
    ShuffledInputProviderBuilder,
    draw_batch,
)

__all__ = [
    "ColorDataModule",
    "InputProvider",
    "ShuffledBatchDataset",
    "ShuffledInputProviderBuilder",
    "draw_batch",
    "normalize_color",
    "normalize_colors",
    "prepare_training_set",
]
