"""Type aliases and TypedDicts for color_accessibility inter-module contracts."""

from collections.abc import Sequence
from typing import TypedDict

import torch

RGB_CHANNELS = 3
TARGET_WIDTH = 2

RGB = Sequence[float]
"""Three channel values, nominally in [0, 255]."""


class RegressionBatch(TypedDict):
    """A single training batch.

    inputs: Float tensor of shape (B, 3), normalized RGB in [0, 1].
    targets: Float tensor of shape (B, 2), accessibility scores.
    """

    inputs: torch.Tensor
    targets: torch.Tensor


class TrainingSet(TypedDict):
    """Raw training data handed to ``ColorAccessibilityModel.setup``.

    raw_inputs: RGB triplets in [0, 255], index-aligned with raw_targets.
    raw_targets: 2-element target vectors.
    """

    raw_inputs: Sequence[RGB]
    raw_targets: Sequence[Sequence[float]]
