"""RGB channel normalization."""

from __future__ import annotations

import torch

from color_accessibility.types import RGB

CHANNEL_MAX = 255.0


def normalize_color(rgb: RGB) -> list[float]:
    """Scale 0-255 RGB channels to 0-1, keeping RGB order.

    This is a plain division, not a clamp: out-of-range channels produce
    values outside [0, 1] and no validation is performed.
    """
    return [v / CHANNEL_MAX for v in rgb]


def normalize_colors(rgb: torch.Tensor) -> torch.Tensor:
    """Tensor version of :func:`normalize_color` for shape ``(..., 3)``."""
    return rgb / CHANNEL_MAX
