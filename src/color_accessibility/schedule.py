"""Step-decay learning rate schedule."""

from __future__ import annotations

import functools
from collections.abc import Callable

from color_accessibility.config import (
    DECAY_FACTOR,
    DECAY_INTERVAL,
    INITIAL_LEARNING_RATE,
)


def learning_rate(
    step: int,
    initial_rate: float = INITIAL_LEARNING_RATE,
    decay_factor: float = DECAY_FACTOR,
    decay_interval: int = DECAY_INTERVAL,
) -> float:
    """Learning rate for ``step``: ``initial_rate * decay_factor ** (step // decay_interval)``.

    Every ``decay_interval`` steps the rate is multiplied by ``decay_factor``
    (with the defaults: 10% lower every 50 steps).
    """
    if step < 0:
        raise ValueError(f"step must be non-negative, got {step}")
    return initial_rate * decay_factor ** (step // decay_interval)


def _decay_multiplier(step: int, decay_factor: float, decay_interval: int) -> float:
    return decay_factor ** (step // decay_interval)


def step_decay_lambda(
    decay_factor: float = DECAY_FACTOR,
    decay_interval: int = DECAY_INTERVAL,
) -> Callable[[int], float]:
    """Multiplicative factor for ``torch.optim.lr_scheduler.LambdaLR``.

    ``LambdaLR`` scales the optimizer's base lr by this factor, so with
    ``lr=initial_rate`` it reproduces :func:`learning_rate` exactly.
    """
    return functools.partial(
        _decay_multiplier, decay_factor=decay_factor, decay_interval=decay_interval
    )
