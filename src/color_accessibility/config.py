"""Pydantic frozen configuration models for color_accessibility."""

from pydantic import BaseModel, Field

INITIAL_LEARNING_RATE = 0.06
BATCH_SIZE = 300
DECAY_FACTOR = 0.90
DECAY_INTERVAL = 50
LAYER_SIZES: tuple[int, ...] = (64, 32, 16, 2)


class TrainingConfig(BaseModel, frozen=True):
    """Tunables for ColorAccessibilityModel.

    Scalar fields are validated at construction time. ``layer_sizes`` is
    checked by :func:`~color_accessibility.models.network.build_network` so
    that a bad topology surfaces as ``ConfigurationError`` when the network
    is built.
    """

    initial_learning_rate: float = Field(default=INITIAL_LEARNING_RATE, gt=0.0)
    batch_size: int = Field(default=BATCH_SIZE, gt=0)
    decay_factor: float = Field(default=DECAY_FACTOR, gt=0.0, le=1.0)
    decay_interval: int = Field(default=DECAY_INTERVAL, gt=0)
    layer_sizes: tuple[int, ...] = LAYER_SIZES
    seed: int = 42
