"""Color accessibility regression model."""

from color_accessibility.config import TrainingConfig
from color_accessibility.context import ExecutionContext
from color_accessibility.errors import (
    ColorAccessibilityError,
    ConfigurationError,
    InvalidStateError,
)
from color_accessibility.model import ColorAccessibilityModel, ModelState

__version__ = "0.0.1"

__all__ = [
    "ColorAccessibilityError",
    "ColorAccessibilityModel",
    "ConfigurationError",
    "ExecutionContext",
    "InvalidStateError",
    "ModelState",
    "TrainingConfig",
    "__version__",
]
