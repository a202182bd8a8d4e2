"""Network definitions."""

from color_accessibility.models.network import (
    ColorAccessibilityNetwork,
    build_network,
    layer_name,
)

__all__ = [
    "ColorAccessibilityNetwork",
    "build_network",
    "layer_name",
]
