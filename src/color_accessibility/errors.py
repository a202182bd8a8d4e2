"""Exception types raised by color_accessibility."""


class ColorAccessibilityError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(ColorAccessibilityError, ValueError):
    """Malformed construction input: mismatched data, bad layer sizes."""


class InvalidStateError(ColorAccessibilityError, RuntimeError):
    """Operation invoked out of lifecycle order (e.g. ``train`` before ``setup``)."""
