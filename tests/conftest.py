"""Shared pytest fixtures for color_accessibility tests."""

import pytest

from color_accessibility.types import TrainingSet


@pytest.fixture()
def toy_training_set() -> TrainingSet:
    """Four separable colors: dark colors want light text, light colors dark text.

    Targets are (use_light_text, use_dark_text).
    """
    return {
        "raw_inputs": [
            [0, 0, 0],
            [255, 255, 255],
            [20, 30, 120],
            [250, 240, 130],
        ],
        "raw_targets": [
            [1.0, 0.0],
            [0.0, 1.0],
            [1.0, 0.0],
            [0.0, 1.0],
        ],
    }
