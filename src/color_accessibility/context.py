"""Explicit execution context shared by training and prediction.

Replaces a process-wide math/session singleton: one context is created at
startup and injected into :class:`~color_accessibility.model.ColorAccessibilityModel`.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager

import torch
from loguru import logger


class ExecutionContext:
    """Device, dtype, RNG and writer lock for one model.

    Args:
        device: Torch device string. ``"cuda"`` falls back to CPU with a
            warning when CUDA is unavailable.
        dtype: Floating point dtype for weights and inputs.
        seed: Seed for the shuffling generator and weight initialisation.
    """

    def __init__(
        self,
        device: str = "cpu",
        dtype: torch.dtype = torch.float32,
        seed: int = 42,
    ) -> None:
        if device.startswith("cuda") and not torch.cuda.is_available():
            logger.warning("CUDA requested but not available, using CPU")
            device = "cpu"
        self.device = torch.device(device)
        self.dtype = dtype
        self.seed = seed
        self.generator = torch.Generator().manual_seed(seed)
        # Re-entrant so predict can be called from inside a held scope.
        self._lock = threading.RLock()

    def tensor(self, data: object) -> torch.Tensor:
        """Build a tensor on this context's device and dtype."""
        return torch.as_tensor(data, dtype=self.dtype, device=self.device)

    @contextmanager
    def scope(self, module: torch.nn.Module | None = None) -> Iterator[None]:
        """Bound the temporaries of one ``train``/``predict`` call.

        Holds the writer lock for the duration of the block and drops the
        gradient buffers of ``module`` on every exit path, including errors.
        """
        with self._lock:
            try:
                yield
            finally:
                if module is not None:
                    module.zero_grad(set_to_none=True)

    @contextmanager
    def seeded(self) -> Iterator[None]:
        """Run a block with the global torch RNG seeded from this context.

        Global RNG state is restored afterwards.
        """
        with torch.random.fork_rng(devices=[]):
            torch.manual_seed(self.seed)
            yield

    def __repr__(self) -> str:
        return (
            f"ExecutionContext(device={self.device!s}, dtype={self.dtype}, "
            f"seed={self.seed})"
        )
