"""Shuffled, cyclic input providers for stochastic training.

A :class:`ShuffledInputProviderBuilder` owns N-length, index-aligned data
sequences (e.g. normalized inputs and targets) and hands out one
:class:`InputProvider` per sequence.  All providers walk the *same* random
permutation of ``range(N)``: the k-th request on any provider returns the
item at the same original index.  After N requests a new permutation is
drawn for the next cycle.
"""

from __future__ import annotations

from collections.abc import Sequence

import torch

from color_accessibility.errors import ConfigurationError
from color_accessibility.types import RegressionBatch


class ShuffledInputProviderBuilder:
    """Build lockstep shuffled providers over index-aligned sequences.

    Args:
        sequences: Two or more equal-length sequences of tensors. Item ``i``
            of every sequence belongs to the same training example.
        generator: Optional RNG for the permutations (seeded by the caller
            for reproducible shuffles).

    Raises:
        ConfigurationError: If the sequences differ in length or are empty.
    """

    def __init__(
        self,
        sequences: Sequence[Sequence[torch.Tensor]],
        generator: torch.Generator | None = None,
    ) -> None:
        if not sequences:
            raise ConfigurationError("at least one sequence is required")
        lengths = [len(s) for s in sequences]
        if len(set(lengths)) != 1:
            raise ConfigurationError(
                f"all sequences must have the same length, got {lengths}"
            )
        if lengths[0] == 0:
            raise ConfigurationError("sequences must not be empty")

        self._data = [torch.stack(list(s)) for s in sequences]
        self._num_examples = lengths[0]
        # Cycle c is shuffled with seed base_seed + c, so a provider that lags
        # behind can rebuild any earlier cycle without it being kept around.
        self._base_seed = int(
            torch.randint(0, 2**31 - 1, (1,), generator=generator).item()
        )
        # Only cycles some provider is currently inside are cached.
        self._permutations: dict[int, torch.Tensor] = {}
        self._request_counts = [0] * len(sequences)

    def __len__(self) -> int:
        return self._num_examples

    def get_input_providers(self) -> list[InputProvider]:
        """One provider per sequence, in the order the sequences were given."""
        return [InputProvider(self, i) for i in range(len(self._data))]

    def _permutation(self, cycle: int) -> torch.Tensor:
        perm = self._permutations.get(cycle)
        if perm is None:
            cycle_generator = torch.Generator().manual_seed(self._base_seed + cycle)
            perm = torch.randperm(self._num_examples, generator=cycle_generator)
            self._permutations[cycle] = perm
        return perm

    def _next_indices(self, slot: int, count: int) -> list[int]:
        """Advance provider ``slot`` by ``count`` requests; return original indices."""
        indices = []
        for _ in range(count):
            n = self._request_counts[slot]
            cycle, position = divmod(n, self._num_examples)
            indices.append(int(self._permutation(cycle)[position]))
            self._request_counts[slot] = n + 1
            if position == self._num_examples - 1:
                self._evict_finished_cycles()
        return indices

    def _evict_finished_cycles(self) -> None:
        active = {n // self._num_examples for n in self._request_counts}
        for cycle in [c for c in self._permutations if c not in active]:
            del self._permutations[cycle]


class InputProvider:
    """Handle onto one sequence of a :class:`ShuffledInputProviderBuilder`.

    Do not construct directly; use
    :meth:`ShuffledInputProviderBuilder.get_input_providers`.
    """

    def __init__(self, builder: ShuffledInputProviderBuilder, slot: int) -> None:
        self._builder = builder
        self._slot = slot
        self.last_index: int | None = None

    def get_next_copy(self) -> torch.Tensor:
        """Return a copy of the next item in shuffled order."""
        (idx,) = self._builder._next_indices(self._slot, 1)
        self.last_index = idx
        return self._builder._data[self._slot][idx].clone()

    def get_next_batch(self, count: int) -> torch.Tensor:
        """Return the next ``count`` items stacked along dim 0.

        Equivalent to stacking ``count`` calls of :meth:`get_next_copy`;
        wraps into the next shuffle cycle when needed.
        """
        indices = self._builder._next_indices(self._slot, count)
        self.last_index = indices[-1]
        return self._builder._data[self._slot][torch.tensor(indices)]


def draw_batch(
    input_provider: InputProvider,
    target_provider: InputProvider,
    batch_size: int,
) -> RegressionBatch:
    """Draw ``batch_size`` aligned (input, target) pairs."""
    return {
        "inputs": input_provider.get_next_batch(batch_size),
        "targets": target_provider.get_next_batch(batch_size),
    }
