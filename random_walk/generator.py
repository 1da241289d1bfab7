"""
Random Walk Generator.

Generates random walks from a seed. All walks start from the middle state
and end on either terminal; every step moves to the neighbouring state
with the lower or higher index.

All walks produced by one generator draw from a single torch.Generator
stream, so a seed reproduces an entire run's training data.
"""

import time
from typing import List, Optional

import torch

from random_walk.states import START_STATE, TrainingSet, Walk, is_terminal


class RandomWalkGenerator:
    """Seeded generator of random walks and training sets.

    Attributes:
        seed: Seed of the underlying random stream
    """

    def __init__(self, seed: Optional[int] = None):
        """Initialize the generator.

        Args:
            seed: Random seed (defaults to the current time in milliseconds)
        """
        if seed is None:
            seed = int(time.time() * 1000)
        self.seed = seed
        self._generator = torch.Generator().manual_seed(seed)

    def _flip(self) -> bool:
        """Flip a fair coin from the shared stream. True is heads."""
        return bool(torch.randint(0, 2, (1,), generator=self._generator).item())

    def generate_sequence(self) -> Walk:
        """Generate one random walk.

        Heads moves to the lower-index neighbour, tails to the higher one.
        Generation stops at the first terminal reached.

        Returns:
            Walk starting at START_STATE and ending on a terminal
        """
        walk = [START_STATE]
        while not is_terminal(walk[-1]):
            step = -1 if self._flip() else 1
            walk.append(walk[-1] + step)
        return tuple(walk)

    def generate_training_sets(
        self,
        num_sets: int,
        sequences_per_set: int,
    ) -> List[TrainingSet]:
        """Generate independent training sets of random walks.

        Args:
            num_sets: Number of training sets
            sequences_per_set: Number of walks in each set

        Returns:
            ``num_sets`` lists of ``sequences_per_set`` walks each

        Raises:
            ValueError: If either count is not positive
        """
        if num_sets <= 0:
            raise ValueError("num_sets must be positive")
        if sequences_per_set <= 0:
            raise ValueError("sequences_per_set must be positive")

        return [
            [self.generate_sequence() for _ in range(sequences_per_set)]
            for _ in range(num_sets)
        ]
