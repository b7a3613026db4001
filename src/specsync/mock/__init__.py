"""Example-value synthesis from JSON Schema fragments.

* :mod:`~specsync.mock.generator` -- the recursive, cycle-safe
  :func:`synthesize` function.
* :mod:`~specsync.mock.randomness` -- the injectable
  :class:`RandomnessProvider` and its Faker/rstr implementation.
"""

from specsync.mock.generator import synthesize
from specsync.mock.randomness import (
    FakerRandomness,
    PatternSynthesisError,
    RandomnessProvider,
)

__all__ = ["synthesize", "FakerRandomness", "PatternSynthesisError", "RandomnessProvider"]
