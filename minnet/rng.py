"""A well-seeded pseudo-random generator."""

from __future__ import annotations

import os
import random

_SEED_WORDS = 1024


def get_random_engine() -> random.Random:
    """Return a generator seeded from the operating system's entropy source."""
    seed = int.from_bytes(os.urandom(4 * _SEED_WORDS), "big")
    return random.Random(seed)