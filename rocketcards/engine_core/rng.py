"""
Deterministic RNG - Seeded shuffles that reproduce across runs.

The seed string is folded into a 32-bit state, then advanced with the
Lehmer (Park-Miller, multiplier 48271) generator. The same seed always
yields the same permutation, so a recorded match seed replays its deal.
"""

from __future__ import annotations
import random
import string
from typing import Callable, MutableSequence, TypeVar

T = TypeVar("T")

MODULUS = 2147483647
MULTIPLIER = 48271
SEED_LENGTH = 16
SEED_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def fold_seed(seed: str) -> int:
    """Fold a seed string into a signed 32-bit integer (h = h*31 + ord(c))."""
    state = 0
    for char in seed:
        state = _to_int32(state * 31 + ord(char))
    return state


class SeededRandom:
    """
    Callable pseudo-random stream over [0, 1).

    Usage:
        rng = SeededRandom("ABCDEFGHIJKLMNOP")
        value = rng()
    """

    def __init__(self, seed: str):
        self.seed = seed
        self.state = fold_seed(seed)

    def __call__(self) -> float:
        self.state = (self.state * MULTIPLIER) % MODULUS
        # A seed folding to a multiple of the modulus pins the state at 0
        return max(0.0, (self.state - 1) / (MODULUS - 1))


def generate_seed() -> str:
    """Generate a random 16-character alphanumeric seed."""
    return "".join(random.choice(SEED_ALPHABET) for _ in range(SEED_LENGTH))


def shuffle(items: MutableSequence[T], seed: str | None = None) -> None:
    """
    Shuffle in place (Fisher-Yates from the end of the sequence).

    With a seed the permutation is reproducible; without one the
    process-wide random source is used.
    """
    rand: Callable[[], float] = SeededRandom(seed) if seed else random.random
    current = len(items)
    while current != 0:
        index = int(rand() * current)
        current -= 1
        items[current], items[index] = items[index], items[current]
