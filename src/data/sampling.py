"""
src/data/sampling.py
────────────────────
Random draws and numeric helpers shared by every simulator.

All functions take an explicit ``np.random.Generator`` so a seeded
generator reproduces the exact same fleet evolution.
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import TypeVar

import numpy as np

K = TypeVar("K")


def weighted_pick(weights: Mapping[K, float], rng: np.random.Generator) -> K:
    """
    Sample one label with probability weight / Σweights.

    A single uniform draw is scaled by the total and consumed by walking the
    entries in insertion order. If floating-point drift leaves a positive
    remainder after the last entry, the first label is returned.
    """
    if not weights:
        raise ValueError("weighted_pick needs at least one entry")
    if any(w < 0 for w in weights.values()):
        raise ValueError(f"negative weight in {dict(weights)!r}")

    total = sum(weights.values())
    remainder = float(rng.random()) * total
    for label, weight in weights.items():
        remainder -= weight
        if remainder <= 0:
            return label
    return next(iter(weights))


def uniform(rng: np.random.Generator, low: float, high: float) -> float:
    return float(rng.uniform(low, high))


def rand_int(rng: np.random.Generator, low: int, high: int) -> int:
    """Uniform integer in the closed range [low, high]."""
    return int(rng.integers(low, high + 1))


def chance(rng: np.random.Generator, probability: float) -> bool:
    return float(rng.random()) < probability


def clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


def round_reading(value: float, decimals: int) -> float | int:
    """Round a reported measurement; zero decimals yields an int."""
    if decimals == 0:
        return int(round(value))
    return round(value, decimals)
