"""
Global pytest fixtures for the gkmeans tests.

- Provides deterministic seeding across Python, NumPy, and PyTorch.
- Forces single-threaded torch to stabilize timings and reduce flakiness.
"""

from __future__ import annotations

import os
import random
import sys
from typing import Generator
from pathlib import Path

import numpy as np
import pytest
import torch

# Add the project's src directory to the Python path so tests can import the code
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if SRC.exists():
    sys.path.insert(0, str(SRC))

# Helpers living next to the tests (data_gen, utils)
sys.path.insert(0, str(Path(__file__).resolve().parent))


def _get_seed() -> int:
    """Resolve the test seed from env or default."""
    env = os.getenv("TEST_RANDOM_SEED", "1337")
    try:
        return int(env)
    except ValueError:
        return 1337


@pytest.fixture(scope="session", autouse=True)
def seed_all() -> int:
    """
    Seed Python, NumPy, and PyTorch RNGs once per session.

    The engine never reads the global torch RNG; this only keeps any
    test-side randomness reproducible. Returns the seed.
    """
    seed = _get_seed()
    random.seed(seed)
    np.random.seed(seed)
    torch.manual_seed(seed)
    return seed


@pytest.fixture(scope="session", autouse=True)
def set_torch_threads() -> None:
    """
    Reduce PyTorch to a single thread for stability and consistent timing.
    """
    if hasattr(torch, "set_num_threads"):
        torch.set_num_threads(1)


@pytest.fixture(scope="function")
def rng(seed_all: int) -> Generator[np.random.Generator, None, None]:
    """
    Per-test NumPy Generator seeded from the session seed.
    """
    gen = np.random.default_rng(seed_all)
    yield gen


@pytest.fixture(scope="function")
def generator(seed_all: int) -> torch.Generator:
    """Fresh torch Generator seeded from the session seed."""
    gen = torch.Generator()
    gen.manual_seed(seed_all)
    return gen


@pytest.fixture
def two_groups() -> list:
    """Three points near the origin and three near (10, 10)."""
    return [
        torch.tensor(p, dtype=torch.float64)
        for p in [(0., 0.), (0., 1.), (1., 0.), (10., 10.), (10., 11.), (11., 10.)]
    ]
