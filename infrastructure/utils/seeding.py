"""Random seed configuration for reproducibility."""

import hashlib
import os
import random

import numpy as np


def set_seed(seed: int) -> None:
    """
    Set random seed for reproducibility across Python, NumPy, and hash-based operations.

    Evaluation steps do not rely on these globals (they take explicit seeds), but
    library code that falls back to the legacy global RNG stays deterministic.

    Args:
        seed: Random seed value
    """
    random.seed(seed)
    np.random.seed(seed)
    os.environ["PYTHONHASHSEED"] = str(seed)


def derive_seed(root_seed: int, label: str) -> int:
    """
    Stable per-step seed derived from the run seed and a step label.

    Changing the number of repetitions in one step never shifts the random
    stream of another step.
    """
    digest = hashlib.blake2s(label.encode("utf-8"), digest_size=4).digest()
    entropy = [int(root_seed), int.from_bytes(digest, "little")]
    return int(np.random.SeedSequence(entropy).generate_state(1)[0] & 0x7FFFFFFF)
