"""Train/test split of experiment rows."""

import math
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from fieldsweep.ingestion.rows import Row


@dataclass
class DataSplit:
    """Rows used to build indexes, and rows used to query them."""
    training: list[Row]
    testing: list[Row]


def split_rows(rows: Sequence[Row], training_ratio: float, seed: int | None = None) -> DataSplit:
    """
    Shuffle rows and cut them at floor(N * training_ratio).

    The first segment is the training set, the rest the testing set. With
    seed=None the shuffle differs between runs.

    Raises:
        ValueError: If training_ratio is not strictly between 0 and 1
    """
    if not 0 < training_ratio < 1:
        raise ValueError(f"training_ratio must be strictly between 0 and 1, got {training_ratio}")

    rng = np.random.default_rng(seed)
    order = rng.permutation(len(rows))
    cut = math.floor(len(rows) * training_ratio)

    shuffled = [rows[i] for i in order]
    return DataSplit(training=shuffled[:cut], testing=shuffled[cut:])
