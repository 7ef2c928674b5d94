"""
Field combinations for an experiment.

Every non-empty subset of the candidate fields is one Combination. Five
candidates (31 combinations) is the ceiling; each combination means one
index build and one embedding call per test row.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from itertools import combinations as subsets

from fieldsweep.errors import InvalidFieldSet

MAX_FIELDS = 5
NAME_SEPARATOR = " + "


@dataclass(frozen=True)
class Combination:
    """A non-empty subset of the candidate fields, in candidate order."""
    fields: tuple[str, ...]

    @property
    def name(self) -> str:
        return NAME_SEPARATOR.join(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def __str__(self) -> str:
        return self.name


def dedupe_fields(fields: list[str]) -> list[str]:
    """Drop repeated field names, keeping the first occurrence."""
    seen = set()
    unique = []
    for name in fields:
        if name not in seen:
            seen.add(name)
            unique.append(name)
    return unique


def generate_combinations(fields: Sequence[str]) -> list[Combination]:
    """
    Enumerate every non-empty subset of the candidate fields.

    Subsets come out by size, then in the order itertools.combinations
    produces them; fields inside a subset keep the candidate order, so a
    subset always gets the same name.

    Raises:
        InvalidFieldSet: If there are no fields or more than MAX_FIELDS
    """
    unique = dedupe_fields(list(fields))

    if not unique:
        raise InvalidFieldSet("At least one field must be selected for embeddings")
    if len(unique) > MAX_FIELDS:
        raise InvalidFieldSet(
            f"At most {MAX_FIELDS} fields can be combined, got {len(unique)}"
        )

    return [
        Combination(fields=subset)
        for size in range(1, len(unique) + 1)
        for subset in subsets(unique, size)
    ]
