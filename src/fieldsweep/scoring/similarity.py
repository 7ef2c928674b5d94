"""
Set similarity shared by both scoring engines.

Every sub-metric compares two bags of extracted terms: tables, columns,
concepts, keywords and so on. The comparison is a case-insensitive Jaccard
index plus the terms that are missing from, or extra in, the actual side.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field


@dataclass
class SetComparison:
    """Result of comparing an expected and an actual set of terms."""
    score: float
    missing: list[str] = field(default_factory=list)
    extra: list[str] = field(default_factory=list)

    @property
    def difference_count(self) -> int:
        return len(self.missing) + len(self.extra)


def _normalise(items: Iterable[str]) -> list[str]:
    """Lower-case and de-duplicate, keeping first-seen order."""
    return list(dict.fromkeys(item.lower() for item in items))


def set_similarity(expected: Iterable[str], actual: Iterable[str]) -> SetComparison:
    """
    Jaccard similarity of two term collections.

    Two empty collections match perfectly (score 1). missing lists the
    expected terms absent from actual; extra lists the actual terms absent
    from expected.

    Example:
        >>> set_similarity(["users", "orders"], ["Users"])
        SetComparison(score=0.5, missing=['orders'], extra=[])
    """
    expected_items = _normalise(expected)
    actual_items = _normalise(actual)
    expected_set = set(expected_items)
    actual_set = set(actual_items)

    union = expected_set | actual_set
    intersection = expected_set & actual_set
    score = 1.0 if not union else len(intersection) / len(union)

    return SetComparison(
        score=score,
        missing=[item for item in expected_items if item not in actual_set],
        extra=[item for item in actual_items if item not in expected_set],
    )
