"""
Scoring engine interface and registry.

A scoring engine turns an (expected, actual) text pair into one score in
[0, 1] built from weighted sub-criteria. Engines are looked up by name;
"sql" and "brdr" are accepted as short aliases.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from fieldsweep.errors import ConfigurationError


@dataclass
class ScoreResult:
    """
    Outcome of one scoring call.

    breakdown holds every sub-score by criterion name; details holds the
    missing/extra term lists and any other diagnostic values. Both contain
    only JSON-friendly values so they can be stored on results as-is.
    """
    overall_score: float
    breakdown: dict[str, float] = field(default_factory=dict)
    details: dict[str, Any] = field(default_factory=dict)


class ScoringEngine(Protocol):
    """What the experiment runner needs from a scorer."""

    name: str

    def score(self, expected: str, actual: str) -> ScoreResult:
        ...


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def merge_weights(
        defaults: Mapping[str, float],
        overrides: Mapping[str, float] | None,
) -> dict[str, float]:
    """
    Apply a partial weight override on top of the defaults.

    Raises:
        ValueError: If an override names an unknown criterion
    """
    weights = dict(defaults)
    if not overrides:
        return weights

    unknown = sorted(set(overrides) - set(defaults))
    if unknown:
        raise ValueError(
            f"Unknown weight(s): {', '.join(unknown)}. "
            f"Expected some of: {', '.join(defaults)}"
        )
    weights.update({key: float(value) for key, value in overrides.items()})
    return weights


def weighted_sum(breakdown: Mapping[str, float], weights: Mapping[str, float]) -> float:
    """Weighted sum of sub-scores, clamped to [0, 1]."""
    return clamp(sum(breakdown[name] * weight for name, weight in weights.items()))


STRUCTURED_QUERY = "structured-query"
DOMAIN_DOCUMENT = "domain-document"

ENGINE_ALIASES = {
    STRUCTURED_QUERY: STRUCTURED_QUERY,
    "sql": STRUCTURED_QUERY,
    DOMAIN_DOCUMENT: DOMAIN_DOCUMENT,
    "brdr": DOMAIN_DOCUMENT,
}


def resolve_engine_name(name: str) -> str:
    """
    Map an engine name or alias to its canonical name.

    Raises:
        ConfigurationError: If the name is unknown
    """
    canonical = ENGINE_ALIASES.get(name.strip().lower())
    if canonical is None:
        raise ConfigurationError(
            f"Unknown scoring engine '{name}'. Use one of: {', '.join(ENGINE_ALIASES)}"
        )
    return canonical


def get_scoring_engine(
        name: str,
        weights: Mapping[str, float] | None = None,
) -> ScoringEngine:
    """
    Build the scoring engine registered under name.

    Args:
        name: "structured-query" / "sql" or "domain-document" / "brdr"
        weights: Optional partial override of the engine's default weights

    Raises:
        ConfigurationError: If the name is unknown or a weight key is invalid
    """
    # Imported here: both engine modules import helpers from this one
    from fieldsweep.scoring.domain_document import DocumentScorer
    from fieldsweep.scoring.structured_query import SQLScorer

    canonical = resolve_engine_name(name)
    engine_cls = SQLScorer if canonical == STRUCTURED_QUERY else DocumentScorer

    try:
        return engine_cls(weights=weights)
    except ValueError as e:
        raise ConfigurationError(str(e)) from e
