"""Data models for experiment configuration and results.

Every model is frozen and holds its sequences as tuples: the configuration
is fixed before a run starts, and results are built once by the runner and
handed to presentation code unchanged. They serialize to JSON and back
without loss (see experiment.export).
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ExperimentConfig(BaseModel):
    """Everything needed to run one experiment.

    ----------
    experiment_name : str
        Free-text label for the run.
    candidate_fields : tuple[str, ...]
        Fields whose subsets are embedded (1 to 5).
    target_field : str
        Field returned by retrieval and scored; never a candidate.
    query_field : str
        Field of a test row that is embedded as the query.
    answer_field : str
        Field of a test row holding the expected answer.
    scoring_engine : str
        "structured-query" (alias "sql") or "domain-document" (alias "brdr").
    embedding_provider : str
        "openai" or "local".
    training_ratio : float
        Share of rows used for the index, strictly between 0 and 1.
    table : str | None
        Row source table the rows come from.
    seed : int | None
        Seed for the train/test shuffle; None gives a different split per run.
    scoring_weights : dict[str, float]
        Partial override of the scoring engine's weights.
    """

    model_config = ConfigDict(frozen=True)

    experiment_name: str
    candidate_fields: tuple[str, ...]
    target_field: str
    query_field: str
    answer_field: str
    scoring_engine: str = "structured-query"
    embedding_provider: str = "local"
    training_ratio: float = 0.8
    table: str | None = None
    seed: int | None = None
    scoring_weights: dict[str, float] = Field(default_factory=dict)

    @property
    def referenced_fields(self) -> list[str]:
        """Every field the experiment reads, candidates first."""
        fields = [*self.candidate_fields, self.target_field, self.query_field, self.answer_field]
        return list(dict.fromkeys(fields))


class RowScore(BaseModel):
    """Score of one held-out row against its retrieved neighbour."""

    model_config = ConfigDict(frozen=True)

    test_index: int
    query: str
    expected_answer: str
    actual_answer: str
    similarity: float
    score: float
    breakdown: dict[str, float] = Field(default_factory=dict)
    details: dict[str, Any] = Field(default_factory=dict)


class CombinationResult(BaseModel):
    """Outcome of evaluating one field combination.

    A combination whose index could not be built keeps score 0, has no row
    scores, and carries the reason in error.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    fields: tuple[str, ...]
    mean_score: float = 0.0
    row_count: int = 0
    mean_similarity: float = 0.0
    processing_time_ms: float = 0.0
    training_records: int = 0
    skipped_rows: int = 0
    error: str | None = None
    row_scores: tuple[RowScore, ...] = ()

    @property
    def failed(self) -> bool:
        return self.error is not None

    def best_row(self) -> RowScore | None:
        """Highest-scoring row; the earliest wins a tie."""
        best = None
        for row in self.row_scores:
            if best is None or row.score > best.score:
                best = row
        return best

    def worst_row(self) -> RowScore | None:
        """Lowest-scoring row; the earliest wins a tie."""
        worst = None
        for row in self.row_scores:
            if worst is None or row.score < worst.score:
                worst = row
        return worst


class ExperimentSummary(BaseModel):
    """Across-combination statistics."""

    model_config = ConfigDict(frozen=True)

    best_combination: str
    best_fields: tuple[str, ...]
    best_score: float
    worst_combination: str
    worst_fields: tuple[str, ...]
    worst_score: float
    mean_score: float
    combination_count: int


class ExperimentResult(BaseModel):
    """Full outcome of an experiment."""

    model_config = ConfigDict(frozen=True)

    experiment_id: str
    experiment_name: str
    timestamp: datetime
    configuration: ExperimentConfig
    combinations: tuple[CombinationResult, ...]
    summary: ExperimentSummary
    total_processing_time_ms: float

    def ranked(self) -> list[CombinationResult]:
        """Combinations by mean score, best first; ties keep run order."""
        return sorted(self.combinations, key=lambda c: c.mean_score, reverse=True)
