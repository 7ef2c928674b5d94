"""
Experiment orchestration.

Stages, always in this order:

1. Validating: check the configuration against the rows' columns
2. Splitting: shuffle once and cut into training and testing rows
3. Evaluating: for each combination, build an index from the training
   rows, retrieve the nearest training row for every testing row's query,
   and score its target value against the expected answer
4. Aggregating: best, worst and mean across combinations

Only an invalid configuration or an empty dataset stops an experiment.
A testing row that fails is skipped; a combination whose index cannot be
built is recorded with score 0 and the next combination runs.

Usage:
    from fieldsweep.experiment.runner import ExperimentRunner

    runner = ExperimentRunner(embedder)
    result = runner.run(config, rows)
    print(result.summary.best_combination, result.summary.best_score)
"""

import time
import uuid
from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from enum import Enum

from fieldsweep.combinations import Combination, generate_combinations
from fieldsweep.config import Settings, get_settings
from fieldsweep.errors import EmptyIndex, NoRowsError, ProviderFailure
from fieldsweep.experiment.models import (
    CombinationResult,
    ExperimentConfig,
    ExperimentResult,
    ExperimentSummary,
    RowScore,
)
from fieldsweep.experiment.splitting import DataSplit, split_rows
from fieldsweep.experiment.validation import ensure_valid
from fieldsweep.ingestion.rows import Row, RowSource, value_to_text
from fieldsweep.logging import experiment_context, get_logger
from fieldsweep.retrieval.matcher import RetrievalMatcher
from fieldsweep.scoring.base import ScoringEngine, get_scoring_engine
from fieldsweep.vectorstore.embeddings import BaseEmbedder
from fieldsweep.vectorstore.index import EmbeddingIndex

logger = get_logger(__name__, component="runner")

PROGRESS_EVERY = 10


class RunStage(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    SPLITTING = "splitting"
    EVALUATING = "evaluating"
    AGGREGATING = "aggregating"
    DONE = "done"


STAGE_ORDER = list(RunStage)


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


def summarize(results: Sequence[CombinationResult]) -> ExperimentSummary:
    """
    Best, worst and mean over combination results.

    Ties: the first combination reaching the top score is best, the last
    one reaching the bottom score is worst.

    Raises:
        ValueError: If results is empty
    """
    if not results:
        raise ValueError("Cannot summarize an experiment with no combination results")

    best = results[0]
    worst = results[0]
    for result in results[1:]:
        if result.mean_score > best.mean_score:
            best = result
        if result.mean_score <= worst.mean_score:
            worst = result

    return ExperimentSummary(
        best_combination=best.name,
        best_fields=best.fields,
        best_score=best.mean_score,
        worst_combination=worst.name,
        worst_fields=worst.fields,
        worst_score=worst.mean_score,
        mean_score=sum(r.mean_score for r in results) / len(results),
        combination_count=len(results),
    )


class ExperimentRunner:
    """
    Runs every field combination of an experiment, one after another.

    The runner holds the embedding provider for the whole experiment; each
    combination gets its own index, dropped once the combination is
    scored.

    Example:
        runner = ExperimentRunner(get_embedder("local"))

        result = runner.run(config, rows, on_combination=lambda i, n, r: print(i, n, r.name))
    """

    def __init__(
            self,
            embedder: BaseEmbedder,
            scorer: ScoringEngine | None = None,
            settings: Settings | None = None,
    ):
        """
        Initialize the runner.

        Args:
            embedder: Embedding provider used for both indexing and queries
            scorer: Scoring engine; if None it is built from each config
            settings: Settings (default seed); defaults to get_settings()
        """
        self.embedder = embedder
        self.scorer = scorer
        self.settings = settings or get_settings()
        self.matcher = RetrievalMatcher(embedder)
        self.stage = RunStage.IDLE

    def _advance(self, stage: RunStage) -> None:
        if STAGE_ORDER.index(stage) <= STAGE_ORDER.index(self.stage):
            raise RuntimeError(f"Cannot move from {self.stage.value} to {stage.value}")
        self.stage = stage
        logger.debug("stage_entered", stage=stage.value)

    def run_table(
            self,
            config: ExperimentConfig,
            source: RowSource,
            on_combination: Callable[[int, int, CombinationResult], None] | None = None,
    ) -> ExperimentResult:
        """Load config.table from a row source and run the experiment on it."""
        if not config.table:
            raise ValueError("config.table must name the table to read rows from")
        rows = source.get_rows(config.table)
        return self.run(config, rows, on_combination=on_combination)

    def run(
            self,
            config: ExperimentConfig,
            rows: Sequence[Row],
            on_combination: Callable[[int, int, CombinationResult], None] | None = None,
    ) -> ExperimentResult:
        """
        Run a full experiment.

        Args:
            config: Experiment configuration
            rows: Every row of the dataset
            on_combination: Called as (position, total, result) after each combination

        Returns:
            ExperimentResult with one CombinationResult per combination

        Raises:
            ConfigurationError: If the configuration is invalid
            NoRowsError: If rows is empty
        """
        experiment_id = uuid.uuid4().hex
        with experiment_context(config.experiment_name, experiment_id):
            return self._run(config, rows, on_combination, experiment_id)

    def _run(
            self,
            config: ExperimentConfig,
            rows: Sequence[Row],
            on_combination: Callable[[int, int, CombinationResult], None] | None,
            experiment_id: str,
    ) -> ExperimentResult:
        start = time.perf_counter()
        self.stage = RunStage.IDLE

        logger.info(
            "experiment_start",
            fields=list(config.candidate_fields),
            engine=config.scoring_engine,
            rows=len(rows),
        )

        # ===== Validating =====
        self._advance(RunStage.VALIDATING)
        columns = {key for row in rows for key in row}
        ensure_valid(config, available_columns=columns if rows else None, row_count=len(rows))
        if not rows:
            raise NoRowsError(f"No rows to run experiment '{config.experiment_name}' on")

        scorer = self.scorer or get_scoring_engine(config.scoring_engine, config.scoring_weights)
        combinations = generate_combinations(config.candidate_fields)
        logger.info("combinations_generated", count=len(combinations))

        # ===== Splitting =====
        self._advance(RunStage.SPLITTING)
        seed = config.seed if config.seed is not None else self.settings.random_seed
        split = split_rows(rows, config.training_ratio, seed=seed)
        logger.info(
            "data_split",
            training=len(split.training),
            testing=len(split.testing),
            seed=seed,
        )

        # ===== Evaluating =====
        self._advance(RunStage.EVALUATING)
        results: list[CombinationResult] = []
        for position, combination in enumerate(combinations, 1):
            logger.info(
                "combination_start",
                combination=combination.name,
                position=position,
                total=len(combinations),
            )
            result = self.evaluate_combination(config, combination, split, scorer)
            results.append(result)

            logger.info(
                "combination_complete",
                combination=combination.name,
                score=round(result.mean_score, 4),
                rows=result.row_count,
                failed=result.failed,
            )
            if on_combination:
                on_combination(position, len(combinations), result)

        # ===== Aggregating =====
        self._advance(RunStage.AGGREGATING)
        summary = summarize(results)

        experiment = ExperimentResult(
            experiment_id=experiment_id,
            experiment_name=config.experiment_name,
            timestamp=datetime.now(UTC),
            configuration=config,
            combinations=results,
            summary=summary,
            total_processing_time_ms=_elapsed_ms(start),
        )

        self._advance(RunStage.DONE)
        logger.info(
            "experiment_complete",
            best=summary.best_combination,
            best_score=round(summary.best_score, 4),
            elapsed_ms=round(experiment.total_processing_time_ms),
        )
        return experiment

    def evaluate_combination(
            self,
            config: ExperimentConfig,
            combination: Combination,
            split: DataSplit,
            scorer: ScoringEngine,
    ) -> CombinationResult:
        """
        Index the training rows for one combination and score every test row.

        Never raises for data problems: an index that cannot be built gives
        a failed result, a test row that cannot be scored is skipped.
        """
        start = time.perf_counter()

        try:
            index = EmbeddingIndex.build(
                split.training, combination, config.target_field, self.embedder
            )
        except EmptyIndex as e:
            logger.warning("combination_degenerate", combination=combination.name, error=str(e))
            return self._failed_result(combination, str(e), start, skipped=len(split.testing))
        except ProviderFailure as e:
            logger.error("combination_failed", combination=combination.name, error=str(e))
            return self._failed_result(combination, str(e), start, skipped=len(split.testing))

        row_scores: list[RowScore] = []
        skipped = 0

        for test_index, row in enumerate(split.testing):
            query = value_to_text(row.get(config.query_field))
            expected = value_to_text(row.get(config.answer_field))

            if not query.strip() or not expected.strip():
                logger.warning(
                    "test_row_skipped",
                    combination=combination.name,
                    row=test_index,
                    reason="missing query or answer",
                )
                skipped += 1
                continue

            try:
                matches = self.matcher.query(query, index, k=1)
                if not matches:
                    logger.warning("no_match", combination=combination.name, query=query[:50])
                    skipped += 1
                    continue

                best = matches[0]
                scored = scorer.score(expected, best.target_value)
            except Exception as e:
                # Row-level failures skip the row
                logger.warning(
                    "test_row_failed",
                    combination=combination.name,
                    row=test_index,
                    error=str(e),
                )
                skipped += 1
                continue

            row_scores.append(RowScore(
                test_index=test_index,
                query=query,
                expected_answer=expected,
                actual_answer=best.target_value,
                similarity=best.similarity,
                score=scored.overall_score,
                breakdown=scored.breakdown,
                details=scored.details,
            ))

            if (test_index + 1) % PROGRESS_EVERY == 0:
                logger.debug(
                    "test_progress",
                    combination=combination.name,
                    processed=test_index + 1,
                    total=len(split.testing),
                )

        count = len(row_scores)
        return CombinationResult(
            name=combination.name,
            fields=combination.fields,
            mean_score=sum(r.score for r in row_scores) / count if count else 0.0,
            row_count=count,
            mean_similarity=sum(r.similarity for r in row_scores) / count if count else 0.0,
            processing_time_ms=_elapsed_ms(start),
            training_records=len(index),
            skipped_rows=skipped,
            row_scores=row_scores,
        )

    def _failed_result(
            self,
            combination: Combination,
            error: str,
            start: float,
            skipped: int,
    ) -> CombinationResult:
        return CombinationResult(
            name=combination.name,
            fields=combination.fields,
            processing_time_ms=_elapsed_ms(start),
            skipped_rows=skipped,
            error=error,
        )
