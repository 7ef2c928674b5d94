"""
Experiments over field combinations.

This module handles:
- Experiment configuration and result models
- Configuration validation
- Train/test splitting
- Running every combination and summarizing the outcome
- JSON export and import of results

Usage:
    from fieldsweep.experiment import ExperimentConfig, ExperimentRunner

    config = ExperimentConfig(
        experiment_name="faq retrieval",
        candidate_fields=["title", "description"],
        target_field="sql",
        query_field="question",
        answer_field="sql",
    )
    result = ExperimentRunner(embedder).run(config, rows)
"""

from fieldsweep.experiment.export import (
    export_results,
    import_results,
    load_results,
    save_results,
)
from fieldsweep.experiment.models import (
    CombinationResult,
    ExperimentConfig,
    ExperimentResult,
    ExperimentSummary,
    RowScore,
)
from fieldsweep.experiment.runner import ExperimentRunner, RunStage, summarize
from fieldsweep.experiment.splitting import DataSplit, split_rows
from fieldsweep.experiment.validation import (
    ValidationReport,
    ensure_valid,
    validate_configuration,
)

__all__ = [
    "export_results",
    "import_results",
    "load_results",
    "save_results",
    "CombinationResult",
    "ExperimentConfig",
    "ExperimentResult",
    "ExperimentSummary",
    "RowScore",
    "ExperimentRunner",
    "RunStage",
    "summarize",
    "DataSplit",
    "split_rows",
    "ValidationReport",
    "ensure_valid",
    "validate_configuration",
]
