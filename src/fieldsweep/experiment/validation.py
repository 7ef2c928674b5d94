"""
Configuration checks run before an experiment touches any rows.

validate_configuration() collects every problem instead of stopping at the
first, so a caller can show them all at once. Errors block the run;
warnings only flag results that may not be reliable.
"""

import math
from collections.abc import Iterable
from dataclasses import dataclass, field

from fieldsweep.combinations import MAX_FIELDS
from fieldsweep.errors import ConfigurationError
from fieldsweep.experiment.models import ExperimentConfig
from fieldsweep.logging import get_logger
from fieldsweep.scoring.base import ENGINE_ALIASES
from fieldsweep.vectorstore.embeddings import PROVIDERS

logger = get_logger(__name__, component="validation")

MIN_RELIABLE_ROWS = 10
MIN_RELIABLE_TEST_ROWS = 5


@dataclass
class ValidationReport:
    """Errors and warnings found in a configuration."""
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def validate_configuration(
        config: ExperimentConfig,
        available_columns: Iterable[str] | None = None,
        row_count: int | None = None,
) -> ValidationReport:
    """
    Check an experiment configuration.

    Args:
        config: The configuration to check
        available_columns: Column names of the source table, when known
        row_count: Number of rows in the source table, when known

    Returns:
        ValidationReport listing every error and warning
    """
    report = ValidationReport()
    errors = report.errors
    warnings = report.warnings
    candidates = config.candidate_fields

    if not config.experiment_name.strip():
        errors.append("Experiment name must not be empty")

    if not candidates:
        errors.append("At least one column must be selected for embeddings")
    if len(candidates) > MAX_FIELDS:
        errors.append(
            f"At most {MAX_FIELDS} columns can be selected, got {len(candidates)}"
        )
    elif len(candidates) == MAX_FIELDS:
        warnings.append(
            f"{MAX_FIELDS} columns selected - {2 ** MAX_FIELDS - 1} combinations will be evaluated"
        )

    duplicates = sorted({name for name in candidates if candidates.count(name) > 1})
    if duplicates:
        errors.append(f"Duplicate candidate columns: {', '.join(duplicates)}")

    if config.target_field in candidates:
        errors.append(
            f"Target column \"{config.target_field}\" must not be one of the candidate columns"
        )

    if not 0 < config.training_ratio < 1:
        errors.append("Training ratio must be between 0 and 1")

    if config.scoring_engine.strip().lower() not in ENGINE_ALIASES:
        errors.append(
            f"Unknown scoring engine \"{config.scoring_engine}\". "
            f"Use one of: {', '.join(ENGINE_ALIASES)}"
        )

    if config.embedding_provider.lower() not in PROVIDERS:
        errors.append(
            f"Unknown embedding provider \"{config.embedding_provider}\". "
            f"Use one of: {', '.join(PROVIDERS)}"
        )

    if available_columns is not None:
        columns = set(available_columns)
        table = f" in table \"{config.table}\"" if config.table else ""

        for name in candidates:
            if name not in columns:
                errors.append(f"Column \"{name}\" not found{table}")

        for label, name in (
            ("Target", config.target_field),
            ("Query", config.query_field),
            ("Answer", config.answer_field),
        ):
            if name not in columns:
                errors.append(f"{label} column \"{name}\" not found{table}")

    if row_count is not None:
        if row_count < MIN_RELIABLE_ROWS:
            warnings.append("Table has very few rows - results may not be reliable")

        if 0 < config.training_ratio < 1:
            test_size = math.ceil(row_count * (1 - config.training_ratio))
            if test_size < MIN_RELIABLE_TEST_ROWS:
                warnings.append(
                    "Test set will be very small - consider adjusting training ratio"
                )

    return report


def ensure_valid(
        config: ExperimentConfig,
        available_columns: Iterable[str] | None = None,
        row_count: int | None = None,
) -> ValidationReport:
    """
    Validate and raise on errors.

    Raises:
        ConfigurationError: Carrying every error found
    """
    report = validate_configuration(config, available_columns, row_count)

    for warning in report.warnings:
        logger.warning("configuration_warning", experiment=config.experiment_name, warning=warning)

    if not report.is_valid:
        logger.error(
            "configuration_invalid",
            experiment=config.experiment_name,
            errors=report.errors,
        )
        raise ConfigurationError(report.errors)

    return report
