"""
Export and import of experiment results as JSON.

Nothing is stored by the experiment itself; these helpers only turn an
ExperimentResult into text (or a file) and back.
"""

import re
from pathlib import Path

from fieldsweep.experiment.models import ExperimentResult
from fieldsweep.logging import get_logger

logger = get_logger(__name__, component="export")


def export_results(result: ExperimentResult) -> str:
    """Serialize a result to indented JSON."""
    return result.model_dump_json(indent=2)


def import_results(text: str) -> ExperimentResult:
    """Parse JSON produced by export_results."""
    return ExperimentResult.model_validate_json(text)


def results_filename(result: ExperimentResult) -> str:
    """File name for a result: slugified experiment name plus a short id."""
    slug = re.sub(r"[^a-z0-9]+", "-", result.experiment_name.lower()).strip("-") or "experiment"
    return f"{slug}-{result.experiment_id[:8]}.json"


def save_results(result: ExperimentResult, path: Path) -> Path:
    """
    Write a result to path.

    If path is a directory (or has no suffix) the file is created inside
    it with results_filename().
    """
    path = Path(path)
    if path.is_dir() or not path.suffix:
        path = path / results_filename(result)

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(export_results(result), encoding="utf-8")

    logger.info("results_saved", path=str(path), experiment=result.experiment_name)
    return path


def load_results(path: Path) -> ExperimentResult:
    """Read a result written by save_results."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Results file not found: {path}")

    result = import_results(path.read_text(encoding="utf-8"))
    logger.info("results_loaded", path=str(path), experiment=result.experiment_name)
    return result
