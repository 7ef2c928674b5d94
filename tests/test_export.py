"""Tests for saving and loading experiment results."""

import json

import pytest

from fieldsweep.config import Settings
from fieldsweep.experiment.export import (
    export_results,
    import_results,
    load_results,
    results_filename,
    save_results,
)
from fieldsweep.experiment.runner import ExperimentRunner


@pytest.fixture
def result(embedder, sql_config, sql_rows):
    return ExperimentRunner(embedder, settings=Settings()).run(sql_config, sql_rows)


def test_export_import_preserves_result(result):
    restored = import_results(export_results(result))

    assert restored == result
    assert restored.timestamp == result.timestamp
    assert restored.combinations[0].row_scores == result.combinations[0].row_scores


def test_export_is_plain_json(result):
    data = json.loads(export_results(result))

    assert data["experiment_name"] == "sql lookup"
    assert data["summary"]["combination_count"] == 3
    assert data["configuration"]["candidate_fields"] == ["title", "description"]


def test_results_filename(result):
    name = results_filename(result)

    assert name.startswith("sql-lookup-")
    assert name.endswith(".json")
    assert result.experiment_id[:8] in name


def test_save_into_directory(result, tmp_path):
    path = save_results(result, tmp_path / "results")

    assert path.parent == tmp_path / "results"
    assert path.name == results_filename(result)
    assert load_results(path) == result


def test_save_to_explicit_file(result, tmp_path):
    path = save_results(result, tmp_path / "nested" / "run.json")

    assert path == tmp_path / "nested" / "run.json"
    assert load_results(path).experiment_id == result.experiment_id


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_results(tmp_path / "absent.json")
