"""Tests for the command-line interface."""

import json

import pytest
from click.testing import CliRunner

from fieldsweep import cli


@pytest.fixture
def data_dir(tmp_path, sql_rows):
    directory = tmp_path / "data"
    directory.mkdir()
    (directory / "questions.jsonl").write_text(
        "\n".join(json.dumps(row) for row in sql_rows)
    )
    return directory


@pytest.fixture
def runner(monkeypatch, embedder) -> CliRunner:
    monkeypatch.setattr(cli, "configure_logging", lambda *args, **kwargs: None)
    monkeypatch.setattr(cli, "get_embedder", lambda *args, **kwargs: embedder)
    return CliRunner()


def experiment_args(data_dir, *extra):
    return [
        "questions",
        "--field", "title",
        "--field", "description",
        "--target", "sql",
        "--query", "question",
        "--answer", "sql",
        "--data-dir", str(data_dir),
        *extra,
    ]


def test_tables(runner, data_dir):
    result = runner.invoke(cli.main, ["tables", "--data-dir", str(data_dir)])

    assert result.exit_code == 0, result.output
    assert "questions" in result.output


def test_tables_empty_directory(runner, tmp_path):
    result = runner.invoke(cli.main, ["tables", "--data-dir", str(tmp_path)])

    assert result.exit_code == 0
    assert "No tables found" in result.output


def test_describe(runner, data_dir):
    result = runner.invoke(cli.main, ["describe", "questions", "--data-dir", str(data_dir)])

    assert result.exit_code == 0, result.output
    assert "description" in result.output
    assert "20 rows" in result.output


def test_describe_unknown_table(runner, data_dir):
    result = runner.invoke(cli.main, ["describe", "missing", "--data-dir", str(data_dir)])

    assert result.exit_code == 1
    assert "Table not found" in result.output


def test_validate_ok(runner, data_dir):
    result = runner.invoke(cli.main, ["validate", *experiment_args(data_dir)])

    assert result.exit_code == 0, result.output
    assert "Configuration is valid" in result.output


def test_validate_reports_errors(runner, data_dir):
    args = experiment_args(data_dir, "--field", "sql", "--ratio", "1.5")

    result = runner.invoke(cli.main, ["validate", *args])

    assert result.exit_code == 1
    assert "Training ratio" in result.output


def test_run_saves_results_then_show(runner, data_dir, tmp_path):
    output = tmp_path / "results"

    result = runner.invoke(
        cli.main,
        ["run", *experiment_args(data_dir, "--seed", "3", "--output", str(output), "--details")],
    )

    assert result.exit_code == 0, result.output
    assert "3/3" in result.output
    assert "Summary" in result.output

    saved = list(output.glob("*.json"))
    assert len(saved) == 1
    data = json.loads(saved[0].read_text())
    assert data["configuration"]["seed"] == 3
    assert data["configuration"]["table"] == "questions"

    shown = runner.invoke(cli.main, ["show", str(saved[0])])
    assert shown.exit_code == 0, shown.output
    assert "Summary" in shown.output


def test_run_with_weight_override(runner, data_dir, tmp_path):
    output = tmp_path / "weighted.json"
    args = experiment_args(data_dir, "--weight", "syntax=0.5", "--output", str(output))

    result = runner.invoke(cli.main, ["run", *args])

    assert result.exit_code == 0, result.output
    assert json.loads(output.read_text())["configuration"]["scoring_weights"] == {"syntax": 0.5}


def test_run_rejects_malformed_weight(runner, data_dir):
    result = runner.invoke(cli.main, ["run", *experiment_args(data_dir, "--weight", "syntax")])

    assert result.exit_code == 2
    assert "KEY=VALUE" in result.output


def test_run_unknown_weight_is_error(runner, data_dir, tmp_path):
    args = experiment_args(data_dir, "--weight", "bogus=1", "--output", str(tmp_path))

    result = runner.invoke(cli.main, ["run", *args])

    assert result.exit_code == 1
    assert "Unknown weight" in result.output
