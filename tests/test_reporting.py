"""Tests for console reporting."""

import io

from rich.console import Console

from fieldsweep.experiment.models import CombinationResult, RowScore
from fieldsweep.experiment.validation import ValidationReport
from fieldsweep.reporting import (
    _preview,
    print_combination_detail,
    print_validation,
)


def make_console() -> Console:
    return Console(file=io.StringIO(), width=120)


def test_validation_report_lists_errors_and_warnings():
    out = make_console()

    print_validation(ValidationReport(errors=["bad ratio"], warnings=["few rows"]), out=out)
    text = out.file.getvalue()

    assert "bad ratio" in text
    assert "few rows" in text
    assert "Configuration is valid" not in text


def test_combination_detail_shows_best_and_worst():
    rows = [
        RowScore(test_index=0, query="q one", expected_answer="a", actual_answer="low",
                 similarity=0.4, score=0.2),
        RowScore(test_index=1, query="q two", expected_answer="a", actual_answer="high",
                 similarity=0.9, score=0.8),
    ]
    combination = CombinationResult(name="title", fields=["title"], row_scores=rows)
    out = make_console()

    print_combination_detail(combination, out=out)
    text = out.file.getvalue()

    assert "high" in text
    assert "low" in text


def test_combination_without_rows():
    out = make_console()

    print_combination_detail(CombinationResult(name="body", fields=["body"]), out=out)

    assert "no scored rows" in out.file.getvalue()


def test_preview_truncates_and_flattens():
    assert _preview("a\n  b") == "a b"
    assert _preview("x" * 100, limit=10) == "x" * 10 + "..."
