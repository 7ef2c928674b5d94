"""Console reporting for experiments.

This module provides:
- print_validation: render errors and warnings of a configuration check
- print_table_info: render a table's columns
- print_summary: render the ranked combinations of an experiment
- print_combination_detail: render the best and worst rows of one combination
"""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from fieldsweep.experiment.models import CombinationResult, ExperimentResult
from fieldsweep.experiment.validation import ValidationReport
from fieldsweep.ingestion.rows import TableInfo

console = Console()


def _score_style(value: float) -> str:
    """Return a Rich style string based on the numeric score."""
    if value >= 0.7:
        return "bold green"
    if value >= 0.5:
        return "yellow"
    return "bold red"


def _fmt_score(value: float) -> Text:
    return Text(f"{value:.4f}", style=_score_style(value))


def _preview(text: str, limit: int = 80) -> str:
    text = " ".join(text.split())
    return text if len(text) <= limit else text[:limit] + "..."


def print_validation(report: ValidationReport, out: Console | None = None) -> None:
    out = out or console
    for error in report.errors:
        out.print(f"[red]✗ {error}[/red]")
    for warning in report.warnings:
        out.print(f"[yellow]! {warning}[/yellow]")
    if report.is_valid:
        out.print("[green]✓ Configuration is valid[/green]")


def print_table_info(info: TableInfo, out: Console | None = None) -> None:
    out = out or console
    table = Table(title=f"{info.name} ({info.row_count} rows)")
    table.add_column("Column")
    table.add_column("Type")
    table.add_column("Nullable", justify="center")
    for column in info.columns:
        table.add_row(column.name, column.data_type, "yes" if column.nullable else "")
    out.print(table)


def print_summary(result: ExperimentResult, out: Console | None = None) -> None:
    """Ranked table of combinations followed by the summary panel."""
    out = out or console

    table = Table(title=f"{result.experiment_name} - {result.configuration.scoring_engine}")
    table.add_column("#", justify="right")
    table.add_column("Combination")
    table.add_column("Mean score", justify="right")
    table.add_column("Mean similarity", justify="right")
    table.add_column("Rows", justify="right")
    table.add_column("Skipped", justify="right")
    table.add_column("Time (ms)", justify="right")

    for rank, combination in enumerate(result.ranked(), 1):
        name = combination.name
        if combination.failed:
            name = f"{name} [dim](failed)[/dim]"
        table.add_row(
            str(rank),
            name,
            _fmt_score(combination.mean_score),
            f"{combination.mean_similarity:.4f}",
            str(combination.row_count),
            str(combination.skipped_rows),
            f"{combination.processing_time_ms:.0f}",
        )
    out.print(table)

    summary = result.summary
    body = "\n".join([
        f"Best:  [bold]{summary.best_combination}[/bold] ({summary.best_score:.4f})",
        f"Worst: [bold]{summary.worst_combination}[/bold] ({summary.worst_score:.4f})",
        f"Mean:  {summary.mean_score:.4f} over {summary.combination_count} combinations",
        f"Time:  {result.total_processing_time_ms / 1000:.1f}s",
    ])
    out.print(Panel(body, title="Summary", expand=False))

    failed = [c for c in result.combinations if c.failed]
    for combination in failed:
        out.print(f"[red]✗ {combination.name}: {combination.error}[/red]")


def print_combination_detail(combination: CombinationResult, out: Console | None = None) -> None:
    """Best and worst scored rows of one combination."""
    out = out or console

    if not combination.row_scores:
        out.print(f"[yellow]{combination.name}: no scored rows[/yellow]")
        return

    table = Table(title=combination.name)
    table.add_column("")
    table.add_column("Score", justify="right")
    table.add_column("Similarity", justify="right")
    table.add_column("Query")
    table.add_column("Retrieved answer")

    for label, row in (("best", combination.best_row()), ("worst", combination.worst_row())):
        table.add_row(
            label,
            _fmt_score(row.score),
            f"{row.similarity:.4f}",
            _preview(row.query),
            _preview(row.actual_answer),
        )
    out.print(table)
