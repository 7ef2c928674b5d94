"""
Command-line interface for fieldsweep.

Commands:
- tables: List the tables in the data directory
- describe: Show a table's columns and row count
- validate: Check an experiment configuration against a table
- run: Run an experiment and save its results as JSON
- show: Print a saved result
"""

from pathlib import Path

import click
from rich.console import Console

from fieldsweep.config import get_settings
from fieldsweep.errors import FieldSweepError
from fieldsweep.experiment.export import load_results, save_results
from fieldsweep.experiment.models import ExperimentConfig
from fieldsweep.experiment.runner import ExperimentRunner
from fieldsweep.experiment.validation import validate_configuration
from fieldsweep.ingestion.rows import FileRowSource
from fieldsweep.logging import configure_logging
from fieldsweep.reporting import (
    print_combination_detail,
    print_summary,
    print_table_info,
    print_validation,
)
from fieldsweep.vectorstore.embeddings import get_embedder

console = Console()


def experiment_options(func):
    """Options shared by validate and run."""
    options = [
        click.argument("table"),
        click.option("--field", "fields", multiple=True, required=True,
                     help="Candidate field to combine (repeat, at most 5)"),
        click.option("--target", required=True, help="Field returned by retrieval"),
        click.option("--query", "query_field", required=True, help="Field embedded as the query"),
        click.option("--answer", required=True, help="Field holding the expected answer"),
        click.option("--engine", default="structured-query", show_default=True,
                     help="Scoring engine: structured-query (sql) or domain-document (brdr)"),
        click.option("--provider", default=None, help="Embedding provider: openai or local"),
        click.option("--ratio", type=float, default=None, help="Training ratio, between 0 and 1"),
        click.option("--name", default=None, help="Experiment name"),
        click.option("--data-dir", type=click.Path(path_type=Path), default=None,
                     help="Directory holding table files"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _parse_weights(values: tuple[str, ...]) -> dict[str, float]:
    weights = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep:
            raise click.BadParameter(f"Expected KEY=VALUE, got '{item}'", param_hint="--weight")
        try:
            weights[key.strip()] = float(value)
        except ValueError:
            raise click.BadParameter(f"Weight for '{key}' is not a number", param_hint="--weight")
    return weights


def _build_config(
        table: str,
        fields: tuple[str, ...],
        target: str,
        query_field: str,
        answer: str,
        engine: str,
        provider: str | None,
        ratio: float | None,
        name: str | None,
        seed: int | None = None,
        weights: dict[str, float] | None = None,
) -> ExperimentConfig:
    settings = get_settings()
    return ExperimentConfig(
        experiment_name=name or f"{table} ({engine})",
        table=table,
        candidate_fields=fields,
        target_field=target,
        query_field=query_field,
        answer_field=answer,
        scoring_engine=engine,
        embedding_provider=provider or settings.embedding_provider,
        training_ratio=ratio if ratio is not None else settings.default_training_ratio,
        seed=seed if seed is not None else settings.random_seed,
        scoring_weights=weights or {},
    )


@click.group()
@click.version_option(package_name="fieldsweep")
def main() -> None:
    """fieldsweep - find the field combination that retrieves best."""
    configure_logging(get_settings())


@main.command()
@click.option("--data-dir", type=click.Path(path_type=Path), default=None,
              help="Directory holding table files")
def tables(data_dir: Path | None) -> None:
    """List the tables in the data directory."""
    source = FileRowSource(data_dir or get_settings().data_dir)
    names = source.list_tables()

    if not names:
        console.print(f"[yellow]No tables found in {source.data_dir}[/yellow]")
        return

    for table_name in names:
        console.print(table_name)


@main.command()
@click.argument("table")
@click.option("--data-dir", type=click.Path(path_type=Path), default=None,
              help="Directory holding table files")
def describe(table: str, data_dir: Path | None) -> None:
    """Show a table's columns and row count."""
    source = FileRowSource(data_dir or get_settings().data_dir)
    try:
        info = source.describe_table(table)
    except FieldSweepError as e:
        raise click.ClickException(str(e))
    print_table_info(info, out=console)


@main.command()
@experiment_options
def validate(table, fields, target, query_field, answer, engine, provider, ratio, name, data_dir) -> None:
    """Check an experiment configuration against TABLE."""
    source = FileRowSource(data_dir or get_settings().data_dir)
    config = _build_config(table, fields, target, query_field, answer, engine, provider, ratio, name)

    try:
        info = source.describe_table(table)
    except FieldSweepError as e:
        raise click.ClickException(str(e))

    report = validate_configuration(config, info.column_names, info.row_count)
    print_validation(report, out=console)

    if not report.is_valid:
        raise SystemExit(1)


@main.command()
@experiment_options
@click.option("--seed", type=int, default=None, help="Seed for the train/test shuffle")
@click.option("--weight", "weights", multiple=True, help="Scoring weight override, KEY=VALUE")
@click.option("--output", type=click.Path(path_type=Path), default=None,
              help="Results file or directory (default: settings.results_dir)")
@click.option("--details", is_flag=True, help="Show best and worst rows per combination")
def run(table, fields, target, query_field, answer, engine, provider, ratio, name, data_dir,
        seed, weights, output, details) -> None:
    """Run an experiment on TABLE and save the results."""
    settings = get_settings()
    source = FileRowSource(data_dir or settings.data_dir)
    config = _build_config(
        table, fields, target, query_field, answer, engine, provider, ratio, name,
        seed=seed, weights=_parse_weights(weights),
    )

    console.print(f"[yellow]Running '{config.experiment_name}' on {table}...[/yellow]")

    def progress(position: int, total: int, result) -> None:
        status = "[red]failed[/red]" if result.failed else f"{result.mean_score:.4f}"
        console.print(f"[blue]{position}/{total}[/blue] {result.name}: {status}")

    try:
        embedder = get_embedder(config.embedding_provider, settings=settings)
        runner = ExperimentRunner(embedder, settings=settings)
        result = runner.run_table(config, source, on_combination=progress)
    except (FieldSweepError, ValueError, ImportError) as e:
        # ValueError/ImportError: missing API key or optional provider package
        raise click.ClickException(str(e))

    print_summary(result, out=console)
    if details:
        for combination in result.ranked():
            print_combination_detail(combination, out=console)

    path = save_results(result, output or settings.results_dir)
    console.print(f"[green]✓ Saved results to {path}[/green]")


@main.command()
@click.argument("results_file", type=click.Path(exists=True, path_type=Path))
@click.option("--details", is_flag=True, help="Show best and worst rows per combination")
def show(results_file: Path, details: bool) -> None:
    """Print a saved experiment result."""
    result = load_results(results_file)
    print_summary(result, out=console)
    if details:
        for combination in result.ranked():
            print_combination_detail(combination, out=console)


if __name__ == "__main__":
    main()
