"""Command-line interface for the similarity classifier evaluation harness.

Provides ``evaluate``, ``cross-validate``, and ``export-features`` commands
with rich terminal output using the ``click`` and ``rich`` libraries.

Usage::

    similarity-classifier evaluate corpus/
    similarity-classifier cross-validate --folds 10 corpus/
    similarity-classifier export-features corpus/ features/
"""

from __future__ import annotations

import functools
import json
import sys
from pathlib import Path
from typing import Callable, Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .classifier import SimilarityClassifier, export_svm_features
from .config import FILTER_MODES, EvaluationConfig, parse_ngram_range
from .dataset import load_categories
from .log import configure_logging
from .metrics import ConfusionMatrix
from .models import EmptyDocumentSetError, UndefinedStatisticError
from .validation import CrossValidationResult, CrossValidator, evaluate_train_test

console = Console()


def _format_stat(value: Optional[float]) -> str:
    return "undefined" if value is None else f"{value:.4f}"


def _common_options(func: Callable) -> Callable:
    """Options shared by every command."""
    options = [
        click.option("--filter", "filter_mode", type=click.Choice(FILTER_MODES), default=None,
                     help="Select documents by extension or take every regular file."),
        click.option("--ext", "extensions", multiple=True,
                     help="Document extension (repeatable). Default: .txt"),
        click.option("--workers", "-w", type=int, default=None,
                     help="Threads used to build category models."),
        click.option("--shards", type=int, default=None,
                     help="Contiguous shards averaged independently per model."),
        click.option("--no-noise-removal", is_flag=True, default=False,
                     help="Keep the structure shared by all category models."),
        click.option("--ngram", default=None,
                     help="Word n-gram range, e.g. '1' or '1,2'."),
        click.option("--verbose", "-v", is_flag=True, default=False,
                     help="Log at DEBUG level."),
        click.option("--log-file", type=click.Path(path_type=Path), default=None,
                     help="Also write DEBUG logs to this file."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _build_config(
    folds: Optional[int] = None,
    filter_mode: Optional[str] = None,
    extensions: tuple[str, ...] = (),
    workers: Optional[int] = None,
    shards: Optional[int] = None,
    no_noise_removal: bool = False,
    ngram: Optional[str] = None,
) -> EvaluationConfig:
    return EvaluationConfig.from_env(
        folds=folds,
        filter_mode=filter_mode,
        extensions=extensions or None,
        workers=workers,
        shards=shards,
        remove_noise=False if no_noise_removal else None,
        ngram_range=parse_ngram_range(ngram) if ngram else None,
    )


def _handle_errors(func: Callable) -> Callable:
    """Report configuration and data errors without a traceback."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (ValueError, FileNotFoundError, NotADirectoryError,
                EmptyDocumentSetError, UndefinedStatisticError) as e:
            console.print(f"[bold red]Error:[/] {e}")
            sys.exit(1)

    return wrapper


@click.group()
@click.version_option(package_name="similarity-classifier")
def main() -> None:
    """Similarity-based document classifier evaluation.

    Each category is modelled by averaging its documents; documents are
    assigned to the most similar category model.
    """
    pass


@main.command()
@click.argument("root", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
@_common_options
@_handle_errors
def evaluate(root: Path, output: str, verbose: bool, log_file: Optional[Path], **options) -> None:
    """Evaluate on fixed Train/ and Test/ splits.

    ROOT holds one directory per category, each with Train/ and Test/
    subdirectories.

    Example: similarity-classifier evaluate corpus/
    """
    configure_logging(verbose, log_file)
    config = _build_config(**options)

    with console.status("[bold blue]Training and classifying...", spinner="dots"):
        result = evaluate_train_test(
            root,
            config.make_builder(),
            accept=config.document_filter(),
            reduce_noise=config.remove_noise,
            train_dir=config.train_dir,
            test_dir=config.test_dir,
        )

    if output == "json":
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        _render_matrix(result.matrix, result.labels, title=f"Train/Test: {root.name}")


@main.command("cross-validate")
@click.argument("root", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--folds", "-n", type=int, default=None, help="Number of folds (default 10).")
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
@_common_options
@_handle_errors
def cross_validate(root: Path, folds: Optional[int], output: str, verbose: bool,
                   log_file: Optional[Path], **options) -> None:
    """Run n-fold cross-validation over per-category document pools.

    ROOT holds one directory of documents per category.

    Example: similarity-classifier cross-validate --folds 10 corpus/
    """
    configure_logging(verbose, log_file)
    config = _build_config(folds=folds, **options)

    validator = CrossValidator.from_directory(
        root,
        config.folds,
        config.make_builder(),
        accept=config.document_filter(),
        reduce_noise=config.remove_noise,
    )
    with console.status(f"[bold blue]Running {config.folds}-fold cross-validation...",
                        spinner="dots"):
        result = validator.run()

    if output == "json":
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        _render_cross_validation(result)


@main.command("export-features")
@click.argument("root", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.argument("output_dir", type=click.Path(file_okay=False, path_type=Path))
@_common_options
@_handle_errors
def export_features(root: Path, output_dir: Path, verbose: bool, log_file: Optional[Path],
                    **options) -> None:
    """Write LibSVM similarity features for the Train/ and Test/ splits.

    Produces svmtrain.txt and svmtest.txt in OUTPUT_DIR.

    Example: similarity-classifier export-features corpus/ features/
    """
    configure_logging(verbose, log_file)
    config = _build_config(**options)
    accept = config.document_filter()

    train = load_categories(root, accept, subdirectory=config.train_dir)
    test = load_categories(root, accept, subdirectory=config.test_dir)

    classifier = SimilarityClassifier(config.make_builder(), reduce_noise=config.remove_noise)
    with console.status("[bold blue]Training category models...", spinner="dots"):
        classifier.train(train)

    output_dir.mkdir(parents=True, exist_ok=True)
    for name, categories in (("svmtrain.txt", train), ("svmtest.txt", test)):
        path = output_dir / name
        with open(path, "w", encoding="utf-8") as f:
            count = export_svm_features(classifier, [c.documents for c in categories], f)
        console.print(f"Wrote {count} feature lines to [cyan]{path}[/]")


# ------------------------------------------------------------------
# Rich rendering helpers
# ------------------------------------------------------------------

def _render_matrix(matrix: ConfusionMatrix, labels: list[str], title: str) -> None:
    """Render a confusion matrix and its statistics."""
    stats = matrix.to_dict(labels)

    table = Table(title=title, show_lines=False)
    table.add_column("true \\ predicted", style="cyan")
    for label in labels:
        table.add_column(label, justify="right")
    for label, row in zip(labels, stats["matrix"]):
        table.add_row(label, *(str(c) for c in row))
    console.print(table)

    per_class = Table(title="Per-class statistics")
    per_class.add_column("Class", style="cyan")
    per_class.add_column("Precision", justify="right")
    per_class.add_column("Recall", justify="right")
    per_class.add_column("F1", justify="right")
    per_class.add_column("Support", justify="right")
    for label in labels:
        m = stats["per_class"][label]
        per_class.add_row(
            label,
            _format_stat(m["precision"]),
            _format_stat(m["recall"]),
            _format_stat(m["f1"]),
            str(m["support"]),
        )
    console.print(per_class)

    console.print(Panel(
        f"Accuracy: {_format_stat(stats['accuracy'])} | "
        f"Miss rate: {_format_stat(stats['miss_rate'])}\n"
        f"Macro P/R/F1: {_format_stat(stats['macro_precision'])} / "
        f"{_format_stat(stats['macro_recall'])} / {_format_stat(stats['macro_f1'])}\n"
        f"Micro P/R/F1: {_format_stat(stats['micro_precision'])} / "
        f"{_format_stat(stats['micro_recall'])} / {_format_stat(stats['micro_f1'])}",
        title="Summary",
        border_style="blue",
    ))


def _render_cross_validation(result: CrossValidationResult) -> None:
    """Render per-fold accuracy and the aggregate statistics."""
    stats = result.to_dict()

    table = Table(title="Cross-validation folds")
    table.add_column("Fold", justify="right")
    table.add_column("Documents", justify="right")
    table.add_column("Accuracy", justify="right")
    table.add_column("Miss rate", justify="right")
    for fold in stats["folds"]:
        table.add_row(
            str(fold["fold"] + 1),
            str(sum(sum(row) for row in fold["matrix"])),
            _format_stat(fold["accuracy"]),
            _format_stat(fold["miss_rate"]),
        )
    console.print(table)

    summary = (
        f"Mean accuracy: {_format_stat(stats['mean_accuracy'])}\n"
        f"t statistic (miss rate vs. 0): {_format_stat(stats['t_statistic'])}"
    )
    if stats["skipped_folds"]:
        skipped = ", ".join(str(f + 1) for f in stats["skipped_folds"])
        summary += f"\n[yellow]Folds with no classified documents: {skipped}[/]"
    console.print(Panel(
        summary,
        title=f"{len(result.folds)}-fold summary",
        border_style="blue",
    ))


if __name__ == "__main__":
    main()
