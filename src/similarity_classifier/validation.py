"""Evaluation workflows: k-fold cross-validation and fixed train/test splits.

Cross-validation splits every category's documents into ``n`` contiguous
folds. Fold ``i`` trains fresh category models on everything outside the
i-th fold of each category and classifies the held-out documents, giving
one confusion matrix per fold.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from loguru import logger

from .classifier import SimilarityClassifier
from .dataset import DatasetSplitter, DocumentFilter, load_categories
from .metrics import ConfusionMatrix, t_statistic
from .modeller import ModelBuilder
from .models import Category, UndefinedStatisticError


@dataclass
class FoldResult:
    """Outcome of one cross-validation fold."""

    fold: int
    matrix: ConfusionMatrix

    @property
    def is_scored(self) -> bool:
        """Whether the fold classified at least one document."""
        return self.matrix.total() > 0

    @property
    def accuracy(self) -> float:
        return self.matrix.accuracy()

    @property
    def miss_rate(self) -> float:
        return self.matrix.miss_rate()


@dataclass
class CrossValidationResult:
    """Per-fold confusion matrices and their aggregate statistics.

    A fold whose held-out documents all failed to load has an empty
    matrix. Its accuracy is reported as None and it is left out of the
    mean accuracy and the t statistic.

    Attributes:
        labels: Category labels (row/column order of every matrix).
        folds: One result per fold, in fold order.
    """

    labels: list[str]
    folds: list[FoldResult] = field(default_factory=list)

    @property
    def matrices(self) -> list[ConfusionMatrix]:
        return [f.matrix for f in self.folds]

    @property
    def scored_folds(self) -> list[FoldResult]:
        return [f for f in self.folds if f.is_scored]

    @property
    def skipped_folds(self) -> list[int]:
        """Indices of folds that classified no documents."""
        return [f.fold for f in self.folds if not f.is_scored]

    @property
    def accuracies(self) -> list[Optional[float]]:
        """Accuracy per fold, None where the fold classified nothing."""
        return [f.accuracy if f.is_scored else None for f in self.folds]

    @property
    def miss_rates(self) -> tuple[float, ...]:
        """Miss rates of the scored folds."""
        return tuple(f.miss_rate for f in self.scored_folds)

    @property
    def mean_accuracy(self) -> float:
        """Unweighted mean of the scored folds' accuracies."""
        scored = self.scored_folds
        if not scored:
            raise UndefinedStatisticError("Mean accuracy of zero scored folds is undefined")
        return sum(f.accuracy for f in scored) / len(scored)

    def t_statistic(self) -> float:
        """One-sample t statistic of the scored folds' miss rates."""
        return t_statistic(self.miss_rates)

    def to_dict(self) -> dict:
        return {
            "labels": self.labels,
            "folds": [
                {"fold": f.fold, **f.matrix.to_dict(self.labels)} for f in self.folds
            ],
            "accuracies": [None if a is None else round(a, 4) for a in self.accuracies],
            "skipped_folds": self.skipped_folds,
            "mean_accuracy": _rounded(lambda: self.mean_accuracy),
            "t_statistic": _rounded(self.t_statistic),
        }


def _rounded(statistic: Callable[[], float]) -> Optional[float]:
    try:
        return round(statistic(), 4)
    except UndefinedStatisticError:
        return None


class CrossValidator:
    """Runs n-fold cross-validation of a similarity classifier.

    Example::

        validator = CrossValidator.from_directory("corpus/", folds=10,
                                                  builder=ModelBuilder(loader))
        result = validator.run()
        print(result.mean_accuracy, result.t_statistic())

    Args:
        categories: Labelled document pools, one per category.
        folds: Number of folds (smaller than every category's size).
        builder: Builds the category models.
        reduce_noise: Remove the common subset after training each fold.

    Raises:
        ValueError: If the fold count does not fit some category.
    """

    def __init__(
        self,
        categories: Sequence[Category],
        folds: int,
        builder: ModelBuilder,
        reduce_noise: bool = True,
    ) -> None:
        if not categories:
            raise ValueError("At least one category is required")

        self._categories = list(categories)
        self._folds = folds
        self._builder = builder
        self._reduce_noise = reduce_noise
        self._splitters = [DatasetSplitter(c.documents, folds) for c in self._categories]

    @classmethod
    def from_directory(
        cls,
        root: str | Path,
        folds: int,
        builder: ModelBuilder,
        accept: Optional[DocumentFilter] = None,
        reduce_noise: bool = True,
    ) -> "CrossValidator":
        """Create a validator over ``root/<category>/`` document pools."""
        return cls(load_categories(root, accept), folds, builder, reduce_noise)

    @property
    def labels(self) -> list[str]:
        return [c.label for c in self._categories]

    @property
    def folds(self) -> int:
        return self._folds

    @property
    def splitters(self) -> list[DatasetSplitter]:
        return list(self._splitters)

    def run_fold(self, fold: int) -> FoldResult:
        """Train on everything outside ``fold`` and classify the fold."""
        logger.info(f"Cross-validation fold {fold + 1}/{self._folds}")

        classifier = SimilarityClassifier(self._builder, reduce_noise=self._reduce_noise)
        classifier.train(
            self._categories,
            exclude=[s.fold_range(fold) for s in self._splitters],
        )
        matrix = classifier.evaluate([s.test_documents(fold) for s in self._splitters])
        return FoldResult(fold=fold, matrix=matrix)

    def run(self) -> CrossValidationResult:
        """Run every fold in order."""
        result = CrossValidationResult(labels=self.labels)
        for fold in range(self._folds):
            fold_result = self.run_fold(fold)
            if fold_result.is_scored:
                logger.info(f"Fold {fold + 1} accuracy: {fold_result.accuracy:.4f}")
            else:
                logger.warning(f"Fold {fold + 1} classified no documents; left out of the averages")
            result.folds.append(fold_result)
        return result


@dataclass
class TrainTestResult:
    """Outcome of a fixed train/test evaluation."""

    labels: list[str]
    matrix: ConfusionMatrix

    def to_dict(self) -> dict:
        return self.matrix.to_dict(self.labels)


def evaluate_train_test(
    root: str | Path,
    builder: ModelBuilder,
    accept: Optional[DocumentFilter] = None,
    reduce_noise: bool = True,
    train_dir: str = "Train",
    test_dir: str = "Test",
) -> TrainTestResult:
    """Train on ``root/<category>/Train`` and evaluate on ``root/<category>/Test``.

    Args:
        root: Dataset root with one subdirectory per category.
        builder: Builds the category models.
        accept: Document filter applied to both splits.
        reduce_noise: Remove the common subset after training.
        train_dir: Name of each category's training subdirectory.
        test_dir: Name of each category's test subdirectory.

    Returns:
        The category labels and the resulting confusion matrix.
    """
    train = load_categories(root, accept, subdirectory=train_dir)
    test = load_categories(root, accept, subdirectory=test_dir)

    classifier = SimilarityClassifier(builder, reduce_noise=reduce_noise)
    classifier.train(train)
    matrix = classifier.evaluate([c.documents for c in test])
    return TrainTestResult(labels=classifier.labels, matrix=matrix)
