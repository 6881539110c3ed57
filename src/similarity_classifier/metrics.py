"""Confusion matrix statistics and the cross-validation significance test.

Statistics are computed on demand from the raw counts. A zero denominator
is never coerced to a default: it raises ``UndefinedStatisticError`` so
callers decide how to report it.
"""

from __future__ import annotations

import math
import statistics
from collections.abc import Sequence
from typing import Callable, Optional

from .models import UndefinedStatisticError


def f1_from(precision: float, recall: float) -> float:
    """Harmonic mean of precision and recall.

    Raises:
        UndefinedStatisticError: If both are zero.
    """
    if precision + recall == 0:
        raise UndefinedStatisticError("F1 is undefined when precision and recall are 0")
    return 2 * precision * recall / (precision + recall)


def _ratio(numerator: int, denominator: int, what: str) -> float:
    if denominator == 0:
        raise UndefinedStatisticError(f"{what} is undefined (zero denominator)")
    return numerator / denominator


class ConfusionMatrix:
    """Count matrix of true (rows) against predicted (columns) categories.

    Example::

        cm = ConfusionMatrix(2, [5, 1, 2, 7])
        cm.precision_and_recall(0)   # (5/7, 5/6)
        cm.accuracy()                # 12/15

    Args:
        num_classes: Number of categories ``k``.
        counts: Flattened row-major sequence of ``k * k`` counts. Defaults
            to all zeros.

    Raises:
        ValueError: If ``counts`` has the wrong length, or a negative or
            non-integral entry.
    """

    def __init__(self, num_classes: int, counts: Optional[Sequence[int]] = None) -> None:
        if num_classes < 1:
            raise ValueError(f"num_classes must be positive, got {num_classes}")
        self._k = num_classes
        self._matrix = [[0] * num_classes for _ in range(num_classes)]
        if counts is not None:
            self.set_matrix(counts)

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]]) -> "ConfusionMatrix":
        """Build a matrix from a list of ``k`` rows of ``k`` counts."""
        if any(len(row) != len(rows) for row in rows):
            raise ValueError("Confusion matrix rows must form a square matrix")
        return cls(len(rows), cls.flatten(rows))

    @staticmethod
    def flatten(rows: Sequence[Sequence[int]]) -> list[int]:
        """Concatenate rows into one row-major sequence."""
        return [count for row in rows for count in row]

    def set_matrix(self, counts: Sequence[int]) -> None:
        """Replace every count from a flattened row-major sequence."""
        if len(counts) != self._k * self._k:
            raise ValueError(
                f"Expected {self._k * self._k} counts for {self._k} classes, "
                f"got {len(counts)}"
            )
        if any(c < 0 for c in counts):
            raise ValueError("Confusion matrix counts must be non-negative")
        if any(int(c) != c for c in counts):
            raise ValueError("Confusion matrix counts must be integers")

        for i, count in enumerate(counts):
            self._matrix[i // self._k][i % self._k] = int(count)

    # ------------------------------------------------------------------
    # Raw counts
    # ------------------------------------------------------------------

    @property
    def num_classes(self) -> int:
        return self._k

    @property
    def rows(self) -> list[list[int]]:
        """A copy of the matrix as a list of rows."""
        return [list(row) for row in self._matrix]

    def __getitem__(self, key: tuple[int, int]) -> int:
        row, column = key
        return self._matrix[row][column]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConfusionMatrix):
            return NotImplemented
        return self._matrix == other._matrix

    def __repr__(self) -> str:
        return f"ConfusionMatrix({self._k}, {self.flatten(self._matrix)})"

    def total(self) -> int:
        return sum(sum(row) for row in self._matrix)

    def support(self, class_num: int) -> int:
        """Number of test documents whose true category is ``class_num``."""
        return sum(self._matrix[class_num])

    def true_positives(self, class_num: int) -> int:
        return self._matrix[class_num][class_num]

    def false_positives(self, class_num: int) -> int:
        """Documents of other categories predicted as ``class_num`` (column sum)."""
        return sum(
            self._matrix[i][class_num] for i in range(self._k) if i != class_num
        )

    def false_negatives(self, class_num: int) -> int:
        """Documents of ``class_num`` predicted as another category (row sum)."""
        return sum(
            self._matrix[class_num][i] for i in range(self._k) if i != class_num
        )

    # ------------------------------------------------------------------
    # Per-class statistics
    # ------------------------------------------------------------------

    def precision(self, class_num: int) -> float:
        tp = self.true_positives(class_num)
        return _ratio(tp, tp + self.false_positives(class_num), f"Precision of class {class_num}")

    def recall(self, class_num: int) -> float:
        tp = self.true_positives(class_num)
        return _ratio(tp, tp + self.false_negatives(class_num), f"Recall of class {class_num}")

    def precision_and_recall(self, class_num: int) -> tuple[float, float]:
        return self.precision(class_num), self.recall(class_num)

    def f1_score(self, class_num: int) -> float:
        return f1_from(*self.precision_and_recall(class_num))

    # ------------------------------------------------------------------
    # Averages
    # ------------------------------------------------------------------

    def _macro(self, statistic: Callable[[int], float]) -> float:
        return sum(statistic(c) for c in range(self._k)) / self._k

    def macro_avg_precision(self) -> float:
        return self._macro(self.precision)

    def macro_avg_recall(self) -> float:
        return self._macro(self.recall)

    def macro_avg_f1_score(self) -> float:
        return self._macro(self.f1_score)

    def micro_avg_precision(self) -> float:
        """``sum(TP) / sum(TP + FP)`` pooled over all classes."""
        hits = sum(self.true_positives(c) for c in range(self._k))
        fp = sum(self.false_positives(c) for c in range(self._k))
        return _ratio(hits, hits + fp, "Micro-averaged precision")

    def micro_avg_recall(self) -> float:
        """``sum(TP) / sum(TP + FN)`` pooled over all classes."""
        hits = sum(self.true_positives(c) for c in range(self._k))
        fn = sum(self.false_negatives(c) for c in range(self._k))
        return _ratio(hits, hits + fn, "Micro-averaged recall")

    def micro_avg_f1_score(self) -> float:
        return f1_from(self.micro_avg_precision(), self.micro_avg_recall())

    # ------------------------------------------------------------------
    # Overall
    # ------------------------------------------------------------------

    def accuracy(self) -> float:
        hits = sum(self._matrix[i][i] for i in range(self._k))
        return _ratio(hits, self.total(), "Accuracy")

    def miss_rate(self) -> float:
        """Fraction of misclassified documents, ``1 - accuracy``."""
        return 1 - self.accuracy()

    def to_dict(self, labels: Optional[Sequence[str]] = None) -> dict:
        """Serialize counts and statistics; undefined statistics become None."""
        names = list(labels) if labels is not None else [str(c) for c in range(self._k)]
        if len(names) != self._k:
            raise ValueError(f"Expected {self._k} labels, got {len(names)}")

        return {
            "labels": names,
            "matrix": self.rows,
            "accuracy": _defined(self.accuracy),
            "miss_rate": _defined(self.miss_rate),
            "per_class": {
                names[c]: {
                    "precision": _defined(lambda: self.precision(c)),
                    "recall": _defined(lambda: self.recall(c)),
                    "f1": _defined(lambda: self.f1_score(c)),
                    "support": self.support(c),
                }
                for c in range(self._k)
            },
            "macro_precision": _defined(self.macro_avg_precision),
            "macro_recall": _defined(self.macro_avg_recall),
            "macro_f1": _defined(self.macro_avg_f1_score),
            "micro_precision": _defined(self.micro_avg_precision),
            "micro_recall": _defined(self.micro_avg_recall),
            "micro_f1": _defined(self.micro_avg_f1_score),
        }


def _defined(statistic: Callable[[], float]) -> Optional[float]:
    try:
        return round(statistic(), 4)
    except UndefinedStatisticError:
        return None


def t_statistic(miss_rates: Sequence[float]) -> float:
    """One-sample t statistic of per-fold miss rates against zero.

    ``t = sqrt(n) * mean / s`` where ``s`` is the Bessel-corrected sample
    standard deviation. The raw statistic is returned; no t-table lookup
    is performed.

    Args:
        miss_rates: One miss rate per cross-validation fold.

    Raises:
        UndefinedStatisticError: If fewer than two rates are given or
            they have zero variance.
    """
    n = len(miss_rates)
    if n <= 1:
        raise UndefinedStatisticError(f"t statistic needs at least 2 samples, got {n}")

    # statistics sums exactly, so identical rates give a variance of exactly 0
    mean = statistics.fmean(miss_rates)
    variance = statistics.variance(miss_rates)
    if variance == 0:
        raise UndefinedStatisticError("t statistic is undefined for zero variance")

    return math.sqrt(n) * mean / math.sqrt(variance)
