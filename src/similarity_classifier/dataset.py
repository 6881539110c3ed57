"""Dataset discovery and deterministic k-fold partitioning.

Folds are contiguous, order-preserving slices of a category's document
list. No shuffling or stratification is applied: the same directory
always yields the same folds.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Callable, Optional

from .models import Category, Document, FoldRange

DocumentFilter = Callable[[Path], bool]


def extension_filter(*extensions: str) -> DocumentFilter:
    """Accept regular files whose suffix matches one of ``extensions``.

    Matching is case-insensitive; a leading dot is optional.
    """
    if not extensions:
        raise ValueError("At least one extension is required")
    wanted = tuple(
        (ext if ext.startswith(".") else f".{ext}").lower() for ext in extensions
    )

    def accept(path: Path) -> bool:
        return path.is_file() and path.suffix.lower() in wanted

    return accept


def regular_file_filter(path: Path) -> bool:
    """Accept every regular file."""
    return path.is_file()


def list_documents(
    directory: str | Path,
    accept: Optional[DocumentFilter] = None,
) -> list[Path]:
    """List the documents of a directory in sorted name order.

    Args:
        directory: Directory to scan (not recursive).
        accept: Document filter; defaults to :func:`regular_file_filter`.

    Raises:
        FileNotFoundError: If ``directory`` does not exist.
        NotADirectoryError: If ``directory`` is not a directory.
    """
    path = Path(directory)
    if not path.exists():
        raise FileNotFoundError(f"Directory not found: {path}")
    if not path.is_dir():
        raise NotADirectoryError(f"Not a directory: {path}")

    accept = accept or regular_file_filter
    return sorted(p for p in path.iterdir() if accept(p))


def discover_categories(root: str | Path) -> list[Path]:
    """Return the category subdirectories of a dataset root, sorted by name."""
    path = Path(root)
    if not path.is_dir():
        raise NotADirectoryError(f"Dataset root is not a directory: {path}")
    return sorted(p for p in path.iterdir() if p.is_dir())


def load_categories(
    root: str | Path,
    accept: Optional[DocumentFilter] = None,
    subdirectory: Optional[str] = None,
) -> list[Category]:
    """Load every category of a dataset root.

    Args:
        root: Directory with one subdirectory per category.
        accept: Document filter.
        subdirectory: Optional fixed split inside each category
            (``"Train"`` or ``"Test"``).

    Returns:
        Categories labelled by directory name, in sorted order.
    """
    categories = []
    for directory in discover_categories(root):
        source = directory / subdirectory if subdirectory else directory
        categories.append(
            Category(label=directory.name, documents=list_documents(source, accept))
        )
    if not categories:
        raise ValueError(f"No category directories found under {root}")
    return categories


class DatasetSplitter:
    """Splits an ordered document list into ``n`` contiguous folds.

    ``chunk_size = len(documents) // folds``. Fold ``i`` covers
    ``[i * chunk_size, (i + 1) * chunk_size)``; the last fold runs to the
    end of the list and so also holds the ``len % folds`` remainder.

    Example::

        splitter = DatasetSplitter(paths, folds=3)   # 10 paths
        splitter.fold_range(2)        # FoldRange(start=6, end=10)
        splitter.test_documents(2)    # paths[6:10]

    Args:
        documents: Ordered document list.
        folds: Number of folds, ``1 <= folds < len(documents)``.

    Raises:
        ValueError: If the fold count is out of range.
    """

    def __init__(self, documents: Sequence[Document], folds: int) -> None:
        if folds < 1:
            raise ValueError(f"Fold count must be positive, got {folds}")
        if folds >= len(documents):
            raise ValueError(
                f"Fold count ({folds}) must be smaller than the number of "
                f"documents ({len(documents)})"
            )

        self._documents = list(documents)
        self._folds = folds
        self._chunk_size = len(self._documents) // folds
        self._ranges = self._split()

    @classmethod
    def from_directory(
        cls,
        directory: str | Path,
        folds: int,
        accept: Optional[DocumentFilter] = None,
    ) -> "DatasetSplitter":
        """Create a splitter over the documents of a directory."""
        return cls(list_documents(directory, accept), folds)

    def _split(self) -> list[FoldRange]:
        length = len(self._documents)
        ranges = []
        for i in range(self._folds):
            start = i * self._chunk_size
            end = length if i == self._folds - 1 else (i + 1) * self._chunk_size
            ranges.append(FoldRange(start, end))
        return ranges

    @property
    def documents(self) -> list[Document]:
        """The full ordered document list."""
        return list(self._documents)

    @property
    def folds(self) -> int:
        return self._folds

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    @property
    def fold_ranges(self) -> list[FoldRange]:
        return list(self._ranges)

    def fold_range(self, fold: int) -> FoldRange:
        """Return the test index range of a fold.

        Raises:
            IndexError: If ``fold`` is not in ``[0, folds)``.
        """
        if not 0 <= fold < self._folds:
            raise IndexError(f"Fold {fold} out of range for {self._folds} folds")
        return self._ranges[fold]

    def test_documents(self, fold: int) -> list[Document]:
        """Return the held-out documents of a fold (its full range)."""
        r = self.fold_range(fold)
        return self._documents[r.start : r.end]

    def train_documents(self, fold: int) -> list[Document]:
        """Return every document outside the fold, in order."""
        r = self.fold_range(fold)
        return self._documents[: r.start] + self._documents[r.end :]

    def __len__(self) -> int:
        return len(self._documents)
