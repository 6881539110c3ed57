"""Core data types shared by the evaluation harness."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable


class EmptyDocumentSetError(ValueError):
    """Raised when a model is requested from a set with no usable documents."""


class UndefinedStatisticError(ArithmeticError):
    """Raised when a statistic has a zero denominator or degenerate variance."""


class DocumentModel(ABC):
    """Capability interface for a document or category representation.

    The harness never looks inside a model. It only merges, intersects,
    subtracts and compares them, so any representation implementing these
    four operations can be evaluated.
    """

    @abstractmethod
    def merge(self, other: DocumentModel, weight: float) -> DocumentModel:
        """Return ``(1 - weight) * self + weight * other``.

        Args:
            other: Model to blend in.
            weight: Share given to ``other``, in ``[0, 1]``.
        """
        ...

    @abstractmethod
    def intersect(self, other: DocumentModel) -> DocumentModel:
        """Return the part of this model also present in ``other``."""
        ...

    @abstractmethod
    def subtract(self, other: DocumentModel) -> DocumentModel:
        """Return the part of this model not present in ``other``."""
        ...

    @abstractmethod
    def similarity(self, other: DocumentModel) -> float:
        """Score how similar ``other`` is to this model (higher is closer)."""
        ...


Document = str | Path

# Converts one raw document into a model; may raise on I/O or parse errors.
ModelLoader = Callable[[Document], DocumentModel]


@dataclass(frozen=True)
class FoldRange:
    """Half-open index interval ``[start, end)`` over a document set."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"Invalid fold range [{self.start}, {self.end})")

    @property
    def size(self) -> int:
        return self.end - self.start

    def includes(self, index: int) -> bool:
        """Check whether ``index`` falls inside the range."""
        return self.start <= index < self.end

    def to_dict(self) -> dict:
        return {"start": self.start, "end": self.end}

    def __str__(self) -> str:
        return f"[{self.start}, {self.end})"


@dataclass
class Category:
    """A labelled, ordered set of documents."""

    label: str
    documents: list[Document] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.documents)
