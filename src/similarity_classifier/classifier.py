"""Nearest-model classification.

Each category is represented by one aggregate model. A candidate document
is assigned to the category whose model is most similar to it. Before
classification the structure common to all category models is removed
(see :mod:`similarity_classifier.noise`), leaving only what tells the
categories apart.

Features:
- Nearest-model decision rule with first-index tie-breaking
- Per-category training with an optional held-out fold per category
- Confusion-matrix evaluation over per-category test sets
- LibSVM feature export of candidate/model similarities
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional, TextIO

from loguru import logger

from .metrics import ConfusionMatrix
from .modeller import ModelBuilder
from .models import Category, Document, DocumentModel, FoldRange
from .noise import remove_noise


def similarities(candidate: DocumentModel, models: Sequence[DocumentModel]) -> list[float]:
    """Similarity of the candidate to every model, in model order."""
    return [candidate.similarity(model) for model in models]


def nearest_model(candidate: DocumentModel, models: Sequence[DocumentModel]) -> int:
    """Return the index of the model most similar to ``candidate``.

    Uses a strict greater-than against a running maximum, so the first
    model wins every tie.

    Raises:
        ValueError: If ``models`` is empty.
    """
    if not models:
        raise ValueError("Cannot classify against an empty model list")
    return _argmax(similarities(candidate, models))


def _argmax(scores: Sequence[float]) -> int:
    best_score = float("-inf")
    best = 0
    for i, score in enumerate(scores):
        if score > best_score:
            best_score = score
            best = i
    return best


@dataclass
class ClassificationResult:
    """Result of classifying a single document."""

    index: int
    label: str
    similarities: list[float]

    @property
    def similarity(self) -> float:
        """Similarity to the winning category's model."""
        return self.similarities[self.index]

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "label": self.label,
            "similarity": round(self.similarity, 4),
            "similarities": [round(s, 4) for s in self.similarities],
        }


class SimilarityClassifier:
    """Category models plus the nearest-model decision rule.

    Example::

        classifier = SimilarityClassifier(ModelBuilder(TermVectorLoader()))
        classifier.train(categories)

        result = classifier.classify_document("inbox/0001.txt")
        print(result.label)

        matrix = classifier.evaluate([c.documents for c in test_categories])
        print(matrix.accuracy())

    Args:
        builder: Builds one aggregate model per category.
        reduce_noise: Remove the common subset of the category models
            after training.
    """

    def __init__(self, builder: ModelBuilder, reduce_noise: bool = True) -> None:
        self._builder = builder
        self._reduce_noise = reduce_noise
        self._labels: list[str] = []
        self._models: list[DocumentModel] = []

    @property
    def is_trained(self) -> bool:
        """Whether category models have been built."""
        return bool(self._models)

    @property
    def builder(self) -> ModelBuilder:
        return self._builder

    @property
    def labels(self) -> list[str]:
        return list(self._labels)

    @property
    def models(self) -> list[DocumentModel]:
        return list(self._models)

    def train(
        self,
        categories: Sequence[Category],
        exclude: Optional[Sequence[Optional[FoldRange]]] = None,
    ) -> None:
        """Build one model per category, replacing any previous models.

        Args:
            categories: Labelled training documents.
            exclude: Optional held-out range per category (same order).

        Raises:
            ValueError: If ``exclude`` does not match ``categories``, or noise
                removal is enabled with fewer than two categories.
            EmptyDocumentSetError: If a category has no usable documents.
        """
        if exclude is not None and len(exclude) != len(categories):
            raise ValueError(
                f"Got {len(exclude)} exclusion ranges for {len(categories)} categories"
            )

        models = []
        for i, category in enumerate(categories):
            logger.info(f"Training category '{category.label}'")
            limit = exclude[i] if exclude is not None else None
            models.append(self._builder.build(category.documents, exclude=limit))

        if self._reduce_noise:
            models = remove_noise(models)

        self._labels = [c.label for c in categories]
        self._models = models

    def classify(self, candidate: DocumentModel) -> ClassificationResult:
        """Assign a candidate model to the nearest category.

        Raises:
            RuntimeError: If the classifier has not been trained.
        """
        self._check_trained()
        scores = similarities(candidate, self._models)
        index = _argmax(scores)
        return ClassificationResult(index=index, label=self._labels[index], similarities=scores)

    def classify_document(self, document: Document) -> ClassificationResult:
        """Load a document with the builder's loader and classify it."""
        self._check_trained()
        return self.classify(self._builder.loader(document))

    def confusion_row(self, documents: Sequence[Document]) -> list[int]:
        """Classify test documents of one true category into a count row.

        Documents that fail to load are logged and left out of the row.
        """
        self._check_trained()
        row = [0] * len(self._models)
        for document in documents:
            model = self._builder.load(document)
            if model is None:
                continue
            row[nearest_model(model, self._models)] += 1
        return row

    def evaluate(self, test_sets: Sequence[Sequence[Document]]) -> ConfusionMatrix:
        """Classify each category's test documents into a confusion matrix.

        Args:
            test_sets: One document list per category, in training order.

        Returns:
            A ``k x k`` ConfusionMatrix (rows are true categories).
        """
        self._check_trained()
        if len(test_sets) != len(self._models):
            raise ValueError(
                f"Got {len(test_sets)} test sets for {len(self._models)} categories"
            )

        rows = []
        for label, documents in zip(self._labels, test_sets):
            logger.info(f"Classifying {len(documents)} '{label}' documents")
            rows.append(self.confusion_row(documents))
        return ConfusionMatrix.from_rows(rows)

    def _check_trained(self) -> None:
        if not self.is_trained:
            raise RuntimeError("Classifier not trained. Call train() first.")


def export_svm_features(
    classifier: SimilarityClassifier,
    test_sets: Sequence[Sequence[Document]],
    writer: TextIO,
) -> int:
    """Write candidate/model similarities in LibSVM format.

    One line per loadable document: the true category index followed by
    ``j:similarity`` for every category model, with feature indices
    starting at 1.

    Args:
        classifier: A trained classifier.
        test_sets: One document list per category, in training order.
        writer: Text stream the lines are written to.

    Returns:
        Number of lines written.
    """
    if not classifier.is_trained:
        raise RuntimeError("Classifier not trained. Call train() first.")

    models = classifier.models
    written = 0
    for label_index, documents in enumerate(test_sets):
        for document in documents:
            model = classifier.builder.load(document)
            if model is None:
                continue
            scores = similarities(model, models)
            features = " ".join(f"{j}:{score:f}" for j, score in enumerate(scores, start=1))
            writer.write(f"{label_index} {features}\n")
            written += 1
    return written
