"""Incremental construction of aggregate category models.

A category model is the running average of its documents' models: the
first document seeds the aggregate and document ``i`` is merged in with
weight ``1/i``, so every document ends up contributing ``1/m`` of the
result regardless of its position.

With more than one shard the documents are split into contiguous shards,
each shard is averaged on a worker thread, and the shard aggregates are
averaged again with the same schedule. When shards differ in size this
two-level average weights documents in smaller shards slightly more than
the single-pass average would. That approximation is accepted in exchange
for the parallel build.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Optional

from loguru import logger

from .models import (
    Document,
    DocumentModel,
    EmptyDocumentSetError,
    FoldRange,
    ModelLoader,
)
from .sharding import map_shards

# Progress is logged every this many documents
_PROGRESS_EVERY = 50


def running_average(models: Iterable[DocumentModel]) -> DocumentModel:
    """Fold models into their unweighted average using the ``1/i`` schedule.

    Args:
        models: Per-document (or per-shard) models, in order.

    Returns:
        The aggregate model.

    Raises:
        EmptyDocumentSetError: If ``models`` is empty.
    """
    aggregate: Optional[DocumentModel] = None
    for i, model in enumerate(models, start=1):
        if aggregate is None:
            aggregate = model
        else:
            aggregate = aggregate.merge(model, 1.0 / i)

    if aggregate is None:
        raise EmptyDocumentSetError("Cannot average an empty set of models")
    return aggregate


class ModelBuilder:
    """Builds one aggregate model from an ordered set of documents.

    Example::

        builder = ModelBuilder(TermVectorLoader())
        model = builder.build(paths)                        # all documents
        model = builder.build(paths, exclude=FoldRange(0, 10))  # hold out a fold

    Args:
        loader: Converts a document into a model.
        shards: Number of contiguous shards to average independently.
        workers: Size of the thread pool used when ``shards > 1``.
    """

    def __init__(
        self,
        loader: ModelLoader,
        shards: int = 1,
        workers: int = 1,
    ) -> None:
        if shards < 1:
            raise ValueError(f"shards must be positive, got {shards}")
        if workers < 1:
            raise ValueError(f"workers must be positive, got {workers}")
        self._loader = loader
        self._shards = shards
        self._workers = workers

    @property
    def loader(self) -> ModelLoader:
        return self._loader

    @property
    def shards(self) -> int:
        return self._shards

    def load(self, document: Document) -> Optional[DocumentModel]:
        """Convert a single document, returning None if it cannot be loaded."""
        try:
            return self._loader(document)
        except Exception as e:
            logger.warning(f"Skipping {document}: {e}")
            return None

    def load_all(self, documents: Sequence[Document]) -> list[DocumentModel]:
        """Convert documents in order, skipping the ones that fail to load."""
        models: list[DocumentModel] = []
        for index, document in enumerate(documents):
            model = self.load(document)
            if model is not None:
                models.append(model)
            if index and index % _PROGRESS_EVERY == 0:
                logger.debug(f"Loaded {index}/{len(documents)} documents")
        return models

    def build(
        self,
        documents: Sequence[Document],
        exclude: Optional[FoldRange] = None,
    ) -> DocumentModel:
        """Build the aggregate model of ``documents``.

        Args:
            documents: Ordered document set.
            exclude: Indices to leave out (a held-out fold).

        Returns:
            The running-average model of the included documents.

        Raises:
            EmptyDocumentSetError: If no document is left after exclusion
                or every included document failed to load.
        """
        included = [
            doc for index, doc in enumerate(documents)
            if exclude is None or not exclude.includes(index)
        ]
        if not included:
            raise EmptyDocumentSetError(
                f"No documents left to model ({len(documents)} total, "
                f"excluded {exclude})"
            )

        logger.info(f"Building model from {len(included)} documents")

        if self._shards == 1:
            models = self.load_all(included)
            if not models:
                raise EmptyDocumentSetError("Every document failed to load")
            return running_average(models)

        partials = map_shards(
            self._build_shard, included, self._shards, max_workers=self._workers
        )
        partials = [p for p in partials if p is not None]
        if not partials:
            raise EmptyDocumentSetError("Every document failed to load")
        return running_average(partials)

    def _build_shard(self, shard: list[Document]) -> Optional[DocumentModel]:
        models = self.load_all(shard)
        if not models:
            return None
        return running_average(models)
