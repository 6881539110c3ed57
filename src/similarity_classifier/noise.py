"""Cross-category noise removal.

Structure shared by every category model cannot tell categories apart.
It is found by intersecting all models and then subtracted from each.
"""

from __future__ import annotations

from collections.abc import Sequence

from loguru import logger

from .models import DocumentModel


def common_subset(models: Sequence[DocumentModel]) -> DocumentModel:
    """Intersect all models, folding left to right: ``((M1 & M2) & M3) ...``.

    Raises:
        ValueError: If fewer than two models are given.
    """
    if len(models) < 2:
        raise ValueError(f"Need at least two models, got {len(models)}")

    subset = models[0]
    for model in models[1:]:
        subset = subset.intersect(model)
    return subset


def remove_noise(models: Sequence[DocumentModel]) -> list[DocumentModel]:
    """Return new models with their common subset removed.

    Args:
        models: One aggregate model per category (at least two).

    Returns:
        The noise-reduced models, in the same order.
    """
    subset = common_subset(models)
    logger.debug(f"Removing common subset from {len(models)} models")
    return [model.subtract(subset) for model in models]
