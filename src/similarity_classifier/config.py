"""Evaluation settings, with defaults overridable from the environment.

Environment variables (also read from a ``.env`` file):

==========================  ==========================================
``SIMCLS_FOLDS``            number of cross-validation folds
``SIMCLS_FILTER``           ``extension`` or ``file``
``SIMCLS_EXTENSIONS``       comma-separated extensions, e.g. ``.txt,.md``
``SIMCLS_WORKERS``          model-building threads
``SIMCLS_SHARDS``           model-building shards
``SIMCLS_REMOVE_NOISE``     ``true``/``false``
``SIMCLS_NGRAM``            n-gram range, e.g. ``1,2``
``SIMCLS_STOPWORDS``        ``true``/``false``
``SIMCLS_SUBLINEAR_TF``     ``true``/``false``
==========================  ==========================================
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .dataset import DocumentFilter, extension_filter, regular_file_filter
from .modeller import ModelBuilder
from .vectors import TermVectorLoader

FILTER_MODES = ("extension", "file")

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean, got '{value}'")


def _parse_int(name: str, value: str) -> int:
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got '{value}'") from exc


def parse_ngram_range(value: str) -> tuple[int, int]:
    """Parse ``"2"`` or ``"1,3"`` into an n-gram range tuple."""
    parts = [p.strip() for p in value.split(",") if p.strip()]
    try:
        numbers = [int(p) for p in parts]
    except ValueError as exc:
        raise ValueError(f"Invalid n-gram range '{value}'") from exc
    if len(numbers) == 1:
        return numbers[0], numbers[0]
    if len(numbers) == 2:
        return numbers[0], numbers[1]
    raise ValueError(f"Invalid n-gram range '{value}'")


@dataclass(frozen=True)
class EvaluationConfig:
    """Settings for building models and splitting datasets."""

    folds: int = 10
    filter_mode: str = "extension"
    extensions: tuple[str, ...] = (".txt",)
    workers: int = 1
    shards: int = 1
    remove_noise: bool = True
    ngram_range: tuple[int, int] = (1, 1)
    use_stopwords: bool = True
    sublinear_tf: bool = False
    train_dir: str = "Train"
    test_dir: str = "Test"

    def __post_init__(self) -> None:
        if self.filter_mode not in FILTER_MODES:
            raise ValueError(
                f"Unknown filter mode '{self.filter_mode}'. Choose from {FILTER_MODES}"
            )
        if self.filter_mode == "extension" and not self.extensions:
            raise ValueError("Extension filtering needs at least one extension")
        if self.folds < 1:
            raise ValueError(f"folds must be positive, got {self.folds}")
        if self.workers < 1 or self.shards < 1:
            raise ValueError("workers and shards must be positive")

    @classmethod
    def from_env(cls, dotenv: bool = True, **overrides) -> "EvaluationConfig":
        """Build a config from ``SIMCLS_*`` variables, then apply overrides.

        Overrides whose value is None are ignored, so unset CLI options
        fall through to the environment.
        """
        if dotenv:
            load_dotenv()

        values: dict = {}
        env = os.environ
        if "SIMCLS_FOLDS" in env:
            values["folds"] = _parse_int("SIMCLS_FOLDS", env["SIMCLS_FOLDS"])
        if "SIMCLS_FILTER" in env:
            values["filter_mode"] = env["SIMCLS_FILTER"].strip().lower()
        if "SIMCLS_EXTENSIONS" in env:
            values["extensions"] = tuple(
                e.strip() for e in env["SIMCLS_EXTENSIONS"].split(",") if e.strip()
            )
        if "SIMCLS_WORKERS" in env:
            values["workers"] = _parse_int("SIMCLS_WORKERS", env["SIMCLS_WORKERS"])
        if "SIMCLS_SHARDS" in env:
            values["shards"] = _parse_int("SIMCLS_SHARDS", env["SIMCLS_SHARDS"])
        if "SIMCLS_REMOVE_NOISE" in env:
            values["remove_noise"] = _parse_bool("SIMCLS_REMOVE_NOISE", env["SIMCLS_REMOVE_NOISE"])
        if "SIMCLS_NGRAM" in env:
            values["ngram_range"] = parse_ngram_range(env["SIMCLS_NGRAM"])
        if "SIMCLS_STOPWORDS" in env:
            values["use_stopwords"] = _parse_bool("SIMCLS_STOPWORDS", env["SIMCLS_STOPWORDS"])
        if "SIMCLS_SUBLINEAR_TF" in env:
            values["sublinear_tf"] = _parse_bool("SIMCLS_SUBLINEAR_TF", env["SIMCLS_SUBLINEAR_TF"])

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def document_filter(self) -> DocumentFilter:
        if self.filter_mode == "file":
            return regular_file_filter
        return extension_filter(*self.extensions)

    def make_loader(self) -> TermVectorLoader:
        return TermVectorLoader(
            ngram_range=self.ngram_range,
            use_stopwords=self.use_stopwords,
            sublinear_tf=self.sublinear_tf,
        )

    def make_builder(self, loader: Optional[TermVectorLoader] = None) -> ModelBuilder:
        return ModelBuilder(
            loader or self.make_loader(),
            shards=self.shards,
            workers=self.workers,
        )
