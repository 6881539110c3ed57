"""Similarity Classifier -- nearest-model document classification and evaluation."""

__version__ = "0.1.0"

from .classifier import (
    ClassificationResult,
    SimilarityClassifier,
    export_svm_features,
    nearest_model,
    similarities,
)
from .config import EvaluationConfig
from .dataset import (
    DatasetSplitter,
    discover_categories,
    extension_filter,
    list_documents,
    load_categories,
    regular_file_filter,
)
from .metrics import ConfusionMatrix, f1_from, t_statistic
from .modeller import ModelBuilder, running_average
from .models import (
    Category,
    DocumentModel,
    EmptyDocumentSetError,
    FoldRange,
    UndefinedStatisticError,
)
from .noise import common_subset, remove_noise
from .sharding import map_shards, partition
from .validation import (
    CrossValidationResult,
    CrossValidator,
    FoldResult,
    TrainTestResult,
    evaluate_train_test,
)
from .vectors import TermVector, TermVectorLoader

__all__ = [
    # Model interface
    "DocumentModel",
    "Category",
    "FoldRange",
    "EmptyDocumentSetError",
    "UndefinedStatisticError",
    # Model construction
    "ModelBuilder",
    "running_average",
    "partition",
    "map_shards",
    # Datasets
    "DatasetSplitter",
    "discover_categories",
    "extension_filter",
    "list_documents",
    "load_categories",
    "regular_file_filter",
    # Classification
    "SimilarityClassifier",
    "ClassificationResult",
    "nearest_model",
    "similarities",
    "common_subset",
    "remove_noise",
    "export_svm_features",
    # Evaluation
    "ConfusionMatrix",
    "f1_from",
    "t_statistic",
    "CrossValidator",
    "CrossValidationResult",
    "FoldResult",
    "TrainTestResult",
    "evaluate_train_test",
    # Default model and settings
    "TermVector",
    "TermVectorLoader",
    "EvaluationConfig",
]
