"""Tests for dataset discovery and k-fold splitting."""

from __future__ import annotations

import pytest

from similarity_classifier.dataset import (
    DatasetSplitter,
    discover_categories,
    extension_filter,
    list_documents,
    load_categories,
    regular_file_filter,
)
from similarity_classifier.models import Category, FoldRange


class TestFoldRange:
    def test_size_and_membership(self):
        r = FoldRange(3, 6)
        assert r.size == 3
        assert r.includes(3) and r.includes(5)
        assert not r.includes(6) and not r.includes(2)

    def test_invalid_range(self):
        with pytest.raises(ValueError):
            FoldRange(5, 2)

    def test_str(self):
        assert str(FoldRange(0, 3)) == "[0, 3)"


class TestDatasetSplitter:
    def test_remainder_goes_to_last_fold(self):
        splitter = DatasetSplitter(list(range(10)), 3)
        assert splitter.fold_ranges == [FoldRange(0, 3), FoldRange(3, 6), FoldRange(6, 10)]
        assert [r.size for r in splitter.fold_ranges] == [3, 3, 4]

    def test_even_split(self):
        splitter = DatasetSplitter(list(range(9)), 3)
        assert splitter.fold_ranges == [FoldRange(0, 3), FoldRange(3, 6), FoldRange(6, 9)]

    def test_chunk_size(self):
        assert DatasetSplitter(list(range(10)), 3).chunk_size == 3

    def test_folds_cover_every_document_once(self):
        docs = [f"d{i}" for i in range(17)]
        splitter = DatasetSplitter(docs, 5)
        held_out = [d for fold in range(5) for d in splitter.test_documents(fold)]
        assert held_out == docs

    def test_last_fold_returns_full_range(self):
        docs = [f"d{i}" for i in range(10)]
        assert DatasetSplitter(docs, 3).test_documents(2) == ["d6", "d7", "d8", "d9"]

    def test_train_documents_complement_fold(self):
        docs = list("abcdefg")
        splitter = DatasetSplitter(docs, 3)
        assert splitter.test_documents(1) == ["c", "d"]
        assert splitter.train_documents(1) == ["a", "b", "e", "f", "g"]

    def test_single_fold(self):
        splitter = DatasetSplitter(list(range(4)), 1)
        assert splitter.fold_range(0) == FoldRange(0, 4)
        assert splitter.train_documents(0) == []

    @pytest.mark.parametrize("folds", [5, 6, 0, -1])
    def test_invalid_fold_count(self, folds):
        with pytest.raises(ValueError):
            DatasetSplitter(list(range(5)), folds)

    def test_fold_index_out_of_range(self):
        splitter = DatasetSplitter(list(range(6)), 2)
        with pytest.raises(IndexError):
            splitter.fold_range(2)

    def test_documents_are_copied(self):
        docs = [1, 2, 3, 4]
        splitter = DatasetSplitter(docs, 2)
        docs.append(5)
        assert len(splitter) == 4
        splitter.documents.append(6)
        assert len(splitter.documents) == 4

    def test_from_directory(self, tmp_path):
        for name in ("c.txt", "a.txt", "b.txt", "skip.md"):
            (tmp_path / name).write_text("x", encoding="utf-8")
        splitter = DatasetSplitter.from_directory(tmp_path, 2, extension_filter(".txt"))
        assert [p.name for p in splitter.documents] == ["a.txt", "b.txt", "c.txt"]
        assert [p.name for p in splitter.test_documents(1)] == ["b.txt", "c.txt"]


class TestFilters:
    def test_extension_filter(self, tmp_path):
        (tmp_path / "a.TXT").write_text("x")
        (tmp_path / "b.md").write_text("x")
        (tmp_path / "dir.txt").mkdir()
        accept = extension_filter("txt")
        assert [p.name for p in list_documents(tmp_path, accept)] == ["a.TXT"]

    def test_extension_filter_needs_extensions(self):
        with pytest.raises(ValueError):
            extension_filter()

    def test_regular_file_filter(self, tmp_path):
        (tmp_path / "0001").write_text("x")
        (tmp_path / "b.md").write_text("x")
        (tmp_path / "sub").mkdir()
        names = [p.name for p in list_documents(tmp_path, regular_file_filter)]
        assert names == ["0001", "b.md"]

    def test_list_documents_defaults_to_regular_files(self, tmp_path):
        (tmp_path / "x.bin").write_bytes(b"\x00")
        assert len(list_documents(tmp_path)) == 1

    def test_missing_directory(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            list_documents(tmp_path / "nope")

    def test_not_a_directory(self, tmp_path):
        path = tmp_path / "file.txt"
        path.write_text("x")
        with pytest.raises(NotADirectoryError):
            list_documents(path)


class TestCategories:
    def test_discover_sorted(self, pooled_corpus):
        assert [p.name for p in discover_categories(pooled_corpus)] == [
            "cooking", "finance", "sports",
        ]

    def test_load_pooled(self, pooled_corpus):
        categories = load_categories(pooled_corpus, extension_filter(".txt"))
        assert [c.label for c in categories] == ["cooking", "finance", "sports"]
        assert all(isinstance(c, Category) and len(c) == 6 for c in categories)

    def test_load_fixed_split(self, split_corpus):
        train = load_categories(split_corpus, subdirectory="Train")
        test = load_categories(split_corpus, subdirectory="Test")
        assert [len(c) for c in train] == [4, 4, 4]
        assert [len(c) for c in test] == [2, 2, 2]

    def test_root_without_categories(self, tmp_path):
        with pytest.raises(ValueError, match="No category"):
            load_categories(tmp_path)
