"""Tests for evaluation settings and environment overrides."""

from __future__ import annotations

import pytest

from similarity_classifier.config import EvaluationConfig, parse_ngram_range
from similarity_classifier.dataset import regular_file_filter
from similarity_classifier.vectors import TermVectorLoader

pytestmark = pytest.mark.usefixtures("clean_env")


class TestDefaults:
    def test_defaults(self):
        config = EvaluationConfig.from_env(dotenv=False)
        assert config == EvaluationConfig()
        assert config.folds == 10
        assert config.extensions == (".txt",)
        assert config.remove_noise is True

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"filter_mode": "glob"},
            {"folds": 0},
            {"workers": 0},
            {"shards": -1},
            {"extensions": ()},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            EvaluationConfig(**kwargs)

    def test_file_mode_needs_no_extensions(self):
        config = EvaluationConfig(filter_mode="file", extensions=())
        assert config.document_filter() is regular_file_filter


class TestFromEnv:
    def test_reads_variables(self, monkeypatch):
        monkeypatch.setenv("SIMCLS_FOLDS", "5")
        monkeypatch.setenv("SIMCLS_FILTER", "File")
        monkeypatch.setenv("SIMCLS_WORKERS", "4")
        monkeypatch.setenv("SIMCLS_SHARDS", "2")
        monkeypatch.setenv("SIMCLS_REMOVE_NOISE", "no")
        monkeypatch.setenv("SIMCLS_NGRAM", "1,2")
        monkeypatch.setenv("SIMCLS_STOPWORDS", "false")
        monkeypatch.setenv("SIMCLS_SUBLINEAR_TF", "1")
        config = EvaluationConfig.from_env(dotenv=False)
        assert config.folds == 5
        assert config.filter_mode == "file"
        assert (config.workers, config.shards) == (4, 2)
        assert config.remove_noise is False
        assert config.ngram_range == (1, 2)
        assert config.use_stopwords is False
        assert config.sublinear_tf is True

    def test_extensions_list(self, monkeypatch):
        monkeypatch.setenv("SIMCLS_EXTENSIONS", ".txt, .md,")
        assert EvaluationConfig.from_env(dotenv=False).extensions == (".txt", ".md")

    def test_overrides_win_and_none_falls_through(self, monkeypatch):
        monkeypatch.setenv("SIMCLS_FOLDS", "5")
        monkeypatch.setenv("SIMCLS_WORKERS", "3")
        config = EvaluationConfig.from_env(dotenv=False, folds=7, workers=None)
        assert config.folds == 7
        assert config.workers == 3

    @pytest.mark.parametrize(
        "name, value, message",
        [
            ("SIMCLS_FOLDS", "ten", "SIMCLS_FOLDS"),
            ("SIMCLS_REMOVE_NOISE", "maybe", "SIMCLS_REMOVE_NOISE"),
            ("SIMCLS_NGRAM", "a,b", "n-gram"),
        ],
    )
    def test_bad_values(self, monkeypatch, name, value, message):
        monkeypatch.setenv(name, value)
        with pytest.raises(ValueError, match=message):
            EvaluationConfig.from_env(dotenv=False)

    def test_dotenv_file(self, monkeypatch, tmp_path):
        from dotenv import load_dotenv

        env_file = tmp_path / ".env"
        env_file.write_text("SIMCLS_FOLDS=4\n", encoding="utf-8")
        # registers the variable so monkeypatch restores it afterwards
        monkeypatch.setenv("SIMCLS_FOLDS", "10")
        load_dotenv(env_file, override=True)
        assert EvaluationConfig.from_env(dotenv=False).folds == 4


class TestFactories:
    def test_make_builder(self):
        config = EvaluationConfig(shards=3, workers=2, ngram_range=(1, 2), sublinear_tf=True)
        builder = config.make_builder()
        assert builder.shards == 3
        assert builder.loader == TermVectorLoader(ngram_range=(1, 2), sublinear_tf=True)

    def test_extension_filter(self, tmp_path):
        (tmp_path / "a.md").write_text("x")
        (tmp_path / "b.txt").write_text("x")
        accept = EvaluationConfig(extensions=(".md",)).document_filter()
        assert accept(tmp_path / "a.md")
        assert not accept(tmp_path / "b.txt")


@pytest.mark.parametrize(
    "value, expected",
    [("1", (1, 1)), ("1,3", (1, 3)), (" 2 , 2 ", (2, 2))],
)
def test_parse_ngram_range(value, expected):
    assert parse_ngram_range(value) == expected


@pytest.mark.parametrize("value", ["", "1,2,3", "x"])
def test_parse_ngram_range_invalid(value):
    with pytest.raises(ValueError):
        parse_ngram_range(value)
