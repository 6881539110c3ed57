"""Shared test fixtures for similarity-classifier tests."""

from __future__ import annotations

from pathlib import Path

import pytest

# Each category has distinctive vocabulary; "today" appears everywhere and
# is removed as shared noise.
SPORTS_DOCS = [
    "Today the football team scored a late goal and the stadium erupted.",
    "The striker scored twice and the referee awarded a penalty in the match today.",
    "League leaders won the match after the goalkeeper saved a penalty today.",
    "Today the coach praised the team defence before the derby match at the stadium.",
    "The referee sent off the striker and the league fined the football club today.",
    "Fans filled the stadium today to watch the team chase a league title goal.",
]

COOKING_DOCS = [
    "Today we bake bread: knead the dough with flour, butter and yeast in the kitchen.",
    "Preheat the oven, whisk sugar and butter, then fold in flour for the cake today.",
    "This recipe simmers garlic and onion in butter before roasting in the oven today.",
    "Today roll the pastry dough thin, brush with butter and bake in a hot oven.",
    "Season the soup with salt and pepper, simmer gently, and serve the recipe today.",
    "Today sift flour and sugar into the bowl, add eggs and bake the sponge in the oven.",
]

FINANCE_DOCS = [
    "Today stock markets rallied as investors bought bank shares after the earnings report.",
    "The central bank raised interest rates today and bond yields climbed across markets.",
    "Investors rebalanced portfolios today, selling shares and buying government bonds.",
    "Today the company announced a dividend increase and its stock price jumped on markets.",
    "Analysts expect interest rates to fall today, lifting bank stock and bond prices.",
    "Today the fund manager trimmed equity shares and raised cash in the portfolio.",
]

CORPUS = {
    "cooking": COOKING_DOCS,
    "finance": FINANCE_DOCS,
    "sports": SPORTS_DOCS,
}


def write_documents(directory: Path, docs: list[str], suffix: str = ".txt") -> list[Path]:
    """Write one file per document, named so sorted order matches list order."""
    directory.mkdir(parents=True, exist_ok=True)
    paths = []
    for i, text in enumerate(docs):
        path = directory / f"doc{i:02d}{suffix}"
        path.write_text(text, encoding="utf-8")
        paths.append(path)
    return paths


@pytest.fixture
def pooled_corpus(tmp_path: Path) -> Path:
    """Dataset root with one flat document pool per category."""
    root = tmp_path / "pooled"
    for label, docs in CORPUS.items():
        write_documents(root / label, docs)
    return root


@pytest.fixture
def split_corpus(tmp_path: Path) -> Path:
    """Dataset root with fixed Train/ and Test/ splits per category."""
    root = tmp_path / "split"
    for label, docs in CORPUS.items():
        write_documents(root / label / "Train", docs[:4])
        write_documents(root / label / "Test", docs[4:])
    return root


ENV_VARS = [
    "SIMCLS_FOLDS", "SIMCLS_FILTER", "SIMCLS_EXTENSIONS", "SIMCLS_WORKERS",
    "SIMCLS_SHARDS", "SIMCLS_REMOVE_NOISE", "SIMCLS_NGRAM", "SIMCLS_STOPWORDS",
    "SIMCLS_SUBLINEAR_TF",
]


@pytest.fixture
def clean_env(monkeypatch):
    """Unset every SIMCLS_* variable for the duration of a test."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
