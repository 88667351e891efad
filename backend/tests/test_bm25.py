"""Tests for BM25 scoring with the smoothed idf."""

import math

import pytest
from rank_bm25 import BM25Okapi

from pdfchat.retrieval.bm25 import B, K1, SmoothedBM25, idf
from pdfchat.retrieval.tokenizer import tokenize


def naive_score(text: str, query: str, corpus: list[str]) -> float:
    """Re-tokenize the whole corpus for every term, as a reference."""
    doc_tokens = tokenize(text)
    avgdl = sum(len(tokenize(t)) for t in corpus) / max(len(corpus), 1)
    score = 0.0
    for term in dict.fromkeys(tokenize(query)):
        tf = doc_tokens.count(term)
        if tf == 0:
            continue
        df = sum(1 for t in corpus if term in tokenize(t))
        term_idf = math.log((len(corpus) - df + 0.5) / (df + 0.5) + 1)
        score += term_idf * (tf * (K1 + 1)) / (tf + K1 * (1 - B + B * (len(doc_tokens) / avgdl)))
    return score


def _bm25(texts):
    return SmoothedBM25([tokenize(t) for t in texts])


def test_constants():
    assert K1 == 1.5
    assert B == 0.75


def test_is_a_rank_bm25_okapi():
    bm25 = _bm25(["cat sat", "dog"])

    assert isinstance(bm25, BM25Okapi)
    assert (bm25.k1, bm25.b) == (K1, B)


def test_idf_is_positive_even_for_common_terms():
    assert idf(3, 3) > 0
    assert idf(0, 3) > idf(1, 3) > idf(3, 3)


def test_library_idf_is_replaced():
    bm25 = _bm25(["cat sat", "cat", "cat dog"])

    assert bm25.idf["cat"] == pytest.approx(idf(3, 3))
    assert bm25.idf["cat"] > 0
    assert bm25.idf["dog"] == pytest.approx(math.log(2.5 / 1.5 + 1))


def test_corpus_statistics():
    bm25 = _bm25(["cat sat", "dog", "cat cat"])

    assert bm25.corpus_size == 3
    assert bm25.avgdl == pytest.approx(5 / 3)
    assert bm25.doc_len == [2, 1, 2]


def test_hand_computed_score():
    bm25 = _bm25(["cat sat", "dog"])
    expected = math.log(2) * 2.5 / (1 + 1.5 * (0.25 + 0.75 * (2 / 1.5)))

    scores = bm25.scores(["cat"])

    assert scores[0] == pytest.approx(expected)
    assert scores[1] == 0.0


def test_duplicate_query_terms_count_once():
    bm25 = _bm25(["cat sat", "dog"])
    assert bm25.scores(["cat", "cat"]) == bm25.scores(["cat"])


def test_empty_query_scores_zero():
    assert _bm25(["cat sat", "dog"]).scores([]) == [0.0, 0.0]


def test_all_empty_documents_score_zero():
    bm25 = _bm25(["", "   "])

    assert bm25.scores(["cat"]) == [0.0, 0.0]


def test_scores_are_plain_floats():
    assert all(type(s) is float for s in _bm25(["cat sat", "dog"]).scores(["cat"]))


def test_matches_naive_recomputation():
    corpus = [
        "The cat sat on the mat. The cat was happy.",
        "Dogs are loyal animals and chase the cat.",
        "猫が座った。猫は幸せだった。",
        "Mixed text: PDF の読み方 and cat facts.",
        "",
    ]
    bm25 = _bm25(corpus)
    for query in ["cat", "the cat", "猫が幸せ", "pdf 読み方 cat", "nothing matches"]:
        expected = [naive_score(text, query, corpus) for text in corpus]
        assert bm25.scores(tokenize(query)) == pytest.approx(expected, abs=1e-12)
