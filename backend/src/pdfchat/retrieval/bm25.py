"""
Okapi BM25 over pre-tokenized chunks, built on rank_bm25.

Chunks are tokenized once when an index is built; rank_bm25 keeps the term
frequencies, document lengths and document frequencies. Only the idf differs
from the library's BM25Okapi: the smoothed form below is never negative, so
no epsilon floor is needed.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence

from rank_bm25 import BM25Okapi

K1 = 1.5
B = 0.75


def idf(df: int, doc_count: int) -> float:
    return math.log((doc_count - df + 0.5) / (df + 0.5) + 1)


class SmoothedBM25(BM25Okapi):
    """
    BM25Okapi with the smoothed idf ln((N - df + 0.5) / (df + 0.5) + 1).

    The corpus must be non-empty and already tokenized; rank_bm25's own
    tokenizer hook fans out to a process pool, which a per-document index
    does not need.
    """

    def __init__(self, corpus: Sequence[list[str]], k1: float = K1, b: float = B):
        super().__init__(list(corpus), k1=k1, b=b)

    def _calc_idf(self, nd):
        for word, freq in nd.items():
            self.idf[word] = idf(freq, self.corpus_size)

    def scores(self, query_terms: Iterable[str]) -> list[float]:
        """
        One score per document, in corpus order. Repeated query terms count once.
        """
        terms = list(dict.fromkeys(query_terms))
        # All documents empty: no term can match, and avgdl would divide by zero.
        if not terms or not self.avgdl:
            return [0.0] * self.corpus_size
        return [float(s) for s in self.get_scores(terms)]
