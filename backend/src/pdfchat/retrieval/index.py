from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from pdfchat.chunking.models import Chunk
from pdfchat.retrieval.bm25 import SmoothedBM25
from pdfchat.retrieval.tokenizer import tokenize

logger = logging.getLogger(__name__)

DEFAULT_TOP_K = 5


@dataclass(frozen=True)
class ScoredChunk:
    chunk: Chunk
    score: float


@dataclass(frozen=True)
class _DocumentEntry:
    chunks: tuple[Chunk, ...]
    bm25: SmoothedBM25 | None  # None for a document with no chunks


class RetrievalIndex:
    """
    In-memory BM25 index, one independent entry per document.

    Entries are immutable once built; rebuilding a document swaps its entry
    wholesale. Only the document mapping is shared, and it is lock-guarded.
    """

    def __init__(self) -> None:
        self._entries: dict[str, _DocumentEntry] = {}
        self._lock = threading.Lock()

    def build_index(self, document_id: str, chunks: Sequence[Chunk]) -> None:
        chunks = tuple(chunks)
        bm25 = SmoothedBM25([tokenize(c.text) for c in chunks]) if chunks else None
        entry = _DocumentEntry(chunks=chunks, bm25=bm25)

        with self._lock:
            self._entries[document_id] = entry

        logger.info(
            "Indexed %s: chunks=%d avg_tokens=%.1f",
            document_id,
            len(chunks),
            bm25.avgdl if bm25 else 0.0,
        )

    def search(self, document_id: str, query: str, top_k: int = DEFAULT_TOP_K) -> list[Chunk]:
        return [hit.chunk for hit in self.search_with_scores(document_id, query, top_k)]

    def search_with_scores(self, document_id: str, query: str, top_k: int = DEFAULT_TOP_K) -> list[ScoredChunk]:
        with self._lock:
            entry = self._entries.get(document_id)

        if entry is None or entry.bm25 is None or top_k <= 0:
            return []

        query_terms = tokenize(query)
        scored = [
            ScoredChunk(chunk=chunk, score=score)
            for chunk, score in zip(entry.chunks, entry.bm25.scores(query_terms))
        ]
        scored.sort(key=lambda h: (-h.score, h.chunk.chunk_index))

        logger.debug("Search %s query=%r terms=%d hits=%d", document_id, query, len(query_terms), len(scored))
        return scored[:top_k]

    def clear_index(self, document_id: str | None = None) -> None:
        with self._lock:
            if document_id is None:
                self._entries.clear()
            else:
                self._entries.pop(document_id, None)

    def has_document(self, document_id: str) -> bool:
        with self._lock:
            return document_id in self._entries

    def document_ids(self) -> list[str]:
        with self._lock:
            return list(self._entries)


def to_dict(hit: ScoredChunk) -> dict[str, Any]:
    return {
        "chunk_id": hit.chunk.id,
        "chunk_index": hit.chunk.chunk_index,
        "page_number": hit.chunk.page_number,
        "score": hit.score,
        "text": hit.chunk.text,
    }
