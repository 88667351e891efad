from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from pathlib import Path

from pdfchat.chunking.chunker import PDFChunker
from pdfchat.chunking.models import Chunk
from pdfchat.ingest.models import ExtractionResult
from pdfchat.ingest.pdf_loader import extract_document
from pdfchat.retrieval.index import DEFAULT_TOP_K, RetrievalIndex, ScoredChunk

logger = logging.getLogger(__name__)

Extractor = Callable[[Path], ExtractionResult]


def document_id_for(path: str | Path) -> str:
    """
    Canonical key for a document: its resolved file path.
    """
    return str(Path(path).expanduser().resolve())


class DocumentStore:
    """
    Per-session cache of opened documents and their retrieval index.

    Opening a document extracts, chunks and indexes it once; later opens are
    served from the cache until the document is closed or reprocessed.
    """

    def __init__(
        self,
        chunker: PDFChunker | None = None,
        index: RetrievalIndex | None = None,
        extractor: Extractor = extract_document,
    ):
        self.chunker = chunker or PDFChunker()
        self.index = index or RetrievalIndex()
        self._extractor = extractor
        self._results: dict[str, ExtractionResult] = {}
        # Bumped by close_document / close_all; an open that started before a
        # close must not publish its result afterwards.
        self._generations: dict[str, int] = {}
        self._epoch = 0
        self._lock = threading.Lock()

    def _generation(self, doc_id: str) -> tuple[int, int]:
        return self._epoch, self._generations.get(doc_id, 0)

    def open_document(self, path: str | Path) -> ExtractionResult:
        doc_id = document_id_for(path)
        with self._lock:
            cached = self._results.get(doc_id)
            generation = self._generation(doc_id)
        if cached is not None:
            return cached

        extracted = self._extractor(Path(doc_id))
        chunks = self.chunker.chunk(extracted.full_text, extracted.page_texts)
        result = extracted.model_copy(update={"chunks": chunks})

        with self._lock:
            if self._generation(doc_id) != generation:
                logger.info("Closed %s while it was being opened; not caching", doc_id)
                return result
            self.index.build_index(doc_id, chunks)
            self._results[doc_id] = result

        logger.info("Opened %s: pages=%d chunks=%d", doc_id, result.page_count, len(chunks))
        return result

    def reprocess(self, path: str | Path) -> ExtractionResult:
        self.close_document(path)
        return self.open_document(path)

    def is_open(self, path: str | Path) -> bool:
        with self._lock:
            return document_id_for(path) in self._results

    def get_page_text(self, path: str | Path, page_number: int) -> str:
        result = self.open_document(path)
        return result.page_texts.get(page_number, "")

    def retrieve(self, path: str | Path, query: str, top_k: int = DEFAULT_TOP_K) -> list[Chunk]:
        return self.index.search(document_id_for(path), query, top_k)

    def retrieve_with_scores(self, path: str | Path, query: str, top_k: int = DEFAULT_TOP_K) -> list[ScoredChunk]:
        return self.index.search_with_scores(document_id_for(path), query, top_k)

    def close_document(self, path: str | Path) -> None:
        doc_id = document_id_for(path)
        with self._lock:
            self._generations[doc_id] = self._generations.get(doc_id, 0) + 1
            self._results.pop(doc_id, None)
            self.index.clear_index(doc_id)

    def close_all(self) -> None:
        with self._lock:
            self._epoch += 1
            self._generations.clear()
            self._results.clear()
            self.index.clear_index()
