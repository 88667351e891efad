from __future__ import annotations

import logging
import re
from collections.abc import Mapping

from pdfchat.chunking.models import Chunk, ChunkOptions

logger = logging.getLogger(__name__)

# Split point after each sentence terminator (Japanese and Latin) or newline.
_SENTENCE_BOUNDARY = re.compile(r"(?<=[。.!?！？\n])")
_SPACES = re.compile(r"[ \t]+")
_BLANK_LINES = re.compile(r"\n{3,}")
_PAGE_NUMBER_LINE = re.compile(r"^\d+\s*$", re.MULTILINE)

FALLBACK_PAGE_NUMBER = 1


def clean_text(text: str) -> str:
    """
    Normalize common PDF extraction artifacts:
    - collapse runs of spaces/tabs
    - collapse 3+ newlines to a paragraph break
    - drop lines that are only a number (page numbers)
    """
    text = _SPACES.sub(" ", text or "")
    text = _BLANK_LINES.sub("\n\n", text)
    text = _PAGE_NUMBER_LINE.sub("", text)
    return text.strip()


def split_into_sentences(text: str) -> list[str]:
    return [s for s in _SENTENCE_BOUNDARY.split(text) if s]


class PDFChunker:
    """
    Page-aware sentence chunker.

    Pages are chunked independently so every chunk can cite the page it came
    from. When no page yields a chunk, the whole document text is chunked as
    page 1.
    """

    def __init__(self, options: ChunkOptions | None = None):
        self.options = options or ChunkOptions()

    def chunk(self, full_text: str, page_texts: Mapping[int, str] | None = None) -> list[Chunk]:
        chunks: list[Chunk] = []

        for page_number in sorted(page_texts or {}):
            if page_number < 1:
                logger.warning("Skipping page %r: page numbers start at 1", page_number)
                continue
            cleaned = clean_text(page_texts[page_number])
            if len(cleaned) < self.options.min_chunk_size:
                continue
            chunks.extend(self._split(cleaned, page_number, start_index=len(chunks)))

        if not chunks:
            if page_texts:
                logger.info("No page produced a chunk; chunking full text as page %d", FALLBACK_PAGE_NUMBER)
            chunks = self._split(clean_text(full_text), FALLBACK_PAGE_NUMBER, start_index=0)

        logger.debug("Chunked %d pages into %d chunks", len(page_texts or {}), len(chunks))
        return chunks

    def _split(self, text: str, page_number: int, start_index: int) -> list[Chunk]:
        chunk_size = self.options.chunk_size
        overlap = self.options.chunk_overlap
        min_size = self.options.min_chunk_size

        chunks: list[Chunk] = []
        buf = ""
        buf_start = 0
        pos = 0

        for sentence in split_into_sentences(text):
            if len(buf) + len(sentence) > chunk_size and len(buf) >= min_size:
                self._emit(chunks, buf, page_number, start_index, buf_start)

                tail = buf[-overlap:] if overlap else ""
                buf_start = pos - len(tail)
                buf = tail + sentence
            else:
                buf += sentence
            pos += len(sentence)

        if len(buf.strip()) >= min_size:
            self._emit(chunks, buf, page_number, start_index, buf_start)

        return chunks

    @staticmethod
    def _emit(chunks: list[Chunk], buf: str, page_number: int, start_index: int, buf_start: int) -> None:
        text = buf.strip()
        if not text:
            return
        index = start_index + len(chunks)
        chunks.append(
            Chunk(
                id=f"page{page_number}-chunk{index}",
                text=text,
                page_number=page_number,
                chunk_index=index,
                start_char=buf_start,
                end_char=buf_start + len(buf),
            )
        )
