"""Shared fixtures for the pdfchat tests."""

import pytest

from pdfchat.chunking.models import Chunk
from pdfchat.ingest.models import ExtractionResult


def make_chunk(text: str, page_number: int = 1, chunk_index: int = 0) -> Chunk:
    return Chunk(
        id=f"page{page_number}-chunk{chunk_index}",
        text=text,
        page_number=page_number,
        chunk_index=chunk_index,
        start_char=0,
        end_char=len(text),
    )


@pytest.fixture
def english_chunks():
    return [
        make_chunk("The cat sat on the mat.", page_number=1, chunk_index=0),
        make_chunk("Dogs are loyal animals.", page_number=2, chunk_index=1),
    ]


@pytest.fixture
def sample_extraction():
    """Three pages of text long enough to be chunked page by page."""
    page_texts = {
        1: "Nautical charts show depths and hazards. " * 5,
        2: "猫が座った。犬は忠実な動物です。" * 8,
        3: "Tides rise and fall twice a day in most places. " * 5,
    }
    return ExtractionResult(
        path="/tmp/sample.pdf",
        page_count=4,
        title="Sample",
        full_text="\n".join(page_texts.values()),
        page_texts=page_texts,
    )
