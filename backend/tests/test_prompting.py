"""Tests for grounding context and prompt assembly."""

from conftest import make_chunk
from pdfchat.rag.prompting import (
    CONTEXT_SEPARATOR,
    NO_CONTEXT_MESSAGE,
    build_context,
    build_rag_prompt,
    build_system_prompt,
)


def test_context_is_sorted_by_page():
    chunks = [
        make_chunk("third", page_number=5, chunk_index=7),
        make_chunk("first", page_number=1, chunk_index=0),
        make_chunk("second", page_number=5, chunk_index=6),
    ]

    context = build_context(chunks)

    assert context.split(CONTEXT_SEPARATOR) == [
        "[Page 1]\nfirst",
        "[Page 5]\nsecond",
        "[Page 5]\nthird",
    ]


def test_empty_context():
    assert build_context([]) == NO_CONTEXT_MESSAGE


def test_system_prompt_embeds_context_and_citation_format():
    prompt = build_system_prompt("[Page 2]\nSome text")

    assert "[Page 2]\nSome text" in prompt
    assert "[[p.X]]" in prompt
    assert "language of the question" in prompt


def test_rag_prompt_includes_question():
    prompt = build_rag_prompt("What is a chart?", [make_chunk("A chart is a map.", page_number=3)])

    assert "What is a chart?" in prompt
    assert "[Page 3]\nA chart is a map." in prompt
