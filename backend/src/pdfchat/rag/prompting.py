from __future__ import annotations

from collections.abc import Sequence

from pdfchat.chunking.models import Chunk

NO_CONTEXT_MESSAGE = "No relevant context could be found in the PDF."
CONTEXT_SEPARATOR = "\n\n---\n\n"


def build_context(chunks: Sequence[Chunk]) -> str:
    """
    Join retrieved chunks back into reading order, each labelled with the
    page it came from so the model can cite it.
    """
    if not chunks:
        return NO_CONTEXT_MESSAGE

    ordered = sorted(chunks, key=lambda c: (c.page_number, c.chunk_index))
    return CONTEXT_SEPARATOR.join(f"[Page {c.page_number}]\n{c.text}".strip() for c in ordered)


def build_system_prompt(context: str) -> str:
    return f"""You are an assistant that helps the user with the contents of a PDF document.
Use the text extracted from the PDF below (the context) to answer the user's question accurately and in detail.

## Context (relevant text extracted from the PDF)
{context}

## Guidelines
- Prefer information contained in the context.
- If the context does not cover the question, say so explicitly.
- Answer in the language of the question.
- Cite the supporting page inline in the form [[p.X]] (for example: this concept is ...[[p.3]]). When several pages apply, place the anchors next to each other, like [[p.2]][[p.5]].
- Structure the answer with Markdown.
"""


def build_rag_prompt(question: str, chunks: Sequence[Chunk]) -> str:
    """
    Single-string prompt for non-chat generation.
    """
    return f"""{build_system_prompt(build_context(chunks))}
Question:
{question}
"""
