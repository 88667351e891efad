"""
Mixed-script tokenizer for lexical retrieval.

ASCII words are kept whole; CJK and full-width characters have no reliable
word boundaries, so they are indexed as overlapping character bigrams.
"""

from __future__ import annotations

import re

_WORD = re.compile(r"[a-z0-9]+")
_CJK_CHAR = re.compile(r"[\u3000-\u9fff\uff00-\uffef]")


def tokenize(text: str) -> list[str]:
    normalized = (text or "").lower()

    words = _WORD.findall(normalized)

    cjk_chars = _CJK_CHAR.findall(normalized)
    bigrams = [a + b for a, b in zip(cjk_chars, cjk_chars[1:])]

    return words + bigrams
