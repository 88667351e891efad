from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from pypdf import PdfReader

from pdfchat.ingest.models import ExtractionResult, PageText

logger = logging.getLogger(__name__)

UNTITLED = "Untitled PDF"


@dataclass(frozen=True)
class TextQuality:
    char_count: int
    non_whitespace_ratio: float


def _quality(text: str) -> TextQuality:
    stripped = "".join(text.split())
    char_count = len(text)
    ratio = (len(stripped) / char_count) if char_count > 0 else 0.0
    return TextQuality(char_count=char_count, non_whitespace_ratio=ratio)


def is_text_good_enough(text: str, min_chars: int = 20, min_ratio: float = 0.10) -> bool:
    """
    A page's text layer is usable when it has a handful of characters and is
    not mostly whitespace. Scanned pages usually extract to "" or a few spaces.
    """
    q = _quality(text or "")
    return q.char_count >= min_chars and q.non_whitespace_ratio >= min_ratio


def title_from_text(text: str, max_chars: int = 100) -> str:
    for line in text.splitlines():
        if line.strip():
            return line.strip()[:max_chars]
    return UNTITLED


def _metadata_title(reader: PdfReader) -> str:
    meta = reader.metadata
    title = getattr(meta, "title", None) if meta is not None else None
    return title.strip() if isinstance(title, str) else ""


def extract_document(
    pdf_path: Path,
    ocr_enabled: bool = False,
    ocr_lang: str = "jpn+eng",
    ocr_dpi: int = 200,
    title_max_chars: int = 100,
) -> ExtractionResult:
    """
    Extract per-page text with pypdf.
    - pages with a weak text layer are OCR'd when OCR is enabled
    - pages that end up empty are left out of page_texts
    """
    pdf_path = Path(pdf_path)
    if not pdf_path.exists():
        raise FileNotFoundError(f"File not found: {pdf_path}")

    reader = PdfReader(str(pdf_path))
    total_pages = len(reader.pages)

    pages: list[PageText] = []
    page_texts: dict[int, str] = {}

    for page_no, page in enumerate(reader.pages, start=1):
        text = page.extract_text() or ""
        method = "text"

        if ocr_enabled and not is_text_good_enough(text):
            # Imported lazily: OCR needs poppler + tesseract on the host.
            from pdfchat.ingest.ocr import ocr_pdf_page

            text = ocr_pdf_page(pdf_path, page_no, lang=ocr_lang, dpi=ocr_dpi)
            method = "ocr"

        q = _quality(text)
        pages.append(
            PageText(
                page_number=page_no,
                method=method,
                text=text,
                char_count=q.char_count,
                non_whitespace_ratio=q.non_whitespace_ratio,
            )
        )
        if text.strip():
            page_texts[page_no] = text.strip()

    full_text = "\n".join(p.text for p in pages)
    title = _metadata_title(reader) or title_from_text(full_text, max_chars=title_max_chars)

    result = ExtractionResult(
        path=str(pdf_path),
        page_count=total_pages,
        title=title,
        full_text=full_text,
        page_texts=page_texts,
        pages=pages,
    )
    logger.info(
        "Extracted %s: pages=%d text_pages=%d ocr_pages=%d",
        pdf_path.name,
        total_pages,
        len(page_texts),
        result.ocr_pages,
    )
    return result
