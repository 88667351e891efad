from __future__ import annotations

from pathlib import Path

import pytesseract
from pdf2image import convert_from_path


def ocr_pdf_page(
    pdf_path: Path,
    page_number_1based: int,
    lang: str = "jpn+eng",
    dpi: int = 200,
) -> str:
    """
    Render exactly ONE PDF page (1-based index) to image and OCR it.
    Used for pages whose text layer is missing or too weak.
    """
    images = convert_from_path(
        str(pdf_path),
        dpi=dpi,
        first_page=page_number_1based,
        last_page=page_number_1based,
        fmt="png",
    )

    if not images:
        return ""

    return pytesseract.image_to_string(images[0], lang=lang)
