from pydantic import BaseModel, Field

from pdfchat.chunking.models import Chunk


class PageText(BaseModel):
    page_number: int = Field(..., ge=1)
    method: str  # "text" or "ocr"
    text: str
    char_count: int
    non_whitespace_ratio: float


class ExtractionResult(BaseModel):
    path: str
    page_count: int
    title: str
    full_text: str
    page_texts: dict[int, str] = Field(default_factory=dict)
    pages: list[PageText] = Field(default_factory=list)
    chunks: list[Chunk] = Field(default_factory=list)

    @property
    def ocr_pages(self) -> int:
        return sum(1 for p in self.pages if p.method == "ocr")
