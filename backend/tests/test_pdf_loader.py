"""Tests for per-page PDF extraction."""

from unittest.mock import MagicMock

import pytest

from pdfchat.ingest import pdf_loader
from pdfchat.ingest.pdf_loader import UNTITLED, extract_document, is_text_good_enough, title_from_text


class FakePage:
    def __init__(self, text):
        self._text = text

    def extract_text(self):
        return self._text


class FakeReader:
    def __init__(self, texts, title=None):
        self.pages = [FakePage(t) for t in texts]
        self.metadata = MagicMock(title=title) if title is not None else None


@pytest.fixture
def pdf_file(tmp_path):
    path = tmp_path / "doc.pdf"
    path.write_bytes(b"%PDF-1.4\n")
    return path


def _use_reader(monkeypatch, reader):
    monkeypatch.setattr(pdf_loader, "PdfReader", lambda _path: reader)


def test_extracts_page_texts(monkeypatch, pdf_file):
    _use_reader(monkeypatch, FakeReader(["First page text.", "", "  Third page.  "]))

    result = extract_document(pdf_file)

    assert result.page_count == 3
    assert result.page_texts == {1: "First page text.", 3: "Third page."}
    assert [p.method for p in result.pages] == ["text", "text", "text"]
    assert "First page text." in result.full_text
    assert result.chunks == []


def test_title_from_metadata(monkeypatch, pdf_file):
    _use_reader(monkeypatch, FakeReader(["Body text"], title="  Sailing Manual "))

    assert extract_document(pdf_file).title == "Sailing Manual"


def test_title_from_first_line(monkeypatch, pdf_file):
    _use_reader(monkeypatch, FakeReader(["\n\nChapter One\nBody"], title="   "))

    assert extract_document(pdf_file).title == "Chapter One"


def test_untitled(monkeypatch, pdf_file):
    _use_reader(monkeypatch, FakeReader(["", ""]))

    result = extract_document(pdf_file)

    assert result.title == UNTITLED
    assert result.page_texts == {}


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        extract_document(tmp_path / "missing.pdf")


def test_ocr_fallback_for_weak_pages(monkeypatch, pdf_file):
    _use_reader(monkeypatch, FakeReader(["A page with a proper text layer.", "   "]))
    calls = []

    def fake_ocr(path, page_no, lang, dpi):
        calls.append((page_no, lang, dpi))
        return "OCR text for the scanned page"

    monkeypatch.setattr("pdfchat.ingest.ocr.ocr_pdf_page", fake_ocr)

    result = extract_document(pdf_file, ocr_enabled=True, ocr_lang="eng", ocr_dpi=150)

    assert calls == [(2, "eng", 150)]
    assert result.page_texts[2] == "OCR text for the scanned page"
    assert result.ocr_pages == 1


def test_is_text_good_enough():
    assert is_text_good_enough("This page has a real text layer.")
    assert not is_text_good_enough("")
    assert not is_text_good_enough(" " * 200 + "x")


def test_title_from_text_truncates():
    assert title_from_text("x" * 300, max_chars=100) == "x" * 100
    assert title_from_text("") == UNTITLED
