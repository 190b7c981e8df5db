# ============================================================================
# FILE: tests/unit/test_input_readers.py
# ============================================================================
"""
Unit tests for document text extraction
"""

import io

import pytest
from docx import Document
from openpyxl import Workbook
from PIL import Image

import input_readers
from domain.errors import ReadError, UnsupportedFormatError
from domain.upload import UploadedFile
from input_readers import extract_text, read_docx, read_excel, read_excel_rows, read_image, read_pdf


def _docx_bytes():
    document = Document()
    document.add_paragraph("Contrat de fourniture ENGIE")
    table = document.add_table(rows=2, cols=2)
    table.cell(0, 0).text = "Fournisseur"
    table.cell(0, 1).text = "Prix"
    table.cell(1, 0).text = "EDF"
    table.cell(1, 1).text = "41,2 €/MWh"
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def _xlsx_bytes():
    wb = Workbook()
    ws = wb.active
    ws.append(["Fournisseur", "Durée", "Prix molécule"])
    ws.append(["ENGIE", "Fixe 36 mois", 35.5])
    ws.append([None, None, None])
    ws.append(["TotalEnergies", "Fixe 24 mois", 37.8])
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def _png_bytes():
    buffer = io.BytesIO()
    Image.new("RGB", (20, 20), "white").save(buffer, format="PNG")
    return buffer.getvalue()


class _FakePage:
    def __init__(self, text):
        self.text = text

    def extract_text(self):
        return self.text


class _FakePdf:
    def __init__(self, pages):
        self.pages = pages

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


def test_plain_text_is_decoded():
    file = UploadedFile(name="notes.txt", content="Prix ENGIE 35 €/MWh".encode("utf-8"), media_type="text/plain")
    assert extract_text(file) == "Prix ENGIE 35 €/MWh"


def test_unknown_type_is_read_as_text():
    file = UploadedFile(name="export.csv", content=b"ENGIE;35.5", media_type=None)
    assert extract_text(file) == "ENGIE;35.5"


def test_invalid_text_raises_read_error():
    with pytest.raises(ReadError):
        extract_text(UploadedFile(name="blob.bin", content=b"\xff\xfe\xfa\x00", media_type="application/octet-stream"))


def test_legacy_word_is_unsupported():
    with pytest.raises(UnsupportedFormatError):
        extract_text(UploadedFile(name="old.doc", content=b"...", media_type="application/msword"))


def test_docx_paragraphs_and_tables():
    text = read_docx(_docx_bytes())

    assert "Contrat de fourniture ENGIE" in text
    assert "Fournisseur | Prix" in text
    assert "EDF | 41,2 €/MWh" in text


def test_docx_dispatch_by_extension():
    file = UploadedFile(name="contrat.docx", content=_docx_bytes(), media_type=None)
    assert "ENGIE" in extract_text(file)


def test_corrupted_docx_raises_read_error():
    with pytest.raises(ReadError):
        read_docx(b"definitely not a zip archive")


def test_excel_rows_skip_empty_lines():
    rows = read_excel_rows(_xlsx_bytes())

    assert len(rows) == 2
    assert rows[0]["Fournisseur"] == "ENGIE"
    assert rows[1]["Prix molécule"] == 37.8


def test_excel_rendered_as_text_lines():
    text = read_excel(_xlsx_bytes())

    assert text.splitlines() == [
        "Fournisseur | Durée | Prix molécule",
        "ENGIE | Fixe 36 mois | 35.5",
        "TotalEnergies | Fixe 24 mois | 37.8",
    ]


def test_corrupted_excel_raises_read_error():
    with pytest.raises(ReadError):
        read_excel(b"not a workbook")


def test_pdf_pages_are_concatenated(monkeypatch):
    pages = [_FakePage("Page un ENGIE"), _FakePage(None), _FakePage("Page trois")]
    monkeypatch.setattr("input_readers.pdf.pdfplumber.open", lambda stream: _FakePdf(pages))

    assert read_pdf(b"%PDF-fake") == "Page un ENGIE\n\n\n\nPage trois"


def test_pdf_page_limit(monkeypatch):
    pages = [_FakePage(f"page {i}") for i in range(30)]
    monkeypatch.setattr("input_readers.pdf.pdfplumber.open", lambda stream: _FakePdf(pages))

    text = read_pdf(b"%PDF-fake", max_pages=15)
    assert "page 14" in text
    assert "page 15" not in text


def test_corrupted_pdf_raises_read_error():
    with pytest.raises(ReadError):
        read_pdf(b"this is not a pdf")


def test_image_is_sent_to_ocr(monkeypatch):
    calls = {}

    def fake_ocr(image, lang):
        calls["lang"] = lang
        return "ENGIE 8,5 ct€/kWh"

    monkeypatch.setattr("input_readers.image.pytesseract.image_to_string", fake_ocr)

    assert read_image(_png_bytes(), languages="fra+eng") == "ENGIE 8,5 ct€/kWh"
    assert calls["lang"] == "fra+eng"


def test_unreadable_image_is_unsupported():
    with pytest.raises(UnsupportedFormatError):
        read_image(b"not an image")


@pytest.mark.parametrize(
    "name, media_type, reader",
    [
        ("a.pdf", "application/pdf", "read_pdf"),
        ("scan.jpg", "image/jpeg", "read_image"),
        ("scan.PNG", None, "read_image"),
        ("table.xlsx", None, "read_excel"),
        ("contrat.docx", "application/vnd.openxmlformats-officedocument.wordprocessingml.document", "read_docx"),
    ],
)
def test_dispatch_by_media_type(monkeypatch, name, media_type, reader):
    monkeypatch.setattr(input_readers, reader, lambda data: f"{reader} called")

    assert extract_text(UploadedFile(name=name, content=b"x", media_type=media_type)) == f"{reader} called"


def _workbook_bytes(*rows):
    wb = Workbook()
    ws = wb.active
    for row in rows:
        ws.append(row)
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def test_excel_repeated_headers_keep_every_column():
    data = _workbook_bytes(["Fournisseur", "Prix", "Prix"], ["ENGIE", "35,5 €/MWh", "36,9 €/MWh"])

    assert read_excel(data).splitlines() == [
        "Fournisseur | Prix | Prix",
        "ENGIE | 35,5 €/MWh | 36,9 €/MWh",
    ]
    assert read_excel_rows(data) == [{"Fournisseur": "ENGIE", "Prix": "35,5 €/MWh", "Prix_2": "36,9 €/MWh"}]


def test_excel_header_only_sheet_keeps_header_line():
    data = _workbook_bytes(["Fournisseur", "Durée", "Prix molécule"])

    assert read_excel(data) == "Fournisseur | Durée | Prix molécule"
    assert read_excel_rows(data) == []
