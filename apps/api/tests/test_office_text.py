from io import BytesIO

from docx import Document
from pptx import Presentation

from examprep.services.office_text import extract_office_text


def _docx_bytes():
    doc = Document()
    doc.add_paragraph("Process   scheduling")
    doc.add_paragraph("")
    table = doc.add_table(rows=1, cols=2)
    table.rows[0].cells[0].text = "FCFS"
    table.rows[0].cells[1].text = "First come first served"
    buf = BytesIO()
    doc.save(buf)
    return buf.getvalue()


def _pptx_bytes():
    prs = Presentation()
    slide = prs.slides.add_slide(prs.slide_layouts[1])
    slide.shapes.title.text = "Deadlocks"
    slide.placeholders[1].text = "Mutual exclusion\nHold and wait"
    buf = BytesIO()
    prs.save(buf)
    return buf.getvalue()


def test_docx_paragraphs_and_tables():
    text = extract_office_text(_docx_bytes(), "docx")
    assert text.splitlines() == ["Process scheduling", "FCFS | First come first served"]


def test_pptx_slide_text():
    text = extract_office_text(_pptx_bytes(), ".PPTX")
    assert text == "Deadlocks Mutual exclusion Hold and wait"


def test_unsupported_extension_gives_empty_text():
    assert extract_office_text(b"plain text", "txt") == ""
    assert extract_office_text(b"", "") == ""


def test_garbage_bytes_do_not_raise():
    assert extract_office_text(b"definitely not a zip", "docx") == ""
    assert extract_office_text(b"definitely not a zip", "pptx") == ""


def test_only_docx_and_pptx_are_parsed(monkeypatch):
    from examprep.services import office_text

    def fail(data):
        raise AssertionError("parser should not run")

    monkeypatch.setattr(office_text, "extract_docx_text", fail)
    monkeypatch.setattr(office_text, "extract_pptx_text", fail)
    assert office_text.SUPPORTED_OFFICE_EXTENSIONS == ("docx", "pptx")
    for ext in ("doc", "ppt", "xlsx", "pdf"):
        assert extract_office_text(b"data", ext) == ""
