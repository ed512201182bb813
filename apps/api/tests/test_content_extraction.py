from conftest import USER_ID, FakeBlobStore
from examprep.models import ExamModule
from examprep.services.content_extraction import (
    NO_TEXT_REASON,
    BlobPart,
    StageTracker,
    TextPart,
    extract_content,
    file_extension,
    resolve_file_paths,
    syllabus_parts,
)


def _extractor(texts):
    def run(data, ext):
        value = texts.get(ext)
        if isinstance(value, Exception):
            raise value
        return value or ""

    return run


def test_pdf_is_passed_through_as_inline_blob():
    store = FakeBlobStore({"u1/a.pdf": b"%PDF"})
    result = extract_content(["exam-pdfs/u1/a.pdf"], store)
    assert result.parts == [BlobPart(data=b"%PDF", mime_type="application/pdf")]
    assert result.parts[0].b64 == "JVBERg=="
    assert result.skipped == []
    assert store.downloads == ["u1/a.pdf"]


def test_office_text_is_labeled_with_its_key():
    store = FakeBlobStore({"u1/slides.pptx": b"pk"})
    result = extract_content(["u1/slides.pptx"], store, extractor=_extractor({"pptx": "  Slide one  "}))
    assert result.parts == [TextPart("\n\n[File: u1/slides.pptx]\nSlide one")]


def test_one_bad_file_never_aborts_the_batch():
    store = FakeBlobStore({"u1/a.pdf": b"%PDF", "u1/b.docx": b"x", "u1/c.pptx": b"y", "u1/d.txt": b"z"})
    extractor = _extractor({"docx": "   ", "pptx": ValueError("corrupt deck")})
    result = extract_content(
        ["u1/missing.pdf", "u1/b.docx", "u1/c.pptx", "u1/d.txt", "u1/a.pdf"], store, extractor=extractor
    )

    assert len(result.parts) == 1
    assert isinstance(result.parts[0], BlobPart)
    assert [s["filePath"] for s in result.skipped] == ["u1/missing.pdf", "u1/b.docx", "u1/c.pptx", "u1/d.txt"]
    assert result.skipped[0]["reason"].startswith("Download failed:")
    assert result.skipped[1]["reason"] == NO_TEXT_REASON
    assert result.skipped[2]["reason"] == "Processing failed: corrupt deck"
    assert result.skipped[3]["reason"] == NO_TEXT_REASON


def test_all_files_failing_gives_no_content():
    result = extract_content(["a.pdf", "b.pptx"], FakeBlobStore())
    assert result.has_content is False
    assert len(result.skipped) == 2


def test_stage_breadcrumb_follows_the_current_file():
    tracker = StageTracker()
    store = FakeBlobStore({"u1/a.pdf": b"%PDF"})
    extract_content(["u1/a.pdf"], store, on_stage=tracker)
    assert tracker.stage == "file.pdf.base64:u1/a.pdf"


def test_file_extension():
    assert file_extension("u1/m1/Deck.PPTX") == "pptx"
    assert file_extension("u1/m.1/README") == ""


def test_resolve_prefers_client_paths(db, seeded):
    module = db.get(ExamModule, seeded["module_id"])
    assert resolve_file_paths(db, module, USER_ID, ["x.pdf", "", 3]) == ["x.pdf"]


def test_resolve_falls_back_to_recorded_files(db, seeded):
    module = db.get(ExamModule, seeded["module_id"])
    expected = ["u1/m1/lecture.pdf", "u1/m1/slides.pptx"]
    assert resolve_file_paths(db, module, USER_ID, None) == expected
    assert resolve_file_paths(db, module, USER_ID, []) == expected
    assert resolve_file_paths(db, module, "someone-else", None) == []


def test_syllabus_parts_are_best_effort():
    store = FakeBlobStore({"u1/syllabus.png": b"img"})
    parts = syllabus_parts("exam-pdfs/u1/syllabus.png", store)
    assert isinstance(parts[0], TextPart)
    assert parts[1] == BlobPart(data=b"img", mime_type="image/png")

    assert syllabus_parts("u1/missing.pdf", store) == []
    assert syllabus_parts(None, store) == []
