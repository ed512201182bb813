import os

os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["EXAM_PREP_PROVIDER"] = "gemini"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from examprep.api.deps import get_blob_store, get_current_user_id, get_generative_client  # noqa: E402
from examprep.core.errors import BlobDownloadError  # noqa: E402
from examprep.db.base import Base  # noqa: E402
from examprep.db.session import get_db  # noqa: E402
from examprep.main import app  # noqa: E402
from examprep.models import ExamModule, ExamModuleFile, ExamSubject  # noqa: E402

USER_ID = "user-1"
OTHER_USER_ID = "user-2"


class FakeBlobStore:
    def __init__(self, files: dict[str, bytes] | None = None):
        self.files = dict(files or {})
        self.downloads: list[str] = []

    def download(self, key: str) -> bytes:
        self.downloads.append(key)
        if key not in self.files:
            raise BlobDownloadError("Object not found")
        return self.files[key]


class FakeGenerator:
    """Plays back canned responses; an Exception instance in the list is raised."""

    def __init__(self, responses=None, text: str = ""):
        self.responses = list(responses or [])
        self.text = text
        self.calls: list[list] = []

    def generate_json(self, parts):
        self.calls.append(list(parts))
        if not self.responses:
            raise AssertionError("generator called more times than expected")
        r = self.responses.pop(0)
        if isinstance(r, Exception):
            raise r
        return r

    def generate_text(self, parts):
        self.calls.append(list(parts))
        return self.text


def make_payload(n_questions=8, flagged=(0, 1), n_flashcards=20, summary="First point. Second point."):
    return {
        "questions": [
            {"question": f"Q{i}?", "answer": f"A{i}", "is_most_likely": i in flagged}
            for i in range(n_questions)
        ],
        "flashcards": [{"front": f"Term {i}", "back": f"Meaning {i}"} for i in range(n_flashcards)],
        "summary": summary,
    }


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(eng)
    yield eng
    Base.metadata.drop_all(eng)
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def db(session_factory):
    s = session_factory()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def seeded(db):
    """One subject with one module and two recorded files (PDF then PPTX)."""
    subject = ExamSubject(
        user_id=USER_ID,
        name="Operating Systems",
        exam_type="midterm",
        questions_per_module=1,
        marks_per_question=5,
    )
    db.add(subject)
    db.flush()

    module = ExamModule(subject_id=subject.id, user_id=USER_ID, name="Scheduling", module_number=2)
    db.add(module)
    db.flush()

    db.add_all(
        [
            ExamModuleFile(module_id=module.id, user_id=USER_ID, file_path="u1/m1/lecture.pdf", file_name="lecture.pdf"),
            ExamModuleFile(module_id=module.id, user_id=USER_ID, file_path="u1/m1/slides.pptx", file_name="slides.pptx"),
        ]
    )
    db.commit()
    return {"subject_id": subject.id, "module_id": module.id}


@pytest.fixture
def blob_store():
    return FakeBlobStore({"u1/m1/lecture.pdf": b"%PDF-1.4 fake"})


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def client(session_factory, blob_store, generator):
    def _get_db():
        s = session_factory()
        try:
            yield s
        finally:
            s.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_current_user_id] = lambda: USER_ID
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    app.dependency_overrides[get_generative_client] = lambda: generator
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
