from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from examprep.db.base import Base


class ExamSubject(Base):
    __tablename__ = "exam_subjects"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    exam_type: Mapped[str] = mapped_column(String(32), nullable=False, default="endterm")  # midterm|endterm|quiz|final|assignment

    # exam shape, read-only for generation
    questions_per_module: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    marks_per_question: Mapped[int] = mapped_column(Integer, nullable=False, default=10)

    # syllabus context
    important_questions: Mapped[str | None] = mapped_column(Text, nullable=True)
    syllabus_path: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[str] = mapped_column(DateTime(timezone=True), onupdate=func.now(), server_default=func.now())

    modules = relationship("ExamModule", back_populates="subject", cascade="all, delete-orphan")
