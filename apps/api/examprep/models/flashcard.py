from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, func

from examprep.db.base import Base


class ExamFlashcard(Base):
    __tablename__ = "exam_flashcards"

    id = Column(Integer, primary_key=True, index=True)
    module_id = Column(Integer, ForeignKey("exam_modules.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(64), nullable=False, index=True)

    front = Column(Text, nullable=False)
    back = Column(Text, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
