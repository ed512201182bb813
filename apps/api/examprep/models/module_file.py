from __future__ import annotations

from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Integer, String, Text, func

from examprep.db.base import Base


class ExamModuleFile(Base):
    __tablename__ = "exam_module_files"

    id = Column(Integer, primary_key=True, index=True)
    module_id = Column(Integer, ForeignKey("exam_modules.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(64), nullable=False, index=True)

    file_path = Column(Text, nullable=False)   # storage key (sometimes a full URL in legacy rows)
    file_name = Column(String(512), nullable=True)
    file_size = Column(BigInteger, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
