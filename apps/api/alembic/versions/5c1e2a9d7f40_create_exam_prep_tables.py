"""create exam prep tables

Revision ID: 5c1e2a9d7f40
Revises:
Create Date: 2026-10-18 10:12:31.442918

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "5c1e2a9d7f40"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "exam_subjects",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("exam_type", sa.String(length=32), nullable=False, server_default="endterm"),
        sa.Column("questions_per_module", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("marks_per_question", sa.Integer(), nullable=False, server_default="10"),
        sa.Column("important_questions", sa.Text(), nullable=True),
        sa.Column("syllabus_path", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
    )
    op.create_index("ix_exam_subjects_user_id", "exam_subjects", ["user_id"])

    op.create_table(
        "exam_modules",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "subject_id",
            sa.Integer(),
            sa.ForeignKey("exam_subjects.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("module_number", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("summary", sa.Text(), nullable=True),
        sa.Column("error", sa.Text(), nullable=True),
        sa.Column("generation_version", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
    )
    op.create_index("ix_exam_modules_subject_id", "exam_modules", ["subject_id"])
    op.create_index("ix_exam_modules_user_id", "exam_modules", ["user_id"])
    op.create_index("ix_exam_modules_status", "exam_modules", ["status"])

    op.create_table(
        "exam_module_files",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "module_id",
            sa.Integer(),
            sa.ForeignKey("exam_modules.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("file_path", sa.Text(), nullable=False),
        sa.Column("file_name", sa.String(length=512), nullable=True),
        sa.Column("file_size", sa.BigInteger(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_exam_module_files_id", "exam_module_files", ["id"])
    op.create_index("ix_exam_module_files_module_id", "exam_module_files", ["module_id"])
    op.create_index("ix_exam_module_files_user_id", "exam_module_files", ["user_id"])

    op.create_table(
        "exam_questions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "module_id",
            sa.Integer(),
            sa.ForeignKey("exam_modules.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("question", sa.Text(), nullable=False),
        sa.Column("answer", sa.Text(), nullable=False),
        sa.Column("is_most_likely", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("visual_search_query", sa.String(length=512), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_exam_questions_id", "exam_questions", ["id"])
    op.create_index("ix_exam_questions_module_id", "exam_questions", ["module_id"])
    op.create_index("ix_exam_questions_user_id", "exam_questions", ["user_id"])

    op.create_table(
        "exam_flashcards",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "module_id",
            sa.Integer(),
            sa.ForeignKey("exam_modules.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("front", sa.Text(), nullable=False),
        sa.Column("back", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_exam_flashcards_id", "exam_flashcards", ["id"])
    op.create_index("ix_exam_flashcards_module_id", "exam_flashcards", ["module_id"])
    op.create_index("ix_exam_flashcards_user_id", "exam_flashcards", ["user_id"])


def downgrade() -> None:
    op.drop_table("exam_flashcards")
    op.drop_table("exam_questions")
    op.drop_table("exam_module_files")
    op.drop_table("exam_modules")
    op.drop_table("exam_subjects")
