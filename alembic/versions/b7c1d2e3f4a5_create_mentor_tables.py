"""create mentor tables

Revision ID: b7c1d2e3f4a5
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "b7c1d2e3f4a5"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _jsonb(default: str):
    return dict(
        type_=postgresql.JSONB(astext_type=sa.Text()),
        nullable=False,
        server_default=sa.text(f"'{default}'::jsonb"),
    )


def _has_table(name: str) -> bool:
    inspector = sa.inspect(op.get_bind())
    return name in inspector.get_table_names()


def upgrade() -> None:
    if not _has_table("challenges"):
        op.create_table(
            "challenges",
            sa.Column("id", postgresql.UUID(as_uuid=False), primary_key=True, nullable=False),
            sa.Column("title", sa.Text(), nullable=False),
            sa.Column("description", sa.Text(), nullable=False),
            sa.Column("difficulty", sa.String(length=16), nullable=False),
            sa.Column("category", sa.String(length=16), nullable=False),
            sa.Column("requirements", **_jsonb("[]")),
            sa.Column("hints", **_jsonb("[]")),
            sa.Column("technologies", **_jsonb("[]")),
            sa.Column("estimated_time", sa.Integer(), nullable=False),
            sa.Column("example_code", sa.Text(), nullable=True),
            sa.Column("user_id", sa.String(length=64), nullable=True),
            sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
            sa.CheckConstraint("difficulty IN ('beginner','intermediate','advanced')", name="ck_challenges_difficulty"),
            sa.CheckConstraint(
                "category IN ('react','javascript','css','typescript','nextjs','node','general')",
                name="ck_challenges_category",
            ),
            sa.CheckConstraint("estimated_time > 0", name="ck_challenges_estimated_time"),
        )
        op.create_index("ix_challenges_difficulty_category", "challenges", ["difficulty", "category"])

    if not _has_table("code_submissions"):
        op.create_table(
            "code_submissions",
            sa.Column("id", postgresql.UUID(as_uuid=False), primary_key=True, nullable=False),
            sa.Column("user_id", sa.String(length=64), nullable=False),
            sa.Column("challenge_id", postgresql.UUID(as_uuid=False), sa.ForeignKey("challenges.id"), nullable=False),
            sa.Column("code", sa.Text(), nullable=False),
            sa.Column("language", sa.String(length=16), nullable=False),
            sa.Column("submission_method", sa.String(length=16), nullable=False),
            sa.Column("github_url", sa.Text(), nullable=True),
            sa.Column("pastebin_url", sa.Text(), nullable=True),
            sa.Column("notes", sa.Text(), nullable=True),
            sa.Column("user_email", sa.Text(), nullable=False, server_default=""),
            sa.Column("user_name", sa.Text(), nullable=False, server_default=""),
            sa.Column("submitted_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
            sa.Column("is_reviewed", sa.Boolean(), nullable=False, server_default=sa.text("false")),
            sa.Column("review_id", postgresql.UUID(as_uuid=False), nullable=True),
            sa.Column("review_status", sa.String(length=16), nullable=False, server_default="pending"),
            sa.Column("review_attempts", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("last_error", sa.Text(), nullable=True),
            sa.CheckConstraint("char_length(code) <= 50000", name="ck_code_submissions_code_length"),
            sa.CheckConstraint(
                "review_status IN ('pending','processing','completed','failed')",
                name="ck_code_submissions_review_status",
            ),
        )
        op.create_index("ix_code_submissions_user_challenge", "code_submissions", ["user_id", "challenge_id"])
        op.create_index("ix_code_submissions_user_submitted", "code_submissions", ["user_id", "submitted_at"])

    if not _has_table("code_reviews"):
        op.create_table(
            "code_reviews",
            sa.Column("id", postgresql.UUID(as_uuid=False), primary_key=True, nullable=False),
            sa.Column(
                "submission_id",
                postgresql.UUID(as_uuid=False),
                sa.ForeignKey("code_submissions.id"),
                nullable=False,
            ),
            sa.Column("user_id", sa.String(length=64), nullable=False),
            sa.Column("challenge_id", postgresql.UUID(as_uuid=False), sa.ForeignKey("challenges.id"), nullable=False),
            sa.Column("overall_score", sa.Integer(), nullable=False),
            sa.Column("feedback", **_jsonb("{}")),
            sa.Column("code_quality", **_jsonb("{}")),
            sa.Column("career_tips", **_jsonb("[]")),
            sa.Column("next_steps", **_jsonb("[]")),
            sa.Column("resources", **_jsonb("[]")),
            sa.Column("reviewed_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
            sa.Column("ai_model", sa.String(length=128), nullable=False),
            sa.Column("review_version", sa.Integer(), nullable=False, server_default="1"),
            sa.CheckConstraint("overall_score BETWEEN 0 AND 10", name="ck_code_reviews_overall_score"),
        )
        op.create_index("ux_code_reviews_submission_id", "code_reviews", ["submission_id"], unique=True)
        op.create_index("ix_code_reviews_user_reviewed", "code_reviews", ["user_id", "reviewed_at"])

    if not _has_table("mentor_progress"):
        op.create_table(
            "mentor_progress",
            sa.Column("id", sa.BigInteger(), sa.Identity(), primary_key=True),
            sa.Column("user_id", sa.String(length=64), nullable=False),
            sa.Column("user_email", sa.Text(), nullable=False, server_default=""),
            sa.Column("user_name", sa.Text(), nullable=False, server_default=""),
            sa.Column("total_challenges", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("completed_challenges", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("average_score", sa.Float(), nullable=False, server_default="0"),
            sa.Column("current_streak", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("longest_streak", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("last_challenge_date", sa.DateTime(timezone=True), nullable=True),
            sa.Column("skill_scores", **_jsonb("{}")),
            sa.Column("difficulty_progress", **_jsonb("{}")),
            sa.Column("achievements", **_jsonb("[]")),
            sa.Column("weekly_goal", sa.Integer(), nullable=False, server_default="3"),
            sa.Column("monthly_stats", **_jsonb("[]")),
            sa.Column("joined_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
            sa.Column("last_active", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
            sa.CheckConstraint("weekly_goal BETWEEN 1 AND 20", name="ck_mentor_progress_weekly_goal"),
        )
        op.create_index("ux_mentor_progress_user_id", "mentor_progress", ["user_id"], unique=True)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS mentor_progress")
    op.execute("DROP TABLE IF EXISTS code_reviews")
    op.execute("DROP TABLE IF EXISTS code_submissions")
    op.execute("DROP TABLE IF EXISTS challenges")
