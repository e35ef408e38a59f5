"""initial_ledger_schema

Revision ID: 3c91d0e7a4b2
Revises:
Create Date: 2026-10-19 00:00:00.000000

Creates the seven Cropwise tables (vocabulary, farm profiles, verified
experts, analysis templates, ledger state, recommendations, feedback) and the
``vocabulary_kind`` enum type.  The ledger state row itself is seeded by the
application at startup from ``ADMIN_PRINCIPAL``.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "3c91d0e7a4b2"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

ENUM_VOCABULARY_KIND = postgresql.ENUM(
    "crop_type", "health_metric", "goal", name="vocabulary_kind", create_type=False
)


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        server_default=sa.text("now()"),
        nullable=False,
    )


def upgrade() -> None:
    # ── 1. Enum types ───────────────────────────────────────────────────
    ENUM_VOCABULARY_KIND.create(op.get_bind(), checkfirst=True)

    # ── 2. Registry ─────────────────────────────────────────────────────

    op.create_table(
        "vocabulary_terms",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("kind", ENUM_VOCABULARY_KIND, nullable=False),
        sa.Column("term", sa.String(64), nullable=False),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("kind", "term", name="uq_vocabulary_terms_kind_term"),
    )

    op.create_table(
        "farm_profiles",
        sa.Column("owner", sa.String(128), nullable=False),
        sa.Column("crop_type", sa.String(64), nullable=False),
        sa.Column("farm_size", sa.Integer(), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=False),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("health_metrics", postgresql.JSONB(), nullable=False),
        sa.Column("goals", postgresql.JSONB(), nullable=False),
        _timestamp("registered_at"),
        _timestamp("updated_at"),
        sa.CheckConstraint("farm_size > 0", name="ck_farm_profiles_size_positive"),
        sa.PrimaryKeyConstraint("owner"),
    )

    op.create_table(
        "verified_experts",
        sa.Column("principal", sa.String(128), nullable=False),
        sa.Column("credentials", sa.Text(), nullable=False),
        sa.Column("reputation_score", sa.Integer(), nullable=False),
        _timestamp("verified_at"),
        _timestamp("updated_at"),
        sa.CheckConstraint(
            "reputation_score >= 0 AND reputation_score <= 100",
            name="ck_verified_experts_reputation_range",
        ),
        sa.PrimaryKeyConstraint("principal"),
    )

    # ── 3. Knowledge base ───────────────────────────────────────────────

    op.create_table(
        "analysis_templates",
        sa.Column("id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("expert", sa.String(128), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("crop_types", postgresql.JSONB(), nullable=False),
        sa.Column("conditions", postgresql.JSONB(), nullable=False),
        sa.Column("min_temperature", sa.Integer(), nullable=False),
        sa.Column("max_temperature", sa.Integer(), nullable=False),
        sa.Column("min_humidity", sa.Integer(), nullable=False),
        sa.Column("max_humidity", sa.Integer(), nullable=False),
        sa.Column("max_uv_index", sa.Integer(), nullable=False),
        sa.Column("actions", postgresql.JSONB(), nullable=False),
        sa.Column("rating_count", sa.BigInteger(), nullable=False),
        sa.Column("average_rating", sa.Integer(), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.CheckConstraint("rating_count >= 0", name="ck_analysis_templates_count"),
        sa.ForeignKeyConstraint(["expert"], ["verified_experts.principal"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_analysis_templates_expert", "analysis_templates", ["expert"])

    # ── 4. Ledger ───────────────────────────────────────────────────────

    op.create_table(
        "ledger_state",
        sa.Column("id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("admin_principal", sa.String(128), nullable=False),
        sa.Column(
            "next_analysis_id", sa.Integer(), server_default=sa.text("1"), nullable=False
        ),
        sa.Column(
            "next_recommendation_id",
            sa.Integer(),
            server_default=sa.text("1"),
            nullable=False,
        ),
        sa.CheckConstraint("id = 1", name="ck_ledger_state_singleton"),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "recommendations",
        sa.Column("id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("owner", sa.String(128), nullable=False),
        sa.Column("analysis_id", sa.Integer(), nullable=False),
        sa.Column("temperature", sa.Integer(), nullable=False),
        sa.Column("humidity", sa.Integer(), nullable=False),
        sa.Column("uv_index", sa.Integer(), nullable=False),
        sa.Column("observed_at", sa.DateTime(timezone=True), nullable=False),
        _timestamp("generated_at"),
        sa.Column(
            "has_feedback", sa.Boolean(), server_default=sa.text("false"), nullable=False
        ),
        sa.ForeignKeyConstraint(["owner"], ["farm_profiles.owner"]),
        sa.ForeignKeyConstraint(["analysis_id"], ["analysis_templates.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_recommendations_owner", "recommendations", ["owner"])

    op.create_table(
        "feedback",
        sa.Column("recommendation_id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("rater", sa.String(128), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("comment", sa.String(500), nullable=True),
        _timestamp("submitted_at"),
        sa.CheckConstraint("rating >= 1 AND rating <= 100", name="ck_feedback_rating_range"),
        sa.ForeignKeyConstraint(["recommendation_id"], ["recommendations.id"]),
        sa.PrimaryKeyConstraint("recommendation_id"),
    )


def downgrade() -> None:
    # ── Drop tables in reverse dependency order ─────────────────────────
    op.drop_table("feedback")
    op.drop_index("ix_recommendations_owner", table_name="recommendations")
    op.drop_table("recommendations")
    op.drop_table("ledger_state")
    op.drop_index("ix_analysis_templates_expert", table_name="analysis_templates")
    op.drop_table("analysis_templates")
    op.drop_table("verified_experts")
    op.drop_table("farm_profiles")
    op.drop_table("vocabulary_terms")

    # ── Drop enum types ─────────────────────────────────────────────────
    ENUM_VOCABULARY_KIND.drop(op.get_bind(), checkfirst=True)
