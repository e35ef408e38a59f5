"""Recommendation ledger ORM models — recommendations, feedback, ledger state.

Rows in this module are append-only except for ``Recommendation.has_feedback``
(flipped exactly once) and the counters on the singleton ``LedgerState`` row.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, utcnow

LEDGER_STATE_ID = 1

# ═══════════════════════════════════════════════════════════════════════════
# Ledger state
# ═══════════════════════════════════════════════════════════════════════════


class LedgerState(Base):
    """Singleton row: the admin principal and both monotonic id counters.

    Counters start at 1 and are advanced only inside the transaction that
    consumes the id, so a rolled-back operation never burns one.
    """

    __tablename__ = "ledger_state"
    __table_args__ = (
        CheckConstraint("id = 1", name="ck_ledger_state_singleton"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=False, default=LEDGER_STATE_ID
    )
    admin_principal: Mapped[str] = mapped_column(String(128), nullable=False)
    next_analysis_id: Mapped[int] = mapped_column(
        Integer, nullable=False, default=1, server_default=text("1")
    )
    next_recommendation_id: Mapped[int] = mapped_column(
        Integer, nullable=False, default=1, server_default=text("1")
    )

    def __repr__(self) -> str:
        return (
            f"<LedgerState admin={self.admin_principal!r} "
            f"next_analysis={self.next_analysis_id} "
            f"next_recommendation={self.next_recommendation_id}>"
        )


# ═══════════════════════════════════════════════════════════════════════════
# Recommendation
# ═══════════════════════════════════════════════════════════════════════════


class Recommendation(Base):
    """Binds one farm, one selected template and one weather snapshot."""

    __tablename__ = "recommendations"
    __table_args__ = (Index("ix_recommendations_owner", "owner"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    owner: Mapped[str] = mapped_column(
        String(128),
        ForeignKey("farm_profiles.owner"),
        nullable=False,
    )
    analysis_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("analysis_templates.id"),
        nullable=False,
    )
    temperature: Mapped[int] = mapped_column(Integer, nullable=False)
    humidity: Mapped[int] = mapped_column(Integer, nullable=False)
    uv_index: Mapped[int] = mapped_column(Integer, nullable=False)
    observed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    generated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )
    has_feedback: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        server_default=text("false"),
        nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"<Recommendation id={self.id} owner={self.owner!r} "
            f"analysis={self.analysis_id} rated={self.has_feedback}>"
        )


# ═══════════════════════════════════════════════════════════════════════════
# Feedback
# ═══════════════════════════════════════════════════════════════════════════


class Feedback(Base):
    """One-time rating of a recommendation.

    ``rater`` is the template's authoring expert (the party whose reputation
    the rating moves), not the farm that submitted it.
    """

    __tablename__ = "feedback"
    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 100", name="ck_feedback_rating_range"),
    )

    recommendation_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("recommendations.id"),
        primary_key=True,
        autoincrement=False,
    )
    rater: Mapped[str] = mapped_column(String(128), nullable=False)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[str | None] = mapped_column(String(500), nullable=True)
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"<Feedback recommendation={self.recommendation_id} "
            f"rater={self.rater!r} rating={self.rating}>"
        )
