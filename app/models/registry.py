"""Participant registry ORM models — farms, verified experts, vocabularies.

Participants are keyed by their caller principal (the ``sub`` claim of the
bearer token) rather than a surrogate id: a principal owns at most one farm
profile and can be verified as an expert at most once.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Enum,
    Float,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, JSONType, UpdatedAtMixin, utcnow
from app.models.enums import VocabularyKindEnum

# ═══════════════════════════════════════════════════════════════════════════
# Vocabulary
# ═══════════════════════════════════════════════════════════════════════════


class VocabularyTerm(Base):
    """One admin-approved term (crop type, health metric or goal)."""

    __tablename__ = "vocabulary_terms"
    __table_args__ = (
        UniqueConstraint("kind", "term", name="uq_vocabulary_terms_kind_term"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    kind: Mapped[VocabularyKindEnum] = mapped_column(
        Enum(
            VocabularyKindEnum,
            name="vocabulary_kind",
            create_constraint=False,
            native_enum=True,
        ),
        nullable=False,
    )
    term: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<VocabularyTerm kind={self.kind} term={self.term!r}>"


# ═══════════════════════════════════════════════════════════════════════════
# Farm profile
# ═══════════════════════════════════════════════════════════════════════════


class FarmProfile(Base, UpdatedAtMixin):
    """A registered participant farm.

    ``health_metrics`` and ``goals`` are short lists (at most five entries
    each) of vocabulary terms, stored as JSON arrays.
    """

    __tablename__ = "farm_profiles"
    __table_args__ = (
        CheckConstraint("farm_size > 0", name="ck_farm_profiles_size_positive"),
    )

    owner: Mapped[str] = mapped_column(String(128), primary_key=True)
    crop_type: Mapped[str] = mapped_column(String(64), nullable=False)
    farm_size: Mapped[int] = mapped_column(Integer, nullable=False)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    health_metrics: Mapped[list[str]] = mapped_column(
        JSONType, nullable=False, default=list
    )
    goals: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    registered_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<FarmProfile owner={self.owner!r} crop={self.crop_type!r}>"


# ═══════════════════════════════════════════════════════════════════════════
# Verified expert
# ═══════════════════════════════════════════════════════════════════════════


class VerifiedExpert(Base, UpdatedAtMixin):
    """A domain expert verified by the admin.

    ``reputation_score`` is the only field that changes after creation and
    only the reputation aggregator writes it.
    """

    __tablename__ = "verified_experts"
    __table_args__ = (
        CheckConstraint(
            "reputation_score >= 0 AND reputation_score <= 100",
            name="ck_verified_experts_reputation_range",
        ),
    )

    principal: Mapped[str] = mapped_column(String(128), primary_key=True)
    credentials: Mapped[str] = mapped_column(Text, nullable=False)
    reputation_score: Mapped[int] = mapped_column(Integer, nullable=False)
    verified_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"<VerifiedExpert principal={self.principal!r} "
            f"reputation={self.reputation_score}>"
        )
