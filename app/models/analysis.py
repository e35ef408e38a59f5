"""AnalysisTemplate ORM model — the expert-authored knowledge base.

``conditions`` (JSON) holds up to five condition ranges::

    [
        {"metric": "soil_moisture", "min": 20, "max": 35},
        {"metric": "leaf_wetness", "min": 0, "max": 6}
    ]

The weather tuple is stored as flat columns so the matcher can pre-filter
candidates in SQL before ranking them in Python.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, JSONType, UpdatedAtMixin, utcnow


class AnalysisTemplate(Base, UpdatedAtMixin):
    """Maps crop types and a weather envelope to ordered recommended actions.

    ``id`` is allocated from the ledger's ``next_analysis_id`` counter, never
    by the database.  ``average_rating`` is 0 until the first rating lands;
    afterwards it stays within [1, 100].
    """

    __tablename__ = "analysis_templates"
    __table_args__ = (
        Index("ix_analysis_templates_expert", "expert"),
        CheckConstraint("rating_count >= 0", name="ck_analysis_templates_count"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    expert: Mapped[str] = mapped_column(
        String(128),
        ForeignKey("verified_experts.principal"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    crop_types: Mapped[list[str]] = mapped_column(JSONType, nullable=False)
    conditions: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONType, nullable=False, default=list
    )
    min_temperature: Mapped[int] = mapped_column(Integer, nullable=False)
    max_temperature: Mapped[int] = mapped_column(Integer, nullable=False)
    min_humidity: Mapped[int] = mapped_column(Integer, nullable=False)
    max_humidity: Mapped[int] = mapped_column(Integer, nullable=False)
    max_uv_index: Mapped[int] = mapped_column(Integer, nullable=False)
    actions: Mapped[list[str]] = mapped_column(JSONType, nullable=False)
    rating_count: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    average_rating: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"<AnalysisTemplate id={self.id} expert={self.expert!r} "
            f"rating={self.average_rating}x{self.rating_count}>"
        )
