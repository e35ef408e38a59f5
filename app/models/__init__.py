"""ORM model registry — importing this module registers every table on Base.metadata.

Alembic ``env.py`` imports ``Base`` from here (not from ``base.py``) so that
autogenerate sees all tables.  Application code can also do::

    from app.models import AnalysisTemplate, Recommendation, ...
"""

# ── Base & Mixins ───────────────────────────────────────────────────────────
from app.models.analysis import AnalysisTemplate
from app.models.base import Base, JSONType, UpdatedAtMixin

# ── Enums ───────────────────────────────────────────────────────────────────
from app.models.enums import ErrorCodeEnum, ErrorKindEnum, VocabularyKindEnum

# ── Ledger ──────────────────────────────────────────────────────────────────
from app.models.ledger import LEDGER_STATE_ID, Feedback, LedgerState, Recommendation

# ── Registry ────────────────────────────────────────────────────────────────
from app.models.registry import FarmProfile, VerifiedExpert, VocabularyTerm

__all__ = [
    "LEDGER_STATE_ID",
    # Knowledge base
    "AnalysisTemplate",
    # Base & mixins
    "Base",
    # Enums
    "ErrorCodeEnum",
    "ErrorKindEnum",
    # Registry
    "FarmProfile",
    # Ledger
    "Feedback",
    "JSONType",
    "LedgerState",
    "Recommendation",
    "UpdatedAtMixin",
    "VerifiedExpert",
    "VocabularyKindEnum",
    "VocabularyTerm",
]
