"""Enum types for ORM columns and the ledger error taxonomy.

Each column StrEnum maps 1:1 to a PostgreSQL CREATE TYPE ... AS ENUM.
These are separate from the Pydantic StrEnum in app/config.py —
config enums validate settings, ORM enums type database columns.
"""

from enum import StrEnum

# ── Registry enums ──────────────────────────────────────────────────────────


class VocabularyKindEnum(StrEnum):
    """Admin-controlled vocabularies referenced by profiles and templates."""

    crop_type = "crop_type"
    health_metric = "health_metric"
    goal = "goal"


# ── Error taxonomy ──────────────────────────────────────────────────────────


class ErrorKindEnum(StrEnum):
    """Failure classes shared by every ledger operation."""

    authorization = "authorization"
    not_found = "not_found"
    conflict = "conflict"
    invalid_input = "invalid_input"


class ErrorCodeEnum(StrEnum):
    """Wire-level error codes returned to callers."""

    not_authorized = "ERR-NOT-AUTHORIZED"
    farm_not_found = "ERR-FARM-NOT-FOUND"
    expert_not_found = "ERR-EXPERT-NOT-FOUND"
    analysis_not_found = "ERR-ANALYSIS-NOT-FOUND"
    recommendation_not_found = "ERR-RECOMMENDATION-NOT-FOUND"
    expert_already_verified = "ERR-EXPERT-ALREADY-VERIFIED"
    farm_already_registered = "ERR-FARM-ALREADY-REGISTERED"
    vocabulary_term_exists = "ERR-VOCABULARY-TERM-EXISTS"
    already_rated = "ERR-ALREADY-RATED"
    invalid_weather_data = "ERR-INVALID-WEATHER-DATA"
    invalid_rating = "ERR-INVALID-RATING"
    invalid_comment = "ERR-INVALID-COMMENT"
    invalid_crop_type = "ERR-INVALID-CROP-TYPE"
    invalid_farm_data = "ERR-INVALID-FARM-DATA"
    invalid_analysis_data = "ERR-INVALID-ANALYSIS-DATA"
