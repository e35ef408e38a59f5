"""Pydantic schemas for recommendations and feedback.

Weather and rating fields are plain integers here; their domains are enforced
by ``LedgerService`` so that out-of-range values report the ledger's own
error codes.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class WeatherReadingIn(BaseModel):
	temperature: int
	humidity: int
	uv_index: int
	observed_at: datetime | None = None


class RecommendationCreated(BaseModel):
	recommendation_id: int


class BestAnalysisRead(BaseModel):
	analysis_id: int


class RecommendationRead(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	id: int
	owner: str
	analysis_id: int
	temperature: int
	humidity: int
	uv_index: int
	observed_at: datetime
	generated_at: datetime
	has_feedback: bool


class FeedbackIn(BaseModel):
	rating: int
	comment: str | None = Field(default=None, max_length=500)


class FeedbackRead(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	recommendation_id: int
	rater: str
	rating: int
	comment: str | None
	submitted_at: datetime
