"""Pydantic request/response schemas for farm profiles and vocabularies."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import VocabularyKindEnum


class FarmCreate(BaseModel):
	crop_type: str = Field(min_length=1, max_length=64)
	farm_size: int
	latitude: float
	longitude: float
	health_metrics: list[str] = Field(default_factory=list)
	goals: list[str] = Field(default_factory=list)


class FarmUpdate(FarmCreate):
	pass


class FarmRead(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	owner: str
	crop_type: str
	farm_size: int
	latitude: float
	longitude: float
	health_metrics: list[str]
	goals: list[str]
	registered_at: datetime
	updated_at: datetime


class VocabularyTermCreate(BaseModel):
	term: str = Field(min_length=1, max_length=64)


class VocabularyRead(BaseModel):
	kind: VocabularyKindEnum
	terms: list[str]
