"""Pydantic schemas for analysis templates.

Count limits (crop types, conditions, actions) and range ordering are checked
by ``AnalysisService`` so violations surface as ``ERR-INVALID-ANALYSIS-DATA``
rather than as framework validation errors.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ConditionRange(BaseModel):
	metric: str = Field(min_length=1, max_length=64)
	min: int
	max: int


class WeatherRange(BaseModel):
	min_temperature: int
	max_temperature: int
	min_humidity: int
	max_humidity: int
	max_uv_index: int


class AnalysisCreate(BaseModel):
	name: str = Field(min_length=1, max_length=100)
	description: str = Field(default="", max_length=2000)
	crop_types: list[str]
	conditions: list[ConditionRange] = Field(default_factory=list)
	weather: WeatherRange
	actions: list[str]


class AnalysisRead(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	id: int
	expert: str
	name: str
	description: str
	crop_types: list[str]
	conditions: list[ConditionRange]
	weather: WeatherRange
	actions: list[str]
	rating_count: int
	average_rating: int
	created_at: datetime
