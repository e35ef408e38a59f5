"""Pydantic schemas for expert verification and admin transfer."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ExpertVerify(BaseModel):
	principal: str = Field(min_length=1, max_length=128)
	credentials: str = Field(min_length=1, max_length=2000)


class ExpertRead(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	principal: str
	credentials: str
	reputation_score: int
	verified_at: datetime


class AdminTransfer(BaseModel):
	principal: str = Field(min_length=1, max_length=128)


class AdminRead(BaseModel):
	principal: str
