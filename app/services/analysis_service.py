"""Analysis template authoring and lookup (the template store)."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.analysis import AnalysisTemplate
from app.models.enums import ErrorCodeEnum, VocabularyKindEnum
from app.schemas.analysis import AnalysisCreate
from app.services.access import AccessGate
from app.services.errors import LedgerError
from app.services.farm_service import FarmService
from app.services.ledger_state import allocate_analysis_id
from app.services.matching import (
	HUMIDITY_RANGE,
	TEMPERATURE_RANGE,
	UV_INDEX_RANGE,
	WeatherReading,
)
from app.services.transactions import atomic

MAX_CROP_TYPES = 5
MAX_CONDITIONS = 5
MAX_ACTIONS = 10


class AnalysisService:
	def __init__(self, db: AsyncSession):
		self.db = db
		self.gate = AccessGate(db)

	async def create_analysis(self, caller: str, payload: AnalysisCreate) -> AnalysisTemplate:
		async with atomic(self.db, "create_analysis", caller):
			await self.gate.require_verified_expert(caller)
			problems = self._payload_problems(payload)
			if problems:
				raise LedgerError(ErrorCodeEnum.invalid_analysis_data, "; ".join(problems))
			unknown = await FarmService(self.db).missing_terms(
				VocabularyKindEnum.crop_type, payload.crop_types
			)
			if unknown:
				raise LedgerError(
					ErrorCodeEnum.invalid_crop_type,
					f"unknown crop types: {', '.join(unknown)}",
				)

			analysis_id = await allocate_analysis_id(self.db)
			template = AnalysisTemplate(
				id=analysis_id,
				expert=caller,
				name=payload.name,
				description=payload.description,
				crop_types=list(payload.crop_types),
				conditions=[c.model_dump() for c in payload.conditions],
				min_temperature=payload.weather.min_temperature,
				max_temperature=payload.weather.max_temperature,
				min_humidity=payload.weather.min_humidity,
				max_humidity=payload.weather.max_humidity,
				max_uv_index=payload.weather.max_uv_index,
				actions=list(payload.actions),
				rating_count=0,
				average_rating=0,
			)
			self.db.add(template)
			await self.db.flush()
		return template

	async def get_analysis(self, analysis_id: int) -> AnalysisTemplate | None:
		return await self.db.get(AnalysisTemplate, analysis_id)

	async def list_weather_matches(self, weather: WeatherReading) -> list[AnalysisTemplate]:
		"""Templates whose weather envelope contains ``weather``, in id order.

		Crop-type membership lives in a JSON column and is checked by the
		matcher, not here.
		"""
		stmt = (
			select(AnalysisTemplate)
			.where(
				AnalysisTemplate.min_temperature <= weather.temperature,
				AnalysisTemplate.max_temperature >= weather.temperature,
				AnalysisTemplate.min_humidity <= weather.humidity,
				AnalysisTemplate.max_humidity >= weather.humidity,
				AnalysisTemplate.max_uv_index >= weather.uv_index,
			)
			.order_by(AnalysisTemplate.id.asc())
		)
		rows = await self.db.execute(stmt)
		return list(rows.scalars().all())

	@staticmethod
	def _payload_problems(payload: AnalysisCreate) -> list[str]:
		problems: list[str] = []
		if not payload.crop_types:
			problems.append("at least one crop type is required")
		if len(payload.crop_types) > MAX_CROP_TYPES:
			problems.append(f"at most {MAX_CROP_TYPES} crop types")
		if len(set(payload.crop_types)) != len(payload.crop_types):
			problems.append("crop types must not repeat")
		if len(payload.conditions) > MAX_CONDITIONS:
			problems.append(f"at most {MAX_CONDITIONS} conditions")
		if not payload.actions:
			problems.append("at least one action is required")
		if len(payload.actions) > MAX_ACTIONS:
			problems.append(f"at most {MAX_ACTIONS} actions")
		for condition in payload.conditions:
			if condition.min > condition.max:
				problems.append(f"condition {condition.metric!r} has min > max")

		weather = payload.weather
		if weather.min_temperature > weather.max_temperature:
			problems.append("min_temperature exceeds max_temperature")
		if weather.min_humidity > weather.max_humidity:
			problems.append("min_humidity exceeds max_humidity")
		bounds = (
			("min_temperature", weather.min_temperature, TEMPERATURE_RANGE),
			("max_temperature", weather.max_temperature, TEMPERATURE_RANGE),
			("min_humidity", weather.min_humidity, HUMIDITY_RANGE),
			("max_humidity", weather.max_humidity, HUMIDITY_RANGE),
			("max_uv_index", weather.max_uv_index, UV_INDEX_RANGE),
		)
		for field, value, (low, high) in bounds:
			if not low <= value <= high:
				problems.append(f"{field} must be within [{low}, {high}]")
		return problems
