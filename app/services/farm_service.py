"""Farm profile registry and admin-controlled vocabularies."""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import ErrorCodeEnum, VocabularyKindEnum
from app.models.registry import FarmProfile, VocabularyTerm
from app.schemas.farm import FarmCreate, FarmUpdate
from app.services.access import AccessGate
from app.services.errors import LedgerError
from app.services.transactions import atomic

MAX_HEALTH_METRICS = 5
MAX_GOALS = 5


class FarmService:
	"""Service for farm registration, owner updates and vocabulary lookups."""

	def __init__(self, db: AsyncSession):
		self.db = db
		self.gate = AccessGate(db)

	# ── Vocabulary ──────────────────────────────────────────────────────

	async def add_vocabulary_term(
		self,
		caller: str,
		kind: VocabularyKindEnum,
		term: str,
	) -> VocabularyTerm:
		async with atomic(self.db, "add_vocabulary_term", caller):
			await self.gate.require_admin(caller)
			if await self.has_term(kind, term):
				raise LedgerError(
					ErrorCodeEnum.vocabulary_term_exists,
					f"{kind.value} {term!r} already exists",
				)
			entry = VocabularyTerm(kind=kind, term=term)
			self.db.add(entry)
			await self.db.flush()
		return entry

	async def list_vocabulary(self, kind: VocabularyKindEnum) -> list[str]:
		stmt = (
			select(VocabularyTerm.term)
			.where(VocabularyTerm.kind == kind)
			.order_by(VocabularyTerm.id.asc())
		)
		rows = await self.db.execute(stmt)
		return list(rows.scalars().all())

	async def has_term(self, kind: VocabularyKindEnum, term: str) -> bool:
		stmt = select(VocabularyTerm.id).where(
			VocabularyTerm.kind == kind,
			VocabularyTerm.term == term,
		)
		row = await self.db.execute(stmt)
		return row.scalar_one_or_none() is not None

	async def missing_terms(self, kind: VocabularyKindEnum, terms: Iterable[str]) -> list[str]:
		known = set(await self.list_vocabulary(kind))
		return [term for term in terms if term not in known]

	# ── Farm profiles ───────────────────────────────────────────────────

	async def register_farm(self, caller: str, payload: FarmCreate) -> FarmProfile:
		async with atomic(self.db, "register_farm", caller):
			if await self.gate.is_registered_participant(caller):
				raise LedgerError(
					ErrorCodeEnum.farm_already_registered,
					f"{caller} already has a farm profile",
				)
			await self._validate_profile(payload)
			farm = FarmProfile(
				owner=caller,
				crop_type=payload.crop_type,
				farm_size=payload.farm_size,
				latitude=payload.latitude,
				longitude=payload.longitude,
				health_metrics=list(payload.health_metrics),
				goals=list(payload.goals),
			)
			self.db.add(farm)
			await self.db.flush()
		return farm

	async def update_farm(self, caller: str, payload: FarmUpdate) -> FarmProfile:
		async with atomic(self.db, "update_farm", caller):
			farm = await self.db.get(FarmProfile, caller)
			if farm is None:
				raise LedgerError(ErrorCodeEnum.farm_not_found, f"{caller} has no farm profile")
			await self._validate_profile(payload)
			farm.crop_type = payload.crop_type
			farm.farm_size = payload.farm_size
			farm.latitude = payload.latitude
			farm.longitude = payload.longitude
			farm.health_metrics = list(payload.health_metrics)
			farm.goals = list(payload.goals)
			await self.db.flush()
		return farm

	async def get_farm(self, owner: str) -> FarmProfile | None:
		return await self.db.get(FarmProfile, owner)

	async def _validate_profile(self, payload: FarmCreate) -> None:
		if not await self.has_term(VocabularyKindEnum.crop_type, payload.crop_type):
			raise LedgerError(
				ErrorCodeEnum.invalid_crop_type,
				f"unknown crop type {payload.crop_type!r}",
			)
		problems = self._profile_problems(payload)
		if problems:
			raise LedgerError(ErrorCodeEnum.invalid_farm_data, "; ".join(problems))

		unknown_metrics = await self.missing_terms(
			VocabularyKindEnum.health_metric, payload.health_metrics
		)
		if unknown_metrics:
			raise LedgerError(
				ErrorCodeEnum.invalid_farm_data,
				f"unknown health metrics: {', '.join(unknown_metrics)}",
			)
		unknown_goals = await self.missing_terms(VocabularyKindEnum.goal, payload.goals)
		if unknown_goals:
			raise LedgerError(
				ErrorCodeEnum.invalid_farm_data,
				f"unknown goals: {', '.join(unknown_goals)}",
			)

	@staticmethod
	def _profile_problems(payload: FarmCreate) -> list[str]:
		problems: list[str] = []
		if payload.farm_size <= 0:
			problems.append("farm_size must be positive")
		if not -90.0 <= payload.latitude <= 90.0:
			problems.append("latitude must be within [-90, 90]")
		if not -180.0 <= payload.longitude <= 180.0:
			problems.append("longitude must be within [-180, 180]")
		if len(payload.health_metrics) > MAX_HEALTH_METRICS:
			problems.append(f"at most {MAX_HEALTH_METRICS} health metrics")
		if len(payload.goals) > MAX_GOALS:
			problems.append(f"at most {MAX_GOALS} goals")
		return problems
