"""Recommendation ledger — generation, best-fit lookup and one-time feedback.

Every mutating call runs inside :func:`app.services.transactions.atomic`:
all preconditions are checked before the first write, and feedback settlement
(flag flip, feedback row, template and expert score updates) is committed as
one unit or not at all.
"""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.analysis import AnalysisTemplate
from app.models.base import utcnow
from app.models.enums import ErrorCodeEnum
from app.models.ledger import Feedback, Recommendation
from app.models.registry import FarmProfile, VerifiedExpert
from app.services import reputation
from app.services.access import AccessGate
from app.services.analysis_service import AnalysisService
from app.services.errors import LedgerError
from app.services.ledger_state import allocate_recommendation_id
from app.services.matching import WeatherReading, select_template
from app.services.transactions import atomic

MAX_COMMENT_LENGTH = 500


class LedgerService:
	"""Service for recommendation lifecycle and feedback settlement."""

	def __init__(self, db: AsyncSession):
		self.db = db
		self.gate = AccessGate(db)

	async def generate_recommendation(self, caller: str, weather: WeatherReading) -> Recommendation:
		async with atomic(self.db, "generate_recommendation", caller):
			farm = await self._require_farm(caller)
			self._require_weather(weather)
			analysis_id = await self._match(farm, weather)

			recommendation_id = await allocate_recommendation_id(self.db)
			recommendation = Recommendation(
				id=recommendation_id,
				owner=caller,
				analysis_id=analysis_id,
				temperature=weather.temperature,
				humidity=weather.humidity,
				uv_index=weather.uv_index,
				observed_at=weather.observed_at or utcnow(),
				has_feedback=False,
			)
			self.db.add(recommendation)
			await self.db.flush()
		return recommendation

	async def find_best_analysis(self, caller: str, weather: WeatherReading) -> int:
		"""Read-only variant of the matcher; nothing is written.

		Out-of-domain weather is rejected with ``ERR-INVALID-WEATHER-DATA`` here
		too, matching ``generate_recommendation``.
		"""
		farm = await self._require_farm(caller)
		self._require_weather(weather)
		return await self._match(farm, weather)

	async def submit_feedback(
		self,
		caller: str,
		recommendation_id: int,
		rating: int,
		comment: str | None = None,
	) -> Feedback:
		async with atomic(self.db, "submit_feedback", caller):
			recommendation = await self.db.get(
				Recommendation, recommendation_id, populate_existing=True
			)
			if recommendation is None:
				raise LedgerError(
					ErrorCodeEnum.recommendation_not_found,
					f"recommendation {recommendation_id} not found",
				)
			if not await self.gate.owns_recommendation(caller, recommendation_id):
				raise LedgerError(
					ErrorCodeEnum.not_authorized,
					"only the recommendation owner may rate it",
				)
			if recommendation.has_feedback:
				raise LedgerError(
					ErrorCodeEnum.already_rated,
					f"recommendation {recommendation_id} already rated",
				)
			if not reputation.RATING_MIN <= rating <= reputation.RATING_MAX:
				raise LedgerError(
					ErrorCodeEnum.invalid_rating,
					f"rating must be within [{reputation.RATING_MIN}, {reputation.RATING_MAX}]",
				)
			if comment is not None and len(comment) > MAX_COMMENT_LENGTH:
				raise LedgerError(
					ErrorCodeEnum.invalid_comment,
					f"comment must be at most {MAX_COMMENT_LENGTH} characters",
				)

			template = await self.db.get(
				AnalysisTemplate, recommendation.analysis_id, populate_existing=True
			)
			if template is None:
				raise LedgerError(
					ErrorCodeEnum.analysis_not_found,
					f"analysis {recommendation.analysis_id} not found",
				)
			expert = await self.db.get(VerifiedExpert, template.expert, populate_existing=True)
			if expert is None:
				raise LedgerError(
					ErrorCodeEnum.expert_not_found,
					f"expert {template.expert} not found",
				)

			recommendation.has_feedback = True
			feedback = Feedback(
				recommendation_id=recommendation.id,
				rater=template.expert,
				rating=rating,
				comment=comment,
			)
			self.db.add(feedback)
			reputation.apply_feedback(template, expert, rating)
			await self.db.flush()
		return feedback

	async def get_recommendation(self, recommendation_id: int) -> Recommendation | None:
		return await self.db.get(Recommendation, recommendation_id)

	async def get_feedback(self, recommendation_id: int) -> Feedback | None:
		return await self.db.get(Feedback, recommendation_id)

	async def _require_farm(self, caller: str) -> FarmProfile:
		farm = await self.db.get(FarmProfile, caller)
		if farm is None:
			raise LedgerError(ErrorCodeEnum.farm_not_found, f"{caller} has no farm profile")
		return farm

	@staticmethod
	def _require_weather(weather: WeatherReading) -> None:
		if not weather.in_domain():
			raise LedgerError(
				ErrorCodeEnum.invalid_weather_data,
				"temperature must be within [-50, 50], humidity within [0, 100], "
				"uv_index within [0, 12]",
			)

	async def _match(self, farm: FarmProfile, weather: WeatherReading) -> int:
		templates = await AnalysisService(self.db).list_weather_matches(weather)
		reputations = await self._reputations(t.expert for t in templates)
		analysis_id = select_template(templates, farm.crop_type, weather, reputations)
		if analysis_id is None:
			raise LedgerError(
				ErrorCodeEnum.analysis_not_found,
				f"no analysis matches crop {farm.crop_type!r} under the given weather",
			)
		return analysis_id

	async def _reputations(self, principals: Iterable[str]) -> dict[str, int]:
		wanted = set(principals)
		if not wanted:
			return {}
		stmt = select(VerifiedExpert.principal, VerifiedExpert.reputation_score).where(
			VerifiedExpert.principal.in_(sorted(wanted))
		)
		rows = await self.db.execute(stmt)
		return {principal: score for principal, score in rows.all()}
