"""Access gate — read-only role and ownership predicates.

Every mutating service operation checks one of these before touching state.
None of them write; a failed predicate is turned into ``ERR-NOT-AUTHORIZED``
(or the relevant not-found code) by the caller.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import ErrorCodeEnum
from app.models.ledger import Recommendation
from app.models.registry import FarmProfile, VerifiedExpert
from app.services.errors import LedgerError
from app.services.ledger_state import load_ledger_state


class AccessGate:
	def __init__(self, db: AsyncSession):
		self.db = db

	async def is_admin(self, caller: str) -> bool:
		state = await load_ledger_state(self.db)
		return state.admin_principal == caller

	async def is_registered_participant(self, principal: str) -> bool:
		return await self.db.get(FarmProfile, principal) is not None

	async def is_verified_expert(self, principal: str) -> bool:
		return await self.db.get(VerifiedExpert, principal) is not None

	async def owns_recommendation(self, caller: str, recommendation_id: int) -> bool:
		recommendation = await self.db.get(Recommendation, recommendation_id)
		return recommendation is not None and recommendation.owner == caller

	async def require_admin(self, caller: str) -> None:
		if not await self.is_admin(caller):
			raise LedgerError(ErrorCodeEnum.not_authorized, "admin role required")

	async def require_verified_expert(self, caller: str) -> None:
		if not await self.is_verified_expert(caller):
			raise LedgerError(ErrorCodeEnum.not_authorized, "verified expert role required")
