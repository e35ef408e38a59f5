"""Expert verification and admin identity management."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import ErrorCodeEnum
from app.models.registry import VerifiedExpert
from app.services.access import AccessGate
from app.services.errors import LedgerError
from app.services.ledger_state import load_ledger_state
from app.services.reputation import INITIAL_REPUTATION
from app.services.transactions import atomic


class ExpertService:
	def __init__(self, db: AsyncSession):
		self.db = db
		self.gate = AccessGate(db)

	async def verify_expert(self, caller: str, principal: str, credentials: str) -> VerifiedExpert:
		"""Admin-only: register ``principal`` as a verified expert at reputation 80."""
		async with atomic(self.db, "verify_expert", caller):
			await self.gate.require_admin(caller)
			if await self.gate.is_verified_expert(principal):
				raise LedgerError(
					ErrorCodeEnum.expert_already_verified,
					f"{principal} is already verified",
				)
			expert = VerifiedExpert(
				principal=principal,
				credentials=credentials,
				reputation_score=INITIAL_REPUTATION,
			)
			self.db.add(expert)
			await self.db.flush()
		return expert

	async def get_expert(self, principal: str) -> VerifiedExpert | None:
		return await self.db.get(VerifiedExpert, principal)

	async def get_admin(self) -> str:
		state = await load_ledger_state(self.db)
		return state.admin_principal

	async def transfer_admin(self, caller: str, new_admin: str) -> str:
		async with atomic(self.db, "transfer_admin", caller):
			await self.gate.require_admin(caller)
			state = await load_ledger_state(self.db, for_update=True)
			state.admin_principal = new_admin
			await self.db.flush()
		return new_admin
