"""Ledger state row — admin identity and the two monotonic id counters."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.ledger import LEDGER_STATE_ID, LedgerState

_logger = logging.getLogger("cropwise.ledger_state")


class LedgerStateMissingError(RuntimeError):
	"""Raised when an operation runs before the ledger state row is seeded."""


async def ensure_ledger_state(db: AsyncSession, admin_principal: str) -> LedgerState:
	"""Create the singleton row on first boot; an existing row is left untouched."""
	state = await db.get(LedgerState, LEDGER_STATE_ID)
	if state is not None:
		return state

	state = LedgerState(
		id=LEDGER_STATE_ID,
		admin_principal=admin_principal,
		next_analysis_id=1,
		next_recommendation_id=1,
	)
	db.add(state)
	await db.flush()
	_logger.info("ledger_state_seeded", extra={"admin": admin_principal})
	return state


async def load_ledger_state(db: AsyncSession, *, for_update: bool = False) -> LedgerState:
	"""Read the singleton row; ``for_update`` locks it and refreshes cached counters."""
	stmt = select(LedgerState).where(LedgerState.id == LEDGER_STATE_ID)
	if for_update:
		stmt = stmt.with_for_update().execution_options(populate_existing=True)
	row = await db.execute(stmt)
	state = row.scalar_one_or_none()
	if state is None:
		raise LedgerStateMissingError("ledger state has not been initialised")
	return state


async def allocate_analysis_id(db: AsyncSession) -> int:
	state = await load_ledger_state(db, for_update=True)
	allocated = state.next_analysis_id
	state.next_analysis_id = allocated + 1
	return allocated


async def allocate_recommendation_id(db: AsyncSession) -> int:
	state = await load_ledger_state(db, for_update=True)
	allocated = state.next_recommendation_id
	state.next_recommendation_id = allocated + 1
	return allocated
