"""All-or-nothing execution of mutating ledger operations."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession

from app.services import ledger_state
from app.services.errors import LedgerError

# Serialises mutations within this process.  Across processes every unit
# first takes the ``ledger_state`` row lock, so writers from all workers run
# one at a time and each reads the rows its predecessor committed.
_mutation_lock = asyncio.Lock()
_logger = logging.getLogger("cropwise.ledger")


@asynccontextmanager
async def atomic(db: AsyncSession, operation: str, caller: str) -> AsyncIterator[None]:
	"""Run one mutating operation as a single committed-or-rolled-back unit."""
	async with _mutation_lock:
		try:
			await ledger_state.load_ledger_state(db, for_update=True)
			yield
			await db.commit()
		except LedgerError as exc:
			await db.rollback()
			_logger.warning(
				"ledger_operation_rejected",
				extra={"operation": operation, "caller": caller, "error": exc.code.value},
			)
			raise
		except Exception as exc:
			await db.rollback()
			_logger.error(
				"ledger_operation_failed",
				extra={"operation": operation, "caller": caller, "error": str(exc)},
			)
			raise
	_logger.info("ledger_operation_committed", extra={"operation": operation, "caller": caller})
