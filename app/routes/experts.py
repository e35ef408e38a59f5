"""Expert verification and admin identity routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_caller
from app.database import get_db
from app.schemas.expert import AdminRead, AdminTransfer, ExpertRead, ExpertVerify
from app.services.errors import LedgerError
from app.services.expert_service import ExpertService

router = APIRouter(tags=["experts"])


def _map_error(exc: Exception) -> HTTPException:
	if isinstance(exc, LedgerError):
		return HTTPException(
			status_code=exc.status_code,
			detail={"error": exc.code.value, "message": exc.detail},
		)
	return HTTPException(
		status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
		detail="Unexpected expert service failure",
	)


@router.post("/experts", response_model=ExpertRead, status_code=status.HTTP_201_CREATED)
async def verify_expert(
	payload: ExpertVerify,
	db: AsyncSession = Depends(get_db),
	caller: str = Depends(get_caller),
) -> ExpertRead:
	service = ExpertService(db)
	try:
		expert = await service.verify_expert(caller, payload.principal, payload.credentials)
	except Exception as exc:
		raise _map_error(exc) from exc
	return ExpertRead.model_validate(expert)


@router.get("/experts/{principal}", response_model=ExpertRead)
async def get_expert(
	principal: str,
	db: AsyncSession = Depends(get_db),
	_caller: str = Depends(get_caller),
) -> ExpertRead:
	expert = await ExpertService(db).get_expert(principal)
	if expert is None:
		raise HTTPException(
			status_code=status.HTTP_404_NOT_FOUND,
			detail={"error": "not_found", "message": f"expert {principal} not present"},
		)
	return ExpertRead.model_validate(expert)


@router.get("/admin", response_model=AdminRead)
async def get_admin(
	db: AsyncSession = Depends(get_db),
	_caller: str = Depends(get_caller),
) -> AdminRead:
	return AdminRead(principal=await ExpertService(db).get_admin())


@router.put("/admin", response_model=AdminRead)
async def transfer_admin(
	payload: AdminTransfer,
	db: AsyncSession = Depends(get_db),
	caller: str = Depends(get_caller),
) -> AdminRead:
	service = ExpertService(db)
	try:
		principal = await service.transfer_admin(caller, payload.principal)
	except Exception as exc:
		raise _map_error(exc) from exc
	return AdminRead(principal=principal)
