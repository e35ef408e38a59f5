"""Farm profile and vocabulary routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_caller
from app.database import get_db
from app.models.enums import VocabularyKindEnum
from app.schemas.farm import (
	FarmCreate,
	FarmRead,
	FarmUpdate,
	VocabularyRead,
	VocabularyTermCreate,
)
from app.services.errors import LedgerError
from app.services.farm_service import FarmService

router = APIRouter(prefix="/farms", tags=["farms"])
vocabulary_router = APIRouter(prefix="/vocabulary", tags=["vocabulary"])


def _map_error(exc: Exception) -> HTTPException:
	if isinstance(exc, LedgerError):
		return HTTPException(
			status_code=exc.status_code,
			detail={"error": exc.code.value, "message": exc.detail},
		)
	return HTTPException(
		status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
		detail="Unexpected farm service failure",
	)


@router.post("", response_model=FarmRead, status_code=status.HTTP_201_CREATED)
async def register_farm(
	payload: FarmCreate,
	db: AsyncSession = Depends(get_db),
	caller: str = Depends(get_caller),
) -> FarmRead:
	service = FarmService(db)
	try:
		farm = await service.register_farm(caller, payload)
	except Exception as exc:
		raise _map_error(exc) from exc
	return FarmRead.model_validate(farm)


@router.put("/me", response_model=FarmRead)
async def update_farm(
	payload: FarmUpdate,
	db: AsyncSession = Depends(get_db),
	caller: str = Depends(get_caller),
) -> FarmRead:
	service = FarmService(db)
	try:
		farm = await service.update_farm(caller, payload)
	except Exception as exc:
		raise _map_error(exc) from exc
	return FarmRead.model_validate(farm)


@router.get("/{owner}", response_model=FarmRead)
async def get_farm(
	owner: str,
	db: AsyncSession = Depends(get_db),
	_caller: str = Depends(get_caller),
) -> FarmRead:
	farm = await FarmService(db).get_farm(owner)
	if farm is None:
		raise HTTPException(
			status_code=status.HTTP_404_NOT_FOUND,
			detail={"error": "not_found", "message": f"farm {owner} not present"},
		)
	return FarmRead.model_validate(farm)


@vocabulary_router.post(
	"/{kind}",
	response_model=VocabularyRead,
	status_code=status.HTTP_201_CREATED,
)
async def add_vocabulary_term(
	kind: VocabularyKindEnum,
	payload: VocabularyTermCreate,
	db: AsyncSession = Depends(get_db),
	caller: str = Depends(get_caller),
) -> VocabularyRead:
	service = FarmService(db)
	try:
		await service.add_vocabulary_term(caller, kind, payload.term)
	except Exception as exc:
		raise _map_error(exc) from exc
	return VocabularyRead(kind=kind, terms=await service.list_vocabulary(kind))


@vocabulary_router.get("/{kind}", response_model=VocabularyRead)
async def list_vocabulary(
	kind: VocabularyKindEnum,
	db: AsyncSession = Depends(get_db),
) -> VocabularyRead:
	terms = await FarmService(db).list_vocabulary(kind)
	return VocabularyRead(kind=kind, terms=terms)
