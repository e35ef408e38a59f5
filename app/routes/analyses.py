"""Analysis template routes — expert authoring and lookup."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_caller
from app.database import get_db
from app.schemas.analysis import AnalysisCreate, AnalysisRead, ConditionRange, WeatherRange
from app.services.analysis_service import AnalysisService
from app.services.errors import LedgerError

router = APIRouter(prefix="/analyses", tags=["analyses"])


def _map_error(exc: Exception) -> HTTPException:
	if isinstance(exc, LedgerError):
		return HTTPException(
			status_code=exc.status_code,
			detail={"error": exc.code.value, "message": exc.detail},
		)
	return HTTPException(
		status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
		detail="Unexpected analysis service failure",
	)


def _to_analysis_read(template: Any) -> AnalysisRead:
	return AnalysisRead(
		id=template.id,
		expert=template.expert,
		name=template.name,
		description=template.description,
		crop_types=list(template.crop_types),
		conditions=[ConditionRange(**condition) for condition in template.conditions],
		weather=WeatherRange(
			min_temperature=template.min_temperature,
			max_temperature=template.max_temperature,
			min_humidity=template.min_humidity,
			max_humidity=template.max_humidity,
			max_uv_index=template.max_uv_index,
		),
		actions=list(template.actions),
		rating_count=template.rating_count,
		average_rating=template.average_rating,
		created_at=template.created_at,
	)


@router.post("", response_model=AnalysisRead, status_code=status.HTTP_201_CREATED)
async def create_analysis(
	payload: AnalysisCreate,
	db: AsyncSession = Depends(get_db),
	caller: str = Depends(get_caller),
) -> AnalysisRead:
	service = AnalysisService(db)
	try:
		template = await service.create_analysis(caller, payload)
	except Exception as exc:
		raise _map_error(exc) from exc
	return _to_analysis_read(template)


@router.get("/{analysis_id}", response_model=AnalysisRead)
async def get_analysis(
	analysis_id: int,
	db: AsyncSession = Depends(get_db),
	_caller: str = Depends(get_caller),
) -> AnalysisRead:
	template = await AnalysisService(db).get_analysis(analysis_id)
	if template is None:
		raise HTTPException(
			status_code=status.HTTP_404_NOT_FOUND,
			detail={"error": "not_found", "message": f"analysis {analysis_id} not present"},
		)
	return _to_analysis_read(template)
