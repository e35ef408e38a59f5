"""Recommendation ledger routes — generate, best-fit lookup, feedback."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_caller
from app.database import get_db
from app.schemas.recommendation import (
	BestAnalysisRead,
	FeedbackIn,
	FeedbackRead,
	RecommendationCreated,
	RecommendationRead,
	WeatherReadingIn,
)
from app.services.errors import LedgerError
from app.services.ledger_service import LedgerService
from app.services.matching import WeatherReading

router = APIRouter(prefix="/recommendations", tags=["recommendations"])


def _map_error(exc: Exception) -> HTTPException:
	if isinstance(exc, LedgerError):
		return HTTPException(
			status_code=exc.status_code,
			detail={"error": exc.code.value, "message": exc.detail},
		)
	return HTTPException(
		status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
		detail="Unexpected ledger failure",
	)


def _not_found(message: str) -> HTTPException:
	return HTTPException(
		status_code=status.HTTP_404_NOT_FOUND,
		detail={"error": "not_found", "message": message},
	)


@router.post("", response_model=RecommendationCreated, status_code=status.HTTP_201_CREATED)
async def generate_recommendation(
	payload: WeatherReadingIn,
	db: AsyncSession = Depends(get_db),
	caller: str = Depends(get_caller),
) -> RecommendationCreated:
	service = LedgerService(db)
	weather = WeatherReading(
		temperature=payload.temperature,
		humidity=payload.humidity,
		uv_index=payload.uv_index,
		observed_at=payload.observed_at,
	)
	try:
		recommendation = await service.generate_recommendation(caller, weather)
	except Exception as exc:
		raise _map_error(exc) from exc
	return RecommendationCreated(recommendation_id=recommendation.id)


@router.get("/best-analysis", response_model=BestAnalysisRead)
async def find_best_analysis(
	temperature: int,
	humidity: int,
	uv_index: int,
	db: AsyncSession = Depends(get_db),
	caller: str = Depends(get_caller),
) -> BestAnalysisRead:
	service = LedgerService(db)
	weather = WeatherReading(temperature=temperature, humidity=humidity, uv_index=uv_index)
	try:
		analysis_id = await service.find_best_analysis(caller, weather)
	except Exception as exc:
		raise _map_error(exc) from exc
	return BestAnalysisRead(analysis_id=analysis_id)


@router.get("/{recommendation_id}", response_model=RecommendationRead)
async def get_recommendation(
	recommendation_id: int,
	db: AsyncSession = Depends(get_db),
	_caller: str = Depends(get_caller),
) -> RecommendationRead:
	recommendation = await LedgerService(db).get_recommendation(recommendation_id)
	if recommendation is None:
		raise _not_found(f"recommendation {recommendation_id} not present")
	return RecommendationRead.model_validate(recommendation)


@router.post(
	"/{recommendation_id}/feedback",
	response_model=FeedbackRead,
	status_code=status.HTTP_201_CREATED,
)
async def submit_feedback(
	recommendation_id: int,
	payload: FeedbackIn,
	db: AsyncSession = Depends(get_db),
	caller: str = Depends(get_caller),
) -> FeedbackRead:
	service = LedgerService(db)
	try:
		feedback = await service.submit_feedback(
			caller,
			recommendation_id,
			payload.rating,
			payload.comment,
		)
	except Exception as exc:
		raise _map_error(exc) from exc
	return FeedbackRead.model_validate(feedback)


@router.get("/{recommendation_id}/feedback", response_model=FeedbackRead)
async def get_feedback(
	recommendation_id: int,
	db: AsyncSession = Depends(get_db),
	_caller: str = Depends(get_caller),
) -> FeedbackRead:
	feedback = await LedgerService(db).get_feedback(recommendation_id)
	if feedback is None:
		raise _not_found(f"feedback for recommendation {recommendation_id} not present")
	return FeedbackRead.model_validate(feedback)
