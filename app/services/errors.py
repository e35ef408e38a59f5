"""Ledger error type shared by every service operation."""

from __future__ import annotations

from dataclasses import dataclass

from app.models.enums import ErrorCodeEnum, ErrorKindEnum

_KIND_BY_CODE: dict[ErrorCodeEnum, ErrorKindEnum] = {
	ErrorCodeEnum.not_authorized: ErrorKindEnum.authorization,
	ErrorCodeEnum.farm_not_found: ErrorKindEnum.not_found,
	ErrorCodeEnum.expert_not_found: ErrorKindEnum.not_found,
	ErrorCodeEnum.analysis_not_found: ErrorKindEnum.not_found,
	ErrorCodeEnum.recommendation_not_found: ErrorKindEnum.not_found,
	ErrorCodeEnum.expert_already_verified: ErrorKindEnum.conflict,
	ErrorCodeEnum.farm_already_registered: ErrorKindEnum.conflict,
	ErrorCodeEnum.vocabulary_term_exists: ErrorKindEnum.conflict,
	ErrorCodeEnum.already_rated: ErrorKindEnum.conflict,
	ErrorCodeEnum.invalid_weather_data: ErrorKindEnum.invalid_input,
	ErrorCodeEnum.invalid_rating: ErrorKindEnum.invalid_input,
	ErrorCodeEnum.invalid_comment: ErrorKindEnum.invalid_input,
	ErrorCodeEnum.invalid_crop_type: ErrorKindEnum.invalid_input,
	ErrorCodeEnum.invalid_farm_data: ErrorKindEnum.invalid_input,
	ErrorCodeEnum.invalid_analysis_data: ErrorKindEnum.invalid_input,
}

_STATUS_BY_KIND: dict[ErrorKindEnum, int] = {
	ErrorKindEnum.authorization: 403,
	ErrorKindEnum.not_found: 404,
	ErrorKindEnum.conflict: 409,
	ErrorKindEnum.invalid_input: 400,
}


@dataclass(slots=True)
class LedgerError(Exception):
	"""Structured precondition failure, raised before any state is written."""

	code: ErrorCodeEnum
	detail: str = ""

	@property
	def kind(self) -> ErrorKindEnum:
		return _KIND_BY_CODE[self.code]

	@property
	def status_code(self) -> int:
		return _STATUS_BY_KIND[self.kind]

	def __str__(self) -> str:
		return f"{self.code.value}: {self.detail}" if self.detail else self.code.value
