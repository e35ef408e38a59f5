from __future__ import annotations

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import ErrorCodeEnum, ErrorKindEnum, VocabularyKindEnum
from app.schemas.analysis import AnalysisCreate, ConditionRange, WeatherRange
from app.schemas.farm import FarmCreate, FarmUpdate
from app.services.analysis_service import AnalysisService
from app.services.errors import LedgerError
from app.services.expert_service import ExpertService
from app.services.farm_service import FarmService
from app.services.ledger_state import load_ledger_state
from app.services.matching import WeatherReading
from tests.conftest import ADMIN, EXPERT, FARMER, OTHER_EXPERT, OTHER_FARMER, LedgerSeeder


def _farm(**overrides: object) -> FarmCreate:
	fields: dict[str, object] = {
		"crop_type": "maize",
		"farm_size": 5,
		"latitude": 0.5,
		"longitude": 35.0,
		"health_metrics": ["soil_moisture"],
		"goals": ["yield"],
	}
	fields.update(overrides)
	return FarmCreate(**fields)


def _analysis(**overrides: object) -> AnalysisCreate:
	fields: dict[str, object] = {
		"name": "Blight alert",
		"description": "Spray copper fungicide after long wet spells.",
		"crop_types": ["tomato"],
		"conditions": [ConditionRange(metric="leaf_wetness", min=60, max=100)],
		"weather": WeatherRange(
			min_temperature=15,
			max_temperature=28,
			min_humidity=70,
			max_humidity=100,
			max_uv_index=6,
		),
		"actions": ["Apply copper fungicide"],
	}
	fields.update(overrides)
	return AnalysisCreate(**fields)


# ── Vocabulary ──────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_admin_adds_vocabulary_in_insertion_order(db_session: AsyncSession) -> None:
	service = FarmService(db_session)

	await service.add_vocabulary_term(ADMIN, VocabularyKindEnum.crop_type, "sorghum")
	await service.add_vocabulary_term(ADMIN, VocabularyKindEnum.crop_type, "cassava")
	await service.add_vocabulary_term(ADMIN, VocabularyKindEnum.goal, "sorghum")

	assert await service.list_vocabulary(VocabularyKindEnum.crop_type) == ["sorghum", "cassava"]
	assert await service.list_vocabulary(VocabularyKindEnum.goal) == ["sorghum"]
	assert await service.list_vocabulary(VocabularyKindEnum.health_metric) == []


@pytest.mark.asyncio
async def test_duplicate_vocabulary_term_is_conflict(db_session: AsyncSession) -> None:
	service = FarmService(db_session)
	await service.add_vocabulary_term(ADMIN, VocabularyKindEnum.crop_type, "maize")

	with pytest.raises(LedgerError) as excinfo:
		await service.add_vocabulary_term(ADMIN, VocabularyKindEnum.crop_type, "maize")

	assert excinfo.value.code == ErrorCodeEnum.vocabulary_term_exists
	assert excinfo.value.kind == ErrorKindEnum.conflict


@pytest.mark.asyncio
async def test_non_admin_cannot_add_vocabulary(db_session: AsyncSession) -> None:
	service = FarmService(db_session)

	with pytest.raises(LedgerError) as excinfo:
		await service.add_vocabulary_term(FARMER, VocabularyKindEnum.crop_type, "maize")

	assert excinfo.value.code == ErrorCodeEnum.not_authorized
	assert await service.list_vocabulary(VocabularyKindEnum.crop_type) == []


# ── Farm profiles ───────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_register_and_update_farm(db_session: AsyncSession, seeder: LedgerSeeder) -> None:
	await seeder.vocabulary()
	service = FarmService(db_session)

	farm = await service.register_farm(FARMER, _farm())
	assert farm.owner == FARMER
	assert farm.health_metrics == ["soil_moisture"]

	updated = await service.update_farm(
		FARMER,
		FarmUpdate(
			crop_type="rice",
			farm_size=9,
			latitude=-3.0,
			longitude=37.0,
			health_metrics=["leaf_wetness", "soil_moisture"],
			goals=["water_saving"],
		),
	)
	assert updated.crop_type == "rice"
	assert updated.farm_size == 9

	stored = await service.get_farm(FARMER)
	assert stored is not None
	assert stored.goals == ["water_saving"]
	assert await service.get_farm(OTHER_FARMER) is None


@pytest.mark.asyncio
async def test_second_registration_is_conflict(
	db_session: AsyncSession,
	seeder: LedgerSeeder,
) -> None:
	await seeder.vocabulary()
	await seeder.farm()

	with pytest.raises(LedgerError) as excinfo:
		await FarmService(db_session).register_farm(FARMER, _farm(crop_type="rice"))

	assert excinfo.value.code == ErrorCodeEnum.farm_already_registered
	stored = await FarmService(db_session).get_farm(FARMER)
	assert stored.crop_type == "maize"


@pytest.mark.asyncio
async def test_update_without_profile_is_not_found(
	db_session: AsyncSession,
	seeder: LedgerSeeder,
) -> None:
	await seeder.vocabulary()

	with pytest.raises(LedgerError) as excinfo:
		await FarmService(db_session).update_farm(FARMER, FarmUpdate(**_farm().model_dump()))

	assert excinfo.value.code == ErrorCodeEnum.farm_not_found


@pytest.mark.asyncio
async def test_unknown_crop_type_rejected(db_session: AsyncSession, seeder: LedgerSeeder) -> None:
	await seeder.vocabulary()

	with pytest.raises(LedgerError) as excinfo:
		await FarmService(db_session).register_farm(FARMER, _farm(crop_type="quinoa"))

	assert excinfo.value.code == ErrorCodeEnum.invalid_crop_type
	assert await FarmService(db_session).get_farm(FARMER) is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
	"overrides",
	[
		{"farm_size": 0},
		{"latitude": 90.5},
		{"longitude": -181.0},
		{"health_metrics": ["soil_moisture"] * 6},
		{"goals": ["yield"] * 6},
		{"health_metrics": ["canopy_cover"]},
		{"goals": ["profit"]},
	],
)
async def test_invalid_farm_data_rejected(
	db_session: AsyncSession,
	seeder: LedgerSeeder,
	overrides: dict[str, object],
) -> None:
	await seeder.vocabulary()

	with pytest.raises(LedgerError) as excinfo:
		await FarmService(db_session).register_farm(FARMER, _farm(**overrides))

	assert excinfo.value.code == ErrorCodeEnum.invalid_farm_data
	assert excinfo.value.kind == ErrorKindEnum.invalid_input


# ── Experts and admin ───────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_verify_expert_starts_at_80(db_session: AsyncSession) -> None:
	service = ExpertService(db_session)

	expert = await service.verify_expert(ADMIN, EXPERT, "PhD Plant Pathology")

	assert expert.reputation_score == 80
	assert expert.credentials == "PhD Plant Pathology"
	assert (await service.get_expert(EXPERT)).principal == EXPERT
	assert await service.get_expert(OTHER_EXPERT) is None


@pytest.mark.asyncio
async def test_verify_twice_is_conflict(db_session: AsyncSession) -> None:
	service = ExpertService(db_session)
	await service.verify_expert(ADMIN, EXPERT, "first")

	with pytest.raises(LedgerError) as excinfo:
		await service.verify_expert(ADMIN, EXPERT, "second")

	assert excinfo.value.code == ErrorCodeEnum.expert_already_verified
	assert (await service.get_expert(EXPERT)).credentials == "first"


@pytest.mark.asyncio
async def test_only_admin_verifies(db_session: AsyncSession) -> None:
	with pytest.raises(LedgerError) as excinfo:
		await ExpertService(db_session).verify_expert(EXPERT, EXPERT, "self-issued")

	assert excinfo.value.code == ErrorCodeEnum.not_authorized
	assert await ExpertService(db_session).get_expert(EXPERT) is None


@pytest.mark.asyncio
async def test_transfer_admin_hands_over_privileges(db_session: AsyncSession) -> None:
	service = ExpertService(db_session)
	assert await service.get_admin() == ADMIN

	assert await service.transfer_admin(ADMIN, OTHER_EXPERT) == OTHER_EXPERT
	assert await service.get_admin() == OTHER_EXPERT

	with pytest.raises(LedgerError) as excinfo:
		await service.verify_expert(ADMIN, EXPERT, "stale admin")
	assert excinfo.value.code == ErrorCodeEnum.not_authorized

	await service.verify_expert(OTHER_EXPERT, EXPERT, "new admin")


@pytest.mark.asyncio
async def test_non_admin_cannot_transfer(db_session: AsyncSession) -> None:
	service = ExpertService(db_session)

	with pytest.raises(LedgerError):
		await service.transfer_admin(FARMER, FARMER)

	assert await service.get_admin() == ADMIN


# ── Analysis templates ──────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_create_analysis_allocates_sequential_ids(
	db_session: AsyncSession,
	seeder: LedgerSeeder,
) -> None:
	await seeder.vocabulary()
	await seeder.expert()
	service = AnalysisService(db_session)

	first = await service.create_analysis(EXPERT, _analysis())
	second = await service.create_analysis(EXPERT, _analysis(name="Second"))

	assert (first.id, second.id) == (1, 2)
	assert first.expert == EXPERT
	assert (first.rating_count, first.average_rating) == (0, 0)
	assert first.conditions == [{"metric": "leaf_wetness", "min": 60, "max": 100}]
	state = await load_ledger_state(db_session)
	assert state.next_analysis_id == 3


@pytest.mark.asyncio
async def test_unverified_author_rejected(db_session: AsyncSession, seeder: LedgerSeeder) -> None:
	await seeder.vocabulary()

	with pytest.raises(LedgerError) as excinfo:
		await AnalysisService(db_session).create_analysis(FARMER, _analysis())

	assert excinfo.value.code == ErrorCodeEnum.not_authorized
	state = await load_ledger_state(db_session)
	assert state.next_analysis_id == 1


@pytest.mark.asyncio
async def test_unknown_crop_in_analysis_rejected(
	db_session: AsyncSession,
	seeder: LedgerSeeder,
) -> None:
	await seeder.vocabulary()
	await seeder.expert()

	with pytest.raises(LedgerError) as excinfo:
		await AnalysisService(db_session).create_analysis(
			EXPERT, _analysis(crop_types=["tomato", "quinoa"])
		)

	assert excinfo.value.code == ErrorCodeEnum.invalid_crop_type
	assert "quinoa" in excinfo.value.detail


@pytest.mark.asyncio
@pytest.mark.parametrize(
	"overrides",
	[
		{"crop_types": []},
		{"crop_types": ["maize"] * 6},
		{"crop_types": ["tomato", "tomato"]},
		{"actions": []},
		{"actions": ["water"] * 11},
		{"conditions": [ConditionRange(metric="soil_moisture", min=0, max=10)] * 6},
		{"conditions": [ConditionRange(metric="soil_moisture", min=50, max=10)]},
		{
			"weather": WeatherRange(
				min_temperature=30,
				max_temperature=20,
				min_humidity=0,
				max_humidity=100,
				max_uv_index=12,
			)
		},
		{
			"weather": WeatherRange(
				min_temperature=-60,
				max_temperature=20,
				min_humidity=0,
				max_humidity=100,
				max_uv_index=12,
			)
		},
		{
			"weather": WeatherRange(
				min_temperature=0,
				max_temperature=20,
				min_humidity=0,
				max_humidity=100,
				max_uv_index=13,
			)
		},
	],
)
async def test_invalid_analysis_data_rejected(
	db_session: AsyncSession,
	seeder: LedgerSeeder,
	overrides: dict[str, object],
) -> None:
	await seeder.vocabulary()
	await seeder.expert()

	with pytest.raises(LedgerError) as excinfo:
		await AnalysisService(db_session).create_analysis(EXPERT, _analysis(**overrides))

	assert excinfo.value.code == ErrorCodeEnum.invalid_analysis_data
	assert await AnalysisService(db_session).get_analysis(1) is None


@pytest.mark.asyncio
async def test_weather_prefilter_uses_inclusive_bounds(
	db_session: AsyncSession,
	seeder: LedgerSeeder,
) -> None:
	await seeder.vocabulary()
	await seeder.expert()
	await seeder.analysis(min_temperature=10, max_temperature=20, max_uv_index=5)
	await seeder.analysis(min_temperature=15, max_temperature=30, max_uv_index=8)
	service = AnalysisService(db_session)

	ids = [t.id for t in await service.list_weather_matches(WeatherReading(20, 50, 5))]
	assert ids == [1, 2]
	ids = [t.id for t in await service.list_weather_matches(WeatherReading(21, 50, 5))]
	assert ids == [2]
	assert await service.list_weather_matches(WeatherReading(20, 50, 9)) == []
