"""Template matching engine — picks the best-fit analysis for a weather reading.

Selection is a pure function of the candidate templates, the farm's crop type,
the reading and the authors' reputation scores:

1. A template is a candidate when the crop type is in its ``crop_types`` and
   every weather bound holds (all bounds inclusive).
2. Candidates rank by average rating (unrated templates count as 0), then by
   author reputation, then by lowest id.

No randomness and no hidden state, so identical inputs always yield the same
template id.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

TEMPERATURE_RANGE = (-50, 50)
HUMIDITY_RANGE = (0, 100)
UV_INDEX_RANGE = (0, 12)


class TemplateLike(Protocol):
	id: int
	expert: str
	crop_types: list[str]
	min_temperature: int
	max_temperature: int
	min_humidity: int
	max_humidity: int
	max_uv_index: int
	rating_count: int
	average_rating: int


@dataclass(frozen=True, slots=True)
class WeatherReading:
	"""Weather input supplied by the caller's oracle at the boundary."""

	temperature: int
	humidity: int
	uv_index: int
	observed_at: datetime | None = None

	def in_domain(self) -> bool:
		return (
			_within(self.temperature, TEMPERATURE_RANGE)
			and _within(self.humidity, HUMIDITY_RANGE)
			and _within(self.uv_index, UV_INDEX_RANGE)
		)


def _within(value: int, bounds: tuple[int, int]) -> bool:
	low, high = bounds
	return low <= value <= high


def is_candidate(template: TemplateLike, crop_type: str, weather: WeatherReading) -> bool:
	if crop_type not in template.crop_types:
		return False
	return (
		template.min_temperature <= weather.temperature <= template.max_temperature
		and template.min_humidity <= weather.humidity <= template.max_humidity
		and weather.uv_index <= template.max_uv_index
	)


def effective_rating(template: TemplateLike) -> int:
	return template.average_rating if template.rating_count > 0 else 0


def rank_key(template: TemplateLike, reputations: Mapping[str, int]) -> tuple[int, int, int]:
	"""Sort key where the smallest tuple is the best template."""
	return (
		-effective_rating(template),
		-reputations.get(template.expert, 0),
		template.id,
	)


def rank_candidates(
	templates: Iterable[TemplateLike],
	crop_type: str,
	weather: WeatherReading,
	reputations: Mapping[str, int],
) -> list[TemplateLike]:
	candidates = [t for t in templates if is_candidate(t, crop_type, weather)]
	return sorted(candidates, key=lambda t: rank_key(t, reputations))


def select_template(
	templates: Iterable[TemplateLike],
	crop_type: str,
	weather: WeatherReading,
	reputations: Mapping[str, int],
) -> int | None:
	"""Return the id of the best candidate, or ``None`` when nothing matches."""
	ranked = rank_candidates(templates, crop_type, weather, reputations)
	if not ranked:
		return None
	return ranked[0].id
