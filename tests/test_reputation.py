from __future__ import annotations

from types import SimpleNamespace

import pytest

from app.services.reputation import (
	INITIAL_REPUTATION,
	apply_feedback,
	next_reputation,
	next_template_rating,
)


def test_first_rating_sets_average() -> None:
	assert next_template_rating(0, 0, 60) == (1, 60)


def test_ratings_60_then_80_average_to_70() -> None:
	count, average = next_template_rating(0, 0, 60)
	count, average = next_template_rating(count, average, 80)
	assert (count, average) == (2, 70)


def test_average_is_floored() -> None:
	# (70 * 2 + 1) / 3 = 47.0 -> 47; (47 * 3 + 50) / 4 = 47.75 -> 47
	count, average = next_template_rating(2, 70, 1)
	assert (count, average) == (3, 47)
	assert next_template_rating(count, average, 50) == (4, 47)


def test_large_counts_do_not_overflow() -> None:
	count, average = next_template_rating(10**12, 100, 100)
	assert count == 10**12 + 1
	assert average == 100


def test_reputation_80_rated_100_becomes_82() -> None:
	assert INITIAL_REPUTATION == 80
	assert next_reputation(80, 100) == 82


def test_reputation_floors_each_term_separately() -> None:
	# floor(0.9 * 75) + floor(0.1 * 95) = 67 + 9 = 76, while a single floor
	# of 67.5 + 9.5 would give 77.
	assert next_reputation(75, 95) == 76


@pytest.mark.parametrize("score", [0, 1, 50, 99, 100])
@pytest.mark.parametrize("rating", [1, 9, 10, 55, 100])
def test_reputation_stays_in_range(score: int, rating: int) -> None:
	assert 0 <= next_reputation(score, rating) <= 100


def test_reputation_outside_range_is_rejected() -> None:
	with pytest.raises(AssertionError):
		next_reputation(200, 100)


def test_apply_feedback_mutates_template_and_expert() -> None:
	template = SimpleNamespace(id=1, rating_count=1, average_rating=60)
	expert = SimpleNamespace(principal="expert-a", reputation_score=80)

	apply_feedback(template, expert, 80)  # type: ignore[arg-type]

	assert (template.rating_count, template.average_rating) == (2, 70)
	assert expert.reputation_score == 80  # 72 + 8
