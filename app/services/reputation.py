"""Reputation aggregator — incremental rating and reputation updates.

Both updates use integer (floored) arithmetic:

* template average: ``avg' = rating`` for the first rating, otherwise
  ``(avg * count + rating) // (count + 1)``;
* expert reputation: ``floor(0.9 * score) + floor(0.1 * rating)``, with the
  two floors applied separately.  Flooring each term on its own biases the
  score slightly downward compared with a single floor; that behaviour is
  part of the scoring contract.

The aggregator trusts its inputs: the ledger has already verified that the
template and its author exist before calling :func:`apply_feedback`.
"""

from __future__ import annotations

import logging

from app.models.analysis import AnalysisTemplate
from app.models.registry import VerifiedExpert

RATING_MIN = 1
RATING_MAX = 100
REPUTATION_MIN = 0
REPUTATION_MAX = 100
INITIAL_REPUTATION = 80

_logger = logging.getLogger("cropwise.reputation")


def next_template_rating(count: int, average: int, rating: int) -> tuple[int, int]:
	"""Return ``(new_count, new_average)`` after folding in one rating."""
	new_count = count + 1
	if count == 0:
		return new_count, rating
	return new_count, (average * count + rating) // new_count


def next_reputation(score: int, rating: int) -> int:
	new_score = (9 * score) // 10 + rating // 10
	assert REPUTATION_MIN <= new_score <= REPUTATION_MAX, (
		f"reputation {new_score} outside [{REPUTATION_MIN}, {REPUTATION_MAX}]"
	)
	return new_score


def apply_feedback(
	template: AnalysisTemplate,
	expert: VerifiedExpert,
	rating: int,
) -> None:
	"""Mutate ``template`` and ``expert`` in place for one feedback event.

	Must run inside the same transaction as the ledger write that triggered
	it; the caller commits or rolls back both together.
	"""
	old_count, old_average = template.rating_count, template.average_rating
	old_score = expert.reputation_score

	template.rating_count, template.average_rating = next_template_rating(
		old_count, old_average, rating
	)
	expert.reputation_score = next_reputation(old_score, rating)

	_logger.info(
		"reputation_applied",
		extra={
			"analysis_id": template.id,
			"expert": expert.principal,
			"rating": rating,
			"rating_count": template.rating_count,
			"average_rating": template.average_rating,
			"reputation_before": old_score,
			"reputation_after": expert.reputation_score,
		},
	)
