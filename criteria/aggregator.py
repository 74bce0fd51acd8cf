"""
Score aggregation over a validated criteria tree.

Leaf scores (0-100 per enabled subcategory) come from an external analysis
process. They are rolled up through subcategory weights into category scores
and through category weights into one overall score. Partial coverage is
expected while analysis is still running: missing leaves count as 0 and are
logged, not raised.
"""
import math
from numbers import Real
from typing import Mapping, Optional, Tuple

from prometheus_client import Counter

from core.config import get_settings
from core.exceptions import InvalidWeightsError, ValidationError
from core.logging import get_logger

from .constants import MAX_SCORE, MIN_SCORE, TOTAL_WEIGHT
from .models import CriteriaTree
from .types import ScoreResult
from .validator import validate

logger = get_logger(__name__)

# Prometheus metrics
leaf_score_gaps = Counter("criteria_leaf_score_gaps", "Enabled subcategories scored without a leaf score")
score_refusals = Counter("criteria_score_refusals", "Aggregations refused because weights did not total 100%")

LeafKey = Tuple[str, str]


def _clamp_score(score: float) -> float:
    return min(MAX_SCORE, max(MIN_SCORE, score))


def _check_leaf_score(key: LeafKey, score) -> float:
    if isinstance(score, bool) or not isinstance(score, Real) or math.isnan(score):
        raise ValidationError(f"Leaf score for {key} must be a number, got {score!r}", field="leaf_scores")
    if not MIN_SCORE <= score <= MAX_SCORE:
        raise ValidationError(
            f"Leaf score for {key} must be between {MIN_SCORE:g} and {MAX_SCORE:g}, got {score}",
            field="leaf_scores",
        )
    return score


def compute_score(
    tree: CriteriaTree,
    leaf_scores: Mapping[LeafKey, float],
    tolerance: Optional[float] = None,
) -> ScoreResult:
    """Roll leaf scores up into category scores and an overall score.

    Args:
        tree: Criteria tree; must pass ``validate``.
        leaf_scores: ``(category_id, subcategory_id) -> score`` in [0, 100].
            Entries for disabled or unknown nodes are ignored and not
            checked.
        tolerance: Validation tolerance, defaults to the configured one.

    Returns:
        ScoreResult with a score per enabled category and the overall score.

    Raises:
        InvalidWeightsError: If the tree's weights do not total 100%.
        ValidationError: If the score of an enabled leaf is not a number in
            [0, 100].
    """
    result = validate(tree, tolerance)
    if not result.valid:
        if get_settings().prometheus_enabled:
            score_refusals.inc()
        raise InvalidWeightsError(
            "Cannot compute a score from criteria whose weights do not total 100%",
            violations=[violation.to_dict() for violation in result.violations],
        )

    category_scores = {}
    missing_leaves = []
    empty_categories = []
    overall = 0.0

    for category in tree.enabled_categories():
        subcategories = list(category.enabled_subcategories())
        if not subcategories:
            # Legitimate while the rubric is still being shaped; contributes 0
            logger.warning("category_without_enabled_subcategories", extra={"category_id": category.id})
            empty_categories.append(category.id)
            category_scores[category.id] = 0.0
            continue

        category_score = 0.0
        for sub in subcategories:
            key = (category.id, sub.id)
            if key in leaf_scores:
                score = _check_leaf_score(key, leaf_scores[key])
            else:
                missing_leaves.append(key)
                score = 0.0
            category_score += sub.weight * score / TOTAL_WEIGHT

        category_score = _clamp_score(category_score)
        category_scores[category.id] = category_score
        overall += category.weight * category_score / TOTAL_WEIGHT

    if missing_leaves:
        if get_settings().prometheus_enabled:
            leaf_score_gaps.inc(len(missing_leaves))
        logger.warning(
            "leaf_scores_missing",
            extra={"fund_type": tree.fund_type.value, "missing": [f"{c}/{s}" for c, s in missing_leaves]},
        )

    return ScoreResult(
        category_scores=category_scores,
        overall_score=_clamp_score(overall),
        missing_leaves=missing_leaves,
        empty_categories=empty_categories,
    )
