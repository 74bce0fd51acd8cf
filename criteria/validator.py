"""
Weight validation for criteria trees.

``validate`` checks that enabled category weights total 100% and that, inside
every enabled category with at least one enabled subcategory, the enabled
subcategory weights total 100% as well. Every violation is collected so the
caller can show the complete picture in one pass. Invalidity is reported,
never raised.
"""

from typing import Dict, Optional

from core.config import get_settings
from core.exceptions import ValidationError

from .constants import ROOT_NODE_PATH, TOTAL_WEIGHT
from .models import Category, CriteriaTree
from .types import ValidationLevel, ValidationResult, WeightViolation


def resolve_tolerance(tolerance: Optional[float] = None) -> float:
    """Explicit tolerance, else ``Settings.weight_tolerance``.

    Raises:
        ValidationError: If an explicit tolerance is negative.
    """
    if tolerance is None:
        return get_settings().weight_tolerance
    if tolerance < 0:
        raise ValidationError(f"Tolerance must be >= 0, got {tolerance}", field="tolerance")
    return tolerance


def category_path(category: Category) -> str:
    return f"{ROOT_NODE_PATH}{category.id}"


def enabled_category_total(tree: CriteriaTree) -> float:
    return sum(category.weight for category in tree.enabled_categories())


def enabled_subcategory_total(category: Category) -> float:
    return sum(sub.weight for sub in category.enabled_subcategories())


def validate(tree: CriteriaTree, tolerance: Optional[float] = None) -> ValidationResult:
    """Check the 100% invariant at the root and within every enabled category.

    Args:
        tree: Tree to check; not modified.
        tolerance: Allowed deviation in percentage points. Defaults to the
            configured ``weight_tolerance``.

    Returns:
        ValidationResult listing every violating level.
    """
    epsilon = resolve_tolerance(tolerance)
    violations = []

    root_sum = enabled_category_total(tree)
    if abs(root_sum - TOTAL_WEIGHT) > epsilon:
        violations.append(WeightViolation(ValidationLevel.ROOT, ROOT_NODE_PATH, root_sum, name="Categories"))

    for category in tree.enabled_categories():
        if not any(sub.enabled for sub in category.subcategories):
            continue
        sub_sum = enabled_subcategory_total(category)
        if abs(sub_sum - TOTAL_WEIGHT) > epsilon:
            violations.append(
                WeightViolation(ValidationLevel.CATEGORY, category_path(category), sub_sum, name=category.name)
            )

    return ValidationResult(valid=not violations, violations=violations)


def weight_totals(tree: CriteriaTree) -> Dict[str, float]:
    """Running totals for live display while editing.

    Keys are ``"/"`` for the enabled category total and ``"/<category_id>"``
    for the enabled subcategory total of each category (enabled or not).
    """
    totals = {ROOT_NODE_PATH: enabled_category_total(tree)}
    for category in tree.categories:
        totals[category_path(category)] = enabled_subcategory_total(category)
    return totals
