"""
Mutation API for criteria trees.

Module-level functions edit a ``CriteriaTree`` in place and return the node
they touched. They never fail on weight invalidity: a tree may be off 100%
while the user is still adjusting, and ``validate`` reports that state. The
only failures are lookups of ids that do not exist (``UnknownNodeIdError``)
and structural misuse (duplicate or non-custom subcategories).

``CriteriaSession`` owns the one tree of a configuration session and adds the
template transition and the save gate on top of these functions.
"""

from typing import Any, Dict, Optional

from core.exceptions import DuplicateNodeError, InvalidWeightsError, ValidationError
from core.logging import get_logger

from .constants import CUSTOM_ID_PREFIX, MAX_WEIGHT, MIN_WEIGHT
from .models import Category, CriteriaTree, Subcategory, derive_id, unique_id
from .redistributor import normalize
from .templates import get_template
from .types import SessionState, ValidationResult
from .validator import resolve_tolerance, validate, weight_totals

logger = get_logger(__name__)


def clamp_weight(weight: float) -> float:
    return min(MAX_WEIGHT, max(MIN_WEIGHT, float(weight)))


def set_category_weight(tree: CriteriaTree, category_id: str, weight: float) -> Category:
    """Set a category weight, clamped to [0, 100]. Siblings are left alone."""
    category = tree.get_category(category_id)
    category.weight = clamp_weight(weight)
    logger.debug("category_weight_set", extra={"category_id": category.id, "weight": category.weight})
    return category


def set_subcategory_weight(tree: CriteriaTree, category_id: str, subcategory_id: str, weight: float) -> Subcategory:
    """Set a subcategory weight, clamped to [0, 100]. Siblings are left alone."""
    subcategory = tree.get_subcategory(category_id, subcategory_id)
    subcategory.weight = clamp_weight(weight)
    logger.debug(
        "subcategory_weight_set",
        extra={"category_id": category_id, "subcategory_id": subcategory.id, "weight": subcategory.weight},
    )
    return subcategory


def toggle_category(tree: CriteriaTree, category_id: str) -> Category:
    """Flip ``enabled``; the weight is kept so re-enabling restores it."""
    category = tree.get_category(category_id)
    category.enabled = not category.enabled
    logger.debug("category_toggled", extra={"category_id": category.id, "enabled": category.enabled})
    return category


def toggle_subcategory(tree: CriteriaTree, category_id: str, subcategory_id: str) -> Subcategory:
    """Flip ``enabled``; the weight is kept so re-enabling restores it."""
    subcategory = tree.get_subcategory(category_id, subcategory_id)
    subcategory.enabled = not subcategory.enabled
    logger.debug(
        "subcategory_toggled",
        extra={"category_id": category_id, "subcategory_id": subcategory.id, "enabled": subcategory.enabled},
    )
    return subcategory


def add_custom_subcategory(
    tree: CriteriaTree,
    category_id: str,
    name: str,
    weight: float = 0.0,
    requirements: str = "",
) -> Subcategory:
    """Append an enabled, user-defined subcategory to a category.

    The new node starts at ``weight`` (clamped); sibling weights are not
    rebalanced. Its id is ``custom-<slug>``, suffixed with -2, -3, ... when a
    sibling already holds that id.

    Raises:
        UnknownNodeIdError: If the category does not exist.
        ValidationError: If the name is blank.
        DuplicateNodeError: If a sibling already uses the name.
    """
    category = tree.get_category(category_id)
    name = (name or "").strip()
    if not name:
        raise ValidationError("Subcategory name must not be blank", field="name")

    if any(sibling.name == name for sibling in category.subcategories):
        raise DuplicateNodeError("Subcategory", name, parent=category.id)
    subcategory_id = unique_id(
        f"{CUSTOM_ID_PREFIX}{derive_id(name)}",
        {sibling.id for sibling in category.subcategories},
    )

    subcategory = Subcategory(
        id=subcategory_id,
        name=name,
        weight=clamp_weight(weight),
        enabled=True,
        requirements=requirements,
        is_custom=True,
    )
    category.subcategories.append(subcategory)
    logger.info("custom_subcategory_added", extra={"category_id": category.id, "subcategory_id": subcategory.id})
    return subcategory


def remove_subcategory(tree: CriteriaTree, category_id: str, subcategory_id: str) -> Subcategory:
    """Remove a custom subcategory. Template subcategories can only be disabled.

    Raises:
        UnknownNodeIdError: If the category or subcategory does not exist.
        ValidationError: If the subcategory came from the template.
    """
    category = tree.get_category(category_id)
    subcategory = category.get_subcategory(subcategory_id)
    if not subcategory.is_custom:
        raise ValidationError(
            f"Only custom subcategories can be removed; disable '{subcategory.name}' instead",
            field="subcategory_id",
            subcategory_id=subcategory.id,
        )
    category.subcategories.remove(subcategory)
    logger.info("custom_subcategory_removed", extra={"category_id": category.id, "subcategory_id": subcategory.id})
    return subcategory


class CriteriaSession:
    """One configuration session editing one criteria tree.

    The session is ``LOADED`` while the tree satisfies the weight invariant
    and ``EDITING`` otherwise; ``snapshot`` (save/advance) is refused while
    editing.
    """

    def __init__(self, tree: Optional[CriteriaTree] = None, tolerance: Optional[float] = None):
        if tolerance is not None:
            resolve_tolerance(tolerance)
        self.tolerance = tolerance
        self.tree = tree
        self.is_dirty = False

    @classmethod
    def for_fund_type(cls, fund_type, tolerance: Optional[float] = None) -> "CriteriaSession":
        session = cls(tolerance=tolerance)
        session.load_template(fund_type)
        return session

    @classmethod
    def from_plain_object(cls, data: Dict[str, Any], tolerance: Optional[float] = None) -> "CriteriaSession":
        """Resume a persisted configuration as-is (no normalization)."""
        return cls(CriteriaTree.from_plain_object(data), tolerance=tolerance)

    def _require_tree(self) -> CriteriaTree:
        if self.tree is None:
            raise ValidationError("No criteria loaded; call load_template first", field="tree")
        return self.tree

    @property
    def log(self):
        """Module logger bound to the session's fund type"""
        if self.tree is None:
            return logger
        return logger.with_context(fund_type=self.tree.fund_type.value)

    def _mutated(self, node):
        self.is_dirty = True
        self.log.debug("criteria_session_edited", extra={"node_id": node.id})
        return node

    # -- transitions -------------------------------------------------------

    def load_template(self, fund_type) -> CriteriaTree:
        """Discard the current tree and start from the fund type's template, normalized."""
        self.tree = normalize(get_template(fund_type))
        self.is_dirty = False
        self.log.info("criteria_session_loaded", extra={"categories": len(self.tree.categories)})
        return self.tree

    def set_category_weight(self, category_id: str, weight: float) -> Category:
        return self._mutated(set_category_weight(self._require_tree(), category_id, weight))

    def set_subcategory_weight(self, category_id: str, subcategory_id: str, weight: float) -> Subcategory:
        return self._mutated(set_subcategory_weight(self._require_tree(), category_id, subcategory_id, weight))

    def toggle_category(self, category_id: str) -> Category:
        return self._mutated(toggle_category(self._require_tree(), category_id))

    def toggle_subcategory(self, category_id: str, subcategory_id: str) -> Subcategory:
        return self._mutated(toggle_subcategory(self._require_tree(), category_id, subcategory_id))

    def add_custom_subcategory(self, category_id: str, name: str, weight: float = 0.0, requirements: str = "") -> Subcategory:
        return self._mutated(add_custom_subcategory(self._require_tree(), category_id, name, weight, requirements))

    def remove_subcategory(self, category_id: str, subcategory_id: str) -> Subcategory:
        return self._mutated(remove_subcategory(self._require_tree(), category_id, subcategory_id))

    # -- observation -------------------------------------------------------

    def validate(self) -> ValidationResult:
        return validate(self._require_tree(), self.tolerance)

    def weight_totals(self) -> Dict[str, float]:
        return weight_totals(self._require_tree())

    @property
    def state(self) -> SessionState:
        return SessionState.LOADED if self.validate().valid else SessionState.EDITING

    @property
    def can_save(self) -> bool:
        return self.tree is not None and self.state is SessionState.LOADED

    def snapshot(self) -> Dict[str, Any]:
        """Plain object of the tree for persistence.

        Raises:
            InvalidWeightsError: While any level is off 100%.
        """
        result = self.validate()
        if not result.valid:
            raise InvalidWeightsError(
                "Criteria weights must total 100% before saving",
                violations=[violation.to_dict() for violation in result.violations],
            )
        self.is_dirty = False
        self.log.info("criteria_session_saved")
        return self.tree.to_plain_object()
