"""
Equal weight redistribution among enabled siblings.

Used after template load or a fund-type switch only. Manual edits are never
normalized implicitly; the user's explicit weights win until they ask
otherwise.
"""

from typing import Iterable

from core.logging import get_logger

from .constants import TOTAL_WEIGHT
from .models import CriteriaNode, CriteriaTree

logger = get_logger(__name__)


def _spread_equally(nodes: Iterable[CriteriaNode]) -> int:
    """Give every enabled node TOTAL_WEIGHT / n. Returns n; 0 leaves the level untouched."""
    enabled = [node for node in nodes if node.enabled]
    if not enabled:
        return 0
    equal_weight = TOTAL_WEIGHT / len(enabled)
    for node in enabled:
        node.weight = equal_weight
    return len(enabled)


def normalize(tree: CriteriaTree) -> CriteriaTree:
    """Return a copy of ``tree`` whose enabled levels each total 100%.

    Top-down: enabled categories share 100 equally, then within every enabled
    category the enabled subcategories share 100 equally. Disabled nodes keep
    their weights. A level with no enabled node is left as is, so the
    validator keeps reporting it.
    """
    normalized = tree.copy_tree()

    if not _spread_equally(normalized.categories):
        logger.warning("normalize_no_enabled_categories", extra={"fund_type": normalized.fund_type.value})

    for category in normalized.enabled_categories():
        _spread_equally(category.subcategories)

    logger.debug("criteria_normalized", extra={"fund_type": normalized.fund_type.value})
    return normalized
