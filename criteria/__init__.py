"""
Fund criteria engine

Weighted two-level criteria (categories -> subcategories) per fund type:
default templates, weight validation and redistribution, session editing
and roll-up of externally supplied leaf scores.
"""

from .aggregator import compute_score
from .models import Category, CriteriaTree, Subcategory
from .mutations import (
    CriteriaSession,
    add_custom_subcategory,
    remove_subcategory,
    set_category_weight,
    set_subcategory_weight,
    toggle_category,
    toggle_subcategory,
)
from .redistributor import normalize
from .templates import available_fund_types, get_template
from .types import FundType, ScoreResult, SessionState, ValidationLevel, ValidationResult, WeightViolation
from .validator import validate, weight_totals

__version__ = "1.0.0"

__all__ = [
    # Models
    "Category",
    "CriteriaTree",
    "Subcategory",
    # Types
    "FundType",
    "ScoreResult",
    "SessionState",
    "ValidationLevel",
    "ValidationResult",
    "WeightViolation",
    # Operations
    "available_fund_types",
    "get_template",
    "validate",
    "weight_totals",
    "normalize",
    "set_category_weight",
    "set_subcategory_weight",
    "toggle_category",
    "toggle_subcategory",
    "add_custom_subcategory",
    "remove_subcategory",
    "CriteriaSession",
    "compute_score",
]
