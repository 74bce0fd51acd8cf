"""
Criteria Types and Enumerations

Type definitions shared by the validator, the mutation session and the
score aggregator: fund types, validation levels, session states and the
plain result records handed to the presentation layer.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Tuple


class FundType(str, Enum):
    """Fund types with a default criteria template"""

    VC = "vc"
    PE = "pe"

    @classmethod
    def parse(cls, value: Any) -> "FundType":
        """Accept a member or its value in any case; raise ValueError otherwise"""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            return cls(value.strip().lower())
        raise ValueError(f"{value!r} is not a valid {cls.__name__}")

    @property
    def display_name(self) -> str:
        return {FundType.VC: "Venture Capital", FundType.PE: "Private Equity"}[self]


class ValidationLevel(Enum):
    """Tree level at which a weight violation was found"""

    ROOT = "root"  # Category weights
    CATEGORY = "category"  # Subcategory weights within one category


class SessionState(Enum):
    """
    Configuration session state

    LOADED: the tree satisfies the weight invariant, save/advance allowed.
    EDITING: at least one level is off 100%, save/advance blocked.
    """

    LOADED = "loaded"
    EDITING = "editing"


@dataclass(frozen=True)
class WeightViolation:
    """A level whose enabled weights do not total 100%"""

    level: ValidationLevel
    node_path: str
    actual_sum: float
    name: str = ""

    @property
    def message(self) -> str:
        if self.level is ValidationLevel.ROOT:
            return f"Category weights must sum to 100% (currently {self.actual_sum:.1f}%)"
        return f"{self.name or self.node_path} subcategory weights must sum to 100% (currently {self.actual_sum:.1f}%)"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level.value,
            "node_path": self.node_path,
            "actual_sum": self.actual_sum,
            "message": self.message,
        }


@dataclass
class ValidationResult:
    """Outcome of validating a criteria tree"""

    valid: bool
    violations: List[WeightViolation] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.valid

    @property
    def errors(self) -> List[str]:
        return [violation.message for violation in self.violations]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "violations": [violation.to_dict() for violation in self.violations],
        }


@dataclass
class ScoreResult:
    """Composite score rolled up from leaf scores"""

    category_scores: Dict[str, float]
    overall_score: float
    missing_leaves: List[Tuple[str, str]] = field(default_factory=list)
    empty_categories: List[str] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        """True when every enabled leaf had a score"""
        return not self.missing_leaves and not self.empty_categories

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category_scores": dict(self.category_scores),
            "overall_score": self.overall_score,
            "missing_leaves": [list(leaf) for leaf in self.missing_leaves],
            "empty_categories": list(self.empty_categories),
        }
