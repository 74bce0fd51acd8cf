"""Default criteria templates per fund type.

Templates live as YAML fixtures (``criteria/fund_templates/<fund_type>.yaml``).
Each file is parsed once, validated against ``TemplateDocument`` (schema plus
the 100% weight invariant at every level), and cached. ``get_template``
always hands out a deep copy, so no mutable state is shared between
configuration sessions.
"""

from __future__ import annotations

import sys
from functools import lru_cache
from pathlib import Path
from typing import List

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from core.config import get_settings
from core.exceptions import ConfigurationError, UnknownFundTypeError
from core.logging import get_logger

from .constants import DEFAULT_TEMPLATES_DIR, TEMPLATE_FILE_SUFFIX
from .models import Category, CriteriaTree
from .types import FundType
from .validator import validate

_logger = get_logger("criteria.templates")


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------


class TemplateDocument(BaseModel):
    """Root schema of a template YAML file."""

    version: str = Field(..., pattern=r"^\d+\.\d+$", description="Template version")
    fund_type: FundType
    categories: List[Category] = Field(..., min_length=1)

    @field_validator("fund_type", mode="before")
    @classmethod
    def parse_fund_type(cls, v):
        return FundType.parse(v)

    @model_validator(mode="after")
    def _validate_template(self) -> TemplateDocument:
        """Templates must be fully enabled and valid at birth."""
        disabled = [cat.name for cat in self.categories if not cat.enabled]
        disabled += [f"{cat.name}/{sub.name}" for cat in self.categories for sub in cat.subcategories if not sub.enabled]
        if disabled:
            raise ValueError(f"Template nodes must all be enabled, disabled: {disabled}")

        result = validate(self.to_tree())
        if not result.valid:
            raise ValueError("; ".join(result.errors))
        return self

    def to_tree(self) -> CriteriaTree:
        return CriteriaTree(fund_type=self.fund_type, categories=self.categories)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def resolve_templates_dir() -> Path:
    """``Settings.criteria_templates_dir`` when set, else the packaged templates."""
    configured = get_settings().criteria_templates_dir
    if configured:
        return Path(configured)
    return DEFAULT_TEMPLATES_DIR


def available_fund_types() -> List[FundType]:
    return list(FundType)


def _coerce_fund_type(fund_type) -> FundType:
    try:
        return FundType.parse(fund_type)
    except ValueError as exc:
        raise UnknownFundTypeError(fund_type, [ft.value for ft in FundType]) from exc


@lru_cache(maxsize=None)
def _load_template(fund_type: FundType, templates_dir: str) -> CriteriaTree:
    path = Path(templates_dir) / f"{fund_type.value}{TEMPLATE_FILE_SUFFIX}"
    if not path.exists():
        raise ConfigurationError(f"Criteria template not found: {path}", setting="criteria_templates_dir")

    try:
        with path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
        document = TemplateDocument.model_validate(data)
    except (yaml.YAMLError, ValidationError) as exc:
        raise ConfigurationError(f"Invalid criteria template '{path}': {exc}") from exc

    if document.fund_type is not fund_type:
        raise ConfigurationError(
            f"Template '{path}' declares fund type '{document.fund_type.value}', expected '{fund_type.value}'"
        )

    _logger.info(
        "criteria_template_loaded",
        extra={"fund_type": fund_type.value, "version": document.version, "categories": len(document.categories)},
    )
    return document.to_tree()


def get_template(fund_type) -> CriteriaTree:
    """Return a fresh, fully enabled, valid criteria tree for ``fund_type``.

    Args:
        fund_type: ``FundType`` member or its value ("vc", "pe"), any case.

    Raises:
        UnknownFundTypeError: If no template exists for the fund type.
        ConfigurationError: If the template file is missing or invalid.
    """
    resolved = _coerce_fund_type(fund_type)
    return _load_template(resolved, str(resolve_templates_dir())).copy_tree()


def clear_template_cache() -> None:
    """Forget parsed templates, e.g. after changing ``criteria_templates_dir``."""
    _load_template.cache_clear()


# ---------------------------------------------------------------------------
# CLI interface
# ---------------------------------------------------------------------------

_USAGE = "Usage: python -m criteria.templates [validate|show] <fund_type>"


def __main__():
    """CLI interface for inspecting criteria templates."""
    if len(sys.argv) < 3 or sys.argv[1] not in ("validate", "show"):
        print(_USAGE)
        sys.exit(1)

    command, fund_type = sys.argv[1], sys.argv[2]

    try:
        tree = get_template(fund_type)
    except (UnknownFundTypeError, ConfigurationError) as e:
        print(f"✗ {e}")
        sys.exit(1)

    if command == "validate":
        subcategories = sum(len(cat.subcategories) for cat in tree.categories)
        print(f"✓ Template for '{tree.fund_type.value}' is valid")
        print(f"  Categories: {len(tree.categories)}")
        print(f"  Subcategories: {subcategories}")
        return

    for category in tree.categories:
        print(f"{category.name} ({category.weight:g}%)")
        for sub in category.subcategories:
            print(f"  - {sub.name} ({sub.weight:g}%)")


if __name__ == "__main__":
    __main__()
