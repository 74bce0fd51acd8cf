"""
Pydantic models for the two-level criteria tree.

A ``CriteriaTree`` owns an ordered list of ``Category`` nodes, each owning an
ordered list of ``Subcategory`` nodes. Order is for display only. Field bounds
and sibling uniqueness are enforced on construction; the 100% sum invariant is
not, since trees are allowed to be transiently invalid while being edited
(see ``criteria.validator``).

Models accept both snake_case field names and the camelCase keys used by the
persistence layer, and serialise back to camelCase via ``to_plain_object``.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Iterator, List, Set

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from core.exceptions import UnknownNodeIdError

from .constants import FALLBACK_NODE_ID, MAX_WEIGHT, MIN_WEIGHT
from .types import FundType

_SLUG_RE = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    """'Team & Leadership' -> 'team-leadership'"""
    return _SLUG_RE.sub("-", name.lower()).strip("-")


def derive_id(name: str) -> str:
    return slugify(name) or FALLBACK_NODE_ID


def unique_id(base: str, taken: Set[str]) -> str:
    """base, or base-2, base-3, ... whichever is not taken yet"""
    candidate = base
    suffix = 2
    while candidate in taken:
        candidate = f"{base}-{suffix}"
        suffix += 1
    return candidate


def _ensure_unique_siblings(nodes: List["CriteriaNode"], kind: str) -> None:
    """Reject duplicate names or explicit ids; suffix derived ids that collide."""
    seen_names = set()
    for node in nodes:
        if node.name in seen_names:
            raise ValueError(f"Duplicate {kind} name: '{node.name}'")
        seen_names.add(node.name)

    # Ids that are not simply derived from the node's own name were chosen by
    # the caller and must already be unique
    taken = set()
    derived = []
    for node in nodes:
        if node.id == derive_id(node.name):
            derived.append(node)
            continue
        if node.id in taken:
            raise ValueError(f"Duplicate {kind} id: '{node.id}'")
        taken.add(node.id)

    for node in derived:
        node.id = unique_id(node.id, taken)
        taken.add(node.id)


def _find(nodes: List["CriteriaNode"], key: str):
    for node in nodes:
        if node.id == key:
            return node
    # Names are unique among siblings too, and older payloads address nodes by name
    for node in nodes:
        if node.name == key:
            return node
    return None


class CriteriaNode(BaseModel):
    """Fields shared by categories and subcategories."""

    id: str = Field(default="", description="Slug unique among siblings; derived from name when empty")
    name: str = Field(..., min_length=1)
    weight: float = Field(..., ge=MIN_WEIGHT, le=MAX_WEIGHT, description="Percentage of the parent level (0-100)")
    enabled: bool = True
    description: str = ""
    requirements: str = ""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name must not be blank")
        return v

    @model_validator(mode="after")
    def _derive_id(self) -> CriteriaNode:
        if not self.id:
            self.id = derive_id(self.name)
        return self


class Subcategory(CriteriaNode):
    """Leaf of the criteria tree; the unit an external analysis scores."""

    positive_signals: List[str] = Field(default_factory=list)
    negative_signals: List[str] = Field(default_factory=list)
    search_keywords: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("searchKeywords", "aiSearchKeywords", "search_keywords"),
        serialization_alias="searchKeywords",
    )
    is_custom: bool = False


class Category(CriteriaNode):
    """Top-level scoring category."""

    icon: str = ""
    subcategories: List[Subcategory] = Field(default_factory=list)

    @field_validator("subcategories")
    @classmethod
    def validate_unique_subcategories(cls, v):
        _ensure_unique_siblings(v, "subcategory")
        return v

    def get_subcategory(self, subcategory_id: str) -> Subcategory:
        """Return the subcategory with this id (or name); raise UnknownNodeIdError otherwise."""
        node = _find(self.subcategories, subcategory_id)
        if node is None:
            raise UnknownNodeIdError("Subcategory", subcategory_id, parent=self.id)
        return node

    def enabled_subcategories(self) -> Iterator[Subcategory]:
        return (sub for sub in self.subcategories if sub.enabled)


class CriteriaTree(BaseModel):
    """A fund's complete scoring rubric."""

    fund_type: FundType
    categories: List[Category] = Field(default_factory=list)

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    @field_validator("fund_type", mode="before")
    @classmethod
    def parse_fund_type(cls, v):
        return FundType.parse(v)

    @field_validator("categories")
    @classmethod
    def validate_unique_categories(cls, v):
        _ensure_unique_siblings(v, "category")
        return v

    def get_category(self, category_id: str) -> Category:
        """Return the category with this id (or name); raise UnknownNodeIdError otherwise."""
        node = _find(self.categories, category_id)
        if node is None:
            raise UnknownNodeIdError("Category", category_id)
        return node

    def get_subcategory(self, category_id: str, subcategory_id: str) -> Subcategory:
        return self.get_category(category_id).get_subcategory(subcategory_id)

    def enabled_categories(self) -> Iterator[Category]:
        return (cat for cat in self.categories if cat.enabled)

    def leaf_keys(self, enabled_only: bool = True) -> List[tuple]:
        """(category_id, subcategory_id) pairs, the keys of a leaf score mapping."""
        categories = self.enabled_categories() if enabled_only else self.categories
        keys = []
        for category in categories:
            subs = category.enabled_subcategories() if enabled_only else category.subcategories
            keys.extend((category.id, sub.id) for sub in subs)
        return keys

    def copy_tree(self) -> CriteriaTree:
        """Independent deep copy."""
        return self.model_copy(deep=True)

    def to_plain_object(self) -> Dict[str, Any]:
        """JSON-compatible dict with camelCase keys, for the persistence layer."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_plain_object(cls, data: Dict[str, Any]) -> CriteriaTree:
        """Rebuild a tree from ``to_plain_object`` output (camelCase or snake_case keys).

        Raises:
            pydantic.ValidationError: If the payload violates the schema.
        """
        return cls.model_validate(data)
