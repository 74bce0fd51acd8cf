"""
Unit tests for the tree mutation functions.
"""
import pytest

from core.exceptions import DuplicateNodeError, UnknownNodeIdError, ValidationError
from criteria.mutations import (
    add_custom_subcategory,
    clamp_weight,
    remove_subcategory,
    set_category_weight,
    set_subcategory_weight,
    toggle_category,
    toggle_subcategory,
)
from criteria.validator import validate

pytestmark = pytest.mark.unit


class TestWeightSetters:
    """Test manual weight edits"""

    def test_set_category_weight(self, four_category_tree):
        category = set_category_weight(four_category_tree, "category-1", 40)

        assert category.weight == 40
        assert four_category_tree.get_category("category-1").weight == 40

    def test_siblings_not_renormalized(self, four_category_tree):
        set_category_weight(four_category_tree, "category-1", 40)

        assert [cat.weight for cat in four_category_tree.categories[1:]] == [25, 25, 25]
        assert validate(four_category_tree).violations[0].actual_sum == 115

    @pytest.mark.parametrize("requested,expected", [(-5, 0), (150, 100), (0, 0), (100, 100), (42.5, 42.5)])
    def test_weights_clamped(self, four_category_tree, requested, expected):
        set_category_weight(four_category_tree, "category-2", requested)
        set_subcategory_weight(four_category_tree, "category-2", "sub-2-1", requested)

        assert four_category_tree.get_category("category-2").weight == expected
        assert four_category_tree.get_subcategory("category-2", "sub-2-1").weight == expected

    def test_clamp_weight_coerces_to_float(self):
        assert isinstance(clamp_weight(10), float)

    def test_set_subcategory_weight_transiently_invalid(self, four_category_tree):
        set_subcategory_weight(four_category_tree, "category-3", "sub-3-1", 70)

        result = validate(four_category_tree)
        assert [v.node_path for v in result.violations] == ["/category-3"]

        set_subcategory_weight(four_category_tree, "category-3", "sub-3-2", 30)
        assert validate(four_category_tree).valid

    def test_unknown_ids(self, four_category_tree):
        with pytest.raises(UnknownNodeIdError):
            set_category_weight(four_category_tree, "nope", 10)
        with pytest.raises(UnknownNodeIdError):
            set_subcategory_weight(four_category_tree, "category-1", "nope", 10)
        with pytest.raises(UnknownNodeIdError):
            set_subcategory_weight(four_category_tree, "nope", "sub-1-1", 10)


class TestToggles:
    """Test enable/disable with weight preservation"""

    def test_toggle_category_twice_restores_weight(self, tree_factory):
        tree = tree_factory([30, 30, 30, 10])

        toggle_category(tree, "category-4")
        assert tree.get_category("category-4").enabled is False
        assert tree.get_category("category-4").weight == 10

        toggle_category(tree, "category-4")
        assert tree.get_category("category-4").enabled is True
        assert tree.get_category("category-4").weight == 10
        assert validate(tree).valid

    def test_toggle_subcategory_preserves_weight(self, four_category_tree):
        sub = toggle_subcategory(four_category_tree, "category-1", "sub-1-2")

        assert sub.enabled is False
        assert sub.weight == 50
        assert not validate(four_category_tree).valid

        toggle_subcategory(four_category_tree, "category-1", "sub-1-2")
        assert validate(four_category_tree).valid

    def test_disabling_leaves_tree_invalid_without_error(self, four_category_tree):
        toggle_category(four_category_tree, "category-1")

        assert validate(four_category_tree).violations[0].actual_sum == 75

    def test_toggle_unknown(self, four_category_tree):
        with pytest.raises(UnknownNodeIdError):
            toggle_category(four_category_tree, "category-9")
        with pytest.raises(UnknownNodeIdError):
            toggle_subcategory(four_category_tree, "category-1", "sub-9-9")


class TestCustomSubcategories:
    """Test adding and removing user-defined subcategories"""

    def test_add_custom_subcategory(self, four_category_tree):
        sub = add_custom_subcategory(four_category_tree, "category-1", "Climate Impact", weight=10, requirements="Net zero")

        category = four_category_tree.get_category("category-1")
        assert category.subcategories[-1] is sub
        assert sub.id == "custom-climate-impact"
        assert sub.is_custom is True
        assert sub.enabled is True
        assert sub.requirements == "Net zero"
        assert validate(four_category_tree).violations[0].actual_sum == 110

    def test_add_custom_weight_clamped(self, four_category_tree):
        sub = add_custom_subcategory(four_category_tree, "category-1", "Extra", weight=250)
        assert sub.weight == 100

    def test_add_duplicate_name_rejected(self, four_category_tree):
        with pytest.raises(DuplicateNodeError):
            add_custom_subcategory(four_category_tree, "category-1", "Sub 1.1")

    def test_add_duplicate_custom_name_rejected(self, four_category_tree):
        add_custom_subcategory(four_category_tree, "category-1", "Extra")

        with pytest.raises(DuplicateNodeError):
            add_custom_subcategory(four_category_tree, "category-1", "Extra")

    def test_colliding_custom_ids_suffixed(self, four_category_tree):
        first = add_custom_subcategory(four_category_tree, "category-1", "Extra")
        second = add_custom_subcategory(four_category_tree, "category-1", "extra")

        assert (first.id, second.id) == ("custom-extra", "custom-extra-2")

    def test_punctuation_only_custom_names(self, four_category_tree):
        first = add_custom_subcategory(four_category_tree, "category-1", "!!!")
        second = add_custom_subcategory(four_category_tree, "category-1", "???")

        assert (first.id, second.id) == ("custom-node", "custom-node-2")
        assert remove_subcategory(four_category_tree, "category-1", "custom-node-2") is second

    def test_add_blank_name_rejected(self, four_category_tree):
        with pytest.raises(ValidationError):
            add_custom_subcategory(four_category_tree, "category-1", "  ")

    def test_remove_custom_subcategory(self, four_category_tree):
        add_custom_subcategory(four_category_tree, "category-2", "Extra", weight=20)

        removed = remove_subcategory(four_category_tree, "category-2", "custom-extra")

        assert removed.name == "Extra"
        assert [sub.id for sub in four_category_tree.get_category("category-2").subcategories] == ["sub-2-1", "sub-2-2"]
        assert validate(four_category_tree).valid

    def test_remove_template_subcategory_rejected(self, four_category_tree):
        with pytest.raises(ValidationError, match="disable"):
            remove_subcategory(four_category_tree, "category-1", "sub-1-1")

        assert len(four_category_tree.get_category("category-1").subcategories) == 2

    def test_remove_unknown(self, four_category_tree):
        with pytest.raises(UnknownNodeIdError):
            remove_subcategory(four_category_tree, "category-1", "custom-missing")
