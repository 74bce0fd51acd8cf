"""
Shared test configuration for criteria tests
"""
import pytest

from criteria.models import Category, CriteriaTree, Subcategory


def build_tree(category_weights, subcategory_weights=None, fund_type="vc"):
    """Tree with categories 'category-1'.. and subcategories 'sub-1-1'.. (default 50/50 each)"""
    categories = []
    for i, weight in enumerate(category_weights, start=1):
        sub_weights = subcategory_weights[i - 1] if subcategory_weights else [50, 50]
        categories.append(
            Category(
                name=f"Category {i}",
                weight=weight,
                subcategories=[
                    Subcategory(name=f"Sub {i}.{j}", weight=sub_weight) for j, sub_weight in enumerate(sub_weights, start=1)
                ],
            )
        )
    return CriteriaTree(fund_type=fund_type, categories=categories)


@pytest.fixture
def tree_factory():
    """Factory building small criteria trees from weight lists"""
    return build_tree


@pytest.fixture
def four_category_tree():
    """Four enabled categories at 25% each, every category split 50/50"""
    return build_tree([25, 25, 25, 25])


@pytest.fixture
def four_category_template_dir(tmp_path, monkeypatch):
    """Templates directory whose VC template has four 25% categories"""
    lines = ['version: "1.0"', "fund_type: vc", "categories:"]
    for i in range(1, 5):
        lines += [
            f'  - name: "Category {i}"',
            "    weight: 25",
            "    subcategories:",
            f'      - {{name: "Sub {i}.1", weight: 60}}',
            f'      - {{name: "Sub {i}.2", weight: 40}}',
        ]
    (tmp_path / "vc.yaml").write_text("\n".join(lines) + "\n", encoding="utf-8")
    monkeypatch.setenv("CRITERIA_TEMPLATES_DIR", str(tmp_path))

    from core.config import get_settings
    from criteria.templates import clear_template_cache

    get_settings.cache_clear()
    clear_template_cache()
    return tmp_path
