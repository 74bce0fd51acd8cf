"""Constants for criteria weight validation and template loading."""

from pathlib import Path

# Every enabled level must total this many percentage points
TOTAL_WEIGHT = 100.0

# Node weight bounds (percentage points)
MIN_WEIGHT = 0.0
MAX_WEIGHT = 100.0

# Leaf score bounds
MIN_SCORE = 0.0
MAX_SCORE = 100.0

# Packaged template fixtures, one <fund_type>.yaml per fund type
DEFAULT_TEMPLATES_DIR = Path(__file__).parent / "fund_templates"
TEMPLATE_FILE_SUFFIX = ".yaml"

# Prefix for ids of user-added subcategories
CUSTOM_ID_PREFIX = "custom-"

# Node path of the category level in validation reports
ROOT_NODE_PATH = "/"

# Id given to nodes whose name has no letters or digits to slugify
FALLBACK_NODE_ID = "node"
