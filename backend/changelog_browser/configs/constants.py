from enum import Enum


class Category(str, Enum):
    """Label assigned to every change line of a release."""

    FEATURE = "feature"
    BUG_FIX = "bug-fix"
    PERFORMANCE = "performance"
    SECURITY = "security"
    IMPROVEMENT = "improvement"
    MISC = "misc"


# Display names, in nav order
CATEGORY_LABELS: dict[Category, str] = {
    Category.FEATURE: "Features",
    Category.BUG_FIX: "Bug fixes",
    Category.PERFORMANCE: "Performance",
    Category.SECURITY: "Security",
    Category.IMPROVEMENT: "Improvements",
    Category.MISC: "Other",
}

# Wildcard value for "no category restriction"
ALL_CATEGORIES = "all"

# Tags recognised in "<Tag>: change text" bullets (exact case)
PLATFORM_PREFIXES: frozenset[str] = frozenset(
    {"VSCode", "JetBrains", "IDE", "SDK", "Windows", "macOS", "Linux"}
)

# Query string keys
CATEGORY_PARAM = "category"
SEARCH_PARAM = "q"
COUNT_PARAM = "count"

# Pagination
BATCH_SIZE = 10

# Timings (milliseconds)
SEARCH_DEBOUNCE_MS = 200
TRANSITION_DELAY_MS = 150  # matches the fade-out duration in the stylesheet
STAGGER_MS = 30
SCROLL_DELAY_MS = 200
COPY_RESET_MS = 1500

# CSS state classes toggled by the engine
FADE_OUT_CLASS = "fade-out"
FADE_IN_CLASS = "fade-in"
ACTIVE_CLASS = "active"
SEARCH_EXPANDED_CLASS = "search-expanded"
HIGHLIGHT_CLASS = "search-highlight"

COPY_ICON = "content_copy"
COPY_DONE_ICON = "check"
