import re

from changelog_browser.configs.constants import Category

# Ordered: the first matching rule wins. Lexical overlap between categories is
# expected ("Fixed performance regression" is a bug fix), so keep the order.
_CATEGORY_RULES: list[tuple[re.Pattern[str], Category]] = [
    (re.compile(r"^fix(ed)?\b"), Category.BUG_FIX),
    (re.compile(r"performance|faster|rendering"), Category.PERFORMANCE),
    (re.compile(r"security|secret|blocked|prevent"), Category.SECURITY),
    (re.compile(r"^(added|new)\b|is now available"), Category.FEATURE),
    (re.compile(r"^improve(d)?\b"), Category.IMPROVEMENT),
]


def categorize(text: str) -> Category:
    """Classify a change description. Total: unmatched text is MISC."""
    lower = text.lower()
    for pattern, category in _CATEGORY_RULES:
        if pattern.search(lower):
            return category
    return Category.MISC
