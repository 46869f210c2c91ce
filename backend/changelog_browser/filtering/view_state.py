from collections.abc import Mapping
from urllib.parse import parse_qs
from urllib.parse import urlencode

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import field_validator

from changelog_browser.configs.constants import ALL_CATEGORIES
from changelog_browser.configs.constants import BATCH_SIZE
from changelog_browser.configs.constants import Category
from changelog_browser.configs.constants import CATEGORY_PARAM
from changelog_browser.configs.constants import COUNT_PARAM
from changelog_browser.configs.constants import SEARCH_PARAM

_CATEGORY_VALUES = {category.value for category in Category}


def normalize_query(raw: str | None) -> str:
    return (raw or "").strip().lower()


def is_known_category(value: str) -> bool:
    return value == ALL_CATEGORIES or value in _CATEGORY_VALUES


class ViewState(BaseModel):
    """What the user is currently looking at.

    Immutable: every user action produces a new state. Changing the category or
    the search starts pagination over from the first batch.
    """

    model_config = ConfigDict(frozen=True)

    category: str = ALL_CATEGORIES
    query: str = ""  # lower-cased, trimmed; empty means no search
    visible_count: int = BATCH_SIZE

    @field_validator("category", mode="before")
    @classmethod
    def _validate_category(cls, value: str | Category) -> str:
        if isinstance(value, Category):
            return value.value
        if not is_known_category(value):
            raise ValueError(f"Unknown category: {value}")
        return value

    @field_validator("query", mode="before")
    @classmethod
    def _normalize_query(cls, value: str | None) -> str:
        return normalize_query(value)

    @field_validator("visible_count")
    @classmethod
    def _validate_visible_count(cls, value: int) -> int:
        if value < 1:
            raise ValueError("visible_count must be positive")
        return value

    @property
    def has_category(self) -> bool:
        return self.category != ALL_CATEGORIES

    @property
    def has_search(self) -> bool:
        return bool(self.query)

    @property
    def is_filtered(self) -> bool:
        return self.has_category or self.has_search

    def with_category(self, category: str | Category) -> "ViewState":
        return ViewState(category=category, query=self.query)

    def with_query(self, raw_query: str | None) -> "ViewState":
        return ViewState(category=self.category, query=raw_query)

    def cleared_search(self) -> "ViewState":
        return self.with_query("")

    def load_more(self) -> "ViewState":
        return self.model_copy(update={"visible_count": self.visible_count + BATCH_SIZE})

    def to_query_params(self, include_count: bool = False) -> dict[str, str]:
        params: dict[str, str] = {}
        if self.has_category:
            params[CATEGORY_PARAM] = self.category
        if self.has_search:
            params[SEARCH_PARAM] = self.query
        if include_count and self.visible_count != BATCH_SIZE:
            params[COUNT_PARAM] = str(self.visible_count)
        return params

    def to_url(self, path: str = "/", include_count: bool = False) -> str:
        """URL for a non-navigating history update; bare path when unfiltered."""
        query_string = urlencode(self.to_query_params(include_count=include_count))
        return f"?{query_string}" if query_string else path

    @classmethod
    def from_query_params(cls, params: Mapping[str, str | None]) -> "ViewState":
        """Rebuild the state from URL parameters, ignoring unusable values."""
        category = params.get(CATEGORY_PARAM) or ALL_CATEGORIES
        if not is_known_category(category):
            category = ALL_CATEGORIES

        visible_count = BATCH_SIZE
        raw_count = params.get(COUNT_PARAM)
        if raw_count:
            try:
                visible_count = max(BATCH_SIZE, int(raw_count))
            except ValueError:
                pass

        return cls(
            category=category,
            query=params.get(SEARCH_PARAM),
            visible_count=visible_count,
        )

    @classmethod
    def from_query_string(cls, query_string: str) -> "ViewState":
        parsed = parse_qs(query_string.lstrip("?"))
        return cls.from_query_params({key: values[0] for key, values in parsed.items()})
