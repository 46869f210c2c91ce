"""Pydantic models for releases and their change items."""

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import field_validator

from changelog_browser.configs.constants import Category


class ChangeItem(BaseModel):
    """One bullet of a release body."""

    model_config = ConfigDict(frozen=True)

    text: str
    category: Category
    platform: str | None = None  # e.g. "VSCode", "SDK"


class Release(BaseModel):
    model_config = ConfigDict(frozen=True)

    version: str  # e.g. "v2.1.30"
    name: str
    date: str  # ISO-8601, as published upstream; empty for drafts
    prerelease: bool
    items: tuple[ChangeItem, ...] = ()

    @property
    def categories(self) -> list[Category]:
        """Categories present in this release, in first-seen order."""
        seen: list[Category] = []
        for item in self.items:
            if item.category not in seen:
                seen.append(item.category)
        return seen


class RawRelease(BaseModel):
    """Release record as returned by the GitHub releases API."""

    tag_name: str
    name: str = ""
    published_at: str | None = None  # null on drafts
    prerelease: bool = False
    body: str = ""

    @field_validator("name", "body", mode="before")
    @classmethod
    def _null_to_empty(cls, value: str | None) -> str:
        return value or ""
