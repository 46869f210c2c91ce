"""Pure filtering decisions over card snapshots.

Nothing here touches a document. The engine takes snapshots of the rendered
cards once, then asks these functions which cards and items to show for a
given ViewState.
"""

import json
from collections.abc import Sequence
from dataclasses import dataclass

from changelog_browser.filtering.view_state import ViewState
from changelog_browser.releases.models import Release
from changelog_browser.utils.logger import setup_logger

logger = setup_logger()


@dataclass(frozen=True)
class ItemSnapshot:
    category: str
    text: str  # lower-cased description


@dataclass(frozen=True)
class CardSnapshot:
    version: str  # lower-cased
    categories: frozenset[str]
    items: tuple[ItemSnapshot, ...]

    @classmethod
    def from_release(cls, release: Release) -> "CardSnapshot":
        return cls(
            version=release.version.lower(),
            categories=frozenset(category.value for category in release.categories),
            items=tuple(
                ItemSnapshot(category=item.category.value, text=item.text.lower())
                for item in release.items
            ),
        )


@dataclass(frozen=True)
class VisiblePage:
    matching: tuple[int, ...]  # card indices, in card order
    visible: tuple[int, ...]  # prefix of `matching` that is on the page
    remaining: int


@dataclass(frozen=True)
class ItemVisibility:
    visible: tuple[bool, ...]
    visible_categories: frozenset[str]
    used_version_fallback: bool

    @property
    def visible_count(self) -> int:
        return sum(self.visible)


def decode_categories(raw: str | None) -> frozenset[str]:
    """Decode a card's JSON category list. Bad metadata means no categories."""
    if not raw:
        return frozenset()
    try:
        decoded = json.loads(raw)
    except json.JSONDecodeError:
        logger.debug(f"Ignoring malformed category metadata: {raw!r}")
        return frozenset()
    if not isinstance(decoded, list):
        return frozenset()
    return frozenset(value for value in decoded if isinstance(value, str))


def release_matches(card: CardSnapshot, state: ViewState) -> bool:
    if state.has_category and state.has_search:
        # Version hits only need the release to carry the category somewhere;
        # text hits need a single item that satisfies both.
        if state.query in card.version and state.category in card.categories:
            return True
        return any(
            item.category == state.category and state.query in item.text
            for item in card.items
        )

    if state.has_category:
        return state.category in card.categories

    if state.has_search:
        return state.query in card.version or any(
            state.query in item.text for item in card.items
        )

    return True


def get_matching_indices(cards: Sequence[CardSnapshot], state: ViewState) -> list[int]:
    return [index for index, card in enumerate(cards) if release_matches(card, state)]


def compute_visible_page(cards: Sequence[CardSnapshot], state: ViewState) -> VisiblePage:
    matching = get_matching_indices(cards, state)
    return VisiblePage(
        matching=tuple(matching),
        visible=tuple(matching[: state.visible_count]),
        remaining=max(0, len(matching) - state.visible_count),
    )


def compute_item_visibility(card: CardSnapshot, state: ViewState) -> ItemVisibility:
    def category_ok(item: ItemSnapshot) -> bool:
        return not state.has_category or item.category == state.category

    visible = [
        category_ok(item) and (not state.has_search or state.query in item.text)
        for item in card.items
    ]

    # A release found through its version number would otherwise render empty
    used_version_fallback = False
    if not any(visible) and state.has_search and state.query in card.version:
        visible = [category_ok(item) for item in card.items]
        used_version_fallback = True

    visible_categories = frozenset(
        item.category
        for item, shown in zip(card.items, visible)
        if shown and item.category
    )
    return ItemVisibility(
        visible=tuple(visible),
        visible_categories=visible_categories,
        used_version_fallback=used_version_fallback,
    )


def count_visible_items(
    cards: Sequence[CardSnapshot], page: VisiblePage, state: ViewState
) -> int:
    return sum(
        compute_item_visibility(cards[index], state).visible_count
        for index in page.visible
    )
