"""Interactive filter/render engine for a changelog page.

Decisions come from the pure functions in `matching`; this class applies them
to card handles, drives the fade transitions and keeps the URL and summary
counts in sync with the current ViewState.

Render protocol:
    phase 1 (synchronous) - compute the matching page, fade out cards that are
        leaving, replace the URL.
    phase 2 (after TRANSITION_DELAY_MS) - hide everything that is not on the
        page, show and filter the page, stagger fade-ins for newcomers, update
        the load-more control and the summary.
A render issued while phase 2 is still pending cancels it first.
"""

from collections.abc import Hashable
from collections.abc import Sequence
from urllib.parse import parse_qs

from changelog_browser.configs.constants import ALL_CATEGORIES
from changelog_browser.configs.constants import Category
from changelog_browser.configs.constants import COPY_DONE_ICON
from changelog_browser.configs.constants import COPY_ICON
from changelog_browser.configs.constants import COPY_RESET_MS
from changelog_browser.configs.constants import FADE_IN_CLASS
from changelog_browser.configs.constants import FADE_OUT_CLASS
from changelog_browser.configs.constants import SCROLL_DELAY_MS
from changelog_browser.configs.constants import SEARCH_DEBOUNCE_MS
from changelog_browser.configs.constants import SEARCH_PARAM
from changelog_browser.configs.constants import STAGGER_MS
from changelog_browser.configs.constants import TRANSITION_DELAY_MS
from changelog_browser.filtering.interfaces import Clipboard
from changelog_browser.filtering.interfaces import CopyButtonHandle
from changelog_browser.filtering.interfaces import PageControls
from changelog_browser.filtering.interfaces import ReleaseCardHandle
from changelog_browser.filtering.matching import CardSnapshot
from changelog_browser.filtering.matching import compute_item_visibility
from changelog_browser.filtering.matching import compute_visible_page
from changelog_browser.filtering.matching import count_visible_items
from changelog_browser.filtering.matching import decode_categories
from changelog_browser.filtering.matching import ItemSnapshot
from changelog_browser.filtering.matching import VisiblePage
from changelog_browser.filtering.scheduler import Scheduler
from changelog_browser.filtering.scheduler import TaskGroup
from changelog_browser.filtering.scheduler import TaskSlot
from changelog_browser.filtering.view_state import is_known_category
from changelog_browser.filtering.view_state import ViewState
from changelog_browser.utils.logger import setup_logger

logger = setup_logger()


def snapshot_card(card: ReleaseCardHandle) -> CardSnapshot:
    return CardSnapshot(
        version=card.version.lower(),
        categories=decode_categories(card.categories_json),
        items=tuple(
            ItemSnapshot(category=item.category, text=item.description.lower())
            for item in card.items
        ),
    )


class ChangelogEngine:
    def __init__(
        self,
        cards: Sequence[ReleaseCardHandle],
        controls: PageControls,
        scheduler: Scheduler,
        state: ViewState | None = None,
    ) -> None:
        self._cards = list(cards)
        self._controls = controls
        self._state = state or ViewState()

        # Item text and categories never change, only their presentation
        self._snapshots = [snapshot_card(card) for card in self._cards]
        # Unfiltered totals as rendered, restored whenever filters are cleared
        self._cached_totals = controls.read_summary()

        self._debounce = TaskSlot(scheduler, "search-debounce")
        self._phase_two = TaskSlot(scheduler, "render-phase-two")
        self._scroll = TaskSlot(scheduler, "scroll")
        self._fade_ins = TaskGroup(scheduler, "fade-in-stagger")
        self._copy_resets: dict[Hashable, TaskSlot] = {}
        self._scheduler = scheduler

        self._last_page: VisiblePage | None = None

    @property
    def state(self) -> ViewState:
        return self._state

    @property
    def cards(self) -> list[ReleaseCardHandle]:
        return list(self._cards)

    @property
    def last_page(self) -> VisiblePage | None:
        """Page applied by the most recent completed render."""
        return self._last_page

    @property
    def transition_pending(self) -> bool:
        return self._phase_two.pending

    # Initial load ------------------------------------------------------------
    def start(self, query_string: str = "") -> VisiblePage:
        """Restore the state from the URL and run the first render."""
        state = ViewState.from_query_string(query_string) if query_string else self._state
        self._state = state

        if state.has_category:
            self._controls.set_active_category(state.category)
        if state.has_search:
            self._controls.set_search_value(_raw_search_value(query_string) or state.query)

        return self.render()

    # Rendering ---------------------------------------------------------------
    def compute_page(self) -> VisiblePage:
        return compute_visible_page(self._snapshots, self._state)

    def render(self) -> VisiblePage:
        self._scroll.cancel()
        if self._phase_two.cancel() or self._fade_ins.pending_count:
            self._fade_ins.cancel_all()
            self._reset_transition_classes()

        page = self.compute_page()
        on_page = set(page.visible)

        for index, card in enumerate(self._cards):
            if index not in on_page and card.is_displayed():
                card.add_class(FADE_OUT_CLASS)

        self._controls.replace_url(self._state.to_url())

        self._phase_two.schedule(
            TRANSITION_DELAY_MS, lambda: self._complete_render(page)
        )
        return page

    def _reset_transition_classes(self) -> None:
        for card in self._cards:
            card.remove_class(FADE_OUT_CLASS)
            card.remove_class(FADE_IN_CLASS)

    def _complete_render(self, page: VisiblePage) -> None:
        previously_displayed = {
            index for index, card in enumerate(self._cards) if card.is_displayed()
        }

        on_page = set(page.visible)
        for index, card in enumerate(self._cards):
            card.remove_class(FADE_OUT_CLASS)
            if index not in on_page:
                card.set_displayed(False)

        for position, index in enumerate(page.visible):
            card = self._cards[index]
            card.set_displayed(True)
            self._filter_items(index)
            if index not in previously_displayed:
                card.add_class(FADE_IN_CLASS)
                self._fade_ins.schedule(
                    STAGGER_MS * (position + 1),
                    lambda card=card: card.remove_class(FADE_IN_CLASS),
                )

        self._controls.set_load_more(page.remaining)
        self._update_summary(page)
        self._last_page = page

    def _filter_items(self, index: int) -> None:
        card = self._cards[index]
        visibility = compute_item_visibility(self._snapshots[index], self._state)

        for item, visible in zip(card.items, visibility.visible):
            item.set_visible(visible)
            if visible and self._state.has_search:
                item.highlight(self._state.query)
            else:
                item.clear_highlight()

        for category in Category:
            card.set_tag_visible(
                category.value, category.value in visibility.visible_categories
            )

    def _update_summary(self, page: VisiblePage) -> None:
        if not self._state.is_filtered:
            self._controls.set_summary(*self._cached_totals)
            return
        changes = count_visible_items(self._snapshots, page, self._state)
        self._controls.set_summary(changes, len(page.matching))

    # User input --------------------------------------------------------------
    def select_category(self, category: str) -> VisiblePage:
        if not is_known_category(category):
            logger.debug(f"Ignoring unknown category {category!r}")
            category = ALL_CATEGORIES
        self._state = self._state.with_category(category)
        self._controls.set_active_category(category)
        return self.render()

    def on_search_input(self, value: str) -> None:
        """Keystroke in the search box; only the last one in the window counts."""
        self._debounce.schedule(SEARCH_DEBOUNCE_MS, lambda: self.apply_search(value))

    def apply_search(self, value: str) -> VisiblePage:
        self._debounce.cancel()
        self._state = self._state.with_query(value)
        return self.render()

    def clear_search(self) -> VisiblePage:
        self._controls.set_search_value("")
        return self.apply_search("")

    def load_more(self) -> VisiblePage:
        previous_count = self._state.visible_count
        self._state = self._state.load_more()
        page = self.render()

        if previous_count < len(page.matching):
            first_new = self._cards[page.matching[previous_count]]
            self._scroll.schedule(
                SCROLL_DELAY_MS, lambda: self._controls.scroll_to(first_new)
            )
        return page

    def handle_keydown(self, key: str, meta: bool = False, ctrl: bool = False) -> bool:
        """Keyboard shortcuts. Returns True when the key was consumed."""
        if (meta or ctrl) and key.lower() == "k":
            self._controls.focus_search()
            return True
        if key == "Escape":
            self.clear_search()
            if self._controls.is_search_expanded():
                self._controls.set_search_expanded(False)
            return True
        return False

    def open_mobile_search(self) -> None:
        self._controls.set_search_expanded(True)
        self._controls.focus_search()

    def close_mobile_search(self) -> VisiblePage:
        self._controls.set_search_expanded(False)
        return self.clear_search()

    def copy(self, button: CopyButtonHandle, clipboard: Clipboard) -> bool:
        """Copy a button's payload. Failures are swallowed; returns success."""
        try:
            clipboard.write_text(button.payload)
        except Exception as e:
            logger.debug(f"Clipboard write failed: {e}")
            return False

        button.set_icon(COPY_DONE_ICON)
        key = button.element_key
        slot = self._copy_resets.get(key)
        if slot is None:
            slot = self._copy_resets[key] = TaskSlot(self._scheduler, "copy-reset")

        def _reset_icon() -> None:
            button.set_icon(COPY_ICON)
            self._copy_resets.pop(key, None)

        slot.schedule(COPY_RESET_MS, _reset_icon)
        return True


def _raw_search_value(query_string: str) -> str | None:
    """The q parameter as typed, before lower-casing."""
    values = parse_qs(query_string.lstrip("?")).get(SEARCH_PARAM)
    return values[0].strip() if values else None
