"""Handles the engine uses to read and mutate a rendered changelog page.

The engine only reads card metadata and toggles visibility, CSS state classes
and highlight markers through these interfaces. It never restructures the page.
"""

from abc import ABC
from abc import abstractmethod
from collections.abc import Hashable
from collections.abc import Sequence


class ChangeItemHandle(ABC):
    @property
    @abstractmethod
    def category(self) -> str: ...

    @property
    @abstractmethod
    def description(self) -> str:
        """Plain text of the change, without markup."""
        ...

    @abstractmethod
    def is_visible(self) -> bool: ...

    @abstractmethod
    def set_visible(self, visible: bool) -> None: ...

    @abstractmethod
    def highlight(self, query: str) -> None:
        """Wrap every case-insensitive occurrence of query in a marker."""
        ...

    @abstractmethod
    def clear_highlight(self) -> None: ...


class ReleaseCardHandle(ABC):
    @property
    @abstractmethod
    def version(self) -> str: ...

    @property
    @abstractmethod
    def categories_json(self) -> str | None:
        """Raw JSON list of the categories present, as rendered."""
        ...

    @property
    @abstractmethod
    def items(self) -> Sequence[ChangeItemHandle]: ...

    @abstractmethod
    def is_displayed(self) -> bool: ...

    @abstractmethod
    def set_displayed(self, displayed: bool) -> None: ...

    @abstractmethod
    def add_class(self, class_name: str) -> None: ...

    @abstractmethod
    def remove_class(self, class_name: str) -> None: ...

    @abstractmethod
    def has_class(self, class_name: str) -> bool: ...

    @abstractmethod
    def set_tag_visible(self, category: str, visible: bool) -> None: ...


class CopyButtonHandle(ABC):
    @property
    @abstractmethod
    def payload(self) -> str: ...

    @property
    @abstractmethod
    def element_key(self) -> Hashable:
        """Identifies the button element; equal for handles over the same one."""
        ...

    @abstractmethod
    def set_icon(self, icon: str) -> None: ...


class Clipboard(ABC):
    @abstractmethod
    def write_text(self, text: str) -> None:
        """May raise if the host refuses clipboard access."""
        ...


class PageControls(ABC):
    """Everything on the page outside the release cards."""

    @abstractmethod
    def set_search_value(self, value: str) -> None: ...

    @abstractmethod
    def focus_search(self) -> None: ...

    @abstractmethod
    def set_active_category(self, category: str) -> None:
        """Mark the sidebar item and mobile pill for category as active."""
        ...

    @abstractmethod
    def set_load_more(self, remaining: int) -> None:
        """Show the load-more control with a count, or hide it when 0."""
        ...

    @abstractmethod
    def read_summary(self) -> tuple[int, int]:
        """(change count, release count) as currently displayed."""
        ...

    @abstractmethod
    def set_summary(self, changes: int, releases: int) -> None: ...

    @abstractmethod
    def replace_url(self, url: str) -> None:
        """Update the address without navigating."""
        ...

    @abstractmethod
    def scroll_to(self, card: ReleaseCardHandle) -> None: ...

    @abstractmethod
    def is_search_expanded(self) -> bool: ...

    @abstractmethod
    def set_search_expanded(self, expanded: bool) -> None: ...

    @abstractmethod
    def show_update_toast(self) -> None: ...

    @abstractmethod
    def hide_update_toast(self) -> None: ...
