"""BeautifulSoup-backed handles over a rendered changelog page."""

from collections.abc import Sequence
from dataclasses import dataclass

from bs4 import BeautifulSoup
from bs4 import Tag

from changelog_browser.configs.constants import ACTIVE_CLASS
from changelog_browser.configs.constants import SEARCH_EXPANDED_CLASS
from changelog_browser.filtering.highlight import clear_highlight
from changelog_browser.filtering.highlight import highlight_text
from changelog_browser.filtering.interfaces import ChangeItemHandle
from changelog_browser.filtering.interfaces import CopyButtonHandle
from changelog_browser.filtering.interfaces import PageControls
from changelog_browser.filtering.interfaces import ReleaseCardHandle

_HIDDEN_STYLE = "display: none"


def _classes(tag: Tag) -> list[str]:
    value = tag.get("class") or []
    if isinstance(value, str):
        return value.split()
    return list(value)


def _add_class(tag: Tag, class_name: str) -> None:
    classes = _classes(tag)
    if class_name not in classes:
        classes.append(class_name)
    tag["class"] = classes


def _remove_class(tag: Tag, class_name: str) -> None:
    classes = [name for name in _classes(tag) if name != class_name]
    if classes:
        tag["class"] = classes
    elif tag.has_attr("class"):
        del tag["class"]


def _is_hidden(tag: Tag) -> bool:
    return tag.get("style") == _HIDDEN_STYLE


def _set_hidden(tag: Tag, hidden: bool) -> None:
    if hidden:
        tag["style"] = _HIDDEN_STYLE
    elif tag.has_attr("style"):
        del tag["style"]


class SoupChangeItem(ChangeItemHandle):
    def __init__(self, tag: Tag) -> None:
        self._tag = tag
        self._text_tag = tag.select_one(".item-text")

    @property
    def category(self) -> str:
        return str(self._tag.get("data-category") or "")

    @property
    def description(self) -> str:
        source = self._text_tag if self._text_tag is not None else self._tag
        return source.get_text()

    def is_visible(self) -> bool:
        return not _is_hidden(self._tag)

    def set_visible(self, visible: bool) -> None:
        _set_hidden(self._tag, not visible)

    def highlight(self, query: str) -> None:
        if self._text_tag is not None:
            highlight_text(self._text_tag, query)

    def clear_highlight(self) -> None:
        if self._text_tag is not None:
            clear_highlight(self._text_tag)


class SoupReleaseCard(ReleaseCardHandle):
    """A `.release-wrapper` element and the `.release-card` inside it."""

    def __init__(self, wrapper: Tag) -> None:
        self._wrapper = wrapper
        self._card = wrapper.select_one(".release-card") or wrapper
        self._items = [SoupChangeItem(tag) for tag in wrapper.select(".change-item")]

    @property
    def element(self) -> Tag:
        return self._wrapper

    @property
    def version(self) -> str:
        return str(self._card.get("data-version") or "")

    @property
    def categories_json(self) -> str | None:
        value = self._card.get("data-categories")
        return str(value) if value is not None else None

    @property
    def items(self) -> Sequence[ChangeItemHandle]:
        return self._items

    def is_displayed(self) -> bool:
        return not _is_hidden(self._wrapper)

    def set_displayed(self, displayed: bool) -> None:
        _set_hidden(self._wrapper, not displayed)

    def add_class(self, class_name: str) -> None:
        _add_class(self._wrapper, class_name)

    def remove_class(self, class_name: str) -> None:
        _remove_class(self._wrapper, class_name)

    def has_class(self, class_name: str) -> bool:
        return class_name in _classes(self._wrapper)

    def set_tag_visible(self, category: str, visible: bool) -> None:
        for tag in self._wrapper.select(f".tag.tag-{category}"):
            _set_hidden(tag, not visible)


class SoupCopyButton(CopyButtonHandle):
    def __init__(self, tag: Tag) -> None:
        self._tag = tag

    @property
    def payload(self) -> str:
        return str(self._tag.get("data-copy") or "")

    @property
    def element_key(self) -> int:
        return id(self._tag)

    @property
    def icon(self) -> str:
        icon = self._tag.select_one(".material-symbols-sharp")
        return icon.get_text() if icon is not None else ""

    def set_icon(self, icon: str) -> None:
        icon_tag = self._tag.select_one(".material-symbols-sharp")
        if icon_tag is not None:
            icon_tag.string = icon


class SoupPageControls(PageControls):
    def __init__(self, soup: BeautifulSoup) -> None:
        self._soup = soup
        self.url: str | None = None

    def _by_id(self, element_id: str) -> Tag | None:
        return self._soup.find(id=element_id)

    def set_search_value(self, value: str) -> None:
        search_input = self._by_id("search-input")
        if search_input is not None:
            search_input["value"] = value

    def focus_search(self) -> None:
        search_input = self._by_id("search-input")
        if search_input is not None:
            search_input["autofocus"] = ""

    def set_active_category(self, category: str) -> None:
        for button in self._soup.select(".nav-item, .pill"):
            if button.get("data-category") == category:
                _add_class(button, ACTIVE_CLASS)
            else:
                _remove_class(button, ACTIVE_CLASS)

    def set_load_more(self, remaining: int) -> None:
        container = self._by_id("load-more-container")
        if container is not None:
            _set_hidden(container, remaining <= 0)
        count = self._by_id("load-more-count")
        if count is not None and remaining > 0:
            count.string = f"· {remaining} remaining"

    def read_summary(self) -> tuple[int, int]:
        return self._read_number("stat-changes"), self._read_number("stat-releases")

    def _read_number(self, element_id: str) -> int:
        tag = self._by_id(element_id)
        if tag is None:
            return 0
        try:
            return int(tag.get_text().strip().replace(",", ""))
        except ValueError:
            return 0

    def set_summary(self, changes: int, releases: int) -> None:
        for element_id, value in (("stat-changes", changes), ("stat-releases", releases)):
            tag = self._by_id(element_id)
            if tag is not None:
                tag.string = f"{value:,}"

    def replace_url(self, url: str) -> None:
        self.url = url

    def scroll_to(self, card: ReleaseCardHandle) -> None:
        body = self._soup.body
        if body is not None:
            body["data-scroll-target"] = card.version

    def is_search_expanded(self) -> bool:
        header = self._soup.select_one(".content-header")
        return header is not None and SEARCH_EXPANDED_CLASS in _classes(header)

    def set_search_expanded(self, expanded: bool) -> None:
        header = self._soup.select_one(".content-header")
        if header is None:
            return
        if expanded:
            _add_class(header, SEARCH_EXPANDED_CLASS)
        else:
            _remove_class(header, SEARCH_EXPANDED_CLASS)

    def show_update_toast(self) -> None:
        toast = self._by_id("toast")
        if toast is not None and toast.has_attr("hidden"):
            del toast["hidden"]

    def hide_update_toast(self) -> None:
        toast = self._by_id("toast")
        if toast is not None:
            toast["hidden"] = ""


@dataclass
class SoupPage:
    soup: BeautifulSoup
    cards: list[SoupReleaseCard]
    controls: SoupPageControls
    copy_buttons: list[SoupCopyButton]

    def html(self) -> str:
        return str(self.soup)


def load_page(html: str) -> SoupPage:
    soup = BeautifulSoup(html, "html.parser")
    return SoupPage(
        soup=soup,
        cards=[SoupReleaseCard(wrapper) for wrapper in soup.select(".release-wrapper")],
        controls=SoupPageControls(soup),
        copy_buttons=[SoupCopyButton(tag) for tag in soup.select(".copy-btn")],
    )
