from bs4 import BeautifulSoup
from bs4 import NavigableString
from bs4 import Tag
from bs4.element import PreformattedString

from changelog_browser.configs.constants import HIGHLIGHT_CLASS


def _find_occurrences(text: str, query: str) -> list[int]:
    lower = text.lower()
    positions: list[int] = []
    start = lower.find(query)
    while start != -1:
        positions.append(start)
        start = lower.find(query, start + len(query))
    return positions


def _root_soup(element: Tag) -> BeautifulSoup:
    node: Tag = element
    while node.parent is not None:
        node = node.parent
    if isinstance(node, BeautifulSoup):
        return node
    return BeautifulSoup("", "html.parser")


def clear_highlight(element: Tag) -> None:
    """Unwrap highlight markers and merge the text nodes back together."""
    for mark in element.find_all("mark", class_=HIGHLIGHT_CLASS):
        parent = mark.parent
        mark.replace_with(NavigableString(mark.get_text()))
        if parent is not None:
            parent.smooth()


def highlight_text(element: Tag, query: str) -> int:
    """Wrap each case-insensitive occurrence of query in a <mark>.

    Returns the number of occurrences marked. Matches are collected first and
    replaced last-to-first so earlier offsets stay valid.
    """
    clear_highlight(element)
    if not query:
        return 0

    soup = _root_soup(element)
    matches: list[tuple[NavigableString, list[int]]] = []
    for node in element.find_all(string=True):
        if isinstance(node, PreformattedString):
            continue
        positions = _find_occurrences(str(node), query)
        if positions:
            matches.append((node, positions))

    marked = 0
    for node, positions in reversed(matches):
        remaining = str(node)
        pieces: list[NavigableString | Tag] = []
        for index in reversed(positions):
            after = remaining[index + len(query) :]
            if after:
                pieces.insert(0, NavigableString(after))
            mark = soup.new_tag("mark", attrs={"class": HIGHLIGHT_CLASS})
            mark.string = remaining[index : index + len(query)]
            pieces.insert(0, mark)
            remaining = remaining[:index]
            marked += 1
        if remaining:
            pieces.insert(0, NavigableString(remaining))
        node.replace_with(*pieces)

    return marked
