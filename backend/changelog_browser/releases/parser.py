import re

from changelog_browser.configs.constants import PLATFORM_PREFIXES
from changelog_browser.releases.categorizer import categorize
from changelog_browser.releases.models import ChangeItem

_BULLET_PATTERN = re.compile(r"^-\s+(.+)")
_PREFIX_PATTERN = re.compile(r"^(\w+):\s+(.+)$")
_BRACKET_PATTERN = re.compile(r"^\[([^\]]+)\]\s+(.+)$")


def split_platform(text: str) -> tuple[str | None, str]:
    """Strip a leading platform tag from a bullet.

    Recognises "VSCode: ..." for the known platforms and "[Tag] ..." for any
    tag. Returns (platform, remaining text).
    """
    match = _PREFIX_PATTERN.match(text)
    if match and match.group(1) in PLATFORM_PREFIXES:
        return match.group(1), match.group(2).strip()

    match = _BRACKET_PATTERN.match(text)
    if match:
        return match.group(1).strip(), match.group(2).strip()

    return None, text


def parse_release_body(body: str | None) -> list[ChangeItem]:
    """Extract the "- " bullets of a markdown release body as change items.

    Headers, prose and blank bullets are skipped. Source order is kept.
    """
    if not body:
        return []

    items: list[ChangeItem] = []
    for line in body.splitlines():
        match = _BULLET_PATTERN.match(line)
        if not match:
            continue
        content = match.group(1).strip()
        if not content:
            continue

        platform, text = split_platform(content)
        items.append(
            ChangeItem(text=text, category=categorize(text), platform=platform)
        )

    return items
