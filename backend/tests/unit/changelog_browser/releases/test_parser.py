from changelog_browser.configs.constants import Category
from changelog_browser.releases.parser import parse_release_body
from changelog_browser.releases.parser import split_platform


def test_extracts_bullets_in_order() -> None:
    body = (
        "## What's changed\n\n"
        "- Added dark mode support\n"
        "- Fixed crash on startup\n"
        "- Improved rendering speed"
    )
    items = parse_release_body(body)

    assert [item.text for item in items] == [
        "Added dark mode support",
        "Fixed crash on startup",
        "Improved rendering speed",
    ]
    assert [item.category for item in items] == [
        Category.FEATURE,
        Category.BUG_FIX,
        Category.PERFORMANCE,
    ]


def test_empty_body() -> None:
    assert parse_release_body("") == []
    assert parse_release_body(None) == []


def test_body_without_bullets() -> None:
    assert parse_release_body("## Header\n\nNo changes.") == []


def test_skips_blank_bullets() -> None:
    items = parse_release_body("- First item\n- \n- Third item")

    assert [item.text for item in items] == ["First item", "Third item"]


def test_trims_whitespace() -> None:
    items = parse_release_body("-   Extra spaces here   ")

    assert len(items) == 1
    assert items[0].text == "Extra spaces here"


def test_keeps_inline_markdown() -> None:
    items = parse_release_body("- Added `--verbose` flag for **detailed** output")

    assert items[0].text == "Added `--verbose` flag for **detailed** output"


def test_ignores_non_dash_lines() -> None:
    body = "* starred\n  - indented\n-no space\n1. numbered\n- Real item"
    items = parse_release_body(body)

    assert [item.text for item in items] == ["Real item"]


def test_handles_windows_line_endings() -> None:
    items = parse_release_body("- First\r\n- Second\r\n")

    assert [item.text for item in items] == ["First", "Second"]


def test_known_platform_prefix() -> None:
    items = parse_release_body("- VSCode: Fixed diff view scrolling")

    assert items[0].platform == "VSCode"
    assert items[0].text == "Fixed diff view scrolling"
    assert items[0].category == Category.BUG_FIX


def test_unknown_word_prefix_is_kept_as_text() -> None:
    items = parse_release_body("- Note: restart required after upgrading")

    assert items[0].platform is None
    assert items[0].text == "Note: restart required after upgrading"


def test_bracket_prefix() -> None:
    items = parse_release_body("- [Bedrock] Added support for inference profiles")

    assert items[0].platform == "Bedrock"
    assert items[0].text == "Added support for inference profiles"
    assert items[0].category == Category.FEATURE


def test_word_prefix_wins_over_bracket() -> None:
    assert split_platform("SDK: [beta] New streaming API") == (
        "SDK",
        "[beta] New streaming API",
    )


def test_prefix_without_text_is_not_a_prefix() -> None:
    assert split_platform("SDK:") == (None, "SDK:")
    assert split_platform("[SDK]") == (None, "[SDK]")


def test_items_without_platform() -> None:
    items = parse_release_body("- Plain change")

    assert items[0].platform is None
