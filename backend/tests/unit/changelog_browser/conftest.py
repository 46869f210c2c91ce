"""Shared release fixtures for changelog browser tests."""

from typing import Any

import pytest

from changelog_browser.releases.models import Release
from changelog_browser.releases.source import assemble_releases

# Deliberately not in date order
SAMPLE_RAW_RELEASES: list[dict[str, Any]] = [
    {
        "tag_name": "v2.0.0",
        "name": "v2.0.0",
        "published_at": "2025-02-01T00:00:00Z",
        "prerelease": False,
        "body": "## What's changed\n\n- New command palette\n- Updated documentation links",
    },
    {
        "tag_name": "v2.1.0",
        "name": "v2.1.0",
        "published_at": "2025-03-01T00:00:00Z",
        "prerelease": False,
        "body": (
            "## What's changed\n\n"
            "- Added plugin marketplace\n"
            "- Fixed crash when resizing terminal\n"
            "- VSCode: Improved diff view"
        ),
    },
    {
        "tag_name": "v1.9.0-beta.1",
        "name": "v1.9.0-beta.1",
        "published_at": "2025-01-20T00:00:00Z",
        "prerelease": True,
        "body": "- [SDK] Fixed token counting\n- Improve error messages for failed commands",
    },
    {
        "tag_name": "v2.0.5",
        "name": None,
        "published_at": "2025-02-15T00:00:00Z",
        "prerelease": False,
        "body": "- Faster startup on large repos\n- Prevent secret leakage in logs",
    },
]


def make_raw_release(index: int) -> dict[str, Any]:
    body = f"- Fixed bug number {index}\n- Added feature {index}"
    if index % 3 == 0:
        body += f"\n- Faster sync {index}"
    return {
        "tag_name": f"v1.0.{index}",
        "name": f"v1.0.{index}",
        "published_at": f"2024-01-{index + 1:02d}T12:00:00Z",
        "prerelease": False,
        "body": body,
    }


@pytest.fixture
def sample_releases() -> list[Release]:
    """v2.1.0, v2.0.5, v2.0.0, v1.9.0-beta.1 (newest first)."""
    return assemble_releases(SAMPLE_RAW_RELEASES)


@pytest.fixture
def many_releases() -> list[Release]:
    """25 releases, v1.0.24 (newest) down to v1.0.0."""
    return assemble_releases(make_raw_release(index) for index in range(25))
