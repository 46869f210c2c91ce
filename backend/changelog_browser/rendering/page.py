"""HTML rendering of the changelog page."""

import json
from pathlib import Path

import jinja2

from changelog_browser.configs.app_configs import BUILD_TIMESTAMP
from changelog_browser.configs.app_configs import SITE_TITLE
from changelog_browser.configs.constants import ALL_CATEGORIES
from changelog_browser.configs.constants import CATEGORY_LABELS
from changelog_browser.filtering.engine import ChangelogEngine
from changelog_browser.filtering.scheduler import ManualScheduler
from changelog_browser.filtering.soup_dom import load_page
from changelog_browser.filtering.view_state import ViewState
from changelog_browser.releases.models import Release

TEMPLATES_DIR = Path(__file__).parent / "templates"
PAGE_TEMPLATE = "changelog.html.jinja"

_jinja_env = jinja2.Environment(
    loader=jinja2.FileSystemLoader(TEMPLATES_DIR),
    autoescape=True,
    trim_blocks=True,
    lstrip_blocks=True,
)


def release_copy_text(release: Release) -> str:
    """Markdown for the copy button: version heading plus one bullet per change."""
    lines = [f"## {release.version}", ""]
    for item in release.items:
        prefix = f"{item.platform}: " if item.platform else ""
        lines.append(f"- {prefix}{item.text}")
    return "\n".join(lines)


def render_page(
    releases: list[Release],
    state: ViewState | None = None,
    build_timestamp: int = BUILD_TIMESTAMP,
    error: str | None = None,
) -> str:
    """Render every release as a displayed card. Filtering happens afterwards."""
    state = state or ViewState()
    urls = {ALL_CATEGORIES: state.with_category(ALL_CATEGORIES).to_url()}
    for category in CATEGORY_LABELS:
        urls[category.value] = state.with_category(category).to_url()

    template = _jinja_env.get_template(PAGE_TEMPLATE)
    return template.render(
        site_title=SITE_TITLE,
        build_timestamp=build_timestamp,
        state=state,
        error=error,
        releases=releases,
        release_categories=[
            json.dumps([category.value for category in release.categories])
            for release in releases
        ],
        copy_texts=[release_copy_text(release) for release in releases],
        categories=[(category.value, label) for category, label in CATEGORY_LABELS.items()],
        category_labels=CATEGORY_LABELS,
        urls=urls,
        load_more_url=state.load_more().to_url(include_count=True),
        total_changes=sum(len(release.items) for release in releases),
        total_releases=len(releases),
    )


def render_view(
    releases: list[Release],
    query_string: str = "",
    build_timestamp: int = BUILD_TIMESTAMP,
    error: str | None = None,
) -> str:
    """Render the page as it looks once the engine has applied the URL state.

    The engine runs against the parsed document with a virtual clock, so every
    transition completes before the HTML is serialised.
    """
    state = ViewState.from_query_string(query_string)
    page = load_page(render_page(releases, state, build_timestamp, error))

    scheduler = ManualScheduler()
    engine = ChangelogEngine(page.cards, page.controls, scheduler, state=state)
    engine.start(query_string)
    scheduler.run_all()

    return page.html()
