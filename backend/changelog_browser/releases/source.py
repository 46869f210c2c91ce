"""Fetching and assembling releases from the GitHub releases API."""

import threading
import time
from collections.abc import Iterable
from datetime import datetime
from datetime import timezone
from typing import Any

import httpx
from pydantic import ValidationError

from changelog_browser.configs.app_configs import GITHUB_TOKEN
from changelog_browser.configs.app_configs import RELEASES_API_URL
from changelog_browser.configs.app_configs import RELEASES_CACHE_TTL_SECONDS
from changelog_browser.configs.app_configs import RELEASES_FETCH_TIMEOUT
from changelog_browser.configs.app_configs import RELEASES_PER_PAGE
from changelog_browser.releases.exceptions import ReleaseFeedUnavailableError
from changelog_browser.releases.exceptions import ReleaseFetchError
from changelog_browser.releases.models import RawRelease
from changelog_browser.releases.models import Release
from changelog_browser.releases.parser import parse_release_body
from changelog_browser.utils.logger import setup_logger

logger = setup_logger()

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _published_at(release: Release) -> datetime:
    if not release.date:
        # drafts have no publish date yet
        logger.debug(f"No publish date on {release.version}, sorting it last")
        return _EPOCH
    try:
        published = datetime.fromisoformat(release.date.replace("Z", "+00:00"))
    except ValueError:
        logger.warning(f"Unparseable publish date {release.date!r} on {release.version}")
        return _EPOCH
    if published.tzinfo is None:
        published = published.replace(tzinfo=timezone.utc)
    return published


def assemble_releases(records: Iterable[RawRelease | dict[str, Any]]) -> list[Release]:
    """Turn raw API records into releases, newest first.

    The sort is stable, so releases published at the same instant keep the
    order the API returned them in.
    """
    releases: list[Release] = []
    for record in records:
        raw = record if isinstance(record, RawRelease) else RawRelease(**record)
        releases.append(
            Release(
                version=raw.tag_name,
                name=raw.name,
                date=raw.published_at or "",
                prerelease=raw.prerelease,
                items=tuple(parse_release_body(raw.body)),
            )
        )

    return sorted(releases, key=_published_at, reverse=True)


def _request_headers() -> dict[str, str]:
    headers = {"Accept": "application/vnd.github+json"}
    if GITHUB_TOKEN:
        headers["Authorization"] = f"Bearer {GITHUB_TOKEN}"
    return headers


def fetch_raw_releases(client: httpx.Client | None = None) -> list[dict[str, Any]]:
    """GET the release feed.

    Raises ReleaseFetchError on a non-2xx answer and ReleaseFeedUnavailableError
    when the feed cannot be reached or its body is not a JSON list.
    """
    params = {"per_page": RELEASES_PER_PAGE}
    try:
        if client is None:
            response = httpx.get(
                RELEASES_API_URL,
                params=params,
                headers=_request_headers(),
                timeout=RELEASES_FETCH_TIMEOUT,
                follow_redirects=True,
            )
        else:
            response = client.get(
                RELEASES_API_URL, params=params, headers=_request_headers()
            )
    except httpx.HTTPError as e:
        raise ReleaseFeedUnavailableError(f"GitHub API unreachable: {e}") from e

    if not response.is_success:
        raise ReleaseFetchError(response.status_code, response.reason_phrase)

    try:
        records = response.json()
    except ValueError as e:
        raise ReleaseFeedUnavailableError(
            f"GitHub API returned invalid JSON: {e}"
        ) from e
    if not isinstance(records, list):
        raise ReleaseFeedUnavailableError(
            f"GitHub API returned {type(records).__name__}, expected a list"
        )
    return records


def fetch_releases(client: httpx.Client | None = None) -> list[Release]:
    records = fetch_raw_releases(client)
    try:
        releases = assemble_releases(records)
    except (ValidationError, TypeError) as e:
        raise ReleaseFeedUnavailableError(
            f"GitHub API returned malformed releases: {e}"
        ) from e
    logger.info(f"Fetched {len(releases)} releases from {RELEASES_API_URL}")
    return releases


def latest_version(releases: list[Release]) -> str | None:
    """Newest stable version, or the newest prerelease if nothing is stable."""
    if not releases:
        return None
    for release in releases:
        if not release.prerelease:
            return release.version
    return releases[0].version


class ReleaseStore:
    """Keeps the last successful fetch around for a while.

    Failed fetches are never cached; they propagate to the caller so it can
    decide how to surface them.
    """

    def __init__(self, ttl_seconds: int = RELEASES_CACHE_TTL_SECONDS) -> None:
        self._ttl_seconds = ttl_seconds
        self._releases: list[Release] | None = None
        self._fetched_at: float | None = None
        self._lock = threading.Lock()

    def is_stale(self) -> bool:
        if self._fetched_at is None:
            return True
        return time.monotonic() - self._fetched_at > self._ttl_seconds

    def get_releases(self, client: httpx.Client | None = None) -> list[Release]:
        with self._lock:
            if self._releases is not None and not self.is_stale():
                return self._releases

            releases = fetch_releases(client)
            self._releases = releases
            self._fetched_at = time.monotonic()
            return releases

    def invalidate(self) -> None:
        with self._lock:
            self._releases = None
            self._fetched_at = None
