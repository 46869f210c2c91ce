from fastapi import APIRouter
from fastapi import Depends
from fastapi import HTTPException
from fastapi import Query
from fastapi import Request
from fastapi.responses import HTMLResponse

from changelog_browser.configs.app_configs import BUILD_TIMESTAMP
from changelog_browser.configs.app_configs import VERSION_PROBE_PATH
from changelog_browser.filtering.matching import CardSnapshot
from changelog_browser.filtering.matching import release_matches
from changelog_browser.filtering.view_state import is_known_category
from changelog_browser.filtering.view_state import ViewState
from changelog_browser.releases.exceptions import ChangelogError
from changelog_browser.releases.models import Release
from changelog_browser.releases.source import latest_version
from changelog_browser.releases.source import ReleaseStore
from changelog_browser.rendering.page import render_view
from changelog_browser.server.models import ReleaseListResponse
from changelog_browser.server.models import ReleaseResponse
from changelog_browser.server.models import VersionInfo
from changelog_browser.utils.logger import setup_logger

logger = setup_logger()

_default_store = ReleaseStore()


def get_release_store() -> ReleaseStore:
    return _default_store


page_router = APIRouter()
api_router = APIRouter(prefix="/api")


@page_router.get("/", response_class=HTMLResponse)
def changelog_page(
    request: Request,
    store: ReleaseStore = Depends(get_release_store),
) -> HTMLResponse:
    """The changelog, already filtered for the category/q/count in the URL."""
    query_string = request.url.query
    try:
        releases = store.get_releases()
    except ChangelogError as e:
        logger.error(f"Failed to load releases for page: {e}")
        return HTMLResponse(
            render_view([], query_string, error=str(e)), status_code=502
        )

    return HTMLResponse(render_view(releases, query_string))


@page_router.get(VERSION_PROBE_PATH)
def version_probe(store: ReleaseStore = Depends(get_release_store)) -> VersionInfo:
    version: str | None = None
    try:
        version = latest_version(store.get_releases())
    except ChangelogError as e:
        logger.warning(f"Version probe served without release version: {e}")
    return VersionInfo(version=version, buildTimestamp=BUILD_TIMESTAMP)


@page_router.get("/healthz")
def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@api_router.get("/releases")
def list_releases(
    category: str | None = Query(default=None),
    q: str | None = Query(default=None),
    store: ReleaseStore = Depends(get_release_store),
) -> ReleaseListResponse:
    if category and not is_known_category(category):
        raise HTTPException(status_code=400, detail=f"Unknown category: {category}")

    try:
        releases = store.get_releases()
    except ChangelogError as e:
        raise HTTPException(status_code=502, detail=str(e))

    state = ViewState.from_query_params({"category": category, "q": q})
    matching: list[Release] = [
        release
        for release in releases
        if release_matches(CardSnapshot.from_release(release), state)
    ]
    return ReleaseListResponse(
        releases=[ReleaseResponse.from_model(release) for release in matching],
        total_releases=len(releases),
        matching_releases=len(matching),
    )
