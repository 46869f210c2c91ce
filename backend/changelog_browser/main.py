from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI

from changelog_browser import __version__
from changelog_browser.configs.app_configs import APP_HOST
from changelog_browser.configs.app_configs import APP_PORT
from changelog_browser.configs.app_configs import RELEASES_API_URL
from changelog_browser.configs.app_configs import SITE_TITLE
from changelog_browser.server.api import api_router
from changelog_browser.server.api import page_router
from changelog_browser.utils.logger import setup_logger

logger = setup_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    logger.info(f"Serving changelog for {RELEASES_API_URL}")
    yield


def get_application(lifespan_override: Any | None = None) -> FastAPI:
    application = FastAPI(
        title=SITE_TITLE,
        version=__version__,
        lifespan=lifespan_override or lifespan,
    )
    application.include_router(page_router)
    application.include_router(api_router)
    return application


if __name__ == "__main__":
    uvicorn.run(get_application(), host=APP_HOST, port=APP_PORT)
