import os
import time

from dotenv import load_dotenv

# Values below may come from a .env file in the working directory
load_dotenv()

# Upstream release feed
CHANGELOG_REPOSITORY = os.environ.get("CHANGELOG_REPOSITORY") or "anthropics/claude-code"
RELEASES_API_URL = (
    os.environ.get("RELEASES_API_URL")
    or f"https://api.github.com/repos/{CHANGELOG_REPOSITORY}/releases"
)
RELEASES_PER_PAGE = int(os.environ.get("RELEASES_PER_PAGE") or 100)
RELEASES_FETCH_TIMEOUT = float(os.environ.get("RELEASES_FETCH_TIMEOUT") or 30.0)
# Optional, raises the unauthenticated GitHub rate limit
GITHUB_TOKEN = os.environ.get("GITHUB_TOKEN") or None

# How long a successful fetch is reused before hitting GitHub again
RELEASES_CACHE_TTL_SECONDS = int(os.environ.get("RELEASES_CACHE_TTL_SECONDS") or 300)

# Version probe
UPDATE_CHECK_INTERVAL_SECONDS = int(
    os.environ.get("UPDATE_CHECK_INTERVAL_SECONDS") or 2 * 60
)
VERSION_PROBE_PATH = "/version.json"
# Epoch milliseconds, compared by clients to detect a newer deploy
BUILD_TIMESTAMP = int(os.environ.get("BUILD_TIMESTAMP") or time.time() * 1000)

SITE_TITLE = os.environ.get("SITE_TITLE") or "Changelog"

APP_HOST = os.environ.get("APP_HOST") or "0.0.0.0"
APP_PORT = int(os.environ.get("APP_PORT") or 8080)
