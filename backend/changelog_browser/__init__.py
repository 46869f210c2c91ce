import os

__version__ = os.environ.get("CHANGELOG_BROWSER_VERSION", "") or "development"
