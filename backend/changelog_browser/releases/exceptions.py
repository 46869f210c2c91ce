"""Custom exception classes for release data handling."""


class ChangelogError(Exception):
    """Base exception for changelog browser errors."""


class ReleaseFetchError(ChangelogError):
    """The release feed answered with a non-success status."""

    def __init__(self, status_code: int, reason: str):
        super().__init__(f"GitHub API error: {status_code} {reason}")
        self.status_code = status_code
        self.reason = reason


class ReleaseFeedUnavailableError(ChangelogError):
    """The release feed could not be reached or returned unusable data."""
