"""Exceptions raised while loading requests and fetching releases."""

from typing import Optional


class LatestReleasesError(Exception):
    """Base class for errors raised by the latest releases tool."""


class InputFormatError(LatestReleasesError):
    """The repositories input file cannot be used as a whole."""


class InvalidRequestError(LatestReleasesError):
    """A single repository request carries an unparseable minimum version."""

    def __init__(self, owner: str, repo: str, min_version: str):
        self.owner = owner
        self.repo = repo
        self.min_version = min_version
        super().__init__(f'minVersion "{min_version}" for {owner}/{repo} is not valid')


class RateLimitExceededError(LatestReleasesError):
    """GitHub refused a request because the rate limit budget is used up."""

    def __init__(self, message: str, reset_at: Optional[int] = None):
        self.reset_at = reset_at
        super().__init__(message)
