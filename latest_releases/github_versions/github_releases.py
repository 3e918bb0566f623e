"""
Fetch release tags of a repository from the GitHub REST API.
"""

from typing import Optional

import requests

from latest_releases.common.http_utils import http_get
from latest_releases.common.utils import logger
from latest_releases.github_versions.errors import RateLimitExceededError
from latest_releases.github_versions.settings import Settings

GITHUB_API_HEADERS = {
    'Accept': 'application/vnd.github+json',
    'X-GitHub-Api-Version': '2022-11-28',
}

RATE_LIMIT_STATUS_CODES = (403, 429)


def is_rate_limited(response: requests.Response) -> bool:
    return (response.status_code in RATE_LIMIT_STATUS_CODES and
            response.headers.get('X-RateLimit-Remaining') == '0')


def get_rate_limit_reset(response: requests.Response) -> Optional[int]:
    reset = response.headers.get('X-RateLimit-Reset')
    try:
        return int(reset) if reset is not None else None
    except ValueError:
        return None


class GitHubReleaseSource:
    """Lists the release tags of GitHub repositories through a shared session."""

    def __init__(self, session: requests.Session, settings: Settings):
        self.session = session
        self.settings = settings

    def releases_url(self, owner: str, repo: str) -> str:
        return f'{self.settings.github_api_url}/repos/{owner}/{repo}/releases'

    def fetch_release_tags(self, owner: str, repo: str) -> list[Optional[str]]:
        """
        Return the tag names of all releases (all pages) of a repository.

        Tags are returned unvalidated and in API order. A release without a
        tag name shows up as None.

        Raises:
            RateLimitExceededError: If GitHub rejected a page for rate limiting
            requests.RequestException: For any other failed request
        """
        url = self.releases_url(owner, repo)
        page = 1
        tags = []

        while True:
            params = {'per_page': self.settings.releases_per_page, 'page': page}
            try:
                response = http_get(self.session, url, params=params, headers=GITHUB_API_HEADERS,
                                    timeout=self.settings.request_timeout_sec)
            except requests.HTTPError as e:
                if e.response is not None and is_rate_limited(e.response):
                    raise RateLimitExceededError(
                        f'Reached GitHub rate limit while listing releases of {owner}/{repo}',
                        reset_at=get_rate_limit_reset(e.response)) from e
                raise

            releases = response.json()
            if not releases:
                break

            tags.extend(release.get('tag_name') for release in releases)
            logger.debug(f'Fetched page {page} of {owner}/{repo} releases ({len(releases)} entries)')

            if 'next' not in response.links:
                break
            page += 1

        logger.info(f'Fetched {len(tags)} releases of {owner}/{repo} in {page} page(s)')
        return tags
