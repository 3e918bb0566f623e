import os

# GitHub caps the page size of list endpoints at 100
MAX_RELEASES_PER_PAGE = 100

# Unauthenticated GitHub requests are limited to 60 per hour
GITHUB_RATE_LIMIT_PER_HR = 60


def _int_from_env(name: str, default: int) -> int:
    value = os.getenv(name, str(default))
    try:
        return int(value)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got '{value}'") from e


class Settings:
    github_api_url: str
    request_timeout_sec: int
    releases_per_page: int
    max_repositories: int

    def __init__(self):
        self.github_api_url = os.getenv("GITHUB_API_URL", "https://api.github.com").rstrip("/")
        self.request_timeout_sec = _int_from_env("REQUEST_TIMEOUT_SECONDS", 30)
        self.releases_per_page = _int_from_env("RELEASES_PER_PAGE", MAX_RELEASES_PER_PAGE)
        self.max_repositories = _int_from_env("MAX_REPOSITORIES", GITHUB_RATE_LIMIT_PER_HR)

        if not self.github_api_url:
            raise ValueError("GITHUB_API_URL must not be empty")
        if self.request_timeout_sec <= 0:
            raise ValueError("REQUEST_TIMEOUT_SECONDS must be positive")
        if not 1 <= self.releases_per_page <= MAX_RELEASES_PER_PAGE:
            raise ValueError(f"RELEASES_PER_PAGE must be between 1 and {MAX_RELEASES_PER_PAGE}")
        if self.max_repositories <= 0:
            raise ValueError("MAX_REPOSITORIES must be positive")
