"""
Load the repositories to check from an input file.

The file holds one "owner/repo,min_version" entry per line, optionally
preceded by a "repository,min_version" header line.
"""

import csv
from dataclasses import dataclass

from semver import Version

from latest_releases.common.utils import logger
from latest_releases.github_versions.errors import InputFormatError, InvalidRequestError
from latest_releases.github_versions.version_utils import InvalidVersion, parse_version

INPUT_HEADER = ["repository", "min_version"]


@dataclass(frozen=True)
class RepositoryInput:
    """One line of the input file, before the minimum version is validated."""
    owner: str
    repo: str
    min_version: str
    line_number: int

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True)
class SelectionRequest:
    """A repository to check together with its parsed minimum version."""
    owner: str
    repo: str
    minimum: Version

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


def parse_input_row(row: list[str], line_number: int) -> RepositoryInput:
    """
    Build a RepositoryInput from one CSV row.

    Raises:
        InputFormatError: If the row is not "owner/repo,min_version"
    """
    if len(row) != 2:
        raise InputFormatError(f"line {line_number}: expected 'owner/repo,min_version', got {','.join(row)!r}")

    repository, min_version = (cell.strip() for cell in row)
    owner, slash, repo = repository.partition("/")
    if not slash or not owner or not repo or "/" in repo:
        raise InputFormatError(f"line {line_number}: '{repository}' is not in 'owner/repo' form")

    return RepositoryInput(owner=owner, repo=repo, min_version=min_version, line_number=line_number)


def read_repository_inputs(path: str, max_repositories: int) -> list[RepositoryInput]:
    """
    Read every repository entry from the input file.

    Raises:
        InputFormatError: If a line is malformed or there are more than
            max_repositories entries
        OSError: If the file cannot be read
    """
    logger.info(f"Reading repositories from {path}")
    inputs = []
    with open(path, "r", newline="") as f:
        for line_number, row in enumerate(csv.reader(f), start=1):
            if not row or not "".join(row).strip() or row[0].lstrip().startswith("#"):
                continue
            if [cell.strip() for cell in row] == INPUT_HEADER:
                continue
            inputs.append(parse_input_row(row, line_number))

    # Each repository costs at least one API call, so more entries than the
    # hourly budget are guaranteed to hit the rate limit
    if len(inputs) > max_repositories:
        raise InputFormatError(f"number of repositories cannot exceed {max_repositories}, got {len(inputs)}")

    logger.info(f"Loaded {len(inputs)} repositories")
    return inputs


def build_selection_request(repository_input: RepositoryInput) -> SelectionRequest:
    """
    Validate the minimum version of an input entry.

    Raises:
        InvalidRequestError: If the minimum version does not parse
    """
    minimum = parse_version(repository_input.min_version)
    if isinstance(minimum, InvalidVersion):
        raise InvalidRequestError(repository_input.owner, repository_input.repo, repository_input.min_version)
    return SelectionRequest(owner=repository_input.owner, repo=repository_input.repo, minimum=minimum)
