#!/usr/bin/env python
"""
Report the latest release of every minor version line of GitHub repositories.

For each "owner/repo,min_version" entry of the input file, all release tags are
fetched and the highest stable patch of each minor line at or above the
minimum version is printed, newest first.
"""

import argparse
import json
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import requests

from latest_releases.common.utils import logger
from latest_releases.github_versions.errors import (
    InputFormatError,
    InvalidRequestError,
    RateLimitExceededError,
)
from latest_releases.github_versions.github_releases import GitHubReleaseSource
from latest_releases.github_versions.input_loader import (
    RepositoryInput,
    build_selection_request,
    read_repository_inputs,
)
from latest_releases.github_versions.settings import Settings
from latest_releases.github_versions.version_utils import (
    format_version,
    get_latest_versions,
    parse_versions,
)

report_line_template = "latest versions of {owner}/{repo}: [{versions}]"


@dataclass
class RepositoryReport:
    """Outcome of checking one repository."""
    owner: str
    repo: str
    minimum: str
    versions: list[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "repository": f"{self.owner}/{self.repo}",
            "min_version": self.minimum,
            "versions": self.versions,
        }
        if self.error is not None:
            result["error"] = self.error
        return result


def format_report_line(report: RepositoryReport) -> str:
    return report_line_template.format(owner=report.owner, repo=report.repo,
                                       versions=" ".join(report.versions))


def check_repository(repository_input: RepositoryInput, release_source: GitHubReleaseSource) -> RepositoryReport:
    """
    Fetch the releases of one repository and select the latest versions.

    Invalid minimum versions and failed fetches are recorded on the report
    instead of raised, so one repository cannot stop the others.

    Raises:
        RateLimitExceededError: Every later request would fail as well
    """
    report = RepositoryReport(owner=repository_input.owner, repo=repository_input.repo,
                              minimum=repository_input.min_version)
    try:
        request = build_selection_request(repository_input)
    except InvalidRequestError as e:
        logger.error(f"Skipping {repository_input.full_name} (line {repository_input.line_number}): {e}")
        report.error = str(e)
        return report

    logger.info(f"Fetching releases of {request.full_name}")
    try:
        tags = release_source.fetch_release_tags(request.owner, request.repo)
    except requests.RequestException as e:
        logger.error(f"Failed to retrieve all releases for {request.full_name}. Details: {e}")
        report.error = f"failed to retrieve releases: {e}"
        return report

    latest = get_latest_versions(parse_versions(tags), request.minimum)
    report.versions = [format_version(v) for v in latest]
    return report


def collect_latest_versions(inputs: list[RepositoryInput], release_source: GitHubReleaseSource,
                            reports: Optional[list[RepositoryReport]] = None) -> list[RepositoryReport]:
    """
    Check every repository in input order, printing a report line for each
    repository that could be processed.

    Reports are appended to the given list as they complete, so the caller
    still holds the finished ones when processing stops early.

    Raises:
        RateLimitExceededError: Processing stops at the first rate-limited request
    """
    if reports is None:
        reports = []
    for repository_input in inputs:
        report = check_repository(repository_input, release_source)
        if report.ok:
            print(format_report_line(report), flush=True)
        reports.append(report)
    return reports


def save_reports(reports: list[RepositoryReport], file_path: str):
    with open(file_path, "w") as f:
        json.dump([r.to_dict() for r in reports], f, indent=4)
    logger.info(f"Saved {len(reports)} repository reports to {file_path}")


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="List the latest release of each minor version line of GitHub repositories")
    parser.add_argument("input_file",
                        help="Path to the input file with 'owner/repo,min_version' lines")
    parser.add_argument("--output_file", "--output-file", dest="output_file", default=None,
                        help="Optional path of a JSON file to store the per-repository results")
    args = parser.parse_args(argv)

    try:
        settings = Settings()
        inputs = read_repository_inputs(args.input_file, settings.max_repositories)
    except (ValueError, OSError, InputFormatError) as e:
        logger.error(f"Error occurred when loading settings or reading input from file. Details: {e}")
        return 1

    reports = []
    rate_limited = False
    with requests.Session() as session:
        release_source = GitHubReleaseSource(session, settings)
        try:
            collect_latest_versions(inputs, release_source, reports)
        except RateLimitExceededError as e:
            logger.error(f"Reached GitHub rate limit for unauthorized requests. Details: {e}")
            rate_limited = True

    if args.output_file:
        save_reports(reports, args.output_file)

    if rate_limited:
        return 1
    return 0 if all(r.ok for r in reports) else 1


if __name__ == '__main__':
    sys.exit(main())
