"""Release tag parsing, ordering and latest-per-minor selection."""

import functools
import re
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from semver import Version

from latest_releases.common.utils import logger

_IDENTIFIERS = r'[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*'

STABLE_VERSION_RE = re.compile(r'(?P<major>\d+)\.(?P<minor>\d+)\.(?P<patch>\d+)', re.ASCII)
PRE_RELEASE_VERSION_RE = re.compile(
    r'(?P<major>\d+)\.(?P<minor>\d+)\.(?P<patch>\d+)'
    rf'-(?P<prerelease>{_IDENTIFIERS})'
    rf'(?:\+(?P<build>{_IDENTIFIERS}))?',
    re.ASCII
)


@dataclass(frozen=True)
class InvalidVersion:
    """A release tag that is not a semantic version. Keeps the raw tag for diagnostics."""
    raw: Optional[str]

    def __str__(self) -> str:
        return f'<invalid {self.raw!r}>'


ParseResult = Union[Version, InvalidVersion]


def is_valid_version_string(version: str) -> bool:
    """
    Check whether a string is a stable or pre-release semantic version.
    A leading 'v' is not accepted here, see parse_version().
    """
    return bool(STABLE_VERSION_RE.fullmatch(version) or PRE_RELEASE_VERSION_RE.fullmatch(version))


def parse_version(raw: Optional[str]) -> ParseResult:
    """
    Parse a release tag into a semantic version.

    A single leading 'v' is stripped first. Tags that do not match either
    accepted shape yield an InvalidVersion instead of raising.
    """
    if raw is None:
        logger.debug('Ignoring release without a tag name')
        return InvalidVersion(raw)

    version_string = raw[1:] if raw.startswith('v') else raw
    match = STABLE_VERSION_RE.fullmatch(version_string) or PRE_RELEASE_VERSION_RE.fullmatch(version_string)
    if not match:
        logger.debug(f'Ignoring tag "{raw}": not a semantic version')
        return InvalidVersion(raw)

    groups = match.groupdict()
    return Version(int(groups['major']), int(groups['minor']), int(groups['patch']),
                   prerelease=groups.get('prerelease'), build=groups.get('build'))


def parse_versions(raws: Iterable[Optional[str]]) -> list[ParseResult]:
    return [parse_version(raw) for raw in raws]


def format_version(version: Version) -> str:
    text = f'{version.major}.{version.minor}.{version.patch}'
    if version.prerelease:
        text += f'-{version.prerelease}'
    return text


def compare_versions(a: ParseResult, b: ParseResult) -> int:
    """
    Compare two parse results for a descending sort.

    Returns a negative number when a sorts before b, zero when both share the
    same major.minor.patch, positive otherwise. Pre-release and build labels
    are ignored. Invalid entries sort after every valid one.
    """
    a_invalid = isinstance(a, InvalidVersion)
    b_invalid = isinstance(b, InvalidVersion)
    if a_invalid or b_invalid:
        return int(a_invalid) - int(b_invalid)

    a_key = (a.major, a.minor, a.patch)
    b_key = (b.major, b.minor, b.patch)
    if a_key > b_key:
        return -1
    if a_key < b_key:
        return 1
    return 0


def sort_versions(versions: Iterable[ParseResult]) -> list[ParseResult]:
    """Return a new list sorted from highest to lowest, invalid entries last."""
    return sorted(versions, key=functools.cmp_to_key(compare_versions))


def is_at_least(version: Version, minimum: Version) -> bool:
    """Inclusive major.minor.patch comparison against the minimum version."""
    if version.major != minimum.major:
        return version.major > minimum.major
    if version.minor != minimum.minor:
        return version.minor > minimum.minor
    return version.patch >= minimum.patch


def get_latest_versions(versions: Iterable[ParseResult], minimum: Version) -> list[Version]:
    """
    Select the highest stable release of every minor line at or above minimum.

    Invalid tags and pre-releases are dropped, the rest is sorted in descending
    order and walked once. The walk stops at the first release below minimum,
    which is only correct because the sequence is fully sorted first.

    Returns:
        Versions from newest to oldest, at most one per (major, minor) pair
    """
    stable = [v for v in versions if not isinstance(v, InvalidVersion) and not v.prerelease]

    latest = []
    for version in sort_versions(stable):
        if not is_at_least(version, minimum):
            break

        if latest and (version.major, version.minor) == (latest[-1].major, latest[-1].minor):
            # lower patch of the minor line that was just kept
            continue

        latest.append(version)

    return latest
