"""
Java version specifier parsing and range matching.

Version requests arrive as exact versions ('17.0.12'), npm-style ranges
('^17', '>=17 <21', '17.x') or bare majors ('17'), either typed directly or
pinned in a file ('.java-version', '.tool-versions'). This module turns them
into range strings and decides whether a concrete version satisfies them.

Range semantics follow npm (`semantic_version.NpmSpec`). Build metadata
('17.0.1+12') is ignored by ranges, except when the range is itself an exact
version carrying build metadata: then only the identical build matches.
"""

import logging
import re
from pathlib import Path
from typing import List, Optional, Tuple, Union

import semantic_version

from jdkkit.core.exceptions import InvalidVersionError

logger = logging.getLogger(__name__)

# Vendors whose releases are tracked at major-version granularity only
DISTRIBUTIONS_ONLY_MAJOR_VERSION = ("corretto",)

# `java graalvm-community-21.0.2` style lines in asdf's .tool-versions
TOOL_VERSIONS_PATTERN = re.compile(
    r"^(java\s+)(?:\S*-)?v?"
    r"(?P<version>(\d+)(\.\d+)?(\.\d+)?(\+\d+)?(-ea(\.\d+)?)?)$",
    re.MULTILINE,
)

# First whitespace- or dash-delimited token starting with a digit
GENERIC_VERSION_PATTERN = re.compile(
    r"(?:^|(?<=\s)|(?<=-))(?P<version>\d+\S*)(?:\s|$)"
)

COERCE_PATTERN = re.compile(
    r"(?:^|[^\d])(\d{1,16})(?:\.(\d{1,16}))?(?:\.(\d{1,16}))?(?:$|[^\d])"
)


# ============================================================================
# Parsing helpers
# ============================================================================


def parse_version(text: str) -> Optional[semantic_version.Version]:
    """Parse a full semantic version, or return None."""
    try:
        return semantic_version.Version(str(text).strip())
    except ValueError:
        return None


def parse_range(text: str) -> Optional[semantic_version.NpmSpec]:
    """Parse an npm-style range expression, or return None."""
    try:
        return semantic_version.NpmSpec(str(text).strip())
    except ValueError:
        return None


def is_valid_range(text: str) -> bool:
    """
    Check whether text is a usable range.

    Exact versions with build metadata count as ranges even though npm range
    grammar rejects the '+' suffix in some positions.

    Example:
        >>> is_valid_range("17")
        True
        >>> is_valid_range("17.0.1+12")
        True
        >>> is_valid_range("latest")
        False
    """
    if not text or not str(text).strip():
        return False
    return parse_range(text) is not None or parse_version(text) is not None


def coerce_version(text: str) -> Optional[semantic_version.Version]:
    """
    Coerce text into the nearest semantic version.

    The first run of up to three dot-separated numbers is used; missing
    minor/patch components become zero and everything else is dropped.

    Example:
        >>> str(coerce_version("17"))
        '17.0.0'
        >>> str(coerce_version("v21.0.2-ea+7"))
        '21.0.2'
        >>> coerce_version("latest") is None
        True
    """
    match = COERCE_PATTERN.search(str(text))
    if not match:
        return None
    major, minor, patch = (int(group or 0) for group in match.groups())
    return semantic_version.Version(major=major, minor=minor, patch=patch)


def avoid_old_notation(content: str) -> str:
    """
    Rewrite legacy '1.x' notation to the modern major ('1.8' -> '8').

    Only a leading '1.' is rewritten.
    """
    return content[2:] if content.startswith("1.") else content


def convert_version_to_semver(version: Union[List[Union[int, str]], str]) -> str:
    """
    Fold 4+ component versions into semver build metadata.

    Example:
        >>> convert_version_to_semver("12.10.2.1")
        '12.10.2+1'
        >>> convert_version_to_semver([12, 10, 2, 1, 1])
        '12.10.2+1.1'
        >>> convert_version_to_semver("17.0.12")
        '17.0.12'
    """
    parts = [str(p) for p in version] if isinstance(version, list) else version.split(".")
    main_version = ".".join(parts[:3])
    if len(parts) > 3:
        return f"{main_version}+{'.'.join(parts[3:])}"
    return main_version


# ============================================================================
# Version specifier parsing
# ============================================================================


def get_version_from_file_content(
    content: str, distribution_name: str, version_file: Union[str, Path]
) -> Optional[str]:
    """
    Extract a version range from the contents of a version-pin file.

    '.tool-versions' files must contain a `java <version>` line; any other
    file contributes its first version-looking token.

    Args:
        content: File content
        distribution_name: Requested distribution (affects major-only reduction)
        version_file: File name or path the content came from

    Returns:
        Range string, or None when no version could be extracted

    Example:
        >>> get_version_from_file_content("1.8", "graalvm", ".java-version")
        '8'
        >>> get_version_from_file_content("11.0.2", "corretto", ".java-version")
        '11'
    """
    file_name = Path(str(version_file).replace("\\", "/")).name
    pattern = (
        TOOL_VERSIONS_PATTERN if file_name == ".tool-versions" else GENERIC_VERSION_PATTERN
    )

    match = pattern.search(content)
    token = match.group("version") if match else ""
    if not token:
        return None

    logger.debug(f"Version from file '{token}'")

    tentative_version = avoid_old_notation(token)
    raw_version = tentative_version.split("-")[0]

    if is_valid_range(raw_version):
        version = tentative_version
    else:
        coerced = coerce_version(tentative_version)
        version = str(coerced) if coerced else None
    logger.debug(f"Range version from file is '{version}'")

    if not version:
        return None

    if distribution_name in DISTRIBUTIONS_ONLY_MAJOR_VERSION:
        coerced = coerce_version(version)
        if coerced is None:
            return None
        version = str(coerced.major)

    return version


def normalize_version(version: str) -> Tuple[str, bool]:
    """
    Split an early-access marker off a version request.

    '21-ea' requests the latest EA build of 21; '21.0.0-ea.7' names EA build 7
    and becomes '21.0.0+7'.

    Returns:
        Tuple of (range, stable)

    Raises:
        InvalidVersionError: If the remaining text is not a valid range
    """
    version = version.strip()
    stable = True

    if version.endswith("-ea"):
        version = version[: -len("-ea")]
        stable = False
    elif "-ea." in version:
        version = version.replace("-ea.", "+", 1)
        stable = False

    if not is_valid_range(version):
        raise InvalidVersionError(
            f"The string '{version}' is not valid SemVer notation for a Java version. "
            "Use an exact version ('17.0.12'), a major version ('17') or a range ('^17')."
        )

    return version, stable


# ============================================================================
# Range matching
# ============================================================================


def _same_build(a: semantic_version.Version, b: semantic_version.Version) -> bool:
    # Numeric identifiers compare by value, so +4 and +04 are the same build
    return version_sort_key(a) == version_sort_key(b)


def is_version_satisfies(range_: str, version: str) -> bool:
    """
    Decide whether a concrete version satisfies a requested range.

    Args:
        range_: Requested range or exact version
        version: Concrete version to test

    Returns:
        True if version is within range

    Example:
        >>> is_version_satisfies("1.2.3+4", "1.2.3+4")
        True
        >>> is_version_satisfies("1.2.3+4", "1.2.3+5")
        False
        >>> is_version_satisfies("^1.2.0", "1.5.0")
        True
    """
    candidate = parse_version(version)
    if candidate is None:
        return False

    exact = parse_version(range_)
    if exact is not None and exact.build:
        # Ranges ignore build metadata, so build-tagged requests compare exactly
        return _same_build(exact, candidate)

    spec = parse_range(range_)
    if spec is None:
        return False

    stripped = semantic_version.Version(
        major=candidate.major,
        minor=candidate.minor,
        patch=candidate.patch,
        prerelease=candidate.prerelease or None,
    )
    return spec.match(stripped)


def _identifier_key(part: str) -> Tuple[int, int, str]:
    return (0, int(part), "") if part.isdigit() else (1, 0, part)


def version_sort_key(version: semantic_version.Version) -> tuple:
    """
    Sort key ordering by semver precedence, then by build metadata.

    Example:
        >>> versions = [parse_version(v) for v in ("17.0.1+12", "17.0.1+2", "17.0.0")]
        >>> [str(v) for v in sorted(versions, key=version_sort_key)]
        ['17.0.0', '17.0.1+2', '17.0.1+12']
    """
    return (
        version.major,
        version.minor,
        version.patch,
        not version.prerelease,
        tuple(_identifier_key(p) for p in version.prerelease),
        tuple(_identifier_key(p) for p in version.build),
    )


# ============================================================================
# Tool cache naming
# ============================================================================


def get_toolcache_version_name(version: str, stable: bool = True) -> str:
    """
    Folder name under which a version is stored in the tool cache.

    '+' breaks some JVM tooling when it appears in JAVA_HOME, so it is
    replaced; early-access builds are tagged with '-ea'.

    Example:
        >>> get_toolcache_version_name("17.0.1+12")
        '17.0.1-12'
        >>> get_toolcache_version_name("21.0.0+7", stable=False)
        '21.0.0-ea.7'
        >>> get_toolcache_version_name("21", stable=False)
        '21-ea'
        >>> get_toolcache_version_name("24.0.0-ea.20", stable=False)
        '24.0.0-ea.20'
    """
    if not stable:
        if "-ea" in version:
            return version
        if "+" in version:
            return version.replace("+", "-ea.", 1)
        return f"{version}-ea"
    return version.replace("+", "-", 1)


def parse_toolcache_version_name(name: str) -> Tuple[str, bool]:
    """
    Reverse of get_toolcache_version_name.

    Returns:
        Tuple of (version, stable)

    Example:
        >>> parse_toolcache_version_name("17.0.1-12")
        ('17.0.1+12', True)
        >>> parse_toolcache_version_name("21.0.0-ea.7")
        ('21.0.0+7', False)
    """
    stable = "-ea" not in name
    version = name.replace("-ea.", "+", 1)
    if version.endswith("-ea"):
        version = version[: -len("-ea")]
    version = version.replace("-", "+", 1)
    return convert_version_to_semver(version) if "+" not in version else version, stable


__all__ = [
    "DISTRIBUTIONS_ONLY_MAJOR_VERSION",
    "parse_version",
    "parse_range",
    "is_valid_range",
    "coerce_version",
    "avoid_old_notation",
    "convert_version_to_semver",
    "get_version_from_file_content",
    "normalize_version",
    "is_version_satisfies",
    "version_sort_key",
    "get_toolcache_version_name",
    "parse_toolcache_version_name",
]
