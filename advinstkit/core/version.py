"""
Version identity normalization for tool cache keys.

The tool cache is keyed by MAJOR.MINOR.PATCH versions, but callers pass
whatever the user typed ("21", "21.1", "21.1.2"). Every cache read and every
cache write goes through normalize_version() so that both sides agree.
"""

VERSION_SEPARATOR = "."


def normalize_version(version: str) -> str:
    """
    Normalize a version string to the three-component form used for caching.

    Args:
        version: Requested version (e.g., "21", "21.1", "21.1.2")

    Returns:
        Normalized version string. Versions with three or more components
        and empty strings are returned unchanged.

    Example:
        >>> normalize_version("21")
        '21.0.0'
        >>> normalize_version("21.1")
        '21.1.0'
        >>> normalize_version("21.1.2.3")
        '21.1.2.3'
    """
    if not version:
        return version

    parts = version.split(VERSION_SEPARATOR)

    if len(parts) >= 3:
        return version

    if len(parts) == 2:
        return f"{version}.0"

    return f"{version}.0.0"
