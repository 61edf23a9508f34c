"""Route pattern helpers for mock endpoints.

Patterns use ``:name`` segments for captures, e.g. ``/api/users/:id``.
"""

from __future__ import annotations


def _segments(path: str) -> list[str]:
    return [segment for segment in path.split("/") if segment]


def _strip_query(path: str) -> str:
    return path.split("?", 1)[0]


def extract_path_params(pattern: str, actual_path: str) -> dict[str, str]:
    """Extract named path parameters from a request path.

    Segments are paired in order up to the shorter of the two paths. Literal
    pattern segments are not checked against the request path; use
    ``path_matches`` for that.

    Args:
        pattern: Route pattern such as ``/api/users/:userId/posts/:postId``.
        actual_path: The request path, optionally with a query string.

    Returns:
        A dict mapping each ``:name`` to its request segment, in pattern
        order. Repeated names keep the last value.
    """
    params: dict[str, str] = {}
    for pattern_part, path_part in zip(
        _segments(pattern), _segments(_strip_query(actual_path)), strict=False
    ):
        if pattern_part.startswith(":"):
            params[pattern_part[1:]] = path_part
    return params


def path_matches(pattern: str, actual_path: str) -> bool:
    """Check if a request path matches a route pattern.

    ``:name`` segments match any single path component; every other
    segment must match literally.

    Args:
        pattern: Route pattern with ``:name`` captures.
        actual_path: The request path, optionally with a query string.

    Returns:
        True if the paths match.
    """
    pattern_parts = _segments(pattern)
    path_parts = _segments(_strip_query(actual_path))

    if len(pattern_parts) != len(path_parts):
        return False

    for pattern_part, path_part in zip(pattern_parts, path_parts, strict=True):
        if pattern_part.startswith(":"):
            continue
        if pattern_part != path_part:
            return False

    return True
