"""Parsing of requested link expansions.

Expansions are dotted paths of link fields, e.g. ``father.spouse`` or
``allegiances.swornMembers``. They are merged into a tree so each level of the
result can be resolved in one loader wave.
"""

from typing import Dict, Iterable, Optional

from ..errors.problem_details import InvalidArgumentError


ExpandTree = Dict[str, "ExpandTree"]


def split_expand(value: Optional[str]) -> list[str]:
    """Split a comma separated ``expand`` query value into paths."""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def parse_expand(paths: Iterable[str], max_depth: int) -> ExpandTree:
    """Merge dotted paths into an expansion tree.

    Raises:
        InvalidArgumentError: On empty path segments or paths deeper than max_depth
    """
    tree: ExpandTree = {}
    for path in paths:
        segments = [segment.strip() for segment in path.split(".")]
        if not all(segments):
            raise InvalidArgumentError(f"Invalid expand path: {path!r}")
        if len(segments) > max_depth:
            raise InvalidArgumentError(
                f"Expand path {path!r} is deeper than the maximum of {max_depth}",
                max_expand_depth=max_depth
            )

        node = tree
        for segment in segments:
            node = node.setdefault(segment, {})
    return tree
