"""Reachability over flat entry maps."""

from collections.abc import Mapping

from treefold._ir import Entry


def reachable(entries: Mapping[str, Entry], root_id: str) -> frozenset[str]:
    """Get every id reachable from ``root_id`` by following child references.

    Structural references are followed into every nested id. An id that is
    referenced but missing from ``entries`` counts as reachable and is not
    expanded further; ``commit`` is where such references are rejected.

    Args:
        entries: Node id to entry.
        root_id: Id to start from.

    Returns:
        The reachable ids, including ``root_id``.

    Example:
        >>> reachable({"a": Entry("num/literal", out=1), "b": Entry("num/literal", out=2)}, "a")
        frozenset({'a'})

    """
    visited: set[str] = set()
    stack = [root_id]
    while stack:
        current = stack.pop()
        if current in visited:
            continue
        visited.add(current)
        entry = entries.get(current)
        if entry is not None:
            stack.extend(child_id for child_id in entry.child_ids if child_id not in visited)
    return frozenset(visited)


def live_entries(entries: Mapping[str, Entry], root_id: str) -> dict[str, Entry]:
    """Filter ``entries`` down to those reachable from ``root_id``.

    Applying this twice gives the same map as applying it once.
    """
    live = reachable(entries, root_id)
    return {node_id: entry for node_id, entry in entries.items() if node_id in live}
