"""Graph module providing reachability over IR entry maps.

This module contains:
- reachable: ids reachable from a root through child references
- live_entries: an entry map pruned to what the root can reach
"""

from ._reachability import live_entries, reachable

__all__ = ["live_entries", "reachable"]
