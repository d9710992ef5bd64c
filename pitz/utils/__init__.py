"""
Utility Functions

Core algorithms used throughout the package.

Modules:
    graph: Cycle detection and dependency ordering over relevance graphs
"""

from pitz.utils.graph import cycle_participants, dependency_order, find_cycles

__all__ = [
    "find_cycles",
    "cycle_participants",
    "dependency_order",
]
