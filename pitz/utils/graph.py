"""
Dependency Graph Algorithms

Cycle detection and ordering over a relevance graph.

The graph maps each key to the keys that depend on it (edge
``dependency -> dependent``). Both algorithms walk the graph with an
explicit stack, so long dependency chains do not hit the recursion
limit, and both terminate on cyclic input.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping


def find_cycles(graph: Mapping[str, Iterable[str]]) -> list[list[str]]:
    """
    Find the cyclic strongly connected components (Tarjan's algorithm).

    A component is cyclic when it has more than one node or a node with
    an edge to itself. Every node that lies on any cycle belongs to
    exactly one such component. Nodes that appear only as edge targets
    are treated as leaves.

    Args:
        graph: Adjacency map (node -> successors)

    Returns:
        List of cyclic components, each a list of nodes in discovery
        order, ordered by their first-discovered node
    """
    index: dict[str, int] = {}
    lowlink: dict[str, int] = {}
    stack: list[str] = []
    on_stack: set[str] = set()
    components: list[list[str]] = []

    def discover(node: str) -> tuple[str, Iterator[str]]:
        index[node] = lowlink[node] = len(index)
        stack.append(node)
        on_stack.add(node)
        return node, iter(graph.get(node, ()))

    for root in graph:
        if root in index:
            continue
        work = [discover(root)]

        while work:
            node, successors = work[-1]
            for successor in successors:
                if successor not in index:
                    work.append(discover(successor))
                    break
                if successor in on_stack:
                    lowlink[node] = min(lowlink[node], index[successor])
            else:
                work.pop()
                if work:
                    parent = work[-1][0]
                    lowlink[parent] = min(lowlink[parent], lowlink[node])
                if lowlink[node] == index[node]:
                    component: list[str] = []
                    while True:
                        member = stack.pop()
                        on_stack.discard(member)
                        component.append(member)
                        if member == node:
                            break
                    components.append(component)

    cycles = [
        sorted(component, key=index.__getitem__)
        for component in components
        if len(component) > 1 or component[0] in graph.get(component[0], ())
    ]
    cycles.sort(key=lambda cycle: index[cycle[0]])
    return cycles


def cycle_participants(cycles: Iterable[list[str]]) -> list[str]:
    """Distinct nodes across cycles, in first-seen order."""
    seen: dict[str, None] = {}
    for cycle in cycles:
        for node in cycle:
            seen.setdefault(node, None)
    return list(seen)


def dependency_order(
    graph: Mapping[str, Iterable[str]],
    nodes: Iterable[str] | None = None,
) -> list[str]:
    """
    Order nodes so that each precedes its successors.

    Post-order DFS (successors emitted before the node), then reversed.
    On cyclic input the result is still a permutation of the visited
    nodes, but ordering within a cycle is arbitrary.

    Args:
        graph: Adjacency map (dependency -> dependents)
        nodes: Traversal roots in preferred order (defaults to graph keys)

    Returns:
        Nodes with dependencies ahead of their dependents
    """
    visited: set[str] = set()
    result: list[str] = []

    for root in graph if nodes is None else nodes:
        if root in visited:
            continue
        visited.add(root)
        work = [(root, iter(graph.get(root, ())))]

        while work:
            node, successors = work[-1]
            for successor in successors:
                if successor not in visited:
                    visited.add(successor)
                    work.append((successor, iter(graph.get(successor, ()))))
                    break
            else:
                work.pop()
                result.append(node)

    result.reverse()
    return result
