"""Tests for dependency graph algorithms."""

from pitz.utils import cycle_participants, dependency_order, find_cycles


class TestFindCycles:
    """Test strongly-connected-component cycle detection."""

    def test_acyclic(self):
        """A DAG has no cycles."""
        graph = {"a": ["b", "c"], "b": ["c"], "c": []}
        assert find_cycles(graph) == []

    def test_two_node_cycle(self):
        """A <-> B is one cycle with both participants."""
        cycles = find_cycles({"a": ["b"], "b": ["a"]})

        assert len(cycles) == 1
        assert set(cycles[0]) == {"a", "b"}

    def test_self_loop(self):
        """A node depending on itself is a cycle."""
        assert find_cycles({"a": ["a"]}) == [["a"]]

    def test_cycle_slice_excludes_prefix(self):
        """Nodes leading into a cycle are not part of it."""
        cycles = find_cycles({"root": ["a"], "a": ["b"], "b": ["a"]})
        assert cycles == [["a", "b"]]

    def test_unknown_targets_are_leaves(self):
        """Edge targets missing from the map are treated as leaves."""
        assert find_cycles({"a": ["ghost"]}) == []

    def test_node_reached_through_cross_edge(self):
        """A node entering the cycle through an already visited node is reported."""
        graph = {"A": ["B", "D"], "B": ["C"], "C": ["A"], "D": ["B"]}

        cycles = find_cycles(graph)

        assert cycles == [["A", "B", "C", "D"]]
        assert cycle_participants(cycles) == ["A", "B", "C", "D"]

    def test_separate_cycles(self):
        """Disjoint cycles are reported separately."""
        graph = {"a": ["b"], "b": ["a", "c"], "c": ["d"], "d": ["c"]}
        assert find_cycles(graph) == [["a", "b"], ["c", "d"]]

    def test_long_chain(self):
        """Chains longer than the recursion limit are handled."""
        graph = {f"k{i}": [f"k{i + 1}"] for i in range(5000)}
        graph["k5000"] = ["k0"]

        cycles = find_cycles(graph)

        assert len(cycles) == 1
        assert len(cycles[0]) == 5001


class TestCycleParticipants:
    """Test participant de-duplication."""

    def test_first_seen_order(self):
        """Each node is listed once in first-seen order."""
        assert cycle_participants([["a", "b"], ["b", "c"], ["a"]]) == ["a", "b", "c"]


class TestDependencyOrder:
    """Test post-order-reversed ordering."""

    def test_dependencies_first(self):
        """Each node precedes the nodes depending on it."""
        graph = {"enabled": ["volume", "mute"], "volume": ["balance"], "mute": [], "balance": []}
        order = dependency_order(graph)

        assert order.index("enabled") < order.index("volume")
        assert order.index("enabled") < order.index("mute")
        assert order.index("volume") < order.index("balance")
        assert sorted(order) == sorted(graph)

    def test_roots_order_respected(self):
        """Independent nodes keep a deterministic order."""
        graph = {"a": [], "b": [], "c": []}
        assert dependency_order(graph, ["a", "b", "c"]) == dependency_order(graph, ["a", "b", "c"])

    def test_long_chain(self):
        """Chains longer than the recursion limit are ordered."""
        graph = {f"k{i}": [f"k{i + 1}"] for i in range(5000)}

        assert dependency_order(graph) == [f"k{i}" for i in range(5001)]

    def test_terminates_on_cycle(self):
        """Cyclic graphs still produce every node once."""
        order = dependency_order({"a": ["b"], "b": ["a"]})
        assert sorted(order) == ["a", "b"]
