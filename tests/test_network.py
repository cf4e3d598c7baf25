"""
Tests for actions and the network model.
"""

import pytest

from tunnelsat.errors import MalformedNetworkError
from tunnelsat.network import Network, Pop, Push, Symbol, Transmit, parse_action

A, B = Symbol.A, Symbol.B


class TestActions:

    def test_labels(self):
        assert Transmit(A).label == "A→A"
        assert Push(A, B).label == "A↑AB"
        assert Pop(B, A).label == "AB↓A"

    def test_tokens_parse_back(self):
        for action in (Transmit(B), Push(B, A), Pop(A, B)):
            assert parse_action(action.token) == action

    def test_parse_is_case_insensitive(self):
        assert parse_action("PUSH_a_b") == Push(A, B)

    @pytest.mark.parametrize("token", ["transmit", "push_A", "pop_A_B_A", "jump_A", "transmit_C"])
    def test_parse_rejects_bad_tokens(self, token):
        with pytest.raises(ValueError):
            parse_action(token)

    def test_actions_are_values(self):
        assert {Push(A, B), Push(A, B), Pop(B, A)} == {Push(A, B), Pop(B, A)}
        assert Push(A, B) != Pop(A, B)


class TestNetwork:

    def test_from_named(self, push_pop_network):
        net = push_pop_network
        assert net.num_nodes == 3
        assert net.node_name(net.initial) == "s"
        assert net.node_name(net.final) == "t"
        assert net.is_edge(net.index_of("s"), net.index_of("m"))
        assert not net.is_edge(net.index_of("m"), net.index_of("s"))
        assert net.enabled_actions(net.index_of("m")) == frozenset({Pop(B, A)})

    def test_per_kind_views_are_sorted(self):
        net = Network(["x"], [], {0: [Push(B, B), Transmit(B), Push(A, B), Pop(A, A), Transmit(A)]}, 0, 0)
        assert net.transmits(0) == (Transmit(A), Transmit(B))
        assert net.pushes(0) == (Push(A, B), Push(B, B))
        assert net.pops(0) == (Pop(A, A),)

    def test_successors(self, nested_network):
        s = nested_network.index_of("s")
        names = [nested_network.node_name(v) for v in nested_network.successors(s)]
        assert names == ["a", "t"]

    def test_empty_network_is_rejected(self):
        with pytest.raises(MalformedNetworkError):
            Network([], [], {}, 0, 0)

    @pytest.mark.parametrize("initial,final", [(-1, 0), (0, 2), (5, 1)])
    def test_endpoints_out_of_range(self, initial, final):
        with pytest.raises(MalformedNetworkError):
            Network(["s", "t"], [(0, 1)], {}, initial, final)

    def test_edge_out_of_range(self):
        with pytest.raises(MalformedNetworkError):
            Network(["s", "t"], [(0, 3)], {}, 0, 1)

    def test_actions_for_unknown_node(self):
        with pytest.raises(MalformedNetworkError):
            Network(["s", "t"], [(0, 1)], {4: [Transmit(A)]}, 0, 1)

    def test_invalid_action(self):
        with pytest.raises(MalformedNetworkError):
            Network(["s", "t"], [(0, 1)], {0: ["transmit_A"]}, 0, 1)

    def test_unknown_names(self):
        with pytest.raises(MalformedNetworkError):
            Network.from_named({"s": [], "t": []}, [("s", "x")], "s", "t")

    def test_malformed_network_is_a_value_error(self):
        with pytest.raises(ValueError):
            Network(["s"], [], {}, 0, 1)
