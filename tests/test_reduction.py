"""
End-to-end tests for reduce, search and decode on small networks.
"""
import pytest

from tunnelsat.encoding.clausifier import to_cnf
from tunnelsat.encoding.formula import evaluate
from tunnelsat.errors import DecodingError, MalformedNetworkError, SolverError
from tunnelsat.network import Network, PathStep, Pop, Push, Symbol, Transmit
from tunnelsat.reduction.decoder import Model, decode
from tunnelsat.reduction.reducer import reduce, search
from tunnelsat.reduction.variables import AtomRegistry, StateKey, SymbolKey
from tunnelsat.reduction.witness import assignment_from_path, replay_path
from tunnelsat.solvers.sat_solver import PathOracle

A, B = Symbol.A, Symbol.B


def solve(network, length):
    registry = AtomRegistry()
    cnf = to_cnf(reduce(network, length, registry), registry.vpool)
    oracle = PathOracle(cnf)
    try:
        if not oracle.compute():
            return None
        return Model(oracle.model, registry)
    finally:
        oracle.delete()


class TestScenarios:

    def test_single_transmit(self, transmit_network):
        model = solve(transmit_network, 1)
        assert model is not None
        assert decode(model, transmit_network, 1) == [PathStep(Transmit(A), 0, 1)]

    def test_push_then_pop(self, push_pop_network):
        assert solve(push_pop_network, 1) is None
        model = solve(push_pop_network, 2)
        assert model is not None
        assert decode(model, push_pop_network, 2) == [
            PathStep(Push(A, B), 0, 1),
            PathStep(Pop(B, A), 1, 2),
        ]
        assert model.value_of(StateKey(1, 1, 1))
        assert model.value_of(SymbolKey(1, 1, B))

    @pytest.mark.parametrize("length", [1, 2, 3, 4])
    def test_unreachable_final(self, disconnected_network, length):
        assert solve(disconnected_network, length) is None

    @pytest.mark.parametrize("length", [1, 2, 3])
    def test_wrong_top_symbol(self, wrong_symbol_network, length):
        assert solve(wrong_symbol_network, length) is None

    def test_initial_equals_final(self):
        net = Network(["s", "a"], [(0, 1), (1, 0)], {0: [Transmit(A)], 1: [Transmit(A)]}, 0, 0)
        for length in (1, 2, 3):
            assert solve(net, length) is None


class TestSearch:

    def test_shortest_length_is_reported(self, nested_network):
        result = search(nested_network, 10)
        assert result.found
        assert result.length == 5
        assert result.tried == [1, 2, 3, 4, 5]
        assert [step.action for step in result.steps] == [
            Push(A, B), Push(B, A), Transmit(A), Pop(A, B), Pop(B, A),
        ]
        assert [nested_network.node_name(step.target) for step in result.steps] == ["a", "b", "c", "d", "t"]
        assert result.elapsed >= 0

    def test_not_found(self, disconnected_network):
        result = search(disconnected_network, 4)
        assert not result.found
        assert result.length is None
        assert result.steps == []
        assert result.model is None
        assert result.tried == [1, 2, 3, 4]

    def test_bound_below_the_shortest_path(self, nested_network):
        assert not search(nested_network, 4).found

    def test_progress_goes_to_the_sink(self, push_pop_network):
        messages = []
        search(push_pop_network, 3, sink=messages.append)
        assert any("Length 1: UNSAT" in message for message in messages)
        assert any("Length 2: SAT" in message for message in messages)
        assert not any("Length 3" in message for message in messages)

    def test_other_pysat_backend(self, push_pop_network):
        result = search(push_pop_network, 3, solver_options={"name": "g3"})
        assert result.length == 2

    @pytest.mark.parametrize("bound", [0, -2])
    def test_rejects_bad_bounds(self, transmit_network, bound):
        with pytest.raises(ValueError):
            search(transmit_network, bound)
        with pytest.raises(ValueError):
            reduce(transmit_network, bound)

    def test_unknown_backend(self, transmit_network):
        with pytest.raises(ImportError):
            search(transmit_network, 2, solver="no_such_solver")

    def test_options_the_backend_does_not_take(self, transmit_network):
        with pytest.raises(SolverError, match="does not accept options"):
            search(transmit_network, 1, solver_options={"output": True})


class TestWitnessAssignments:

    def test_known_path_satisfies_the_formula(self, nested_network):
        steps = search(nested_network, 5).steps
        registry = AtomRegistry()
        formula = reduce(nested_network, 5, registry)
        assert evaluate(formula, assignment_from_path(nested_network, steps, registry))

    def test_decode_reproduces_a_replayed_path(self, push_pop_network):
        steps = [PathStep(Push(A, B), 0, 1), PathStep(Pop(B, A), 1, 2)]
        registry = AtomRegistry()
        reduce(push_pop_network, 2, registry)
        model = Model.from_valuation(assignment_from_path(push_pop_network, steps, registry), registry)
        assert decode(model, push_pop_network, 2) == steps
        assert replay_path(push_pop_network, steps) == [[A], [A, B], [A]]

    def test_revisiting_a_state_breaks_the_formula(self):
        net = Network(
            ["s", "a", "t"],
            [(0, 1), (1, 0), (0, 2)],
            {0: [Push(A, A), Transmit(A)], 1: [Pop(A, A)]},
            0,
            2,
        )
        registry = AtomRegistry()
        formula = reduce(net, 3, registry)
        # s -push-> a -pop-> s -transmit-> t visits (s, 0) twice
        valuation = {atom.key: False for atom in registry.atoms()}
        for key in (StateKey(0, 0, 0), StateKey(1, 1, 1), StateKey(0, 2, 0), StateKey(2, 3, 0)):
            valuation[key] = True
        for pos, height in ((0, 0), (1, 0), (1, 1), (2, 0), (3, 0)):
            valuation[SymbolKey(pos, height, A)] = True
        assert not evaluate(formula, valuation)


class TestDecodingErrors:

    def build_model(self, network, length, true_keys):
        registry = AtomRegistry()
        reduce(network, length, registry)
        return Model.from_valuation({key: True for key in true_keys}, registry)

    def test_missing_state(self, push_pop_network):
        model = self.build_model(push_pop_network, 2, [StateKey(0, 0, 0), StateKey(2, 2, 0)])
        with pytest.raises(DecodingError):
            decode(model, push_pop_network, 2)

    def test_two_states_at_one_position(self, transmit_network):
        model = self.build_model(
            transmit_network, 1,
            [StateKey(0, 0, 0), StateKey(1, 0, 0), StateKey(1, 1, 0), SymbolKey(0, 0, A)],
        )
        with pytest.raises(DecodingError):
            decode(model, transmit_network, 1)

    def test_ill_defined_cell(self, transmit_network):
        model = self.build_model(
            transmit_network, 1,
            [StateKey(0, 0, 0), StateKey(1, 1, 0), SymbolKey(0, 0, A), SymbolKey(0, 0, B)],
        )
        with pytest.raises(DecodingError):
            decode(model, transmit_network, 1)

    def test_action_not_enabled(self, transmit_network):
        model = self.build_model(
            transmit_network, 1,
            [StateKey(0, 0, 0), StateKey(1, 1, 0), SymbolKey(0, 0, B)],
        )
        with pytest.raises(DecodingError, match="not enabled"):
            decode(model, transmit_network, 1)

    def test_missing_edge(self, transmit_network):
        model = self.build_model(
            transmit_network, 1,
            [StateKey(1, 0, 0), StateKey(0, 1, 0), SymbolKey(0, 0, A)],
        )
        with pytest.raises(DecodingError, match="no edge"):
            decode(model, transmit_network, 1)

    def test_height_jump(self, nested_network):
        model = self.build_model(
            nested_network, 4,
            [StateKey(0, 0, 0), StateKey(1, 1, 2)] + [SymbolKey(0, 0, A)],
        )
        with pytest.raises(DecodingError, match="jumps"):
            decode(model, nested_network, 4)


def test_malformed_network_is_rejected_before_encoding():
    net = Network(["s", "t"], [(0, 1)], {}, 0, 1)
    net.final = 7
    with pytest.raises(MalformedNetworkError):
        reduce(net, 1)
