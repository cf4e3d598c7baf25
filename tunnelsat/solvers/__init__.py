"""
Oracle backends.

Every backend module exposes a class called ``PathOracle`` with the same
interface: ``PathOracle(cnf, **options)``, ``compute() -> bool``, the
``model`` property (signed literals, ``None`` when unsatisfiable) and
``delete()``.
"""
import importlib

DEFAULT_SOLVER = "sat_solver"
AVAILABLE_SOLVERS = ("sat_solver", "milp_solver")


def load_solver(solver: str):
    """Return the ``PathOracle`` class of backend ``solver``.

    ``solver`` is a module name under ``tunnelsat.solvers`` (``sat_solver``)
    or a fully-qualified module path.
    """
    if solver.endswith(".py"):
        solver = solver[:-3]
    module_name = solver if "." in solver else f"tunnelsat.solvers.{solver}"
    solver_module = importlib.import_module(module_name)
    return getattr(solver_module, "PathOracle")
