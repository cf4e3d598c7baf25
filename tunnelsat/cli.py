import argparse
import json
import sys
from pathlib import Path

from tunnelsat.errors import DecodingError, MalformedNetworkError, SolverError
from tunnelsat.network_parser import read_network, write_path_dot
from tunnelsat.reduction.presentation import format_model, format_path
from tunnelsat.reduction.reducer import search
from tunnelsat.solvers import AVAILABLE_SOLVERS, DEFAULT_SOLVER


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tunnelsat",
        description="Search a tunnel network for a simple path that respects its stack discipline",
    )
    parser.add_argument("network", help="Path to the network description (DOT subset)")
    parser.add_argument("--max-length", type=int, default=10, help="Largest path length to try (default: 10)")
    parser.add_argument(
        "--solver",
        default=DEFAULT_SOLVER,
        help=f"Oracle backend module, one of {', '.join(AVAILABLE_SOLVERS)} (default: {DEFAULT_SOLVER})",
    )
    parser.add_argument("--sat-backend", default=None, help="PySAT solver name for sat_solver, e.g. m22, g4, cd15")
    parser.add_argument("--verbose", action="store_true", help="Print reduction progress for every length")
    parser.add_argument("--print-model", action="store_true", help="Dump the satisfying model position by position")
    parser.add_argument("--dot", default=None, help="Write the network with the path highlighted to this DOT file")
    parser.add_argument("--summary", default=None, help="Write a JSON summary of the search to this file")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        network = read_network(args.network)
    except (FileNotFoundError, MalformedNetworkError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    if args.max_length < 1:
        print("Error: --max-length must be at least 1", file=sys.stderr)
        return 2

    solver_options = {}
    if args.sat_backend and args.solver != "sat_solver":
        print("Error: --sat-backend only applies to --solver sat_solver", file=sys.stderr)
        return 2
    if args.sat_backend:
        solver_options["name"] = args.sat_backend

    print(f"Searching {args.network} ({network.num_nodes} nodes) for a simple path of length <= {args.max_length}")
    try:
        result = search(
            network,
            args.max_length,
            solver=args.solver,
            solver_options=solver_options,
            sink=print if args.verbose else None,
        )
    except ImportError as exc:
        print(f"Solver {args.solver} is unavailable: {exc}", file=sys.stderr)
        return 3
    except DecodingError as exc:
        print(f"Decoding inconsistency: {exc}", file=sys.stderr)
        return 3
    except SolverError as exc:
        print(f"Solver failure: {exc}", file=sys.stderr)
        return 3

    if result.found:
        rendered = format_path(network, result.steps)
        print(f"Path found at length {result.length}:")
        print(rendered)
        if args.print_model:
            print(format_model(result.model, network, result.length))
    else:
        rendered = None
        print(f"No simple path of length <= {args.max_length}")
    print(f"Search time:{result.elapsed}")

    dot_path = png_path = None
    if args.dot and result.found:
        dot_path, png_path = write_path_dot(network, result.steps, args.dot)
        print(f"Visualization: {dot_path}")
        if png_path:
            print(f"Image stored at: {png_path}")

    if args.summary:
        summary = {
            "network": str(args.network),
            "solver": args.solver,
            "max_length": args.max_length,
            "found": result.found,
            "length": result.length,
            "tried": result.tried,
            "path": rendered,
            "steps": [
                {
                    "action": step.action.token,
                    "from": network.node_name(step.source),
                    "to": network.node_name(step.target),
                }
                for step in result.steps
            ],
            "time": result.elapsed,
            "dot": str(dot_path) if dot_path else None,
            "png": str(png_path) if png_path else None,
        }
        summary_path = Path(args.summary)
        summary_path.parent.mkdir(parents=True, exist_ok=True)
        with summary_path.open("w") as summary_file:
            json.dump(summary, summary_file, indent=2)

    return 0


if __name__ == "__main__":
    sys.exit(main())
