import argparse
import json
import os
import time
from pathlib import Path

from tabulate import tabulate

from tunnelsat.errors import TunnelSatError
from tunnelsat.network_parser import read_network
from tunnelsat.reduction.presentation import format_path
from tunnelsat.reduction.reducer import search

# --- Configuration ---

CHECKPOINT_FILE = "experiment_results.json"
MAX_LENGTH = 10

# --- View mode ---
# "complete" -> length, time and tried bounds in the table
# "compact"  -> only time per solver in the table
# "linear"   -> no table, linear listing per network
VIEW = "complete"

# --- Per-solver toggle ---
# 1 = run this solver, 0 = skip it
SOLVER_CONFIG = {
    "sat_solver": 1,
    "milp_solver": 0,
}


# --- Helper Functions ---

def active_solvers(config=None):
    config = SOLVER_CONFIG if config is None else config
    return [name for name, run in config.items() if run == 1]


def format_result(res, view=VIEW):
    if not isinstance(res, dict):
        return str(res)
    if view == "compact":
        return f"{res['time']:.2f}s"
    length = res["length"] if res["found"] else "none"
    return f"<{res['time']:.2f}s, length {length}, tried {len(res['tried'])}>"


def display_table(results, networks, solvers, view=VIEW):
    headers = ["Network"] + list(solvers)
    table_data = []
    for name in networks:
        row = [name]
        for solver in solvers:
            row.append(format_result(results.get(name, {}).get(solver, "Not Run"), view))
        table_data.append(row)

    print("--- tunnelsat Experiment Runner ---")
    print(tabulate(table_data, headers=headers, stralign="center", maxcolwidths=40))
    print("-" * 30)


def display_linear(results, networks, solvers):
    print("--- tunnelsat Experiment Runner (Linear View) ---\n")
    for name in networks:
        print(f"Network: {name}")
        for solver in solvers:
            res = results.get(name, {}).get(solver, "Not Run")
            line = format_result(res, "complete")
            if isinstance(res, dict) and res["found"]:
                line += f" {res['path']}"
            print(f"  - {solver}: {line}")
        print()
    print("-" * 30)


def show_results(results, networks, solvers, view=VIEW):
    if view == "linear":
        display_linear(results, networks, solvers)
    else:
        display_table(results, networks, solvers, view)


def save_results(results, checkpoint=CHECKPOINT_FILE):
    """Saves the current results dictionary to the checkpoint file."""
    with open(checkpoint, "w") as f:
        json.dump(results, f, indent=4)


def load_results(checkpoint=CHECKPOINT_FILE):
    """Loads results from the checkpoint file if it exists."""
    if os.path.exists(checkpoint):
        try:
            with open(checkpoint, "r") as f:
                return json.load(f)
        except json.JSONDecodeError:
            return {}
    return {}


def run_single_experiment(network_path, solver, results, max_length=MAX_LENGTH):
    """Run one network with one solver and record the outcome in ``results``."""
    name = Path(network_path).stem
    entry = results.setdefault(name, {})
    if isinstance(entry.get(solver), dict):
        return results

    start_time = time.time()
    try:
        network = read_network(network_path)
        result = search(network, max_length, solver=solver)
    except ImportError as exc:
        entry[solver] = f"Unavailable ({exc.name})"
        return results
    except TunnelSatError as exc:
        entry[solver] = f"Run Error ({type(exc).__name__}: {exc})"
        return results

    entry[solver] = {
        "found": result.found,
        "length": result.length,
        "tried": result.tried,
        "path": format_path(network, result.steps) if result.found else None,
        "time": time.time() - start_time,
    }
    return results


def run_experiments(network_dir, solvers=None, max_length=MAX_LENGTH, checkpoint=CHECKPOINT_FILE, fresh=False):
    solvers = active_solvers() if solvers is None else list(solvers)
    network_paths = sorted(Path(network_dir).glob("*.dot"))
    results = {} if fresh else load_results(checkpoint)

    for network_path in network_paths:
        for solver in solvers:
            results = run_single_experiment(network_path, solver, results, max_length)
            save_results(results, checkpoint)
    return results


# --- Main Execution ---

def main(argv=None):
    parser = argparse.ArgumentParser(description="Run the path search over a directory of networks")
    parser.add_argument("network_dir", help="Directory holding *.dot network files")
    parser.add_argument("--max-length", type=int, default=MAX_LENGTH, help="Largest path length to try")
    parser.add_argument("--checkpoint", default=CHECKPOINT_FILE, help="JSON file used to resume runs")
    parser.add_argument("--fresh", action="store_true", help="Ignore previous results in the checkpoint")
    parser.add_argument("--view", choices=["complete", "compact", "linear"], default=VIEW)
    args = parser.parse_args(argv)

    solvers = active_solvers()
    networks = [path.stem for path in sorted(Path(args.network_dir).glob("*.dot"))]
    if not networks:
        print(f"No *.dot networks found in {args.network_dir}")
        return 1

    try:
        results = run_experiments(args.network_dir, solvers, args.max_length, args.checkpoint, args.fresh)
    except KeyboardInterrupt:
        print("\n\nExperiment paused/stopped by user. Run the script again to continue.")
        results = load_results(args.checkpoint)

    show_results(results, networks, solvers, args.view)
    print(f"\nResults are checkpointed in '{args.checkpoint}'.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
