"""
Reading and writing tunnel networks in a small DOT subset.

    digraph network {
        s [initial=true, actions="transmit_A push_A_B"];
        m [actions="pop_B_A"];
        t [final=true];
        s -> m -> t;
    }

Node indices follow the order in which names first appear.
"""
from __future__ import annotations

import re
import shutil
import subprocess
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Set, Tuple

from tunnelsat.errors import NetworkFormatError
from tunnelsat.network import Network, PathStep, parse_action

_NAME = r'[A-Za-z0-9_.]+|"[^"]*"'
_NODE_STMT = re.compile(rf"^({_NAME})\s*(?:\[(.*)\])?$")
_EDGE_STMT = re.compile(rf"^({_NAME})((?:\s*->\s*(?:{_NAME}))+)\s*(?:\[.*\])?$")
_ATTRIBUTE = re.compile(r'(\w+)\s*=\s*("[^"]*"|[^,\s]+)')
_HEADER = re.compile(rf"^(?:strict\s+)?digraph(?:\s+(?:{_NAME}))?$")
_TRUE = {"true", "yes", "1"}
# default-attribute statements, not nodes
_DEFAULTS = {"node", "edge", "graph"}


def _unquote(name: str) -> str:
    return name[1:-1] if name.startswith('"') and name.endswith('"') else name


def _split_line(line: str) -> List[str]:
    """Split one line on ``;`` and braces, dropping ``//``/``#`` comments outside quotes."""
    parts = []
    current = []
    quoted = False
    i = 0
    while i < len(line):
        char = line[i]
        if char == '"':
            quoted = not quoted
        elif not quoted:
            if char == "#" or line.startswith("//", i):
                break
            if char in ";{}":
                parts.append("".join(current))
                current = []
                i += 1
                continue
        current.append(char)
        i += 1
    parts.append("".join(current))
    return parts


def _statements(text: str):
    """Yield ``(line_number, statement)`` pairs, splitting on ``;``, braces and newlines."""
    for number, raw in enumerate(text.splitlines(), start=1):
        for part in _split_line(raw):
            stmt = part.strip()
            if stmt:
                yield number, stmt


def parse_network(text: str) -> Network:
    names: List[str] = []
    actions: Dict[str, Set] = {}
    edges: List[Tuple[str, str]] = []
    initial: List[str] = []
    final: List[str] = []

    def declare(name: str) -> str:
        name = _unquote(name)
        if name not in actions:
            names.append(name)
            actions[name] = set()
        return name

    seen_header = False
    for line, stmt in _statements(text):
        if not seen_header:
            if not _HEADER.match(stmt):
                raise NetworkFormatError("expected 'digraph <name> {'", line)
            seen_header = True
            continue

        edge_match = _EDGE_STMT.match(stmt)
        if edge_match:
            chain = [edge_match.group(1)] + re.findall(_NAME, edge_match.group(2))
            chain = [declare(name) for name in chain]
            edges.extend(zip(chain, chain[1:]))
            continue

        node_match = _NODE_STMT.match(stmt)
        if node_match is None:
            raise NetworkFormatError(f"cannot parse statement {stmt!r}", line)
        if node_match.group(1) in _DEFAULTS:
            continue
        name = declare(node_match.group(1))
        for key, value in _ATTRIBUTE.findall(node_match.group(2) or ""):
            value = _unquote(value)
            key = key.lower()
            if key == "actions":
                for token in re.split(r"[\s,]+", value.strip()):
                    if not token:
                        continue
                    try:
                        actions[name].add(parse_action(token))
                    except ValueError as exc:
                        raise NetworkFormatError(str(exc), line) from None
            elif key == "initial" and value.lower() in _TRUE:
                initial.append(name)
            elif key == "final" and value.lower() in _TRUE:
                final.append(name)

    if not seen_header:
        raise NetworkFormatError("empty network description")
    if not names:
        raise NetworkFormatError("the network has no nodes")
    if len(initial) != 1:
        raise NetworkFormatError(f"expected exactly one initial node, found {len(initial)}")
    if len(final) != 1:
        raise NetworkFormatError(f"expected exactly one final node, found {len(final)}")

    return Network.from_named({name: actions[name] for name in names}, edges, initial[0], final[0])


def read_network(path) -> Network:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Missing network file {path}")
    with path.open("r", encoding="utf-8") as network_file:
        return parse_network(network_file.read())


def _quote(name: str) -> str:
    plain = re.fullmatch(r"[A-Za-z0-9_.]+", name) and name not in _DEFAULTS
    return name if plain else f'"{name}"'


def format_network(network: Network, path: Optional[Sequence[PathStep]] = None) -> str:
    """Render ``network`` back to the DOT subset; ``path`` edges are highlighted."""
    highlighted = {(step.source, step.target): step.action.label for step in path or ()}

    lines = ["digraph network {"]
    for node in range(network.num_nodes):
        attributes = []
        if node == network.initial:
            attributes.append("initial=true")
        if node == network.final:
            attributes.append("final=true")
        tokens = sorted(action.token for action in network.enabled_actions(node))
        if tokens:
            attributes.append(f'actions="{" ".join(tokens)}"')
        suffix = f" [{', '.join(attributes)}]" if attributes else ""
        lines.append(f"    {_quote(network.node_name(node))}{suffix};")

    for u, v in network.edges:
        edge = f"    {_quote(network.node_name(u))} -> {_quote(network.node_name(v))}"
        if (u, v) in highlighted:
            edge += f' [label="{highlighted[(u, v)]}", color=red, penwidth=2]'
        lines.append(edge + ";")
    lines.append("}")
    return "\n".join(lines) + "\n"


def write_path_dot(network: Network, steps: Sequence[PathStep], dot_path, render_png: bool = True):
    """Write the network with ``steps`` highlighted; render a PNG when graphviz is available."""
    dot_path = Path(dot_path)
    dot_path.parent.mkdir(parents=True, exist_ok=True)
    with dot_path.open("w", encoding="utf-8") as dot_file:
        dot_file.write(format_network(network, steps))

    png_path = None
    if render_png:
        if shutil.which("dot") is None:
            print("Warning: graphviz 'dot' command not found; PNG not generated.")
        else:
            png_path = dot_path.with_suffix(".png")
            status = subprocess.run(["dot", "-Tpng", str(dot_path), "-o", str(png_path)]).returncode
            if status != 0:
                print("Warning: graphviz 'dot' failed; PNG not generated.")
                png_path = None
    return dot_path, png_path
