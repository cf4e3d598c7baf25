"""Bounded simple-path search in tunnel networks by reduction to SAT."""
from tunnelsat.network import Network, PathStep, Pop, Push, Symbol, Transmit, parse_action
from tunnelsat.network_parser import parse_network, read_network
from tunnelsat.reduction.decoder import Model, decode
from tunnelsat.reduction.presentation import format_model, format_path
from tunnelsat.reduction.reducer import SearchResult, reduce, search

__version__ = "0.1.0"
