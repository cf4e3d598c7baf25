"""Exceptions raised by tunnelsat."""


class TunnelSatError(Exception):
    """Base class for every error raised by the package."""


class MalformedNetworkError(TunnelSatError, ValueError):
    """The network cannot be reduced (bad node count, endpoints or actions)."""


class NetworkFormatError(MalformedNetworkError):
    """A network description could not be parsed."""

    def __init__(self, message: str, line: int = None):
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class DecodingError(TunnelSatError):
    """A model claimed to satisfy the reduction does not describe a path.

    This always points at a bug in the constraint construction, never at a
    property of the network.
    """


class SolverError(TunnelSatError):
    """The oracle backend failed without deciding satisfiability."""


class InvalidPathError(TunnelSatError):
    """A path does not respect the network or its stack discipline."""

    def __init__(self, message: str, step: int = None):
        self.step = step
        if step is not None:
            message = f"step {step}: {message}"
        super().__init__(message)
