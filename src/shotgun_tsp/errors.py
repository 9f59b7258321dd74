"""Exception types raised by the solver and its parsers."""


class TSPError(Exception):
    """Base class for every error raised by shotgun_tsp."""


class InvalidMatrixError(TSPError, ValueError):
    """Distance matrix is empty, not square, or holds unusable entries."""


class InvalidParameterError(TSPError, ValueError):
    """Iterations, restarts, seed or worker count out of range / malformed."""


class WorkerError(TSPError, RuntimeError):
    """A restart worker process failed before reporting its local best."""
