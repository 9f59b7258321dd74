"""Run parameters for the shotgun hill climber.

The worker count can be pinned through ``SHOTGUN_TSP_WORKERS``; otherwise
one worker per CPU is used.
"""
from __future__ import annotations

import numbers
import os
from dataclasses import dataclass
from typing import Optional

from shotgun_tsp.errors import InvalidParameterError

DEFAULT_ITERATIONS = 1000
DEFAULT_RESTARTS = 100
DEFAULT_SEED = 0
WORKERS_ENV_VAR = 'SHOTGUN_TSP_WORKERS'


def default_workers() -> int:
    raw = os.environ.get(WORKERS_ENV_VAR)
    if raw:
        try:
            value = int(raw)
        except ValueError:
            raise InvalidParameterError(f"{WORKERS_ENV_VAR} must be an integer, got {raw!r}")
        if value < 1:
            raise InvalidParameterError(f"{WORKERS_ENV_VAR} must be >= 1, got {value}")
        return value
    return os.cpu_count() or 1


def _is_int(value) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


@dataclass
class SolverConfig:
    num_iterations: int = DEFAULT_ITERATIONS
    num_restarts: int = DEFAULT_RESTARTS
    seed: int = DEFAULT_SEED
    workers: Optional[int] = None  # None -> env var or cpu count

    def validate(self) -> 'SolverConfig':
        """Reject negative counts before any work is scheduled.

        Any integral type is accepted (numpy integers included) and stored as
        a plain int; bools are rejected.
        """
        for name in ('num_iterations', 'num_restarts', 'seed'):
            value = getattr(self, name)
            if not _is_int(value):
                raise InvalidParameterError(f"{name} must be an integer, got {value!r}")
            if value < 0:
                raise InvalidParameterError(f"{name} must be >= 0, got {value}")
            setattr(self, name, int(value))
        if self.workers is not None and (not _is_int(self.workers) or self.workers < 1):
            raise InvalidParameterError(f"workers must be a positive integer, got {self.workers!r}")
        if self.workers is not None:
            self.workers = int(self.workers)
        return self

    def resolved_workers(self) -> int:
        """Worker count actually used: never more than there are restarts."""
        workers = self.workers if self.workers is not None else default_workers()
        return max(1, min(workers, self.num_restarts))
