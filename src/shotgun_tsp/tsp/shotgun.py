"""Restart scheduler: many independent hill climbs reduced to one best tour.

Restarts are split into contiguous blocks, one per worker (static
schedule). Worker ``w`` seeds its own generator with
``derive_seed(seed, w) == seed + w`` and runs its block sequentially, so the
same seed and worker count always reproduce the same answer; with a single
worker the generator is seeded with the base seed itself.

Workers are separate processes. Each one sends
``(worker_index, status, payload)`` back over a queue and the parent folds
the local bests in worker order, keeping the first strictly shorter tour.
A worker that raises, or exits without reporting, aborts the run with
WorkerError.
"""
from __future__ import annotations

import logging
import math
import multiprocessing
import queue
import time
import traceback
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from shotgun_tsp.config import SolverConfig
from shotgun_tsp.errors import WorkerError
from shotgun_tsp.tsp.distance import DistanceModel
from shotgun_tsp.tsp.local_search import ClimbResult, hill_climb

logger = logging.getLogger(__name__)

RESULT_POLL_SECONDS = 0.5


@dataclass
class SolveResult:
    tour: List[int]
    length: float
    num_restarts: int
    workers: int
    seed: int
    runtime: float = 0.0
    restart_lengths: List[float] = field(default_factory=list, repr=False)

    @property
    def found(self) -> bool:
        return bool(self.tour)


def derive_seed(base_seed: int, worker_index: int) -> int:
    return base_seed + worker_index


def partition_restarts(num_restarts: int, workers: int) -> List[range]:
    """Contiguous restart blocks; the first ``num_restarts % workers`` get one extra."""
    if workers < 1:
        raise ValueError(f"workers must be >= 1, got {workers}")
    base, extra = divmod(num_restarts, workers)
    blocks = []
    start = 0
    for w in range(workers):
        size = base + (1 if w < extra else 0)
        blocks.append(range(start, start + size))
        start += size
    return blocks


def better(candidate: Optional[ClimbResult], best: Optional[ClimbResult]) -> bool:
    if candidate is None:
        return False
    return best is None or candidate.length < best.length


def run_restarts(model: DistanceModel, num_iterations: int, num_restarts: int,
                 seed: int, lengths: Optional[List[float]] = None) -> Optional[ClimbResult]:
    """Run ``num_restarts`` climbs off one generator seeded with ``seed``.

    Returns the shortest local optimum (earliest on ties), or None when
    ``num_restarts`` is 0. Each restart's final length is appended to
    ``lengths`` when a list is given.
    """
    rng = np.random.default_rng(seed)
    best = None
    for _ in range(num_restarts):
        result = hill_climb(model, num_iterations, rng)
        if lengths is not None:
            lengths.append(result.length)
        if better(result, best):
            best = result
    return best


def _restart_worker(worker_index, model, num_iterations, num_restarts, seed, results_queue):
    try:
        lengths: List[float] = []
        best = run_restarts(model, num_iterations, num_restarts, seed, lengths)
        results_queue.put((worker_index, 'ok', (best, lengths)))
    except Exception as e:  # reported to the parent, which raises WorkerError
        results_queue.put((worker_index, 'error', f"{e.__class__.__name__}: {e}\n{traceback.format_exc()}"))


def _collect_results(processes, results_queue):
    """Wait for one message per worker; fail if a worker exits without one."""
    messages = {}
    while len(messages) < len(processes):
        try:
            w, status, payload = results_queue.get(timeout=RESULT_POLL_SECONDS)
            messages[w] = (status, payload)
            continue
        except queue.Empty:
            pass
        dead = [(w, p) for w, p in processes if w not in messages and not p.is_alive()]
        if not dead:
            continue
        # a worker may have posted just before exiting
        while True:
            try:
                w, status, payload = results_queue.get_nowait()
            except queue.Empty:
                break
            messages[w] = (status, payload)
        for w, p in dead:
            if w not in messages:
                raise WorkerError(f"restart worker {w} exited with code {p.exitcode}")
    return messages


def shotgun_hill_climbing(model: DistanceModel, num_iterations: int, num_restarts: int,
                          seed: int, workers: int = 1,
                          lengths: Optional[List[float]] = None) -> Optional[ClimbResult]:
    """Best local optimum over ``num_restarts`` climbs spread across ``workers``.

    ``lengths`` (if given) receives every restart's final length, grouped by
    worker in worker order.
    """
    if workers == 1:
        return run_restarts(model, num_iterations, num_restarts, derive_seed(seed, 0), lengths)

    blocks = partition_restarts(num_restarts, workers)
    results_queue = multiprocessing.Queue()
    processes = []
    try:
        for w, block in enumerate(blocks):
            if not len(block):
                continue
            p = multiprocessing.Process(
                target=_restart_worker,
                args=(w, model, num_iterations, len(block), derive_seed(seed, w), results_queue),
            )
            p.start()
            processes.append((w, p))
        logger.debug("started %d restart workers", len(processes))

        # Drain the queue before joining: a child blocks on exit until its
        # message has been consumed.
        messages = _collect_results(processes, results_queue)
    finally:
        for _, p in processes:
            if p.is_alive():
                p.terminate()
            p.join()

    failures = [(w, payload) for w, (status, payload) in messages.items() if status == 'error']
    if failures:
        w, detail = min(failures)
        raise WorkerError(f"restart worker {w} failed: {detail}")

    best = None
    for w in sorted(messages):
        local_best, local_lengths = messages[w][1]
        if lengths is not None:
            lengths.extend(local_lengths)
        if better(local_best, best):
            best = local_best
    return best


def solve_tsp(matrix, num_iterations: int, num_restarts: int, seed: int = 0,
              workers: Optional[int] = None) -> SolveResult:
    """Validate inputs, run the shotgun search and package the answer.

    ``matrix`` is either a DistanceModel or anything DistanceModel accepts.
    With zero restarts nothing is searched and the result is the sentinel
    ``SolveResult(tour=[], length=inf)`` whose ``found`` is False.
    """
    config = SolverConfig(num_iterations=num_iterations, num_restarts=num_restarts,
                          seed=seed, workers=workers).validate()
    model = matrix if isinstance(matrix, DistanceModel) else DistanceModel(matrix)
    n_workers = config.resolved_workers()

    logger.info("solving n=%d iterations=%d restarts=%d seed=%d workers=%d",
                model.n, config.num_iterations, config.num_restarts, config.seed, n_workers)
    start_t = time.perf_counter()
    restart_lengths: List[float] = []
    best = shotgun_hill_climbing(model, config.num_iterations, config.num_restarts,
                                 config.seed, n_workers, restart_lengths)
    runtime = time.perf_counter() - start_t

    if best is None:
        logger.warning("no restarts requested; returning empty tour")
        return SolveResult(tour=[], length=math.inf, num_restarts=0, workers=n_workers,
                           seed=config.seed, runtime=runtime)

    logger.info("best length %.6g after %d restarts in %.3fs", best.length, config.num_restarts, runtime)
    return SolveResult(
        tour=[int(c) for c in best.tour],
        length=best.length,
        num_restarts=config.num_restarts,
        workers=n_workers,
        seed=config.seed,
        runtime=runtime,
        restart_lengths=restart_lengths,
    )


def solve_model(model: DistanceModel, config: SolverConfig) -> SolveResult:
    return solve_tsp(model, config.num_iterations, config.num_restarts, config.seed, config.workers)
