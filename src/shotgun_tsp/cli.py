#!/usr/bin/env python3
"""Command line front end for the shotgun 2-opt TSP solver.

Default input is the ``.in`` format read from stdin:

    100 50 42
    0,10,15,20
    10,0,35,25
    15,35,0,30
    20,25,30,0

CLI examples:
    shotgun-tsp < instance.in
    shotgun-tsp instance.in --workers 8
    shotgun-tsp --linear instance.in
    shotgun-tsp --format dat gr21.dat --iterations 1000 --restarts 200 --seed 7
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from shotgun_tsp.config import DEFAULT_ITERATIONS, DEFAULT_RESTARTS, DEFAULT_SEED, SolverConfig
from shotgun_tsp.errors import TSPError
from shotgun_tsp.parsers.dat_parser import parse_tsp_dat, parse_tsplib
from shotgun_tsp.parsers.instance_parser import TSPInstance, read_instance
from shotgun_tsp.tsp.distance import DistanceModel
from shotgun_tsp.tsp.shotgun import SolveResult, solve_model

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='[%(levelname)s] %(message)s',
        stream=sys.stderr,
    )


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Shotgun hill climbing with 2-opt for TSP / ATSP matrices")
    ap.add_argument('input', nargs='?', help='Instance file (default: read stdin)')
    ap.add_argument('--format', choices=['in', 'dat', 'tsplib'], default='in',
                    help="'in': header line + CSV matrix; 'dat': AMPL param dist; 'tsplib': EXPLICIT weights")
    ap.add_argument('--iterations', type=int, help='Max 2-opt iterations per restart (overrides header)')
    ap.add_argument('--restarts', type=int, help='Number of random restarts (overrides header)')
    ap.add_argument('--seed', type=int, help='Base random seed (overrides header)')
    ap.add_argument('--workers', type=int, help='Parallel workers (default: $SHOTGUN_TSP_WORKERS or CPU count)')
    ap.add_argument('--linear', action='store_true', help='Single worker, no child processes')
    ap.add_argument('--json', action='store_true', help='Emit the result as a JSON object')
    ap.add_argument('-v', '--verbose', action='store_true')
    return ap


def load_problem(args) -> TSPInstance:
    if args.format == 'in':
        instance = read_instance(args.input if args.input else sys.stdin)
    else:
        if not args.input:
            raise TSPError(f"--format {args.format} needs an input file")
        matrix = parse_tsp_dat(args.input) if args.format == 'dat' else parse_tsplib(args.input)
        instance = TSPInstance(num_iterations=DEFAULT_ITERATIONS, num_restarts=DEFAULT_RESTARTS,
                               seed=DEFAULT_SEED, matrix=matrix)
    if args.iterations is not None:
        instance.num_iterations = args.iterations
    if args.restarts is not None:
        instance.num_restarts = args.restarts
    if args.seed is not None:
        instance.seed = args.seed
    return instance


def format_result(result: SolveResult) -> str:
    tour = ''.join(f"{city} " for city in result.tour)
    length = f"{result.length:.10g}" if result.found else 'inf'
    return f"Best tour found: {tour}\nTour length: {length}"


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    try:
        instance = load_problem(args)
        config: SolverConfig = instance.config(workers=1 if args.linear else args.workers).validate()
        model = DistanceModel(instance.matrix)
        if not model.is_symmetric():
            logger.info("asymmetric matrix (n=%d)", model.n)
        result = solve_model(model, config)
    except (TSPError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps({
            'tour': result.tour,
            'length': result.length if result.found else None,
            'n': model.n,
            'restarts': result.num_restarts,
            'workers': result.workers,
            'seed': result.seed,
            'runtime': result.runtime,
        }))
    else:
        print(f"Using {result.workers} workers")
        print(format_result(result))
    return 0


if __name__ == '__main__':
    sys.exit(main())
