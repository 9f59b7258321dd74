#!/usr/bin/env python3
"""Compare the linear (one worker) and parallel solver on a set of .in instances.

For every instance the solver runs twice with the header's iterations,
restarts and seed: once with a single worker, once with ``--workers``.
Wall time, tour length, speedup and a quality verdict are recorded.

Outputs (in --out-dir, timestamped):
  comparison_results_<stamp>.csv   one row per instance
  comparison_results_<stamp>.txt   human-readable log + final report

Example:
  shotgun-tsp-compare --data-dir instances --workers 8
  shotgun-tsp-compare --generate 5 --sizes 20,40,80 --data-dir instances
"""
from __future__ import annotations

import argparse
import glob
import logging
import math
import os
import sys
import time
from dataclasses import asdict, dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd
from scipy.stats import wilcoxon

from shotgun_tsp.config import default_workers
from shotgun_tsp.errors import TSPError
from shotgun_tsp.parsers.instance_parser import format_instance, read_instance
from shotgun_tsp.tsp.distance import DistanceModel
from shotgun_tsp.tsp.shotgun import solve_tsp

QUALITY_TOLERANCE = 1e-3
PARALLEL_BETTER = 'parallel_better'
LINEAR_BETTER = 'linear_better'
EQUAL = 'equal'


@dataclass
class ComparisonRecord:
    instance: str
    cities: int
    iterations: int
    restarts: int
    seed: int
    workers: int
    linear_time: float
    linear_length: float
    parallel_time: float
    parallel_length: float
    speedup: float
    quality: str


def quality_verdict(linear_length: float, parallel_length: float,
                    tolerance: float = QUALITY_TOLERANCE) -> str:
    diff = linear_length - parallel_length
    if diff > tolerance:
        return PARALLEL_BETTER
    if diff < -tolerance:
        return LINEAR_BETTER
    return EQUAL


def _timed_solve(model, instance, workers):
    start_t = time.perf_counter()
    result = solve_tsp(model, instance.num_iterations, instance.num_restarts, instance.seed, workers)
    return result, time.perf_counter() - start_t


def compare_instance(path: str, workers: int) -> ComparisonRecord:
    instance = read_instance(path)
    model = DistanceModel(instance.matrix)
    linear, linear_time = _timed_solve(model, instance, 1)
    parallel, parallel_time = _timed_solve(model, instance, workers)
    speedup = linear_time / parallel_time if parallel_time > 0 else math.nan
    return ComparisonRecord(
        instance=os.path.basename(path),
        cities=model.n,
        iterations=instance.num_iterations,
        restarts=instance.num_restarts,
        seed=instance.seed,
        workers=parallel.workers,
        linear_time=linear_time,
        linear_length=linear.length,
        parallel_time=parallel_time,
        parallel_length=parallel.length,
        speedup=speedup,
        quality=quality_verdict(linear.length, parallel.length),
    )


def summarize_comparison(records: Sequence[ComparisonRecord]) -> Dict[str, float]:
    total_linear = sum(r.linear_time for r in records)
    total_parallel = sum(r.parallel_time for r in records)
    return {
        'instances': len(records),
        'total_linear_time': total_linear,
        'total_parallel_time': total_parallel,
        'overall_speedup': total_linear / total_parallel if total_parallel > 0 else math.nan,
        PARALLEL_BETTER: sum(r.quality == PARALLEL_BETTER for r in records),
        LINEAR_BETTER: sum(r.quality == LINEAR_BETTER for r in records),
        EQUAL: sum(r.quality == EQUAL for r in records),
    }


def speedup_rating(speedup: float) -> str:
    if math.isnan(speedup):
        return 'N/A'
    if speedup > 1.5:
        return 'excellent'
    if speedup > 1.1:
        return 'good'
    if speedup > 0.9:
        return 'neutral'
    return 'problematic'


def statistical_tests(df: pd.DataFrame) -> List[str]:
    """Wilcoxon signed-rank on per-instance linear vs parallel times."""
    if len(df) < 2:
        return ['Skipping Wilcoxon test (need at least 2 instances)']
    try:
        stat, p = wilcoxon(df['linear_time'], df['parallel_time'])
    except ValueError as e:
        return [f'Wilcoxon linear_time vs parallel_time failed: {e}']
    return [f'Wilcoxon linear_time vs parallel_time: stat={stat} p={p:.3e}']


def report_lines(records: Sequence[ComparisonRecord], df: pd.DataFrame) -> List[str]:
    summary = summarize_comparison(records)
    lines = [
        'LINEAR vs PARALLEL PERFORMANCE REPORT',
        '=' * 40,
        f"Instances processed: {summary['instances']}",
        f"Total linear time: {summary['total_linear_time']:.3f}s",
        f"Total parallel time: {summary['total_parallel_time']:.3f}s",
        f"Overall speedup: {summary['overall_speedup']:.2f}x ({speedup_rating(summary['overall_speedup'])})",
        '',
        'Solution quality:',
        f"  parallel better: {summary[PARALLEL_BETTER]}",
        f"  linear better:   {summary[LINEAR_BETTER]}",
        f"  equal:           {summary[EQUAL]}",
        '',
    ]
    lines.extend(statistical_tests(df))
    return lines


def write_report(records: Sequence[ComparisonRecord], out_dir: str,
                 stamp: Optional[str] = None) -> Dict[str, str]:
    os.makedirs(out_dir, exist_ok=True)
    stamp = stamp or time.strftime('%Y%m%d_%H%M%S')
    csv_path = os.path.join(out_dir, f'comparison_results_{stamp}.csv')
    txt_path = os.path.join(out_dir, f'comparison_results_{stamp}.txt')

    df = pd.DataFrame([asdict(r) for r in records])
    df.to_csv(csv_path, index=False)

    with open(txt_path, 'w') as f:
        f.write(f"Shotgun TSP comparison results - {time.strftime('%Y-%m-%d %H:%M:%S')}\n")
        for r in records:
            f.write(f"\n{r.instance}: cities={r.cities} iterations={r.iterations} "
                    f"restarts={r.restarts} seed={r.seed}\n")
            f.write(f"  linear:   {r.linear_time:.3f}s length={r.linear_length}\n")
            f.write(f"  parallel: {r.parallel_time:.3f}s length={r.parallel_length} (workers={r.workers})\n")
            f.write(f"  speedup: {r.speedup:.2f}x quality: {r.quality}\n")
        f.write('\n' + '\n'.join(report_lines(records, df)) + '\n')
    return {'csv': csv_path, 'txt': txt_path}


def generate_instances(out_dir: str, count: int, sizes: Sequence[int], iterations: int,
                       restarts: int, seed: int = 0, asymmetric: bool = True) -> List[str]:
    """Write ``count`` random instances per size, costs uniform in [1, 100]."""
    os.makedirs(out_dir, exist_ok=True)
    rng = np.random.default_rng(seed)
    paths = []
    for n in sizes:
        for k in range(count):
            matrix = rng.integers(1, 101, size=(n, n)).astype(float)
            if not asymmetric:
                matrix = np.triu(matrix, 1) + np.triu(matrix, 1).T
            np.fill_diagonal(matrix, 0.0)
            path = os.path.join(out_dir, f'random_n{n}_{k + 1}.in')
            with open(path, 'w') as f:
                f.write(format_instance(iterations, restarts, seed + k, matrix))
            paths.append(path)
    return paths


def run_comparison(paths: Sequence[str], workers: int) -> List[ComparisonRecord]:
    records = []
    for path in paths:
        name = os.path.basename(path)
        try:
            rec = compare_instance(path, workers)
        except TSPError as e:
            print(f'{name:25s} ERROR {e}')
            continue
        print(f'{name:25s} n={rec.cities:<5d} linear={rec.linear_time:.3f}s ({rec.linear_length:g}) '
              f'parallel={rec.parallel_time:.3f}s ({rec.parallel_length:g}) '
              f'speedup={rec.speedup:.2f}x {rec.quality}')
        records.append(rec)
    return records


def main(argv: Optional[List[str]] = None) -> int:  # pragma: no cover - CLI
    ap = argparse.ArgumentParser(description='Compare linear and parallel shotgun TSP runs over .in files')
    ap.add_argument('--data-dir', default='.', help='Directory holding .in instances')
    ap.add_argument('--pattern', default='*.in', help='Glob inside --data-dir')
    ap.add_argument('--workers', type=int, help='Parallel worker count (default: $SHOTGUN_TSP_WORKERS or CPU count)')
    ap.add_argument('--out-dir', default='outputs', help='Where CSV and text reports go')
    ap.add_argument('--generate', type=int, metavar='COUNT', help='First write COUNT random instances per size')
    ap.add_argument('--sizes', default='20,50,100', help='Comma list of sizes for --generate')
    ap.add_argument('--iterations', type=int, default=1000, help='Header iterations for --generate')
    ap.add_argument('--restarts', type=int, default=64, help='Header restarts for --generate')
    ap.add_argument('--seed', type=int, default=0, help='Base seed for --generate')
    ap.add_argument('-v', '--verbose', action='store_true')
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='[%(levelname)s] %(message)s')

    try:
        workers = args.workers if args.workers is not None else default_workers()
    except TSPError as e:
        print(f'[error] {e}')
        return 1

    if args.generate:
        sizes = [int(s) for s in args.sizes.split(',') if s.strip()]
        generated = generate_instances(args.data_dir, args.generate, sizes, args.iterations,
                                       args.restarts, args.seed)
        print(f'[info] generated {len(generated)} instances in {args.data_dir}')

    paths = sorted(glob.glob(os.path.join(args.data_dir, args.pattern)))
    if not paths:
        print(f'[error] no instances matching {args.pattern} in {args.data_dir}')
        return 1

    print(f'Instances found: {len(paths)}; parallel runs use {workers} workers')
    records = run_comparison(paths, workers)
    if not records:
        print('[warn] no instance could be compared')
        return 1

    out = write_report(records, args.out_dir)
    df = pd.DataFrame([asdict(r) for r in records])
    print()
    print('\n'.join(report_lines(records, df)))
    print(f"\n✓ CSV results: {out['csv']}")
    print(f"✓ Detailed log: {out['txt']}")
    return 0


if __name__ == '__main__':  # pragma: no cover
    sys.exit(main())
