import os
import sys
from datetime import datetime
import logging
import argparse

from jitdist.config import (DEFAULT_N_SAMPLES, DEFAULT_N_FEATURES, DEFAULT_NUM_RUNS,
                            get_output_dir, configure_threads)
from jitdist.benchmark import IMPLEMENTATIONS, run_benchmark, save_results

logger = logging.getLogger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(prog='jitdist',
                                     description='Benchmark pairwise Euclidean distance with and without numba')
    parser.add_argument('--n-samples', type=int, default=DEFAULT_N_SAMPLES, help='Number of vectors')
    parser.add_argument('--n-features', type=int, default=DEFAULT_N_FEATURES, help='Vector length')
    parser.add_argument('--runs', type=int, default=DEFAULT_NUM_RUNS, help='Timed runs per implementation')
    parser.add_argument('--seed', type=int, default=None, help='Seed for the random data')
    parser.add_argument('--impl', action='append', choices=list(IMPLEMENTATIONS), default=None,
                        help='Implementation to run, can be repeated (default: all)')
    parser.add_argument('--threads', type=int, default=None, help='Numba thread count for numba_parallel')
    parser.add_argument('--output-dir', default=None, help='Directory for parquet results (default: JITDIST_PATH/benchmark_results/<timestamp>)')
    parser.add_argument('--no-save', action='store_true', help='Do not write results to disk')
    parser.add_argument('--plot', action='store_true', help='Save a bar chart next to the results')
    parser.add_argument('--verbose', action='store_true', help='Debug logging')
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler()]
    )

    if args.plot and args.no_save:
        parser.error("--plot cannot be combined with --no-save")
    if args.runs < 1:
        parser.error(f"--runs must be at least 1, got {args.runs}")
    if args.n_samples < 0 or args.n_features < 1:
        parser.error(f"Invalid data shape ({args.n_samples}, {args.n_features})")

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    output_dir = args.output_dir
    try:
        configure_threads(args.threads)
        if output_dir is None and not args.no_save:
            output_dir = get_output_dir(timestamp)
    except ValueError as e:
        parser.error(str(e))

    results = run_benchmark(n_samples=args.n_samples, n_features=args.n_features,
                            num_runs=args.runs, implementations=args.impl, seed=args.seed)

    print("\nResults:")
    print(results.to_string(index=False, float_format=lambda v: f"{v:.4f}"))

    if not args.no_save:
        save_results(results, output_dir, run_id=timestamp)
        if args.plot:
            from jitdist.plots import plot_results
            plot_path = os.path.join(output_dir, f"benchmark_{timestamp}.png")
            plot_results(results, plot_path)
            logger.info(f"Plot saved to {plot_path}")

    if not results['matches_reference'].all():
        logger.error("Some implementations disagree with the reference result")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
