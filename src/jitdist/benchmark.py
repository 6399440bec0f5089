import os
import glob
import time
import logging
import multiprocessing
import numpy as np
import pandas as pd
import polars as pl
from numba import config, get_num_threads
from scipy.spatial.distance import cdist
from tqdm import tqdm

from jitdist.config import DEFAULT_N_SAMPLES, DEFAULT_N_FEATURES, DEFAULT_NUM_RUNS, RTOL
from jitdist.distance import as_matrix, pairwise, numpy_pairwise
from jitdist.jit_distance import numba_pairwise, numba_pairwise_parallel, warm_up

logger = logging.getLogger(__name__)


def scipy_pairwise(X):
    X = as_matrix(X)
    return cdist(X, X, metric='euclidean')


IMPLEMENTATIONS = {
    'python': pairwise,
    'numpy': numpy_pairwise,
    'scipy': scipy_pairwise,
    'numba': numba_pairwise,
    'numba_parallel': numba_pairwise_parallel,
}

REFERENCE = 'numpy'

RESULT_COLUMNS = ['implementation', 'n_samples', 'n_features', 'num_runs',
                  'mean_time', 'std_time', 'min_time', 'speedup', 'matches_reference']


def cpu_info():
    """
    Collect CPU and numba threading information.
    """
    physical_cores = multiprocessing.cpu_count()
    try:
        # On Linux
        logical_cores = len(os.sched_getaffinity(0))
    except AttributeError:
        # Fallback for other systems
        logical_cores = physical_cores
    return {
        'physical_cores': physical_cores,
        'logical_cores': logical_cores,
        'numba_default_threads': config.NUMBA_DEFAULT_NUM_THREADS,
        'numba_threads': get_num_threads(),
    }


def generate_data(n_samples=DEFAULT_N_SAMPLES, n_features=DEFAULT_N_FEATURES, seed=None):
    if n_samples < 0 or n_features < 1:
        raise ValueError(f"Invalid data shape ({n_samples}, {n_features})")
    rng = np.random.default_rng(seed)
    return rng.random((n_samples, n_features))


def time_implementation(fn, X, num_runs=DEFAULT_NUM_RUNS, desc=None):
    """
    Time repeated calls of fn(X).

    Returns:
        list: durations in seconds, one per run
    """
    if num_runs < 1:
        raise ValueError(f"num_runs must be at least 1, got {num_runs}")
    times = []
    for _ in tqdm(range(num_runs), desc=desc, leave=False):
        start = time.perf_counter()
        fn(X)
        times.append(time.perf_counter() - start)
    return times


def resolve_implementations(names=None):
    if names is None:
        return list(IMPLEMENTATIONS)
    unknown = [name for name in names if name not in IMPLEMENTATIONS]
    if unknown:
        raise ValueError(f"Unknown implementation(s): {', '.join(unknown)}. "
                         f"Choose from {', '.join(IMPLEMENTATIONS)}")
    # keep registry order, drop duplicates
    return [name for name in IMPLEMENTATIONS if name in names]


def run_benchmark(n_samples=DEFAULT_N_SAMPLES, n_features=DEFAULT_N_FEATURES,
                  num_runs=DEFAULT_NUM_RUNS, implementations=None, seed=None,
                  X=None) -> pd.DataFrame:
    """
    Time each pairwise implementation on the same random matrix and check
    its output against the NumPy reference.

    Parameters:
    -----------
    n_samples, n_features : int
        Shape of the generated data, ignored when X is given
    num_runs : int
        Timed calls per implementation
    implementations : list of str, optional
        Names from IMPLEMENTATIONS, all of them by default
    seed : int, optional
        Seed for the data generator
    X : array_like, optional
        Use this matrix instead of generating one

    Returns:
    --------
    results : pandas DataFrame
        One row per implementation with timing statistics
    """
    names = resolve_implementations(implementations)
    if num_runs < 1:
        raise ValueError(f"num_runs must be at least 1, got {num_runs}")
    X = generate_data(n_samples, n_features, seed) if X is None else as_matrix(X)
    n_samples, n_features = X.shape

    info = cpu_info()
    logger.info(f"Physical cores: {info['physical_cores']}, logical cores: {info['logical_cores']}, "
                f"numba threads: {info['numba_threads']}")
    logger.info(f"Running benchmark on a {n_samples} x {n_features} matrix, {num_runs} runs each: {', '.join(names)}")

    if any(name.startswith('numba') for name in names):
        logger.info("Warming up JIT...")
        start = time.perf_counter()
        warm_up()
        logger.info(f"JIT compilation took {time.perf_counter() - start:.4f} seconds")

    reference = numpy_pairwise(X)

    rows = []
    for name in names:
        fn = IMPLEMENTATIONS[name]
        times = time_implementation(fn, X, num_runs, desc=name)
        # Verify results match
        matches = bool(np.allclose(fn(X), reference, rtol=RTOL, equal_nan=True))
        if not matches:
            logger.warning(f"{name} result does not match the {REFERENCE} reference")
        logger.info(f"{name} average time: {np.mean(times):.4f} seconds")
        rows.append({
            'implementation': name,
            'n_samples': n_samples,
            'n_features': n_features,
            'num_runs': num_runs,
            'mean_time': float(np.mean(times)),
            'std_time': float(np.std(times)),
            'min_time': float(np.min(times)),
            'matches_reference': matches,
        })

    results = pd.DataFrame(rows)
    if 'python' in names:
        baseline = results.loc[results['implementation'] == 'python', 'mean_time'].iloc[0]
    else:
        baseline = results['mean_time'].max()
    # zero-row inputs can time at 0.0
    results['speedup'] = baseline / results['mean_time'].clip(lower=np.finfo(float).tiny)
    return results[RESULT_COLUMNS]


def save_results(results, output_dir, run_id=None):
    """
    Save benchmark results using Polars and Parquet format
    """
    if run_id is None:
        run_id = time.strftime("%Y%m%d_%H%M%S")
    os.makedirs(output_dir, exist_ok=True)
    records = results.to_dict(orient='records')
    for record in records:
        record['run_id'] = run_id
    results_df = pl.DataFrame(records)
    parquet_path = os.path.join(output_dir, f"benchmark_results_{run_id}.parquet")
    results_df.write_parquet(parquet_path, compression='zstd')
    logger.info(f"Results saved to {parquet_path}")
    return parquet_path


def combine_results(output_dir):
    """
    Combine all saved benchmark runs into a single DataFrame.
    """
    result_files = sorted(glob.glob(os.path.join(output_dir, '**', 'benchmark_results_*.parquet'), recursive=True))
    if not result_files:
        raise ValueError(f"No result files found in {output_dir}")

    logger.info(f"Combining {len(result_files)} result files...")
    dfs = [pl.read_parquet(path) for path in result_files]
    combined_df = pl.concat(dfs).sort(['run_id', 'implementation'])
    return combined_df.to_pandas()
