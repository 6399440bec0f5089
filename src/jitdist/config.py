import os
import logging
import numba

logger = logging.getLogger(__name__)

DEFAULT_N_SAMPLES = 5000
DEFAULT_N_FEATURES = 100
DEFAULT_NUM_RUNS = 5
RTOL = 1e-10


def get_base_path():
    """
    Determine the base path for benchmark output.
    Returns JITDIST_PATH if set, otherwise the current working directory.
    """
    base_path = os.getenv('JITDIST_PATH', os.getcwd())
    if not os.path.isdir(base_path):
        raise ValueError(f"Base path {base_path} does not exist. Please either:\n"
                         f"1. Create the directory\n"
                         f"2. Point the JITDIST_PATH environment variable somewhere else")
    return base_path


def get_output_dir(timestamp):
    """
    Get the output directory path for benchmark results.
    """
    base_path = get_base_path()
    return os.path.join(base_path, 'benchmark_results', timestamp)


def configure_threads(num_threads=None):
    """
    Set the number of threads used by parallel kernels.

    Falls back to JITDIST_NUM_THREADS, then to numba's default.
    Returns the thread count in effect.
    """
    if num_threads is None:
        env_threads = os.getenv('JITDIST_NUM_THREADS')
        num_threads = int(env_threads) if env_threads else None
    if num_threads is not None:
        if not 1 <= num_threads <= numba.config.NUMBA_NUM_THREADS:
            raise ValueError(f"num_threads must be between 1 and {numba.config.NUMBA_NUM_THREADS}, got {num_threads}")
        numba.set_num_threads(num_threads)
        logger.info(f"Numba thread count set to {num_threads}")
    return numba.get_num_threads()
