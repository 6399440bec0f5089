from jitdist.distance import pure_euclidean_distance, pairwise, numpy_euclidean_distance, numpy_pairwise
from jitdist.jit_distance import numba_euclidean_distance, numba_pairwise, numba_pairwise_parallel

__version__ = "0.1.0"
