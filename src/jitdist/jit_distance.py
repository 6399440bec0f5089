import numpy as np
from numba import jit, prange

from jitdist.distance import as_matrix


@jit(nopython=True)
def _euclidean_distance(x, y):
    # x and y must have equal length, nopython mode does no bounds checks
    total = 0.0
    for i in range(x.shape[0]):
        total += (x[i] - y[i]) ** 2
    return np.sqrt(total)


@jit(nopython=True)
def _pairwise(X):
    n = X.shape[0]
    D = np.empty((n, n), dtype=np.float64)
    for i in range(n):
        for j in range(n):
            D[i, j] = _euclidean_distance(X[i], X[j])
    return D


# Parallel JIT version
@jit(nopython=True, parallel=True)
def _pairwise_parallel(X):
    n = X.shape[0]
    D = np.empty((n, n), dtype=np.float64)
    # Use prange for parallel execution of the outer loop
    for i in prange(n):
        for j in range(n):
            D[i, j] = _euclidean_distance(X[i], X[j])
    return D


def numba_euclidean_distance(x, y):
    """JIT-compiled Euclidean distance between two 1-D vectors"""
    x = np.ascontiguousarray(x, dtype=np.float64)
    y = np.ascontiguousarray(y, dtype=np.float64)
    if x.ndim != 1 or y.ndim != 1:
        raise ValueError(f"Expected 1-D vectors, got {x.ndim} and {y.ndim} dimension(s)")
    if x.shape != y.shape:
        raise ValueError(f"Vectors have different lengths: {x.shape[0]} and {y.shape[0]}")
    return _euclidean_distance(x, y)


def numba_pairwise(X):
    """JIT-compiled distance matrix, same double loop as distance.pairwise"""
    return _pairwise(as_matrix(X))


def numba_pairwise_parallel(X):
    """JIT-compiled distance matrix with the outer loop spread over numba threads"""
    return _pairwise_parallel(as_matrix(X))


def warm_up():
    """
    Compile every kernel on a tiny input so later calls measure run time only.
    """
    X = np.zeros((2, 2), dtype=np.float64)
    _euclidean_distance(X[0], X[1])
    _pairwise(X)
    _pairwise_parallel(X)
