import math
import numpy as np


def as_matrix(X):
    """
    Convert input to a C-contiguous float64 matrix.

    Args:
        X (array_like): Data with one vector per row.

    Returns:
        numpy.ndarray: Array of shape (n_samples, n_features).
    """
    X = np.ascontiguousarray(X, dtype=np.float64)
    if X.ndim != 2:
        raise ValueError(f"Expected a 2-D matrix, got an array with {X.ndim} dimension(s)")
    return X


def pure_euclidean_distance(x, y):
    """Euclidean distance between two vectors using plain Python loops."""
    if len(x) != len(y):
        raise ValueError(f"Vectors have different lengths: {len(x)} and {len(y)}")
    total = 0.0
    for i in range(len(x)):
        total += (x[i] - y[i]) ** 2
    return math.sqrt(total)


def pairwise(X, metric=pure_euclidean_distance):
    """
    Distance matrix between all rows of X.

    Args:
        X (array_like): Data of shape (n_samples, n_features).
        metric (callable): Function taking two vectors and returning a float.

    Returns:
        numpy.ndarray: Matrix of shape (n_samples, n_samples).
    """
    X = as_matrix(X)
    n = X.shape[0]
    D = np.empty((n, n), dtype=np.float64)
    for i in range(n):
        for j in range(n):
            D[i, j] = metric(X[i], X[j])
    return D


def numpy_euclidean_distance(x, y):
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    if x.shape != y.shape:
        raise ValueError(f"Vectors have different shapes: {x.shape} and {y.shape}")
    return np.sqrt(np.sum((x - y) ** 2))


def numpy_pairwise(X, max_elements=2**24):
    """
    Vectorized distance matrix using broadcasting.

    Rows are processed in blocks so the (block, n, d) difference array
    stays under max_elements entries.
    """
    X = as_matrix(X)
    n, d = X.shape
    D = np.empty((n, n), dtype=np.float64)
    block = max(1, max_elements // max(1, n * d))
    for start in range(0, n, block):
        stop = min(start + block, n)
        diff = X[start:stop, np.newaxis, :] - X[np.newaxis, :, :]
        D[start:stop] = np.sqrt(np.sum(diff ** 2, axis=-1))
    return D
