import numpy as np
from scipy.spatial.distance import cdist, pdist, squareform

__all__ = ['distance_matrix', 'is_distance_matrix', 'coincident_pairs']

def as_locations(locs):
    """
    Coerce to a float64 array of (x, y) rows, shape [N, 2].

    A single point must still be given as `[[x, y]]`.
    """
    locs = np.asarray(locs, dtype=np.float64)
    if locs.size == 0:
        return locs.reshape([0, 2])
    if locs.ndim != 2 or locs.shape[1] != 2:
        raise ValueError(f'Locations must have shape [N, 2], got {locs.shape}')
    return locs

def distance_matrix(locs1, locs2=None):
    """
    Euclidean distances between two sets of locations.

    With a single argument the result is the square, symmetric matrix of
    pairwise distances, with an exact zero diagonal.
    """
    locs1 = as_locations(locs1)
    if locs2 is None:
        if len(locs1) == 0:
            return np.zeros([0, 0])
        return squareform(pdist(locs1, metric='euclidean'))
    return cdist(locs1, as_locations(locs2), metric='euclidean')

def coincident_pairs(locs, tol=1e-9):
    """
    Index pairs (i, j), i < j, of locations closer than `tol` times the
    extent of the location set.
    """
    locs = as_locations(locs)
    if len(locs) < 2:
        return []
    extent = np.max(np.ptp(locs, axis=0))
    thresh = tol * (extent if extent > 0 else 1.)
    d = distance_matrix(locs)
    i, j = np.nonzero(np.triu(d <= thresh, k=1))
    return list(zip(i.tolist(), j.tolist()))

def is_distance_matrix(m):
    """Square, symmetric, zero diagonal, and obeys the triangle inequality."""
    m = np.asarray(m)
    if len(m.shape) != 2 or m.shape[0] != m.shape[1]:
        return False
    if not np.allclose(m, m.T) or np.any(np.diag(m) != 0.) or np.any(m < 0.):
        return False

    # Shortest path through any single intermediate point.
    a = np.ones_like(m) * float('inf')
    for i in range(m.shape[0]):
        a = np.minimum(a, m[i:i+1, :] + m[:, i:i+1])

    return np.allclose(a, m)
