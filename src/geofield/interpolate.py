import numpy as np

from .metric import as_locations, distance_matrix
from .param import check_positive

__all__ = ['idw']

def idw(locs1, vals1, locs2, power=2.):
    """
    Inverse-distance-weighted interpolation.

    Each prediction is a weighted mean of the data with weights `1 / d**power`.
    A target that coincides with a data location gets that datum exactly.
    """
    power = check_positive('power', power)
    locs1 = as_locations(locs1)
    vals1 = np.asarray(vals1, dtype=np.float64).reshape(-1)
    if len(locs1) != len(vals1):
        raise ValueError(f'Got {len(locs1)} locations but {len(vals1)} values')

    D = distance_matrix(locs2, locs1) # [targets, data]
    exact = D == 0.

    with np.errstate(divide='ignore'):
        W = np.where(exact, 0., 1. / D ** power)

    u2 = W @ vals1 / np.sum(W, axis=1).clip(min=np.finfo(np.float64).tiny)

    # Snap to data where a target sits on a data location.
    hit = exact.any(axis=1)
    u2[hit] = vals1[np.argmax(exact[hit], axis=1)]
    return u2
