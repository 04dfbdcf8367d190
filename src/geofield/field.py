"""
Sampling Gaussian random fields.

A zero-mean Gaussian field with covariance matrix `C` at N locations is
obtained as `L @ z`, where `L` is the lower Cholesky factor of `C` and `z`
is a vector of N independent standard normals.
"""
import numpy as np
import jax
import jax.numpy as jnp

from .covfunc import Exponential, covariance_matrix
from .errors import IllConditionedCovarianceError
from .metric import as_locations, coincident_pairs
from .param import check_positive

__all__ = ['correlated_field', 'sample_field', 'cholesky_factor']

def prng_key(seed):
    if isinstance(seed, (int, np.integer)):
        return jax.random.PRNGKey(int(seed))
    return seed

def cholesky_factor(C, locs=None):
    """
    Lower-triangular `L` with `L @ L.T == C`.

    Raises `IllConditionedCovarianceError` if the factorization breaks down.
    If `locs` is given, the error names coincident location pairs.
    """
    C = jnp.asarray(C, dtype=jnp.float64)
    if C.shape[0] == 0:
        return C

    # jax does not raise on failure; it fills the factor with NaNs.
    L = jnp.linalg.cholesky(C)
    if not bool(jnp.all(jnp.isfinite(L))):
        pairs = [] if locs is None else coincident_pairs(locs, tol=1e-6)
        msg = 'Ill-conditioned covariance matrix: Cholesky factorization failed'
        if pairs:
            msg += '; near-duplicate locations at index pairs ' + \
                ', '.join('(%d, %d)' % p for p in pairs[:10])
            if len(pairs) > 10:
                msg += ', ... (%d pairs in total)' % len(pairs)
        raise IllConditionedCovarianceError(msg, pairs)
    return L

def sample_field(covfunc, locs, seed=0, size=None):
    """
    Draw zero-mean field values at `locs` using covariance function `covfunc`.

    Returns shape [N], or [size, N] when `size` is given.
    """
    covfunc.check()
    locs = as_locations(locs)
    C = covariance_matrix(covfunc, locs)
    L = cholesky_factor(C, locs)

    shape = [len(locs)] if size is None else [size, len(locs)]
    z = jax.random.normal(prng_key(seed), shape, dtype=jnp.float64)
    return np.asarray(z @ L.T)

def correlated_field(locs, variance, range, *, seed=0, size=None):
    """
    Sample a Gaussian random field with exponential covariance.

    Parameters:
        locs : [N, 2] array
            Locations.

        variance : float
            Marginal variance of the field. Must be positive.

        range : float
            Distance scale of the exponential decay. Must be positive.

        seed : int or jax PRNG key, optional
            Default is 0. Output is deterministic given the seed.

        size : int, optional
            Number of independent realisations. If None (default) a single
            realisation of shape [N] is returned, else shape [size, N].

    Returns:
        Field values as a numpy array.

    Raises:
        InvalidParameterError if `variance` or `range` is not positive.
        IllConditionedCovarianceError if the covariance matrix cannot be
        factorized, e.g. because of duplicate locations.
    """
    variance = check_positive('variance', variance)
    range = check_positive('range', range)
    return sample_field(Exponential(sill=variance, range=range), locs, seed, size)
