import time
from dataclasses import dataclass
from typing import Callable

import numpy as np
import jax
import jax.numpy as jnp
from jax.scipy.linalg import cho_solve
import optax

from .covfunc import CovarianceFunction, covariance_matrix
from .field import cholesky_factor, sample_field
from .metric import as_locations, distance_matrix
from .param import check_positive

__all__ = ['Model']

def mvn_log_pdf(u, cov):
    """Log PDF of a zero-mean multivariate gaussian."""
    L = jnp.linalg.cholesky(cov)
    alpha = cho_solve((L, True), u)
    logdet = 2. * jnp.sum(jnp.log(jnp.diag(L)))
    return -0.5 * (jnp.dot(u, alpha) + logdet + u.shape[0] * np.log(2 * np.pi))

def default_report(p, prefix=None):
    if prefix: print(prefix, end=' ')

    def fmt(x):
        x = np.asarray(x)
        if x.ndim == 0 and np.issubdtype(x.dtype, np.integer):
            return '{:5d}'.format(int(x))
        if x.ndim == 0:
            return '{:5.2f}'.format(float(x))
        with np.printoptions(precision=2, formatter={'floatkind': '{:5.2f}'.format}):
            return str(x)

    print('[%s]' % (' '.join('%s %s' % (k, fmt(v)) for k, v in p.items())))

@dataclass
class Model():
    """
    A zero-mean Gaussian random field with a given covariance function.

    Parameters:
        covfunc (CovarianceFunction):
            Covariance model, e.g. `Exponential(sill=p.sill, range=p.range) + Nugget(p.nugget)`.
        locs (np.ndarray, optional):
            Locations of observed data.
        vals (np.ndarray, optional):
            Observed values at `locs`.
        report (Callable, optional):
            Called with a dict of named values to display progress.
        verbose (bool, optional):
            Whether to report progress. Default is True.

    Examples
    --------
    Generate a field and fit its parameters back:

    ```
    from geofield import Parameters, Model, Exponential, Nugget, random_locations
    p = Parameters(sill=1., range=0.25, nugget=0.1)
    locs = random_locations(400)
    model = Model(Exponential(sill=p.sill, range=p.range) + Nugget(p.nugget))
    vals = model.generate(locs).vals
    model.set(sill=0.5, range=0.5, nugget=0.5).fit(locs, vals)
    ```
    """

    covfunc: CovarianceFunction
    locs: np.ndarray = None
    vals: np.ndarray = None
    report: Callable = None
    verbose: bool = True

    def __post_init__(self):
        if self.report is None: self.report = default_report

        if self.locs is not None: self.locs = as_locations(self.locs)
        if self.vals is not None: self.vals = np.asarray(self.vals, dtype=np.float64)

        for p in self.gather_vars().values():
            p.create_jax_variable()

    def gather_vars(self):
        return self.covfunc.vars()

    def set(self, **values):
        """
        Sets parameter values by name. Unknown names raise `ValueError`;
        non-positive values of positive parameters raise `InvalidParameterError`.
        Returns self for chaining.
        """
        parameters = self.gather_vars()
        for name, v in values.items():
            if name in parameters:
                if parameters[name].lo == 0.:
                    v = check_positive(name, v)
                parameters[name].value = v
                parameters[name].create_jax_variable()
            else:
                raise ValueError(f"{name} is not a parameter")
        return self

    def generate(self, locs, seed=0):
        """
        Draws field values at `locs`, and keeps them as the model's data.
        """
        assert self.locs is None and self.vals is None, 'Conditional generation not yet supported'

        locs = as_locations(locs)
        self.vals = sample_field(self.covfunc, locs, seed)
        self.locs = locs
        return self

    def fit(self, locs, vals, step_size=0.05, iters=200):
        """
        Maximum-likelihood fit of the covariance parameters with Adam.

        Positive parameters are optimized on a log scale.
        """
        locs = as_locations(locs)
        vals = np.asarray(vals, dtype=np.float64)
        if len(locs) != len(vals):
            raise ValueError(f'Got {len(locs)} locations but {len(vals)} values')

        parameters = self.gather_vars()
        up = {k: p.underlying for k, p in parameters.items()}

        D = jnp.asarray(distance_matrix(locs))
        u = jnp.asarray(vals)

        def loss_fn(up):
            sp = {k: parameters[k].surface(v) for k, v in up.items()}
            return -mvn_log_pdf(u, self.covfunc(D, sp))

        optimizer = optax.adam(learning_rate=step_size)
        opt_state = optimizer.init(up)

        @jax.jit
        def train_step(up, opt_state):
            loss, grads = jax.value_and_grad(loss_fn)(up)
            grads = jax.tree_util.tree_map(lambda g: jnp.clip(g, -1., 1.), grads)
            updates, opt_state = optimizer.update(grads, opt_state, up)
            return optax.apply_updates(up, updates), opt_state, -loss

        j = 0 # Iteration count.
        for i in range(10):
            t0 = time.time()
            while j < (i + 1) * iters / 10:
                up, opt_state, ll = train_step(up, opt_state)
                j += 1

            if self.verbose:
                self.report(
                    dict(iter=j, ll=ll, time=time.time() - t0) |
                    {k: parameters[k].surface(v) for k, v in up.items()})

        # Save parameter values.
        for k, p in parameters.items():
            p.update_value(up[k])

        self.locs = locs
        self.vals = vals
        return self

    def predict(self, locs2):
        """
        Conditional mean and variance of the field at `locs2` given the data.

        Returns:
            (mean, var), numpy arrays of shape [len(locs2)].
        """
        assert self.locs is not None and self.vals is not None, 'Model has no data'
        locs2 = as_locations(locs2)
        assert self.locs.shape[-1] == locs2.shape[-1], 'Mismatch in location dimensions'

        A11 = covariance_matrix(self.covfunc, self.locs)
        A12 = covariance_matrix(self.covfunc, self.locs, locs2)
        A22_diag = self.covfunc(jnp.zeros(len(locs2)))

        L = cholesky_factor(A11, self.locs)
        W = cho_solve((L, True), A12)

        mean = jnp.einsum('ab,a->b', W, jnp.asarray(self.vals))
        var = A22_diag - jnp.einsum('ab,ab->b', A12, W)
        return np.asarray(mean), np.asarray(var)
