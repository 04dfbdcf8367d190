from types import SimpleNamespace
from dataclasses import dataclass
import numpy as np
import jax.numpy as jnp
from scipy.special import logit

from .errors import InvalidParameterError

__all__ = ['Parameter', 'Parameters', 'check_positive']

def Parameters(**kw):
    return SimpleNamespace(**{k: Parameter(k, v) for k, v in kw.items()})

@dataclass
class Parameter:
    """
    A named model parameter that can be fitted.

    The `value` lives on the bounded "surface" scale. `underlying` is the
    unbounded counterpart that gradient-based fitting works on.
    """
    name: str
    value: float
    lo: float = np.nan
    hi: float = np.nan
    underlying: object = None

    def update_bounds(self, lo: float, hi: float):
        if np.isnan(self.lo):
            self.lo = lo
        else:
            assert self.lo == lo, f'Conflicting bounds for parameter {self.name}'
        if np.isnan(self.hi):
            self.hi = hi
        else:
            assert self.hi == hi, f'Conflicting bounds for parameter {self.name}'

    def bounding(self):
        return \
            ('u' if self.lo == float('-inf') else 'b') + \
            ('u' if self.hi == float('inf') else 'b')

    def create_jax_variable(self):
        """Set underlying parameter from the current value."""
        b = self.bounding()
        if b == 'bb':
            init = logit((self.value - self.lo) / (self.hi - self.lo))
        elif b == 'bu':
            init = np.log(self.value - self.lo)
        elif b == 'ub':
            init = -np.log(self.hi - self.value)
        else:
            init = self.value
        self.underlying = jnp.asarray(init, dtype=jnp.float64)

    def surface(self, underlying=None):
        """Map an underlying value (default: our own) to the surface scale."""
        b = self.bounding()
        v = self.underlying if underlying is None else underlying
        if b == 'bb':
            v = 1. / (1. + jnp.exp(-v)) * (self.hi - self.lo) + self.lo
        elif b == 'bu':
            v = jnp.exp(v) + self.lo
        elif b == 'ub':
            v = self.hi - jnp.exp(-v)
        return v

    def update_value(self, underlying=None):
        if underlying is not None:
            self.underlying = jnp.asarray(underlying, dtype=jnp.float64)
        self.value = float(self.surface())

def check_positive(name, value):
    """
    Raise `InvalidParameterError` unless `value` is a finite number > 0.
    Parameters are checked on their current value.
    """
    if isinstance(value, Parameter):
        value = value.value
    if isinstance(value, (bool, np.bool_)):
        raise InvalidParameterError(f'{name} must be a positive number, got {value!r}')
    try:
        v = float(value)
    except (TypeError, ValueError):
        raise InvalidParameterError(f'{name} must be a positive number, got {value!r}')
    if not np.isfinite(v) or v <= 0.:
        raise InvalidParameterError(f'{name} must be positive and finite, got {v}')
    return v

def ppp(param):
    """Positive paper parameter (maybe)."""
    if isinstance(param, Parameter):
        param.update_bounds(0., np.inf)
        return {param.name: param}
    else:
        return {}
