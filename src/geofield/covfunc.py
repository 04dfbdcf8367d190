from typing import List

import jax.numpy as jnp

from .metric import distance_matrix
from .param import Parameter, check_positive, ppp

__all__ = ['CovarianceFunction', 'Exponential', 'Gaussian', 'Spherical', 'Nugget', 'covariance_matrix']

class CovarianceFunction:
    """
    A covariance model: a function of the distance between two locations.

    Formal arguments (`fa`) are either plain numbers or `Parameter`s.
    Calling the object on a distance matrix returns the covariance matrix.
    `params` optionally overrides parameter values by name, which is how
    likelihood fitting threads traced values through.
    """
    def __init__(self, fa):
        for name, v in fa.items():
            check_positive(name, v)
        self.fa = fa

    def __add__(self, other):
        return Stack([self]) + other

    def vars(self):
        return {k: p for v in self.fa.values() for k, p in ppp(v).items()}

    def values(self, params=None):
        def lookup(v):
            if isinstance(v, Parameter):
                if params is not None and v.name in params:
                    return params[v.name]
                return v.value
            return v
        return {k: lookup(v) for k, v in self.fa.items()}

    def check(self):
        """Raise `InvalidParameterError` if any current value is not positive."""
        for name, v in self.values().items():
            check_positive(name, v)

    def call(self, d, v):
        raise NotImplementedError

    def __call__(self, d, params=None):
        return self.call(jnp.asarray(d), self.values(params))

class Exponential(CovarianceFunction):
    def __init__(self, sill, range):
        super().__init__(dict(sill=sill, range=range))

    def call(self, d, v):
        return v['sill'] * jnp.exp(-d / v['range'])

class Gaussian(CovarianceFunction):
    def __init__(self, sill, range):
        super().__init__(dict(sill=sill, range=range))

    def call(self, d, v):
        return v['sill'] * jnp.exp(-jnp.square(d / v['range']))

class Spherical(CovarianceFunction):
    def __init__(self, sill, range):
        super().__init__(dict(sill=sill, range=range))

    def call(self, d, v):
        h = d / v['range']
        return jnp.where(h < 1., v['sill'] * (1. - 1.5 * h + 0.5 * h ** 3), 0.)

class Nugget(CovarianceFunction):
    def __init__(self, nugget):
        super().__init__(dict(nugget=nugget))

    def call(self, d, v):
        return jnp.where(d == 0., v['nugget'], 0.)

class Stack(CovarianceFunction):
    def __init__(self, parts: List[CovarianceFunction]):
        self.parts = parts
        self.fa = {}

    def __add__(self, other):
        if isinstance(other, Stack):
            return Stack(self.parts + other.parts)
        elif isinstance(other, CovarianceFunction):
            return Stack(self.parts + [other])
        return NotImplemented

    def vars(self):
        return {k: p for part in self.parts for k, p in part.vars().items()}

    def check(self):
        for part in self.parts:
            part.check()

    def __call__(self, d, params=None):
        return sum(part(d, params) for part in self.parts)

def covariance_matrix(covfunc, locs1, locs2=None, params=None):
    """Covariance matrix between location sets (or within one)."""
    return covfunc(distance_matrix(locs1, locs2), params)
