import numpy as np

__all__ = ['InvalidParameterError', 'IllConditionedCovarianceError']

class InvalidParameterError(ValueError):
    """A covariance or interpolation parameter is out of its valid range."""
    pass

class IllConditionedCovarianceError(np.linalg.LinAlgError):
    """
    Cholesky factorization of a covariance matrix failed.

    `pairs` holds (i, j) index pairs of coincident or near-coincident
    locations, if any were found. These are the usual culprits.
    """
    def __init__(self, message, pairs=()):
        super().__init__(message)
        self.pairs = list(pairs)
