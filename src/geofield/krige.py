import numpy as np
import scipy.stats as stats

from .metric import as_locations, distance_matrix
from .variogram import Variogram

__all__ = ['Krige']

class Krige():

    def __init__(self, locs, vals, variogram: Variogram, featurization=None, verbose=True):
        '''
        Parameters:
                locs : [N, 2] array
                    Locations of input data.

                vals : 1-d array
                    Values to be kriged.

                variogram : Variogram
                    Fitted variogram, see `fit_variogram`.

                featurization : function, optional
                    Takes locations and returns a tuple of drift columns.
                    If given, universal kriging is performed, else ordinary kriging.
                    Example:
                        def featurization(x):
                            return x[:, 0], x[:, 1]

                verbose : boolean, optional
                    Whether or not to print residual statistics.
                    Default is True.
        '''
        self.locs = as_locations(locs)

        vals = np.asarray(vals, dtype=np.float64)
        if vals.ndim == 2 and vals.shape[1] == 1:
            vals = vals.reshape(-1)
        if vals.ndim != 1 or len(vals) != len(self.locs):
            raise ValueError("Check dimensions of 'vals'.")
        self.vals = vals

        self.variogram = variogram
        self.featurization = featurization
        self.verbose = verbose

    def semivariance(self, D):
        # Zero at zero lag, so that the nugget does not leak into exact matches.
        return np.where(D == 0., 0., self.variogram(D))

    def drift(self, locs):
        return np.array([np.broadcast_to(f, [len(locs)])
                         for f in self.featurization(locs)], dtype=np.float64)

    def predict(self, locs2):
        '''
        Parameters:
                locs2 : [M, 2] array
                    Locations to make kriging predictions.

        Returns:
                mean : [M] array
                    Kriging mean.

                var : [M] array
                    Kriging variance.
        '''
        locs2 = as_locations(locs2)
        n1 = len(self.locs)
        n2 = len(locs2)

        # Number of drift terms, beyond the constant.
        if self.featurization:
            drift1 = self.drift(self.locs)
            drift2 = self.drift(locs2)
        else:
            drift1 = np.zeros([0, n1])
            drift2 = np.zeros([0, n2])
        k = drift1.shape[0]

        # Build A.
        A = np.zeros((n1 + 1 + k, n1 + 1 + k))
        A[:n1, :n1] = -self.semivariance(distance_matrix(self.locs))
        A[n1, :n1] = 1.
        A[:n1, n1] = 1.
        A[n1+1:, :n1] = drift1
        A[:n1, n1+1:] = drift1.T

        # Build b.
        b = np.zeros((n1 + 1 + k, n2))
        b[:n1] = -self.semivariance(distance_matrix(self.locs, locs2))
        b[n1] = 1.
        b[n1+1:] = drift2

        # Solve.
        x = np.linalg.solve(A, b)

        mean = np.tensordot(self.vals, x[:n1], axes=1)
        var = np.sum(x * -b, axis=0)
        return mean, var

    def stats(self):
        '''
        Leave-one-out cross-validation residuals, and their moments.
        '''
        n = len(self.locs)
        if n < 3:
            raise ValueError('Cross-validation needs at least three data points')

        residuals = np.zeros(n)
        for i in range(n):
            keep = np.arange(n) != i
            other = Krige(self.locs[keep], self.vals[keep], self.variogram,
                          featurization=self.featurization, verbose=False)
            mean, _ = other.predict(self.locs[i:i+1])
            residuals[i] = self.vals[i] - mean[0]
        self.residuals = residuals

        self.moments = dict(
            mean = np.mean(self.residuals),
            std = np.std(self.residuals),
            skew = stats.skew(self.residuals),
            kurt = stats.kurtosis(self.residuals))

        if self.verbose:
            print('Residual mean: {:.3e}'.format(self.moments['mean']))
            print('Residual standard deviation: {:.3f}'.format(self.moments['std']))
            print('Residual skewness: {:.3f}'.format(self.moments['skew']))
            print('Residual kurtosis: {:.3f}'.format(self.moments['kurt']))

        return self.moments
