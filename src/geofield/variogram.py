from dataclasses import dataclass
import numpy as np
from scipy.optimize import curve_fit
from scipy.spatial.distance import pdist
from scipy.stats import binned_statistic

from .metric import as_locations

__all__ = ['Variogram', 'empirical_variogram', 'fit_variogram']

########################################################################
# Cutoff distance.
# Myers, D. E. (1991). On variogram estimation. The frontiers of
# statistical scientific theory & industrial applications, 2, 261-266.

def cutoff_dist_func(x):
    '''
        Parameters:
                x : [N, 2] array
                    Locations of input data.

        Returns:
                cutoff : float
                    Half the diagonal of the bounding box of the data.
    '''
    a2 = np.square(x[:, 0].max() - x[:, 0].min())
    b2 = np.square(x[:, 1].max() - x[:, 1].min())
    return np.sqrt(a2 + b2) / 2

#####################################################################
# Variogram models.

def linear(h, *parameter_vals):
    slope, nugget = parameter_vals
    return slope * h + nugget

def exponential(h, *parameter_vals):
    vrange, sill, nugget = parameter_vals
    return sill * (1. - np.exp(-h / vrange)) + nugget

def gaussian(h, *parameter_vals):
    vrange, sill, nugget = parameter_vals
    return sill * (1. - np.exp(-np.square(h / vrange))) + nugget

def spherical(h, *parameter_vals):
    vrange, sill, nugget = parameter_vals
    h = np.asarray(h, dtype=np.float64)
    r = h / vrange
    return np.where(h <= vrange, sill * (1.5 * r - 0.5 * r**3) + nugget, sill + nugget)

MODELS = dict(linear=linear, exponential=exponential, gaussian=gaussian, spherical=spherical)

PARAMETER_NAMES = dict(
    linear=('slope', 'nugget'),
    exponential=('range', 'sill', 'nugget'),
    gaussian=('range', 'sill', 'nugget'),
    spherical=('range', 'sill', 'nugget'))

@dataclass
class Variogram:
    """
    A fitted variogram model.

    `lags` and `gamma` are the (binned or cloud) points the model was fit
    to. `parameter_vals` is ordered as in `PARAMETER_NAMES[model]`.
    """
    model: str
    parameter_vals: np.ndarray
    cutoff: float
    lags: np.ndarray
    gamma: np.ndarray

    def __call__(self, h):
        return MODELS[self.model](np.asarray(h, dtype=np.float64), *self.parameter_vals)

    @property
    def parameters(self):
        return dict(zip(PARAMETER_NAMES[self.model], self.parameter_vals))

def empirical_variogram(locs, vals, bins=None, cutoff='auto'):
    """
    Semivariances of all point pairs, optionally averaged in lag bins.

    Returns `(lags, gamma)` for the variogram cloud (no cutoff applied), or
    `(bin_centers, bin_means, bin_counts)` when `bins` is given. Binning
    covers lags from the smallest up to the cutoff. Empty bins are dropped.
    """
    locs = as_locations(locs)
    vals = np.asarray(vals, dtype=np.float64).reshape(-1)
    if len(locs) != len(vals):
        raise ValueError(f'Got {len(locs)} locations but {len(vals)} values')
    if len(locs) < 2:
        raise ValueError('At least two locations are needed for a variogram')

    dist = pdist(locs, metric='euclidean')
    gamma = 0.5 * pdist(vals.reshape(-1, 1), metric='sqeuclidean')

    if bins is None:
        return dist, gamma

    if cutoff == 'auto':
        cutoff = cutoff_dist_func(locs)

    bin_means, bin_edges, _ = binned_statistic(dist, gamma, statistic='mean',
                                               bins=bins, range=[dist.min(), cutoff])
    bin_counts, _, _ = binned_statistic(dist, gamma, statistic='count',
                                        bins=bins, range=[dist.min(), cutoff])
    bin_width = bin_edges[1] - bin_edges[0]
    bin_centers = bin_edges[1:] - bin_width / 2

    keep = bin_counts > 0
    return bin_centers[keep], bin_means[keep], bin_counts[keep]

def fit_variogram(locs, vals, model='exponential', bins=None, cutoff='auto',
                  params=None, show_plots=False, verbose=True):
    """
    Fit a variogram model to data.

    Parameters:
            locs : [N, 2] array
                Locations of input data.

            vals : [N] array
                Observed values.

            model : str
                'linear', 'exponential', 'gaussian' or 'spherical'.
                Default is 'exponential'.

            bins : int or None
                Number of lag bins. If None, the model is fit to the
                variogram cloud within the cutoff.

            cutoff : 'auto' or float
                Maximum lag distance used in fitting.

            params : sequence, optional
                Use these parameter values instead of fitting.

            show_plots : boolean
                Plot the fitted model over the data. Default is False.

            verbose : boolean
                Print the parameters. Default is True.

    Returns:
            Variogram
    """
    if model not in MODELS:
        raise ValueError("Variogram model must be 'linear', 'exponential', 'gaussian', or 'spherical'.")
    func = MODELS[model]

    locs = as_locations(locs)
    if cutoff == 'auto':
        cutoff = cutoff_dist_func(locs)

    if bins is None:
        dist, gamma = empirical_variogram(locs, vals)
        # Apply the cutoff.
        keep = dist < cutoff
        lags, gamma = dist[keep], gamma[keep]
    else:
        lags, gamma, _ = empirical_variogram(locs, vals, bins, cutoff)

    if params is None:
        if model == 'linear':
            # Initial guess for slope and nugget.
            p0 = [(np.max(gamma) - np.min(gamma)) / max(np.ptp(lags), 1e-12) + 1e-6,
                  np.min(gamma) + 1e-6]
            bounds = [(1e-6, 1e-6), (np.inf, np.inf)]
        else:
            # Initial guess for range, sill and nugget.
            p0 = [0.25 * np.max(lags),
                  np.max(gamma) - np.min(gamma) + 1e-6,
                  np.min(gamma) + 1e-6]
            bounds = [(1e-6, 1e-6, 1e-6), (np.inf, np.inf, np.inf)]

        popt, _ = curve_fit(func, lags, gamma, p0=p0, bounds=bounds)
    else:
        popt = np.asarray(params, dtype=np.float64)
        if len(popt) != len(PARAMETER_NAMES[model]):
            raise ValueError('Model %s takes parameters %s' % (model, PARAMETER_NAMES[model]))

    vario = Variogram(model, popt, cutoff, lags, gamma)

    if verbose:
        print('variogram model: {}'.format(model))
        print('cutoff: {:.2f}'.format(cutoff))
        for name, v in vario.parameters.items():
            print('{}: {:.5f}'.format(name, v))
        if model != 'linear':
            print('full sill: {:.5f}'.format(popt[1] + popt[2]))

    if show_plots:
        from .plot import plot_variogram
        plot_variogram(vario, show=True)

    return vario
