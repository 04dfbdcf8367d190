import numpy as np
import matplotlib.pyplot as plt

from .mesh import Grid
from .variogram import Variogram

__all__ = ['plot_field', 'plot_variogram', 'plot_trace']

def plot_field(grid: Grid, values, ax=None, cmap='viridis', show=False, **kw):
    """Image of per-cell values on a grid, with a colorbar."""
    if ax is None:
        _, ax = plt.subplots(dpi=100)
    x, y, z = grid.reshape(values)
    mesh = ax.pcolormesh(x, y, z, cmap=cmap, shading='auto', **kw)
    ax.figure.colorbar(mesh, ax=ax)
    ax.set_aspect('equal')
    ax.set_xlabel('$x$')
    ax.set_ylabel('$y$')
    if show: plt.show()
    return ax

def plot_variogram(vario: Variogram, ax=None, show=False):
    """Empirical semivariances with the fitted model on top."""
    if ax is None:
        _, ax = plt.subplots(dpi=100)
    ax.scatter(vario.lags, vario.gamma, fc='none', ec='C1', lw=0.5, alpha=0.5)
    h = np.linspace(0., np.max(vario.lags), 100)
    ax.plot(h, vario(h), color='k')
    ax.set_ylabel(r'$\gamma(h)$')
    ax.set_xlabel('$h$')
    ax.grid(alpha=0.4)
    if show: plt.show()
    return ax

def plot_trace(posterior, names=('sill', 'range'), axes=None, show=False):
    """Trace plots of scalar posterior quantities, one row per name."""
    if axes is None:
        _, axes = plt.subplots(len(names), 1, dpi=100, sharex=True, squeeze=False)
        axes = axes[:, 0]
    for ax, name in zip(axes, names):
        ax.plot(np.asarray(posterior[name]), lw=0.5)
        ax.set_ylabel(name)
    axes[-1].set_xlabel('sample')
    if show: plt.show()
    return axes
