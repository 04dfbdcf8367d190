import matplotlib
matplotlib.use('Agg')

import numpy as np
from geofield import Grid, correlated_field, fit_variogram
from geofield.plot import plot_field, plot_variogram, plot_trace

def test_plot_field():
    grid = Grid.unit_square(15)
    vals = correlated_field(grid.locations(), 1., 0.25)
    ax = plot_field(grid, vals)
    assert ax.get_xlabel() == '$x$'

def test_plot_variogram():
    grid = Grid.unit_square(10)
    vals = correlated_field(grid.locations(), 1., 0.25)
    vario = fit_variogram(grid.locations(), vals, bins=8, params=[0.25, 1., 0.], verbose=False)
    ax = plot_variogram(vario)
    assert len(ax.lines) == 1

def test_plot_trace():
    posterior = dict(sill=np.random.uniform(size=50), range=np.random.uniform(size=50))
    axes = plot_trace(posterior)
    assert len(axes) == 2
    assert axes[1].get_ylabel() == 'range'
