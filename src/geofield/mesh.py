from dataclasses import dataclass, replace
import numpy as np
import pandas as pd
from shapely.geometry import MultiPoint, Point

__all__ = ['Grid', 'random_locations']

@dataclass
class Grid:
    """
    A regular grid of locations, possibly with some cells masked out.

    `cells` has one row per active cell with columns `x`, `y` (coordinates)
    and `ix`, `iy` (indices into the `x` and `y` axis vectors).
    """

    x: np.ndarray
    y: np.ndarray
    cells: pd.DataFrame

    @staticmethod
    def from_bounds(bounds, nx=None, ny=None):
        x0, y0, x1, y1 = bounds

        # Figure out pitch. With one of nx, ny given, cells are square.
        if nx is None and ny is None:
            raise ValueError('Either nx or ny (or both) must be set to an integer')
        elif nx is not None and nx < 1:
            raise ValueError('nx or ny, if set, must be 1 or greater')
        elif ny is not None and ny < 1:
            raise ValueError('nx or ny, if set, must be 1 or greater')
        elif nx is not None and ny is not None:
            xpitch = (x1 - x0) / nx
            ypitch = (y1 - y0) / ny
        elif ny is None:
            xpitch = ypitch = (x1 - x0) / nx
            ny = max(1, int(round((y1 - y0) / ypitch)))
        else:
            xpitch = ypitch = (y1 - y0) / ny
            nx = max(1, int(round((x1 - x0) / xpitch)))

        # Cell centres.
        x = x0 + xpitch * (np.arange(nx) + 0.5)
        y = y0 + ypitch * (np.arange(ny) + 0.5)

        gridx, gridy = np.meshgrid(x, y)
        ix, iy = np.meshgrid(np.arange(len(x)), np.arange(len(y)))

        cells = pd.DataFrame().assign(
            x = gridx.ravel(),
            y = gridy.ravel(),
            ix = ix.ravel(),
            iy = iy.ravel())

        return Grid(x, y, cells)

    @staticmethod
    def unit_square(n):
        """An n-by-n grid of cell centres in the unit square."""
        return Grid.from_bounds((0., 0., 1., 1.), n, n)

    @staticmethod
    def from_convex_hull(locs, nx=None, ny=None):
        """Grid over the bounding box of `locs`, keeping cells inside their hull."""
        mp = MultiPoint([tuple(p) for p in np.asarray(locs)])
        grid = Grid.from_bounds(mp.bounds, nx, ny)
        hull = mp.convex_hull
        mask = [hull.contains(Point(p)) for p in grid.locations()]
        return replace(grid, cells = grid.cells.iloc[mask])

    def __len__(self):
        return len(self.cells)

    def locations(self):
        return self.cells[['x', 'y']].values

    def reshape(self, values):
        """
        Lay out per-cell values as a 2-D image.

        Returns `(X, Y, Z)`, each of shape [len(y), len(x)]. Masked cells are NaN.
        """
        values = np.asarray(values)
        if values.shape != (len(self.cells),):
            raise ValueError(f'Expected {len(self.cells)} values, got shape {values.shape}')
        gridx, gridy = np.meshgrid(self.x, self.y)
        out = np.full([len(self.y), len(self.x)], float('nan'))
        out[(self.cells['iy'].values, self.cells['ix'].values)] = values
        return gridx, gridy, out

def random_locations(n, bounds=(0., 0., 1., 1.), seed=0):
    """`n` locations drawn uniformly over a rectangle."""
    x0, y0, x1, y1 = bounds
    rng = np.random.default_rng(seed)
    return rng.uniform([x0, y0], [x1, y1], size=[n, 2])
