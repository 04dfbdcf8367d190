import numpy as np
import pytest
from geofield import Grid, random_locations, correlated_field

def test_unit_square():
    grid = Grid.unit_square(10)
    locs = grid.locations()

    assert len(grid) == 100
    assert locs.shape == (100, 2)
    assert np.all((locs > 0.) & (locs < 1.))
    assert np.allclose(grid.x, np.linspace(0.05, 0.95, 10))

def test_reshape_field():
    grid = Grid.unit_square(12)
    vals = correlated_field(grid.locations(), 1., 0.25)

    x, y, u = grid.reshape(vals)

    assert x.shape == y.shape == u.shape == (12, 12)
    assert not np.any(np.isnan(u))
    assert u[0, 1] == vals[1]

def test_from_bounds_square_cells():
    grid = Grid.from_bounds((0., 0., 2., 1.), nx=20)
    assert len(grid.x) == 20
    assert len(grid.y) == 10

def test_from_bounds_requires_size():
    with pytest.raises(ValueError):
        Grid.from_bounds((0., 0., 1., 1.))
    with pytest.raises(ValueError):
        Grid.from_bounds((0., 0., 1., 1.), nx=0)

def test_from_convex_hull():
    locs = np.random.uniform(-1., 1., [100, 2])

    grid = Grid.from_convex_hull(locs, 20)

    values = np.random.uniform(-10., 10., [len(grid)])
    x, y, u = grid.reshape(values)

    assert x.shape == y.shape == u.shape
    assert np.sum(~np.isnan(u)) == len(grid)
    assert len(grid) < 20 * 20

def test_reshape_wrong_length():
    with pytest.raises(ValueError):
        Grid.unit_square(3).reshape(np.zeros(8))

def test_random_locations():
    locs = random_locations(200, bounds=(1., 2., 3., 5.), seed=3)
    assert locs.shape == (200, 2)
    assert np.all((locs[:, 0] >= 1.) & (locs[:, 0] <= 3.))
    assert np.all((locs[:, 1] >= 2.) & (locs[:, 1] <= 5.))
    assert np.all(locs == random_locations(200, bounds=(1., 2., 3., 5.), seed=3))
