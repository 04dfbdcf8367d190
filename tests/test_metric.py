import numpy as np
import pytest
from geofield import distance_matrix, is_distance_matrix, coincident_pairs, random_locations

def test_distance_matrix_invariants():
    locs = random_locations(100, seed=1)
    D = distance_matrix(locs)

    assert D.shape == (100, 100)
    assert np.all(D == D.T)
    assert np.all(np.diag(D) == 0.)
    assert np.all(D >= 0.)
    assert is_distance_matrix(D)

def test_distance_matrix_cross():
    D = distance_matrix([[0., 0.], [3., 4.]], [[0., 0.], [0., 1.], [3., 0.]])
    assert np.allclose(D, [[0., 1., 3.], [5., np.sqrt(18.), 4.]])

def test_unit_square_corners():
    D = distance_matrix([[0., 0.], [1., 0.], [1., 1.], [0., 1.]])
    assert np.allclose(D[0], [0., 1., np.sqrt(2.), 1.])

def test_not_distance_matrix():
    assert not is_distance_matrix(np.array([[0., 1.], [2., 0.]]))
    assert not is_distance_matrix(np.array([[0., 5., 1.], [5., 0., 1.], [1., 1., 0.]]))

def test_coincident_pairs():
    locs = np.array([[0., 0.], [1., 1.], [0., 0.], [0.5, 0.5], [1., 1. + 1e-12]])
    assert coincident_pairs(locs) == [(0, 2), (1, 4)]
    assert coincident_pairs(locs[:1]) == []

def test_locations_must_be_pairs():
    with pytest.raises(ValueError):
        distance_matrix([0.5, 0.5])
    with pytest.raises(ValueError):
        distance_matrix([[0., 0., 1.], [1., 1., 1.]])
    assert distance_matrix([]).shape == (0, 0)
